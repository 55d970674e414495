from __future__ import annotations

import math

import pytest

from pel import Interpreter, SourceFile, Type, Value, format_error, parse_expr
from pel.errors import (
    DivisionByZero,
    ExpectedBool,
    InvalidTypeForShortCircuitOp,
    InvalidTypeForUnaryOp,
    InvalidTypesForBinaryOp,
    UnsupportedFeature,
    VarDoesNotExist,
    VarUninitialized,
)
from pel.lang import BinaryOperator, ShortCircuitOperator, UnaryOperator
from pel.stepper import NOT_STARTED, Finished, Suspended
from pel.trace import DECLARATION_COLOR, OPERAND_COLOR


def evaluate(source: str, interpreter: Interpreter | None = None):
    """Drive the expression evaluator directly; returns (records, value)."""
    node = parse_expr(SourceFile("<expr>", source))
    interpreter = interpreter or Interpreter([])
    gen = interpreter.g_eval_expr(node)
    records = []
    while True:
        try:
            records.append(next(gen))
        except StopIteration as stop:
            return records, stop.value


def messages(records):
    return [r.message for r in records]


# ----- expressions -----


def test_addition_suspends_once_with_operand_substitutions():
    records, value = evaluate("2 + 3")
    assert value == Value(Type.INT, 5)
    assert messages(records) == ["evaluate operation '+'"]
    (record,) = records
    assert record.primary_highlight.text == "+"
    assert [(span.text, text) for span, text in record.substitutions] == [("2", "2"), ("3", "3")]
    assert [(span.text, color) for span, color in record.secondary_highlights] == [
        ("2", OPERAND_COLOR),
        ("3", OPERAND_COLOR),
    ]


def test_literals_and_parentheses_are_not_steps():
    records, value = evaluate('("a")')
    assert records == []
    assert value == Value.from_python("a")


@pytest.mark.parametrize(
    "source, expected",
    [
        ("7 / 2", 3),
        ("-7 / 2", -3),
        ("7 / -2", -3),
        ("-7 % 2", -1),
        ("7 % -2", 1),
        ("2 * 3 - 10", -4),
        ("7.5 % 2.0", 1.5),
        ("1.0 / 4.0", 0.25),
        ("1.5 * 2.0", 3.0),
        ('"Fizz" + "Buzz"', "FizzBuzz"),
        ("100000000000000000000 * 100000000000000000000", 10**40),
    ],
)
def test_arithmetic(source, expected):
    _, value = evaluate(source)
    assert value == Value.from_python(expected)


@pytest.mark.parametrize(
    "source, expected",
    [
        ("1 < 2", True),
        ("2 <= 2", True),
        ("3 > 4", False),
        ("1.5 >= 1.5", True),
        ('"abc" < "abd"', True),
        ('"a" == "a"', True),
        ("true == false", False),
        ("true != false", True),
        ("false < true", True),
    ],
)
def test_comparisons(source, expected):
    _, value = evaluate(source)
    assert value == Value.from_python(expected)


@pytest.mark.parametrize(
    "source, op, left, right",
    [
        ('1 + "a"', BinaryOperator.ADD, Type.INT, Type.STRING),
        ("1 + 1.0", BinaryOperator.ADD, Type.INT, Type.FLOAT),
        ('"a" - "b"', BinaryOperator.SUBTRACT, Type.STRING, Type.STRING),
        ("true + true", BinaryOperator.ADD, Type.BOOL, Type.BOOL),
        ("1 < 2.0", BinaryOperator.LESS, Type.INT, Type.FLOAT),
        ('"a" * 3', BinaryOperator.MULTIPLY, Type.STRING, Type.INT),
    ],
)
def test_binary_type_errors(source, op, left, right):
    with pytest.raises(InvalidTypesForBinaryOp) as info:
        evaluate(source)
    err = info.value
    assert (err.op, err.left, err.right) == (op, left, right)
    assert err.span.text == str(op)
    assert err.kind == "InvalidTypesForBinaryOp"


@pytest.mark.parametrize("source", ["1 / 0", "1 % 0", "1.0 / 0.0", "1.0 % -0.0"])
def test_division_by_zero(source):
    with pytest.raises(DivisionByZero) as info:
        evaluate(source)
    assert info.value.span.text in ("/", "%")


OVERFLOWING_FLOAT = "1" + "0" * 400 + ".0"


@pytest.mark.parametrize(
    "source, expected",
    [
        (f"{OVERFLOWING_FLOAT} % 2.0", math.nan),
        (f"-{OVERFLOWING_FLOAT} % 3.0", math.nan),
        (f"2.5 % {OVERFLOWING_FLOAT}", 2.5),
        ("-7.5 % 2.0", -1.5),
    ],
)
def test_float_modulo_with_infinite_operands(source, expected):
    _, value = evaluate(source)
    assert value.type is Type.FLOAT
    if math.isnan(expected):
        assert math.isnan(value.payload)
    else:
        assert value.payload == expected


def test_printing_integers_past_the_conversion_digit_limit(run_program):
    source = "var n = 2;\nvar i = 0;\nwhile i < 14 {\n    n = n * n;\n    i = i + 1;\n}\nprint n;\n"
    records, result = run_program(source)
    assert result.ok
    text = result.output.rstrip("\n")
    # 2 squared 14 times is 2**16384
    assert len(text) == 4933
    assert text[-8:] == str(pow(2, 16384, 10**8)).zfill(8)
    assert records[-1].message == f"print value '{text}'"


def test_unary_operators():
    records, value = evaluate("-2.5")
    assert value == Value.from_python(-2.5)
    assert messages(records) == ["evaluate operation '-'"]
    assert [(s.text, t) for s, t in records[0].substitutions] == [("2.5", "2.5")]

    _, value = evaluate("!false")
    assert value == Value.from_python(True)


@pytest.mark.parametrize(
    "source, op, type_",
    [
        ("!1", UnaryOperator.LOGICAL_NEGATE, Type.INT),
        ("-true", UnaryOperator.NUMERIC_NEGATE, Type.BOOL),
        ('-"x"', UnaryOperator.NUMERIC_NEGATE, Type.STRING),
    ],
)
def test_unary_type_errors(source, op, type_):
    with pytest.raises(InvalidTypeForUnaryOp) as info:
        evaluate(source)
    assert (info.value.op, info.value.type) == (op, type_)
    assert info.value.span.text == str(op)


@pytest.mark.parametrize("source, expected", [("true || missing", True), ("false && missing", False)])
def test_short_circuit_skips_right_operand(source, expected):
    records, value = evaluate(source)
    assert records == []
    assert value == Value.from_python(expected)


@pytest.mark.parametrize(
    "source, expected",
    [("false || true", True), ("false || false", False), ("true && false", False), ("true && true", True)],
)
def test_short_circuit_evaluates_right_operand(source, expected):
    _, value = evaluate(source)
    assert value == Value.from_python(expected)


@pytest.mark.parametrize(
    "source, op, culprit",
    [
        ("1 || true", ShortCircuitOperator.OR, "1"),
        ("false || 2", ShortCircuitOperator.OR, "2"),
        ('"t" && true', ShortCircuitOperator.AND, '"t"'),
        ("true && 2.0", ShortCircuitOperator.AND, "2.0"),
    ],
)
def test_short_circuit_type_errors(source, op, culprit):
    with pytest.raises(InvalidTypeForShortCircuitOp) as info:
        evaluate(source)
    assert info.value.op is op
    assert info.value.span.text == culprit


def test_right_operand_steps_happen_only_when_needed(run_program):
    records, result = run_program("var a = false; var b = true; print a || b;")
    assert result.ok
    assert messages(records)[2:] == [
        "read variable 'a'",
        "read variable 'b'",
        "print value 'true'",
    ]

    records, _ = run_program("var a = true; var b = true; print a || b;")
    assert messages(records)[2:] == ["read variable 'a'", "print value 'true'"]


# ----- statements and stepping -----


def test_steps_follow_left_to_right_depth_first_order(run_program):
    records, result = run_program("var a = 1;\nvar b = 2;\nvar c = 3;\nprint a + b * c;\n")
    assert result.ok
    assert result.output == "7\n"
    assert messages(records) == [
        "make variable 'a' with initializer 1",
        "make variable 'b' with initializer 2",
        "make variable 'c' with initializer 3",
        "read variable 'a'",
        "read variable 'b'",
        "read variable 'c'",
        "evaluate operation '*'",
        "evaluate operation '+'",
        "print value '7'",
    ]
    evaluate_add = records[7]
    assert [(s.text, t) for s, t in evaluate_add.substitutions] == [("a", "1"), ("b * c", "6")]


def test_records_announce_before_committing(run_program):
    records, _ = run_program('var x = "hi";\nx = "bye";\nprint x;\n')
    declare, assign, read_x, print_x = records

    assert declare.message == 'make variable \'x\' with initializer "hi"'
    assert declare.snapshot.lookup("x") is None

    assert assign.message == 'assign variable \'x\' with value "bye"'
    assert assign.snapshot.value_of("x") == Value.from_python("hi")

    assert read_x.message == "read variable 'x'"
    assert read_x.snapshot.value_of("x") == Value.from_python("bye")

    assert print_x.message == "print value 'bye'"
    assert print_x.snapshot.output == ""
    assert [(s.text, t) for s, t in print_x.substitutions] == [("x", '"bye"')]


def test_variable_read_highlights_its_declaration(run_program):
    records, _ = run_program("var total = 4;\nprint total;\n")
    read = records[1]
    assert read.primary_highlight.text == "total"
    assert [(s.text, c) for s, c in read.secondary_highlights] == [("var total = 4;", DECLARATION_COLOR)]


def test_uninitialized_declaration_and_read(run_program):
    source = "var x; x;"
    records, result = run_program(source)
    assert messages(records) == ["make uninitialized variable 'x'", "read variable 'x'"]
    assert records[1].snapshot.lookup("x").value is None
    assert isinstance(result.error, VarUninitialized)
    assert result.error.span.start == source.rindex("x")
    assert str(result.error) == "variable 'x' is uninitialized"
    assert format_error(result.error) == "error at <test>:1:8-9: variable 'x' is uninitialized"


def test_reading_undeclared_variable(run_program):
    records, result = run_program("print y;")
    assert messages(records) == ["read variable 'y'"]
    assert records[0].secondary_highlights == ()
    assert isinstance(result.error, VarDoesNotExist)
    assert result.error.span.text == "y"
    assert result.error.name == "y"


def test_assigning_undeclared_variable(run_program):
    records, result = run_program("y = 1;")
    assert messages(records) == ["assign variable 'y' with value 1"]
    assert isinstance(result.error, VarDoesNotExist)
    assert result.error.span.text == "y = 1;"
    assert str(result.error) == "variable 'y' does not exist"


def test_shadowing_is_limited_to_the_inner_block(run_program):
    source = """
var x = 1;
{
    var x = 2;
    x = 3;
    print x;
}
print x;
"""
    records, result = run_program(source)
    assert result.ok
    assert result.output == "3\n1\n"
    inner_print = [r for r in records if r.message.startswith("print")][0]
    assert [len(scope) for scope in inner_print.snapshot.scopes] == [1, 1]
    assert [b.value for _, b in inner_print.snapshot.variables()] == [
        Value.from_python(1),
        Value.from_python(3),
    ]


def test_block_variables_are_not_visible_afterwards(run_program):
    records, result = run_program("{ var y = 1; }\nprint y;")
    assert isinstance(result.error, VarDoesNotExist)
    assert records[-1].snapshot.scopes == ((),)


def test_if_branches(run_program):
    source = """
var n = 5;
if n > 3 {
    print "big";
} else {
    print "small";
}
if n > 10 {
    print "huge";
} else if n == 5 {
    print "five";
}
if false {
    print "never";
}
"""
    records, result = run_program(source)
    assert result.ok
    assert result.output == "big\nfive\n"
    checks = [r for r in records if r.message == "check condition"]
    assert [r.primary_highlight.text for r in checks] == ["if", "if", "if", "if"]
    assert [[t for _, t in r.substitutions] for r in checks] == [["true"], ["false"], ["true"], ["false"]]


def test_while_loop_checks_condition_each_iteration(run_program):
    records, result = run_program("var i = 0;\nwhile i < 3 {\n    print i;\n    i = i + 1;\n}\n")
    assert result.ok
    assert result.output == "0\n1\n2\n"
    checks = [r for r in records if r.message == "check condition"]
    assert len(checks) == 4
    assert all(r.primary_highlight.text == "while" for r in checks)


@pytest.mark.parametrize("source", ["if 1 { }", "while \"yes\" { }"])
def test_condition_must_be_bool(run_program, source):
    records, result = run_program(source)
    assert messages(records)[-1] == "check condition"
    assert isinstance(result.error, ExpectedBool)
    assert result.error.span.text in ("1", '"yes"')


def test_side_effects_before_an_error_persist(run_program):
    records, result = run_program("print 1;\nprint 2 + true;\nprint 3;\n")
    assert isinstance(result.error, InvalidTypesForBinaryOp)
    assert result.output == "1\n"
    assert messages(records)[-1] == "evaluate operation '+'"


def test_scopes_are_unwound_on_success_and_error(stepper_for):
    ok = stepper_for("{ { var a = 1; } }")
    assert ok.run().ok
    assert len(ok.interpreter.scopes) == 0

    failed = stepper_for("{ var a = 1; { var b = 2; c; } }")
    assert isinstance(failed.run().error, VarDoesNotExist)
    assert len(failed.interpreter.scopes) == 0


# ----- driver -----


def test_stepper_state_machine(stepper_for):
    stepper = stepper_for("print 1;")
    assert stepper.state is NOT_STARTED
    first = stepper.step()
    assert isinstance(first, Suspended)
    assert stepper.state is first
    done = stepper.step()
    assert isinstance(done, Finished)
    assert done.result.ok
    assert done.result.output == "1\n"
    assert stepper.step() is done
    assert stepper.step() is done
    assert stepper.steps == 1


def test_finished_error_is_idempotent(stepper_for):
    stepper = stepper_for("x;")
    stepper.step()
    done = stepper.step()
    assert isinstance(done.result.error, VarDoesNotExist)
    assert stepper.step() is done
    assert list(stepper.records()) == []
    with pytest.raises(VarDoesNotExist):
        done.result.raise_for_error()


def test_snapshots_do_not_change_after_further_steps(stepper_for):
    stepper = stepper_for("var x = 1;\nx = 2;\nprint x;\nx = 3;\n")
    first = stepper.step().record
    second = stepper.step().record
    frozen = [
        (r.snapshot.output, [(n, b.decl_span, b.value) for n, b in r.snapshot.variables()])
        for r in (first, second)
    ]
    stepper.run()
    again = [
        (r.snapshot.output, [(n, b.decl_span, b.value) for n, b in r.snapshot.variables()])
        for r in (first, second)
    ]
    assert again == frozen
    assert second.snapshot.value_of("x") == Value.from_python(1)


def test_stepping_is_deterministic(stepper_for):
    source = "var i = 0;\nwhile i < 4 { if i % 2 == 0 { print i; } i = i + 1; }\n"

    def trace():
        stepper = stepper_for(source)
        records = list(stepper.records())
        return (
            [(r.message, r.primary_highlight.start, r.primary_highlight.end) for r in records],
            [[t for _, t in r.substitutions] for r in records],
            stepper.state.result.output,
        )

    assert trace() == trace()


def test_run_with_step_limit_can_resume(stepper_for):
    stepper = stepper_for("while true { }")
    assert stepper.run(max_steps=10) is None
    assert stepper.steps == 10
    assert not stepper.finished
    assert stepper.state.record.message == "check condition"
    assert stepper.run(max_steps=15) is None
    assert stepper.steps == 15


def test_step_limit_at_the_last_suspension_still_finishes(stepper_for):
    stepper = stepper_for("print 1;")
    result = stepper.run(max_steps=1)
    assert result is not None and result.ok
    assert result.output == "1\n"
    assert stepper.steps == 1


def test_step_limit_keeps_the_next_record_for_later(stepper_for):
    stepper = stepper_for("print 1;\nprint 2;\n")
    assert stepper.run(max_steps=1) is None
    assert stepper.steps == 1
    assert stepper.state.record.message == "print value '1'"

    outcome = stepper.step()
    assert outcome.record.message == "print value '2'"
    assert outcome.record.snapshot.output == "1\n"
    assert stepper.steps == 2
    assert stepper.run().output == "1\n2\n"


def test_calls_raise_unsupported_feature(stepper_for):
    stepper = stepper_for("print 1;\nf(1);")
    assert stepper.step().record.message == "print value '1'"
    with pytest.raises(UnsupportedFeature) as info:
        stepper.step()
    assert isinstance(info.value, NotImplementedError)
    assert info.value.message == "function calls are not supported"
    assert info.value.span.text == "f(1)"
    assert format_error(info.value) == "error at <test>:2:1-5: function calls are not supported"
    with pytest.raises(RuntimeError, match="internal failure"):
        stepper.step()
