import argparse
import logging
import sys
from pathlib import Path

from .errors import PelError, UnsupportedFeature, format_error
from .parser import AssignStatementType, SyntaxOptions, VariableDeclarationType, parse_statements
from .samples import FIZZBUZZ, FIZZBUZZ_NAME
from .source import SourceFile
from .stepper import new_interpreter

EXIT_STEP_LIMIT = 3


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m pel",
        usage="python -m pel [options] (<script.pel> | --sample)",
    )
    parser.add_argument("script", nargs="?")
    parser.add_argument("--sample", action="store_true", help="run the bundled FizzBuzz program")
    parser.add_argument("--trace", action="store_true", help="print every step before the output")
    parser.add_argument("--step", action="store_true", help="wait for Enter between steps")
    parser.add_argument("--max-steps", type=int, default=None, metavar="N")
    parser.add_argument(
        "--assign-syntax",
        choices=[t.value for t in AssignStatementType],
        default=AssignStatementType.ANY.value,
    )
    parser.add_argument(
        "--decl-syntax",
        choices=[t.value for t in VariableDeclarationType],
        default=VariableDeclarationType.ANY.value,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="log interpreter transitions")
    return parser


def _load(args: argparse.Namespace) -> SourceFile | None:
    if args.sample:
        return SourceFile(FIZZBUZZ_NAME, FIZZBUZZ)
    script_path = Path(args.script).resolve()
    if not script_path.is_file():
        print(f"pel: script not found: {script_path}", file=sys.stderr)
        return None
    return SourceFile(args.script, script_path.read_text())


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args_list = sys.argv[1:] if argv is None else argv
    try:
        args = parser.parse_args(args_list)
    except SystemExit as exc:
        return int(exc.code)
    if args.script is None and not args.sample:
        parser.print_usage(sys.stderr)
        print("pel: expected 1 argument: input file", file=sys.stderr)
        return 2

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    file = _load(args)
    if file is None:
        return 2

    options = SyntaxOptions(
        assign_type=AssignStatementType(args.assign_syntax),
        variable_decl_type=VariableDeclarationType(args.decl_syntax),
    )
    try:
        statements = parse_statements(file, options)
    except PelError as exc:
        print(format_error(exc), file=sys.stderr)
        return 1

    stepper = new_interpreter(statements)
    try:
        for record in stepper.records(args.max_steps):
            if args.trace or args.step:
                print(f"[{stepper.steps}] {record.describe()}")
            if args.step:
                try:
                    input()
                except EOFError:
                    args.step = False
    except UnsupportedFeature as exc:
        sys.stdout.write(stepper.interpreter.program_output)
        print(format_error(exc), file=sys.stderr)
        return 1

    if not stepper.finished:
        sys.stdout.write(stepper.interpreter.program_output)
        print(f"pel: stopped after {stepper.steps} steps", file=sys.stderr)
        return EXIT_STEP_LIMIT

    result = stepper.run()
    sys.stdout.write(result.output)
    if not result.ok:
        print(format_error(result.error), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
