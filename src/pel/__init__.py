from .errors import ExecutionError, ParseError, PelError, UnsupportedFeature, format_error
from .main import Interpreter
from .parser import SyntaxOptions, parse_expr, parse_statements
from .source import SourceFile, Span
from .stepper import Finished, RunResult, Stepper, Suspended, new_interpreter
from .trace import Snapshot, TraceRecord
from .values import Type, Value

__all__ = [
    "ExecutionError",
    "Finished",
    "Interpreter",
    "ParseError",
    "PelError",
    "RunResult",
    "Snapshot",
    "SourceFile",
    "Span",
    "Stepper",
    "Suspended",
    "SyntaxOptions",
    "TraceRecord",
    "Type",
    "UnsupportedFeature",
    "Value",
    "format_error",
    "new_interpreter",
    "parse_expr",
    "parse_statements",
]
