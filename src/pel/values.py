from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from typing import Union

Payload = Union[int, float, str, bool]

# str() and int() cap the digits they convert; longer numbers are split until
# each piece fits in this many digits
_CHUNK_DIGITS = 1000
_LOG10_2 = math.log10(2)


def int_to_decimal(n: int) -> str:
    """Decimal text of `n`, with no limit on the number of digits."""
    if n < 0:
        return "-" + int_to_decimal(-n)
    digits = int(n.bit_length() * _LOG10_2) + 1
    if digits <= _CHUNK_DIGITS:
        return str(n)
    half = digits // 2
    high, low = divmod(n, 10**half)
    return int_to_decimal(high) + int_to_decimal(low).zfill(half)


def decimal_to_int(text: str) -> int:
    """Parse a string of ASCII digits of any length."""
    if len(text) <= _CHUNK_DIGITS:
        return int(text)
    half = len(text) // 2
    return decimal_to_int(text[:-half]) * 10**half + decimal_to_int(text[-half:])


class Type(enum.Enum):
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    BOOL = "bool"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Value:
    """A runtime value: the payload plus its type tag.

    The tag is stored explicitly so that ``True`` and ``1`` never compare or
    hash alike, which the host language would otherwise allow.
    """

    type: Type
    payload: Payload

    @classmethod
    def from_python(cls, raw: Payload) -> Value:
        # bool first: it is a subclass of int
        if isinstance(raw, bool):
            return cls(Type.BOOL, raw)
        if isinstance(raw, int):
            return cls(Type.INT, raw)
        if isinstance(raw, float):
            return cls(Type.FLOAT, raw)
        if isinstance(raw, str):
            return cls(Type.STRING, raw)
        raise TypeError(f"cannot make a value from {type(raw).__name__}")

    def display(self) -> str:
        """Text written to program output by ``print``."""
        if self.type is Type.BOOL:
            return "true" if self.payload else "false"
        if self.type is Type.FLOAT:
            return _format_float(self.payload)
        if self.type is Type.INT:
            return int_to_decimal(self.payload)
        return str(self.payload)

    def repr_text(self) -> str:
        """Text used in diagnostics and substitutions; strings are quoted."""
        if self.type is Type.STRING:
            return f'"{self.payload}"'
        return self.display()

    def __str__(self) -> str:
        return self.display()


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if value.is_integer():
        text = str(int(value))
        if value == 0 and math.copysign(1.0, value) < 0:
            return "-0"
        return text
    return repr(value)
