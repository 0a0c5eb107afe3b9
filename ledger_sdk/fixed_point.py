"""
fixed_point.py - Exact fixed-point numbers for balances and prices

FixedPointNumber stores an unbounded integer mantissa (`inner`) and a scale
(`precision`, the number of fractional digits). The value is
inner * 10 ** -precision.

All arithmetic is integer arithmetic:
    - add/sub align both operands to the larger precision
    - mul adds the precisions
    - div keeps max(p_a, p_b, DEFAULT_PRECISION) digits, truncated toward zero

Conversion from chain integers goes through from_inner(), which never touches
binary floating point. Floats passed to the constructor are converted through
their shortest repr (str(x)).
"""

from __future__ import annotations
from decimal import Decimal, ROUND_DOWN, InvalidOperation, localcontext
from functools import total_ordering
from typing import Optional, Union

# Fractional digits kept by a division when neither operand needs more.
DEFAULT_PRECISION = 18

Numeric = Union["FixedPointNumber", Decimal, int, str, float]


def _to_decimal(value: Union[Decimal, int, str, float]) -> Decimal:
    if isinstance(value, bool):
        raise TypeError("bool is not a number")
    if isinstance(value, float):
        value = str(value)
    try:
        result = Decimal(value)
    except InvalidOperation as exc:
        raise ValueError(f"invalid number {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"number must be finite, got {value!r}")
    return result


def _rescale(inner: int, from_precision: int, to_precision: int) -> int:
    """Move `inner` between scales; narrowing truncates toward zero."""
    if to_precision >= from_precision:
        return inner * 10 ** (to_precision - from_precision)
    factor = 10 ** (from_precision - to_precision)
    quotient = abs(inner) // factor
    return quotient if inner >= 0 else -quotient


@total_ordering
class FixedPointNumber:
    """
    Arbitrary-precision fixed-point number.

    Immutable. Two numbers are equal when their values are equal, whatever
    their precision (FixedPointNumber("1.0") == FixedPointNumber("1.00")).

    Example:
        balance = FixedPointNumber.from_inner(1_500_000_000_000, 12)   # 1.5
        fee = FixedPointNumber("0.01")
        available = (balance - fee).max(FixedPointNumber.ZERO)        # 1.49
    """

    __slots__ = ("_inner", "_precision")

    ZERO: "FixedPointNumber"
    ONE: "FixedPointNumber"

    def __init__(self, value: Numeric = 0, precision: Optional[int] = None):
        """
        Create a number from a human value.

        Args:
            value: int, str, Decimal, float or another FixedPointNumber
            precision: Fractional digits to keep. None keeps exactly the digits
                       the value needs. A smaller precision than the value needs
                       truncates toward zero.
        """
        if precision is not None and precision < 0:
            raise ValueError(f"precision must be >= 0, got {precision}")

        if isinstance(value, FixedPointNumber):
            inner, scale = value._inner, value._precision
        else:
            decimal_value = _to_decimal(value)
            sign, digits, exponent = decimal_value.as_tuple()
            inner = int("".join(str(d) for d in digits) or "0")
            if sign:
                inner = -inner
            if exponent >= 0:
                inner *= 10 ** exponent
                scale = 0
            else:
                scale = -exponent

        target = scale if precision is None else precision
        self._inner = _rescale(inner, scale, target)
        self._precision = target

    # ------------------------------------------------------------------------
    # Construction from / conversion to chain integers
    # ------------------------------------------------------------------------

    @classmethod
    def _raw(cls, inner: int, precision: int) -> "FixedPointNumber":
        number = cls.__new__(cls)
        number._inner = inner
        number._precision = precision
        return number

    @classmethod
    def from_inner(cls, raw: Union[int, str], decimals: int) -> "FixedPointNumber":
        """
        Interpret a raw chain integer that is already scaled by `decimals`.

        from_inner(1_000_000_000_000, 12) is 1. Strings must be plain base-10
        integers; floats are rejected.
        """
        if isinstance(raw, bool) or isinstance(raw, float):
            raise TypeError(f"raw chain value must be an integer, got {type(raw).__name__}")
        if decimals < 0:
            raise ValueError(f"decimals must be >= 0, got {decimals}")
        if isinstance(raw, str):
            text = raw.strip().replace(",", "")
            try:
                raw = int(text, 10)
            except ValueError as exc:
                raise ValueError(f"raw chain value must be an integer, got {text!r}") from exc
        return cls._raw(int(raw), decimals)

    def to_inner(self, decimals: Optional[int] = None) -> int:
        """Raw integer at `decimals` (default: own precision), truncated toward zero."""
        target = self._precision if decimals is None else decimals
        return _rescale(self._inner, self._precision, target)

    @property
    def inner(self) -> int:
        return self._inner

    @property
    def precision(self) -> int:
        return self._precision

    # ------------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------------

    @staticmethod
    def _coerce(value: Numeric) -> "FixedPointNumber":
        if isinstance(value, FixedPointNumber):
            return value
        return FixedPointNumber(value)

    def _aligned(self, other: "FixedPointNumber"):
        precision = max(self._precision, other._precision)
        return (
            _rescale(self._inner, self._precision, precision),
            _rescale(other._inner, other._precision, precision),
            precision,
        )

    def add(self, other: Numeric) -> "FixedPointNumber":
        a, b, precision = self._aligned(self._coerce(other))
        return self._raw(a + b, precision)

    def sub(self, other: Numeric) -> "FixedPointNumber":
        a, b, precision = self._aligned(self._coerce(other))
        return self._raw(a - b, precision)

    def mul(self, other: Numeric) -> "FixedPointNumber":
        other = self._coerce(other)
        return self._raw(self._inner * other._inner, self._precision + other._precision)

    def div(self, other: Numeric, precision: Optional[int] = None) -> "FixedPointNumber":
        """
        Divide, keeping `precision` fractional digits (truncated toward zero).

        Raises:
            ZeroDivisionError: If `other` is zero
        """
        other = self._coerce(other)
        if other._inner == 0:
            raise ZeroDivisionError("FixedPointNumber division by zero")
        if precision is None:
            precision = max(self._precision, other._precision, DEFAULT_PRECISION)
        # value = (a / 10^pa) / (b / 10^pb); scaled to 10^precision
        numerator = self._inner * 10 ** (precision + other._precision)
        denominator = other._inner * 10 ** self._precision
        quotient = abs(numerator) // abs(denominator)
        if (numerator < 0) != (denominator < 0):
            quotient = -quotient
        return self._raw(quotient, precision)

    def max(self, *others: Numeric) -> "FixedPointNumber":
        result = self
        for other in others:
            other = self._coerce(other)
            if other > result:
                result = other
        return result

    def min(self, *others: Numeric) -> "FixedPointNumber":
        result = self
        for other in others:
            other = self._coerce(other)
            if other < result:
                result = other
        return result

    def abs(self) -> "FixedPointNumber":
        return self._raw(abs(self._inner), self._precision)

    def neg(self) -> "FixedPointNumber":
        return self._raw(-self._inner, self._precision)

    def set_precision(self, precision: int) -> "FixedPointNumber":
        """Explicit rescale; narrowing truncates toward zero."""
        return FixedPointNumber(self, precision)

    def is_zero(self) -> bool:
        return self._inner == 0

    def is_negative(self) -> bool:
        return self._inner < 0

    def is_positive(self) -> bool:
        return self._inner > 0

    __add__ = add
    __sub__ = sub
    __mul__ = mul
    __truediv__ = div

    def __radd__(self, other: Numeric) -> "FixedPointNumber":
        return self._coerce(other).add(self)

    def __rsub__(self, other: Numeric) -> "FixedPointNumber":
        return self._coerce(other).sub(self)

    def __rmul__(self, other: Numeric) -> "FixedPointNumber":
        return self._coerce(other).mul(self)

    def __neg__(self) -> "FixedPointNumber":
        return self.neg()

    def __abs__(self) -> "FixedPointNumber":
        return self.abs()

    # ------------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, (FixedPointNumber, Decimal, int)) or isinstance(other, bool):
            return NotImplemented
        a, b, _ = self._aligned(self._coerce(other))
        return a == b

    def __lt__(self, other: Numeric) -> bool:
        a, b, _ = self._aligned(self._coerce(other))
        return a < b

    def __hash__(self) -> int:
        return hash(self.to_decimal())

    def __bool__(self) -> bool:
        return self._inner != 0

    # ------------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------------

    def to_decimal(self) -> Decimal:
        """Exact decimal.Decimal with the same value and exponent."""
        sign = 1 if self._inner < 0 else 0
        digits = tuple(int(d) for d in str(abs(self._inner)))
        return Decimal((sign, digits, -self._precision))

    def to_string(self) -> str:
        """
        Plain decimal string without exponent or trailing fractional zeros.

        FixedPointNumber(s) == original for every string this returns.
        """
        digits = str(abs(self._inner)).rjust(self._precision + 1, "0")
        if self._precision:
            integer_part = digits[:-self._precision]
            fraction = digits[-self._precision:].rstrip("0")
        else:
            integer_part, fraction = digits, ""
        text = f"{integer_part}.{fraction}" if fraction else integer_part
        return f"-{text}" if self._inner < 0 else text

    def to_fixed(self, dp: int) -> str:
        """String with exactly `dp` fractional digits, truncated toward zero."""
        with localcontext() as ctx:
            ctx.prec = max(len(str(abs(self._inner))) + dp + 2, 28)
            quantizer = Decimal(1).scaleb(-dp)
            return format(self.to_decimal().quantize(quantizer, rounding=ROUND_DOWN), "f")

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"FixedPointNumber('{self.to_string()}', precision={self._precision})"


FixedPointNumber.ZERO = FixedPointNumber(0)
FixedPointNumber.ONE = FixedPointNumber(1)
