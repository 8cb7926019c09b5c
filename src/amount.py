from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, Context

from errors import InvalidAmount, AmountOverflow, NegativeResult

PRECISION = 4
QUANTUM = Decimal(1).scaleb(-PRECISION)

# Largest 96-bit mantissa at scale 4, same ceiling as a 128-bit fixed decimal.
MAX_VALUE = Decimal("7922816251426433759354395.0335")

# Wide enough that MAX_VALUE + MAX_VALUE is computed exactly before the range check.
_CONTEXT = Context(prec=40)


@dataclass(frozen=True, order=True)
class Amount:
    """
    Nonnegative monetary value with exactly 4 fractional digits.
    Validated on construction, so an out-of-range or over-precise Amount cannot exist.
    Arithmetic never rounds: results are either exact or an error is raised.
    """

    value: Decimal = Decimal("0")

    def __post_init__(self):
        value = self.value
        if not isinstance(value, Decimal):
            raise InvalidAmount(str(value), "expected a Decimal")
        if not value.is_finite():
            raise InvalidAmount(str(value), "not a finite number")
        if value.is_signed():
            raise InvalidAmount(str(value), "must be nonnegative")
        if value.as_tuple().exponent < -PRECISION:
            raise InvalidAmount(str(value), f"more than {PRECISION} fractional digits")
        if value > MAX_VALUE:
            raise InvalidAmount(str(value), "exceeds the representable range")
        object.__setattr__(self, "value", value.quantize(QUANTUM, context=_CONTEXT))

    @classmethod
    def parse(cls, text: str) -> "Amount":
        """Parse decimal text such as "1.5" or " 2.0000 "."""
        stripped = str(text).strip()
        try:
            value = Decimal(stripped)
        except InvalidOperation:
            raise InvalidAmount(stripped, "not a decimal number") from None
        return cls(value)

    @classmethod
    def zero(cls) -> "Amount":
        return cls()

    def is_zero(self) -> bool:
        return self.value == 0

    def add(self, other: "Amount") -> "Amount":
        result = _CONTEXT.add(self.value, other.value)
        if result > MAX_VALUE:
            raise AmountOverflow(self, other)
        return Amount(result)

    def sub(self, other: "Amount") -> "Amount":
        if other.value > self.value:
            raise NegativeResult(self, other)
        return Amount(_CONTEXT.subtract(self.value, other.value))

    def __add__(self, other: "Amount") -> "Amount":
        if not isinstance(other, Amount):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: "Amount") -> "Amount":
        if not isinstance(other, Amount):
            return NotImplemented
        return self.sub(other)

    def __str__(self) -> str:
        return f"{self.value:f}"
