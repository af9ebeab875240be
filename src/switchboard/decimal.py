"""Fixed-point decimal as stored on chain: ``(mantissa, scale, neg)``."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

MAX_SCALE = 18


@dataclass(frozen=True)
class AptosDecimal:
    """Signed value ``(-1)^neg * mantissa * 10^-scale``.

    ``mantissa`` is an unsigned integer kept as a decimal string, the same
    representation the node uses for ``u128`` fields.
    """

    mantissa: str
    scale: int
    neg: bool = False

    def to_decimal(self) -> Decimal:
        """Exact conversion; never rounded by the active decimal context."""
        sign = "-" if self.neg else ""
        return Decimal(f"{sign}{int(self.mantissa)}E-{int(self.scale)}")

    @classmethod
    def from_decimal(cls, value: Decimal | int | str) -> AptosDecimal:
        """Encode ``value``, truncating beyond ``MAX_SCALE`` fractional digits."""
        value = Decimal(value)
        if not value.is_finite():
            raise ValueError(f"Cannot encode non-finite value {value}")

        sign, digits, exponent = value.as_tuple()
        mantissa = int("".join(str(d) for d in digits))
        if exponent > 0:
            mantissa *= 10**exponent
            scale = 0
        else:
            scale = -exponent

        if scale > MAX_SCALE:
            mantissa //= 10 ** (scale - MAX_SCALE)
            scale = MAX_SCALE

        return cls(mantissa=str(mantissa), scale=scale, neg=bool(sign) and mantissa != 0)

    def to_move_args(self) -> list[str | int | bool]:
        """Argument triple in entry-point order: mantissa, scale, neg."""
        return [self.mantissa, self.scale, self.neg]

    def __str__(self) -> str:
        return str(self.to_decimal())
