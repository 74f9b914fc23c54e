"""
Fixed-precision monetary amounts.

Balances are plain Decimal values quantized to 4 fractional digits. All
balance arithmetic goes through an AmountPolicy so the overflow behaviour
(clamp or raise) can be swapped without touching the transaction rules.
"""
import logging
from decimal import Context, Decimal, ROUND_HALF_EVEN
from typing import Union

from errors import AmountOverflowError

logger = logging.getLogger(__name__)

SCALE = 4
QUANTUM = Decimal(1).scaleb(-SCALE)

# 96-bit mantissa, same range as the decimal type used by upstream producers.
MAX_AMOUNT = Decimal(2 ** 96 - 1)
MIN_AMOUNT = -MAX_AMOUNT
ZERO = Decimal("0").quantize(QUANTUM)

# Wide enough that MAX_AMOUNT + MAX_AMOUNT at 4 places is exact before clamping.
_CONTEXT = Context(prec=64, rounding=ROUND_HALF_EVEN)

AmountLike = Union[Decimal, int, str]


def to_amount(value: AmountLike) -> Decimal:
    """Convert to a Decimal with exactly 4 fractional digits (banker's rounding)."""
    return _CONTEXT.create_decimal(value).quantize(QUANTUM, context=_CONTEXT)


def format_amount(value: Decimal) -> str:
    return f"{to_amount(value):f}"


class AmountPolicy:
    """Base class for balance arithmetic. Subclasses decide what happens out of range."""

    name = "base"

    def add(self, left: Decimal, right: Decimal) -> Decimal:
        return self._bound(_CONTEXT.add(to_amount(left), to_amount(right)))

    def sub(self, left: Decimal, right: Decimal) -> Decimal:
        return self._bound(_CONTEXT.subtract(to_amount(left), to_amount(right)))

    def _bound(self, value: Decimal) -> Decimal:
        raise NotImplementedError


class SaturatingPolicy(AmountPolicy):
    """Clamp results to [MIN_AMOUNT, MAX_AMOUNT]."""

    name = "saturate"

    def _bound(self, value: Decimal) -> Decimal:
        if value > MAX_AMOUNT:
            logger.debug(f"Amount {value} clamped to maximum")
            return to_amount(MAX_AMOUNT)
        if value < MIN_AMOUNT:
            logger.debug(f"Amount {value} clamped to minimum")
            return to_amount(MIN_AMOUNT)
        return value


class CheckedPolicy(AmountPolicy):
    """Raise AmountOverflowError instead of clamping."""

    name = "checked"

    def _bound(self, value: Decimal) -> Decimal:
        if not MIN_AMOUNT <= value <= MAX_AMOUNT:
            raise AmountOverflowError(value)
        return value


POLICIES = {
    SaturatingPolicy.name: SaturatingPolicy,
    CheckedPolicy.name: CheckedPolicy,
}

_default_policy = SaturatingPolicy()


def get_policy(name: str) -> AmountPolicy:
    try:
        return POLICIES[name]()
    except KeyError:
        raise ValueError(f"Unknown overflow policy: {name!r} (expected one of {sorted(POLICIES)})") from None


def saturating_add(left: Decimal, right: Decimal) -> Decimal:
    return _default_policy.add(left, right)
