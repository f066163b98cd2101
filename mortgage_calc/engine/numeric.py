"""Input normalization and small Decimal helpers shared by the engine.

Values reaching the engine may come straight from a restored session, so
anything negative, NaN, infinite or unparsable is treated as zero.
"""

import logging
from decimal import Decimal, InvalidOperation, ROUND_CEILING, ROUND_FLOOR

from mortgage_calc.config import settings

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
TWO_PLACES = Decimal("0.01")
# Term solving works on ln() ratios; drop float noise before taking the ceiling
TERM_PRECISION = Decimal("0.000000001")


def to_money(value) -> Decimal:
    """Coerce a money/rate input to a finite, non-negative Decimal."""
    if value is None or isinstance(value, bool):
        return ZERO
    try:
        if isinstance(value, Decimal):
            d = value
        elif isinstance(value, float):
            d = Decimal(str(value))
        else:
            d = Decimal(str(value).strip().replace(",", ""))
    except (InvalidOperation, ValueError):
        logger.debug("Unparsable numeric input %r treated as 0", value)
        return ZERO
    if not d.is_finite() or d < 0:
        logger.debug("Non-finite or negative input %r treated as 0", value)
        return ZERO
    if d > settings.max_amount:
        logger.debug("Input %r capped at %s", value, settings.max_amount)
        return settings.max_amount
    return d


def to_rate(value) -> Decimal:
    """Coerce an annual rate in percent, capped at ``settings.max_rate_percent``."""
    rate = to_money(value)
    if rate > settings.max_rate_percent:
        logger.debug("Rate %s capped at %s", rate, settings.max_rate_percent)
        return settings.max_rate_percent
    return rate


def to_months(value, cap: int | None = None) -> int:
    """Coerce a month count to a non-negative int, optionally capped."""
    months = int(to_money(value).to_integral_value(ROUND_FLOOR))
    if cap is not None and months > cap:
        logger.debug("Month count %d capped at %d", months, cap)
        return cap
    return months


def to_term_months(value) -> int:
    return to_months(value, cap=settings.max_term_months)


def is_negligible(amount: Decimal) -> bool:
    return abs(amount) < settings.balance_epsilon


def clamp_balance(balance: Decimal) -> Decimal:
    """Remaining balance floored at zero, with sub-cent residue dropped."""
    if balance < 0 or is_negligible(balance):
        return ZERO
    return balance


def ceil_months(raw: Decimal) -> int:
    if raw > settings.max_term_months:
        # Beyond the term cap, where quantizing could exceed working precision
        return int(raw.to_integral_value(ROUND_CEILING))
    return int(raw.quantize(TERM_PRECISION).to_integral_value(ROUND_CEILING))


def total(values) -> Decimal:
    return sum(values, ZERO)
