"""
Sale pricing rules.

A sale is active when the merchant enabled it, the sale price is a positive
number, and the sale end date (if any) is still in the future. Sale state is
never stored: it is recomputed against the clock on every read, because time
passes without any write to the product.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from numbers import Real
from typing import Any, Mapping, Optional, Union

from clock import Clock, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Parsed:
    value: datetime


@dataclass(frozen=True)
class Unparseable:
    raw: Any


ParseResult = Union[Parsed, Unparseable]


def _as_utc(value: datetime) -> datetime:
    # Mongo hands back naive datetimes in UTC unless the client is tz-aware
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_sale_end_date(raw: Any) -> ParseResult:
    """Parse a stored sale end date (datetime, date or ISO-8601 string)."""
    if isinstance(raw, datetime):
        return Parsed(_as_utc(raw))
    if isinstance(raw, date):
        return Parsed(datetime.combine(raw, time.min, tzinfo=timezone.utc))
    if isinstance(raw, str):
        text = raw.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return Parsed(_as_utc(datetime.fromisoformat(text)))
        except ValueError:
            return Unparseable(raw)
    return Unparseable(raw)


def _is_positive_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    # NaN fails this comparison too
    return value > 0


def usable_sale_price(value: Any) -> Optional[float]:
    """Stored salePrice as a float, or None when it is not a positive number."""
    return float(value) if _is_positive_number(value) else None


def is_sale_active(product: Mapping[str, Any], clock: Clock = utcnow) -> bool:
    if not product.get("enableSale"):
        return False

    if not _is_positive_number(product.get("salePrice")):
        return False

    end_date = product.get("saleEndDate")
    if not end_date:
        # no expiration set: perpetual sale
        return True

    parsed = parse_sale_end_date(end_date)
    if isinstance(parsed, Unparseable):
        # Fail open: an unreadable end date is treated as no expiration,
        # which is how products saved before end dates existed behave.
        logger.warning("Invalid saleEndDate %r, treating as no expiration", parsed.raw)
        return True

    return parsed.value > clock()


def get_display_price(product: Mapping[str, Any], clock: Clock = utcnow) -> float:
    """Return the sale price while a sale is active, otherwise the regular price."""
    if is_sale_active(product, clock):
        return product["salePrice"]
    return product.get("price")


def get_effective_enable_sale(product: Mapping[str, Any], clock: Clock = utcnow) -> bool:
    """The enableSale flag to report to clients: False once the sale has expired."""
    return is_sale_active(product, clock)
