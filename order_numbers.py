"""
Order number assignment.

Order numbers look like ORD-20251019-0042: the UTC date followed by the
1-based position of the order among those created on the current day.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Tuple

from clock import Clock, utcnow
from database import ORDERS

logger = logging.getLogger(__name__)

ORDER_NUMBER_PATTERN = re.compile(r"^ORD-\d{8}-\d{4,}$")


def format_order_number(date_str: str, sequence: int) -> str:
    return f"ORD-{date_str}-{sequence:04d}"


def day_bounds(now: datetime) -> Tuple[datetime, datetime]:
    """First and last millisecond of the server-local calendar day containing now."""
    local = now.astimezone()
    start = local.replace(hour=0, minute=0, second=0, microsecond=0)
    end = local.replace(hour=23, minute=59, second=59, microsecond=999000)
    return start, end


def assign_order_number(store, clock: Clock = utcnow) -> str:
    """Mint the next order number for today.

    The count and the later insert are not atomic, so two concurrent
    checkouts can read the same count. A single collision is detected and
    the sequence bumped once more; the bumped number is not re-checked.
    """
    now = clock()
    date_str = now.astimezone(timezone.utc).strftime("%Y%m%d")
    start_of_day, end_of_day = day_bounds(now)

    today_count = store.count_in_range(ORDERS, "createdAt", start_of_day, end_of_day)
    order_number = format_order_number(date_str, today_count + 1)

    if store.find_one_by_field(ORDERS, "orderNumber", order_number) is not None:
        retry_number = format_order_number(date_str, today_count + 2)
        logger.warning("Order number %s already taken, using %s", order_number, retry_number)
        return retry_number

    return order_number
