"""
Filters the query layer cannot express, applied to an already-fetched page
of normalized stays.

Two availability checks live here and are deliberately different:
the window buckets (weekend/week/month) only need *one* open day, while an
applied date range needs *every* night open.
"""
from __future__ import annotations

import calendar
import logging
from datetime import date, timedelta
from typing import Iterable, Sequence

from ..config import settings
from ..errors import ValidationFailed
from .availability import index_slots, is_date_bookable, is_range_bookable

logger = logging.getLogger(__name__)

ANY = "any"
BEDROOM_BUCKETS = (ANY, "1", "2", "3", "4+")
GUEST_BUCKETS = (ANY, "1-2", "3-4", "5+")
AVAILABILITY_BUCKETS = (ANY, "weekend", "week", "month", "flexible")


def validate_buckets(bedrooms: str = ANY, guests: str = ANY, availability: str = ANY) -> None:
    if bedrooms not in BEDROOM_BUCKETS:
        raise ValidationFailed(f"Unknown bedrooms option '{bedrooms}'")
    if guests not in GUEST_BUCKETS:
        raise ValidationFailed(f"Unknown guests option '{guests}'")
    if availability not in AVAILABILITY_BUCKETS:
        raise ValidationFailed(f"Unknown availability option '{availability}'")


def matches_bedrooms(bucket: str, bedrooms: int) -> bool:
    if bucket == ANY:
        return True
    if bucket == "4+":
        return bedrooms >= 4
    return bedrooms == int(bucket)


def matches_guests(bucket: str, max_guests: int) -> bool:
    if bucket == ANY:
        return True
    if bucket == "1-2":
        return 1 <= max_guests <= 2
    if bucket == "3-4":
        return 3 <= max_guests <= 4
    if bucket == "5+":
        return max_guests >= 5
    raise ValidationFailed(f"Unknown guests option '{bucket}'")


def _add_month(day: date) -> date:
    year, month = (day.year + 1, 1) if day.month == 12 else (day.year, day.month + 1)
    last = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last))


def window_end(bucket: str, today: date) -> date:
    """Last day (inclusive) of a bounded availability window."""
    if bucket == "weekend":
        # Upcoming Saturday, counting Sunday as the first day of the week
        days_since_sunday = (today.weekday() + 1) % 7
        return today + timedelta(days=6 - days_since_sunday)
    if bucket == "week":
        return today + timedelta(days=7)
    if bucket == "month":
        return _add_month(today)
    raise ValidationFailed(f"'{bucket}' is not a bounded availability window")


def has_any_open_day(slots, start: date, end_inclusive: date) -> bool:
    index = slots if isinstance(slots, dict) else index_slots(slots)
    day = start
    while day <= end_inclusive:
        if is_date_bookable(index, day):
            return True
        day += timedelta(days=1)
    return False


def count_open_days(slots, start: date, horizon_days: int, stop_at: int | None = None) -> int:
    """Count open days in [start, start + horizon_days), stopping early at ``stop_at``."""
    index = slots if isinstance(slots, dict) else index_slots(slots)
    count = 0
    for offset in range(horizon_days):
        if is_date_bookable(index, start + timedelta(days=offset)):
            count += 1
            if stop_at is not None and count >= stop_at:
                break
    return count


def matches_window(bucket: str, slots, today: date) -> bool:
    if bucket == ANY:
        return True
    if bucket == "flexible":
        needed = settings.FLEXIBLE_MIN_DAYS
        return count_open_days(slots, today, settings.AVAILABILITY_HORIZON_DAYS, stop_at=needed) >= needed
    return has_any_open_day(slots, today, window_end(bucket, today))


def matches_date_range(slots, start: date | None, end: date | None) -> bool:
    if start is None or end is None:
        return True
    return is_range_bookable(slots, start, end)


def post_filter_stays(stays: Iterable, state, today: date | None = None) -> list:
    """
    Keep the stays that pass every bucket rule in ``state`` (a FilterState).
    The date range only applies once the user confirmed it.
    """
    today = today or date.today()
    validate_buckets(state.bedrooms, state.guests, state.availability)
    kept = []
    for stay in stays:
        details = stay.details
        if not matches_bedrooms(state.bedrooms, details.bedrooms):
            continue
        if not matches_guests(state.guests, details.max_guests):
            continue
        index = index_slots(stay.availability)
        if not matches_window(state.availability, index, today):
            continue
        if state.apply_dates and not matches_date_range(index, state.check_in, state.check_out):
            continue
        kept.append(stay)
    logger.debug("Post-filter kept %d stays", len(kept))
    return kept


def sort_listings(listings: Sequence, sort_key: str | None, price_attr: str) -> list:
    """In-memory ordering fallback, mirroring the keys the query layer understands."""
    items = list(listings)
    if sort_key == "price_asc":
        return sorted(items, key=lambda item: getattr(item, price_attr))
    if sort_key == "price_desc":
        return sorted(items, key=lambda item: getattr(item, price_attr), reverse=True)
    if sort_key == "rating_asc":
        return sorted(items, key=lambda item: item.rating)
    if sort_key == "rating_desc":
        return sorted(items, key=lambda item: item.rating, reverse=True)
    return items
