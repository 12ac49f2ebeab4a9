"""
Availability matching over a listing's per-date slots.

A slot is anything with ``date``, ``is_available`` and ``price_override``
attributes: persisted ORM rows and synthesized ``AvailabilitySlot`` values
are interchangeable here. A date with no slot is unavailable.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time, timedelta
from typing import Iterable, Iterator, Optional, Protocol, Sequence

from ..config import settings


class SlotLike(Protocol):
    date: date
    is_available: bool
    price_override: Optional[float]


@dataclass(frozen=True)
class AvailabilitySlot:
    date: date
    is_available: bool = True
    price_override: Optional[float] = None


@dataclass(frozen=True)
class RangeQuote:
    start: date
    end: date
    bookable: bool
    nights: int = 0
    nightly_prices: list[float] = field(default_factory=list)
    total: float = 0.0


def index_slots(slots: Iterable[SlotLike]) -> dict[date, SlotLike]:
    return {s.date: s for s in slots}


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every calendar day in [start, end)."""
    day = start
    while day < end:
        yield day
        day += timedelta(days=1)


def _as_index(slots) -> dict[date, SlotLike]:
    return slots if isinstance(slots, dict) else index_slots(slots)


def is_date_bookable(slots, day: date) -> bool:
    slot = _as_index(slots).get(day)
    return bool(slot is not None and slot.is_available)


def effective_price(slots, day: date, base_price: float) -> float:
    slot = _as_index(slots).get(day)
    if slot is not None and slot.price_override is not None:
        return float(slot.price_override)
    return float(base_price)


def is_range_bookable(slots, start: date, end: date) -> bool:
    if start >= end:
        return False
    index = _as_index(slots)
    return all(is_date_bookable(index, day) for day in iter_days(start, end))


def quote_range(slots, start: date, end: date, base_price: float) -> RangeQuote:
    """Price a stay of nights [start, end). Zero-length or inverted ranges are unbookable."""
    if start >= end:
        return RangeQuote(start=start, end=end, bookable=False)
    index = _as_index(slots)
    prices = [effective_price(index, day, base_price) for day in iter_days(start, end)]
    return RangeQuote(
        start=start,
        end=end,
        bookable=is_range_bookable(index, start, end),
        nights=len(prices),
        nightly_prices=prices,
        total=round(sum(prices), 2),
    )


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def synthesize_availability(base_price: float, start: date | None = None, days: int | None = None) -> list[AvailabilitySlot]:
    """
    Fallback calendar for listings whose availability was never persisted:
    every day is open, weekends carry the premium multiplier.
    """
    start = start or date.today()
    days = settings.AVAILABILITY_HORIZON_DAYS if days is None else days
    slots = []
    for offset in range(days):
        day = start + timedelta(days=offset)
        price = float(base_price) * settings.WEEKEND_PREMIUM if is_weekend(day) else float(base_price)
        slots.append(AvailabilitySlot(date=day, is_available=True, price_override=price))
    return slots


def slots_or_synthesized(persisted: Sequence[SlotLike], base_price: float, start: date | None = None) -> list:
    """Persisted slots always win; synthesize only when none were ever stored."""
    if persisted:
        return list(persisted)
    return synthesize_availability(base_price, start=start)


@dataclass(frozen=True)
class FoodSession:
    date: date
    start_time: Optional[time]
    end_time: Optional[time]
    available_spots: int


def open_sessions(slots: Iterable, day: date, guests: int = 1) -> list[FoodSession]:
    """Food-experience sessions on ``day`` that can seat ``guests``."""
    return [
        FoodSession(date=s.date, start_time=s.start_time, end_time=s.end_time, available_spots=s.available_spots)
        for s in slots
        if s.date == day and s.is_available and (s.available_spots or 0) >= guests
    ]
