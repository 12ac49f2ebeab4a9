from datetime import date, time
from types import SimpleNamespace

from staybite.services.availability import (
    AvailabilitySlot,
    effective_price,
    is_date_bookable,
    is_range_bookable,
    is_weekend,
    open_sessions,
    quote_range,
    slots_or_synthesized,
    synthesize_availability,
)

def JAN(d):
    return date(2026, 1, d)


def _open(*days, price=None):
    return [AvailabilitySlot(date=JAN(d), is_available=True, price_override=price) for d in days]


def test_missing_day_is_unavailable():
    slots = _open(1, 2, 3)
    assert is_date_bookable(slots, JAN(3))
    assert not is_date_bookable(slots, JAN(4))


def test_range_end_is_exclusive():
    slots = _open(1, 2, 3)
    assert is_range_bookable(slots, JAN(1), JAN(4))
    assert not is_range_bookable(slots, JAN(1), JAN(5))


def test_blocked_day_breaks_range():
    slots = _open(1, 3) + [AvailabilitySlot(date=JAN(2), is_available=False)]
    assert not is_range_bookable(slots, JAN(1), JAN(3))
    assert is_range_bookable(slots, JAN(3), JAN(4))


def test_empty_or_inverted_range_is_not_bookable():
    slots = _open(1, 2, 3)
    assert not is_range_bookable(slots, JAN(2), JAN(2))
    assert not is_range_bookable(slots, JAN(3), JAN(1))
    quote = quote_range(slots, JAN(2), JAN(2), 100)
    assert quote.bookable is False
    assert quote.nights == 0
    assert quote.total == 0


def test_override_wins_over_base_price():
    slots = _open(1, 3) + [AvailabilitySlot(date=JAN(2), is_available=True, price_override=150)]
    assert effective_price(slots, JAN(1), 100) == 100
    assert effective_price(slots, JAN(2), 100) == 150
    quote = quote_range(slots, JAN(1), JAN(3), 100)
    assert quote.bookable
    assert quote.nights == 2
    assert quote.nightly_prices == [100, 150]
    assert quote.total == 250


def test_quote_prices_unbookable_range_anyway():
    quote = quote_range(_open(1), JAN(1), JAN(3), 80)
    assert not quote.bookable
    assert quote.total == 160


def test_orm_rows_work_as_slots():
    rows = [SimpleNamespace(date=JAN(1), is_available=True, price_override=None)]
    assert is_range_bookable(rows, JAN(1), JAN(2))


def test_weekend_detection():
    # 2026-01-03 is a Saturday
    assert is_weekend(JAN(3))
    assert is_weekend(JAN(4))
    assert not is_weekend(JAN(5))


def test_synthesized_calendar_applies_weekend_premium():
    slots = synthesize_availability(100, start=JAN(1))
    assert len(slots) == 30
    assert all(s.is_available for s in slots)
    by_day = {s.date: s.price_override for s in slots}
    assert by_day[JAN(1)] == 100
    assert by_day[JAN(3)] == 125
    assert by_day[JAN(4)] == 125


def test_persisted_slots_suppress_synthesis():
    persisted = _open(10)
    assert slots_or_synthesized(persisted, 100, start=JAN(1)) == persisted
    assert len(slots_or_synthesized([], 100, start=JAN(1))) == 30


def test_open_sessions_respect_spots():
    rows = [
        SimpleNamespace(date=JAN(5), is_available=True, available_spots=6, start_time=time(18), end_time=time(21)),
        SimpleNamespace(date=JAN(5), is_available=True, available_spots=2, start_time=time(12), end_time=time(14)),
        SimpleNamespace(date=JAN(5), is_available=False, available_spots=10, start_time=None, end_time=None),
        SimpleNamespace(date=JAN(6), is_available=True, available_spots=10, start_time=None, end_time=None),
    ]
    sessions = open_sessions(rows, JAN(5), guests=4)
    assert len(sessions) == 1
    assert sessions[0].start_time == time(18)
