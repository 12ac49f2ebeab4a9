from datetime import date, timedelta
from types import SimpleNamespace

import pytest

from staybite.errors import ValidationFailed
from staybite.services.availability import AvailabilitySlot
from staybite.services.postfilter import (
    count_open_days,
    matches_bedrooms,
    matches_guests,
    matches_window,
    post_filter_stays,
    sort_listings,
    validate_buckets,
    window_end,
)
from staybite.services.query import FilterState

# Wednesday
TODAY = date(2026, 1, 7)


def _slots(*days, available=True):
    return [AvailabilitySlot(date=d, is_available=available) for d in days]


def _stay(id=1, bedrooms=2, max_guests=4, availability=(), price=100.0, rating=4.7):
    return SimpleNamespace(
        id=id,
        details=SimpleNamespace(bedrooms=bedrooms, max_guests=max_guests),
        availability=list(availability),
        price_per_night=price,
        rating=rating,
    )


def test_guest_buckets():
    assert matches_guests("3-4", 4)
    assert not matches_guests("3-4", 5)
    assert matches_guests("5+", 5)
    assert matches_guests("1-2", 1)
    assert not matches_guests("1-2", 4)
    assert not matches_guests("1-2", 5)
    assert not matches_guests("3-4", 2)
    assert not matches_guests("5+", 4)
    assert matches_guests("any", 12)


def test_bedroom_buckets():
    assert matches_bedrooms("4+", 6)
    assert matches_bedrooms("2", 2)
    assert not matches_bedrooms("2", 3)


def test_unknown_bucket_is_rejected():
    with pytest.raises(ValidationFailed):
        validate_buckets(guests="7-9")
    with pytest.raises(ValidationFailed):
        validate_buckets(availability="someday")


def test_window_ends():
    assert window_end("weekend", TODAY) == date(2026, 1, 10)
    # Sunday still looks ahead to the coming Saturday
    assert window_end("weekend", date(2026, 1, 4)) == date(2026, 1, 10)
    assert window_end("weekend", date(2026, 1, 3)) == date(2026, 1, 3)
    assert window_end("week", TODAY) == date(2026, 1, 14)
    assert window_end("month", date(2026, 1, 31)) == date(2026, 2, 28)


def test_window_needs_only_one_open_day():
    slots = _slots(date(2026, 1, 9))
    assert matches_window("weekend", slots, TODAY)
    assert not matches_window("weekend", _slots(date(2026, 1, 11)), TODAY)
    assert matches_window("week", _slots(date(2026, 1, 14)), TODAY)
    assert not matches_window("week", _slots(date(2026, 1, 15)), TODAY)


def test_flexible_needs_five_open_days_within_horizon():
    five = _slots(*(TODAY + timedelta(days=n) for n in (0, 3, 10, 20, 29)))
    assert matches_window("flexible", five, TODAY)
    four_plus_late = _slots(*(TODAY + timedelta(days=n) for n in (0, 3, 10, 20, 30)))
    assert not matches_window("flexible", four_plus_late, TODAY)


def test_count_open_days_stops_early():
    slots = _slots(*(TODAY + timedelta(days=n) for n in range(20)))
    assert count_open_days(slots, TODAY, 30) == 20
    assert count_open_days(slots, TODAY, 30, stop_at=5) == 5


def test_post_filter_combines_buckets():
    open_week = _slots(*(TODAY + timedelta(days=n) for n in range(7)))
    stays = [
        _stay(1, bedrooms=1, max_guests=2, availability=open_week),
        _stay(2, bedrooms=3, max_guests=4, availability=open_week),
        _stay(3, bedrooms=3, max_guests=5, availability=open_week),
        _stay(4, bedrooms=3, max_guests=4, availability=[]),
    ]
    state = FilterState(bedrooms="3", guests="3-4", availability="week")
    assert [s.id for s in post_filter_stays(stays, state, today=TODAY)] == [2]


def test_date_range_applies_only_when_confirmed():
    slots = _slots(date(2026, 1, 1), date(2026, 1, 2), date(2026, 1, 3))
    stay = _stay(availability=slots)
    pending = FilterState(check_in=date(2026, 1, 1), check_out=date(2026, 1, 5))
    assert post_filter_stays([stay], pending, today=TODAY) == [stay]

    applied = FilterState(check_in=date(2026, 1, 1), check_out=date(2026, 1, 5), apply_dates=True)
    assert post_filter_stays([stay], applied, today=TODAY) == []

    # Checkout day itself need not be open
    checkout_exclusive = FilterState(check_in=date(2026, 1, 1), check_out=date(2026, 1, 4), apply_dates=True)
    assert post_filter_stays([stay], checkout_exclusive, today=TODAY) == [stay]


def test_sort_listings_fallback():
    items = [_stay(1, price=200, rating=4.0), _stay(2, price=50, rating=4.9), _stay(3, price=120, rating=4.5)]
    assert [s.id for s in sort_listings(items, "price_asc", "price_per_night")] == [2, 3, 1]
    assert [s.id for s in sort_listings(items, "rating_desc", "price_per_night")] == [2, 3, 1]
    assert [s.id for s in sort_listings(items, "bogus", "price_per_night")] == [1, 2, 3]
