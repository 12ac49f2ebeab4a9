from datetime import date

from staybite.models import ListingKind, StayImage
from staybite.services.normalize import (
    DEFAULT_AMENITIES,
    LISTING_FALLBACK_IMAGE,
    dump_amenities,
    normalize_food_experience,
    normalize_host_listing,
    normalize_stay,
    parse_amenities,
)
from staybite.services.postfilter import matches_bedrooms


def test_parse_amenities_accepts_several_shapes():
    assert parse_amenities(["Pool", " Sauna "]) == ["Pool", "Sauna"]
    assert parse_amenities('["Pool", "Wi-Fi"]') == ["Pool", "Wi-Fi"]
    assert parse_amenities("Pool, Hot tub") == ["Pool", "Hot tub"]
    assert parse_amenities(None) == DEFAULT_AMENITIES
    assert parse_amenities("[]") == DEFAULT_AMENITIES
    assert parse_amenities(dump_amenities(["Grill"])) == ["Grill"]


def test_bare_stay_gets_defaults(db, make_user, make_stay):
    stay = make_stay(make_user(is_host=True, name=""), bedrooms=None, max_guests=None, location_name="")
    out = normalize_stay(stay, today=date(2026, 1, 1))
    assert out.image == LISTING_FALLBACK_IMAGE
    assert out.rating == 4.7
    assert out.host.name == "Host"
    assert out.details.bedrooms == 1
    assert out.details.max_guests == 2
    assert out.details.location == "Unknown location"
    assert out.details.amenities == DEFAULT_AMENITIES
    assert len(out.availability) == 30
    saturday = [d for d in out.availability if d.date == date(2026, 1, 3)][0]
    assert saturday.price == 125


def test_persisted_availability_is_used_as_is(db, make_user, make_stay, add_stay_slots):
    stay = make_stay(make_user(is_host=True))
    add_stay_slots(stay, date(2026, 2, 1), 3, price_override=180)
    out = normalize_stay(stay, today=date(2026, 1, 1))
    assert [(d.date.day, d.price) for d in out.availability] == [(1, 180), (2, 180), (3, 180)]


def test_primary_image_leads_gallery(db, make_user, make_stay):
    stay = make_stay(make_user(is_host=True))
    db.add_all([
        StayImage(stay_id=stay.id, image_path="stay-images/1/1/1_a.jpg", display_order=0, is_primary=False),
        StayImage(stay_id=stay.id, image_path="https://cdn.example.com/cover.jpg", display_order=1, is_primary=True),
    ])
    db.commit()
    db.refresh(stay)
    out = normalize_stay(stay)
    assert out.image == "https://cdn.example.com/cover.jpg"
    assert [img.is_primary for img in out.images] == [True, False]


def test_food_experience_defaults(db, make_user, make_food):
    exp = make_food(make_user(is_host=True, name="Giulia"), duration=None, language=None, max_guests=6)
    out = normalize_food_experience(exp, review_count=3)
    assert out.image == "/images/placeholder-food.jpg"
    assert out.rating == 5.0
    assert out.host.reviews == 3
    assert out.details.location == "Rome, Lazio"
    assert out.details.group_size == "Max 6 guests"
    assert out.details.duration == "2 hours"
    assert out.coordinates is None


def test_host_listing_summary(db, make_user, make_food):
    exp = make_food(make_user(is_host=True))
    out = normalize_host_listing(exp, ListingKind.FOOD_EXPERIENCE)
    assert out.kind == "food_experience"
    assert out.status == "published"
    assert out.price == 50.0


def test_zero_bedrooms_is_kept(db, make_user, make_stay):
    stay = make_stay(make_user(is_host=True), bedrooms=0, bathrooms=0)
    out = normalize_stay(stay, today=date(2026, 1, 1))
    assert out.details.bedrooms == 0
    assert out.details.bathrooms == 0
    assert not matches_bedrooms("1", out.details.bedrooms)
