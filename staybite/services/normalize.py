"""
One normalization function per entity, applied once where rows leave the
data-access layer. Everything downstream works with fully-populated models
and never re-applies fallbacks.
"""
from __future__ import annotations

import json
from datetime import date
from typing import Iterable, Optional

from ..models import FoodExperience, ListingKind, Stay, User
from ..schemas import (
    AvailabilityDayOut,
    CoordinatesOut,
    FoodDetails,
    FoodExperienceOut,
    HostListingOut,
    HostOut,
    ImageOut,
    StayDetails,
    StayOut,
)
from .availability import effective_price, index_slots, slots_or_synthesized
from .media import IMAGE_TARGETS, resolve_image_url

DEFAULT_AMENITIES = ["Wi-Fi", "Kitchen"]
DEFAULT_STAY_RATING = 4.7
DEFAULT_FOOD_RATING = 5.0
LISTING_FALLBACK_IMAGE = "/images/mountain.jpg"


def parse_amenities(raw) -> list[str]:
    """Accept a list, a JSON-encoded list, or a comma-separated string."""
    items: list[str] = []
    if isinstance(raw, (list, tuple)):
        items = [str(a) for a in raw]
    elif isinstance(raw, str) and raw.strip():
        try:
            parsed = json.loads(raw)
            items = [str(a) for a in parsed] if isinstance(parsed, list) else []
        except ValueError:
            items = [part.strip() for part in raw.split(",")]
    items = [a.strip() for a in items if a and a.strip()]
    return items or list(DEFAULT_AMENITIES)


def dump_amenities(amenities: Iterable[str] | None) -> Optional[str]:
    if amenities is None:
        return None
    return json.dumps([a.strip() for a in amenities if a and a.strip()])


def _or_default(value, default):
    # 0 is a real count (studios have no bedroom); only missing values default
    return default if value is None else value


def normalize_host(user: Optional[User], rating: float, reviews: int) -> HostOut:
    return HostOut(
        id=user.id if user else None,
        name=(user.name if user and user.name else "Host"),
        image=resolve_image_url(user.avatar_url if user else None),
        rating=round(rating, 1),
        reviews=reviews,
    )


def normalize_image(image, kind: ListingKind) -> ImageOut:
    return ImageOut(
        id=image.id,
        url=resolve_image_url(image.image_path, kind),
        order=image.display_order or 0,
        is_primary=bool(image.is_primary),
    )


def normalize_images(images: Iterable, kind: ListingKind) -> tuple[str, list[ImageOut]]:
    """Return (cover url, gallery). The primary leads, then display order."""
    ordered = sorted(images, key=lambda img: (not img.is_primary, img.display_order or 0, img.id or 0))
    gallery = [normalize_image(img, kind) for img in ordered]
    if not gallery:
        placeholder = IMAGE_TARGETS[kind].placeholder if kind == ListingKind.FOOD_EXPERIENCE else LISTING_FALLBACK_IMAGE
        gallery = [ImageOut(url=placeholder, order=0)]
    return gallery[0].url, gallery


def normalize_availability(persisted, base_price: float, today: date | None = None) -> list[AvailabilityDayOut]:
    slots = slots_or_synthesized(list(persisted), base_price, start=today)
    index = index_slots(slots)
    return [
        AvailabilityDayOut(date=s.date, price=effective_price(index, s.date, base_price), is_available=bool(s.is_available))
        for s in sorted(slots, key=lambda s: s.date)
    ]


def normalize_stay(stay: Stay, review_count: int = 0, today: date | None = None) -> StayOut:
    rating = stay.rating if stay.rating is not None else DEFAULT_STAY_RATING
    cover, gallery = normalize_images(stay.images, ListingKind.STAY)
    return StayOut(
        id=stay.id,
        title=stay.title,
        description=stay.description or "",
        price_per_night=float(stay.price_per_night),
        status=stay.status,
        image=cover,
        images=gallery,
        host=normalize_host(stay.host, rating, review_count),
        host_id=stay.host_id,
        details=StayDetails(
            bedrooms=_or_default(stay.bedrooms, 1),
            beds=_or_default(stay.beds, 1),
            bathrooms=_or_default(stay.bathrooms, 1),
            max_guests=_or_default(stay.max_guests, 2),
            amenities=parse_amenities(stay.amenities),
            location=stay.location_name or "Unknown location",
            property_type=stay.property_type or "apartment",
        ),
        coordinates=CoordinatesOut(lat=stay.latitude or 0.0, lng=stay.longitude or 0.0),
        zipcode=stay.zipcode,
        rating=round(rating, 1),
        is_featured=bool(stay.is_featured),
        availability=normalize_availability(stay.availability, float(stay.price_per_night), today=today),
    )


def normalize_food_experience(exp: FoodExperience, review_count: int = 0) -> FoodExperienceOut:
    rating = exp.rating if exp.rating is not None else DEFAULT_FOOD_RATING
    cover, gallery = normalize_images(exp.images, ListingKind.FOOD_EXPERIENCE)
    place = ", ".join(p for p in (exp.city, exp.state) if p) or exp.location_name or "Unknown location"
    coordinates = None
    if exp.latitude is not None and exp.longitude is not None:
        coordinates = CoordinatesOut(lat=exp.latitude, lng=exp.longitude)
    return FoodExperienceOut(
        id=exp.id,
        title=exp.title,
        description=exp.description or "",
        price_per_person=float(exp.price_per_person),
        status=exp.status,
        cuisine_type=exp.cuisine_type,
        menu_description=exp.menu_description or "",
        location_name=exp.location_name or "",
        image=cover,
        images=gallery,
        host=normalize_host(exp.host, rating, review_count),
        host_id=exp.host_id,
        details=FoodDetails(
            duration=exp.duration or "2 hours",
            group_size=f"Max {exp.max_guests or 2} guests",
            includes=["Food", "Beverages"],
            language=exp.language or "English",
            location=place,
        ),
        coordinates=coordinates,
        zipcode=exp.zipcode,
        rating=round(rating, 1),
        is_featured=bool(exp.is_featured),
    )


def normalize_host_listing(listing, kind: ListingKind) -> HostListingOut:
    cover, gallery = normalize_images(listing.images, kind)
    price = listing.price_per_night if kind == ListingKind.STAY else listing.price_per_person
    return HostListingOut(
        id=listing.id,
        kind=kind,
        title=listing.title,
        status=listing.status,
        price=float(price),
        image=cover,
        images=gallery,
        created_at=listing.created_at,
        updated_at=listing.updated_at,
    )
