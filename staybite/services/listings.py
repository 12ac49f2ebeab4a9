"""
Public listing reads and host-side listing management.

Searches compose a query descriptor, fetch and normalize once, then apply
whatever the database could not express. Host operations always check
ownership before touching a row.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session, selectinload

from ..errors import Forbidden, NotFound, ValidationFailed, backend_call
from ..models import (
    Favorite,
    FoodExperience,
    FoodExperienceAvailability,
    ListingKind,
    ListingStatus,
    Review,
    Stay,
    StayAvailability,
    User,
)
from .availability import open_sessions, quote_range, slots_or_synthesized
from .catalog import invalidate_cache
from .favorites import LISTING_MODELS
from .normalize import (
    dump_amenities,
    normalize_availability,
    normalize_food_experience,
    normalize_host_listing,
    normalize_stay,
)
from .postfilter import post_filter_stays, sort_listings, validate_buckets
from .query import FilterState, apply_descriptor, compose_food_query, compose_stay_query
from .reviews import review_counts

logger = logging.getLogger(__name__)

MAX_AVAILABILITY_SPAN_DAYS = 366

AVAILABILITY_MODELS = {
    ListingKind.STAY: (StayAvailability, "stay_id"),
    ListingKind.FOOD_EXPERIENCE: (FoodExperienceAvailability, "experience_id"),
}

# NOT NULL columns a host may edit but never clear
REQUIRED_FIELDS = {
    ListingKind.STAY: ("title", "description", "price_per_night", "location_name"),
    ListingKind.FOOD_EXPERIENCE: ("title", "description", "price_per_person", "cuisine_type", "location_name"),
}
NON_BLANK_FIELDS = ("title", "cuisine_type")
CREATE_FIELDS = {
    ListingKind.STAY: ("title", "price_per_night"),
    ListingKind.FOOD_EXPERIENCE: ("title", "price_per_person", "cuisine_type"),
}


def _stay_options():
    return (selectinload(Stay.images), selectinload(Stay.availability), selectinload(Stay.host))


def _food_options():
    return (selectinload(FoodExperience.images), selectinload(FoodExperience.host))


# ---------------------------------------------------------------------------
# Public reads
# ---------------------------------------------------------------------------

def search_stays(db: Session, state: FilterState, today: date | None = None) -> list:
    validate_buckets(state.bedrooms, state.guests, state.availability)
    descriptor = compose_stay_query(state)
    stmt = apply_descriptor(select(Stay).options(*_stay_options()), Stay, descriptor)
    with backend_call(db, "load stays"):
        rows = list(db.scalars(stmt))
        counts = review_counts(db, ListingKind.STAY, [s.id for s in rows])
    stays = [normalize_stay(s, counts.get(s.id, 0), today=today) for s in rows]
    kept = post_filter_stays(stays, state, today=today)
    return sort_listings(kept, state.sort, "price_per_night")


def search_food(db: Session, state: FilterState, viewer_id: int | None = None) -> list:
    descriptor = compose_food_query(state, viewer_id=viewer_id)
    stmt = apply_descriptor(select(FoodExperience).options(*_food_options()), FoodExperience, descriptor)
    with backend_call(db, "load experiences"):
        rows = list(db.scalars(stmt))
        counts = review_counts(db, ListingKind.FOOD_EXPERIENCE, [e.id for e in rows])
    experiences = [normalize_food_experience(e, counts.get(e.id, 0)) for e in rows]
    return sort_listings(experiences, state.sort, "price_per_person")


def _visible(listing, viewer_id: int | None) -> bool:
    return listing.status == ListingStatus.PUBLISHED or (viewer_id is not None and listing.host_id == viewer_id)


def get_stay(db: Session, stay_id: int, viewer_id: int | None = None) -> Stay:
    with backend_call(db, "load stay"):
        stay = db.scalar(select(Stay).options(*_stay_options()).where(Stay.id == stay_id))
    if stay is None or not _visible(stay, viewer_id):
        raise NotFound("Stay not found")
    return stay


def get_food_experience(db: Session, experience_id: int, viewer_id: int | None = None) -> FoodExperience:
    with backend_call(db, "load experience"):
        exp = db.scalar(
            select(FoodExperience)
            .options(*_food_options(), selectinload(FoodExperience.availability))
            .where(FoodExperience.id == experience_id)
        )
    if exp is None or not _visible(exp, viewer_id):
        raise NotFound("Experience not found")
    return exp


def stay_detail(db: Session, stay_id: int, viewer_id: int | None = None, today: date | None = None):
    stay = get_stay(db, stay_id, viewer_id)
    counts = review_counts(db, ListingKind.STAY, [stay.id])
    return normalize_stay(stay, counts.get(stay.id, 0), today=today)


def food_detail(db: Session, experience_id: int, viewer_id: int | None = None):
    exp = get_food_experience(db, experience_id, viewer_id)
    counts = review_counts(db, ListingKind.FOOD_EXPERIENCE, [exp.id])
    return normalize_food_experience(exp, counts.get(exp.id, 0))


def stay_availability(db: Session, stay_id: int, viewer_id: int | None = None, today: date | None = None):
    stay = get_stay(db, stay_id, viewer_id)
    return normalize_availability(stay.availability, float(stay.price_per_night), today=today)


def quote_stay(db: Session, stay_id: int, check_in: date, check_out: date, viewer_id: int | None = None, today: date | None = None):
    stay = get_stay(db, stay_id, viewer_id)
    slots = slots_or_synthesized(list(stay.availability), float(stay.price_per_night), start=today)
    return quote_range(slots, check_in, check_out, float(stay.price_per_night))


def food_sessions(db: Session, experience_id: int, day: date, guests: int = 1, viewer_id: int | None = None):
    if guests < 1:
        raise ValidationFailed("Guests must be at least 1")
    exp = get_food_experience(db, experience_id, viewer_id)
    return open_sessions(exp.availability, day, guests)


# ---------------------------------------------------------------------------
# Host management
# ---------------------------------------------------------------------------

def get_owned_listing(db: Session, host_id: int, kind: ListingKind, listing_id: int):
    with backend_call(db, "load listing"):
        listing = db.get(LISTING_MODELS[kind], listing_id)
    if listing is None:
        raise NotFound("Listing not found")
    if listing.host_id != host_id:
        raise Forbidden("You do not own this listing")
    return listing


def _check_fields(kind: ListingKind, data: dict[str, Any], creating: bool = False) -> None:
    required = REQUIRED_FIELDS[kind]
    cleared = [key for key in required if key in data and data[key] is None]
    if creating:
        cleared += [key for key in CREATE_FIELDS[kind] if key not in data]
    if cleared:
        raise ValidationFailed(f"Missing value for: {', '.join(cleared)}")
    blank = [key for key in NON_BLANK_FIELDS if isinstance(data.get(key), str) and not data[key].strip()]
    if blank:
        raise ValidationFailed(f"Cannot be blank: {', '.join(blank)}")


def _apply_fields(listing, data: dict[str, Any]) -> None:
    for key, value in data.items():
        if key == "amenities":
            value = dump_amenities(value)
        elif isinstance(value, str) and key not in ("description", "menu_description"):
            value = value.strip()
        setattr(listing, key, value)


def create_listing(db: Session, host: User, kind: ListingKind, data: dict[str, Any]):
    """New listings start as drafts; creating one makes the owner a host."""
    _check_fields(kind, data, creating=True)
    model = LISTING_MODELS[kind]
    listing = model(host_id=host.id, status=ListingStatus.DRAFT)
    _apply_fields(listing, data)
    with backend_call(db, "create listing"):
        if not host.is_host:
            host.is_host = True
        db.add(listing)
        db.commit()
        db.refresh(listing)
    logger.info("Host %s created %s %s", host.id, kind.value, listing.id)
    return listing


def update_listing(db: Session, host_id: int, kind: ListingKind, listing_id: int, data: dict[str, Any]):
    _check_fields(kind, data)
    listing = get_owned_listing(db, host_id, kind, listing_id)
    _apply_fields(listing, data)
    with backend_call(db, "update listing"):
        db.commit()
        db.refresh(listing)
    invalidate_cache()
    return listing


def set_status(db: Session, host_id: int, kind: ListingKind, listing_id: int, status: ListingStatus):
    listing = get_owned_listing(db, host_id, kind, listing_id)
    with backend_call(db, "update listing status"):
        listing.status = ListingStatus(status)
        db.commit()
        db.refresh(listing)
    invalidate_cache()
    logger.info("%s %s is now %s", kind.value, listing_id, listing.status.value)
    return listing


def delete_listing(db: Session, storage, host_id: int, kind: ListingKind, listing_id: int) -> None:
    listing = get_owned_listing(db, host_id, kind, listing_id)
    paths = [img.image_path for img in listing.images]
    with backend_call(db, "delete listing"):
        # Favorites and reviews point at listings by (kind, id) only
        db.execute(delete(Favorite).where(Favorite.item_type == kind, Favorite.item_id == listing_id))
        db.execute(delete(Review).where(Review.target_type == kind, Review.target_id == listing_id))
        db.delete(listing)
        db.commit()
    for path in paths:
        try:
            storage.remove(path)
        except OSError:
            logger.warning("Could not remove orphaned image %s", path)
    invalidate_cache()
    logger.info("Host %s deleted %s %s", host_id, kind.value, listing_id)


def upsert_availability(
    db: Session,
    host_id: int,
    kind: ListingKind,
    listing_id: int,
    start_date: date,
    end_date: date,
    is_available: bool = True,
    price_override: float | None = None,
    available_spots: int | None = None,
    start_time=None,
    end_time=None,
) -> int:
    """Write one slot per day in [start_date, end_date). Returns the number of days written."""
    if start_date >= end_date:
        raise ValidationFailed("End date must be after start date")
    span = (end_date - start_date).days
    if span > MAX_AVAILABILITY_SPAN_DAYS:
        raise ValidationFailed(f"Availability range cannot exceed {MAX_AVAILABILITY_SPAN_DAYS} days")
    get_owned_listing(db, host_id, kind, listing_id)

    model, fk = AVAILABILITY_MODELS[kind]
    values: dict[str, Any] = {"is_available": is_available, "price_override": price_override}
    if kind == ListingKind.FOOD_EXPERIENCE:
        values.update(available_spots=available_spots or 0, start_time=start_time, end_time=end_time)
    rows = [{fk: listing_id, "date": start_date + timedelta(days=i), **values} for i in range(span)]

    with backend_call(db, "save availability"):
        dialect = db.get_bind().dialect.name
        if dialect in ("sqlite", "postgresql"):
            insert = sqlite_insert if dialect == "sqlite" else pg_insert
            stmt = insert(model).values(rows)
            stmt = stmt.on_conflict_do_update(
                index_elements=[fk, "date"],
                set_={key: stmt.excluded[key] for key in values},
            )
            db.execute(stmt)
        else:
            fk_col = getattr(model, fk)
            for row in rows:
                existing = db.scalar(select(model).where(fk_col == listing_id, model.date == row["date"]))
                if existing is None:
                    db.add(model(**row))
                else:
                    for key, value in values.items():
                        setattr(existing, key, value)
        db.commit()
    db.expire_all()
    logger.info("Saved %d availability days for %s %s", span, kind.value, listing_id)
    return span


def host_dashboard(db: Session, host_id: int) -> list:
    """Every listing the host owns, in any status, newest first."""
    out = []
    with backend_call(db, "load host listings"):
        for kind, model in LISTING_MODELS.items():
            stmt = (
                select(model)
                .options(selectinload(model.images))
                .where(model.host_id == host_id)
                .order_by(model.created_at.desc(), model.id.desc())
            )
            out.extend(normalize_host_listing(listing, kind) for listing in db.scalars(stmt))
    out.sort(key=lambda item: item.created_at or datetime.min, reverse=True)
    return out
