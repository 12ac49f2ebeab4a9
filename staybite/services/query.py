"""
Turns filter selections into a query descriptor, then the descriptor into a
SQLAlchemy select.

Composition is pure: building a descriptor touches nothing. Fetching is the
caller's separate step.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Mapping

from sqlalchemy import Select, or_

from ..errors import ValidationFailed
from ..models import ListingStatus

SORT_KEYS = ("price_asc", "price_desc", "rating_asc", "rating_desc")
DEFAULT_ORDER_COLUMN = "id"


@dataclass
class FilterState:
    title: str | None = None
    search: str | None = None
    location: str | None = None
    zipcode: str | None = None
    cuisine_types: list[str] = field(default_factory=list)
    property_types: list[str] = field(default_factory=list)
    bedrooms: str = "any"
    guests: str = "any"
    availability: str = "any"
    check_in: date | None = None
    check_out: date | None = None
    apply_dates: bool = False
    sort: str | None = None

    @classmethod
    def from_query_params(cls, params: Mapping[str, Any]) -> "FilterState":
        """Rebuild filter state from URL query parameters."""

        def text(key):
            value = params.get(key)
            value = value.strip() if isinstance(value, str) else value
            return value or None

        def csv(key):
            raw = params.get(key) or ""
            if isinstance(raw, (list, tuple)):
                parts = raw
            else:
                parts = raw.split(",")
            return [p.strip() for p in parts if p and p.strip()]

        def day(key):
            raw = text(key)
            if raw is None:
                return None
            try:
                return date.fromisoformat(raw[:10])
            except ValueError:
                raise ValidationFailed(f"Invalid date for '{key}'")

        return cls(
            title=text("title"),
            search=text("search"),
            location=text("location"),
            zipcode=text("zipcode"),
            cuisine_types=csv("cuisine_types"),
            property_types=csv("property_types"),
            bedrooms=text("bedrooms") or "any",
            guests=text("guests") or "any",
            availability=text("availability") or "any",
            check_in=day("check_in"),
            check_out=day("check_out"),
            apply_dates=str(params.get("apply_dates", "")).lower() in ("1", "true", "yes"),
            sort=text("sort"),
        )


@dataclass(frozen=True)
class Predicate:
    op: str  # eq | ilike | in | or
    column: str | None = None
    value: Any = None


@dataclass(frozen=True)
class OrderBy:
    column: str
    descending: bool = False


@dataclass
class QueryDescriptor:
    predicates: list[Predicate] = field(default_factory=list)
    order_by: OrderBy = field(default_factory=lambda: OrderBy(DEFAULT_ORDER_COLUMN))


def _contains(text: str) -> str:
    return f"%{text}%"


def compose_order(sort: str | None, price_column: str) -> OrderBy:
    if sort == "price_asc":
        return OrderBy(price_column)
    if sort == "price_desc":
        return OrderBy(price_column, descending=True)
    if sort == "rating_asc":
        return OrderBy("rating")
    if sort == "rating_desc":
        return OrderBy("rating", descending=True)
    return OrderBy(DEFAULT_ORDER_COLUMN)


def compose_food_query(state: FilterState, viewer_id: int | None = None) -> QueryDescriptor:
    predicates: list[Predicate] = []
    if viewer_id is not None:
        # Signed-in hosts also see their own unpublished experiences
        predicates.append(Predicate("or", value=(
            Predicate("eq", "status", ListingStatus.PUBLISHED),
            Predicate("eq", "host_id", viewer_id),
        )))
    else:
        predicates.append(Predicate("eq", "status", ListingStatus.PUBLISHED))
    if state.cuisine_types:
        predicates.append(Predicate("in", "cuisine_type", tuple(state.cuisine_types)))
    title = (state.title or "").strip()
    if title:
        predicates.append(Predicate("ilike", "title", _contains(title)))
    if state.zipcode:
        predicates.append(Predicate("eq", "zipcode", state.zipcode))
    return QueryDescriptor(predicates, compose_order(state.sort, "price_per_person"))


def compose_stay_query(state: FilterState) -> QueryDescriptor:
    predicates: list[Predicate] = [Predicate("eq", "status", ListingStatus.PUBLISHED)]
    if state.zipcode:
        predicates.append(Predicate("eq", "zipcode", state.zipcode))
    if state.location:
        predicates.append(Predicate("ilike", "location_name", _contains(state.location)))
    title = (state.title or "").strip()
    if title:
        predicates.append(Predicate("ilike", "title", _contains(title)))
    search = (state.search or "").strip()
    if search:
        predicates.append(Predicate("or", value=tuple(
            Predicate("ilike", col, _contains(search)) for col in ("title", "description", "location_name")
        )))
    if state.property_types:
        predicates.append(Predicate("in", "property_type", tuple(state.property_types)))
    return QueryDescriptor(predicates, compose_order(state.sort, "price_per_night"))


def _to_clause(model, predicate: Predicate):
    if predicate.op == "or":
        return or_(*(_to_clause(model, p) for p in predicate.value))
    column = getattr(model, predicate.column)
    if predicate.op == "eq":
        return column == predicate.value
    if predicate.op == "ilike":
        return column.ilike(predicate.value)
    if predicate.op == "in":
        return column.in_(list(predicate.value))
    raise ValueError(f"Unsupported predicate op: {predicate.op}")


def apply_descriptor(stmt: Select, model, descriptor: QueryDescriptor) -> Select:
    for predicate in descriptor.predicates:
        stmt = stmt.where(_to_clause(model, predicate))
    column = getattr(model, descriptor.order_by.column)
    stmt = stmt.order_by(column.desc() if descriptor.order_by.descending else column.asc())
    if descriptor.order_by.column != DEFAULT_ORDER_COLUMN:
        # Ties keep a deterministic order
        stmt = stmt.order_by(model.id.asc())
    return stmt
