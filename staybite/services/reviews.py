import logging

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, selectinload

from ..errors import Forbidden, NotFound, backend_call
from ..models import ListingKind, ListingStatus, Review
from .catalog import invalidate_cache
from .favorites import LISTING_MODELS

logger = logging.getLogger(__name__)


def _average_rating(kind: ListingKind, item_id: int):
    return (
        select(func.avg(Review.rating))
        .where(Review.target_type == kind, Review.target_id == item_id)
        .scalar_subquery()
    )


def create_review(db: Session, author_id: int, kind: ListingKind, item_id: int, rating: int, comment: str | None = None) -> Review:
    """Record a review and refresh the listing's stored average in the same transaction."""
    model = LISTING_MODELS[kind]
    with backend_call(db, "submit review"):
        listing = db.get(model, item_id)
        if listing is None or listing.status != ListingStatus.PUBLISHED:
            raise NotFound("Listing not found")
        if listing.host_id == author_id:
            raise Forbidden("Hosts cannot review their own listings")
        review = Review(author_id=author_id, target_type=kind, target_id=item_id, rating=rating, comment=(comment or "").strip() or None)
        db.add(review)
        db.flush()
        db.execute(
            update(model)
            .where(model.id == item_id)
            .values(rating=_average_rating(kind, item_id))
            .execution_options(synchronize_session=False)
        )
        db.commit()
        db.refresh(review)
        db.refresh(listing)
    invalidate_cache()
    logger.info("Review %s added to %s %s (avg now %s)", review.id, kind.value, item_id, listing.rating)
    return review


def list_reviews(db: Session, kind: ListingKind, item_id: int, limit: int = 50) -> list[Review]:
    stmt = (
        select(Review)
        .options(selectinload(Review.author))
        .where(Review.target_type == kind, Review.target_id == item_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
        .limit(limit)
    )
    with backend_call(db, "load reviews"):
        return list(db.scalars(stmt))


def review_counts(db: Session, kind: ListingKind, item_ids) -> dict[int, int]:
    ids = list(item_ids)
    if not ids:
        return {}
    stmt = (
        select(Review.target_id, func.count(Review.id))
        .where(Review.target_type == kind, Review.target_id.in_(ids))
        .group_by(Review.target_id)
    )
    with backend_call(db, "load review counts"):
        return {target_id: count for target_id, count in db.execute(stmt)}
