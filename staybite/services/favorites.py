import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import NotFound, backend_call
from ..models import Favorite, FoodExperience, ListingKind, Stay

logger = logging.getLogger(__name__)

LISTING_MODELS = {
    ListingKind.STAY: Stay,
    ListingKind.FOOD_EXPERIENCE: FoodExperience,
}


def _ensure_listing(db: Session, kind: ListingKind, item_id: int) -> None:
    if db.get(LISTING_MODELS[kind], item_id) is None:
        raise NotFound("Listing not found")


def is_favorited(db: Session, user_id: int, kind: ListingKind, item_id: int) -> bool:
    with backend_call(db, "load favorite"):
        found = db.scalar(
            select(Favorite.id).where(Favorite.user_id == user_id, Favorite.item_type == kind, Favorite.item_id == item_id)
        )
    return found is not None


def toggle_favorite(db: Session, user_id: int, kind: ListingKind, item_id: int) -> bool:
    """
    Flip the favorite flag and return the new state.

    Tries the delete first; if nothing was deleted the row is inserted. The
    unique (user, type, item) constraint makes concurrent toggles settle on a
    single row: losing the insert race means the item is already favorited.
    """
    with backend_call(db, "update favorite"):
        _ensure_listing(db, kind, item_id)
        result = db.execute(
            delete(Favorite).where(Favorite.user_id == user_id, Favorite.item_type == kind, Favorite.item_id == item_id)
        )
        if result.rowcount:
            db.commit()
            logger.info("User %s unfavorited %s %s", user_id, kind.value, item_id)
            return False
        db.add(Favorite(user_id=user_id, item_type=kind, item_id=item_id))
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.info("Favorite for user %s on %s %s already exists", user_id, kind.value, item_id)
            return True
    logger.info("User %s favorited %s %s", user_id, kind.value, item_id)
    return True


def list_favorites(db: Session, user_id: int, kind: ListingKind | None = None) -> list[Favorite]:
    stmt = select(Favorite).where(Favorite.user_id == user_id)
    if kind is not None:
        stmt = stmt.where(Favorite.item_type == kind)
    with backend_call(db, "load favorites"):
        return list(db.scalars(stmt.order_by(Favorite.created_at.desc(), Favorite.id.desc())))
