import logging
import time
from typing import Any, Callable, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from ..config import settings
from ..errors import backend_call
from ..models import FoodExperience, ListingStatus, Stay
from ..schemas import CategoryCountOut
from .normalize import normalize_food_experience, normalize_stay

logger = logging.getLogger(__name__)

# Small in-memory cache: key -> (fetched_at_epoch, value)
_cache: dict[str, Tuple[float, Any]] = {}


def invalidate_cache() -> None:
    _cache.clear()


def _cached(key: str, loader: Callable[[], Any]) -> Any:
    now = time.time()
    cached = _cache.get(key)
    if cached and now - cached[0] < settings.FEATURED_CACHE_TTL_SECONDS:
        return cached[1]
    value = loader()
    _cache[key] = (now, value)
    logger.debug("Catalog cache refreshed for %s", key)
    return value


def featured_stays(db: Session, limit: int = 8) -> list:
    def load():
        stmt = (
            select(Stay)
            .options(selectinload(Stay.images), selectinload(Stay.availability), selectinload(Stay.host))
            .where(Stay.status == ListingStatus.PUBLISHED, Stay.is_featured.is_(True))
            .order_by(Stay.id.asc())
            .limit(limit)
        )
        with backend_call(db, "load featured stays"):
            return [normalize_stay(s) for s in db.scalars(stmt)]

    return _cached(f"featured_stays:{limit}", load)


def featured_food(db: Session, limit: int = 8) -> list:
    def load():
        stmt = (
            select(FoodExperience)
            .options(selectinload(FoodExperience.images), selectinload(FoodExperience.host))
            .where(FoodExperience.status == ListingStatus.PUBLISHED, FoodExperience.is_featured.is_(True))
            .order_by(FoodExperience.id.asc())
            .limit(limit)
        )
        with backend_call(db, "load featured experiences"):
            return [normalize_food_experience(e) for e in db.scalars(stmt)]

    return _cached(f"featured_food:{limit}", load)


def cuisine_counts(db: Session) -> list[CategoryCountOut]:
    """Published experiences per cuisine, most popular first."""

    def load():
        count = func.count(FoodExperience.id)
        stmt = (
            select(FoodExperience.cuisine_type, count)
            .where(FoodExperience.status == ListingStatus.PUBLISHED)
            .group_by(FoodExperience.cuisine_type)
            .order_by(count.desc(), FoodExperience.cuisine_type.asc())
        )
        with backend_call(db, "load categories"):
            return [CategoryCountOut(cuisine_type=c, count=n) for c, n in db.execute(stmt)]

    return _cached("cuisine_counts", load)
