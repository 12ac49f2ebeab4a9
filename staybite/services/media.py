import logging
import os
import time
from dataclasses import dataclass
from typing import Optional, Protocol

from sqlalchemy import case, func, select, update
from sqlalchemy.orm import Session

from ..config import settings
from ..errors import BackendFailure, NotFound, ValidationFailed, backend_call
from ..models import ListingKind, StayImage, FoodExperienceImage

logger = logging.getLogger(__name__)

# Cloudinary is optional; import lazily
try:
    import cloudinary
    import cloudinary.exceptions
    import cloudinary.uploader
    import cloudinary.utils
except ImportError:  # pragma: no cover - optional dependency
    cloudinary = None  # type: ignore


@dataclass(frozen=True)
class ImageTarget:
    """Where a listing kind keeps its images."""
    bucket: str
    model: type
    fk: str
    placeholder: str


IMAGE_TARGETS = {
    ListingKind.STAY: ImageTarget("stay-images", StayImage, "stay_id", "/images/placeholder-stay.jpg"),
    ListingKind.FOOD_EXPERIENCE: ImageTarget("food-experience-images", FoodExperienceImage, "experience_id", "/images/placeholder-food.jpg"),
}


def _sniff_image_type(data: bytes) -> str | None:
    """Return a lowercase extension if bytes look like a common image, else None."""
    if not data or len(data) < 12:
        return None
    if data.startswith(b"\xFF\xD8\xFF"):
        return "jpg"
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "png"
    if data[:6] in (b"GIF87a", b"GIF89a"):
        return "gif"
    if data.startswith(b"RIFF") and data[8:12] == b"WEBP":
        return "webp"
    return None


# ---------------------------------------------------------------------------
# Object storage backends
# ---------------------------------------------------------------------------

class ObjectStorage(Protocol):
    def upload(self, path: str, data: bytes) -> bool: ...
    def public_url(self, path: str) -> str: ...
    def remove(self, path: str) -> None: ...


class LocalBucket:
    """Stores objects under UPLOAD_DIR, served from STORAGE_PUBLIC_URL."""

    def __init__(self, root: str | None = None, public_url: str | None = None):
        self.root = root or settings.UPLOAD_DIR
        self.base_url = (public_url or settings.STORAGE_PUBLIC_URL).rstrip("/")

    def _fs_path(self, path: str) -> str:
        full = os.path.abspath(os.path.join(self.root, path))
        if not full.startswith(os.path.abspath(self.root) + os.sep):
            raise ValidationFailed("Invalid storage path")
        return full

    def upload(self, path: str, data: bytes) -> bool:
        fpath = self._fs_path(path)
        os.makedirs(os.path.dirname(fpath), exist_ok=True)
        if os.path.exists(fpath):
            return False
        with open(fpath, "wb") as f:
            f.write(data)
        return True

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/{path}"

    def remove(self, path: str) -> None:
        try:
            os.remove(self._fs_path(path))
        except FileNotFoundError:
            logger.warning("Object %s already missing from local bucket", path)


class CloudinaryBucket:
    """Stores objects in Cloudinary, using the storage path as the public id."""

    def __init__(self, url: str):
        cloudinary.config(cloudinary_url=url)

    @staticmethod
    def _public_id(path: str) -> str:
        return os.path.splitext(path)[0]

    def upload(self, path: str, data: bytes) -> bool:
        try:
            res = cloudinary.uploader.upload(
                data,
                public_id=self._public_id(path),
                resource_type="image",
                overwrite=False,
            )
        except cloudinary.exceptions.Error:
            logger.exception("Cloudinary upload failed for %s", path)
            return False
        return bool(res.get("secure_url") or res.get("url"))

    def public_url(self, path: str) -> str:
        url, _ = cloudinary.utils.cloudinary_url(self._public_id(path), secure=True)
        return url

    def remove(self, path: str) -> None:
        try:
            cloudinary.uploader.destroy(self._public_id(path), resource_type="image")
        except cloudinary.exceptions.Error as exc:
            raise OSError(f"Cloudinary delete failed for {path}") from exc


_storage = None


def get_storage() -> ObjectStorage:
    """Cloudinary if configured and installed; local bucket directory otherwise."""
    global _storage
    if _storage is None:
        url = getattr(settings, "CLOUDINARY_URL", "") or os.getenv("CLOUDINARY_URL", "")
        if url and cloudinary is not None:
            _storage = CloudinaryBucket(url)
            logger.info("Using Cloudinary object storage")
        else:
            _storage = LocalBucket()
            logger.info("Using local object storage at %s", settings.UPLOAD_DIR)
    return _storage


# ---------------------------------------------------------------------------
# Paths and URLs
# ---------------------------------------------------------------------------

def build_storage_path(kind: ListingKind, host_id: int, listing_id: int, filename: str, now: float | None = None) -> str:
    """<bucket>/<host>/<listing>/<millis>_<filename>. Same-millisecond uploads of one name can collide."""
    stamp = int((now if now is not None else time.time()) * 1000)
    safe_name = os.path.basename(filename or "image").replace(" ", "_") or "image"
    return f"{IMAGE_TARGETS[kind].bucket}/{host_id}/{listing_id}/{stamp}_{safe_name}"


def resolve_image_url(path: Optional[str], kind: ListingKind = ListingKind.STAY) -> str:
    target = IMAGE_TARGETS[kind]
    if not path:
        return target.placeholder
    if path.startswith("http"):
        return path
    if any(path.startswith(f"{t.bucket}/") for t in IMAGE_TARGETS.values()):
        return get_storage().public_url(path)
    if "/" not in path:
        return get_storage().public_url(f"{target.bucket}/{path}")
    return f"{settings.BASE_URL.rstrip('/')}/{path.lstrip('/')}"


# ---------------------------------------------------------------------------
# Image records
# ---------------------------------------------------------------------------

def _discard(storage: ObjectStorage, path: str) -> None:
    """Best-effort removal of a stored object that no record points at."""
    try:
        storage.remove(path)
    except OSError:
        logger.warning("Could not remove orphaned image %s", path)


def list_images(db: Session, kind: ListingKind, listing_id: int) -> list:
    target = IMAGE_TARGETS[kind]
    fk = getattr(target.model, target.fk)
    stmt = select(target.model).where(fk == listing_id).order_by(target.model.display_order.asc(), target.model.id.asc())
    return list(db.scalars(stmt))


def add_image(
    db: Session,
    storage: ObjectStorage,
    kind: ListingKind,
    listing,
    file_bytes: bytes,
    filename: str,
    display_order: int | None = None,
    make_primary: bool = False,
):
    """Validate, upload, then record an image. The first image of a listing becomes primary."""
    if not file_bytes:
        raise ValidationFailed("Empty upload")
    if len(file_bytes) > settings.UPLOAD_IMAGE_MAX_BYTES:
        raise ValidationFailed(f"Image exceeds {settings.UPLOAD_IMAGE_MAX_MB} MB")
    if not _sniff_image_type(file_bytes):
        raise ValidationFailed("File is not a supported image")

    target = IMAGE_TARGETS[kind]
    fk = getattr(target.model, target.fk)
    path = build_storage_path(kind, listing.host_id, listing.id, filename)

    with backend_call(db, "upload image"):
        if not storage.upload(path, file_bytes):
            raise BackendFailure("Failed to upload image")
    try:
        with backend_call(db, "save image"):
            has_primary = db.scalar(select(func.count()).select_from(target.model).where(fk == listing.id, target.model.is_primary.is_(True)))
            if display_order is None:
                display_order = db.scalar(select(func.count()).select_from(target.model).where(fk == listing.id)) or 0
            record = target.model(image_path=path, display_order=display_order, is_primary=not has_primary)
            setattr(record, target.fk, listing.id)
            db.add(record)
            db.commit()
            db.refresh(record)
    except BackendFailure:
        _discard(storage, path)
        raise
    logger.info("Stored %s image %s for listing %s", kind.value, path, listing.id)

    if make_primary and not record.is_primary:
        record = promote_primary(db, kind, listing.id, record.id)
    return record


def promote_primary(db: Session, kind: ListingKind, listing_id: int, image_id: int):
    """Make one image the cover in a single UPDATE, so at most one primary survives."""
    target = IMAGE_TARGETS[kind]
    model = target.model
    fk = getattr(model, target.fk)
    with backend_call(db, "set primary image"):
        exists = db.scalar(select(model.id).where(model.id == image_id, fk == listing_id))
        if exists is None:
            raise NotFound("Image not found")
        db.execute(
            update(model)
            .where(fk == listing_id)
            .values(is_primary=case((model.id == image_id, True), else_=False))
            .execution_options(synchronize_session=False)
        )
        db.commit()
        image = db.get(model, image_id)
        db.refresh(image)
    return image


def delete_image(db: Session, storage: ObjectStorage, kind: ListingKind, listing_id: int, image_id: int) -> None:
    target = IMAGE_TARGETS[kind]
    model = target.model
    fk = getattr(model, target.fk)
    with backend_call(db, "delete image"):
        image = db.scalar(select(model).where(model.id == image_id, fk == listing_id))
        if image is None:
            raise NotFound("Image not found")
        path, was_primary = image.image_path, image.is_primary
        db.delete(image)
        db.commit()
    _discard(storage, path)
    if was_primary:
        remaining = list_images(db, kind, listing_id)
        if remaining:
            promote_primary(db, kind, listing_id, remaining[0].id)


def reorder_images(db: Session, kind: ListingKind, listing_id: int, ordered_ids: list[int]) -> list:
    """Listed images take positions 0..n-1; any left out keep their relative order after them."""
    current = list_images(db, kind, listing_id)
    images = {img.id: img for img in current}
    unknown = [i for i in ordered_ids if i not in images]
    if unknown:
        raise NotFound(f"Images not found: {unknown}")
    ordered_ids = list(dict.fromkeys(ordered_ids))
    ordered_ids += [img.id for img in current if img.id not in ordered_ids]
    with backend_call(db, "reorder images"):
        for position, image_id in enumerate(ordered_ids):
            images[image_id].display_order = position
        db.commit()
    return list_images(db, kind, listing_id)
