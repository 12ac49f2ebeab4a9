from typing import List

from fastapi import APIRouter, Depends, File, Form, UploadFile

from ..context import AppContext, get_context, require_user
from ..models import ListingKind
from ..schemas import (
    AvailabilityIn,
    FoodCreateIn,
    FoodExperienceOut,
    FoodUpdateIn,
    HostListingOut,
    ImageOut,
    ReorderIn,
    StatusIn,
    StayCreateIn,
    StayOut,
    StayUpdateIn,
)
from ..services import listings, media
from ..services.normalize import normalize_food_experience, normalize_host_listing, normalize_image, normalize_stay

router = APIRouter(prefix="/api/host", tags=["host"])


# ==== Listings ====

@router.get("/listings", response_model=List[HostListingOut])
def api_host_listings(ctx: AppContext = Depends(get_context)):
    user = require_user(ctx)
    return listings.host_dashboard(ctx.db, user.id)


@router.post("/stays", response_model=StayOut, status_code=201)
def api_create_stay(payload: StayCreateIn, ctx: AppContext = Depends(get_context)):
    user = require_user(ctx)
    stay = listings.create_listing(ctx.db, user, ListingKind.STAY, payload.model_dump())
    return normalize_stay(stay)


@router.patch("/stays/{stay_id}", response_model=StayOut)
def api_update_stay(stay_id: int, payload: StayUpdateIn, ctx: AppContext = Depends(get_context)):
    user = require_user(ctx)
    stay = listings.update_listing(ctx.db, user.id, ListingKind.STAY, stay_id, payload.model_dump(exclude_unset=True))
    return normalize_stay(stay)


@router.post("/food", response_model=FoodExperienceOut, status_code=201)
def api_create_food(payload: FoodCreateIn, ctx: AppContext = Depends(get_context)):
    user = require_user(ctx)
    exp = listings.create_listing(ctx.db, user, ListingKind.FOOD_EXPERIENCE, payload.model_dump())
    return normalize_food_experience(exp)


@router.patch("/food/{experience_id}", response_model=FoodExperienceOut)
def api_update_food(experience_id: int, payload: FoodUpdateIn, ctx: AppContext = Depends(get_context)):
    user = require_user(ctx)
    exp = listings.update_listing(
        ctx.db, user.id, ListingKind.FOOD_EXPERIENCE, experience_id, payload.model_dump(exclude_unset=True)
    )
    return normalize_food_experience(exp)


@router.delete("/{kind}/{listing_id}")
def api_delete_listing(kind: ListingKind, listing_id: int, ctx: AppContext = Depends(get_context)):
    user = require_user(ctx)
    listings.delete_listing(ctx.db, ctx.storage, user.id, kind, listing_id)
    return {"ok": True}


@router.put("/{kind}/{listing_id}/status", response_model=HostListingOut)
def api_set_status(kind: ListingKind, listing_id: int, payload: StatusIn, ctx: AppContext = Depends(get_context)):
    user = require_user(ctx)
    listing = listings.set_status(ctx.db, user.id, kind, listing_id, payload.status)
    return normalize_host_listing(listing, kind)


@router.put("/{kind}/{listing_id}/availability")
def api_set_availability(kind: ListingKind, listing_id: int, payload: AvailabilityIn, ctx: AppContext = Depends(get_context)):
    user = require_user(ctx)
    days = listings.upsert_availability(
        ctx.db,
        user.id,
        kind,
        listing_id,
        payload.start_date,
        payload.end_date,
        is_available=payload.is_available,
        price_override=payload.price_override,
        available_spots=payload.available_spots,
        start_time=payload.start_time,
        end_time=payload.end_time,
    )
    return {"ok": True, "days": days}


# ==== Images ====

@router.post("/{kind}/{listing_id}/images", response_model=ImageOut, status_code=201)
async def api_upload_image(
    kind: ListingKind,
    listing_id: int,
    image: UploadFile = File(...),
    make_primary: bool = Form(False),
    ctx: AppContext = Depends(get_context),
):
    user = require_user(ctx)
    listing = listings.get_owned_listing(ctx.db, user.id, kind, listing_id)
    data = await image.read()
    record = media.add_image(ctx.db, ctx.storage, kind, listing, data, image.filename or "image", make_primary=make_primary)
    return normalize_image(record, kind)


@router.put("/{kind}/{listing_id}/images/order", response_model=List[ImageOut])
def api_reorder_images(kind: ListingKind, listing_id: int, payload: ReorderIn, ctx: AppContext = Depends(get_context)):
    user = require_user(ctx)
    listings.get_owned_listing(ctx.db, user.id, kind, listing_id)
    return [normalize_image(img, kind) for img in media.reorder_images(ctx.db, kind, listing_id, payload.image_ids)]


@router.put("/{kind}/{listing_id}/images/{image_id}/primary", response_model=ImageOut)
def api_promote_image(kind: ListingKind, listing_id: int, image_id: int, ctx: AppContext = Depends(get_context)):
    user = require_user(ctx)
    listings.get_owned_listing(ctx.db, user.id, kind, listing_id)
    return normalize_image(media.promote_primary(ctx.db, kind, listing_id, image_id), kind)


@router.delete("/{kind}/{listing_id}/images/{image_id}")
def api_delete_image(kind: ListingKind, listing_id: int, image_id: int, ctx: AppContext = Depends(get_context)):
    user = require_user(ctx)
    listings.get_owned_listing(ctx.db, user.id, kind, listing_id)
    media.delete_image(ctx.db, ctx.storage, kind, listing_id, image_id)
    return {"ok": True}
