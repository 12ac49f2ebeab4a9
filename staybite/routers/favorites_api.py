from typing import List, Optional

from fastapi import APIRouter, Depends

from ..context import AppContext, get_context, require_user
from ..models import ListingKind
from ..schemas import FavoriteOut
from ..services import favorites

router = APIRouter(prefix="/api/favorites", tags=["favorites"])


@router.get("", response_model=List[FavoriteOut])
def api_list_favorites(kind: Optional[ListingKind] = None, ctx: AppContext = Depends(get_context)):
    user = require_user(ctx)
    return [
        FavoriteOut(item_type=f.item_type, item_id=f.item_id, favorited=True)
        for f in favorites.list_favorites(ctx.db, user.id, kind)
    ]


@router.get("/{kind}/{item_id}", response_model=FavoriteOut)
def api_favorite_state(kind: ListingKind, item_id: int, ctx: AppContext = Depends(get_context)):
    user = require_user(ctx)
    return FavoriteOut(item_type=kind, item_id=item_id, favorited=favorites.is_favorited(ctx.db, user.id, kind, item_id))


@router.post("/{kind}/{item_id}/toggle", response_model=FavoriteOut)
def api_toggle_favorite(kind: ListingKind, item_id: int, ctx: AppContext = Depends(get_context)):
    user = require_user(ctx)
    state = favorites.toggle_favorite(ctx.db, user.id, kind, item_id)
    return FavoriteOut(item_type=kind, item_id=item_id, favorited=state)
