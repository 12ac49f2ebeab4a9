from typing import List

from fastapi import APIRouter, Depends

from ..context import AppContext, get_context, require_user
from ..models import ListingKind, Review
from ..schemas import ReviewIn, ReviewOut
from ..services import reviews

router = APIRouter(prefix="/api/reviews", tags=["reviews"])


def _review_out(review: Review) -> ReviewOut:
    return ReviewOut(
        id=review.id,
        author_id=review.author_id,
        author_name=(review.author.name if review.author and review.author.name else "Guest"),
        target_type=review.target_type,
        target_id=review.target_id,
        rating=review.rating,
        comment=review.comment,
        created_at=review.created_at,
    )


@router.get("/{kind}/{item_id}", response_model=List[ReviewOut])
def api_list_reviews(kind: ListingKind, item_id: int, ctx: AppContext = Depends(get_context)):
    return [_review_out(r) for r in reviews.list_reviews(ctx.db, kind, item_id)]


@router.post("/{kind}/{item_id}", response_model=ReviewOut, status_code=201)
def api_create_review(kind: ListingKind, item_id: int, payload: ReviewIn, ctx: AppContext = Depends(get_context)):
    user = require_user(ctx)
    review = reviews.create_review(ctx.db, user.id, kind, item_id, payload.rating, payload.comment)
    return _review_out(review)
