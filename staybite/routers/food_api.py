from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Query, Request

from ..context import AppContext, get_context
from ..schemas import CategoryCountOut, FeaturedOut, FoodExperienceOut, FoodSessionOut
from ..services import catalog, listings
from ..services.query import FilterState

router = APIRouter(prefix="/api", tags=["food"])


@router.get("/food", response_model=List[FoodExperienceOut])
def api_search_food(request: Request, ctx: AppContext = Depends(get_context)):
    """Query params: title, zipcode, cuisine_types (csv), sort."""
    state = FilterState.from_query_params(request.query_params)
    return listings.search_food(ctx.db, state, viewer_id=ctx.user_id)


@router.get("/food/categories", response_model=List[CategoryCountOut])
def api_food_categories(ctx: AppContext = Depends(get_context)):
    return catalog.cuisine_counts(ctx.db)


@router.get("/food/{experience_id}", response_model=FoodExperienceOut)
def api_get_food(experience_id: int, ctx: AppContext = Depends(get_context)):
    return listings.food_detail(ctx.db, experience_id, ctx.user_id)


@router.get("/food/{experience_id}/sessions", response_model=List[FoodSessionOut])
def api_food_sessions(experience_id: int, day: date, guests: int = Query(1, ge=1), ctx: AppContext = Depends(get_context)):
    sessions = listings.food_sessions(ctx.db, experience_id, day, guests, ctx.user_id)
    return [
        FoodSessionOut(date=s.date, start_time=s.start_time, end_time=s.end_time, available_spots=s.available_spots)
        for s in sessions
    ]


@router.get("/featured", response_model=FeaturedOut)
def api_featured(ctx: AppContext = Depends(get_context)):
    return FeaturedOut(stays=catalog.featured_stays(ctx.db), food_experiences=catalog.featured_food(ctx.db))
