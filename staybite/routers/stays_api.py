from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Request

from ..context import AppContext, get_context
from ..schemas import AvailabilityDayOut, RangeQuoteOut, StayOut
from ..services import listings
from ..services.query import FilterState

router = APIRouter(prefix="/api/stays", tags=["stays"])


@router.get("", response_model=List[StayOut])
def api_search_stays(request: Request, ctx: AppContext = Depends(get_context)):
    """
    Query params: title, search, location, zipcode, property_types (csv),
    bedrooms, guests, availability, check_in, check_out, apply_dates, sort.
    """
    state = FilterState.from_query_params(request.query_params)
    return listings.search_stays(ctx.db, state)


@router.get("/{stay_id}", response_model=StayOut)
def api_get_stay(stay_id: int, ctx: AppContext = Depends(get_context)):
    return listings.stay_detail(ctx.db, stay_id, ctx.user_id)


@router.get("/{stay_id}/availability", response_model=List[AvailabilityDayOut])
def api_stay_availability(stay_id: int, ctx: AppContext = Depends(get_context)):
    return listings.stay_availability(ctx.db, stay_id, ctx.user_id)


@router.get("/{stay_id}/quote", response_model=RangeQuoteOut)
def api_quote_stay(stay_id: int, check_in: date, check_out: date, ctx: AppContext = Depends(get_context)):
    quote = listings.quote_stay(ctx.db, stay_id, check_in, check_out, ctx.user_id)
    return RangeQuoteOut(
        check_in=quote.start,
        check_out=quote.end,
        bookable=quote.bookable,
        nights=quote.nights,
        nightly_prices=quote.nightly_prices,
        total=quote.total,
    )
