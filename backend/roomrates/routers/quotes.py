from __future__ import annotations

from datetime import date
from typing import Any, Dict

from fastapi import APIRouter, Depends, Query

from roomrates import config
from roomrates.db import get_db
from roomrates.domain.models import Property, Stay
from roomrates.errors import AppError, InvalidDateWindow, PropertyNotFound
from roomrates.repositories.property_repository import PropertyRepository
from roomrates.schemas import CalendarDayOut, DraftRequest, QuoteRequest, RangeAvailabilityOut
from roomrates.services.calendar_resolver import price_calendar
from roomrates.services.pricing_quote_engine import check_range_available, quote, quote_stay
from roomrates.services.reservation_draft import DraftCustomer, build_reservation_draft


router = APIRouter(prefix="/api", tags=["quotes"])


async def get_property_repository(db=Depends(get_db)) -> PropertyRepository:
    return PropertyRepository(db)


async def _load_property(repo, property_id: str) -> Property:
    prop = await repo.get_property(property_id)
    if prop is None:
        raise PropertyNotFound(property_id)
    return prop


@router.post("/quotes")
async def create_quote(
    payload: QuoteRequest,
    repo=Depends(get_property_repository),
) -> Dict[str, Any]:
    result = await quote(repo, payload.property_id, payload.category_key, payload.checkin, payload.checkout)
    return result.to_dict()


@router.post("/quotes/availability", response_model=RangeAvailabilityOut)
async def quote_availability(
    payload: QuoteRequest,
    repo=Depends(get_property_repository),
):
    prop = await _load_property(repo, payload.property_id)
    result = check_range_available(prop, payload.category_key, Stay(checkin=payload.checkin, checkout=payload.checkout))
    return RangeAvailabilityOut(available=result.available, blocked_on=result.blocked_on)


@router.post("/quotes/draft")
async def create_reservation_draft(
    payload: DraftRequest,
    repo=Depends(get_property_repository),
) -> Dict[str, Any]:
    """Price the stay and return the reservation record the booking flow would store."""

    prop = await _load_property(repo, payload.property_id)
    result = quote_stay(prop, payload.category_key, Stay(checkin=payload.checkin, checkout=payload.checkout))
    if not result.available:
        raise AppError(
            status_code=409,
            code="quote_unavailable",
            message="Stay cannot be booked",
            details=result.to_dict(),
        )

    customer = DraftCustomer(**payload.customer.model_dump())
    draft = build_reservation_draft(
        prop,
        result,
        customer,
        display_name=payload.display_name,
        booking_source=payload.booking_source,
    )
    draft["checkin_date"] = draft["checkin_date"].isoformat()
    draft["checkout_date"] = draft["checkout_date"].isoformat()
    return draft


@router.get("/properties/{property_id}/price-calendar", response_model=list[CalendarDayOut])
async def get_price_calendar(
    property_id: str,
    category_key: str = Query(..., min_length=1),
    start: date = Query(...),
    end: date = Query(...),
    repo=Depends(get_property_repository),
):
    if end < start or (end - start).days + 1 > config.MAX_WINDOW_DAYS:
        raise InvalidDateWindow(
            "window must be ordered and at most MAX_WINDOW_DAYS long",
            details={"start": start.isoformat(), "end": end.isoformat()},
        )
    prop = await _load_property(repo, property_id)
    return [
        CalendarDayOut(date=d.date, price=d.price, cost=d.cost, blocked=d.blocked)
        for d in price_calendar(prop, category_key, start, end)
    ]
