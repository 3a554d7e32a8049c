from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from roomrates import config
from roomrates.db import get_db
from roomrates.errors import InvalidDateWindow
from roomrates.repositories.reservation_repository import ReservationRepository
from roomrates.repositories.room_repository import RoomRepository
from roomrates.schemas import DailyAvailabilityOut, NormalizedCategoryOut, RoomTypeSummaryOut
from roomrates.services.inventory_reconciler import InventoryReconciler
from roomrates.services.room_categories import normalize_category


router = APIRouter(prefix="/api", tags=["inventory"])


async def get_inventory_reconciler(db=Depends(get_db)) -> InventoryReconciler:
    return InventoryReconciler(
        room_repository=RoomRepository(db),
        reservation_repository=ReservationRepository(db),
    )


def _check_window(start: date, end: date) -> None:
    if end < start or (end - start).days + 1 > config.MAX_WINDOW_DAYS:
        raise InvalidDateWindow(
            "window must be ordered and at most MAX_WINDOW_DAYS long",
            details={"start": start.isoformat(), "end": end.isoformat(), "max_days": config.MAX_WINDOW_DAYS},
        )


@router.get("/properties/{property_id}/inventory/window", response_model=list[DailyAvailabilityOut])
async def inventory_window(
    property_id: str,
    start: date = Query(...),
    end: date = Query(...),
    reconciler: InventoryReconciler = Depends(get_inventory_reconciler),
):
    _check_window(start, end)
    rows = await reconciler.summarize_window(property_id, start, end)
    return [DailyAvailabilityOut(**row.to_dict()) for row in rows]


@router.get("/properties/{property_id}/inventory/rolling", response_model=list[DailyAvailabilityOut])
async def inventory_rolling(
    property_id: str,
    start: Optional[date] = Query(None),
    days: int = Query(config.ROLLING_WINDOW_DAYS, ge=1),
    reconciler: InventoryReconciler = Depends(get_inventory_reconciler),
):
    if days > config.MAX_WINDOW_DAYS:
        raise InvalidDateWindow("days exceeds MAX_WINDOW_DAYS", details={"days": days})
    rows = await reconciler.summarize_rolling(property_id, start, days)
    return [DailyAvailabilityOut(**row.to_dict()) for row in rows]


@router.get("/properties/{property_id}/inventory/reserved-summary", response_model=list[RoomTypeSummaryOut])
async def inventory_reserved_summary(
    property_id: str,
    start: date = Query(...),
    end: date = Query(...),
    reconciler: InventoryReconciler = Depends(get_inventory_reconciler),
):
    _check_window(start, end)
    rows = await reconciler.summarize_reserved(property_id, start, end)
    return [RoomTypeSummaryOut(**row.to_dict()) for row in rows]


@router.get("/properties/{property_id}/inventory/snapshot", response_model=list[RoomTypeSummaryOut])
async def inventory_snapshot(
    property_id: str,
    checkin: date = Query(...),
    checkout: date = Query(...),
    reconciler: InventoryReconciler = Depends(get_inventory_reconciler),
):
    _check_window(checkin, checkout)
    rows = await reconciler.summarize_snapshot(property_id, checkin, checkout)
    return [RoomTypeSummaryOut(**row.to_dict()) for row in rows]


@router.get("/room-categories/normalize", response_model=NormalizedCategoryOut)
async def normalize_room_category(label: str = Query(..., min_length=1)):
    return NormalizedCategoryOut(label=label, category=normalize_category(label))
