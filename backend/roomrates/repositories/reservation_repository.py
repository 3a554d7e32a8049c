from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from roomrates import config
from roomrates.domain.models import Reservation, ReservationPick
from roomrates.repositories.base_repository import get_collection, store_errors, with_hotel_filter
from roomrates.utils import date_to_utc_midnight, safe_int, to_date


logger = logging.getLogger("mongo_store")

INACTIVE_STATUSES = ("cancelled", "no_show")

_PROJECTION = {
    "checkin_date": 1,
    "checkout_date": 1,
    "reservation_status": 1,
    "roomId": 1,
    "pickedRoomsType": 1,
}


def covering_date_filter(property_id: str, day: date) -> Dict[str, Any]:
    """Active reservations whose stay includes the night of `day`."""

    return with_hotel_filter(
        {
            "reservation_status": {"$nin": list(INACTIVE_STATUSES)},
            "checkin_date": {"$lt": date_to_utc_midnight(day + timedelta(days=1))},
            "checkout_date": {"$gt": date_to_utc_midnight(day)},
        },
        property_id,
    )


def overlapping_filter(
    property_id: str, start: date, end: date, statuses: Optional[Iterable[str]] = None
) -> Dict[str, Any]:
    """Reservations touching the inclusive window [start, end]."""

    flt: Dict[str, Any] = {
        "checkin_date": {"$lt": date_to_utc_midnight(end + timedelta(days=1))},
        "checkout_date": {"$gte": date_to_utc_midnight(start)},
    }
    if statuses is not None:
        flt["reservation_status"] = {"$in": [s.lower() for s in statuses]}
    return with_hotel_filter(flt, property_id)


def within_filter(property_id: str, start: date, end: date) -> Dict[str, Any]:
    """Reservations whose whole stay lies inside [start, end]."""

    return with_hotel_filter(
        {
            "checkin_date": {"$gte": date_to_utc_midnight(start)},
            "checkout_date": {"$lt": date_to_utc_midnight(end + timedelta(days=1))},
        },
        property_id,
    )


def reservation_from_document(doc: Dict[str, Any]) -> Optional[Reservation]:
    try:
        checkin = to_date(doc.get("checkin_date"))
        checkout = to_date(doc.get("checkout_date"))
    except ValueError:
        logger.warning("reservation_without_stay_skipped", extra={"reservation_id": str(doc.get("_id"))})
        return None

    picks: List[ReservationPick] = []
    for item in doc.get("pickedRoomsType") or []:
        if not isinstance(item, dict):
            continue
        label = item.get("room_type", item.get("roomType"))
        picks.append(ReservationPick(label=label, count=safe_int(item.get("count"), 1)))

    room_ids = tuple(None if r is None else str(r) for r in (doc.get("roomId") or []))
    return Reservation(
        reservation_id=str(doc.get("_id")),
        checkin=checkin,
        checkout=checkout,
        status=str(doc.get("reservation_status") or "confirmed").strip().lower(),
        assigned_room_ids=room_ids,
        picks=tuple(picks),
    )


class ReservationRepository:
    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db
        self._col = get_collection(db, config.RESERVATIONS_COLLECTION)

    async def _find(self, operation: str, flt: Dict[str, Any], **details: Any) -> List[Reservation]:
        with store_errors(operation, **details):
            docs = await self._col.find(flt, _PROJECTION).to_list(length=None)
        out: List[Reservation] = []
        for doc in docs:
            reservation = reservation_from_document(doc)
            if reservation is not None:
                out.append(reservation)
        return out

    async def find_covering_date(self, property_id: str, day: date) -> List[Reservation]:
        return await self._find(
            "find_covering_date", covering_date_filter(property_id, day), property_id=property_id, day=day
        )

    async def find_overlapping(
        self, property_id: str, start: date, end: date, statuses: Optional[Iterable[str]] = None
    ) -> List[Reservation]:
        return await self._find(
            "find_overlapping",
            overlapping_filter(property_id, start, end, statuses),
            property_id=property_id,
            start=start,
            end=end,
        )

    async def find_within(self, property_id: str, start: date, end: date) -> List[Reservation]:
        return await self._find(
            "find_within", within_filter(property_id, start, end), property_id=property_id, start=start, end=end
        )
