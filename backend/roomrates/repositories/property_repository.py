from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from roomrates import config
from roomrates.domain.models import CalendarException, CalendarIndex, Property, RoomCategory
from roomrates.repositories.base_repository import get_collection, store_errors
from roomrates.utils import maybe_object_id, safe_float, to_date


logger = logging.getLogger("mongo_store")


def _percentage(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    rate = safe_float(value)
    if not 0 <= rate <= 100:
        return None
    return rate


def category_from_document(detail: Dict[str, Any]) -> Optional[RoomCategory]:
    key = detail.get("roomType") or detail.get("room_type")
    if not key:
        return None
    price = detail.get("price") or {}
    return RoomCategory(
        key=key,
        display_name=detail.get("displayName") or detail.get("display_name") or key,
        base_price=max(0.0, safe_float(price.get("basePrice") if isinstance(price, dict) else price)),
        base_cost=max(0.0, safe_float(detail.get("defaultCost"))),
        commission_override=_percentage(detail.get("roomCommission")),
    )


def property_from_document(doc: Dict[str, Any]) -> Property:
    """Map a property document (roomCountDetails + pricingRate calendars) to a Property."""

    property_id = str(doc["_id"])
    categories: List[RoomCategory] = []
    calendar = CalendarIndex()

    for detail in doc.get("roomCountDetails") or []:
        if not isinstance(detail, dict):
            continue
        category = category_from_document(detail)
        if category is None:
            continue
        categories.append(category)

        for row in detail.get("pricingRate") or []:
            try:
                night = to_date(row.get("calendarDate"))
            except (AttributeError, ValueError):
                logger.warning(
                    "calendar_row_skipped",
                    extra={"property_id": property_id, "category_key": category.key},
                )
                continue
            calendar.add(
                property_id,
                category.key,
                CalendarException(
                    date=night,
                    price=safe_float(row.get("price")),
                    cost=safe_float(row.get("rootPrice")),
                ),
            )

    commission = doc.get("commission")
    belongs_to = doc.get("belongsTo")
    return Property(
        property_id=property_id,
        currency=str(doc.get("currency") or config.DEFAULT_CURRENCY).upper(),
        commission=None if commission is None else safe_float(commission),
        categories=tuple(categories),
        calendar=calendar,
        belongs_to=str(belongs_to) if belongs_to else None,
    )


class PropertyRepository:
    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db
        self._col = get_collection(db, config.PROPERTIES_COLLECTION)

    async def get_property(self, property_id: str) -> Optional[Property]:
        with store_errors("get_property", property_id=property_id):
            doc = await self._col.find_one(
                {"_id": maybe_object_id(property_id)},
                {"currency": 1, "commission": 1, "belongsTo": 1, "roomCountDetails": 1},
            )
        if doc is None:
            return None
        return property_from_document(doc)
