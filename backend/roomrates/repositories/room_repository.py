from __future__ import annotations

from typing import Dict, List

from motor.motor_asyncio import AsyncIOMotorDatabase

from roomrates import config
from roomrates.domain.models import InventoryCount
from roomrates.repositories.base_repository import get_collection, store_errors, with_hotel_filter
from roomrates.services.room_categories import normalize_category


def stock_pipeline(property_id: str) -> List[dict]:
    return [
        {"$match": with_hotel_filter({}, property_id)},
        {"$group": {"_id": "$room_type", "total": {"$sum": 1}}},
    ]


def merge_stock(groups: List[dict]) -> List[InventoryCount]:
    """Fold raw room_type groups into canonical categories, keeping first-seen order."""

    totals: Dict[str, int] = {}
    for group in groups:
        category = normalize_category(group.get("_id"))
        if category is None:
            continue
        totals[category] = totals.get(category, 0) + int(group.get("total") or 0)
    return [InventoryCount(category=c, total=t) for c, t in totals.items()]


class RoomRepository:
    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db
        self._col = get_collection(db, config.ROOMS_COLLECTION)

    async def count_by_category(self, property_id: str) -> List[InventoryCount]:
        with store_errors("count_by_category", property_id=property_id):
            groups = await self._col.aggregate(stock_pipeline(property_id)).to_list(length=None)
        # $group output order is unspecified
        groups.sort(key=lambda g: str(g.get("_id")))
        return merge_stock(groups)

    async def category_by_room(self, property_id: str) -> Dict[str, str]:
        with store_errors("category_by_room", property_id=property_id):
            docs = await self._col.find(with_hotel_filter({}, property_id), {"room_type": 1}).to_list(length=None)
        return {
            str(doc["_id"]): normalize_category(doc.get("room_type"))
            for doc in docs
            if doc.get("room_type") is not None
        }
