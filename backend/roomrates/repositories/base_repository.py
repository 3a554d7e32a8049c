from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator

from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from roomrates.errors import DataSourceFailure
from roomrates.utils import maybe_object_id


logger = logging.getLogger("mongo_store")


def get_collection(db: AsyncIOMotorDatabase, name: str) -> AsyncIOMotorCollection:
    """Return a Motor collection from the given database.

    This is the only place where repositories should obtain collections.
    """

    return db[name]


def with_hotel_filter(filter_dict: Dict[str, Any], property_id: str) -> Dict[str, Any]:
    """Scope a Mongo filter to one property (`hotelId`)."""

    if not property_id:
        raise ValueError("property_id is required for property-scoped queries")

    f = dict(filter_dict or {})
    f.setdefault("hotelId", maybe_object_id(property_id))
    return f


@contextmanager
def store_errors(operation: str, **details: Any) -> Iterator[None]:
    """Translate driver errors into DataSourceFailure. No retry happens here."""

    try:
        yield
    except PyMongoError as exc:
        logger.exception("store_operation_failed", extra={"operation": operation, **details})
        raise DataSourceFailure(operation, details={k: str(v) for k, v in details.items()}) from exc
