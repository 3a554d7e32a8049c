"""Shared fixtures for the room rates backend tests.

Key principles:
- No Mongo server: repositories are replaced by in-memory fakes exposing the
  same async interface as the Motor-backed ones.
- HTTP tests go through the local ASGI app with httpx.AsyncClient and
  FastAPI dependency_overrides.
- AnyIO is the async runner via pytest-anyio (@pytest.mark.anyio).
"""

from __future__ import annotations

import asyncio
import sys
from datetime import date
from pathlib import Path
from typing import Any, AsyncGenerator, Dict, Iterable, List, Optional, Tuple

import httpx
import pytest
from httpx import ASGITransport

# Ensure backend root is on sys.path so that `server` and `roomrates` are importable
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from roomrates.domain.models import (  # noqa: E402
    CalendarException,
    CalendarIndex,
    InventoryCount,
    Property,
    Reservation,
    ReservationPick,
    RoomCategory,
)
from roomrates.repositories.reservation_repository import INACTIVE_STATUSES  # noqa: E402
from roomrates.repositories.room_repository import merge_stock  # noqa: E402
from roomrates.services.inventory_reconciler import InventoryReconciler  # noqa: E402
from roomrates.services.room_categories import normalize_category  # noqa: E402


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Force pytest-anyio to use asyncio event loop."""

    return "asyncio"


# ---------------------------------------------------------------------------
# In-memory stores
# ---------------------------------------------------------------------------


class InMemoryPropertyRepository:
    def __init__(self, properties: Iterable[Property] = ()) -> None:
        self._properties: Dict[str, Property] = {p.property_id: p for p in properties}

    def add(self, prop: Property) -> None:
        self._properties[prop.property_id] = prop

    async def get_property(self, property_id: str) -> Optional[Property]:
        await asyncio.sleep(0)
        return self._properties.get(property_id)


class InMemoryRoomRepository:
    """rooms: (room_id, raw room_type) pairs per property."""

    def __init__(self) -> None:
        self._rooms: Dict[str, List[Tuple[str, str]]] = {}

    def add_rooms(self, property_id: str, room_type: str, count: int, prefix: Optional[str] = None) -> List[str]:
        rooms = self._rooms.setdefault(property_id, [])
        ids = [f"{prefix or room_type}-{len(rooms) + i + 1}" for i in range(count)]
        rooms.extend((room_id, room_type) for room_id in ids)
        return ids

    async def count_by_category(self, property_id: str) -> List[InventoryCount]:
        await asyncio.sleep(0)
        groups: Dict[str, int] = {}
        for _, room_type in self._rooms.get(property_id, []):
            groups[room_type] = groups.get(room_type, 0) + 1
        return merge_stock([{"_id": k, "total": v} for k, v in sorted(groups.items())])

    async def category_by_room(self, property_id: str) -> Dict[str, str]:
        await asyncio.sleep(0)
        return {room_id: normalize_category(rt) for room_id, rt in self._rooms.get(property_id, [])}


class InMemoryReservationRepository:
    def __init__(self) -> None:
        self._reservations: Dict[str, List[Reservation]] = {}
        self.calls: List[Tuple[str, Any]] = []

    def add(self, property_id: str, reservation: Reservation) -> None:
        self._reservations.setdefault(property_id, []).append(reservation)

    def _all(self, property_id: str) -> List[Reservation]:
        return list(self._reservations.get(property_id, []))

    async def find_covering_date(self, property_id: str, day: date) -> List[Reservation]:
        self.calls.append(("covering", day))
        await asyncio.sleep(0)
        return [
            r for r in self._all(property_id)
            if r.status not in INACTIVE_STATUSES and r.checkin <= day < r.checkout
        ]

    async def find_overlapping(self, property_id: str, start: date, end: date, statuses=None) -> List[Reservation]:
        self.calls.append(("overlapping", (start, end)))
        await asyncio.sleep(0)
        wanted = None if statuses is None else {s.lower() for s in statuses}
        return [
            r for r in self._all(property_id)
            if r.checkin <= end and r.checkout >= start and (wanted is None or r.status in wanted)
        ]

    async def find_within(self, property_id: str, start: date, end: date) -> List[Reservation]:
        self.calls.append(("within", (start, end)))
        await asyncio.sleep(0)
        return [r for r in self._all(property_id) if r.checkin >= start and r.checkout <= end]


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


@pytest.fixture
def make_property():
    """Build a Property; calendar rows are (category_key, date, price, cost)."""

    def _make(
        property_id: str = "hotel-1",
        *,
        categories: Iterable[RoomCategory] = (),
        calendar: Iterable[Tuple[str, date, float, float]] = (),
        commission: Optional[float] = None,
        currency: str = "SAR",
    ) -> Property:
        index = CalendarIndex()
        for key, night, price, cost in calendar:
            index.add(property_id, key, CalendarException(date=night, price=price, cost=cost))
        return Property(
            property_id=property_id,
            currency=currency,
            commission=commission,
            categories=tuple(categories),
            calendar=index,
        )

    return _make


@pytest.fixture
def double_rooms() -> RoomCategory:
    return RoomCategory(
        key="doubleRooms",
        display_name="Double Room",
        base_price=100.0,
        base_cost=50.0,
        commission_override=10.0,
    )


@pytest.fixture
def make_reservation():
    counter = {"n": 0}

    def _make(
        checkin: date,
        checkout: date,
        picks: Iterable[Tuple[Any, int]],
        *,
        status: str = "confirmed",
        rooms: Iterable[Any] = (),
    ) -> Reservation:
        counter["n"] += 1
        return Reservation(
            reservation_id=f"res-{counter['n']}",
            checkin=checkin,
            checkout=checkout,
            status=status,
            assigned_room_ids=tuple(rooms),
            picks=tuple(ReservationPick(label=label, count=count) for label, count in picks),
        )

    return _make


@pytest.fixture
def property_repository() -> InMemoryPropertyRepository:
    return InMemoryPropertyRepository()


@pytest.fixture
def room_repository() -> InMemoryRoomRepository:
    return InMemoryRoomRepository()


@pytest.fixture
def reservation_repository() -> InMemoryReservationRepository:
    return InMemoryReservationRepository()


@pytest.fixture
def reconciler(room_repository, reservation_repository) -> InventoryReconciler:
    return InventoryReconciler(
        room_repository=room_repository,
        reservation_repository=reservation_repository,
    )


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------


@pytest.fixture
async def app_with_overrides(property_repository, reconciler) -> AsyncGenerator[Any, None]:
    """FastAPI app instance whose store dependencies point to the in-memory fakes."""

    from server import app
    from roomrates.routers.inventory import get_inventory_reconciler
    from roomrates.routers.quotes import get_property_repository

    async def override_property_repository():
        return property_repository

    async def override_reconciler():
        return reconciler

    app.dependency_overrides[get_property_repository] = override_property_repository
    app.dependency_overrides[get_inventory_reconciler] = override_reconciler
    try:
        yield app
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
async def async_client(app_with_overrides) -> AsyncGenerator[httpx.AsyncClient, None]:
    transport = ASGITransport(app=app_with_overrides)
    async with httpx.AsyncClient(transport=transport, base_url="http://test", timeout=30.0) as client:
        yield client
