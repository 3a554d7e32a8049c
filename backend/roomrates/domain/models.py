"""Value types shared by the pricing and inventory services.

Everything here is immutable once built. Repositories construct these from
store documents; services only read them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, Iterator, List, Optional, Tuple


# ---- Property configuration ----


def is_blocked(price: float, cost: float) -> bool:
    # Zero on either side closes the night, whatever the other value is.
    return price == 0 or cost == 0


@dataclass(frozen=True)
class RoomCategory:
    key: str
    display_name: str
    base_price: float
    base_cost: float
    commission_override: Optional[float] = None

    def __post_init__(self) -> None:
        if self.base_price < 0 or self.base_cost < 0:
            raise ValueError(f"room category '{self.key}': base price/cost must be non-negative")
        if self.commission_override is not None and not 0 <= self.commission_override <= 100:
            raise ValueError(f"room category '{self.key}': commission must be within [0, 100]")


@dataclass(frozen=True)
class CalendarException:
    date: date
    price: float
    cost: float

    @property
    def blocks(self) -> bool:
        return is_blocked(self.price, self.cost)


class CalendarIndex:
    """(property, category, night) -> CalendarException lookup."""

    def __init__(self) -> None:
        self._entries: Dict[Tuple[str, str, date], CalendarException] = {}

    def add(self, property_id: str, category_key: str, exception: CalendarException) -> None:
        # Last write wins; a (category, date) pair holds at most one exception.
        self._entries[(property_id, category_key, exception.date)] = exception

    def get(self, property_id: str, category_key: str, night: date) -> Optional[CalendarException]:
        return self._entries.get((property_id, category_key, night))

    def __len__(self) -> int:
        return len(self._entries)


@dataclass(frozen=True)
class Property:
    property_id: str
    currency: str
    commission: Optional[float] = None
    categories: Tuple[RoomCategory, ...] = ()
    calendar: CalendarIndex = field(default_factory=CalendarIndex, compare=False)
    belongs_to: Optional[str] = None

    def find_category(self, category_key: str) -> Optional[RoomCategory]:
        for category in self.categories:
            if category.key == category_key:
                return category
        return None


# ---- Stays and quotes ----


@dataclass(frozen=True)
class Stay:
    """Half-open [checkin, checkout) at day granularity."""

    checkin: date
    checkout: date

    @property
    def nights(self) -> int:
        # checkout <= checkin is coerced to one night, never rejected
        return max(1, (self.checkout - self.checkin).days)

    @property
    def effective_checkout(self) -> date:
        """checkin + nights; equals checkout for any well-formed stay."""
        return self.checkin + timedelta(days=self.nights)

    def night_dates(self) -> Iterator[date]:
        for offset in range(self.nights):
            yield self.checkin + timedelta(days=offset)


@dataclass(frozen=True)
class NightlyLine:
    date: date
    price: float
    cost: float
    commission_rate: float
    total_with_commission: float
    total_without_commission: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "price": self.price,
            "cost": self.cost,
            "commission_rate": self.commission_rate,
            "total_with_commission": self.total_with_commission,
            "total_without_commission": self.total_without_commission,
        }


@dataclass(frozen=True)
class Quote:
    property_id: str
    category_key: str
    checkin: date
    checkout: date
    lines: Tuple[NightlyLine, ...]
    nights: int
    total_with_commission: float
    total_without_commission: float
    currency: str
    per_night: float = 0.0
    commission_total: float = 0.0
    cost_total: float = 0.0

    available = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "available": True,
            "property_id": self.property_id,
            "category_key": self.category_key,
            "checkin": self.checkin.isoformat(),
            "checkout": self.checkout.isoformat(),
            "nights": self.nights,
            "lines": [line.to_dict() for line in self.lines],
            "total_with_commission": self.total_with_commission,
            "total_without_commission": self.total_without_commission,
            "per_night": self.per_night,
            "commission_total": self.commission_total,
            "cost_total": self.cost_total,
            "currency": self.currency,
        }


@dataclass(frozen=True)
class Unavailable:
    """Normal negative quote result, not an error."""

    reason: str
    date: Optional[date] = None

    available = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "available": False,
            "reason": self.reason,
            "date": self.date.isoformat() if self.date else None,
        }


BLOCKED_BY_CALENDAR = "blocked_by_calendar"
ROOM_NOT_FOUND = "room_not_found"


@dataclass(frozen=True)
class RangeAvailability:
    available: bool
    blocked_on: Optional[date] = None


@dataclass(frozen=True)
class CalendarDay:
    date: date
    price: float
    cost: float

    @property
    def blocked(self) -> bool:
        return is_blocked(self.price, self.cost)


# ---- Reservations and inventory ----


@dataclass(frozen=True)
class ReservationPick:
    label: Any
    count: int = 1


@dataclass(frozen=True)
class Reservation:
    reservation_id: str
    checkin: date
    checkout: date
    status: str
    assigned_room_ids: Tuple[Any, ...] = ()
    picks: Tuple[ReservationPick, ...] = ()

    @property
    def is_assigned(self) -> bool:
        return any(room_id is not None for room_id in self.assigned_room_ids)

    def covers(self, day: date) -> bool:
        return self.checkin <= day < self.checkout


@dataclass(frozen=True)
class InventoryCount:
    category: str
    total: int


@dataclass(frozen=True)
class DailyAvailability:
    date: date
    category: str
    total: int
    reserved: int
    occupied: int

    @property
    def available(self) -> int:
        # Negative under overbooking; never clamped.
        return self.total - self.reserved - self.occupied

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "category": self.category,
            "total": self.total,
            "reserved": self.reserved,
            "occupied": self.occupied,
            "available": self.available,
        }


@dataclass(frozen=True)
class RoomTypeSummary:
    category: str
    total: int
    reserved: int
    occupied: int
    start: date
    end: date

    @property
    def available(self) -> int:
        return self.total - self.reserved - self.occupied

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "total": self.total,
            "reserved": self.reserved,
            "occupied": self.occupied,
            "available": self.available,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
        }


def total_by_category(counts: List[InventoryCount]) -> Dict[str, int]:
    out: Dict[str, int] = {}
    for count in counts:
        out[count.category] = out.get(count.category, 0) + count.total
    return out
