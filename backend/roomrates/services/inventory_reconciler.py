"""Room inventory reconciliation.

Splits reservation demand into *reserved* (picked, no physical room yet) and
*occupied* (at least one physical room assigned) per canonical category and
sets it against the stock counted in the rooms collection.
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from roomrates import config
from roomrates.domain.models import (
    DailyAvailability,
    InventoryCount,
    Reservation,
    RoomTypeSummary,
    total_by_category,
)
from roomrates.errors import InvalidDateWindow
from roomrates.services.room_categories import normalize_category
from roomrates.utils import iter_days, rolling_days, today_utc


logger = logging.getLogger("inventory_reconciler")

CONFIRMED_STATUS = "confirmed"


def tally_reservations(
    reservations: Iterable[Reservation],
    *,
    reserved_statuses: Optional[Iterable[str]] = None,
) -> Tuple[Counter, Counter]:
    """Return (reserved, occupied) unit counts keyed by canonical category.

    A reservation with any assigned room counts every pick as occupied;
    otherwise its picks count as reserved. When `reserved_statuses` is given,
    unassigned reservations outside those statuses are ignored.
    """

    allowed = set(reserved_statuses) if reserved_statuses is not None else None
    reserved: Counter = Counter()
    occupied: Counter = Counter()

    for reservation in reservations:
        assigned = reservation.is_assigned
        if not assigned and allowed is not None and reservation.status not in allowed:
            continue
        bucket = occupied if assigned else reserved
        for pick in reservation.picks:
            bucket[normalize_category(pick.label)] += pick.count

    return reserved, occupied


def build_daily_rows(
    day: date,
    stock: List[InventoryCount],
    reserved: Counter,
    occupied: Counter,
) -> List[DailyAvailability]:
    rows: List[DailyAvailability] = []
    for category, total in total_by_category(stock).items():
        row = DailyAvailability(
            date=day,
            category=category,
            total=total,
            reserved=reserved.get(category, 0),
            occupied=occupied.get(category, 0),
        )
        if row.available < 0:
            logger.warning(
                "inventory_overbooked",
                extra={"date": day.isoformat(), "category": category, "available": row.available},
            )
        rows.append(row)
    return rows


class InventoryReconciler:
    def __init__(self, *, room_repository, reservation_repository) -> None:
        self._rooms = room_repository
        self._reservations = reservation_repository

    # ------------------------------------------------------------------
    # Per-day availability
    # ------------------------------------------------------------------
    async def summarize_window(self, property_id: str, start: date, end: date) -> List[DailyAvailability]:
        """Daily availability for every date of [start, end] (end inclusive)."""

        if end < start:
            raise InvalidDateWindow(
                "end must not be before start",
                details={"start": start.isoformat(), "end": end.isoformat()},
            )
        return await self._summarize_days(property_id, list(iter_days(start, end)))

    async def summarize_rolling(
        self,
        property_id: str,
        start: Optional[date] = None,
        day_count: Optional[int] = None,
    ) -> List[DailyAvailability]:
        """Daily availability for `day_count` consecutive dates from `start` (default today)."""

        first = start or today_utc()
        count = config.ROLLING_WINDOW_DAYS if day_count is None else day_count
        if count < 1:
            raise InvalidDateWindow("day_count must be at least 1", details={"day_count": count})
        return await self._summarize_days(property_id, rolling_days(first, count))

    async def _summarize_days(self, property_id: str, days: List[date]) -> List[DailyAvailability]:
        stock = await self._rooms.count_by_category(property_id)

        # One task per date. gather does not cancel siblings on failure, so a
        # failing date or a cancelled caller drops every fetch still in flight.
        tasks = [asyncio.ensure_future(self._summarize_day(property_id, day, stock)) for day in days]
        try:
            per_day = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        rows = [row for day_rows in per_day for row in day_rows]
        rows.sort(key=lambda r: r.date)
        logger.info(
            "inventory_window_summarized",
            extra={"property_id": property_id, "dates": len(days), "rows": len(rows)},
        )
        return rows

    async def _summarize_day(
        self, property_id: str, day: date, stock: List[InventoryCount]
    ) -> List[DailyAvailability]:
        reservations = await self._reservations.find_covering_date(property_id, day)
        reserved, occupied = tally_reservations(r for r in reservations if r.covers(day))
        return build_daily_rows(day, stock, reserved, occupied)

    # ------------------------------------------------------------------
    # Window reports
    # ------------------------------------------------------------------
    async def summarize_reserved(self, property_id: str, start: date, end: date) -> List[RoomTypeSummary]:
        """Reserved/occupied split for stays lying inside [start, end].

        Reserved counts only confirmed reservations without rooms; occupied
        counts any reservation with an assigned room, whatever its status.
        """

        if end < start:
            raise InvalidDateWindow(
                "end must not be before start",
                details={"start": start.isoformat(), "end": end.isoformat()},
            )
        stock = await self._rooms.count_by_category(property_id)
        reservations = await self._reservations.find_within(property_id, start, end)
        reserved, occupied = tally_reservations(reservations, reserved_statuses=[CONFIRMED_STATUS])
        return _summaries(stock, reserved, occupied, start, end)

    async def summarize_snapshot(self, property_id: str, checkin: date, checkout: date) -> List[RoomTypeSummary]:
        """Current-state split keyed by each physical room's own category.

        Occupied counts assigned rooms under the category of the room itself;
        reserved counts unassigned confirmed picks under their normalized label.
        """

        if checkout < checkin:
            raise InvalidDateWindow(
                "checkout must not be before checkin",
                details={"checkin": checkin.isoformat(), "checkout": checkout.isoformat()},
            )
        stock, room_categories, reservations = await asyncio.gather(
            self._rooms.count_by_category(property_id),
            self._rooms.category_by_room(property_id),
            self._reservations.find_overlapping(property_id, checkin, checkout),
        )

        reserved: Counter = Counter()
        occupied: Counter = Counter()
        for reservation in reservations:
            if reservation.is_assigned:
                for room_id in reservation.assigned_room_ids:
                    category = room_categories.get(str(room_id)) if room_id is not None else None
                    if category is not None:
                        occupied[category] += 1
            elif reservation.status == CONFIRMED_STATUS:
                for pick in reservation.picks:
                    reserved[normalize_category(pick.label)] += pick.count

        return _summaries(stock, reserved, occupied, checkin, checkout)


def _summaries(
    stock: List[InventoryCount],
    reserved: Dict[str, int],
    occupied: Dict[str, int],
    start: date,
    end: date,
) -> List[RoomTypeSummary]:
    return [
        RoomTypeSummary(
            category=category,
            total=total,
            reserved=reserved.get(category, 0),
            occupied=occupied.get(category, 0),
            start=start,
            end=end,
        )
        for category, total in total_by_category(stock).items()
    ]
