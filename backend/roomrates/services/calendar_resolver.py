from __future__ import annotations

from datetime import date
from typing import List, Tuple

from roomrates.domain.models import CalendarDay, Property, RoomCategory
from roomrates.errors import CategoryNotFound
from roomrates.utils import iter_days


def resolve_night(prop: Property, category: RoomCategory, night: date) -> Tuple[float, float]:
    """(price, cost) for one night: the calendar exception if any, else category base."""

    exception = prop.calendar.get(prop.property_id, category.key, night)
    if exception is None:
        return category.base_price, category.base_cost
    return exception.price, exception.cost


def resolve(prop: Property, category_key: str, night: date) -> Tuple[float, float]:
    category = prop.find_category(category_key)
    if category is None:
        raise CategoryNotFound(prop.property_id, category_key)
    return resolve_night(prop, category, night)


def price_calendar(prop: Property, category_key: str, start: date, end: date) -> List[CalendarDay]:
    """Resolved price/cost for every date of the inclusive window [start, end]."""

    category = prop.find_category(category_key)
    if category is None:
        raise CategoryNotFound(prop.property_id, category_key)

    days: List[CalendarDay] = []
    for day in iter_days(start, end):
        price, cost = resolve_night(prop, category, day)
        days.append(CalendarDay(date=day, price=price, cost=cost))
    return days
