from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional, Union

from roomrates.domain.models import (
    BLOCKED_BY_CALENDAR,
    ROOM_NOT_FOUND,
    NightlyLine,
    Property,
    Quote,
    RangeAvailability,
    Stay,
    Unavailable,
    is_blocked,
)
from roomrates.errors import PropertyNotFound
from roomrates.services.calendar_resolver import resolve_night
from roomrates.services.commission import compute_commission, resolve_commission_rate
from roomrates.utils import round2


logger = logging.getLogger("pricing_quote_engine")

QuoteResult = Union[Quote, Unavailable]


def quote_stay(prop: Property, category_key: str, stay: Stay) -> QuoteResult:
    """Price a stay night by night for one room category.

    - Unknown category -> Unavailable("room_not_found") before any date is touched.
    - A night whose resolved price or cost is zero stops the walk and yields
      Unavailable("blocked_by_calendar", night). Nights priced before it are dropped.
    - Each line is rounded on its own; the totals are rounded once over the
      unrounded nightly values, so sum(lines) may differ from the total by a cent.
    """

    category = prop.find_category(category_key)
    if category is None:
        logger.info(
            "quote_category_not_found",
            extra={"property_id": prop.property_id, "category_key": category_key},
        )
        return Unavailable(reason=ROOM_NOT_FOUND)

    rate = resolve_commission_rate(category, prop)

    lines: List[NightlyLine] = []
    sum_with = 0.0
    sum_without = 0.0
    sum_cost = 0.0

    for night in stay.night_dates():
        price, cost = resolve_night(prop, category, night)
        if is_blocked(price, cost):
            logger.info(
                "quote_blocked_by_calendar",
                extra={
                    "property_id": prop.property_id,
                    "category_key": category_key,
                    "blocked_on": night.isoformat(),
                    "nights_priced_before_block": len(lines),
                },
            )
            return Unavailable(reason=BLOCKED_BY_CALENDAR, date=night)

        with_commission = price + compute_commission(cost, rate)
        sum_with += with_commission
        sum_without += price
        sum_cost += cost

        lines.append(
            NightlyLine(
                date=night,
                price=price,
                cost=cost,
                commission_rate=rate,
                total_with_commission=round2(with_commission),
                total_without_commission=round2(price),
            )
        )

    nights = stay.nights
    return Quote(
        property_id=prop.property_id,
        category_key=category_key,
        checkin=stay.checkin,
        checkout=stay.effective_checkout,
        lines=tuple(lines),
        nights=nights,
        total_with_commission=round2(sum_with),
        total_without_commission=round2(sum_without),
        currency=prop.currency,
        per_night=round2(sum_with / nights),
        commission_total=round2(sum_with - sum_without),
        cost_total=round2(sum_cost),
    )


def check_range_available(prop: Property, category_key: str, stay: Stay) -> RangeAvailability:
    """Walk the same nights as quote_stay without pricing them."""

    category = prop.find_category(category_key)
    if category is None:
        return RangeAvailability(available=False)

    for night in stay.night_dates():
        price, cost = resolve_night(prop, category, night)
        if is_blocked(price, cost):
            return RangeAvailability(available=False, blocked_on=night)
    return RangeAvailability(available=True)


async def quote(
    property_repository,
    property_id: str,
    category_key: str,
    checkin: date,
    checkout: date,
) -> QuoteResult:
    """Load the property and price the stay. Raises PropertyNotFound."""

    prop: Optional[Property] = await property_repository.get_property(property_id)
    if prop is None:
        raise PropertyNotFound(property_id)
    return quote_stay(prop, category_key, Stay(checkin=checkin, checkout=checkout))
