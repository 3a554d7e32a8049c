from __future__ import annotations

from datetime import date, timedelta

import pytest

from roomrates.domain.models import RoomCategory, Stay
from roomrates.errors import PropertyNotFound
from roomrates.services.pricing_quote_engine import check_range_available, quote, quote_stay


def test_two_night_quote_without_calendar_exceptions(make_property, double_rooms):
    prop = make_property(categories=[double_rooms])

    result = quote_stay(prop, "doubleRooms", Stay(date(2024, 1, 1), date(2024, 1, 3)))

    assert result.available is True
    assert result.nights == 2
    assert [line.date for line in result.lines] == [date(2024, 1, 1), date(2024, 1, 2)]
    for line in result.lines:
        assert line.price == 100.0
        assert line.cost == 50.0
        assert line.commission_rate == 10.0
        assert line.total_with_commission == pytest.approx(105.00)
        assert line.total_without_commission == pytest.approx(100.00)
    assert result.total_with_commission == pytest.approx(210.00)
    assert result.total_without_commission == pytest.approx(200.00)
    assert result.per_night == pytest.approx(105.00)
    assert result.commission_total == pytest.approx(10.00)
    assert result.cost_total == pytest.approx(100.00)
    assert result.currency == "SAR"


def test_zero_price_exception_blocks_the_stay(make_property, double_rooms):
    prop = make_property(
        categories=[double_rooms],
        calendar=[("doubleRooms", date(2024, 1, 2), 0.0, 50.0)],
    )

    result = quote_stay(prop, "doubleRooms", Stay(date(2024, 1, 1), date(2024, 1, 3)))

    assert result.available is False
    assert result.reason == "blocked_by_calendar"
    assert result.date == date(2024, 1, 2)
    assert result.to_dict() == {"available": False, "reason": "blocked_by_calendar", "date": "2024-01-02"}


def test_zero_cost_exception_blocks_regardless_of_price(make_property, double_rooms):
    prop = make_property(
        categories=[double_rooms],
        calendar=[("doubleRooms", date(2024, 1, 1), 500.0, 0.0)],
    )

    result = quote_stay(prop, "doubleRooms", Stay(date(2024, 1, 1), date(2024, 1, 4)))

    assert result.available is False
    assert result.date == date(2024, 1, 1)


def test_first_blocking_date_is_reported(make_property, double_rooms):
    prop = make_property(
        categories=[double_rooms],
        calendar=[
            ("doubleRooms", date(2024, 1, 5), 0.0, 0.0),
            ("doubleRooms", date(2024, 1, 3), 0.0, 0.0),
        ],
    )

    result = quote_stay(prop, "doubleRooms", Stay(date(2024, 1, 1), date(2024, 1, 10)))

    assert result.date == date(2024, 1, 3)


def test_block_on_checkout_date_does_not_affect_stay(make_property, double_rooms):
    prop = make_property(
        categories=[double_rooms],
        calendar=[("doubleRooms", date(2024, 1, 3), 0.0, 0.0)],
    )

    result = quote_stay(prop, "doubleRooms", Stay(date(2024, 1, 1), date(2024, 1, 3)))

    assert result.available is True


def test_unknown_category_is_room_not_found(make_property, double_rooms):
    prop = make_property(categories=[double_rooms])

    result = quote_stay(prop, "suite", Stay(date(2024, 1, 1), date(2024, 1, 3)))

    assert result.available is False
    assert result.reason == "room_not_found"
    assert result.date is None


@pytest.mark.parametrize(
    "checkin, checkout, nights",
    [
        (date(2024, 1, 1), date(2024, 1, 2), 1),
        (date(2024, 1, 1), date(2024, 1, 8), 7),
        (date(2024, 2, 27), date(2024, 3, 2), 4),
        (date(2024, 1, 1), date(2024, 1, 1), 1),
        (date(2024, 1, 5), date(2024, 1, 1), 1),
    ],
)
def test_nights_is_at_least_one(make_property, double_rooms, checkin, checkout, nights):
    prop = make_property(categories=[double_rooms])

    result = quote_stay(prop, "doubleRooms", Stay(checkin, checkout))

    assert result.nights == nights == max(1, (checkout - checkin).days)
    assert len(result.lines) == nights


def test_inverted_stay_prices_one_night_at_checkin(make_property, double_rooms):
    prop = make_property(categories=[double_rooms])

    result = quote_stay(prop, "doubleRooms", Stay(date(2024, 1, 5), date(2024, 1, 1)))

    assert [line.date for line in result.lines] == [date(2024, 1, 5)]
    assert result.checkout == date(2024, 1, 6)
    assert result.total_with_commission == pytest.approx(105.0)


def test_calendar_exception_overrides_base_for_that_night(make_property, double_rooms):
    prop = make_property(
        categories=[double_rooms],
        calendar=[("doubleRooms", date(2024, 1, 2), 200.0, 80.0)],
    )

    result = quote_stay(prop, "doubleRooms", Stay(date(2024, 1, 1), date(2024, 1, 3)))

    assert [line.total_with_commission for line in result.lines] == [105.0, 208.0]
    assert result.total_with_commission == pytest.approx(313.0)
    assert result.total_without_commission == pytest.approx(300.0)


def test_category_zero_commission_uses_property_default(make_property):
    category = RoomCategory(
        key="suite", display_name="Suite", base_price=300.0, base_cost=200.0, commission_override=0.0
    )
    prop = make_property(categories=[category], commission=20.0)

    result = quote_stay(prop, "suite", Stay(date(2024, 1, 1), date(2024, 1, 2)))

    assert result.lines[0].commission_rate == 20.0
    assert result.lines[0].total_with_commission == pytest.approx(340.0)


def test_total_is_rounded_from_unrounded_nights(make_property):
    # 100 + 0.04 * 10% = 100.004 per night: each line rounds to 100.00,
    # the two-night sum 200.008 rounds to 200.01.
    category = RoomCategory(
        key="doubleRooms", display_name="Double", base_price=100.0, base_cost=0.04, commission_override=10.0
    )
    prop = make_property(categories=[category])

    result = quote_stay(prop, "doubleRooms", Stay(date(2024, 1, 1), date(2024, 1, 3)))

    line_sum = round(sum(line.total_with_commission for line in result.lines), 2)
    assert line_sum == pytest.approx(200.00)
    assert result.total_with_commission == pytest.approx(200.01)
    assert line_sum != result.total_with_commission


def test_zero_base_cost_without_calendar_blocks_first_night(make_property):
    category = RoomCategory(key="tripleRooms", display_name="Triple", base_price=90.0, base_cost=0.0)
    prop = make_property(categories=[category])

    result = quote_stay(prop, "tripleRooms", Stay(date(2024, 1, 1), date(2024, 1, 3)))

    assert result.available is False
    assert result.date == date(2024, 1, 1)


def test_check_range_available_matches_quote(make_property, double_rooms):
    blocked = date(2024, 1, 4)
    prop = make_property(categories=[double_rooms], calendar=[("doubleRooms", blocked, 0.0, 10.0)])

    open_stay = Stay(date(2024, 1, 1), date(2024, 1, 4))
    closed_stay = Stay(date(2024, 1, 1), blocked + timedelta(days=2))

    assert check_range_available(prop, "doubleRooms", open_stay).available is True
    closed = check_range_available(prop, "doubleRooms", closed_stay)
    assert closed.available is False
    assert closed.blocked_on == blocked
    assert check_range_available(prop, "missing", open_stay).available is False


@pytest.mark.anyio
async def test_quote_loads_property_from_repository(property_repository, make_property, double_rooms):
    property_repository.add(make_property(categories=[double_rooms], currency="USD"))

    result = await quote(property_repository, "hotel-1", "doubleRooms", date(2024, 1, 1), date(2024, 1, 3))

    assert result.total_with_commission == pytest.approx(210.0)
    assert result.currency == "USD"


@pytest.mark.anyio
async def test_quote_unknown_property_raises(property_repository):
    with pytest.raises(PropertyNotFound):
        await quote(property_repository, "nope", "doubleRooms", date(2024, 1, 1), date(2024, 1, 3))


def test_quote_checkout_matches_priced_nights(make_property, double_rooms):
    prop = make_property(categories=[double_rooms])

    result = quote_stay(prop, "doubleRooms", Stay(date(2024, 1, 1), date(2024, 1, 4)))

    assert result.checkout == date(2024, 1, 4)
    assert result.to_dict()["checkout"] == "2024-01-04"
