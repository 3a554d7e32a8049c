from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from roomrates.domain.models import Property, Quote
from roomrates.utils import date_to_utc_midnight, round2


@dataclass
class DraftCustomer:
    name: str = ""
    email: str = ""
    phone: str = ""
    nationality: str = ""
    reserved_by: str = "Booking Assistant"


def build_reservation_draft(
    prop: Property,
    quote: Quote,
    customer: DraftCustomer,
    *,
    display_name: Optional[str] = None,
    booking_source: str = "online",
) -> Dict[str, Any]:
    """Shape a priced quote into the reservation document the booking flow persists.

    Pure field mapping: one picked room line carrying the nightly breakdown.
    """

    if not getattr(quote, "available", False):
        raise ValueError("cannot build a reservation draft from an unavailable quote")

    return {
        "hotelId": prop.property_id,
        "belongsTo": prop.belongs_to or "",
        "booking_source": booking_source,
        "total_rooms": 1,
        "total_guests": 1,
        "adults": 1,
        "children": 0,
        "currency": (quote.currency or "").lower(),
        "checkin_date": date_to_utc_midnight(quote.checkin),
        "checkout_date": date_to_utc_midnight(quote.checkout),
        "days_of_residence": quote.nights,
        "customer_details": {
            "name": customer.name,
            "email": customer.email,
            "phone": customer.phone,
            "nationality": customer.nationality,
            "reservedBy": customer.reserved_by,
        },
        "pickedRoomsType": [
            {
                "room_type": quote.category_key,
                "displayName": display_name or quote.category_key,
                "chosenPrice": f"{quote.per_night:.2f}",
                "count": 1,
                "pricingByDay": [
                    {
                        "date": line.date.isoformat(),
                        "price": line.price,
                        "rootPrice": line.cost,
                        "commissionRate": line.commission_rate,
                        "totalPriceWithCommission": line.total_with_commission,
                        "totalPriceWithoutCommission": line.total_without_commission,
                    }
                    for line in quote.lines
                ],
                "totalPriceWithCommission": quote.total_with_commission,
                "hotelShouldGet": quote.total_without_commission,
                "roomId": [],
                "bedNumber": [],
            }
        ],
        "total_amount": round2(quote.total_with_commission),
        "commission": round2(quote.commission_total),
        "commissionPaid": False,
        "payment": "not paid",
        "paid_amount": 0,
    }
