from __future__ import annotations

from typing import Any, Optional

from roomrates.domain.models import Property, RoomCategory
from roomrates.utils import safe_float


# Applied when neither the room category nor the property carries a rate.
FALLBACK_COMMISSION_RATE = 10.0

# A configured rate equal to this value is treated as "not set", never as a
# deliberate zero commission.
UNSET_COMMISSION_RATE = 0.0


def _configured(rate: Any) -> Optional[float]:
    if rate is None:
        return None
    value = safe_float(rate, default=UNSET_COMMISSION_RATE)
    if value <= UNSET_COMMISSION_RATE:
        return None
    return value


def resolve_commission_rate(category: RoomCategory, prop: Property) -> float:
    """Effective commission percentage for one room category.

    Precedence: category override > property default > FALLBACK_COMMISSION_RATE.
    """

    for candidate in (category.commission_override, prop.commission):
        rate = _configured(candidate)
        if rate is not None:
            return rate
    return FALLBACK_COMMISSION_RATE


def compute_commission(cost: float, rate: float) -> float:
    """Commission earned on one night: cost basis x rate percent (unrounded)."""
    return safe_float(cost) * (safe_float(rate) / 100.0)
