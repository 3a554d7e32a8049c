from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field


# ---- Quotes ----


class QuoteRequest(BaseModel):
    property_id: str = Field(min_length=1)
    category_key: str = Field(min_length=1)
    checkin: date
    checkout: date


class DraftCustomerIn(BaseModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    nationality: str = ""


class DraftRequest(QuoteRequest):
    customer: DraftCustomerIn = Field(default_factory=DraftCustomerIn)
    display_name: Optional[str] = None
    booking_source: str = "online"


class RangeAvailabilityOut(BaseModel):
    available: bool
    blocked_on: Optional[date] = None


class CalendarDayOut(BaseModel):
    date: date
    price: float
    cost: float
    blocked: bool


# ---- Inventory ----


class DailyAvailabilityOut(BaseModel):
    date: date
    category: str
    total: int
    reserved: int
    occupied: int
    available: int


class RoomTypeSummaryOut(BaseModel):
    category: str
    total: int
    reserved: int
    occupied: int
    available: int
    start: date
    end: date


class NormalizedCategoryOut(BaseModel):
    label: str
    category: str
