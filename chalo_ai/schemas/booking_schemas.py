# schemas/booking_schemas.py
"""
Pydantic v2 schemas for the Chalo India chatbot
Covers the booking record, chat API and admin deal payloads
"""

from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# ============================================
# Enums
# ============================================

class BookingStep(str, Enum):
    NAME = "name"
    EMAIL = "email"
    MOBILE = "mobile"
    PASSPORT = "passport"
    FROM_COUNTRY = "fromCountry"
    FROM_CITY = "fromCity"
    TO_COUNTRY = "toCountry"
    TO_CITY = "toCity"
    DEPARTURE_DATE = "departureDate"
    RETURN_DATE = "returnDate"
    RETURN_DATE_INPUT = "returnDateInput"
    PASSENGERS = "passengers"
    TRAVEL_CLASS = "travelClass"
    CONFIRM = "confirm"
    # Terminal steps, only ever reported back to the client
    COMPLETED = "completed"
    CANCELLED = "cancelled"


TERMINAL_STEPS = {BookingStep.COMPLETED, BookingStep.CANCELLED}


class TravelClass(str, Enum):
    ECONOMY = "Economy"
    BUSINESS = "Business"
    FIRST = "First"


class BookingStatus(str, Enum):
    IN_PROGRESS = "in-progress"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


# ============================================
# Booking Record
# ============================================

class BookingRecord(BaseModel):
    """One in-progress booking, scoped to a single chat session"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    # Kept as a plain string so a corrupted value from storage can be detected
    step: Optional[str] = None

    name: str = ""
    email: str = ""
    mobile: str = ""
    passport_number: str = ""

    from_country: str = ""
    from_city: str = ""
    to_country: str = ""
    to_city: str = ""

    departure_date: str = ""
    return_date: str = ""  # "" means one-way
    passenger_count: Optional[int] = None
    travel_class: Optional[TravelClass] = None

    deal_id: Optional[int] = None
    status: BookingStatus = BookingStatus.IN_PROGRESS

    # Filled in on confirmation
    booking_date: Optional[str] = None
    booking_reference: Optional[str] = None
    deal_stock_updated: Optional[bool] = None

    @property
    def is_active(self) -> bool:
        return self.step is not None

    @property
    def is_one_way(self) -> bool:
        return not self.return_date

    def to_storage(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_storage(cls, data: Dict[str, Any]) -> "BookingRecord":
        return cls.model_validate(data)


# ============================================
# API Models
# ============================================

class ChatRequest(BaseModel):
    """Chat request model"""
    session_id: Optional[str] = Field(None, alias="sessionId", description="Opaque conversation id")
    message: Optional[str] = Field(None, max_length=2000, description="User's message")

    model_config = ConfigDict(populate_by_name=True)


class CityOption(BaseModel):
    id: int
    name: str
    code: str


class ChatResponse(BaseModel):
    """Chat response model"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    response: str = Field(..., description="Assistant reply")
    booking_step: Optional[str] = Field(None, description="Booking step after this message")
    deal_id: Optional[int] = None
    cities: Optional[List[CityOption]] = None
    booking_summary: Optional[Dict[str, Any]] = None
    booking_reference: Optional[str] = None
    deals: Optional[List[Dict[str, Any]]] = None


class DealPayload(BaseModel):
    """Admin payload for creating or updating a deal"""
    model_config = ConfigDict(extra="allow")

    route: Optional[str] = Field(None, pattern=r"^[A-Z]{3}-[A-Z]{3}$")
    dep_date: Optional[str] = Field(None, pattern=r"^\d{4}-\d{2}-\d{2}$")
    airline_code: Optional[str] = None
    flight1: Optional[str] = None
    flight2: Optional[str] = None
    pnr: Optional[str] = None
    aud_fare: Optional[float] = Field(None, ge=0)
    ind_fare: Optional[float] = Field(None, ge=0)
    original_stock: Optional[int] = Field(None, ge=0)
    current_stock: Optional[int] = Field(None, ge=0)
    route_type: Optional[str] = None
    trip_id: Optional[str] = None
    status: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    components: Dict[str, Any]
    timestamp: str = Field(default_factory=lambda: datetime.utcnow().isoformat())
