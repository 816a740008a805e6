# schemas/__init__.py
"""
Pydantic Schemas Package

Contains all Pydantic v2 models for:
- The per-session booking record
- Chat API requests/responses
- Admin deal payloads
"""

from .booking_schemas import (
    # Enums
    BookingStep, TravelClass, BookingStatus, TERMINAL_STEPS,
    # Booking
    BookingRecord,
    # API
    ChatRequest, ChatResponse, CityOption, DealPayload, HealthResponse,
)

__all__ = [
    # Enums
    "BookingStep", "TravelClass", "BookingStatus", "TERMINAL_STEPS",
    # Booking
    "BookingRecord",
    # API
    "ChatRequest", "ChatResponse", "CityOption", "DealPayload", "HealthResponse",
]
