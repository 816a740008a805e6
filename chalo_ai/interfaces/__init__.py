# interfaces/__init__.py
"""
Interfaces Package

Contains data stores and reference data:
- session_store: per-session booking records
- deal_inventory: deals and seat stock
- booking_repository: confirmed bookings
- reference_data: cities and countries served
"""

from .session_store import (
    SessionStore,
    SessionBackend,
    InMemorySessionBackend,
    RedisSessionBackend,
    create_session_store,
)
from .deal_inventory import Deal, DealInventory, SearchCriteria, parse_search_query
from .booking_repository import BookingRepository

__all__ = [
    "SessionStore",
    "SessionBackend",
    "InMemorySessionBackend",
    "RedisSessionBackend",
    "create_session_store",
    "Deal",
    "DealInventory",
    "SearchCriteria",
    "parse_search_query",
    "BookingRepository",
]
