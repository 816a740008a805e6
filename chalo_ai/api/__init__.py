# api/__init__.py
"""
API Routers Package

- chat: POST /api/chat
- deals: GET /api/deals
- admin: bookings list and deal management
- system: health and reload
"""

from .admin import router as admin_router
from .chat import router as chat_router
from .deals import router as deals_router
from .system import router as system_router

__all__ = ["admin_router", "chat_router", "deals_router", "system_router"]
