# agents/__init__.py
"""
AI Agents Package

- BookingAgent: the step-by-step flight booking conversation
- ConciergeAgent: chat-facing router in front of it
"""

from .booking_agent import BookingAgent, StepResult, format_deal, format_price
from .concierge_agent import ConciergeAgent, format_deals

__all__ = [
    "BookingAgent",
    "StepResult",
    "format_deal",
    "format_price",
    "ConciergeAgent",
    "format_deals",
]
