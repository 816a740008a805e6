# api/deals.py
"""
Deals API Endpoint
Public deal search, same matching as the chat's deal replies.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from .dependencies import Services, get_services


router = APIRouter(prefix="/api", tags=["deals"])

DEFAULT_LISTING = 10


@router.get("/deals")
async def search_deals(
    q: Optional[str] = Query(None, description="Free-text search, e.g. 'cheapest delhi to melbourne'"),
    services: Services = Depends(get_services),
):
    """Search in-stock deals, or list the first deals when no query is given"""
    if q and q.strip():
        deals = services.inventory.search(q)
    else:
        deals = services.inventory.list_deals(DEFAULT_LISTING)

    return {
        "deals": [deal.to_dict() for deal in deals],
        "count": len(deals),
    }
