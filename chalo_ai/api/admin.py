# api/admin.py
"""
Admin API Endpoints
Lists confirmed bookings and manages the deal inventory.
"""

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from ..schemas import DealPayload
from .dependencies import Services, get_services


router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/bookings")
async def list_bookings(services: Services = Depends(get_services)):
    bookings = services.repository.list_bookings()
    return {"bookings": bookings, "count": len(bookings)}


@router.get("/deals")
async def list_deals(services: Services = Depends(get_services)):
    deals = services.inventory.list_deals()
    return {"deals": [deal.to_dict() for deal in deals], "count": len(deals)}


@router.post("/deals", status_code=201)
async def create_deal(payload: DealPayload, services: Services = Depends(get_services)):
    if not payload.route or not payload.dep_date:
        raise HTTPException(status_code=400, detail="route and dep_date are required")

    try:
        deal = services.inventory.create(payload.model_dump(exclude_none=True))
    except (TypeError, ValueError) as e:
        logger.warning(f"Rejected new deal: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    return {"success": True, "deal": deal.to_dict()}


@router.put("/deals/{deal_id}")
async def update_deal(deal_id: int, payload: DealPayload, services: Services = Depends(get_services)):
    try:
        deal = services.inventory.update(deal_id, payload.model_dump(exclude_none=True))
    except (TypeError, ValueError) as e:
        logger.warning(f"Rejected update for deal {deal_id}: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    if deal is None:
        raise HTTPException(status_code=404, detail="Deal not found")
    return {"success": True, "deal": deal.to_dict()}


@router.delete("/deals/{deal_id}")
async def delete_deal(deal_id: int, services: Services = Depends(get_services)):
    deal = services.inventory.delete(deal_id)
    if deal is None:
        raise HTTPException(status_code=404, detail="Deal not found")
    return {"success": True, "deal": deal.to_dict()}
