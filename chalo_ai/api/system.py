# api/system.py
"""
Health and maintenance endpoints
"""

from fastapi import APIRouter, Depends
from loguru import logger

from .. import __version__
from ..schemas import HealthResponse
from .dependencies import Services, get_services


router = APIRouter(prefix="/api", tags=["system"])


@router.get("/health", response_model=HealthResponse)
async def health_check(services: Services = Depends(get_services)):
    """Component status for monitoring"""
    return HealthResponse(
        status="healthy",
        service="Chalo India Chatbot",
        version=__version__,
        components={
            "sessions": {
                "backend": services.sessions.backend_name,
                "active": services.sessions.count(),
            },
            "deals": services.inventory.get_stats(),
            "documents": services.document_qa.get_stats(),
        },
    )


@router.post("/reload")
async def reload_data(services: Services = Depends(get_services)):
    """Re-read policy documents and the deal inventory from disk"""
    chunks = services.document_qa.load()
    deals = services.inventory.reload()
    logger.info(f"Reloaded {chunks} document chunks and {deals} deals")
    return {"success": True, "chunks": chunks, "deals": deals}
