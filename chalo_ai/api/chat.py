# api/chat.py
"""
Chat API Endpoint
Single conversational entry point for the Chalo India chatbot: booking
flow, deal search, small talk and policy questions all come through here.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from loguru import logger

from ..schemas import ChatRequest, ChatResponse
from .dependencies import Services, get_services


router = APIRouter(prefix="/api", tags=["chat"])

DEFAULT_SESSION_ID = "default"

ERROR_REPLY = 'An error occurred. Please type "book flight" to start over.'


@router.post("/chat", response_model=ChatResponse)
async def chat(request: ChatRequest, services: Services = Depends(get_services)):
    """
    Main chat endpoint.

    Mid-booking messages continue the booking flow; everything else is
    routed by intent.
    """
    if not request.message or not request.message.strip():
        return JSONResponse(status_code=400, content={"error": "Message is required"})

    session_id = request.session_id or DEFAULT_SESSION_ID
    logger.info(f"Chat request: session={session_id}, message={request.message[:50]!r}")

    try:
        result = await services.concierge.process_message(session_id, request.message)
    except Exception:
        logger.exception(f"Chat processing error for session {session_id}")
        return ChatResponse(response=ERROR_REPLY)

    return ChatResponse(**result)
