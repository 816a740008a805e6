# api/dependencies.py
"""
Shared components for the API routers.
Built once in the app lifespan and stored on app.state.
"""

from dataclasses import dataclass

from fastapi import Request
from loguru import logger

from ..agents import BookingAgent, ConciergeAgent
from ..config import Settings
from ..interfaces import BookingRepository, DealInventory, SessionStore, create_session_store
from ..llm import DocumentQA, LLMClient


@dataclass
class Services:
    settings: Settings
    sessions: SessionStore
    inventory: DealInventory
    repository: BookingRepository
    document_qa: DocumentQA
    booking_agent: BookingAgent
    concierge: ConciergeAgent


def build_services(settings: Settings) -> Services:
    """Wire up stores, agents and document QA from settings"""
    sessions = create_session_store(settings)

    inventory = DealInventory(settings.DEALS_FILE, max_results=settings.MAX_DEAL_RESULTS)
    inventory.load()

    repository = BookingRepository(settings.BOOKINGS_DIR)

    llm = LLMClient(settings)
    document_qa = DocumentQA(settings.DOCUMENTS_DIR, llm=llm)
    document_qa.load()
    logger.info(f"Document QA using {llm.provider} ({llm.model})")

    booking_agent = BookingAgent(sessions, inventory, repository)
    concierge = ConciergeAgent(booking_agent, inventory, document_qa)

    return Services(
        settings=settings,
        sessions=sessions,
        inventory=inventory,
        repository=repository,
        document_qa=document_qa,
        booking_agent=booking_agent,
        concierge=concierge,
    )


def get_services(request: Request) -> Services:
    return request.app.state.services
