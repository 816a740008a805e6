# agents/concierge_agent.py
"""
Concierge Agent (chat-facing)
Decides what each incoming message is for:
1. A session mid-booking -> Booking Agent
2. "book flight" / "book deal id 7" -> start a booking
3. Deal questions -> Deal Inventory search
4. Small talk -> canned replies
5. Anything else -> Document QA

Uses:
- Intent Parser for understanding messages
- Booking Agent for the booking conversation
- Deal Inventory for deal lookups
- Document QA for policy questions
"""

from datetime import datetime
from typing import Dict, Any, List, Optional

from loguru import logger

from ..interfaces.deal_inventory import Deal, DealInventory
from ..llm.document_qa import DocumentQA, fallback_answer
from ..llm.intent_parser import IntentParser, IntentType, ParsedIntent, intent_parser
from .booking_agent import BookingAgent, format_price


GREETING_REPLY = (
    "Hello! Welcome to Chalo India Flight Booking! I'm here to help you with flight bookings, "
    "cancellations, privacy policies, terms & conditions, and any questions about our services. "
    "How can I assist you today?"
)

HELP_REPLY = (
    "I can help you with:\n\n"
    '- Flight Booking - Book flights between India and Australia (type "book flight" to start)\n'
    '- Special Deals - View exclusive Chalo India deals (type "deals" or "show deals")\n'
    "- Cancellation Policy - Details about cancellation rules and refunds\n"
    "- Privacy Policy - Information about how we handle your data\n"
    "- Terms & Conditions - Our booking terms and policies\n"
    "- Company Information - About Chalo India and our services\n\n"
    "Just ask me any question about these topics!"
)

THANKS_REPLY = "You're welcome! Is there anything else I can help you with?"
GOODBYE_REPLY = "Goodbye! Have a great day and safe travels with Chalo India!"

IDENTITY_REPLY = (
    "I'm the Chalo India chatbot! I'm here to help you with all your flight booking questions.\n\n"
    "I can assist you with:\n"
    "- Flight booking information\n"
    "- Cancellation policies and refunds\n"
    "- Privacy policy questions\n"
    "- Terms and conditions\n"
    "- General inquiries about Chalo India\n\n"
    "How can I help you today?"
)

COMPANY_REPLY = (
    "Chalo India is a premier flight booking service specializing in flights between India and Australia.\n\n"
    "Our Mission: To connect India and Australia through seamless, affordable air travel while "
    "providing exceptional customer service.\n\n"
    "Our Services:\n"
    "- One-way and return flight bookings\n"
    "- Multiple route options between India and Australia\n"
    "- Economy, Business and First class\n"
    "- 24/7 customer support\n\n"
    "You can ask me about our booking process, cancellation policies, privacy policy, or terms & conditions!"
)

NO_DEALS_REPLY = (
    "I couldn't find any deals matching your search. Try asking:\n"
    '- "Show me deals"\n'
    '- "Lowest fare deals from Melbourne to Delhi"\n'
    '- "Deals in December"\n'
    '- "Best prices for Sydney to Mumbai"'
)

CANNED_REPLIES = {
    IntentType.GREETING: GREETING_REPLY,
    IntentType.HELP: HELP_REPLY,
    IntentType.THANKS: THANKS_REPLY,
    IntentType.GOODBYE: GOODBYE_REPLY,
    IntentType.IDENTITY: IDENTITY_REPLY,
    IntentType.COMPANY: COMPANY_REPLY,
}


def _format_date(dep_date: str) -> str:
    try:
        return datetime.strptime(dep_date, "%Y-%m-%d").strftime("%d %b %Y")
    except ValueError:
        return dep_date


def format_deals(deals: List[Deal]) -> str:
    """Plain-text deal listing"""
    lines = ["Chalo India Special Deals", "", f"Found {len(deals)} deal(s) matching your search:", ""]
    for deal in deals:
        origin, destination = deal.route_codes
        lines += [
            f"Deal ID: {deal.deal_id} | PNR: {deal.pnr}",
            f"Route: {origin} -> {destination}",
            f"Date: {_format_date(deal.dep_date)}",
            f"Airline: {deal.airline_code} | Flights: {' + '.join(deal.flight_numbers)}",
            f"Price: {format_price(deal)}",
            f"Available Seats: {deal.current_stock} of {deal.original_stock}",
            f"Type: {deal.route_type}",
            "",
        ]
    lines.append('To book any of these deals, type "book deal id X" (where X is the Deal ID)!')
    return "\n".join(lines)


class ConciergeAgent:
    """
    Routes chat messages to the booking flow, deal search, canned replies
    or document QA.
    """

    def __init__(
        self,
        booking_agent: BookingAgent,
        inventory: DealInventory,
        document_qa: Optional[DocumentQA] = None,
        parser: Optional[IntentParser] = None,
    ):
        self.booking_agent = booking_agent
        self.inventory = inventory
        self.document_qa = document_qa
        self.parser = parser or intent_parser

    async def process_message(self, session_id: str, message: str) -> Dict[str, Any]:
        """
        Process a user message and generate response.
        Main entry point for chat.
        """
        intent = self.parser.parse(message)
        in_booking = self.booking_agent.is_active(session_id)

        # Mid-booking, only a bare booking command restarts the flow;
        # "bookflight.team@example.com" is an answer, not a trigger
        if intent.wants_booking and (intent.explicit or not in_booking):
            return self._start_booking(session_id, intent)

        if in_booking:
            logger.info(f"Handling booking step for session {session_id}")
            return self.booking_agent.handle_message(session_id, message).to_response()

        if intent.type in CANNED_REPLIES:
            logger.info(f"Handling {intent.type.value}")
            return {"response": CANNED_REPLIES[intent.type]}

        if intent.type == IntentType.DEALS:
            return self._handle_deals(message)

        return await self._handle_question(message)

    def _start_booking(self, session_id: str, intent: ParsedIntent) -> Dict[str, Any]:
        if intent.deal_id is None:
            return self.booking_agent.start(session_id).to_response()

        deal = self.inventory.get(intent.deal_id)
        if deal is None:
            return {
                "response": (
                    f"Deal ID {intent.deal_id} not found. Please check the deal ID and try again, "
                    "or start a regular booking."
                )
            }
        if not deal.in_stock:
            return {
                "response": (
                    f"Deal ID {intent.deal_id} is currently out of stock. Please choose another deal "
                    "or start a regular booking."
                )
            }
        return self.booking_agent.start(session_id, deal).to_response()

    def _handle_deals(self, message: str) -> Dict[str, Any]:
        logger.info("Handling deals request")
        deals = self.inventory.search(message)
        if not deals:
            return {"response": NO_DEALS_REPLY}
        return {
            "response": format_deals(deals),
            "deals": [deal.to_dict() for deal in deals],
        }

    async def _handle_question(self, message: str) -> Dict[str, Any]:
        if self.document_qa is None:
            return {"response": fallback_answer(message)}
        logger.info(f"Processing query with document QA: {message[:50]!r}")
        return {"response": await self.document_qa.answer(message)}
