# llm/intent_parser.py
"""
Intent Parser for the Chalo India chatbot
Classifies an incoming message with simple rules:
- Small talk (greetings, help, thanks, goodbye, who-are-you, about us)
- Booking requests, with an optional deal id ("book deal id 7")
- Deal searches ("lowest fare melbourne to delhi")
- Everything else goes to document QA
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Dict, Any


class IntentType(str, Enum):
    GREETING = "greeting"
    HELP = "help"
    THANKS = "thanks"
    GOODBYE = "goodbye"
    IDENTITY = "identity"
    COMPANY = "company"
    BOOK = "book"
    DEALS = "deals"
    QUESTION = "question"


@dataclass
class ParsedIntent:
    """Structured intent extracted from a chat message"""
    type: IntentType
    deal_id: Optional[int] = None
    raw_query: str = ""
    # The whole message is a booking command, not just a mention of "book"
    explicit: bool = False

    @property
    def wants_booking(self) -> bool:
        return self.type == IntentType.BOOK

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "deal_id": self.deal_id,
            "raw_query": self.raw_query,
        }


class IntentParser:
    """
    Rule-based parser for chat messages.
    Order matters: booking is checked before deals, so
    "book deal id 4" starts a booking rather than listing deals.
    """

    def __init__(self):
        self.greetings = {"hi", "hello", "hey", "hi there", "hello there"}
        self.help_phrases = {"help", "what can you do", "what do you do", "how can you help"}
        self.thanks_phrases = {"thanks", "thank you", "thankyou", "ty"}
        self.goodbye_phrases = {"bye", "goodbye", "see you", "see ya"}
        self.company_phrases = {
            "what is this", "what is chalo", "about chalo india", "about chalo"
        }
        self.company_prefixes = (
            "what is chalo india", "who is chalo india",
            "tell me about chalo india", "tell me about chalo"
        )

        # "deal id 12", "deal #12", "deal: 12", "12 deal", "12 id"
        self.deal_id_patterns = [
            re.compile(r"\bdeal\s*(?:id|#)?\s*:?\s*#?\s*(\d+)", re.IGNORECASE),
            re.compile(r"\b(\d+)\s*(?:deal|id)\b", re.IGNORECASE),
        ]

        self.deal_keywords = ("deal", "offer", "discount", "price", "fare", "cheap")

        # "book flight", "booking", "i want to book", "book a ticket", "book deal id 7"
        self.explicit_booking_pattern = re.compile(
            r"^(?:i want to\s+)?book(?:ing)?(?:\s+(?:a\s+)?(?:flight|ticket))?"
            r"(?:\s+(?:the\s+)?deal\s*(?:id|#)?\s*:?\s*#?\s*\d+)?\s*[.!]?$",
            re.IGNORECASE,
        )

    def extract_deal_id(self, message: str) -> Optional[int]:
        for pattern in self.deal_id_patterns:
            match = pattern.search(message)
            if match:
                return int(match.group(1))
        return None

    def is_booking_request(self, message: str, deal_id: Optional[int] = None) -> bool:
        lower = message.lower().strip()
        if "book" in lower and ("flight" in lower or "deal" in lower or deal_id is not None):
            return True
        if lower in ("book", "booking"):
            return True
        return "i want to book" in lower or "book a ticket" in lower

    def is_explicit_booking(self, message: str) -> bool:
        return bool(self.explicit_booking_pattern.match(message.strip()))

    def is_deals_request(self, message: str) -> bool:
        lower = message.lower()
        return any(word in lower for word in self.deal_keywords) and "book" not in lower

    def parse(self, message: str) -> ParsedIntent:
        lower = message.lower().strip()
        deal_id = self.extract_deal_id(message)

        if lower in self.greetings:
            return ParsedIntent(IntentType.GREETING, raw_query=message)
        if lower in self.help_phrases:
            return ParsedIntent(IntentType.HELP, raw_query=message)

        if self.is_booking_request(message, deal_id):
            return ParsedIntent(
                IntentType.BOOK, deal_id=deal_id, raw_query=message,
                explicit=self.is_explicit_booking(message),
            )
        if self.is_deals_request(message):
            return ParsedIntent(IntentType.DEALS, deal_id=deal_id, raw_query=message)

        if lower in self.thanks_phrases:
            return ParsedIntent(IntentType.THANKS, raw_query=message)
        if lower in self.goodbye_phrases:
            return ParsedIntent(IntentType.GOODBYE, raw_query=message)
        if lower.startswith("who are you") or lower.startswith("what are you"):
            return ParsedIntent(IntentType.IDENTITY, raw_query=message)
        if (
            lower.startswith(self.company_prefixes)
            or lower in self.company_phrases
            or ("tell me about" in lower and "chalo" in lower)
        ):
            return ParsedIntent(IntentType.COMPANY, raw_query=message)

        return ParsedIntent(IntentType.QUESTION, deal_id=deal_id, raw_query=message)


# Global instance
intent_parser = IntentParser()


def parse_intent(message: str) -> ParsedIntent:
    """Parse a chat message into an intent"""
    return intent_parser.parse(message)
