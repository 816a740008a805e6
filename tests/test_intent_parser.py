import pytest

from chalo_ai.llm import IntentParser, IntentType, parse_intent


@pytest.fixture
def parser():
    return IntentParser()


@pytest.mark.parametrize("message, deal_id", [
    ("book deal id 12", 12),
    ("Book deal #12", 12),
    ("book deal: 12", 12),
    ("I want to book the 12 deal", 12),
    ("book 12 id", 12),
])
def test_deal_id_patterns(parser, message, deal_id):
    intent = parser.parse(message)
    assert intent.type == IntentType.BOOK
    assert intent.deal_id == deal_id


@pytest.mark.parametrize("message", ["book flight", "Booking", "book", "I want to book", "can I book a ticket"])
def test_booking_triggers(parser, message):
    intent = parser.parse(message)
    assert intent.wants_booking
    assert intent.deal_id is None


@pytest.mark.parametrize("message, explicit", [
    ("book flight", True),
    ("Booking", True),
    ("I want to book", True),
    ("book a ticket", True),
    ("book deal id 7", True),
    ("Book deal #12!", True),
    ("can I book a ticket", False),
    ("bookflight.team@example.com", False),
    ("Bookie Flightman", False),
])
def test_bare_booking_command_is_explicit(parser, message, explicit):
    intent = parser.parse(message)
    assert intent.wants_booking
    assert intent.explicit == explicit


def test_deals_request(parser):
    intent = parser.parse("lowest fare melbourne to delhi")
    assert intent.type == IntentType.DEALS


@pytest.mark.parametrize("message, expected", [
    ("Hello", IntentType.GREETING),
    ("help", IntentType.HELP),
    ("thank you", IntentType.THANKS),
    ("bye", IntentType.GOODBYE),
    ("who are you?", IntentType.IDENTITY),
    ("tell me about chalo india", IntentType.COMPANY),
    ("what is the cancellation policy?", IntentType.QUESTION),
])
def test_small_talk_and_questions(parser, message, expected):
    assert parser.parse(message).type == expected


def test_module_level_parser():
    intent = parse_intent("Show me deals in December")
    assert intent.type == IntentType.DEALS
    assert intent.to_dict()["raw_query"] == "Show me deals in December"
