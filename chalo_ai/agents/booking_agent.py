# agents/booking_agent.py
"""
Booking Agent - the flight booking conversation.

Walks one session through a fixed sequence of steps, validating each answer
before moving on:

    name -> email -> mobile -> passport
         -> fromCountry -> fromCity -> toCountry -> toCity   (skipped for deals)
         -> departureDate -> returnDate [-> returnDateInput]
         -> passengers -> travelClass -> confirm

An invalid answer repeats the same step with a hint. Nothing in here raises
to the caller: every path ends in a reply the chat endpoint can return.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List, Callable

from loguru import logger

from ..interfaces.booking_repository import BookingRepository
from ..interfaces.deal_inventory import Deal, DealInventory
from ..interfaces.reference_data import (
    City,
    cities_in,
    country_of_code,
    is_country,
    other_country,
    resolve_city,
)
from ..interfaces.session_store import SessionStore
from ..schemas import (
    BookingRecord,
    BookingStatus,
    BookingStep,
    TERMINAL_STEPS,
    TravelClass,
)


DATE_PATTERN = re.compile(r"^\d{2}/\d{2}/\d{4}$")

RETURN_TRIP_WORDS = {"yes", "return"}
ONE_WAY_WORDS = {"no", "one-way", "one way"}
CONFIRM_WORDS = {"confirm", "yes", "submit"}
CANCEL_WORDS = {"cancel", "no"}

MIN_PASSENGERS = 1
MAX_PASSENGERS = 9
MIN_PASSPORT_LENGTH = 5

RESTART_HINT = 'Type "book flight" to start a new booking.'


@dataclass
class StepResult:
    """Outcome of one message in the booking flow"""
    reply: str
    step: Optional[BookingStep]
    record: BookingRecord
    cities: Optional[List[City]] = None
    summary: Optional[Dict[str, Any]] = None
    booking_reference: Optional[str] = None
    deal_id: Optional[int] = None

    def to_response(self) -> Dict[str, Any]:
        """Shape expected by ChatResponse"""
        response: Dict[str, Any] = {
            "response": self.reply,
            "booking_step": self.step.value if self.step else None,
        }
        if self.cities is not None:
            response["cities"] = [city.to_dict() for city in self.cities]
        if self.summary is not None:
            response["booking_summary"] = self.summary
        if self.booking_reference:
            response["booking_reference"] = self.booking_reference
        if self.deal_id is not None:
            response["deal_id"] = self.deal_id
        return response


def _country_label(country: str) -> str:
    return country.capitalize()


def _city_list(cities: List[City]) -> str:
    return "\n".join(f"{city.id}. {city.name} ({city.code})" for city in cities)


def format_price(deal: Deal) -> str:
    amount, currency = deal.fare
    price = f"{currency} ${amount:g}"
    if deal.ind_fare:
        price += f" (INR {deal.ind_fare:g})"
    return price


def format_deal(deal: Deal) -> str:
    """Plain-text description of a deal"""
    return (
        f"Route: {deal.route}\n"
        f"Price: {format_price(deal)}\n"
        f"Flights: {' + '.join(deal.flight_numbers)}\n"
        f"Available Seats: {deal.current_stock}"
    )


class BookingAgent:
    """
    Runs the booking state machine for chat sessions.

    The session store, deal inventory and booking repository are handed in,
    so tests and the API can each supply their own.
    """

    def __init__(
        self,
        session_store: SessionStore,
        inventory: DealInventory,
        repository: BookingRepository,
    ):
        self.sessions = session_store
        self.inventory = inventory
        self.repository = repository

        self._handlers: Dict[BookingStep, Callable[[BookingRecord, str], StepResult]] = {
            BookingStep.NAME: self._handle_name,
            BookingStep.EMAIL: self._handle_email,
            BookingStep.MOBILE: self._handle_mobile,
            BookingStep.PASSPORT: self._handle_passport,
            BookingStep.FROM_COUNTRY: self._handle_from_country,
            BookingStep.FROM_CITY: self._handle_from_city,
            BookingStep.TO_COUNTRY: self._handle_to_country,
            BookingStep.TO_CITY: self._handle_to_city,
            BookingStep.DEPARTURE_DATE: self._handle_departure_date,
            BookingStep.RETURN_DATE: self._handle_return_date,
            BookingStep.RETURN_DATE_INPUT: self._handle_return_date_input,
            BookingStep.PASSENGERS: self._handle_passengers,
            BookingStep.TRAVEL_CLASS: self._handle_travel_class,
            BookingStep.CONFIRM: self._handle_confirm,
        }

    @property
    def handled_steps(self):
        return set(self._handlers)

    # ============================================
    # Session entry points
    # ============================================

    def is_active(self, session_id: str) -> bool:
        return self.sessions.get(session_id).is_active

    def start(self, session_id: str, deal: Optional[Deal] = None) -> StepResult:
        """Begin a fresh booking, optionally for a pre-selected deal"""
        record = BookingRecord(step=BookingStep.NAME.value)

        if deal is None:
            self.sessions.put(session_id, record)
            logger.info(f"Booking started for session {session_id}")
            return StepResult(
                reply=(
                    "Great! I'll help you book a flight. Let's start with your details.\n\n"
                    "Step 1: What is your full name?"
                ),
                step=BookingStep.NAME,
                record=record,
            )

        origin, destination = deal.route_codes
        record.deal_id = deal.deal_id
        record.from_city = origin
        record.to_city = destination
        record.from_country = country_of_code(origin) or ""
        record.to_country = country_of_code(destination) or ""
        self.sessions.put(session_id, record)
        logger.info(f"Booking started for session {session_id} with deal {deal.deal_id}")

        return StepResult(
            reply=(
                f"Great! I'll help you book Deal ID {deal.deal_id}.\n\n"
                f"Deal Details:\n{format_deal(deal)}\n\n"
                "Let's start with your details.\n\n"
                "Step 1: What is your full name?"
            ),
            step=BookingStep.NAME,
            record=record,
            deal_id=deal.deal_id,
        )

    def handle_message(self, session_id: str, message: str) -> StepResult:
        """Feed one user message into the session's booking flow"""
        record = self.sessions.get(session_id)

        try:
            result = self.transition(record, message)
        except Exception:
            logger.exception(f"Error in booking step for session {session_id}")
            return StepResult(
                reply='An error occurred. Please type "book flight" to start over.',
                step=None,
                record=record,
            )

        if result.step in TERMINAL_STEPS:
            self.sessions.delete(session_id)
        else:
            self.sessions.put(session_id, result.record)
        return result

    # ============================================
    # Transition function
    # ============================================

    def transition(self, record: BookingRecord, message: str) -> StepResult:
        """
        Apply one message to a booking record.
        Works on a copy; the caller stores the returned record.
        """
        record = record.model_copy(deep=True)
        text = message.strip()

        try:
            step = BookingStep(record.step)
        except ValueError:
            step = None

        handler = self._handlers.get(step) if step else None
        if handler is None:
            logger.warning(f"Unknown booking step {record.step!r}, resetting")
            record.step = None
            return StepResult(reply=f"Booking session reset. {RESTART_HINT}", step=None, record=record)

        return handler(record, text)

    def _advance(self, record: BookingRecord, step: BookingStep, reply: str, **kwargs) -> StepResult:
        record.step = step.value
        return StepResult(reply=reply, step=step, record=record, **kwargs)

    def _stay(self, record: BookingRecord, reply: str, **kwargs) -> StepResult:
        return StepResult(reply=reply, step=BookingStep(record.step), record=record, **kwargs)

    # ============================================
    # Passenger details
    # ============================================

    def _handle_name(self, record: BookingRecord, text: str) -> StepResult:
        if not text:
            return self._stay(record, "Please enter your full name.")
        record.name = text
        return self._advance(
            record, BookingStep.EMAIL,
            f"Thanks {record.name}!\n\nStep 2: What is your email address?"
        )

    def _handle_email(self, record: BookingRecord, text: str) -> StepResult:
        if "@" not in text or "." not in text:
            return self._stay(record, "Please enter a valid email address (e.g., name@example.com)")
        record.email = text
        return self._advance(
            record, BookingStep.MOBILE,
            "Got it!\n\nStep 3: What is your mobile number? (with country code)"
        )

    def _handle_mobile(self, record: BookingRecord, text: str) -> StepResult:
        if not text:
            return self._stay(record, "Please enter your mobile number (with country code)")
        record.mobile = text
        return self._advance(record, BookingStep.PASSPORT, "Perfect!\n\nStep 4: What is your passport number?")

    def _handle_passport(self, record: BookingRecord, text: str) -> StepResult:
        if len(text) < MIN_PASSPORT_LENGTH:
            return self._stay(
                record, f"Please enter a valid passport number (at least {MIN_PASSPORT_LENGTH} characters)"
            )
        record.passport_number = text

        if record.deal_id is not None:
            return self._advance(
                record, BookingStep.DEPARTURE_DATE,
                f"Great!\n\nRoute is already set from the deal: {record.from_city} -> {record.to_city}\n\n"
                "Step 5: What is your departure date?\n"
                "Please enter date in DD/MM/YYYY format (e.g., 25/12/2024)"
            )
        return self._advance(
            record, BookingStep.FROM_COUNTRY,
            'Great!\n\nStep 5: Where are you traveling from?\nPlease type "India" or "Australia"'
        )

    # ============================================
    # Route
    # ============================================

    def _handle_from_country(self, record: BookingRecord, text: str) -> StepResult:
        if not is_country(text):
            return self._stay(record, 'Please type "India" or "Australia"')
        record.from_country = text.lower()
        cities = cities_in(record.from_country)
        return self._advance(
            record, BookingStep.FROM_CITY,
            f"Select your departure city from {_country_label(record.from_country)}:\n\n"
            f"{_city_list(cities)}\n\nType the city number (1-10) or city name",
            cities=cities,
        )

    def _handle_from_city(self, record: BookingRecord, text: str) -> StepResult:
        city = resolve_city(record.from_country, text)
        if city is None:
            return self._stay(
                record, "Please select a valid city. Type the city number (1-10) or city name",
                cities=cities_in(record.from_country),
            )
        record.from_city = city.name
        destination = _country_label(other_country(record.from_country))
        return self._advance(
            record, BookingStep.TO_COUNTRY,
            f'Selected: {city.name}\n\nStep 6: Where are you traveling to?\nPlease type "{destination}"'
        )

    def _handle_to_country(self, record: BookingRecord, text: str) -> StepResult:
        expected = other_country(record.from_country)
        if text.lower() != expected:
            return self._stay(
                record, f'Please type "{_country_label(expected)}" (we only fly between India and Australia)'
            )
        record.to_country = expected
        cities = cities_in(expected)
        return self._advance(
            record, BookingStep.TO_CITY,
            f"Select your destination city in {_country_label(expected)}:\n\n"
            f"{_city_list(cities)}\n\nType the city number (1-10) or city name",
            cities=cities,
        )

    def _handle_to_city(self, record: BookingRecord, text: str) -> StepResult:
        city = resolve_city(record.to_country, text)
        if city is None:
            return self._stay(
                record, "Please select a valid city. Type the city number (1-10) or city name",
                cities=cities_in(record.to_country),
            )
        record.to_city = city.name
        return self._advance(
            record, BookingStep.DEPARTURE_DATE,
            f"Selected: {city.name}\n\nStep 7: What is your departure date?\n"
            "Please enter in format: DD/MM/YYYY (e.g., 25/12/2024)"
        )

    # ============================================
    # Dates, passengers, class
    # ============================================

    def _handle_departure_date(self, record: BookingRecord, text: str) -> StepResult:
        if not DATE_PATTERN.match(text):
            return self._stay(record, "Please enter date in DD/MM/YYYY format (e.g., 25/12/2024)")
        record.departure_date = text
        return self._advance(
            record, BookingStep.RETURN_DATE,
            f'Departure date: {text}\n\nStep 8: Is this a return trip?\n'
            'Type "yes" for return trip or "no" for one-way'
        )

    def _handle_return_date(self, record: BookingRecord, text: str) -> StepResult:
        answer = text.lower()
        if answer in RETURN_TRIP_WORDS:
            return self._advance(
                record, BookingStep.RETURN_DATE_INPUT,
                "Great!\n\nStep 9: What is your return date?\n"
                "Please enter in format: DD/MM/YYYY (e.g., 05/01/2025)"
            )
        if answer in ONE_WAY_WORDS:
            record.return_date = ""
            return self._advance(
                record, BookingStep.PASSENGERS,
                f"One-way trip confirmed!\n\nStep 9: How many passengers will be traveling? "
                f"({MIN_PASSENGERS}-{MAX_PASSENGERS})"
            )
        return self._stay(record, 'Please type "yes" for return trip or "no" for one-way')

    def _handle_return_date_input(self, record: BookingRecord, text: str) -> StepResult:
        if not DATE_PATTERN.match(text):
            return self._stay(record, "Please enter date in DD/MM/YYYY format (e.g., 05/01/2025)")
        record.return_date = text
        return self._advance(
            record, BookingStep.PASSENGERS,
            f"Return date: {text}\n\nStep 10: How many passengers will be traveling? "
            f"({MIN_PASSENGERS}-{MAX_PASSENGERS})"
        )

    def _handle_passengers(self, record: BookingRecord, text: str) -> StepResult:
        count = int(text) if text.isdecimal() else 0
        if not MIN_PASSENGERS <= count <= MAX_PASSENGERS:
            return self._stay(
                record, f"Please enter a valid number of passengers ({MIN_PASSENGERS}-{MAX_PASSENGERS})"
            )
        record.passenger_count = count
        return self._advance(
            record, BookingStep.TRAVEL_CLASS,
            f'{count} passenger(s)\n\nStep 11: What travel class would you prefer?\n'
            'Type "Economy", "Business", or "First"'
        )

    def _handle_travel_class(self, record: BookingRecord, text: str) -> StepResult:
        travel_class = next((c for c in TravelClass if c.value.lower() == text.lower()), None)
        if travel_class is None:
            return self._stay(record, 'Please type "Economy", "Business", or "First"')
        record.travel_class = travel_class
        return self._advance(
            record, BookingStep.CONFIRM,
            self._summary_text(record),
            summary=record.to_storage(),
        )

    def _summary_text(self, record: BookingRecord) -> str:
        lines = ["Booking Summary:", ""]
        if record.deal_id is not None:
            deal = self.inventory.get(record.deal_id)
            lines.append(f"Deal ID: {record.deal_id}")
            if deal:
                lines.append(format_deal(deal))
            lines.append("")

        lines += [
            f"Name: {record.name}",
            f"Email: {record.email}",
            f"Mobile: {record.mobile}",
            f"Passport: {record.passport_number}",
            f"Route: {record.from_city}, {_country_label(record.from_country)} -> "
            f"{record.to_city}, {_country_label(record.to_country)}",
            f"Departure: {record.departure_date}",
            f"Return: {record.return_date}" if record.return_date else "Trip Type: One-way",
            f"Passengers: {record.passenger_count}",
            f"Class: {record.travel_class.value}",
            "",
            'Type "confirm" to submit your booking or "cancel" to start over.',
        ]
        return "\n".join(lines)

    # ============================================
    # Confirmation
    # ============================================

    def _handle_confirm(self, record: BookingRecord, text: str) -> StepResult:
        answer = text.lower()
        if answer in CONFIRM_WORDS:
            return self._confirm(record)
        if answer in CANCEL_WORDS:
            record.status = BookingStatus.CANCELLED
            record.step = None
            logger.info("Booking cancelled by user")
            return StepResult(
                reply='Booking cancelled. You can start a new booking anytime by typing "book flight"!',
                step=BookingStep.CANCELLED,
                record=record,
            )
        return self._stay(record, 'Please type "confirm" to submit your booking or "cancel" to start over')

    def _shortfall(self, record: BookingRecord, available: int, requested: int) -> StepResult:
        return self._stay(
            record,
            f"Sorry! Deal ID {record.deal_id} only has {available} seat(s) available, "
            f"but you requested {requested}. Please choose another deal or reduce the number of passengers.",
        )

    def _confirm(self, record: BookingRecord) -> StepResult:
        passengers = record.passenger_count or MIN_PASSENGERS
        stock_note = ""

        if record.deal_id is not None:
            deal = self.inventory.get(record.deal_id)
            if deal is None:
                return self._stay(
                    record,
                    f"Sorry! Deal ID {record.deal_id} is no longer available. "
                    'Type "cancel" and start a regular booking instead.',
                )
            if deal.current_stock < passengers:
                return self._shortfall(record, deal.current_stock, passengers)

            before = deal.current_stock
            if not self.inventory.decrement_stock(record.deal_id, passengers):
                # Another booking took the seats after the check above
                latest = self.inventory.get(record.deal_id)
                return self._shortfall(record, latest.current_stock if latest else 0, passengers)

            record.deal_stock_updated = True
            stock_note = (
                f"Deal ID {record.deal_id} Applied!\n"
                f"Stock updated: {before} -> {before - passengers}\n\n"
            )

        record.status = BookingStatus.CONFIRMED
        record.booking_date = datetime.now(timezone.utc).isoformat()
        record.booking_reference = self.repository.new_reference()
        record.step = None
        if not self.repository.save(record):
            logger.warning(f"Booking {record.booking_reference} confirmed but not persisted")

        logger.info(f"Booking confirmed: {record.booking_reference}")
        return StepResult(
            reply=(
                "Booking Confirmed!\n\n"
                f"{stock_note}"
                "Your flight booking has been submitted successfully!\n\n"
                f"Booking Reference: {record.booking_reference}\n"
                f"Route: {record.from_city} -> {record.to_city}\n"
                f"Departure: {record.departure_date}\n\n"
                f"You will receive a confirmation email at {record.email} shortly.\n\n"
                "Thank you for choosing Chalo India!"
            ),
            step=BookingStep.COMPLETED,
            record=record,
            booking_reference=record.booking_reference,
            deal_id=record.deal_id,
        )
