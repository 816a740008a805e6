# interfaces/booking_repository.py
"""
Booking Repository
Stores each confirmed booking as its own JSON file, plus a readable
log in bookings.txt, and lists them back for the admin panel.
"""

import json
import os
import uuid
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional

from loguru import logger

from ..schemas import BookingRecord


class BookingRepository:
    """File-based store for confirmed bookings"""

    TEXT_LOG = "bookings.txt"

    def __init__(self, bookings_dir: str):
        self.bookings_dir = bookings_dir

    @staticmethod
    def new_reference(now: Optional[datetime] = None) -> str:
        """Durable booking reference, also used as the file name"""
        now = now or datetime.now(timezone.utc)
        stamp = now.strftime("%Y-%m-%dT%H-%M-%S-%fZ")
        return f"booking-{stamp}-{uuid.uuid4().hex[:6]}"

    def save(self, record: BookingRecord) -> bool:
        """
        Write the booking record. Returns False when the write failed;
        the caller decides whether that matters.
        """
        if not record.booking_reference:
            record.booking_reference = self.new_reference()

        filepath = os.path.join(self.bookings_dir, f"{record.booking_reference}.json")
        try:
            os.makedirs(self.bookings_dir, exist_ok=True)
            with open(filepath, "w", encoding="utf-8") as f:
                json.dump(record.to_storage(), f, indent=2)
            with open(os.path.join(self.bookings_dir, self.TEXT_LOG), "a", encoding="utf-8") as f:
                f.write(self._format_text_entry(record))
        except OSError as e:
            logger.error(f"Failed to save booking {record.booking_reference}: {e}")
            return False

        logger.info(f"Booking saved to {filepath}")
        return True

    def _format_text_entry(self, record: BookingRecord) -> str:
        lines = [
            "",
            "=" * 40,
            f"Booking Date: {record.booking_date}",
            "=" * 40,
            f"Reference: {record.booking_reference}",
            f"Name: {record.name}",
            f"Email: {record.email}",
            f"Mobile: {record.mobile}",
            f"Passport: {record.passport_number}",
        ]
        if record.deal_id is not None:
            lines.append(f"Deal ID: {record.deal_id}")
        lines += [
            f"From: {record.from_country} - {record.from_city}",
            f"To: {record.to_country} - {record.to_city}",
            f"Departure Date: {record.departure_date}",
            f"Return Date: {record.return_date or 'N/A'}",
            f"Passengers: {record.passenger_count}",
            f"Travel Class: {record.travel_class.value if record.travel_class else ''}",
            f"Status: {record.status.value}",
            "=" * 40,
            "",
        ]
        return "\n".join(lines) + "\n"

    def list_bookings(self) -> List[Dict[str, Any]]:
        """All saved bookings, newest first"""
        if not os.path.isdir(self.bookings_dir):
            return []

        bookings = []
        for filename in os.listdir(self.bookings_dir):
            if not (filename.startswith("booking-") and filename.endswith(".json")):
                continue
            try:
                with open(os.path.join(self.bookings_dir, filename), "r", encoding="utf-8") as f:
                    content = f.read()
                if not content.strip():
                    continue
                booking = json.loads(content)
            except (OSError, json.JSONDecodeError) as e:
                logger.error(f"Error reading {filename}: {e}")
                continue
            booking["filename"] = filename
            bookings.append(booking)

        bookings.sort(key=lambda b: b.get("bookingDate") or "", reverse=True)
        logger.info(f"Admin loaded {len(bookings)} bookings")
        return bookings
