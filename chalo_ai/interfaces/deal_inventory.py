# interfaces/deal_inventory.py
"""
Deal Inventory for Chalo India special fares.
Loaded from a JSON file at startup and rewritten in full after every change.

Stock is only ever reduced through decrement_stock(), which checks and
subtracts under a per-deal lock so two bookings cannot both take the last
seats.
"""

import json
import os
import re
import tempfile
import threading
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Dict, Any, Optional, List, Tuple

from loguru import logger

from .reference_data import CITY_CODES


MONTHS = {
    "january": "01", "february": "02", "march": "03", "april": "04",
    "may": "05", "june": "06", "july": "07", "august": "08",
    "september": "09", "october": "10", "november": "11", "december": "12"
}

CHEAPEST_WORDS = ("lowest", "cheapest")

ROUTE_MATCH_SCORE = 10
SINGLE_CITY_SCORE = 5
MONTH_MATCH_SCORE = 5


@dataclass
class Deal:
    """A discounted, stock-limited fare on one route and date"""
    deal_id: int
    route: str  # "DEL-MEL"
    dep_date: str  # YYYY-MM-DD

    # Pricing
    aud_fare: float = 0
    ind_fare: Optional[float] = None

    # Flights
    airline_code: str = ""
    flight1: str = ""
    flight2: str = ""
    pnr: str = ""
    route_type: str = ""
    trip_id: str = ""

    # Stock
    original_stock: int = 0
    current_stock: int = 0

    status: str = "active"
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def route_codes(self) -> Tuple[str, str]:
        origin, _, destination = self.route.partition("-")
        return origin.strip().upper(), destination.strip().upper()

    @property
    def flight_numbers(self) -> List[str]:
        if self.flight2 and self.flight2 != self.flight1:
            return [self.flight1, self.flight2]
        return [self.flight1]

    @property
    def fare(self) -> Tuple[float, str]:
        return self.aud_fare, "AUD"

    @property
    def departure_month(self) -> str:
        parts = self.dep_date.split("-")
        return parts[1] if len(parts) >= 2 else ""

    @property
    def in_stock(self) -> bool:
        return self.current_stock > 0

    def matches_route(self, first: str, second: str) -> bool:
        """Routes are unordered pairs: DEL-MEL matches MEL/DEL too"""
        return set(self.route_codes) == {first, second}

    def to_dict(self) -> Dict[str, Any]:
        """Inventory file format: the id is stored as "auto_id" """
        data = asdict(self)
        data["auto_id"] = data.pop("deal_id")
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Deal':
        data = dict(data)
        # Inventory files key deals by "auto_id"; "deal_id" is also accepted
        if "deal_id" not in data and "auto_id" in data:
            data["deal_id"] = data.pop("auto_id")
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        extra = {k: v for k, v in data.items() if k not in cls.__dataclass_fields__ and k != "auto_id"}
        deal = cls(**known)
        deal.deal_id = int(deal.deal_id)
        if extra:
            deal.metadata.update(extra)
        if not deal.flight2:
            deal.flight2 = deal.flight1
        return deal


@dataclass
class SearchCriteria:
    """What a free-text deals query asks for"""
    from_code: Optional[str] = None
    to_code: Optional[str] = None
    month: Optional[str] = None
    cheapest: bool = False


def _cities_in(text: str) -> List[str]:
    found = []
    for city_name, code in CITY_CODES.items():
        if re.search(rf"\b{re.escape(city_name)}\b", text):
            found.append(code)
    return found


def parse_search_query(query: str) -> SearchCriteria:
    """
    Pull route, month and price intent out of a deals query such as
    "lowest fare deals from Melbourne to Delhi in December".
    """
    lower_query = query.lower()
    criteria = SearchCriteria()

    for month_name, number in MONTHS.items():
        if re.search(rf"\b{month_name}\b", lower_query):
            criteria.month = number
            break

    # With "from"/"to" present each fragment is scanned in order, so the
    # first city named becomes the origin
    if re.search(r"\bto\b|\bfrom\b", lower_query):
        parts = re.split(r"\bto\b|\bfrom\b", lower_query)
    else:
        parts = [lower_query]

    for part in parts:
        for code in _cities_in(part.strip()):
            if not criteria.from_code:
                criteria.from_code = code
            elif not criteria.to_code and code != criteria.from_code:
                criteria.to_code = code

    criteria.cheapest = any(word in lower_query for word in CHEAPEST_WORDS)
    return criteria


class PersistenceError(Exception):
    """The inventory file could not be written"""


def _check_stock(deal: Deal):
    if deal.current_stock < 0 or deal.current_stock > deal.original_stock:
        raise ValueError(
            f"current_stock must be between 0 and original_stock "
            f"({deal.current_stock} / {deal.original_stock})"
        )


class DealInventory:
    """
    In-memory list of deals backed by a JSON file.
    The file keeps the order deals were added in.
    """

    def __init__(self, deals_file: Optional[str] = None, max_results: int = 10):
        self.deals_file = deals_file
        self.max_results = max_results
        self._deals: Dict[int, Deal] = {}
        self._locks: Dict[int, threading.Lock] = {}
        self._registry_lock = threading.Lock()
        self._file_lock = threading.Lock()

    # ----------------------------------------
    # Loading / persistence
    # ----------------------------------------

    def load(self) -> int:
        """Load deals from the inventory file, replacing what is in memory"""
        self._deals = {}
        if not self.deals_file or not os.path.exists(self.deals_file):
            logger.warning(f"No deals file found at {self.deals_file}, starting with no deals")
            return 0

        try:
            with open(self.deals_file, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading deals from {self.deals_file}: {e}")
            return 0

        for item in raw:
            try:
                deal = Deal.from_dict(item)
            except (TypeError, ValueError) as e:
                logger.error(f"Skipping malformed deal {item!r}: {e}")
                continue
            self._deals[deal.deal_id] = deal

        logger.info(f"Loaded {len(self._deals)} deals from {self.deals_file}")
        return len(self._deals)

    def reload(self) -> int:
        return self.load()

    def add_deal(self, deal: Deal):
        """Add a deal to memory without writing the file"""
        self._deals[deal.deal_id] = deal

    def _persist(self):
        """Rewrite the whole inventory file; raises PersistenceError"""
        if not self.deals_file:
            return

        with self._file_lock:
            snapshot = [deal.to_dict() for deal in self._deals.values()]
            for item in snapshot:
                extra = item.pop("metadata", {})
                for key, value in extra.items():
                    item.setdefault(key, value)

            directory = os.path.dirname(os.path.abspath(self.deals_file))
            try:
                os.makedirs(directory, exist_ok=True)
                fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".deals-", suffix=".json")
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(snapshot, f, indent=2)
                os.replace(tmp_path, self.deals_file)
            except OSError as e:
                raise PersistenceError(f"Could not write {self.deals_file}: {e}") from e

    def _persist_logged(self, action: str) -> bool:
        try:
            self._persist()
            return True
        except PersistenceError as e:
            logger.error(f"Deal inventory not saved after {action}: {e}")
            return False

    def _lock_for(self, deal_id: int) -> threading.Lock:
        with self._registry_lock:
            if deal_id not in self._locks:
                self._locks[deal_id] = threading.Lock()
            return self._locks[deal_id]

    # ----------------------------------------
    # Queries
    # ----------------------------------------

    def get(self, deal_id: int) -> Optional[Deal]:
        return self._deals.get(deal_id)

    def list_deals(self, limit: Optional[int] = None) -> List[Deal]:
        deals = list(self._deals.values())
        return deals[:limit] if limit else deals

    def __len__(self) -> int:
        return len(self._deals)

    def search(self, query: str) -> List[Deal]:
        """
        Search in-stock deals for a free-text query, most relevant first.
        """
        criteria = parse_search_query(query)
        scored: List[Tuple[int, Deal]] = []

        for deal in self._deals.values():
            if not deal.in_stock:
                continue

            score = 0
            if criteria.from_code and criteria.to_code:
                if not deal.matches_route(criteria.from_code, criteria.to_code):
                    continue
                score += ROUTE_MATCH_SCORE
            elif criteria.from_code:
                if criteria.from_code not in deal.route_codes:
                    continue
                score += SINGLE_CITY_SCORE

            if criteria.month:
                if deal.departure_month != criteria.month:
                    continue
                score += MONTH_MATCH_SCORE

            scored.append((score, deal))

        if criteria.cheapest:
            scored.sort(key=lambda item: item[1].aud_fare)
        else:
            scored.sort(key=lambda item: item[0], reverse=True)

        return [deal for _, deal in scored[:self.max_results]]

    # ----------------------------------------
    # Stock
    # ----------------------------------------

    def decrement_stock(self, deal_id: int, quantity: int) -> bool:
        """
        Take `quantity` seats from a deal.
        Returns False, changing nothing, when the deal is unknown or does
        not have enough seats left.
        """
        if quantity <= 0:
            logger.warning(f"Refusing to decrement deal {deal_id} by {quantity}")
            return False

        with self._lock_for(deal_id):
            deal = self._deals.get(deal_id)
            if deal is None:
                logger.warning(f"Deal {deal_id} not found")
                return False
            if deal.current_stock < quantity:
                logger.warning(
                    f"Deal {deal_id} has insufficient stock "
                    f"({deal.current_stock} available, {quantity} requested)"
                )
                return False

            old_stock = deal.current_stock
            deal.current_stock -= quantity

        logger.info(f"Updated deal {deal_id}: stock reduced from {old_stock} to {deal.current_stock}")
        self._persist_logged(f"decrementing deal {deal_id}")
        return True

    # ----------------------------------------
    # Admin
    # ----------------------------------------

    def create(self, payload: Dict[str, Any]) -> Deal:
        """Add a new deal with the next free id"""
        with self._registry_lock:
            next_id = max(self._deals.keys(), default=0) + 1
            data = {k: v for k, v in payload.items() if v is not None}
            data["deal_id"] = next_id
            data.pop("auto_id", None)
            data.setdefault("status", "active")
            if not data.get("flight2"):
                data["flight2"] = data.get("flight1", "")
            if not data.get("trip_id"):
                data["trip_id"] = (
                    f"{data.get('route', '')}-{data.get('airline_code', '')}"
                    f"{data.get('flight1', '')}-{data['flight2']}"
                )
            if "current_stock" not in data:
                data["current_stock"] = data.get("original_stock", 0)
            if "original_stock" not in data:
                data["original_stock"] = data["current_stock"]
            data.setdefault("metadata", {})["created_at"] = datetime.utcnow().isoformat()
            deal = Deal.from_dict(data)
            _check_stock(deal)
            self._deals[deal.deal_id] = deal

        self._persist_logged(f"adding deal {deal.deal_id}")
        logger.info(f"Admin added new deal: {deal.deal_id}")
        return deal

    def update(self, deal_id: int, changes: Dict[str, Any]) -> Optional[Deal]:
        """Merge changes into a deal; the id never changes"""
        with self._lock_for(deal_id):
            deal = self._deals.get(deal_id)
            if deal is None:
                return None

            merged = deal.to_dict()
            merged.update({k: v for k, v in changes.items() if v is not None})
            merged["deal_id"] = deal_id
            merged.pop("auto_id", None)
            updated = Deal.from_dict(merged)
            _check_stock(updated)
            self._deals[deal_id] = updated

        self._persist_logged(f"updating deal {deal_id}")
        logger.info(f"Admin updated deal: {deal_id}")
        return updated

    def delete(self, deal_id: int) -> Optional[Deal]:
        with self._lock_for(deal_id):
            deal = self._deals.pop(deal_id, None)
        if deal is None:
            return None

        self._persist_logged(f"deleting deal {deal_id}")
        logger.info(f"Admin deleted deal: {deal_id}")
        return deal

    def get_stats(self) -> Dict[str, Any]:
        """Get inventory statistics"""
        return {
            "total_deals": len(self._deals),
            "in_stock": sum(1 for d in self._deals.values() if d.in_stock),
            "seats_left": sum(d.current_stock for d in self._deals.values()),
        }
