import json

import pytest

from chalo_ai.agents import BookingAgent
from chalo_ai.interfaces import BookingRepository, DealInventory, SessionStore


SAMPLE_DEALS = [
    {
        "auto_id": 7,
        "pnr": "QF3D9H",
        "route": "DEL-MEL",
        "dep_date": "2025-12-21",
        "airline_code": "AI",
        "flight1": "AI308",
        "flight2": "AI308",
        "aud_fare": 845,
        "ind_fare": 46500,
        "original_stock": 5,
        "current_stock": 3,
        "route_type": "Direct",
        "trip_id": "DEL-MEL-AI308-AI308",
        "status": "active",
    },
    {
        "auto_id": 8,
        "pnr": "AI9M3X",
        "route": "MEL-DEL",
        "dep_date": "2025-11-03",
        "airline_code": "AI",
        "flight1": "AI309",
        "aud_fare": 689,
        "original_stock": 8,
        "current_stock": 8,
        "route_type": "Direct",
        "status": "active",
    },
    {
        "auto_id": 9,
        "pnr": "SQ4P8D",
        "route": "PER-BLR",
        "dep_date": "2025-12-18",
        "airline_code": "SQ",
        "flight1": "SQ224",
        "flight2": "SQ502",
        "aud_fare": 500,
        "original_stock": 5,
        "current_stock": 0,
        "route_type": "Via SIN",
        "status": "active",
    },
    {
        "auto_id": 10,
        "pnr": "MH2R6T",
        "route": "SYD-BOM",
        "dep_date": "2026-01-09",
        "airline_code": "MH",
        "flight1": "MH134",
        "flight2": "MH180",
        "aud_fare": 655,
        "original_stock": 10,
        "current_stock": 7,
        "route_type": "Via KUL",
        "status": "active",
    },
]


@pytest.fixture
def deals_file(tmp_path):
    path = tmp_path / "deals" / "deals.json"
    path.parent.mkdir()
    path.write_text(json.dumps(SAMPLE_DEALS), encoding="utf-8")
    return path


@pytest.fixture
def inventory(deals_file):
    inv = DealInventory(str(deals_file))
    inv.load()
    return inv


@pytest.fixture
def bookings_dir(tmp_path):
    return tmp_path / "bookings"


@pytest.fixture
def repository(bookings_dir):
    return BookingRepository(str(bookings_dir))


@pytest.fixture
def sessions():
    return SessionStore()


@pytest.fixture
def agent(sessions, inventory, repository):
    return BookingAgent(sessions, inventory, repository)
