import pytest
from fastapi.testclient import TestClient

from chalo_ai.api.dependencies import build_services
from chalo_ai.config import Settings
from chalo_ai.main import create_app

from .helpers import DETAILS


@pytest.fixture
def services(monkeypatch, tmp_path, deals_file, bookings_dir):
    monkeypatch.setenv("DEALS_FILE", str(deals_file))
    monkeypatch.setenv("BOOKINGS_DIR", str(bookings_dir))
    monkeypatch.setenv("DOCUMENTS_DIR", str(tmp_path / "pdfs"))
    monkeypatch.setenv("FRONTEND_DIR", str(tmp_path / "frontend"))
    monkeypatch.setenv("SESSION_BACKEND", "memory")
    monkeypatch.setenv("OPENAI_API_KEY", "")

    services = build_services(Settings())
    # Never reach a real LLM from tests
    services.document_qa.llm = None
    return services


@pytest.fixture
def client(services):
    app = create_app(services.settings)
    app.state.services = services
    with TestClient(app) as test_client:
        yield test_client


def chat(client, message, session_id="s1"):
    response = client.post("/api/chat", json={"sessionId": session_id, "message": message})
    assert response.status_code == 200
    return response.json()


def test_empty_message_rejected(client):
    response = client.post("/api/chat", json={"sessionId": "s1", "message": ""})
    assert response.status_code == 400
    assert response.json() == {"error": "Message is required"}

    response = client.post("/api/chat", json={})
    assert response.status_code == 400


def test_greeting(client):
    body = chat(client, "hi")
    assert "Welcome to Chalo India" in body["response"]
    assert body["bookingStep"] is None


def test_default_session_id(client, services):
    client.post("/api/chat", json={"message": "book flight"})
    assert services.booking_agent.is_active("default")


def test_booking_flow_starts_and_advances(client):
    body = chat(client, "book flight")
    assert body["bookingStep"] == "name"

    body = chat(client, "Asha Rao")
    assert body["bookingStep"] == "email"

    body = chat(client, "not-an-email")
    assert body["bookingStep"] == "email"


def test_mid_flow_small_talk_goes_to_booking(client):
    chat(client, "book flight")
    body = chat(client, "hello")
    assert body["bookingStep"] == "email"


def test_booking_trigger_restarts_flow(client):
    chat(client, "book flight")
    chat(client, "Asha Rao")
    body = chat(client, "book deal id 7")
    assert body["bookingStep"] == "name"
    assert body["dealId"] == 7


def test_unknown_deal_warns(client, services):
    body = chat(client, "book deal id 42")
    assert "Deal ID 42 not found" in body["response"]
    assert not services.booking_agent.is_active("s1")


def test_sold_out_deal_warns(client, services):
    body = chat(client, "book deal id 9")
    assert "out of stock" in body["response"]
    assert not services.booking_agent.is_active("s1")


def test_deal_booking_end_to_end(client, services, bookings_dir):
    chat(client, "book deal id 7")
    for message in DETAILS:
        body = chat(client, message)
    assert body["bookingStep"] == "departureDate"

    for message in ["21/12/2025", "no", "2"]:
        chat(client, message)
    body = chat(client, "Business")
    assert body["bookingStep"] == "confirm"
    assert body["bookingSummary"]["dealId"] == 7

    body = chat(client, "confirm")
    assert body["bookingStep"] == "completed"
    assert body["bookingReference"].startswith("booking-")
    assert services.inventory.get(7).current_stock == 1
    assert (bookings_dir / f"{body['bookingReference']}.json").exists()

    bookings = client.get("/api/admin/bookings").json()
    assert bookings["count"] == 1


def test_city_options_returned(client):
    chat(client, "book flight")
    for message in DETAILS:
        chat(client, message)
    body = chat(client, "india")
    assert body["bookingStep"] == "fromCity"
    assert body["cities"][0] == {"id": 1, "name": "Delhi", "code": "DEL"}


def test_deals_in_chat(client):
    body = chat(client, "lowest fare melbourne to delhi")
    assert [deal["auto_id"] for deal in body["deals"]] == [8, 7]
    assert "Deal ID: 8" in body["response"]


def test_no_matching_deals(client):
    body = chat(client, "deals from perth")
    assert "couldn't find any deals" in body["response"]
    assert body["deals"] is None


def test_question_uses_document_qa(client):
    body = chat(client, "what is the cancellation policy?")
    assert "48 hours" in body["response"]


def test_dispatch_error_is_reported(client, services, monkeypatch):
    async def boom(session_id, message):
        raise RuntimeError("boom")

    monkeypatch.setattr(services.concierge, "process_message", boom)
    body = chat(client, "hello")
    assert "An error occurred" in body["response"]


def test_deals_endpoint(client):
    assert client.get("/api/deals").json()["count"] == 4
    body = client.get("/api/deals", params={"q": "sydney"}).json()
    assert [deal["auto_id"] for deal in body["deals"]] == [10]


def test_admin_deal_crud(client):
    response = client.post("/api/admin/deals", json={
        "route": "BNE-MAA", "dep_date": "2026-03-01", "airline_code": "MH",
        "flight1": "MH134", "aud_fare": 610, "original_stock": 4,
    })
    assert response.status_code == 201
    deal_id = response.json()["deal"]["auto_id"]

    response = client.put(f"/api/admin/deals/{deal_id}", json={"aud_fare": 580})
    assert response.json()["deal"]["aud_fare"] == 580

    assert client.delete(f"/api/admin/deals/{deal_id}").status_code == 200
    assert client.delete(f"/api/admin/deals/{deal_id}").status_code == 404
    assert client.put("/api/admin/deals/999", json={"aud_fare": 1}).status_code == 404


def test_admin_rejects_invalid_deal(client):
    response = client.post("/api/admin/deals", json={"route": "delhi", "dep_date": "2026-03-01"})
    assert response.status_code == 422

    response = client.post("/api/admin/deals", json={"aud_fare": 100})
    assert response.status_code == 400

    response = client.put("/api/admin/deals/7", json={"current_stock": 50})
    assert response.status_code == 400


def test_health_and_reload(client):
    health = client.get("/api/health").json()
    assert health["status"] == "healthy"
    assert health["components"]["deals"]["total_deals"] == 4
    assert health["components"]["sessions"]["backend"] == "memory"

    reloaded = client.post("/api/reload").json()
    assert reloaded["success"]
    assert reloaded["deals"] == 4
