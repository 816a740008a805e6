import json
import threading

import pytest

from chalo_ai.interfaces import Deal, DealInventory, parse_search_query


def test_load_maps_auto_id(inventory):
    assert len(inventory) == 4
    deal = inventory.get(7)
    assert deal.route_codes == ("DEL", "MEL")
    assert deal.pnr == "QF3D9H"


def test_missing_flight2_defaults_to_flight1(inventory):
    assert inventory.get(8).flight2 == "AI309"
    assert inventory.get(8).flight_numbers == ["AI309"]


def test_missing_file_gives_empty_inventory(tmp_path):
    inv = DealInventory(str(tmp_path / "nope.json"))
    assert inv.load() == 0
    assert inv.search("deals") == []


def test_parse_search_query():
    criteria = parse_search_query("lowest fare deals from Melbourne to Delhi in December")
    assert criteria.from_code == "MEL"
    assert criteria.to_code == "DEL"
    assert criteria.month == "12"
    assert criteria.cheapest


def test_parse_multiword_city():
    criteria = parse_search_query("deals to gold coast")
    assert criteria.from_code == "OOL"
    assert criteria.to_code is None


def test_lowest_fare_route_search_matches_both_directions(inventory):
    results = inventory.search("lowest fare melbourne to delhi")
    assert [deal.deal_id for deal in results] == [8, 7]
    assert [deal.aud_fare for deal in results] == sorted(deal.aud_fare for deal in results)


def test_search_excludes_sold_out(inventory):
    assert 9 not in [deal.deal_id for deal in inventory.search("deals")]
    assert inventory.search("perth to bangalore") == []


def test_single_city_and_month_filters(inventory):
    assert [deal.deal_id for deal in inventory.search("deals from sydney")] == [10]
    assert [deal.deal_id for deal in inventory.search("deals in november")] == [8]


def test_search_caps_results(tmp_path):
    inv = DealInventory(max_results=10)
    for deal_id in range(1, 16):
        inv.add_deal(Deal(deal_id=deal_id, route="DEL-MEL", dep_date="2025-12-01",
                          original_stock=1, current_stock=1))
    assert len(inv.search("deals")) == 10


def test_decrement_boundary(inventory):
    assert not inventory.decrement_stock(7, 4)
    assert inventory.get(7).current_stock == 3
    assert inventory.decrement_stock(7, 3)
    assert inventory.get(7).current_stock == 0
    assert not inventory.decrement_stock(7, 1)
    assert not inventory.decrement_stock(7, 0)
    assert not inventory.decrement_stock(999, 1)


def test_decrement_persists(inventory, deals_file):
    inventory.decrement_stock(10, 2)

    reloaded = DealInventory(str(deals_file))
    reloaded.load()
    assert reloaded.get(10).current_stock == 5
    assert reloaded.get(10).original_stock == 10


def test_rewritten_file_keeps_auto_id(inventory, deals_file):
    inventory.decrement_stock(7, 1)

    saved = json.loads(deals_file.read_text(encoding="utf-8"))
    assert [d["auto_id"] for d in saved] == [7, 8, 9, 10]
    assert all("deal_id" not in d for d in saved)
    assert next(d for d in saved if d["auto_id"] == 7)["current_stock"] == 2


def test_load_accepts_deal_id_key(tmp_path):
    path = tmp_path / "deals.json"
    path.write_text(json.dumps([{"deal_id": 3, "route": "DEL-MEL", "dep_date": "2025-12-01"}]))
    inv = DealInventory(str(path))
    inv.load()
    assert inv.get(3).route == "DEL-MEL"
    assert inv.get(3).to_dict()["auto_id"] == 3


def test_concurrent_decrements_never_oversell(inventory):
    results = []

    def book():
        results.append(inventory.decrement_stock(7, 1))

    threads = [threading.Thread(target=book) for _ in range(10)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(True) == 3
    assert inventory.get(7).current_stock == 0


def test_create_assigns_next_id(inventory, deals_file):
    deal = inventory.create({
        "route": "BNE-MAA",
        "dep_date": "2026-03-01",
        "airline_code": "MH",
        "flight1": "MH134",
        "aud_fare": 610,
        "original_stock": 4,
    })
    assert deal.deal_id == 11
    assert deal.current_stock == 4
    assert deal.flight2 == "MH134"
    assert deal.trip_id == "BNE-MAA-MHMH134-MH134"
    assert deal.status == "active"

    saved = json.loads(deals_file.read_text(encoding="utf-8"))
    assert saved[-1]["auto_id"] == 11
    assert "deal_id" not in saved[-1]
    assert "created_at" in saved[-1]


def test_create_rejects_bad_stock(inventory):
    with pytest.raises(ValueError):
        inventory.create({"route": "DEL-MEL", "dep_date": "2026-01-01",
                          "original_stock": 2, "current_stock": 5})


def test_update_keeps_id(inventory):
    deal = inventory.update(7, {"aud_fare": 799, "deal_id": 99})
    assert deal.deal_id == 7
    assert deal.aud_fare == 799
    assert inventory.get(99) is None
    assert inventory.update(999, {"aud_fare": 1}) is None


def test_delete(inventory):
    assert inventory.delete(7).deal_id == 7
    assert inventory.get(7) is None
    assert inventory.delete(7) is None


def test_stats(inventory):
    stats = inventory.get_stats()
    assert stats["total_deals"] == 4
    assert stats["in_stock"] == 3
    assert stats["seats_left"] == 18
