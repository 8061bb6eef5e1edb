from __future__ import annotations

import json

import pytest

from backend.tests.fakes import SAMPLE_MENU, BrokenModel, ExplodingModel, FakeStore, ScriptedModel

PLACES = [
    {"id": "h1", "name": "Sea View", "address": "1 Beach Rd", "phone": "555-0101", "type": "hotel",
     "latitude": 0, "longitude": 2},
    {"id": "h2", "latitude": "0", "longitude": "1"},
    {"id": "h3", "name": "No Coords Inn"},
    {"id": "h4", "name": "Broken", "latitude": "north", "longitude": "east"},
]


def _reply(*pairs):
    return json.dumps([{"id": i, "relevance": r} for i, r in pairs])


def test_health(api):
    client = api(FakeStore())
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


# ── /api/chat ────────────────────────────────────────────────────────────


class TestChat:
    def test_requires_message_or_meal_type(self, api):
        client = api(FakeStore(menu=SAMPLE_MENU), ExplodingModel())
        resp = client.post("/api/chat", json={})
        assert resp.status_code == 400
        body = resp.json()
        assert body["error"]
        assert "required" in body["details"]

    def test_blank_fields_count_as_missing(self, api):
        client = api(FakeStore(menu=SAMPLE_MENU), ExplodingModel())
        resp = client.post("/api/chat", json={"message": "  ", "mealType": ""})
        assert resp.status_code == 400

    def test_message_matching_title_uses_fast_path(self, api):
        model = ScriptedModel("Burgers are a great choice!")
        client = api(FakeStore(menu=SAMPLE_MENU), model)
        resp = client.post("/api/chat", json={"message": "burger"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["response"] == "Burgers are a great choice!"
        assert [r["id"] for r in body["recommendations"]] == ["1"]
        # Only the conversational reply went to the model
        assert model.prompts == ["burger"]

    def test_meal_type_only_goes_to_model(self, api):
        model = ScriptedModel(_reply(("3", 0.9), ("1", 0.4)))
        client = api(FakeStore(menu=SAMPLE_MENU), model)
        resp = client.post("/api/chat", json={"mealType": "breakfast"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["response"] is None
        assert [r["id"] for r in body["recommendations"]] == ["3", "1"]
        assert body["recommendations"][0] == SAMPLE_MENU[2]
        assert "5 recommended breakfast items" in model.prompts[0]

    def test_model_failure_still_succeeds(self, api):
        client = api(FakeStore(menu=SAMPLE_MENU), BrokenModel())
        resp = client.post("/api/chat", json={"message": "something else entirely"})
        assert resp.status_code == 200
        assert resp.json() == {"response": None, "recommendations": []}

    def test_store_failure(self, api):
        client = api(FakeStore(fail=True), ExplodingModel())
        resp = client.post("/api/chat", json={"message": "burger"})
        assert resp.status_code == 500
        body = resp.json()
        assert body["error"] == "An error occurred while processing the chat."
        assert "Firestore unavailable" in body["details"]


# ── Store-backed listings ────────────────────────────────────────────────


def test_recommendations_returns_precomputed_verbatim(api):
    precomputed = [{"productTitle": f"Dish {i}", "score": i} for i in range(7)]
    client = api(FakeStore(precomputed=precomputed))
    resp = client.get("/api/recommendations")
    assert resp.status_code == 200
    assert resp.json() == precomputed[:5]


def test_recommendations_store_failure(api):
    resp = api(FakeStore(fail=True)).get("/api/recommendations")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to fetch recommendations"}


def test_popular_items_filters_and_orders_by_rating(api):
    menu = [
        {"id": "a", "productTitle": "A", "productRating": 3.5},
        {"id": "b", "productTitle": "B", "productRating": 4.2},
        {"id": "c", "productTitle": "C", "productRating": 4.8},
        {"id": "d", "productTitle": "D", "productRating": 4.0},
    ]
    resp = api(FakeStore(menu=menu)).get("/api/popular-items")
    assert resp.status_code == 200
    assert [r["productRating"] for r in resp.json()] == [4.8, 4.2, 4.0]
    assert [r["id"] for r in resp.json()] == ["c", "b", "d"]


def test_popular_items_store_failure(api):
    resp = api(FakeStore(fail=True)).get("/api/popular-items")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to fetch popular items"}


# ── /api/personalized-recommendations ────────────────────────────────────


class TestPersonalized:
    def test_without_location_has_no_distance(self, api):
        store = FakeStore(menu=SAMPLE_MENU, places=PLACES)
        resp = api(store, ExplodingModel()).get(
            "/api/personalized-recommendations", params={"query": "dosa"}
        )
        assert resp.status_code == 200
        assert resp.json() == [SAMPLE_MENU[2]]
        assert store.place_fetches == 0

    def test_attaches_distance_from_linked_place(self, api):
        places = [
            {"id": "h1", "latitude": 0, "longitude": 1},
            {"id": "h2", "latitude": "n/a", "longitude": 1},
        ]
        model = ScriptedModel(_reply(("1", 0.9), ("2", 0.8), ("4", 0.7)))
        resp = api(FakeStore(menu=SAMPLE_MENU, places=places), model).get(
            "/api/personalized-recommendations",
            params={"mealType": "dinner", "lat": 0, "lon": 0},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert [r["id"] for r in body] == ["1", "2", "4"]
        assert body[0]["distance"] == pytest.approx(111.32, abs=0.1)
        # h2 has unusable coordinates, item 4 has no hotelId
        assert "distance" not in body[1]
        assert "distance" not in body[2]

    def test_malformed_menu_document_does_not_fail_request(self, api):
        menu = [
            {"id": "1", "productTitle": "Veg Burger"},
            {"id": "2", "productTitle": None, "productRating": ["x"]},
        ]
        resp = api(FakeStore(menu=menu), ExplodingModel()).get(
            "/api/personalized-recommendations", params={"query": "burger"}
        )
        assert resp.status_code == 200
        assert resp.json() == [{"id": "1", "productTitle": "Veg Burger"}]

    def test_model_failure_returns_empty_list(self, api):
        resp = api(FakeStore(menu=SAMPLE_MENU), BrokenModel()).get(
            "/api/personalized-recommendations", params={"mealType": "dinner"}
        )
        assert resp.status_code == 200
        assert resp.json() == []

    def test_store_failure(self, api):
        resp = api(FakeStore(fail=True)).get("/api/personalized-recommendations")
        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to fetch personalized recommendations"}

    def test_invalid_latitude_rejected(self, api):
        resp = api(FakeStore(menu=SAMPLE_MENU)).get(
            "/api/personalized-recommendations", params={"lat": "north", "lon": 0}
        )
        assert resp.status_code == 422
        assert resp.json()["error"] == "Invalid request"


# ── /api/nearby-hotels ───────────────────────────────────────────────────


class TestNearbyHotels:
    def test_sorted_by_distance_with_defaults(self, api):
        resp = api(FakeStore(places=PLACES)).get(
            "/api/nearby-hotels", params={"latitude": 0, "longitude": 0}
        )
        assert resp.status_code == 200
        body = resp.json()
        assert [h["id"] for h in body] == ["h2", "h1"]
        assert body[0]["distance"] < body[1]["distance"]
        assert body[0]["name"] == "Name not available"
        assert body[0]["address"] == "Address not available"
        assert body[0]["phone"] == "Phone not available"
        assert body[0]["type"] == "restaurant"
        assert body[0]["latitude"] == 0.0 and body[0]["longitude"] == 1.0
        assert body[1]["name"] == "Sea View"

    def test_returns_nearest_five(self, api):
        places = [{"id": f"p{i}", "latitude": 0, "longitude": i} for i in range(8, 0, -1)]
        resp = api(FakeStore(places=places)).get(
            "/api/nearby-hotels", params={"latitude": 0, "longitude": 0}
        )
        assert [h["id"] for h in resp.json()] == ["p1", "p2", "p3", "p4", "p5"]

    def test_requires_coordinates(self, api):
        resp = api(FakeStore(places=PLACES)).get("/api/nearby-hotels", params={"latitude": 0})
        assert resp.status_code == 422
        assert "details" in resp.json()

    def test_store_failure(self, api):
        resp = api(FakeStore(fail=True)).get(
            "/api/nearby-hotels", params={"latitude": 0, "longitude": 0}
        )
        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to fetch nearby hotels"}
