"""Tests for city API endpoints."""

from __future__ import annotations

from tests.factories import make_airport, make_city


class TestCitiesAPI:
    async def test_list_empty(self, client):
        resp = await client.get("/api/cities")
        assert resp.status_code == 200
        body = resp.json()
        assert body["data"] == []
        assert body["total"] == 0
        assert body["totalPages"] == 0
        assert body["hasNext"] is False

    async def test_create_and_get(self, client):
        payload = {
            "city_name": "Lyon",
            "country": "France",
            "country_code": "FR",
            "timezone": "Europe/Paris",
            "latitude": 45.764,
            "longitude": 4.8357,
        }
        resp = await client.post("/api/cities", json=payload)
        assert resp.status_code == 201
        data = resp.json()
        assert data["city_name"] == "Lyon"
        assert "city_id" in data

        resp = await client.get(f"/api/cities/{data['city_id']}")
        assert resp.status_code == 200
        assert resp.json()["timezone"] == "Europe/Paris"

    async def test_duplicate_city_conflicts(self, client):
        payload = {"city_name": "Lyon", "country": "France"}
        assert (await client.post("/api/cities", json=payload)).status_code == 201
        resp = await client.post("/api/cities", json=payload)
        assert resp.status_code == 409
        assert resp.json()["detail"] == "City already exists in this country"

    async def test_invalid_latitude_rejected(self, client):
        resp = await client.post("/api/cities", json={"city_name": "X", "country": "Y", "latitude": 120})
        assert resp.status_code == 422

    async def test_search_filters_and_paginates(self, client, db_manager):
        for name in ("Lyon", "Lille", "Marseille"):
            make_city(db_manager, name, "France")
        make_city(db_manager, "Berlin", "Germany")

        resp = await client.get("/api/cities", params={"country": "france", "limit": 2})
        body = resp.json()
        assert body["total"] == 3
        assert len(body["data"]) == 2
        assert body["totalPages"] == 2
        assert body["hasNext"] is True

        resp = await client.get("/api/cities", params={"city_name": "l", "sort_by": "city_name", "sort_order": "desc"})
        names = [c["city_name"] for c in resp.json()["data"]]
        assert names == ["Marseille", "Lyon", "Lille", "Berlin"]

    async def test_limit_above_maximum_rejected(self, client):
        resp = await client.get("/api/cities", params={"limit": 500})
        assert resp.status_code == 422

    async def test_partial_update(self, client, db_manager):
        city = make_city(db_manager, "Nice", "France")
        resp = await client.patch(f"/api/cities/{city.city_id}", json={"region": "Provence"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["region"] == "Provence"
        assert data["city_name"] == "Nice"

    async def test_update_not_found(self, client):
        resp = await client.patch("/api/cities/999", json={"region": "Nowhere"})
        assert resp.status_code == 404

    async def test_delete(self, client, db_manager):
        city = make_city(db_manager, "Nantes", "France")
        resp = await client.delete(f"/api/cities/{city.city_id}")
        assert resp.status_code == 204
        assert (await client.get(f"/api/cities/{city.city_id}")).status_code == 404

    async def test_delete_with_airports_conflicts(self, client, db_manager):
        city = make_city(db_manager)
        make_airport(db_manager, city.city_id)
        resp = await client.delete(f"/api/cities/{city.city_id}")
        assert resp.status_code == 409

    async def test_by_country_and_with_airports(self, client, db_manager):
        paris = make_city(db_manager)
        make_city(db_manager, "Lyon", "France")
        make_airport(db_manager, paris.city_id)

        resp = await client.get("/api/cities/country/France")
        assert [c["city_name"] for c in resp.json()] == ["Lyon", "Paris"]

        resp = await client.get("/api/cities/with-airports")
        data = resp.json()
        assert len(data) == 1
        assert data[0]["airport_count"] == 1
        assert data[0]["iata_codes"] == ["CDG"]

    async def test_statistics(self, client, db_manager):
        paris = make_city(db_manager)
        make_city(db_manager, "Berlin", "Germany")
        make_airport(db_manager, paris.city_id)

        resp = await client.get("/api/cities/statistics")
        stats = resp.json()
        assert stats["total_cities"] == 2
        assert stats["total_countries"] == 2
        assert stats["cities_with_airports"] == 1
