"""Tests for /api/availability/* endpoints."""

import pytest

from tests.fixtures.sample_data import add_scheduled_receipt


class TestListAvailability:
    """Tests for GET /api/availability."""

    @pytest.mark.asyncio
    async def test_list(self, client, viewer_headers):
        response = await client.get("/api/availability", headers=viewer_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["as_of_date"] == "2025-01-03"
        assert [part["part_code"] for part in data["parts"]] == ["X", "Y"]
        assert data["shortage_count"] == 0

    @pytest.mark.asyncio
    async def test_status_filter(self, client, viewer_headers, seeded_database):
        await seeded_database.execute_write(
            "UPDATE inventory SET reserved_stock = 95 WHERE part_code = 'X'"
        )

        response = await client.get(
            "/api/availability", params={"status": "Shortage"}, headers=viewer_headers
        )

        data = response.json()
        assert data["total_count"] == 1
        part = data["parts"][0]
        assert part["part_code"] == "X"
        assert part["available_stock"] == 5
        assert part["recommended_order_quantity"] == 35
        assert part["stockout_risk"] == "Medium"

    @pytest.mark.asyncio
    async def test_invalid_status(self, client, viewer_headers):
        response = await client.get(
            "/api/availability", params={"status": "Bad"}, headers=viewer_headers
        )
        assert response.status_code == 422


class TestPartAvailability:
    """Tests for GET /api/availability/{part_code}."""

    @pytest.mark.asyncio
    async def test_detail_with_receipt(self, client, viewer_headers, seeded_database):
        await add_scheduled_receipt(seeded_database, "PO250101001", "X", 25, "2025-01-06")

        response = await client.get(
            "/api/availability/X", params={"as_of_date": "2025-01-06"}, headers=viewer_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["availability"]["scheduled_receipts"] == 25
        assert data["availability"]["available_stock"] == 125
        assert data["availability"]["status"] == "Ok"
        assert [r["order_no"] for r in data["open_receipts"]] == ["PO250101001"]

    @pytest.mark.asyncio
    async def test_unknown_part(self, client, viewer_headers):
        response = await client.get("/api/availability/NOPE", headers=viewer_headers)
        assert response.status_code == 404


class TestCheckSufficiency:
    """Tests for POST /api/availability/check-sufficiency."""

    @pytest.mark.asyncio
    async def test_mixed(self, client, viewer_headers):
        response = await client.post(
            "/api/availability/check-sufficiency",
            json={
                "items": [
                    {"part_code": "X", "required_quantity": 100},
                    {"part_code": "Y", "required_quantity": 80},
                    {"part_code": "NOPE", "required_quantity": 1},
                ],
                "required_date": "2025-01-10",
            },
            headers=viewer_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert [row["status"] for row in data["results"]] == ["Sufficient", "Insufficient", "Error"]
        assert data["results"][1]["shortage_quantity"] == 30
        assert data["summary"] == {
            "total_items": 3,
            "sufficient_items": 1,
            "overall_status": "HAS_SHORTAGE",
        }

    @pytest.mark.asyncio
    async def test_empty_items(self, client, viewer_headers):
        response = await client.post(
            "/api/availability/check-sufficiency", json={"items": []}, headers=viewer_headers
        )
        assert response.status_code == 422
