"""Tests for /api/bom/* and /api/plans/* endpoints."""

import pytest


class TestBomEndpoint:
    """Tests for GET /api/bom/{product_code}."""

    @pytest.mark.asyncio
    async def test_get_bom(self, client, viewer_headers):
        response = await client.get("/api/bom/PRD-A", headers=viewer_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total_lines"] == 2
        assert [line["part_code"] for line in data["lines"]] == ["X", "Y"]
        assert data["lines"][1] == {
            "station_code": "ST-02",
            "process_group": "welding",
            "part_code": "Y",
            "quantity_per_unit": 2,
        }

    @pytest.mark.asyncio
    async def test_unknown_product(self, client, viewer_headers):
        response = await client.get("/api/bom/PRD-NONE", headers=viewer_headers)

        assert response.status_code == 404
        assert response.json()["error_code"] == "not_found"

    @pytest.mark.asyncio
    async def test_invalid_code(self, client, viewer_headers):
        response = await client.get("/api/bom/PRD%20A", headers=viewer_headers)
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_requires_auth(self, client):
        response = await client.get("/api/bom/PRD-A")
        assert response.status_code == 401


class TestPlanRequirements:
    """Tests for POST /api/plans/{plan_id}/requirements."""

    @pytest.mark.asyncio
    async def test_requirements(self, client, viewer_headers):
        response = await client.post("/api/plans/1/requirements", headers=viewer_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["product_code"] == "PRD-A"
        assert data["start_date"] == "2025-01-10"
        assert data["total_parts"] == 2
        assert data["shortage_parts"] == 2
        assert data["is_sufficient"] is False

        rows = {row["part_code"]: row for row in data["requirements"]}
        assert rows["X"]["prior_reserved_quantity"] == 70
        assert rows["X"]["available_stock"] == 30
        assert rows["X"]["shortage_quantity"] == 30
        assert rows["X"]["procurement_due_date"] == "2025-01-05"
        assert rows["Y"]["shortage_quantity"] == 70

    @pytest.mark.asyncio
    async def test_sufficient_plan(self, client, viewer_headers):
        response = await client.post("/api/plans/2/requirements", headers=viewer_headers)

        assert response.status_code == 200
        assert response.json()["is_sufficient"] is True

    @pytest.mark.asyncio
    async def test_unknown_plan(self, client, viewer_headers):
        response = await client.post("/api/plans/99/requirements", headers=viewer_headers)

        assert response.status_code == 404
        assert response.json()["error_code"] == "not_found"

    @pytest.mark.asyncio
    async def test_invalid_plan_id(self, client, viewer_headers):
        response = await client.post("/api/plans/0/requirements", headers=viewer_headers)
        assert response.status_code == 422


class TestReservations:
    """Tests for POST /api/plans/{plan_id}/reservations."""

    @pytest.mark.asyncio
    async def test_material_staff_can_reserve(self, client, material_headers):
        response = await client.post("/api/plans/2/reservations", headers=material_headers)

        assert response.status_code == 200
        assert response.json() == {
            "plan_id": 2,
            "reservations": [{"plan_id": 2, "part_code": "X", "reserved_quantity": 70}],
        }

    @pytest.mark.asyncio
    async def test_viewer_forbidden(self, client, viewer_headers):
        response = await client.post("/api/plans/2/reservations", headers=viewer_headers)

        assert response.status_code == 403
        assert response.json()["error_code"] == "forbidden"


class TestProduction:
    """Tests for production start and completion."""

    @pytest.mark.asyncio
    async def test_start_and_complete(self, client, production_headers, viewer_headers):
        response = await client.post("/api/plans/2/start-production", headers=production_headers)

        assert response.status_code == 200
        assert response.json() == {
            "plan_id": 2,
            "status": "InProgress",
            "issued": {"X": 70},
            "released": {},
        }

        inventory = await client.get("/api/inventory/X", headers=viewer_headers)
        assert inventory.json()["current_stock"] == 30

        response = await client.post(
            "/api/plans/2/complete-production", headers=production_headers
        )
        assert response.status_code == 200
        assert response.json()["status"] == "Completed"

    @pytest.mark.asyncio
    async def test_start_with_shortage(self, client, production_headers):
        response = await client.post("/api/plans/1/start-production", headers=production_headers)

        assert response.status_code == 409
        data = response.json()
        assert data["error_code"] == "insufficient_stock"
        assert "X (short 30)" in data["detail"]

    @pytest.mark.asyncio
    async def test_complete_planned_plan(self, client, admin_headers):
        response = await client.post("/api/plans/1/complete-production", headers=admin_headers)

        assert response.status_code == 409
        assert response.json()["error_code"] == "invalid_state_transition"

    @pytest.mark.asyncio
    async def test_material_staff_cannot_start(self, client, material_headers):
        response = await client.post("/api/plans/2/start-production", headers=material_headers)
        assert response.status_code == 403
