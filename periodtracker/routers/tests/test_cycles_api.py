"""Tests for the /cycles CRUD endpoints and the public symptom catalogue."""

from __future__ import annotations

from datetime import date
from unittest.mock import AsyncMock

import asyncpg
import pytest
from fastapi.testclient import TestClient

from periodtracker.routers.tests.conftest import TEST_USER_ID, bearer, cycle_row
from periodtracker.services import cycles as cycle_service
from periodtracker.services import symptoms as symptom_service

NEW_CYCLE = {
    "start_date": "2025-05-24",
    "end_date": "2025-05-28",
    "notes": "  light  ",
    "symptoms": [
        {"symptom_id": 1, "intensity": 3, "date": "2025-05-24"},
        {"symptom_id": 4, "intensity": 2, "date": "2025-05-25"},
    ],
}


@pytest.fixture
def known_symptoms(monkeypatch: pytest.MonkeyPatch) -> AsyncMock:
    mock = AsyncMock(return_value={1, 4})
    monkeypatch.setattr(symptom_service, "existing_symptom_ids", mock)
    return mock


# ---------------------------------------------------------------------------
# Symptom catalogue
# ---------------------------------------------------------------------------


class TestSymptoms:
    def test_list_without_auth(
        self, client: TestClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(
            symptom_service,
            "list_symptoms",
            AsyncMock(return_value=[{"symptom_id": 1, "name": "Cramps", "icon": None}]),
        )
        resp = client.get("/api/v1/symptoms")
        assert resp.status_code == 200
        assert resp.json() == [{"symptom_id": 1, "name": "Cramps", "icon": None}]


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


class TestReadCycles:
    def test_list(
        self,
        client: TestClient,
        auth_headers: dict,
        sample_cycles: list[dict],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        listing = AsyncMock(return_value=sample_cycles)
        monkeypatch.setattr(cycle_service, "list_cycles", listing)

        resp = client.get("/api/v1/cycles", headers=auth_headers)

        assert resp.status_code == 200
        body = resp.json()
        assert [c["cycle_id"] for c in body] == [3, 2, 1]
        assert [c["period_length_days"] for c in body] == [5, 6, 5]
        listing.assert_awaited_once_with(TEST_USER_ID)

    def test_get_own(
        self, client: TestClient, auth_headers: dict, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        row = cycle_row(
            9,
            date(2025, 4, 1),
            date(2025, 4, 4),
            symptoms=[
                {"symptom_id": 2, "name": "Headache", "intensity": 4, "date": date(2025, 4, 2)}
            ],
        )
        monkeypatch.setattr(cycle_service, "get_cycle", AsyncMock(return_value=row))

        resp = client.get("/api/v1/cycles/9", headers=auth_headers)

        assert resp.status_code == 200
        assert resp.json()["symptoms"] == [
            {"symptom_id": 2, "name": "Headache", "intensity": 4, "date": "2025-04-02"}
        ]

    def test_get_missing(
        self, client: TestClient, auth_headers: dict, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(cycle_service, "get_cycle", AsyncMock(return_value=None))
        assert client.get("/api/v1/cycles/404", headers=auth_headers).status_code == 404

    def test_get_someone_elses(
        self, client: TestClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        row = cycle_row(9, date(2025, 4, 1), date(2025, 4, 4), user_id=TEST_USER_ID)
        monkeypatch.setattr(cycle_service, "get_cycle", AsyncMock(return_value=row))
        resp = client.get("/api/v1/cycles/9", headers=bearer(user_id=99))
        assert resp.status_code == 403


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


class TestCreateCycle:
    def test_create(
        self,
        client: TestClient,
        auth_headers: dict,
        known_symptoms: AsyncMock,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        created = cycle_row(10, date(2025, 5, 24), date(2025, 5, 28), notes="light")
        create = AsyncMock(return_value=created)
        monkeypatch.setattr(cycle_service, "create_cycle", create)

        resp = client.post("/api/v1/cycles", headers=auth_headers, json=NEW_CYCLE)

        assert resp.status_code == 201
        assert resp.json()["cycle_id"] == 10
        user_id, start, end, notes, symptoms = create.await_args.args
        assert user_id == TEST_USER_ID
        assert (start, end) == (date(2025, 5, 24), date(2025, 5, 28))
        assert notes == "light"
        assert symptoms == [
            {"symptom_id": 1, "intensity": 3, "date": date(2025, 5, 24)},
            {"symptom_id": 4, "intensity": 2, "date": date(2025, 5, 25)},
        ]
        known_symptoms.assert_awaited_once_with([1, 4])

    def test_end_before_start(self, client: TestClient, auth_headers: dict) -> None:
        body = {**NEW_CYCLE, "start_date": "2025-05-28", "end_date": "2025-05-24"}
        resp = client.post("/api/v1/cycles", headers=auth_headers, json=body)
        assert resp.status_code == 400

    def test_single_day_period(
        self,
        client: TestClient,
        auth_headers: dict,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        created = cycle_row(11, date(2025, 5, 24), date(2025, 5, 24))
        monkeypatch.setattr(cycle_service, "create_cycle", AsyncMock(return_value=created))

        body = {"start_date": "2025-05-24", "end_date": "2025-05-24"}
        resp = client.post("/api/v1/cycles", headers=auth_headers, json=body)

        assert resp.status_code == 201
        assert resp.json()["period_length_days"] == 1

    def test_unknown_symptom(
        self, client: TestClient, auth_headers: dict, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(
            symptom_service, "existing_symptom_ids", AsyncMock(return_value={1})
        )
        create = AsyncMock()
        monkeypatch.setattr(cycle_service, "create_cycle", create)

        resp = client.post("/api/v1/cycles", headers=auth_headers, json=NEW_CYCLE)

        assert resp.status_code == 400
        assert "4" in resp.json()["detail"]
        create.assert_not_awaited()

    @pytest.mark.parametrize("intensity", [0, 6])
    def test_intensity_out_of_range(
        self, client: TestClient, auth_headers: dict, intensity: int
    ) -> None:
        body = {
            **NEW_CYCLE,
            "symptoms": [{"symptom_id": 1, "intensity": intensity, "date": "2025-05-24"}],
        }
        resp = client.post("/api/v1/cycles", headers=auth_headers, json=body)
        assert resp.status_code == 422

    def test_requires_auth(self, client: TestClient) -> None:
        assert client.post("/api/v1/cycles", json=NEW_CYCLE).status_code == 401

    def test_owner_deleted_mid_request(
        self,
        client: TestClient,
        auth_headers: dict,
        known_symptoms: AsyncMock,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr(
            cycle_service,
            "create_cycle",
            AsyncMock(side_effect=asyncpg.ForeignKeyViolationError("user_id not present")),
        )

        resp = client.post("/api/v1/cycles", headers=auth_headers, json=NEW_CYCLE)

        assert resp.status_code == 401
        assert resp.json()["detail"] == "User no longer exists"


# ---------------------------------------------------------------------------
# Update / delete
# ---------------------------------------------------------------------------


class TestUpdateCycle:
    def test_update(
        self,
        client: TestClient,
        auth_headers: dict,
        known_symptoms: AsyncMock,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr(
            cycle_service, "get_cycle_owner", AsyncMock(return_value=TEST_USER_ID)
        )
        update = AsyncMock(return_value=cycle_row(5, date(2025, 5, 24), date(2025, 5, 28)))
        monkeypatch.setattr(cycle_service, "update_cycle", update)

        resp = client.put("/api/v1/cycles/5", headers=auth_headers, json=NEW_CYCLE)

        assert resp.status_code == 200
        assert update.await_args.args[:2] == (5, TEST_USER_ID)

    def test_missing(
        self, client: TestClient, auth_headers: dict, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(cycle_service, "get_cycle_owner", AsyncMock(return_value=None))
        resp = client.put("/api/v1/cycles/5", headers=auth_headers, json=NEW_CYCLE)
        assert resp.status_code == 404

    def test_someone_elses(
        self, client: TestClient, auth_headers: dict, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(cycle_service, "get_cycle_owner", AsyncMock(return_value=99))
        update = AsyncMock()
        monkeypatch.setattr(cycle_service, "update_cycle", update)

        resp = client.put("/api/v1/cycles/5", headers=auth_headers, json=NEW_CYCLE)

        assert resp.status_code == 403
        update.assert_not_awaited()


class TestDeleteCycle:
    def test_delete(
        self, client: TestClient, auth_headers: dict, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(
            cycle_service, "get_cycle_owner", AsyncMock(return_value=TEST_USER_ID)
        )
        delete = AsyncMock(return_value=True)
        monkeypatch.setattr(cycle_service, "delete_cycle", delete)

        resp = client.delete("/api/v1/cycles/5", headers=auth_headers)

        assert resp.status_code == 204
        delete.assert_awaited_once_with(5, TEST_USER_ID)

    def test_someone_elses(
        self, client: TestClient, auth_headers: dict, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(cycle_service, "get_cycle_owner", AsyncMock(return_value=99))
        assert client.delete("/api/v1/cycles/5", headers=auth_headers).status_code == 403
