"""Tests for admin endpoints."""

import json
import logging

import httpx
import pytest
from fastapi.testclient import TestClient

from fuelrx.api.app import create_app
from fuelrx.containers import AppContainer

HEADERS = {"X-Admin-Token": "admin-token"}
RICE_FDC_ID = 169756


@pytest.fixture
def client(container: AppContainer) -> TestClient:
    return TestClient(create_app(container))


def _parse(client: TestClient, body: dict[str, object]) -> httpx.Response:
    return client.post("/admin/prep-sessions/parse", json=body, headers=HEADERS)


def test_public_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_admin_requires_token(client: TestClient) -> None:
    assert client.get("/admin/health").status_code == 401
    assert (
        client.get("/admin/health", headers={"X-Admin-Token": "wrong"}).status_code
        == 401
    )
    assert client.get("/admin/health", headers=HEADERS).json() == {"status": "ok"}


def test_usda_search(client: TestClient) -> None:
    response = client.get(
        "/admin/usda/search", params={"query": "rice"}, headers=HEADERS
    )

    assert response.status_code == 200
    food = response.json()["foods"][0]
    assert food["fdc_id"] == RICE_FDC_ID
    assert food["description"] == "Rice, white, cooked"


def test_convert_serving_preview(client: TestClient) -> None:
    response = client.post(
        "/admin/usda/convert",
        json={"fdc_id": RICE_FDC_ID, "serving_size": 100, "serving_unit": "g"},
        headers=HEADERS,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["method"] == "weight"
    assert data["gram_weight"] == 100
    assert data["nutrition"]["calories"] == 130
    assert data["available_portions"] == ["1 cup (158g)", "cup, packed (186g)"]


def test_convert_serving_unknown_food(client: TestClient) -> None:
    response = client.post(
        "/admin/usda/convert",
        json={"fdc_id": 7, "serving_size": 1, "serving_unit": "cup"},
        headers=HEADERS,
    )

    assert response.status_code == 404


def test_apply_usda_match(
    client: TestClient, nutrition_repository, audit_repository, nutrition_record
) -> None:
    nutrition_repository.add(nutrition_record())

    response = client.patch(
        "/admin/usda/match",
        json={"nutrition_id": "nut-1", "fdc_id": RICE_FDC_ID},
        headers={**HEADERS, "X-Admin-User-Id": "admin-7"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["conversion_method"] == "usda_portion"
    assert data["calculated_gram_weight"] == 158
    assert data["nutrition_per_100g"]["calories"] == 130
    assert audit_repository.entries[0]["admin_user_id"] == "admin-7"


def test_apply_usda_match_missing_record(client: TestClient) -> None:
    response = client.patch(
        "/admin/usda/match",
        json={"nutrition_id": "missing", "fdc_id": RICE_FDC_ID},
        headers=HEADERS,
    )

    assert response.status_code == 404
    assert response.json()["detail"] == "Nutrition record not found"


def test_apply_usda_match_rejects_invalid_fdc_id(client: TestClient) -> None:
    response = client.patch(
        "/admin/usda/match",
        json={"nutrition_id": "nut-1", "fdc_id": 0},
        headers=HEADERS,
    )

    assert response.status_code == 422


def test_parse_prep_sessions_returns_warnings(
    client: TestClient, prep_session, dump_sessions
) -> None:
    raw = dump_sessions([prep_session(1), prep_session(2)])[:-1]

    response = _parse(client, {"prep_sessions": raw, "daily_assembly": {"tuesday": {}}})

    assert response.status_code == 200
    data = response.json()
    assert [s["display_order"] for s in data["prep_sessions"]] == [1, 2]
    assert data["warnings"][0]["type"] == "missing_daily_assembly"
    assert data["warnings"][0]["meal_id"] == "meal_monday_dinner_1"


def test_parse_prep_sessions_failure_hides_raw_text(
    client: TestClient, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.ERROR, logger="fuelrx")
    logging.getLogger("fuelrx").propagate = True

    response = _parse(client, {"prep_sessions": "I cannot help with that meal plan."})

    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to generate prep sessions"}
    assert "I cannot help with that meal plan." in caplog.text


def test_parse_prep_sessions_rejects_blank_text(client: TestClient) -> None:
    response = _parse(client, {"prep_sessions": "   "})

    assert response.status_code == 422


def test_parse_prep_sessions_rejects_array_of_scalars(client: TestClient) -> None:
    response = _parse(client, {"prep_sessions": "[1, 2]"})

    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to generate prep sessions"}


def test_parse_prep_sessions_ignores_non_string_meal_ids(client: TestClient) -> None:
    sessions = [
        {
            "session_type": "weekly_batch",
            "prep_tasks": [
                {"description": "Cook rice", "meal_ids": [7, None]},
            ],
            "display_order": 1,
        }
    ]

    response = _parse(client, {"prep_sessions": json.dumps(sessions)})

    assert response.status_code == 200
    assert response.json()["warnings"] == []


def test_parse_prep_sessions_reads_string_detailed_steps(client: TestClient) -> None:
    meal_id = "meal_monday_dinner_0"
    sessions = [
        {
            "session_type": "weekly_batch",
            "prep_tasks": [{"description": "Cook rice", "meal_ids": [meal_id]}],
        },
        {
            "session_type": "day_of_dinner",
            "prep_tasks": [
                {
                    "description": "Chicken and rice",
                    "meal_ids": [meal_id],
                    "detailed_steps": "Bake at 400F for 20 minutes",
                }
            ],
        },
    ]

    response = _parse(
        client,
        {
            "prep_sessions": sessions,
            "daily_assembly": {"monday": {"dinner": {"instructions": "Plate"}}},
        },
    )

    assert response.status_code == 200
    warnings = response.json()["warnings"]
    assert [w["type"] for w in warnings] == ["cooking_batched_item"]
    assert '("bake at")' in warnings[0]["message"]
