"""Tests for the HTTP API."""

import base64

from fastapi.testclient import TestClient

from food_vault.api.app import create_app


def test_health(container) -> None:
    client = TestClient(create_app(container))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_foods_and_categories(container) -> None:
    with TestClient(create_app(container)) as client:
        foods = client.get("/foods").json()
        categories = client.get("/categories").json()
        beverages = client.get("/foods", params={"category": "Beverages"}).json()
        search = client.get("/foods", params={"q": "RI"}).json()

    assert foods["count"] == 4
    assert foods["foods"][0]["name"] == "Apple"
    assert foods["foods"][0]["hasServing"] is True
    assert categories["categories"][:2] == ["All", "Custom"]
    assert [food["name"] for food in beverages["foods"]] == ["Iced tea"]
    assert [food["name"] for food in search["foods"]] == ["Rice"]


def test_food_detail_and_missing(container) -> None:
    client = TestClient(create_app(container))

    response = client.get("/foods/1")
    missing = client.get("/foods/999")

    assert response.status_code == 200
    assert response.json()["description"] == "Rice - Grains (1 cup)"
    assert missing.status_code == 404


def test_custom_food_lifecycle(container) -> None:
    client = TestClient(create_app(container))

    created = client.post(
        "/custom-foods", json={"name": "Protein Shake", "calories": 120}
    )
    assert created.status_code == 201
    food_id = created.json()["id"]

    custom = client.get("/foods", params={"category": "Custom"}).json()
    assert [food["name"] for food in custom["foods"]] == ["Protein Shake"]
    assert custom["foods"][0]["isCustom"] is True

    logged = client.post("/diary", json={"food_id": food_id, "servings": 2})
    assert logged.status_code == 201
    assert logged.json()["calories"] == 240
    assert client.get(f"/custom-foods/{food_id}/in-diary").json() == {"in_diary": True}

    deleted = client.delete(
        f"/custom-foods/{food_id}", params={"also_remove_from_diary": True}
    )
    assert deleted.status_code == 200
    assert client.get("/diary").json()["entries"] == []
    assert client.delete(f"/custom-foods/{food_id}").status_code == 404


def test_blank_custom_food_name_is_rejected(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/custom-foods", json={"name": "   "})

    assert response.status_code == 422
    assert container.custom_food_service.list_foods() == []


def test_custom_food_name_is_trimmed(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/custom-foods", json={"name": "  Oats  "})

    assert response.status_code == 201
    assert response.json()["name"] == "Oats"


def test_custom_food_write_failure_is_reported(container) -> None:
    client = TestClient(create_app(container))
    container.store.fail_writes = True

    response = client.post("/custom-foods", json={"name": "Oats"})

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to save food"


def test_refresh(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/foods/refresh")

    assert response.status_code == 200
    assert response.json()["source"] == "asset"


def test_refresh_failure_is_reported(container) -> None:
    client = TestClient(create_app(container))
    container.store.fail_writes = True

    response = client.post("/foods/refresh")

    assert response.status_code == 500
    assert response.json()["detail"].startswith("Failed to reload data")


def test_import_endpoint(container) -> None:
    client = TestClient(create_app(container))
    content = base64.b64encode(b"name,calories\nTrail Mix,450\n").decode()

    response = client.post(
        "/custom-foods/import",
        json={"filename": "mix.csv", "content_base64": content},
    )
    bad = client.post(
        "/custom-foods/import",
        json={"filename": "mix.csv", "content_base64": "***"},
    )

    assert response.status_code == 200
    assert response.json()["count"] == 1
    assert bad.status_code == 400


def test_diary_endpoints(container) -> None:
    with TestClient(create_app(container)) as client:
        created = client.post("/diary", json={"food_id": "3", "servings": 2})
        missing_food = client.post("/diary", json={"food_id": "nope"})
        too_few = client.post("/diary", json={"food_id": "3", "servings": 0})
        listed = client.get("/diary").json()
        entry_id = created.json()["id"]
        deleted = client.delete(f"/diary/{entry_id}")
        deleted_again = client.delete(f"/diary/{entry_id}")
        emptied = client.get("/diary").json()

    assert created.status_code == 201
    assert created.json()["name"] == "Apple"
    assert created.json()["calories"] == 190
    assert missing_food.status_code == 404
    assert too_few.status_code == 422
    assert listed["totals"]["calories"] == 190
    assert listed["totals"]["entry_count"] == 1
    assert deleted.status_code == 200
    assert deleted_again.status_code == 404
    assert emptied["entries"] == []
