"""
Tests for Recipe Endpoints

Tests all /recipes endpoints:
- GET /recipes (cached listing)
- GET /recipes/search
- GET /recipes/{id}
- POST /recipes
- PUT /recipes/{id}
- DELETE /recipes/{id}

Also checks that writes invalidate the cached listing only after they
succeed, and that collaborator failures come back as a generic 500.
"""

import uuid
from unittest.mock import MagicMock

import pytest
from fastapi import status
from fastapi.testclient import TestClient
from sqlalchemy import func, select

from app.config import get_settings
from app.dependencies import get_recipe_store
from app.exceptions import RecordStoreError
from app.main import app
from app.models import Recipe
from app.services.recipe_store import RecipeStore

GENERIC_ERROR = "A backend service is unavailable. Please try again later."
LISTING_KEY = get_settings().recipes_cache_key


def recipe_count(db_session) -> int:
    return db_session.execute(select(func.count()).select_from(Recipe)).scalar()


@pytest.fixture
def created_recipe(client: TestClient, auth_headers, tea_recipe) -> dict:
    response = client.post("/recipes", json=tea_recipe, headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    return response.json()


class TestRecipeLifecycle:
    """Create, list, delete and look up one recipe end to end."""

    def test_tea_lifecycle(self, client: TestClient, auth_headers, tea_recipe):
        created = client.post("/recipes", json=tea_recipe, headers=auth_headers)
        assert created.status_code == status.HTTP_200_OK
        recipe = created.json()
        assert recipe["name"] == "Tea"
        assert recipe["tags"] == ["drink"]
        assert recipe["ingredients"] == ["water", "tea leaves"]
        assert recipe["instructions"] == ["boil", "steep"]
        assert len(recipe["id"]) == 32
        assert "publishedAt" in recipe

        listed = client.get("/recipes").json()
        assert [r["id"] for r in listed] == [recipe["id"]]

        deleted = client.delete(f"/recipes/{recipe['id']}", headers=auth_headers)
        assert deleted.status_code == status.HTTP_200_OK
        assert deleted.json()["message"] == "Recipe has been deleted"

        assert client.get("/recipes").json() == []
        assert client.get(f"/recipes/{recipe['id']}").status_code == status.HTTP_404_NOT_FOUND


class TestListRecipes:
    """Tests for GET /recipes"""

    def test_list_empty(self, client: TestClient):
        response = client.get("/recipes")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == []

    def test_list_is_public(self, client: TestClient, created_recipe):
        client.cookies.clear()

        response = client.get("/recipes")

        assert response.status_code == status.HTTP_200_OK
        assert len(response.json()) == 1

    def test_list_populates_cache(self, client: TestClient, created_recipe, fake_redis):
        assert LISTING_KEY not in fake_redis.data

        client.get("/recipes")

        assert LISTING_KEY in fake_redis.data

    def test_second_read_served_from_cache(self, client: TestClient, created_recipe, fake_redis):
        first = client.get("/recipes").json()
        second = client.get("/recipes").json()

        assert first == second
        assert fake_redis.calls["set"] == 1

    def test_cache_outage_is_server_error(self, client: TestClient, fake_redis):
        fake_redis.available = False

        response = client.get("/recipes")

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["detail"] == GENERIC_ERROR
        assert "Connection refused" not in response.text


class TestGetRecipe:
    """Tests for GET /recipes/{id}"""

    def test_get_recipe(self, client: TestClient, created_recipe):
        response = client.get(f"/recipes/{created_recipe['id']}")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == created_recipe

    def test_get_recipe_hyphenated_id(self, client: TestClient, created_recipe):
        hyphenated = str(uuid.UUID(created_recipe["id"]))

        response = client.get(f"/recipes/{hyphenated}")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["id"] == created_recipe["id"]

    def test_get_recipe_not_found(self, client: TestClient):
        response = client.get(f"/recipes/{uuid.uuid4().hex}")

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_get_recipe_malformed_id(self, client: TestClient):
        response = client.get("/recipes/not-an-id")

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_get_recipe_does_not_touch_cache(self, client: TestClient, created_recipe, fake_redis):
        client.get(f"/recipes/{created_recipe['id']}")

        assert fake_redis.calls["get"] == 0


class TestCreateRecipe:
    """Tests for POST /recipes"""

    def test_create_minimal(self, client: TestClient, auth_headers):
        response = client.post("/recipes", json={"name": "Toast"}, headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["tags"] == []
        assert data["ingredients"] == []
        assert data["instructions"] == []

    def test_create_requires_session(self, client: TestClient, tea_recipe, db_session):
        response = client.post("/recipes", json=tea_recipe)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert recipe_count(db_session) == 0

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"name": ""},
            {"name": "   "},
            {"name": "Tea", "tags": "drink"},
            {"name": "Tea", "ingredients": [1, 2]},
        ],
    )
    def test_create_invalid_body(self, client: TestClient, auth_headers, db_session, body):
        response = client.post("/recipes", json=body, headers=auth_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert recipe_count(db_session) == 0

    def test_create_ignores_client_id(self, client: TestClient, auth_headers, tea_recipe):
        body = {**tea_recipe, "id": "abc", "publishedAt": "2000-01-01T00:00:00Z"}

        response = client.post("/recipes", json=body, headers=auth_headers)

        data = response.json()
        assert data["id"] != "abc"
        assert not data["publishedAt"].startswith("2000")

    def test_create_invalidates_listing(self, client: TestClient, auth_headers, tea_recipe, fake_redis):
        client.get("/recipes")
        assert LISTING_KEY in fake_redis.data

        client.post("/recipes", json=tea_recipe, headers=auth_headers)

        assert LISTING_KEY not in fake_redis.data
        assert [r["name"] for r in client.get("/recipes").json()] == ["Tea"]

    def test_failed_insert_keeps_cache(self, client: TestClient, auth_headers, tea_recipe, fake_redis):
        client.get("/recipes")
        cached = fake_redis.data[LISTING_KEY]

        failing_store = MagicMock(spec=RecipeStore)
        failing_store.insert.side_effect = RecordStoreError("Record store insert failed")
        app.dependency_overrides[get_recipe_store] = lambda: failing_store

        response = client.post("/recipes", json=tea_recipe, headers=auth_headers)

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["detail"] == GENERIC_ERROR
        assert fake_redis.data[LISTING_KEY] == cached
        assert fake_redis.calls["delete"] == 0


class TestUpdateRecipe:
    """Tests for PUT /recipes/{id}"""

    def test_update_recipe(self, client: TestClient, auth_headers, created_recipe):
        response = client.put(
            f"/recipes/{created_recipe['id']}",
            json={
                "name": "Green Tea",
                "tags": ["drink", "hot"],
                "ingredients": ["water", "green tea"],
                "instructions": ["heat to 80C", "steep"],
            },
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["message"] == "Recipe has been updated"

        updated = client.get(f"/recipes/{created_recipe['id']}").json()
        assert updated["name"] == "Green Tea"
        assert updated["tags"] == ["drink", "hot"]
        assert updated["id"] == created_recipe["id"]
        assert updated["publishedAt"] == created_recipe["publishedAt"]

    def test_update_invalidates_listing(self, client: TestClient, auth_headers, created_recipe, fake_redis):
        client.get("/recipes")

        client.put(
            f"/recipes/{created_recipe['id']}",
            json={"name": "Green Tea"},
            headers=auth_headers,
        )

        assert LISTING_KEY not in fake_redis.data
        assert client.get("/recipes").json()[0]["name"] == "Green Tea"

    def test_update_not_found_keeps_cache(self, client: TestClient, auth_headers, fake_redis):
        client.get("/recipes")

        response = client.put(
            f"/recipes/{uuid.uuid4().hex}",
            json={"name": "Ghost"},
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert LISTING_KEY in fake_redis.data

    def test_failed_update_keeps_cache(self, client: TestClient, auth_headers, created_recipe, fake_redis):
        client.get("/recipes")
        cached = fake_redis.data[LISTING_KEY]
        deletes_before = fake_redis.calls["delete"]

        failing_store = MagicMock(spec=RecipeStore)
        failing_store.update_fields.side_effect = RecordStoreError("Record store update failed")
        app.dependency_overrides[get_recipe_store] = lambda: failing_store

        response = client.put(
            f"/recipes/{created_recipe['id']}",
            json={"name": "Green Tea"},
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["detail"] == GENERIC_ERROR
        assert fake_redis.data[LISTING_KEY] == cached
        assert fake_redis.calls["delete"] == deletes_before

    def test_update_malformed_id(self, client: TestClient, auth_headers):
        response = client.put("/recipes/123", json={"name": "Tea"}, headers=auth_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_update_invalid_body(self, client: TestClient, auth_headers, created_recipe):
        response = client.put(
            f"/recipes/{created_recipe['id']}",
            json={"name": ""},
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_update_requires_session(self, client: TestClient, created_recipe):
        client.cookies.clear()

        response = client.put(f"/recipes/{created_recipe['id']}", json={"name": "Hacked"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert client.get(f"/recipes/{created_recipe['id']}").json()["name"] == "Tea"


class TestDeleteRecipe:
    """Tests for DELETE /recipes/{id}"""

    def test_delete_not_found(self, client: TestClient, auth_headers):
        response = client.delete(f"/recipes/{uuid.uuid4().hex}", headers=auth_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_failed_delete_keeps_cache(self, client: TestClient, auth_headers, created_recipe, fake_redis):
        client.get("/recipes")
        cached = fake_redis.data[LISTING_KEY]
        deletes_before = fake_redis.calls["delete"]

        failing_store = MagicMock(spec=RecipeStore)
        failing_store.delete.side_effect = RecordStoreError("Record store delete failed")
        app.dependency_overrides[get_recipe_store] = lambda: failing_store

        response = client.delete(f"/recipes/{created_recipe['id']}", headers=auth_headers)

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["detail"] == GENERIC_ERROR
        assert fake_redis.data[LISTING_KEY] == cached
        assert fake_redis.calls["delete"] == deletes_before

    def test_delete_malformed_id(self, client: TestClient, auth_headers):
        response = client.delete("/recipes/xyz", headers=auth_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_delete_requires_session(self, client: TestClient, created_recipe, db_session):
        client.cookies.clear()

        response = client.delete(f"/recipes/{created_recipe['id']}")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert recipe_count(db_session) == 1

    def test_delete_invalidates_listing(self, client: TestClient, auth_headers, created_recipe, fake_redis):
        client.get("/recipes")

        client.delete(f"/recipes/{created_recipe['id']}", headers=auth_headers)

        assert LISTING_KEY not in fake_redis.data


class TestSearchRecipes:
    """Tests for GET /recipes/search"""

    @pytest.fixture
    def menu(self, client: TestClient, auth_headers):
        for name, tags in [
            ("Lemonade", ["Drink", "cold"]),
            ("Tea", ["drink", "hot"]),
            ("Cake", ["Dessert"]),
        ]:
            client.post("/recipes", json={"name": name, "tags": tags}, headers=auth_headers)

    def test_search_drink(self, client: TestClient, menu):
        response = client.get("/recipes/search", params={"tag": "drink"})

        assert response.status_code == status.HTTP_200_OK
        assert sorted(r["name"] for r in response.json()) == ["Lemonade", "Tea"]

    def test_search_is_case_insensitive(self, client: TestClient, menu):
        response = client.get("/recipes/search", params={"tag": "DESSERT"})

        assert [r["name"] for r in response.json()] == ["Cake"]

    def test_search_no_match(self, client: TestClient, menu):
        response = client.get("/recipes/search", params={"tag": "soup"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == []

    @pytest.mark.parametrize("params", [{}, {"tag": ""}])
    def test_search_without_tag_matches_nothing(self, client: TestClient, menu, params):
        response = client.get("/recipes/search", params=params)

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == []


class TestHealth:
    """Tests for / and /health"""

    def test_root(self, client: TestClient):
        response = client.get("/")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["docs"] == "/docs"

    def test_health(self, client: TestClient):
        response = client.get("/health")

        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == "connected"
        assert data["cache"] == "connected"

    def test_health_degraded_when_cache_down(self, client: TestClient, fake_redis):
        fake_redis.available = False

        response = client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "degraded"
        assert response.json()["cache"] == "disconnected"
