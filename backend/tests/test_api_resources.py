"""
RecipePlanner Backend - Owned Resource Endpoint Tests
======================================================

What:  Saved recipes, meal plans and the shopping list over HTTP, with two
       accounts side by side.

What we test:
    ✅ Each account sees only its own rows
    ✅ Deleting someone else's row is a 404 and leaves it in place
    ✅ A 404 for "not yours" looks exactly like a 404 for "doesn't exist"
    ✅ Shopping list replace semantics and meal plan ordering
"""

import pytest

from conftest import auth_headers

SOUP = {
    "spoonacular_id": 716429,
    "title": "Pasta with Garlic, Scallions, Cauliflower & Breadcrumbs",
    "image_url": "https://img.spoonacular.com/recipes/716429-312x231.jpg",
    "ingredients": ["garlic", "scallions", "cauliflower"],
}


@pytest.fixture
def two_users(register):
    async def _two_users():
        alice = await register("alice@example.com", name="Alice")
        bob = await register("bob@example.com", name="Bob")
        return auth_headers(alice), auth_headers(bob)
    return _two_users


async def _save(client, headers, **overrides):
    response = await client.post("/api/recipes/save-recipe", json={**SOUP, **overrides}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestSavedRecipes:

    @pytest.mark.asyncio
    async def test_save_and_list(self, client, two_users):
        alice, _ = await two_users()
        saved = await _save(client, alice)

        assert saved["title"] == SOUP["title"]
        assert saved["ingredients"] == SOUP["ingredients"]
        assert "user_id" not in saved

        response = await client.get("/api/recipes/my-recipes", headers=alice)
        assert response.status_code == 200
        assert [r["id"] for r in response.json()] == [saved["id"]]

    @pytest.mark.asyncio
    async def test_lists_are_per_user(self, client, two_users):
        alice, bob = await two_users()
        await _save(client, alice, title="Alice's soup")
        await _save(client, bob, title="Bob's stew")

        alice_titles = [r["title"] for r in (await client.get("/api/recipes/my-recipes", headers=alice)).json()]
        bob_titles = [r["title"] for r in (await client.get("/api/recipes/my-recipes", headers=bob)).json()]
        assert alice_titles == ["Alice's soup"]
        assert bob_titles == ["Bob's stew"]

    @pytest.mark.asyncio
    async def test_cannot_delete_someone_elses_recipe(self, client, two_users):
        alice, bob = await two_users()
        recipe = await _save(client, alice)

        response = await client.delete(f"/api/recipes/my-recipes/{recipe['id']}", headers=bob)
        assert response.status_code == 404

        still_there = (await client.get("/api/recipes/my-recipes", headers=alice)).json()
        assert [r["id"] for r in still_there] == [recipe["id"]]

    @pytest.mark.asyncio
    async def test_not_yours_and_missing_are_indistinguishable(self, client, two_users):
        alice, bob = await two_users()
        recipe = await _save(client, alice)

        not_yours = await client.delete(f"/api/recipes/my-recipes/{recipe['id']}", headers=bob)
        missing = await client.delete("/api/recipes/my-recipes/99999", headers=bob)

        assert not_yours.status_code == missing.status_code == 404
        assert not_yours.json()["error"] == missing.json()["error"] == "not_found"
        assert not_yours.json()["message"] == missing.json()["message"]

    @pytest.mark.asyncio
    async def test_delete_own_recipe(self, client, two_users):
        alice, _ = await two_users()
        recipe = await _save(client, alice)

        response = await client.delete(f"/api/recipes/my-recipes/{recipe['id']}", headers=alice)
        assert response.status_code == 200
        assert (await client.get("/api/recipes/my-recipes", headers=alice)).json() == []

        again = await client.delete(f"/api/recipes/my-recipes/{recipe['id']}", headers=alice)
        assert again.status_code == 404

    @pytest.mark.asyncio
    async def test_owner_field_in_body_is_ignored(self, client, two_users):
        alice, bob = await two_users()
        await _save(client, alice, user_id=2)

        assert len((await client.get("/api/recipes/my-recipes", headers=alice)).json()) == 1
        assert (await client.get("/api/recipes/my-recipes", headers=bob)).json() == []

    @pytest.mark.asyncio
    async def test_blank_title_rejected(self, client, two_users):
        alice, _ = await two_users()
        response = await client.post(
            "/api/recipes/save-recipe", json={**SOUP, "title": "   "}, headers=alice
        )
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"


class TestMealPlans:

    @pytest.mark.asyncio
    async def test_add_and_list_with_recipe_details(self, client, two_users):
        alice, _ = await two_users()
        recipe = await _save(client, alice)

        response = await client.post(
            "/api/meal-plans/add",
            json={"recipe_id": recipe["id"], "day_of_week": "monday", "meal_type": "Dinner"},
            headers=alice,
        )
        assert response.status_code == 201
        entry = response.json()
        assert entry["day_of_week"] == "Monday"
        assert entry["meal_type"] == "dinner"

        listed = (await client.get("/api/meal-plans", headers=alice)).json()
        assert len(listed) == 1
        assert listed[0]["title"] == SOUP["title"]
        assert listed[0]["image_url"] == SOUP["image_url"]

    @pytest.mark.asyncio
    async def test_ordered_by_weekday_then_meal(self, client, two_users):
        alice, _ = await two_users()
        recipe = await _save(client, alice)
        for day, meal in [("Sunday", "breakfast"), ("Monday", "dinner"),
                          ("Wednesday", "lunch"), ("Monday", "breakfast")]:
            await client.post(
                "/api/meal-plans/add",
                json={"recipe_id": recipe["id"], "day_of_week": day, "meal_type": meal},
                headers=alice,
            )

        listed = (await client.get("/api/meal-plans", headers=alice)).json()
        assert [(e["day_of_week"], e["meal_type"]) for e in listed] == [
            ("Monday", "breakfast"),
            ("Monday", "dinner"),
            ("Wednesday", "lunch"),
            ("Sunday", "breakfast"),
        ]

    @pytest.mark.asyncio
    async def test_cannot_plan_someone_elses_recipe(self, client, two_users):
        alice, bob = await two_users()
        recipe = await _save(client, alice)

        response = await client.post(
            "/api/meal-plans/add",
            json={"recipe_id": recipe["id"], "day_of_week": "Monday", "meal_type": "lunch"},
            headers=bob,
        )
        assert response.status_code == 404
        assert (await client.get("/api/meal-plans", headers=bob)).json() == []

    @pytest.mark.asyncio
    async def test_invalid_day(self, client, two_users):
        alice, _ = await two_users()
        recipe = await _save(client, alice)
        response = await client.post(
            "/api/meal-plans/add",
            json={"recipe_id": recipe["id"], "day_of_week": "Funday", "meal_type": "lunch"},
            headers=alice,
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_delete_is_owner_scoped(self, client, two_users):
        alice, bob = await two_users()
        recipe = await _save(client, alice)
        entry = (await client.post(
            "/api/meal-plans/add",
            json={"recipe_id": recipe["id"], "day_of_week": "Friday", "meal_type": "snack"},
            headers=alice,
        )).json()

        assert (await client.delete(f"/api/meal-plans/delete/{entry['id']}", headers=bob)).status_code == 404
        assert len((await client.get("/api/meal-plans", headers=alice)).json()) == 1

        assert (await client.delete(f"/api/meal-plans/delete/{entry['id']}", headers=alice)).status_code == 200
        assert (await client.get("/api/meal-plans", headers=alice)).json() == []

    @pytest.mark.asyncio
    async def test_deleting_recipe_removes_its_entries(self, client, two_users):
        alice, _ = await two_users()
        recipe = await _save(client, alice)
        await client.post(
            "/api/meal-plans/add",
            json={"recipe_id": recipe["id"], "day_of_week": "Friday", "meal_type": "snack"},
            headers=alice,
        )

        await client.delete(f"/api/recipes/my-recipes/{recipe['id']}", headers=alice)
        assert (await client.get("/api/meal-plans", headers=alice)).json() == []


class TestShoppingList:

    @pytest.mark.asyncio
    async def test_empty_by_default(self, client, two_users):
        alice, _ = await two_users()
        response = await client.get("/api/shopping-list", headers=alice)
        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_replace_keeps_order(self, client, two_users):
        alice, _ = await two_users()
        response = await client.post(
            "/api/shopping-list", json={"ingredients": ["milk", "eggs", "flour"]}, headers=alice
        )
        assert response.status_code == 200
        assert (await client.get("/api/shopping-list", headers=alice)).json() == ["milk", "eggs", "flour"]

    @pytest.mark.asyncio
    async def test_replace_is_not_a_merge(self, client, two_users):
        alice, _ = await two_users()
        await client.post("/api/shopping-list", json={"ingredients": ["milk", "eggs"]}, headers=alice)
        await client.post("/api/shopping-list", json={"ingredients": ["flour"]}, headers=alice)
        assert (await client.get("/api/shopping-list", headers=alice)).json() == ["flour"]

    @pytest.mark.asyncio
    async def test_replace_with_empty_list_clears(self, client, two_users):
        alice, _ = await two_users()
        await client.post("/api/shopping-list", json={"ingredients": ["milk"]}, headers=alice)
        await client.post("/api/shopping-list", json={"ingredients": []}, headers=alice)
        assert (await client.get("/api/shopping-list", headers=alice)).json() == []

    @pytest.mark.asyncio
    async def test_lists_are_per_user(self, client, two_users):
        alice, bob = await two_users()
        await client.post("/api/shopping-list", json={"ingredients": ["milk"]}, headers=alice)
        await client.post("/api/shopping-list", json={"ingredients": ["bread"]}, headers=bob)

        assert (await client.get("/api/shopping-list", headers=alice)).json() == ["milk"]
        assert (await client.get("/api/shopping-list", headers=bob)).json() == ["bread"]

    @pytest.mark.asyncio
    async def test_blank_item_rejected_and_list_untouched(self, client, two_users):
        alice, _ = await two_users()
        await client.post("/api/shopping-list", json={"ingredients": ["milk"]}, headers=alice)

        response = await client.post(
            "/api/shopping-list", json={"ingredients": ["eggs", "  "]}, headers=alice
        )
        assert response.status_code == 400
        assert response.json()["details"]["errors"][0]["field"] == "ingredients.1"
        assert (await client.get("/api/shopping-list", headers=alice)).json() == ["milk"]

    @pytest.mark.asyncio
    async def test_failed_replace_rolls_back(self, client, two_users, monkeypatch):
        """Delete ran, insert failed: the old list must survive."""
        from recipeplanner.exceptions import DatabaseError
        from recipeplanner.services import scoped_store

        alice, _ = await two_users()
        await client.post("/api/shopping-list", json={"ingredients": ["milk"]}, headers=alice)

        async def failing_add_many(db, owner_id, rows):
            raise DatabaseError()

        monkeypatch.setattr(scoped_store.shopping_list_store, "add_many", failing_add_many)
        response = await client.post(
            "/api/shopping-list", json={"ingredients": ["eggs"]}, headers=alice
        )
        assert response.status_code == 500
        assert response.json()["error"] == "server_error"

        monkeypatch.undo()
        assert (await client.get("/api/shopping-list", headers=alice)).json() == ["milk"]
