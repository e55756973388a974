"""
RecipePlanner Backend - Auth Endpoints & Access Guard Tests
============================================================

What:  /api/auth over HTTP, and the guard in front of every protected route.

What we test:
    ✅ Register (201) and login (200) return a token usable right away
    ✅ Error codes and messages for bad input, duplicates and bad credentials
    ✅ Missing / expired / tampered / foreign tokens → 401, same body shape
    ✅ Profile read, update and delete through the token
    ✅ A token outliving its account is refused everywhere
"""

from datetime import timedelta

import pytest

from conftest import DEFAULT_PASSWORD, auth_headers
from recipeplanner.services.token_service import TokenClaims, TokenCodec

PROTECTED_ROUTES = [
    ("GET", "/api/auth/profile"),
    ("PUT", "/api/auth/profile"),
    ("DELETE", "/api/auth/profile"),
    ("POST", "/api/recipes/save-recipe"),
    ("GET", "/api/recipes/my-recipes"),
    ("DELETE", "/api/recipes/my-recipes/1"),
    ("POST", "/api/meal-plans/add"),
    ("GET", "/api/meal-plans"),
    ("DELETE", "/api/meal-plans/delete/1"),
    ("GET", "/api/shopping-list"),
    ("POST", "/api/shopping-list"),
]


class TestRegisterAndLogin:

    @pytest.mark.asyncio
    async def test_register(self, client):
        response = await client.post(
            "/api/auth/register",
            json={"email": "cook@example.com", "password": "secret123", "name": "Cook"},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["expires_in"] == 3600
        assert isinstance(body["token"], str) and body["token"].count(".") == 2

    @pytest.mark.asyncio
    async def test_register_accepts_username_alias(self, client):
        response = await client.post(
            "/api/auth/register",
            json={"email": "cook@example.com", "password": "secret123", "username": "Chef"},
        )
        token = response.json()["token"]
        profile = await client.get("/api/auth/profile", headers=auth_headers(token))
        assert profile.json()["name"] == "Chef"

    @pytest.mark.asyncio
    async def test_token_from_register_works_immediately(self, client, register):
        token = await register()
        response = await client.get("/api/auth/profile", headers=auth_headers(token))
        assert response.status_code == 200
        assert response.json() == {"name": "Cook", "email": "cook@example.com"}

    @pytest.mark.asyncio
    async def test_register_invalid_fields(self, client):
        response = await client.post(
            "/api/auth/register", json={"email": "nope", "password": "123"}
        )
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert [e["field"] for e in body["details"]["errors"]] == ["email", "password"]

    @pytest.mark.asyncio
    async def test_register_email_with_trailing_newline(self, client):
        response = await client.post(
            "/api/auth/register", json={"email": "a@b.co\n", "password": "secret123"}
        )
        assert response.status_code == 400
        assert response.json()["details"]["errors"][0]["field"] == "email"

    @pytest.mark.asyncio
    async def test_register_duplicate(self, client, register):
        await register()
        response = await client.post(
            "/api/auth/register",
            json={"email": "cook@example.com", "password": "secret123"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "duplicate_user"
        assert response.json()["message"] == "User already exists"

    @pytest.mark.asyncio
    async def test_login(self, client, register):
        await register()
        response = await client.post(
            "/api/auth/login", json={"email": "cook@example.com", "password": DEFAULT_PASSWORD}
        )
        assert response.status_code == 200
        token = response.json()["token"]
        profile = await client.get("/api/auth/profile", headers=auth_headers(token))
        assert profile.status_code == 200

    @pytest.mark.asyncio
    async def test_login_failures_are_identical(self, client, register):
        await register()
        unknown = await client.post(
            "/api/auth/login", json={"email": "ghost@example.com", "password": DEFAULT_PASSWORD}
        )
        wrong = await client.post(
            "/api/auth/login", json={"email": "cook@example.com", "password": "wrong-password"}
        )
        assert unknown.status_code == wrong.status_code == 400
        unknown_body, wrong_body = unknown.json(), wrong.json()
        unknown_body.pop("request_id")
        wrong_body.pop("request_id")
        assert unknown_body == wrong_body
        assert unknown.json()["message"] == "Invalid Credentials"

    @pytest.mark.asyncio
    async def test_malformed_json_body(self, client):
        response = await client.post(
            "/api/auth/login",
            content=b"{not json",
            headers={"content-type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"


class TestAccessGuard:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method,path", PROTECTED_ROUTES)
    async def test_missing_token(self, client, method, path):
        response = await client.request(method, path, json={})
        assert response.status_code == 401
        body = response.json()
        assert body["error"] == "unauthenticated"
        assert body["message"] == "No token, authorization denied"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method,path", PROTECTED_ROUTES)
    async def test_garbage_token(self, client, method, path):
        response = await client.request(
            method, path, json={}, headers=auth_headers("garbage")
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Token is not valid"

    @pytest.mark.asyncio
    async def test_blank_token_counts_as_missing(self, client):
        response = await client.get("/api/auth/profile", headers=auth_headers("   "))
        assert response.status_code == 401
        assert response.json()["message"] == "No token, authorization denied"

    @pytest.mark.asyncio
    async def test_expired_token(self, app, client, register):
        await register()
        codec = app.state.token_codec
        expired = codec.issue(TokenClaims(user_id=1, email="cook@example.com"),
                              ttl=timedelta(seconds=-5))
        response = await client.get("/api/auth/profile", headers=auth_headers(expired))
        assert response.status_code == 401
        assert response.json()["message"] == "Token is not valid"

    @pytest.mark.asyncio
    async def test_token_signed_with_another_secret(self, client, register):
        await register()
        foreign = TokenCodec(secret="someone-elses-secret-of-at-least-32-bytes").issue(
            TokenClaims(user_id=1, email="cook@example.com")
        )
        response = await client.get("/api/auth/profile", headers=auth_headers(foreign))
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_bearer_header_is_not_accepted(self, client, register):
        token = await register()
        response = await client.get(
            "/api/auth/profile", headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_rejection_reason_not_in_response(self, app, client):
        expired = app.state.token_codec.issue(
            TokenClaims(user_id=1, email="cook@example.com"), ttl=timedelta(seconds=-5)
        )
        response = await client.get("/api/auth/profile", headers=auth_headers(expired))
        assert "expired" not in response.text
        assert "details" not in response.json()

    @pytest.mark.asyncio
    async def test_public_routes_need_no_token(self, client):
        assert (await client.get("/health")).status_code == 200
        assert (await client.get("/api/recipes/search/apples")).status_code == 200
        assert (await client.get("/api/recipes/73420")).status_code == 200


class TestProfileEndpoints:

    @pytest.mark.asyncio
    async def test_update_password_then_login(self, client, register):
        token = await register()
        response = await client.put(
            "/api/auth/profile",
            json={"current_password": DEFAULT_PASSWORD, "new_password": "brand-new"},
            headers=auth_headers(token),
        )
        assert response.status_code == 200
        assert response.json() == {"message": "Profile updated successfully"}

        login = await client.post(
            "/api/auth/login", json={"email": "cook@example.com", "password": "brand-new"}
        )
        assert login.status_code == 200

    @pytest.mark.asyncio
    async def test_wrong_current_password(self, client, register):
        token = await register()
        response = await client.put(
            "/api/auth/profile",
            json={"current_password": "not-it-at-all", "new_password": "brand-new"},
            headers=auth_headers(token),
        )
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_current_password"
        assert response.json()["message"] == "Invalid current password"

    @pytest.mark.asyncio
    async def test_delete_account(self, client, register):
        token = await register()
        response = await client.delete("/api/auth/profile", headers=auth_headers(token))
        assert response.status_code == 200

        # The token is still well-formed, but its account is gone
        profile = await client.get("/api/auth/profile", headers=auth_headers(token))
        assert profile.status_code == 401
        assert profile.json()["message"] == "Token is not valid"
        login = await client.post(
            "/api/auth/login", json={"email": "cook@example.com", "password": DEFAULT_PASSWORD}
        )
        assert login.status_code == 400

    @pytest.mark.asyncio
    async def test_email_can_be_reused_after_deletion(self, client, register):
        token = await register()
        await client.delete("/api/auth/profile", headers=auth_headers(token))
        await register()


class TestTokenOfDeletedAccount:

    @pytest.mark.asyncio
    async def test_cannot_write_after_deletion(self, client, register):
        headers = auth_headers(await register())
        await client.delete("/api/auth/profile", headers=headers)

        saved = await client.post(
            "/api/recipes/save-recipe", json={"title": "Soup", "ingredients": []}, headers=headers
        )
        listed = await client.post("/api/shopping-list", json={"ingredients": ["eggs"]}, headers=headers)
        assert saved.status_code == listed.status_code == 401

    @pytest.mark.asyncio
    async def test_old_token_does_not_reach_next_account(self, client, register):
        old = auth_headers(await register("old@example.com"))
        await client.delete("/api/auth/profile", headers=old)
        new = auth_headers(await register("new@example.com"))

        assert (await client.get("/api/auth/profile", headers=old)).status_code == 401
        assert (await client.get("/api/auth/profile", headers=new)).json()["email"] == "new@example.com"

    @pytest.mark.asyncio
    async def test_token_with_stale_email_refused(self, app, client, register):
        token = await register("cook@example.com")
        user_id = app.state.token_codec.verify(token).user_id
        stale = app.state.token_codec.issue(
            TokenClaims(user_id=user_id, email="previous-owner@example.com")
        )
        response = await client.get("/api/recipes/my-recipes", headers=auth_headers(stale))
        assert response.status_code == 401
