"""Tests for the WebAuthn REST endpoints."""
from datetime import datetime

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp import test_utils

from securevault.webauthn import (
    USER_KEY,
    InMemoryChallengeRegistry,
    InMemoryCredentialStore,
    WebAuthnProtocol,
    setup_webauthn,
)


@web.middleware
async def header_identity(request: web.Request, handler):
    """Stand-in for the authentication middleware."""
    user_id = request.headers.get("X-User-Id")
    if user_id:
        request[USER_KEY] = user_id
    return await handler(request)


@pytest_asyncio.fixture
async def client():
    app = web.Application(middlewares=[header_identity])
    challenges = InMemoryChallengeRegistry()
    setup_webauthn(app, WebAuthnProtocol(challenges, InMemoryCredentialStore()))
    async with test_utils.TestClient(test_utils.TestServer(app)) as client:
        yield client
    challenges.clear()


def credential_body(credential_id="c1", device_name="Laptop sensor"):
    return {
        "credential": {
            "id": credential_id,
            "rawId": credential_id,
            "type": "public-key",
            "response": {
                "attestationObject": "o2NmbXRkbm9uZQ",
                "clientDataJSON": "eyJ0eXBlIjoid2ViYXV0aG4uY3JlYXRlIn0",
            },
        },
        "deviceName": device_name,
    }


def assertion_body(credential_id="c1"):
    return {
        "credential": {
            "id": credential_id,
            "rawId": credential_id,
            "type": "public-key",
            "response": {"clientDataJSON": "eyJ0eXBlIjoid2ViYXV0aG4uZ2V0In0"},
        },
    }


async def enroll(client, user="u1", credential_id="c1"):
    headers = {"X-User-Id": user}
    resp = await client.post("/api/webauthn/register-challenge", headers=headers)
    assert resp.status == 200
    resp = await client.post(
        "/api/webauthn/register", json=credential_body(credential_id), headers=headers
    )
    assert resp.status == 201
    return await resp.json()


class TestRegistration:

    @pytest.mark.asyncio
    async def test_challenge(self, client):
        resp = await client.post(
            "/api/webauthn/register-challenge", headers={"X-User-Id": "u1"}
        )
        assert resp.status == 200
        data = await resp.json()
        assert data["challenge"]
        assert data["user"] == {"id": "u1"}
        assert data["rp"]["id"] == "localhost"

    @pytest.mark.asyncio
    async def test_register(self, client):
        data = await enroll(client)
        assert "id" in data
        resp = await client.get(
            "/api/webauthn/credentials", headers={"X-User-Id": "u1"}
        )
        listing = await resp.json()
        assert len(listing) == 1
        assert listing[0]["id"] == data["id"]
        assert listing[0]["deviceName"] == "Laptop sensor"
        assert listing[0]["lastUsed"] is None

    @pytest.mark.asyncio
    async def test_register_without_challenge(self, client):
        resp = await client.post(
            "/api/webauthn/register",
            json=credential_body(),
            headers={"X-User-Id": "u1"},
        )
        assert resp.status == 400
        assert (await resp.json())["message"] == "Challenge expired or not found"

    @pytest.mark.asyncio
    async def test_register_invalid_body(self, client):
        headers = {"X-User-Id": "u1"}
        await client.post("/api/webauthn/register-challenge", headers=headers)
        resp = await client.post(
            "/api/webauthn/register", json={"credential": {"id": "c1"}}, headers=headers
        )
        assert resp.status == 400
        data = await resp.json()
        assert data["message"] == "Invalid request body"
        assert data["errors"]

    @pytest.mark.asyncio
    async def test_register_non_json(self, client):
        resp = await client.post(
            "/api/webauthn/register", data="nope", headers={"X-User-Id": "u1"}
        )
        assert resp.status == 400

    @pytest.mark.asyncio
    async def test_unauthenticated(self, client):
        resp = await client.post("/api/webauthn/register-challenge")
        assert resp.status == 401


class TestAuthentication:

    @pytest.mark.asyncio
    async def test_no_fingerprint(self, client):
        resp = await client.post(
            "/api/webauthn/auth-challenge", headers={"X-User-Id": "u1"}
        )
        assert resp.status == 400
        assert (await resp.json())["message"] == "No fingerprint registered"

    @pytest.mark.asyncio
    async def test_authenticate(self, client):
        await enroll(client)
        headers = {"X-User-Id": "u1"}
        resp = await client.post("/api/webauthn/auth-challenge", headers=headers)
        data = await resp.json()
        assert data["allowCredentials"] == [{"id": "c1", "type": "public-key"}]
        resp = await client.post(
            "/api/webauthn/authenticate", json=assertion_body(), headers=headers
        )
        assert resp.status == 200
        assert await resp.json() == {"success": True, "verified": True}
        resp = await client.get("/api/webauthn/credentials", headers=headers)
        assert (await resp.json())[0]["lastUsed"] is not None

    @pytest.mark.asyncio
    async def test_authenticate_twice(self, client):
        await enroll(client)
        headers = {"X-User-Id": "u1"}
        await client.post("/api/webauthn/auth-challenge", headers=headers)
        await client.post("/api/webauthn/authenticate", json=assertion_body(), headers=headers)
        resp = await client.post(
            "/api/webauthn/authenticate", json=assertion_body(), headers=headers
        )
        assert resp.status == 400

    @pytest.mark.asyncio
    async def test_foreign_credential(self, client):
        await enroll(client, "u1", "c1")
        await enroll(client, "u2", "c2")
        headers = {"X-User-Id": "u1"}
        await client.post("/api/webauthn/auth-challenge", headers=headers)
        resp = await client.post(
            "/api/webauthn/authenticate", json=assertion_body("c2"), headers=headers
        )
        assert resp.status == 400
        assert (await resp.json())["message"] == "Invalid credential"


class TestCredentials:

    @pytest.mark.asyncio
    async def test_listing_shape(self, client):
        enrolled = await enroll(client)
        resp = await client.get(
            "/api/webauthn/credentials", headers={"X-User-Id": "u1"}
        )
        assert resp.status == 200
        listing = await resp.json()
        assert len(listing) == 1
        assert set(listing[0]) == {"id", "deviceName", "createdAt", "lastUsed"}
        assert listing[0]["id"] == enrolled["id"]
        assert listing[0]["deviceName"] == "Laptop sensor"
        assert datetime.fromisoformat(listing[0]["createdAt"]).tzinfo is not None
        assert listing[0]["lastUsed"] is None

    @pytest.mark.asyncio
    async def test_last_used_set_after_assertion(self, client):
        await enroll(client)
        headers = {"X-User-Id": "u1"}
        await client.post("/api/webauthn/auth-challenge", headers=headers)
        resp = await client.post(
            "/api/webauthn/authenticate", json=assertion_body(), headers=headers
        )
        assert resp.status == 200
        resp = await client.get("/api/webauthn/credentials", headers=headers)
        listing = await resp.json()
        last_used = datetime.fromisoformat(listing[0]["lastUsed"])
        assert last_used >= datetime.fromisoformat(listing[0]["createdAt"])

    @pytest.mark.asyncio
    async def test_other_owner_sees_nothing(self, client):
        await enroll(client, "u1", "c1")
        resp = await client.get(
            "/api/webauthn/credentials", headers={"X-User-Id": "u2"}
        )
        assert resp.status == 200
        assert await resp.json() == []

    @pytest.mark.asyncio
    async def test_unauthenticated(self, client):
        resp = await client.get("/api/webauthn/credentials")
        assert resp.status == 401


class TestIdentityKey:

    @pytest.mark.asyncio
    @pytest.mark.filterwarnings("error::aiohttp.web.NotAppKeyWarning")
    async def test_typed_request_key(self, client):
        resp = await client.post(
            "/api/webauthn/register-challenge", headers={"X-User-Id": "u1"}
        )
        assert resp.status == 200
        assert (await resp.json())["user"] == {"id": "u1"}

    def test_key_name(self):
        assert isinstance(USER_KEY, web.RequestKey)
