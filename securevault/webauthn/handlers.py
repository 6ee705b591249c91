"""
WebAuthn REST endpoints (aiohttp).

The caller's identity is read from ``request[USER_KEY]``, which an
upstream authentication middleware is expected to set.
"""
import logging
from typing import Any

import orjson
from aiohttp import web
from pydantic import ValidationError

from ..exceptions import (
    ChallengeNotFound,
    CredentialAlreadyEnrolled,
    CredentialOwnershipMismatch,
    NoCredentialEnrolled,
)
from .protocol import AssertionRequest, RegistrationRequest, WebAuthnProtocol

logger = logging.getLogger("securevault.webauthn")

PROTOCOL_KEY = web.AppKey("webauthn_protocol", WebAuthnProtocol)
# Owner id, set by the upstream authentication middleware.
USER_KEY = web.RequestKey("user_id", str)

routes = web.RouteTableDef()

_CLIENT_ERRORS = (
    ChallengeNotFound,
    NoCredentialEnrolled,
    CredentialOwnershipMismatch,
    CredentialAlreadyEnrolled,
)


def _dumps(obj: Any) -> str:
    return orjson.dumps(obj).decode("utf-8")


def json_response(data: Any, status: int = 200) -> web.Response:
    return web.json_response(data, status=status, dumps=_dumps)


def _owner(request: web.Request) -> str:
    owner_id = request.get(USER_KEY)
    if not owner_id:
        raise web.HTTPUnauthorized(
            text=_dumps({"message": "Unauthorized"}),
            content_type="application/json",
        )
    return str(owner_id)


def _protocol(request: web.Request) -> WebAuthnProtocol:
    return request.app[PROTOCOL_KEY]


async def _body(request: web.Request) -> dict:
    try:
        data = await request.json(loads=orjson.loads)
    except ValueError:
        data = None
    if not isinstance(data, dict):
        raise web.HTTPBadRequest(
            text=_dumps({"message": "Invalid request body"}),
            content_type="application/json",
        )
    return data


@web.middleware
async def webauthn_errors(request: web.Request, handler):
    """Map protocol errors to JSON 400 responses."""
    try:
        return await handler(request)
    except _CLIENT_ERRORS as err:
        return json_response({"message": err.message}, status=400)
    except ValidationError as err:
        logger.debug("Invalid WebAuthn payload: %s", err.error_count())
        return json_response(
            {"message": "Invalid request body", "errors": err.errors(
                include_url=False, include_input=False, include_context=False
            )},
            status=400,
        )


@routes.post("/api/webauthn/register-challenge")
async def register_challenge(request: web.Request) -> web.Response:
    owner_id = _owner(request)
    options = await _protocol(request).begin_registration(owner_id)
    return json_response(options.model_dump(by_alias=True))


@routes.post("/api/webauthn/register")
async def register(request: web.Request) -> web.Response:
    owner_id = _owner(request)
    payload = RegistrationRequest.model_validate(await _body(request))
    credential = await _protocol(request).finish_registration(owner_id, payload)
    return json_response({"id": credential.id}, status=201)


@routes.get("/api/webauthn/credentials")
async def list_credentials(request: web.Request) -> web.Response:
    owner_id = _owner(request)
    credentials = await _protocol(request).list_credentials(owner_id)
    return json_response([c.summary() for c in credentials])


@routes.post("/api/webauthn/auth-challenge")
async def auth_challenge(request: web.Request) -> web.Response:
    owner_id = _owner(request)
    options = await _protocol(request).begin_assertion(owner_id)
    return json_response(options.model_dump(by_alias=True))


@routes.post("/api/webauthn/authenticate")
async def authenticate(request: web.Request) -> web.Response:
    owner_id = _owner(request)
    payload = AssertionRequest.model_validate(await _body(request))
    result = await _protocol(request).finish_assertion(owner_id, payload)
    return json_response({"success": result.success, "verified": result.verified})


def setup_webauthn(app: web.Application, protocol: WebAuthnProtocol) -> None:
    """Register the WebAuthn routes and error middleware on ``app``."""
    app[PROTOCOL_KEY] = protocol
    app.middlewares.append(webauthn_errors)
    app.add_routes(routes)
