"""
ResourcePulse Backend - Audit Middleware
========================================

What:  Writes one `audit_logs` row for every successful mutating API call.
When:  POST/PUT/PATCH/DELETE under /api/ that returns 2xx. Auth endpoints
       are skipped (they carry credentials and change no business data).
How:   Request and response bytes are observed as they pass through. Once
       the wrapped app has finished, the entity is derived from the path and
       the row is written in a session of its own, so a failed audit write
       never rolls back or fails the request itself.

Entity derivation examples:
    PUT    /api/projects/5                -> ("Project", "5")
    PATCH  /api/requests/7/status         -> ("Request", "7")
    POST   /api/projects/5/milestones     -> ("Milestone", id from response)
    PUT    /api/settings                  -> ("Setting", "N/A")
    POST   /api/audit-logs                -> ("AuditLog", ...)
"""

import json
import logging
from typing import Any, Callable, Optional, Tuple

from starlette.datastructures import Headers
from starlette.requests import Request
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from resource_pulse import database
from resource_pulse.config import settings
from resource_pulse.middleware.logging import client_ip
from resource_pulse.security import auth_manager, extract_bearer_token
from resource_pulse.services.audit_service import audit_service

logger = logging.getLogger(__name__)

AUDITED_METHODS = {"POST", "PUT", "PATCH", "DELETE"}
API_PREFIX = "/api/"
SKIPPED_PREFIXES = ("/api/auth/",)
REDACTED = "***"
_SENSITIVE_MARKERS = ("password", "token", "secret")
# Trailing segments that act on the preceding record instead of naming a collection
ACTION_SEGMENTS = {"status"}


def singularize(segment: str) -> str:
    """`projects` -> `Project`, `audit-logs` -> `AuditLog`, `status` -> `Status`."""
    words = [w for w in segment.replace("_", "-").split("-") if w]
    if not words:
        return "Unknown"
    last = words[-1]
    if last.endswith("ies"):
        last = last[:-3] + "y"
    elif last.endswith("s") and not last.endswith(("ss", "us")):
        last = last[:-1]
    words[-1] = last
    return "".join(w[:1].upper() + w[1:] for w in words)


def derive_entity(path: str) -> Tuple[str, Optional[str]]:
    """
    Maps an API path to `(entity_name, entity_id)`.

    A trailing numeric segment is the id and the segment before it names the
    entity. A trailing action (see ACTION_SEGMENTS) targets the nearest id
    before it. Any other trailing segment is a collection: it names the
    entity and the id is None (the caller falls back to the response body).
    """
    if path.startswith(API_PREFIX):
        path = path[len(API_PREFIX):]
    segments = [s for s in path.strip("/").split("/") if s]
    if not segments:
        return "Unknown", None

    if segments[-1] in ACTION_SEGMENTS:
        for index in range(len(segments) - 2, 0, -1):
            if segments[index].isdigit():
                return singularize(segments[index - 1]), segments[index]
    elif segments[-1].isdigit():
        entity = singularize(segments[-2]) if len(segments) > 1 else "Unknown"
        return entity, segments[-1]

    return singularize(segments[-1]), None


def redact(value: Any) -> Any:
    """Masks credential-looking keys anywhere in a JSON document."""
    if isinstance(value, dict):
        return {
            k: REDACTED if any(m in str(k).lower() for m in _SENSITIVE_MARKERS) else redact(v)
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [redact(v) for v in value]
    return value


def _parse_json(raw: bytes) -> Any:
    if not raw:
        return None
    try:
        return json.loads(raw)
    except (ValueError, UnicodeDecodeError):
        return None


class AuditMiddleware:
    """
    Pure ASGI middleware.

    The row is written only after the wrapped app has returned, which is
    after the route's own session has committed. A streaming
    `BaseHTTPMiddleware` would race that commit.

    Args:
        session_factory: zero-argument callable returning an AsyncSession
            context manager. Defaults to `database.async_session_factory`,
            looked up per request.
    """

    MAX_CAPTURE_BYTES = 1024 * 1024

    def __init__(self, app: ASGIApp, session_factory: Optional[Callable] = None):
        self.app = app
        self._session_factory = session_factory

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not self._should_audit(scope):
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        entity_name, entity_id = derive_entity(request.url.path)
        capture_response = entity_id is None

        request_body = bytearray()
        response_body = bytearray()
        status_code = 500
        response_is_json = False

        async def receive_wrapper() -> Message:
            message = await receive()
            if message["type"] == "http.request":
                request_body.extend(message.get("body", b""))
            return message

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code, response_is_json
            if message["type"] == "http.response.start":
                status_code = message["status"]
                content_type = Headers(raw=message.get("headers", [])).get("content-type", "")
                response_is_json = "application/json" in content_type
            elif message["type"] == "http.response.body" and capture_response:
                if response_is_json and len(response_body) < self.MAX_CAPTURE_BYTES:
                    response_body.extend(message.get("body", b""))
            await send(message)

        await self.app(scope, receive_wrapper, send_wrapper)

        if not 200 <= status_code < 300:
            return

        if entity_id is None:
            data = _parse_json(bytes(response_body))
            if isinstance(data, dict) and data.get("id") is not None:
                entity_id = str(data["id"])

        token = extract_bearer_token(request.headers.get("Authorization"))
        changed_by = (auth_manager.peek_user_id(token) if token else None) or "Anonymous"
        new_values = _parse_json(bytes(request_body))

        try:
            factory = self._session_factory or database.async_session_factory
            async with factory() as session:
                await audit_service.record(
                    session,
                    entity_name=entity_name,
                    entity_id=entity_id or "N/A",
                    action=request.method,
                    changed_by=changed_by,
                    new_values=redact(new_values) if new_values is not None else None,
                    request_path=request.url.path,
                    ip_address=client_ip(request),
                )
                await session.commit()
        except Exception:
            # The business change is already committed and the response sent;
            # a lost audit row is logged, not surfaced to the client.
            logger.exception(
                "Failed to write audit log for %s %s", request.method, request.url.path
            )

    @staticmethod
    def _should_audit(scope: Scope) -> bool:
        path = scope.get("path", "")
        return (
            settings.audit_enabled
            and scope.get("method") in AUDITED_METHODS
            and path.startswith(API_PREFIX)
            and not path.startswith(SKIPPED_PREFIXES)
        )
