"""
Middleware that assigns a request ID to every incoming request.

A client-supplied ``X-Request-ID`` is reused when it looks like an id;
anything else is replaced with a fresh one so log lines stay parseable.
"""

import re
import uuid

from fastapi import Request

from core.logging import bind_context, clear_context

REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def _pick_request_id(header_value: str | None) -> str:
    if header_value and REQUEST_ID_PATTERN.match(header_value):
        return header_value
    return str(uuid.uuid4())


class RequestIDMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive=receive)
        request_id = _pick_request_id(request.headers.get("X-Request-ID"))
        scope.setdefault("state", {})["request_id"] = request_id

        # Reset per request, not after it: the 500 handler runs outside this
        # middleware and logs with the id still bound
        clear_context()
        bind_context(request_id=request_id)

        async def send_wrapper(response):
            if response["type"] == "http.response.start":
                headers = response.setdefault("headers", [])
                headers.append((b"x-request-id", request_id.encode()))
            await send(response)

        await self.app(scope, receive, send_wrapper)
