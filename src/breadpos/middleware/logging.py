"""Request id propagation and access logging."""

import time
import uuid

import structlog
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from breadpos.core.logging import set_request_id

# Polled by the container and the register; not worth a log line each
QUIET_PATHS = frozenset({"/health"})


class RequestIDMiddleware:
    """Tag each request with an id (client supplied ``X-Request-ID`` or a new uuid4).

    The id is bound into structlog's contextvars so every log line emitted
    while handling the request carries it, and it is echoed back as a
    response header for support tickets from the counter.
    """

    def __init__(self, app: ASGIApp):
        self.app = app
        self.logger = structlog.get_logger(__name__)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        supplied = next((value for name, value in scope.get("headers", []) if name == b"x-request-id"), None)
        request_id = supplied.decode("latin-1") if supplied else str(uuid.uuid4())
        set_request_id(request_id)
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        path = scope["path"]
        quiet = path in QUIET_PATHS
        began = time.perf_counter()
        if not quiet:
            self.logger.info("request.start", method=scope["method"], path=path)

        async def send_with_request_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                message["headers"] = [*message.get("headers", []), (b"x-request-id", request_id.encode("latin-1"))]
                if not quiet:
                    self.logger.info(
                        "request.complete",
                        status_code=message["status"],
                        duration_ms=round((time.perf_counter() - began) * 1000, 1),
                    )
            await send(message)

        await self.app(scope, receive, send_with_request_id)
