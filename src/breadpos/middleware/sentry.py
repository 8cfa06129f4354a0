"""Tag Sentry scope with the request id and who is on the register."""

import sentry_sdk
from starlette.types import ASGIApp, Receive, Scope, Send

from breadpos.core.logging import get_request_id


class SentryContextMiddleware:
    """Runs inside SessionMiddleware so the cookie session is already decoded."""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http":
            self._tag_scope(scope)
        await self.app(scope, receive, send)

    @staticmethod
    def _tag_scope(scope: Scope) -> None:
        session = scope.get("session") or {}
        request_id = get_request_id()

        sentry_sdk.set_tag("request_id", request_id)
        sentry_sdk.set_context("register", {
            "method": scope.get("method"),
            "path": scope.get("path"),
            "request_id": request_id,
            "view_only": bool(session.get("view_only")),
        })

        staff_id = session.get("staff_id")
        if staff_id:
            sentry_sdk.set_user({"id": staff_id, "role": session.get("staff_role")})
            sentry_sdk.set_tag("staff_id", staff_id)
        shift_id = session.get("shift_id")
        if shift_id:
            sentry_sdk.set_tag("shift_id", shift_id)
