"""Base controllers extended by the generated admin scaffold."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qsl

import msgspec

from .exceptions import HTTPError
from .http import Status
from .middleware import Guard, admin_url
from .requests import Request
from .responses import HTMLResponse, JSONResponse, RedirectResponse, Response

if TYPE_CHECKING:
    from .config import AdminConfig
    from .host import Host

GUARD_SERVICE = "admin.guard"


class Controller:
    def __init__(self, host: "Host") -> None:
        self.host = host

    @property
    def config(self) -> "AdminConfig":
        return self.host.make("admin.config")

    def view(self, name: str, *, status: int = int(Status.OK)) -> Response:
        return HTMLResponse(self.host.views.get(name), status=status)

    def admin_url(self, path: str = "") -> str:
        return admin_url(self.config.route.prefix, path)


class AuthController(Controller):
    """Login and logout endpoints backed by the ``admin.guard`` service."""

    @property
    def guard(self) -> Guard:
        return self.host.make(GUARD_SERVICE)

    async def get_login(self, request: Request) -> Response:
        if self.guard.check(request):
            return RedirectResponse(self.admin_url())
        return self.view("admin::login")

    async def post_login(self, request: Request) -> Response:
        credentials = await _credentials(request)
        if not credentials.get("username") or not credentials.get("password"):
            return JSONResponse(
                {"errors": {"username": "Username and password are required"}},
                status=int(Status.UNPROCESSABLE_ENTITY),
            )
        if not self.guard.attempt(credentials):
            return JSONResponse(
                {"errors": {"username": "These credentials do not match our records"}},
                status=int(Status.UNPROCESSABLE_ENTITY),
            )
        return RedirectResponse(self.admin_url())

    async def get_logout(self, request: Request) -> Response:
        self.guard.logout()
        return RedirectResponse(self.admin_url(self.config.auth.redirect_to))


async def _credentials(request: Request) -> dict[str, str]:
    if (request.header("content-type") or "").startswith("application/json"):
        try:
            payload: Any = await request.json()
        except msgspec.DecodeError as exc:
            raise HTTPError(Status.UNPROCESSABLE_ENTITY, "Malformed JSON body") from exc
        if not isinstance(payload, dict):
            return {}
        return {key: str(value) for key, value in payload.items() if key in ("username", "password")}
    try:
        text = request.text()
    except UnicodeDecodeError as exc:
        raise HTTPError(Status.UNPROCESSABLE_ENTITY, "Form body is not valid UTF-8") from exc
    return {key: value for key, value in parse_qsl(text) if key in ("username", "password")}


__all__ = ["AuthController", "Controller", "GUARD_SERVICE"]
