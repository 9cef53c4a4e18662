from __future__ import annotations

import pathlib

import pytest

from praetor.exceptions import HTTPError, RegistrationError
from praetor.host import Host, UrlGenerator
from praetor.requests import Request
from praetor.responses import PlainTextResponse
from praetor.serialization import json_decode


def test_url_generator_honours_forced_scheme() -> None:
    urls = UrlGenerator("http://example.com/base/")
    assert urls.to("admin") == "http://example.com/base/admin"
    urls.force_scheme("https")
    assert urls.to("/admin") == "https://example.com/base/admin"
    assert urls.to() == "https://example.com/base"


def test_singletons_are_built_once() -> None:
    host = Host()
    calls: list[Host] = []

    def factory(container: Host) -> object:
        calls.append(container)
        return object()

    host.singleton("thing", factory)
    assert host.bound("thing")
    assert host.make("thing") is host.make("thing")
    assert calls == [host]
    with pytest.raises(LookupError):
        host.make("missing")


def test_commands_are_unique_and_callable() -> None:
    host = Host()
    host.command("demo", lambda: 3)
    assert host.call("demo") == 3
    assert "demo" in host.commands
    with pytest.raises(RegistrationError):
        host.command("demo", lambda: 0)
    with pytest.raises(LookupError):
        host.call("missing")


def test_relative_paths(tmp_path: pathlib.Path) -> None:
    host = Host(tmp_path)
    assert host.relative(tmp_path / "app" / "Admin") == str(pathlib.Path("app") / "Admin")
    assert host.relative("/elsewhere/file") == "/elsewhere/file"


def test_publish_copies_files_without_overwriting(tmp_path: pathlib.Path) -> None:
    source = tmp_path / "package" / "views"
    (source / "auth").mkdir(parents=True)
    (source / "index.html").write_text("index", encoding="utf-8")
    (source / "auth" / "login.html").write_text("login", encoding="utf-8")
    project = tmp_path / "project"
    host = Host(project)
    host.publishes({source: "resources/views/vendor/admin"}, "admin-views")

    written = host.publish("admin-views")
    target = project / "resources" / "views" / "vendor" / "admin"
    assert sorted(written) == sorted([target / "auth" / "login.html", target / "index.html"])

    (target / "index.html").write_text("customised", encoding="utf-8")
    assert host.publish("admin-views") == []
    assert (target / "index.html").read_text(encoding="utf-8") == "customised"

    host.publish("admin-views", force=True)
    assert (target / "index.html").read_text(encoding="utf-8") == "index"
    with pytest.raises(LookupError):
        host.publish("unknown")


@pytest.mark.asyncio
async def test_dispatch_runs_route_middleware_and_endpoint() -> None:
    host = Host()
    events: list[str] = []

    async def tag(request, handler):
        events.append(request.path)
        return await handler(request)

    async def show(request: Request, user_id: str):
        return {"user": user_id}

    host.router.alias_middleware("tag", tag)
    host.router.middleware_group("admin", ["tag"])
    with host.router.group(prefix="admin", middleware=("admin",)):
        host.router.get("/users/{user_id}", show)

    response = await host.dispatch("GET", "/admin/users/5")
    assert response.status == 200
    assert json_decode(response.body) == {"user": "5"}
    assert events == ["/admin/users/5"]
    assert host.request is not None and host.request.path == "/admin/users/5"


@pytest.mark.asyncio
async def test_dispatch_converts_errors_and_unknown_routes() -> None:
    host = Host()

    def forbidden(request: Request):
        raise HTTPError(403, "nope")

    def text(request: Request):
        return PlainTextResponse("plain")

    host.router.get("/forbidden", forbidden)
    host.router.get("/text", text)

    denied = await host.dispatch("GET", "/forbidden")
    missing = await host.dispatch("GET", "/missing")
    plain = await host.dispatch("GET", "/text")

    assert denied.status == 403
    assert json_decode(denied.body)["error"]["detail"] == "nope"
    assert missing.status == 404
    assert plain.body == b"plain"


@pytest.mark.asyncio
async def test_request_hooks_run_before_pipeline() -> None:
    host = Host()
    host.on_request(Request.mark_secure)

    async def scheme(request: Request) -> str:
        return request.resolved_scheme

    host.router.get("/", scheme)
    response = await host.dispatch("GET", "/")
    assert response.body == b"https"
