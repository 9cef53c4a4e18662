from __future__ import annotations

import pathlib

import pytest

from praetor.config import AdminConfig, PermissionConfig, RouteConfig
from praetor.console import InstallCommand
from praetor.controllers import GUARD_SERVICE
from praetor.exceptions import RegistrationError
from praetor.host import Host
from praetor.installer import Installer
from praetor.middleware import ADMIN_GROUP, ROUTE_MIDDLEWARE_KEYS, log_operation, passthrough
from praetor.provider import AdminServiceProvider
from praetor.requests import Request


class _Guard:
    def check(self, request: Request) -> bool:
        return False

    def attempt(self, credentials: dict[str, str]) -> bool:
        return False

    def logout(self) -> None:
        return None


def test_register_aliases_every_route_middleware(tmp_path: pathlib.Path) -> None:
    host = Host(tmp_path)
    AdminServiceProvider(host).register()

    aliases = host.router.middleware_aliases
    assert tuple(aliases) == ROUTE_MIDDLEWARE_KEYS
    assert aliases["admin.log"] is log_operation
    assert aliases["admin.pjax"] is passthrough
    assert host.router.middleware_groups["admin"] == ADMIN_GROUP


def test_register_skips_permission_stage_when_disabled(tmp_path: pathlib.Path) -> None:
    host = Host(tmp_path)
    config = AdminConfig(permission=PermissionConfig(enable=False))
    AdminServiceProvider(host, config).register()

    group = host.router.middleware_groups["admin"]
    assert "admin.permission" not in group
    assert group == tuple(stage for stage in ADMIN_GROUP if stage != "admin.permission")
    # the alias itself stays available
    assert "admin.permission" in host.router.middleware_aliases


def test_injected_middleware_replaces_defaults(tmp_path: pathlib.Path) -> None:
    async def custom(request, handler):
        return await handler(request)

    host = Host(tmp_path)
    AdminServiceProvider(host, route_middleware={"admin.session": custom}, guard=_Guard()).register()

    aliases = host.router.middleware_aliases
    assert aliases["admin.session"] is custom
    assert aliases["admin.auth"] is not passthrough
    assert host.make(GUARD_SERVICE).__class__ is _Guard


def test_registering_twice_is_rejected_by_host(tmp_path: pathlib.Path) -> None:
    host = Host(tmp_path)
    AdminServiceProvider(host).register()
    with pytest.raises(RegistrationError):
        AdminServiceProvider(host).register_middleware()


def test_register_binds_services_and_commands(tmp_path: pathlib.Path) -> None:
    host = Host(tmp_path)
    config = AdminConfig(directory="backoffice")
    AdminServiceProvider(host, config).register()

    assert host.make("admin.config") is config
    installer = host.make("admin.installer")
    assert isinstance(installer, Installer)
    assert installer.directory == tmp_path / "backoffice"
    assert isinstance(host.commands["admin:install"], InstallCommand)


def test_register_merges_sub_application_auth_settings(tmp_path: pathlib.Path) -> None:
    host = Host(tmp_path)
    host.settings["auth.defaults.guard"] = "web"
    config = AdminConfig(
        multi_app={"shop": True, "blog": False},
        apps={
            "shop": {"auth": {"defaults": {"guard": "shop"}}},
            "blog": {"auth": {"defaults": {"guard": "blog"}}},
        },
    )
    AdminServiceProvider(host, config).register()
    assert host.settings == {"auth.defaults.guard": "shop"}


def test_secure_transport_is_a_no_op_by_default(tmp_path: pathlib.Path) -> None:
    host = Host(tmp_path)
    host.request = Request(method="GET", path="/admin")
    assert AdminServiceProvider(host).enforce_secure_transport() is False
    assert host.urls.forced_scheme is None
    assert host.request.resolved_scheme == "http"


@pytest.mark.parametrize("flags", [{"https": True}, {"secure": True}, {"https": True, "secure": True}])
def test_secure_transport_forces_https(tmp_path: pathlib.Path, flags: dict[str, bool]) -> None:
    host = Host(tmp_path)
    host.request = Request(method="GET", path="/admin")
    assert AdminServiceProvider(host, AdminConfig(**flags)).enforce_secure_transport() is True
    assert host.urls.to("admin") == "https://localhost/admin"
    assert host.request.server["HTTPS"] is True
    assert host.request.resolved_scheme == "https"


@pytest.mark.asyncio
async def test_secure_transport_applies_to_later_requests(tmp_path: pathlib.Path) -> None:
    host = Host(tmp_path)
    provider = AdminServiceProvider(host, AdminConfig(secure=True))
    provider.register()
    provider.boot()

    async def scheme(request: Request) -> str:
        return request.resolved_scheme

    host.router.get("/scheme", scheme)
    response = await host.dispatch("GET", "/scheme")
    assert response.body == b"https"


def test_missing_routes_file_registers_nothing(tmp_path: pathlib.Path) -> None:
    host = Host(tmp_path)
    provider = AdminServiceProvider(host)
    assert provider.load_routes() is False
    assert provider.load_bootstrap() is False
    assert host.router.routes == ()


def test_load_routes_and_bootstrap_from_admin_directory(tmp_path: pathlib.Path) -> None:
    admin = tmp_path / "app" / "Admin"
    admin.mkdir(parents=True)
    (admin / "routes.py").write_text(
        "with router.group(prefix=config.route.prefix):\n    router.get('/reports', 'ReportController@index', name='reports')\n",
        encoding="utf-8",
    )
    (admin / "bootstrap.py").write_text("host.settings['admin.title'] = 'Back office'\n", encoding="utf-8")
    host = Host(tmp_path)
    provider = AdminServiceProvider(host)

    assert provider.load_routes() is True
    assert provider.load_bootstrap() is True
    assert host.router.url_path_for("reports") == "/admin/reports"
    assert host.settings["admin.title"] == "Back office"


def test_boot_registers_admin_view_namespace(tmp_path: pathlib.Path) -> None:
    host = Host(tmp_path)
    AdminServiceProvider(host).boot()
    assert host.views.has_namespace("admin")
    assert "admin-login" in host.views.get("admin::login")


def test_view_directory_override(tmp_path: pathlib.Path) -> None:
    views = tmp_path / "views"
    views.mkdir()
    (views / "index.html").write_text("custom", encoding="utf-8")
    host = Host(tmp_path)
    AdminServiceProvider(host, AdminConfig(views=str(views))).boot()
    assert host.views.get("admin::index") == "custom"


def test_publishing_only_registered_in_console(tmp_path: pathlib.Path) -> None:
    web = Host(tmp_path)
    AdminServiceProvider(web).boot()
    assert web.publish_tags == ()

    console = Host(tmp_path, running_in_console=True)
    AdminServiceProvider(console).boot()
    assert console.publish_tags == ("admin-config", "admin-views")
    written = console.publish("admin-config")
    assert written == [tmp_path / "config" / "admin.toml"]


@pytest.mark.parametrize(
    "namespace",
    ["App\\Users\\Controllers", "App\\admin\\Controllers", "App\\Admin\\Controllers", "App\\x1\\Controllers"],
)
def test_generated_routes_keep_backslash_namespaces_verbatim(tmp_path: pathlib.Path, namespace: str) -> None:
    host = Host(tmp_path, running_in_console=True)
    config = AdminConfig(route=RouteConfig(namespace=namespace))
    provider = AdminServiceProvider(host, config)
    provider.register()

    assert host.call("admin:install") == 0
    admin = tmp_path / "app" / "Admin"
    for generated in (admin / "Controllers" / "HomeController.py", admin / "Controllers" / "AuthController.py"):
        compile(generated.read_text(encoding="utf-8"), str(generated), "exec")

    provider.boot()

    assert host.router.find("GET", "/admin").route.spec.namespace == namespace
    assert host.router.find("POST", "/admin/auth/login").route.spec.namespace == namespace
