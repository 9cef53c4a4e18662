"""Admin service provider: wires the admin area into a :class:`~praetor.host.Host`."""

from __future__ import annotations

import logging
import runpy
from pathlib import Path
from typing import Mapping

from .config import AdminConfig, auth_overrides
from .console import InstallCommand
from .controllers import GUARD_SERVICE
from .host import Host
from .installer import EXTENSION, Installer
from .middleware import (
    ROUTE_MIDDLEWARE_KEYS,
    Gate,
    Guard,
    MiddlewareCallable,
    authenticate,
    log_operation,
    middleware_groups,
    passthrough,
    permission,
)
from .requests import Request

logger = logging.getLogger(__name__)

PACKAGE_ROOT = Path(__file__).parent
VIEWS_PATH = PACKAGE_ROOT / "resources" / "views"
CONFIG_PATH = PACKAGE_ROOT / "resources" / "config"
VIEW_NAMESPACE = "admin"


class AdminServiceProvider:
    """Register admin middleware, services and commands, then boot routes and views.

    ``route_middleware`` supplies the implementation behind each
    ``admin.*`` alias. Aliases left out fall back to built-in stages: the
    guard and gate wrappers when a ``guard`` or ``gate`` is given, request
    logging for ``admin.log`` and a pass-through for everything else.
    """

    def __init__(
        self,
        host: Host,
        config: AdminConfig | None = None,
        *,
        route_middleware: Mapping[str, MiddlewareCallable] | None = None,
        guard: Guard | None = None,
        gate: Gate | None = None,
    ) -> None:
        self.host = host
        self.config = config or AdminConfig()
        self.guard = guard
        self.gate = gate
        self.route_middleware = {**self._default_route_middleware(), **(route_middleware or {})}

    # ------------------------------------------------------------------ register
    def register(self) -> None:
        self.load_auth_config()
        self.register_middleware()
        self.register_services()
        self.register_commands()

    def load_auth_config(self) -> None:
        overrides = auth_overrides(self.config)
        if overrides:
            logger.debug("Merging %d auth settings from sub-applications", len(overrides))
        self.host.settings.update(overrides)

    def register_middleware(self) -> None:
        router = self.host.router
        for key, middleware in self.route_middleware.items():
            router.alias_middleware(key, middleware)
        for key, stages in middleware_groups(self.config).items():
            router.middleware_group(key, stages)

    def register_services(self) -> None:
        config = self.config
        self.host.singleton("admin.config", lambda host: config)
        self.host.singleton("admin.installer", lambda host: Installer(config, base_path=host.base_path))
        if self.guard is not None and not self.host.bound(GUARD_SERVICE):
            guard = self.guard
            self.host.singleton(GUARD_SERVICE, lambda host: guard)

    def register_commands(self) -> None:
        self.host.command("admin:install", InstallCommand(self.host))

    # ------------------------------------------------------------------ boot
    def boot(self) -> None:
        self.register_view_namespace()
        self.enforce_secure_transport()
        self.load_routes()
        self.load_bootstrap()
        self.register_publishing()

    def register_view_namespace(self) -> None:
        directory = Path(self.config.views) if self.config.views else VIEWS_PATH
        self.host.views.add_namespace(VIEW_NAMESPACE, directory)

    def enforce_secure_transport(self) -> bool:
        """Force https URLs and mark requests secure when ``https`` or ``secure`` is set."""

        if not self.config.secure_transport:
            return False
        self.host.urls.force_scheme("https")
        if self.host.request is not None:
            self.host.request.mark_secure()
        self.host.on_request(Request.mark_secure)
        logger.debug("Secure transport enforced for admin requests")
        return True

    def load_routes(self) -> bool:
        routes = self.admin_path(f"routes{EXTENSION}")
        if not routes.is_file():
            return False
        self.host.router.load_routes_from(routes, {"config": self.config})
        logger.debug("Loaded admin routes from %s", routes)
        return True

    def load_bootstrap(self) -> bool:
        bootstrap = self.admin_path(f"bootstrap{EXTENSION}")
        if not bootstrap.is_file():
            return False
        runpy.run_path(str(bootstrap), init_globals={"host": self.host, "config": self.config})
        return True

    def register_publishing(self) -> None:
        if not self.host.running_in_console:
            return
        self.host.publishes({CONFIG_PATH: "config"}, "admin-config")
        self.host.publishes({VIEWS_PATH: "resources/views/vendor/admin"}, "admin-views")

    def admin_path(self, *parts: str) -> Path:
        return self.host.path(self.config.directory, *parts)

    def _default_route_middleware(self) -> dict[str, MiddlewareCallable]:
        defaults: dict[str, MiddlewareCallable] = {key: passthrough for key in ROUTE_MIDDLEWARE_KEYS}
        defaults["admin.log"] = log_operation
        prefix = self.config.route.prefix
        if self.guard is not None:
            defaults["admin.auth"] = authenticate(
                self.guard,
                prefix=prefix,
                excepts=self.config.auth.excepts,
                redirect_to=self.config.auth.redirect_to,
            )
        if self.gate is not None:
            defaults["admin.permission"] = permission(self.gate, prefix=prefix, excepts=self.config.permission.excepts)
        return defaults


__all__ = ["AdminServiceProvider"]
