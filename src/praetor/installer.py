"""Admin scaffold generator behind ``admin:install``."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Mapping

from msgspec import Struct

from .config import AdminConfig

logger = logging.getLogger(__name__)

STUB_DIRECTORY = Path(__file__).parent / "stubs"
PLACEHOLDER = "DummyNamespace"
CONTROLLERS = "Controllers"
EXTENSION = ".py"


class CreatedFile(Struct, frozen=True):
    """A file or directory written by the installer."""

    label: str
    path: str


class InstallReport(Struct, frozen=True):
    """Outcome of a single installer run."""

    directory: str
    skipped: bool = False
    created: tuple[CreatedFile, ...] = ()


def render_stub(content: str, replacements: Mapping[str, str]) -> str:
    """Replace every literal occurrence of each token in ``replacements``."""

    for token, value in replacements.items():
        content = content.replace(token, value)
    return content


class Installer:
    """Create the admin directory with its controllers, bootstrap and routes files.

    The installer is create-only: if the target directory already exists it
    writes nothing. Filesystem errors propagate as ``OSError`` and anything
    written before the failure is left in place.
    """

    def __init__(
        self,
        config: AdminConfig,
        *,
        base_path: str | os.PathLike[str] = ".",
        stubs: str | os.PathLike[str] | None = None,
    ) -> None:
        self.config = config
        self.base_path = Path(base_path)
        self.stubs = Path(stubs) if stubs is not None else STUB_DIRECTORY
        self.directory = self.base_path / config.directory
        self._created: list[CreatedFile] = []

    def install(self) -> InstallReport:
        self._created = []
        if self.directory.is_dir():
            logger.warning("%s directory already exists !", self.directory)
            return InstallReport(directory=self._relative(self.directory), skipped=True)

        self.make_dir()
        self._record("Admin directory", self.directory)
        self.make_dir(CONTROLLERS)

        self.create_controller("HomeController")
        self.create_controller("AuthController")
        self.create_bootstrap_file()
        self.create_routes_file()
        return InstallReport(directory=self._relative(self.directory), created=tuple(self._created))

    def namespace(self, name: str | None = None) -> str:
        """Return the configured route namespace with ``name`` appended.

        A trailing ``Controllers`` segment of the configured namespace is
        dropped first, so ``App\\Admin\\Controllers`` and ``App\\Admin`` both
        yield ``App\\Admin`` when no name is given.
        """

        base = self.config.route.namespace
        separator = "\\" if "\\" in base else "."
        trimmed = base.strip(separator)
        suffix = separator + CONTROLLERS
        if trimmed.endswith(suffix):
            trimmed = trimmed[: -len(suffix)]
        trimmed = trimmed.strip(separator)
        return trimmed + (separator + name if name else "")

    def create_controller(self, name: str) -> Path:
        path = self.directory / CONTROLLERS / f"{name}{EXTENSION}"
        contents = render_stub(self.get_stub(name), {PLACEHOLDER: self.namespace(CONTROLLERS)})
        return self._put(path, contents, f"{name} file")

    def create_bootstrap_file(self) -> Path:
        path = self.directory / f"bootstrap{EXTENSION}"
        return self._put(path, self.get_stub("bootstrap"), "Bootstrap file")

    def create_routes_file(self) -> Path:
        path = self.directory / f"routes{EXTENSION}"
        contents = render_stub(self.get_stub("routes"), {PLACEHOLDER: self.namespace(CONTROLLERS)})
        return self._put(path, contents, "Routes file")

    def get_stub(self, name: str) -> str:
        return (self.stubs / f"{name}.stub").read_text(encoding="utf-8")

    def make_dir(self, path: str = "") -> Path:
        target = self.directory / path
        target.mkdir(mode=0o755, parents=True, exist_ok=True)
        return target

    def _put(self, path: Path, contents: str, label: str) -> Path:
        path.write_text(contents, encoding="utf-8")
        self._record(label, path)
        return path

    def _record(self, label: str, path: Path) -> None:
        relative = self._relative(path)
        logger.info("%s was created: %s", label, relative)
        self._created.append(CreatedFile(label=label, path=relative))

    def _relative(self, path: Path) -> str:
        try:
            return str(path.relative_to(self.base_path))
        except ValueError:
            return str(path)


__all__ = ["CreatedFile", "InstallReport", "Installer", "render_stub"]
