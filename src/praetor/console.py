"""Console commands registered by the admin provider."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from .host import Host
    from .installer import Installer


class InstallCommand:
    """``admin:install``: generate the admin scaffold once."""

    name = "admin:install"
    description = "Install the admin package"

    def __init__(self, host: "Host", *, stdout: TextIO | None = None, stderr: TextIO | None = None) -> None:
        self.host = host
        self._stdout = stdout
        self._stderr = stderr

    def __call__(self) -> int:
        installer: "Installer" = self.host.make("admin.installer")
        report = installer.install()
        if report.skipped:
            print(f"{report.directory} directory already exists !", file=self._stderr or sys.stderr)
            return 0
        for created in report.created:
            print(f"{created.label} was created: {created.path}", file=self._stdout or sys.stdout)
        print("Done.", file=self._stdout or sys.stdout)
        return 0


__all__ = ["InstallCommand"]
