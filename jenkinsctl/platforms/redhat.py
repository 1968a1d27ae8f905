"""Familia RedHat (y familia por defecto): paquetes con rpm y yum."""

from typing import Optional

from jenkinsctl.platforms.base import LinuxHost


class RedHatHost(LinuxHost):
    name = "redhat"

    def package_version(self, name: str) -> Optional[str]:
        ok, out = self._query(["rpm", "-q", "--qf", "%{VERSION}-%{RELEASE}", name])
        if not ok or not out.strip():
            return None
        return out.strip()

    def install_package(self, name: str, version: Optional[str] = None) -> None:
        target = f"{name}-{version}" if version else name
        self._run(["yum", "install", "-y", "-q", target])

    def remove_package(self, name: str) -> None:
        self._run(["yum", "remove", "-y", "-q", name])
