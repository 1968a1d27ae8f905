"""Familia Debian/Ubuntu: paquetes con dpkg-query y apt-get."""

from typing import Optional

from jenkinsctl.platforms.base import LinuxHost

APT_GET = ["env", "DEBIAN_FRONTEND=noninteractive", "apt-get", "-y", "-q"]


class DebianHost(LinuxHost):
    name = "debian"

    def package_version(self, name: str) -> Optional[str]:
        ok, out = self._query(["dpkg-query", "-W", "-f=${Status}|${Version}", name])
        if not ok or "|" not in out:
            return None
        status, version = out.strip().split("|", 1)
        if not status.endswith(" installed"):
            return None
        return version or None

    def install_package(self, name: str, version: Optional[str] = None) -> None:
        target = f"{name}={version}" if version else name
        self._run(APT_GET + ["install", target])

    def remove_package(self, name: str) -> None:
        self._run(APT_GET + ["remove", name])
