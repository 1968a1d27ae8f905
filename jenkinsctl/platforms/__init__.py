"""
Plataformas: conjunto cerrado de adaptadores de host que implementan el
mismo contrato. Se selecciona uno al arrancar (detección o JENKINSCTL_PLATFORM).
"""

import os
import platform
from pathlib import Path
from typing import Optional, Set

from jenkinsctl.core.resolver import PLATFORM_ENV
from jenkinsctl.jenkins.cli_helper import JenkinsCli
from jenkinsctl.platforms.darwin import DarwinHost
from jenkinsctl.platforms.debian import DebianHost
from jenkinsctl.platforms.memory import MemoryHost
from jenkinsctl.platforms.params import DEFAULT_FAMILY, PlatformParams, params_for
from jenkinsctl.platforms.redhat import RedHatHost

HOSTS = {
    "debian": DebianHost,
    "redhat": RedHatHost,
    "darwin": DarwinHost,
}

OS_RELEASE = Path("/etc/os-release")


def _os_release_ids(path: Path) -> Set[str]:
    """Valores de ID e ID_LIKE de /etc/os-release."""
    ids: Set[str] = set()
    try:
        content = path.read_text()
    except OSError:
        return ids
    for line in content.splitlines():
        key, _, value = line.partition("=")
        if key.strip() in ("ID", "ID_LIKE"):
            ids.update(value.strip().strip('"').lower().split())
    return ids


def detect_family(os_release: Path = OS_RELEASE, system: Optional[str] = None) -> str:
    """debian, darwin o la familia por defecto (redhat)."""
    system = system or platform.system()
    if system == "Darwin":
        return "darwin"
    if _os_release_ids(os_release) & {"debian", "ubuntu"}:
        return "debian"
    return DEFAULT_FAMILY


def resolve_params(family: Optional[str] = None) -> PlatformParams:
    family = family or os.environ.get(PLATFORM_ENV, "").strip() or detect_family()
    return params_for(family)


def select_host(
    params: PlatformParams,
    mock: bool = False,
    jenkins_port: int = 8080,
    cli_auth: Optional[str] = None,
):
    """Crea el adaptador de host para la familia elegida."""
    if mock:
        return MemoryHost(params)
    cli = JenkinsCli(jar=params.cli_jar, url=f"http://localhost:{jenkins_port}/", auth=cli_auth)
    return HOSTS[params.family](params, cli=cli)


__all__ = [
    "DarwinHost",
    "DebianHost",
    "MemoryHost",
    "PlatformParams",
    "RedHatHost",
    "detect_family",
    "params_for",
    "resolve_params",
    "select_host",
]
