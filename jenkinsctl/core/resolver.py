"""
Resolución de rutas de configuración.

- manifest_path(): manifiesto YAML del host (--manifest, JENKINSCTL_MANIFEST,
  ./jenkins.yaml, /etc/jenkinsctl/jenkins.yaml).
- load_env(): carga .env del directorio de trabajo.
"""

import os
from pathlib import Path
from typing import Optional

MANIFEST_ENV = "JENKINSCTL_MANIFEST"
PLATFORM_ENV = "JENKINSCTL_PLATFORM"
AGENT_PASSWORD_ENV = "JENKINSCTL_AGENT_PASSWORD"
CLI_AUTH_ENV = "JENKINSCTL_CLI_AUTH"

SYSTEM_MANIFEST = Path("/etc/jenkinsctl/jenkins.yaml")
LOCAL_MANIFEST_NAME = "jenkins.yaml"


def load_env(cwd: Optional[Path] = None) -> None:
    """Carga .env sin pisar variables ya definidas en el entorno."""
    from dotenv import load_dotenv

    env_file = (cwd or Path.cwd()) / ".env"
    if env_file.exists():
        load_dotenv(env_file, override=False)


def manifest_path(explicit: Optional[Path] = None) -> Optional[Path]:
    """
    Devuelve la primera ruta candidata. La explícita y la de entorno se
    devuelven aunque no existan (el loader reporta el error); las implícitas
    solo si existen.
    """
    if explicit is not None:
        return Path(explicit).expanduser()

    from_env = os.environ.get(MANIFEST_ENV, "").strip()
    if from_env:
        return Path(from_env).expanduser()

    for candidate in (Path.cwd() / LOCAL_MANIFEST_NAME, SYSTEM_MANIFEST):
        if candidate.exists():
            return candidate
    return None
