"""
Cargador del manifiesto YAML del host
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError as PydanticValidationError

from converge.core.errors import ConfigError, ValidationError
from jenkinsctl.core.resolver import AGENT_PASSWORD_ENV, CLI_AUTH_ENV
from jenkinsctl.jenkins.models import Manifest


class ManifestLoader:
    """Carga y valida el manifiesto de estado deseado"""

    def __init__(self, path: Optional[Path] = None):
        """
        Args:
            path: Ruta al manifiesto. Sin ruta se usan los valores por defecto.
        """
        self.path = Path(path) if path is not None else None

    def load(self) -> Manifest:
        """
        Returns:
            Manifest validado

        Raises:
            ConfigError: fichero inexistente o YAML inválido
            ValidationError: valores fuera de dominio (enum, rangos)
        """
        if self.path is None:
            return self.from_dict({})

        if not self.path.exists():
            raise ConfigError(f"Manifiesto no encontrado: {self.path}")

        try:
            with open(self.path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Error al parsear YAML de {self.path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Error al leer {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"{self.path}: el manifiesto debe ser un diccionario")
        return self.from_dict(data)

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> Manifest:
        data = dict(data)
        agent = data.get("agent")
        password = os.environ.get(AGENT_PASSWORD_ENV)
        if isinstance(agent, dict) and password and not agent.get("ui_pass"):
            data["agent"] = {**agent, "ui_pass": password}
        master = data.get("jenkins", {})
        cli_auth = os.environ.get(CLI_AUTH_ENV)
        if isinstance(master, dict) and cli_auth and not master.get("cli_auth"):
            data["jenkins"] = {**master, "cli_auth": cli_auth}
        try:
            return Manifest(**data)
        except PydanticValidationError as e:
            errors = [
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            ]
            raise ValidationError("Manifiesto inválido:\n" + "\n".join(f"  - {m}" for m in errors)) from e
