"""
Core: lógica de convergencia pura.

ENFORCEMENT (arquitectura limpia):
- Este paquete NO debe importar jenkinsctl (CLI, plataformas, catálogo Jenkins).
- El acceso real al host se hace solo a través del contrato HostAdapter;
  los adaptadores concretos viven en jenkinsctl.platforms.
- jenkinsctl importa desde core; nunca al revés.
"""

from converge.core.errors import (
    ApplyError,
    ConfigError,
    ConvergeError,
    CycleError,
    ProviderError,
    ValidationError,
)

__all__ = [
    "ApplyError",
    "ConfigError",
    "ConvergeError",
    "CycleError",
    "ProviderError",
    "ValidationError",
]
