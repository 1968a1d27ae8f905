"""
Errores del motor de convergencia.

El core solo define excepciones; las capas (CLI) se encargan del formato de salida.
Todas son fatales para la ejecución en curso: no existe modo de éxito parcial.
"""

from typing import Any, List, Optional


class ConvergeError(Exception):
    """Error base de converge."""
    pass


class ValidationError(ConvergeError):
    """Estado deseado mal formado (valor de enum inválido, título vacío, etc.)."""
    pass


class ConfigError(ConvergeError):
    """Error de configuración (manifiesto faltante, formato inválido)."""
    pass


class ProviderError(ConvergeError):
    """Error delegado desde el host (comando de paquetes, systemctl, descarga...)."""
    pass


class CycleError(ConvergeError):
    """El grafo de dependencias contiene un ciclo; se detecta antes de aplicar nada."""

    def __init__(self, cycle: List[str]):
        self.cycle = list(cycle)
        super().__init__("Ciclo de dependencias: " + " -> ".join(self.cycle))


class ApplyError(ConvergeError):
    """Falló la acción correctiva de un recurso. Incluye id del recurso y causa."""

    def __init__(self, resource_id: str, cause: BaseException, report: Optional[Any] = None):
        self.resource_id = resource_id
        self.cause = cause
        # Reporte parcial de la ejecución hasta el fallo
        self.report = report
        super().__init__(f"{resource_id}: {cause}")
