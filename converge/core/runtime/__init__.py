"""
Runtime: contratos de estado (diferencias deseado vs real).

Ningún estado persiste entre ejecuciones salvo el propio host.
"""

from converge.core.runtime.state import StateDiff, diff_fields

__all__ = ["StateDiff", "diff_fields"]
