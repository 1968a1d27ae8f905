"""
Contrato para adaptadores de host.

Las plataformas (debian, redhat, darwin, memory) implementan este contrato;
el core no depende de ninguna plataforma concreta.
"""

from converge.core.infra.contracts import HostAdapter

__all__ = ["HostAdapter"]
