"""
Contrato que deben implementar los adaptadores de host.

El core solo define la interfaz; las implementaciones (Debian, RedHat,
Darwin, memoria) viven en jenkinsctl/platforms/*.
"""

from typing import Any, Dict, List, Optional, Protocol


class HostAdapter(Protocol):
    """
    Operaciones primitivas sobre el host que se está convergiendo.
    Las lecturas devuelven None cuando el objeto no existe; las escrituras
    lanzan ProviderError si fallan.
    """
    @property
    def name(self) -> str:
        """Identificador del adaptador (ej: debian, darwin, memory)."""
        ...

    # Paquetes
    def package_version(self, name: str) -> Optional[str]:
        """Versión instalada o None si no está instalado."""
        ...

    def install_package(self, name: str, version: Optional[str] = None) -> None:
        ...

    def remove_package(self, name: str) -> None:
        ...

    # Usuarios y grupos
    def get_group(self, name: str) -> Optional[Dict[str, Any]]:
        ...

    def create_group(self, name: str, system: bool = False) -> None:
        ...

    def remove_group(self, name: str) -> None:
        ...

    def get_user(self, name: str) -> Optional[Dict[str, Any]]:
        """Dict con home, shell y groups, o None si no existe."""
        ...

    def create_user(
        self,
        name: str,
        home: Optional[str] = None,
        shell: Optional[str] = None,
        groups: Optional[List[str]] = None,
        system: bool = False,
    ) -> None:
        ...

    def modify_user(self, name: str, **fields: Any) -> None:
        ...

    def remove_user(self, name: str) -> None:
        ...

    # Ficheros
    def stat_file(self, path: str) -> Optional[Dict[str, Any]]:
        """Dict con kind (file/directory), mode, owner y group, o None."""
        ...

    def read_file(self, path: str) -> Optional[str]:
        """Contenido de texto del fichero o None si no existe."""
        ...

    def file_digest(self, path: str) -> Optional[str]:
        """sha256 del contenido o None si no existe."""
        ...

    def write_file(
        self,
        path: str,
        content: str,
        mode: Optional[str] = None,
        owner: Optional[str] = None,
        group: Optional[str] = None,
    ) -> None:
        ...

    def make_directory(
        self,
        path: str,
        mode: Optional[str] = None,
        owner: Optional[str] = None,
        group: Optional[str] = None,
    ) -> None:
        ...

    def set_file_attrs(
        self,
        path: str,
        mode: Optional[str] = None,
        owner: Optional[str] = None,
        group: Optional[str] = None,
    ) -> None:
        ...

    def remove_path(self, path: str) -> None:
        ...

    def download(self, url: str, path: str) -> None:
        ...

    # Servicios
    def service_status(self, name: str) -> Dict[str, bool]:
        """Dict con running y enabled."""
        ...

    def start_service(self, name: str) -> None:
        ...

    def stop_service(self, name: str) -> None:
        ...

    def restart_service(self, name: str) -> None:
        ...

    def enable_service(self, name: str) -> None:
        ...

    def disable_service(self, name: str) -> None:
        ...
