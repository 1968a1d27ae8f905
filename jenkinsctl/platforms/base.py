"""
Adaptadores de host reales: operaciones sobre el sistema vía comandos y os.

SystemHost implementa ficheros, descargas y el wrapper de la CLI de Jenkins
(comunes a todas las familias). LinuxHost añade usuarios/grupos con
getent/useradd y servicios con systemctl. Los paquetes los resuelve cada
familia (debian, redhat, darwin).

Las operaciones de usuarios, grupos y servicios pueden requerir ejecución con sudo.
"""

import grp
import hashlib
import logging
import os
import pwd
import shutil
import stat
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import requests

from converge.core.errors import ProviderError
from jenkinsctl.core.tools import Runner, mask_sensitive_data, run_command
from jenkinsctl.platforms.params import PlatformParams

logger = logging.getLogger(__name__)

DOWNLOAD_TIMEOUT = 60
CHUNK_SIZE = 64 * 1024


def _atomic_write(target: Path, chunks: Iterable[bytes]) -> None:
    """Fichero temporal en el mismo directorio + rename. Ante un fallo el temporal se borra."""
    fd, tmp = tempfile.mkstemp(dir=str(target.parent), prefix=f".{target.name}.")
    try:
        with os.fdopen(fd, "wb") as f:
            for chunk in chunks:
                f.write(chunk)
        os.replace(tmp, target)
    except BaseException:
        os.unlink(tmp)
        raise


class SystemHost:
    """Base de los hosts reales. Las subclases definen paquetes, cuentas y servicios."""

    name = "system"

    def __init__(self, params: PlatformParams, runner: Runner = run_command, cli: Any = None):
        self.params = params
        self.runner = runner
        # JenkinsCli configurado por select_host (None si no hay CLI)
        self.cli = cli

    # Ejecución de comandos

    def _run(self, cmd: List[str], input_text: Optional[str] = None) -> str:
        """Ejecuta y lanza ProviderError si el comando falla."""
        ok, out, err = self.runner(cmd, input_text=input_text)
        if not ok:
            detail = (err or out or "").strip()
            raise ProviderError(f"{' '.join(cmd)}: {mask_sensitive_data(detail)}")
        return out

    def _query(self, cmd: List[str]) -> Tuple[bool, str]:
        """Ejecuta una consulta cuyo fallo significa "no existe"."""
        ok, out, _ = self.runner(cmd)
        return ok, out

    # Paquetes

    def package_version(self, name: str) -> Optional[str]:
        raise NotImplementedError

    def install_package(self, name: str, version: Optional[str] = None) -> None:
        raise NotImplementedError

    def remove_package(self, name: str) -> None:
        raise NotImplementedError

    # Ficheros

    def stat_file(self, path: str) -> Optional[Dict[str, Any]]:
        try:
            st = os.stat(path)
        except FileNotFoundError:
            return None
        if stat.S_ISDIR(st.st_mode):
            kind = "directory"
        elif stat.S_ISREG(st.st_mode):
            kind = "file"
        else:
            kind = "other"
        return {
            "kind": kind,
            "mode": format(stat.S_IMODE(st.st_mode), "04o"),
            "owner": _user_name(st.st_uid),
            "group": _group_name(st.st_gid),
        }

    def read_file(self, path: str) -> Optional[str]:
        try:
            return Path(path).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise ProviderError(f"No se pudo leer {path}: {exc}") from exc

    def file_digest(self, path: str) -> Optional[str]:
        digest = hashlib.sha256()
        try:
            with open(path, "rb") as f:
                for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
                    digest.update(chunk)
        except FileNotFoundError:
            return None
        return digest.hexdigest()

    def write_file(
        self,
        path: str,
        content: str,
        mode: Optional[str] = None,
        owner: Optional[str] = None,
        group: Optional[str] = None,
    ) -> None:
        target = Path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            _atomic_write(target, [content.encode("utf-8")])
        except OSError as exc:
            raise ProviderError(f"No se pudo escribir {path}: {exc}") from exc
        self.set_file_attrs(path, mode=mode or "0644", owner=owner, group=group)

    def make_directory(
        self,
        path: str,
        mode: Optional[str] = None,
        owner: Optional[str] = None,
        group: Optional[str] = None,
    ) -> None:
        try:
            Path(path).mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ProviderError(f"No se pudo crear {path}: {exc}") from exc
        self.set_file_attrs(path, mode=mode, owner=owner, group=group)

    def set_file_attrs(
        self,
        path: str,
        mode: Optional[str] = None,
        owner: Optional[str] = None,
        group: Optional[str] = None,
    ) -> None:
        try:
            if mode:
                os.chmod(path, int(mode, 8))
            if owner or group:
                shutil.chown(path, user=owner, group=group)
        except (OSError, LookupError) as exc:
            raise ProviderError(f"No se pudieron ajustar permisos de {path}: {exc}") from exc

    def remove_path(self, path: str) -> None:
        target = Path(path)
        try:
            if target.is_dir() and not target.is_symlink():
                shutil.rmtree(target)
            elif target.exists() or target.is_symlink():
                target.unlink()
        except OSError as exc:
            raise ProviderError(f"No se pudo eliminar {path}: {exc}") from exc

    def download(self, url: str, path: str) -> None:
        target = Path(path)
        logger.info("Descargando %s -> %s", url, path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            if url.startswith("file://"):
                shutil.copyfile(url[len("file://"):], target)
                return
            with requests.get(url, stream=True, timeout=DOWNLOAD_TIMEOUT) as response:
                response.raise_for_status()
                _atomic_write(target, response.iter_content(chunk_size=CHUNK_SIZE))
        except requests.RequestException as exc:
            raise ProviderError(f"Error descargando {url}: {exc}") from exc
        except OSError as exc:
            raise ProviderError(f"Error guardando {path}: {exc}") from exc

    # CLI de Jenkins

    def jenkins_cli(self, args: List[str]) -> str:
        if self.cli is None:
            raise ProviderError("CLI de Jenkins no configurada en este host")
        return self.cli.call(args)

    def listening_ports(self) -> List[int]:
        """Puertos TCP en escucha (los usa el doctor; no el motor)."""
        ok, out = self._query(["ss", "-ltnH"])
        if not ok:
            return []
        ports = set()
        for line in out.splitlines():
            parts = line.split()
            if len(parts) >= 4 and ":" in parts[3]:
                port = parts[3].rsplit(":", 1)[1]
                if port.isdigit():
                    ports.add(int(port))
        return sorted(ports)


class LinuxHost(SystemHost):
    """Cuentas con getent/useradd/usermod y servicios con systemctl."""

    name = "linux"

    # Grupos

    def get_group(self, name: str) -> Optional[Dict[str, Any]]:
        ok, out = self._query(["getent", "group", name])
        if not ok or not out.strip():
            return None
        parts = out.strip().split(":")
        members = [m for m in parts[3].split(",") if m] if len(parts) > 3 else []
        return {"name": parts[0], "gid": parts[2] if len(parts) > 2 else None, "members": members}

    def create_group(self, name: str, system: bool = False) -> None:
        cmd = ["groupadd"]
        if system:
            cmd.append("--system")
        self._run(cmd + [name])

    def remove_group(self, name: str) -> None:
        self._run(["groupdel", name])

    # Usuarios

    def get_user(self, name: str) -> Optional[Dict[str, Any]]:
        ok, out = self._query(["getent", "passwd", name])
        if not ok or not out.strip():
            return None
        parts = out.strip().split(":")
        ok, groups_out = self._query(["id", "-nG", name])
        return {
            "name": parts[0],
            "home": parts[5] if len(parts) > 5 else None,
            "shell": parts[6] if len(parts) > 6 else None,
            "groups": groups_out.split() if ok else [],
        }

    def create_user(
        self,
        name: str,
        home: Optional[str] = None,
        shell: Optional[str] = None,
        groups: Optional[List[str]] = None,
        system: bool = False,
    ) -> None:
        cmd = ["useradd", "-m"]
        if system:
            cmd.append("--system")
        if home:
            cmd += ["-d", home]
        if shell:
            cmd += ["-s", shell]
        if groups:
            cmd += ["-G", ",".join(groups)]
        self._run(cmd + [name])

    def modify_user(self, name: str, **fields: Any) -> None:
        cmd = ["usermod"]
        if fields.get("home"):
            cmd += ["-d", fields["home"], "-m"]
        if fields.get("shell"):
            cmd += ["-s", fields["shell"]]
        if fields.get("groups"):
            cmd += ["-aG", ",".join(fields["groups"])]
        if len(cmd) > 1:
            self._run(cmd + [name])

    def remove_user(self, name: str) -> None:
        self._run(["userdel", name])

    # Servicios (systemd)

    def service_status(self, name: str) -> Dict[str, bool]:
        running, _ = self._query(["systemctl", "is-active", "--quiet", name])
        enabled, _ = self._query(["systemctl", "is-enabled", "--quiet", name])
        return {"running": running, "enabled": enabled}

    def start_service(self, name: str) -> None:
        # Las unidades o drop-ins recién escritos requieren daemon-reload
        self._run(["systemctl", "daemon-reload"])
        self._run(["systemctl", "start", name])

    def stop_service(self, name: str) -> None:
        self._run(["systemctl", "stop", name])

    def restart_service(self, name: str) -> None:
        self._run(["systemctl", "daemon-reload"])
        self._run(["systemctl", "restart", name])

    def enable_service(self, name: str) -> None:
        self._run(["systemctl", "daemon-reload"])
        self._run(["systemctl", "enable", name])

    def disable_service(self, name: str) -> None:
        self._run(["systemctl", "disable", name])


def _user_name(uid: int) -> str:
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return str(uid)


def _group_name(gid: int) -> str:
    try:
        return grp.getgrgid(gid).gr_name
    except KeyError:
        return str(gid)
