"""
Recursos File y Download.

File gestiona existencia, contenido, modo y dueño de ficheros y directorios.
Download trae un artefacto remoto (ej: jenkins-cli.jar) y solo vuelve a
descargar si falta o si su checksum no coincide.
"""

import posixpath
from typing import Any, Dict, List, Optional

from converge.core.errors import ProviderError, ValidationError
from converge.core.infra.contracts import HostAdapter
from converge.core.resources.accounts import Group, User
from converge.core.resources.base import Resource, make_id
from converge.core.resources.validator import (
    validate_absolute_path,
    validate_choice,
    validate_mode,
    validate_name,
)
from converge.core.runtime.state import StateDiff

FILE_ENSURE = ("file", "directory", "absent", "present")


def _owner_requires(path: str, owner: Optional[str], group: Optional[str]) -> List[str]:
    """Usuario, grupo y directorio padre deben existir antes que el fichero."""
    reqs = []
    if owner:
        reqs.append(make_id(User.type_name, owner))
    if group:
        reqs.append(make_id(Group.type_name, group))
    parent = posixpath.dirname(path.rstrip("/"))
    if parent and parent != path:
        reqs.append(make_id(File.type_name, parent))
    return reqs


class File(Resource):
    type_name = "File"

    def __init__(
        self,
        path: str,
        ensure: str = "file",
        content: Optional[str] = None,
        mode: Optional[Any] = None,
        owner: Optional[str] = None,
        group: Optional[str] = None,
        **relations: Any,
    ):
        super().__init__(path, **relations)
        self.path = validate_absolute_path(path, self.id)
        ensure = validate_choice(ensure, FILE_ENSURE, f"{self.id}.ensure")
        self.ensure = "file" if ensure == "present" else ensure
        if content is not None and self.ensure != "file":
            raise ValidationError(f"{self.id}: 'content' solo aplica con ensure=file")
        self.content = content
        self.mode = validate_mode(mode, f"{self.id}.mode")
        self.owner = validate_name(owner, f"{self.id}.owner") if owner else None
        self.group = validate_name(group, f"{self.id}.group") if group else None

    def desired(self) -> Dict[str, Any]:
        if self.ensure == "absent":
            return {"ensure": "absent"}
        return {
            "ensure": self.ensure,
            "content": self.content,
            "mode": self.mode,
            "owner": self.owner,
            "group": self.group,
        }

    def read_current(self, host: HostAdapter) -> Dict[str, Any]:
        st = host.stat_file(self.path)
        if st is None:
            return {"ensure": "absent"}
        current = {
            "ensure": st.get("kind"),
            "mode": st.get("mode"),
            "owner": st.get("owner"),
            "group": st.get("group"),
        }
        if self.content is not None and st.get("kind") == "file":
            current["content"] = host.read_file(self.path)
        return current

    def apply(self, host: HostAdapter, current: Dict[str, Any], diffs: List[StateDiff]) -> None:
        fields = {d.field for d in diffs}
        have = current.get("ensure")

        if self.ensure == "absent":
            host.remove_path(self.path)
            return

        if self.ensure == "directory":
            if have == "file":
                raise ProviderError(f"{self.path} existe como fichero; se esperaba un directorio")
            if have == "absent":
                host.make_directory(self.path, mode=self.mode, owner=self.owner, group=self.group)
            else:
                host.set_file_attrs(self.path, mode=self.mode, owner=self.owner, group=self.group)
            return

        if have == "directory":
            raise ProviderError(f"{self.path} existe como directorio; se esperaba un fichero")
        if "ensure" in fields or "content" in fields:
            content = self.content
            if content is None:
                content = host.read_file(self.path) or ""
            host.write_file(self.path, content, mode=self.mode, owner=self.owner, group=self.group)
        else:
            host.set_file_attrs(self.path, mode=self.mode, owner=self.owner, group=self.group)

    def autorequires(self) -> List[str]:
        return _owner_requires(self.path, self.owner, self.group)


class Download(Resource):
    type_name = "Download"

    def __init__(
        self,
        path: str,
        source: str,
        checksum: Optional[str] = None,
        mode: Optional[Any] = None,
        owner: Optional[str] = None,
        group: Optional[str] = None,
        **relations: Any,
    ):
        super().__init__(path, **relations)
        self.path = validate_absolute_path(path, self.id)
        if not isinstance(source, str) or not source.startswith(("http://", "https://", "file://")):
            raise ValidationError(f"{self.id}: source debe ser una URL http(s) o file: {source!r}")
        self.source = source
        self.checksum = checksum.lower() if checksum else None
        self.mode = validate_mode(mode, f"{self.id}.mode")
        self.owner = validate_name(owner, f"{self.id}.owner") if owner else None
        self.group = validate_name(group, f"{self.id}.group") if group else None

    def desired(self) -> Dict[str, Any]:
        return {
            "ensure": "present",
            "checksum": self.checksum,
            "mode": self.mode,
            "owner": self.owner,
            "group": self.group,
        }

    def read_current(self, host: HostAdapter) -> Dict[str, Any]:
        st = host.stat_file(self.path)
        if st is None:
            return {"ensure": "absent"}
        current = {
            "ensure": "present" if st.get("kind") == "file" else st.get("kind"),
            "mode": st.get("mode"),
            "owner": st.get("owner"),
            "group": st.get("group"),
        }
        if self.checksum:
            current["checksum"] = host.file_digest(self.path)
        return current

    def apply(self, host: HostAdapter, current: Dict[str, Any], diffs: List[StateDiff]) -> None:
        fields = {d.field for d in diffs}
        if "ensure" in fields or "checksum" in fields:
            host.download(self.source, self.path)
            if self.checksum:
                digest = host.file_digest(self.path)
                if digest != self.checksum:
                    raise ProviderError(
                        f"Checksum de {self.source} no coincide: esperado {self.checksum}, obtenido {digest}"
                    )
        if self.mode or self.owner or self.group:
            host.set_file_attrs(self.path, mode=self.mode, owner=self.owner, group=self.group)

    def autorequires(self) -> List[str]:
        return _owner_requires(self.path, self.owner, self.group)
