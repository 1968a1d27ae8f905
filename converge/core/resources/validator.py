"""
Validación del estado deseado (lógica pura).

Sin I/O; solo reglas sobre los valores declarados. Todo error aquí es fatal
antes de construir el grafo.
"""

import re
from typing import Any, Iterable, Optional

from converge.core.errors import ValidationError

_MODE_RE = re.compile(r"^0?[0-7]{3,4}$")
_NAME_RE = re.compile(r"^[A-Za-z0-9_.@+-]+$")


def validate_title(title: Any, type_name: str) -> str:
    """El título identifica al recurso; no puede estar vacío."""
    if not isinstance(title, str) or not title.strip():
        raise ValidationError(f"{type_name}: el título no puede estar vacío")
    if "[" in title or "]" in title:
        raise ValidationError(f"{type_name}: el título no puede contener corchetes: {title}")
    return title


def validate_choice(value: Any, allowed: Iterable[Any], what: str) -> Any:
    """Valida que el valor sea uno de los permitidos."""
    allowed = tuple(allowed)
    if value not in allowed:
        shown = ", ".join(str(a) for a in allowed)
        raise ValidationError(f"{what}: valor inválido {value!r} (permitidos: {shown})")
    return value


def validate_mode(mode: Optional[Any], what: str) -> Optional[str]:
    """
    Normaliza un modo octal ("644", "0644", 0o644) a cuatro dígitos.

    Un entero se interpreta como valor octal y no puede pasar de 0o777: 644
    escrito en decimal es 0o1204 (sticky bit). Los bits especiales van como cadena ("4755").
    """
    if mode is None:
        return None
    if isinstance(mode, bool):
        raise ValidationError(f"{what}: modo inválido {mode!r}")
    if isinstance(mode, int):
        if not 0 <= mode <= 0o777:
            raise ValidationError(f"{what}: modo entero fuera de rango {mode} (usa 0o644 o \"0644\")")
        mode = format(mode, "03o")
    mode = str(mode)
    if not _MODE_RE.match(mode):
        raise ValidationError(f"{what}: modo inválido {mode!r}")
    return mode.zfill(4)


def validate_absolute_path(path: Any, what: str) -> str:
    if not isinstance(path, str) or not path.startswith("/"):
        raise ValidationError(f"{what}: la ruta debe ser absoluta: {path!r}")
    return path


def validate_name(name: Any, what: str) -> str:
    """Nombres de usuario, grupo, paquete o servicio."""
    if not isinstance(name, str) or not _NAME_RE.match(name):
        raise ValidationError(f"{what}: nombre inválido {name!r}")
    return name


def validate_port(port: Any, what: str, allow_disabled: bool = False) -> int:
    """Puerto TCP. Con allow_disabled se aceptan -1 (deshabilitado) y 0 (aleatorio)."""
    if isinstance(port, bool) or not isinstance(port, int):
        raise ValidationError(f"{what}: el puerto debe ser entero: {port!r}")
    low = -1 if allow_disabled else 1
    if port < low or port > 65535:
        raise ValidationError(f"{what}: puerto fuera de rango: {port}")
    return port
