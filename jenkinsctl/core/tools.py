"""
Módulo Tools - Utilidades compartidas para ejecutar comandos del sistema
"""

import logging
import re
import subprocess
from pathlib import Path
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

# (command, input_text, timeout) -> (success, stdout, stderr)
Runner = Callable[..., Tuple[bool, str, str]]


def run_command(
    command: List[str],
    cwd: Optional[Path] = None,
    timeout: int = 300,
    input_text: Optional[str] = None,
) -> Tuple[bool, str, str]:
    """
    Ejecuta un comando del sistema sin shell

    Args:
        command: Lista con comando y argumentos
        cwd: Directorio de trabajo
        timeout: Timeout en segundos (lo gestiona subprocess, no el motor)
        input_text: Texto enviado por stdin

    Returns:
        Tuple (success, stdout, stderr)
    """
    logger.debug("$ %s", " ".join(command))
    try:
        result = subprocess.run(
            command,
            cwd=cwd,
            input=input_text,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False
        )
        return result.returncode == 0, result.stdout, result.stderr
    except subprocess.TimeoutExpired:
        return False, "", f"Timeout ejecutando: {' '.join(command)}"
    except FileNotFoundError:
        return False, "", f"Comando no encontrado: {command[0]}"


def mask_sensitive_data(text: str, mask_char: str = "*") -> str:
    """
    Enmascara contraseñas y tokens en texto (ej: argumentos de swarm-client)

    Args:
        text: Texto a enmascarar
        mask_char: Carácter para enmascarar

    Returns:
        Texto con datos sensibles enmascarados
    """
    patterns = [
        r'(-password\s+)(\S+)',
        r'(password["\']?\s*[:=]\s*["\']?)([^"\'\s]+)',
        r'(token["\']?\s*[:=]\s*["\']?)([^"\'\s]+)',
    ]
    for pattern in patterns:
        text = re.sub(pattern, lambda m: m.group(1) + mask_char * len(m.group(2)), text, flags=re.IGNORECASE)
    return text
