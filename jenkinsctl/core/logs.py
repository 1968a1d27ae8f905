"""
Configuración de logging: los loggers de converge y jenkinsctl se muestran
con RichHandler sobre la misma consola que la salida de la CLI.
"""

import logging
import os
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOG_LEVEL_ENV = "JENKINSCTL_LOG_LEVEL"


def setup_logging(level: Optional[str] = None, console: Optional[Console] = None) -> None:
    """
    Args:
        level: Nivel (DEBUG, INFO, WARNING...). Por defecto JENKINSCTL_LOG_LEVEL o WARNING.
        console: Console de Rich compartida con la CLI
    """
    level = (level or os.environ.get(LOG_LEVEL_ENV) or "WARNING").upper()
    handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(message)s"))
    for name in ("converge", "jenkinsctl"):
        log = logging.getLogger(name)
        log.handlers = [handler]
        log.setLevel(level)
        log.propagate = False
