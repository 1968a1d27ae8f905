"""Fixtures compartidas: host en memoria, motor y ejecutor de comandos falso."""

from typing import Dict, List, Optional, Tuple

import pytest

from converge.core.engine import ConvergenceEngine
from jenkinsctl.platforms import MemoryHost
from jenkinsctl.platforms.params import DEBIAN


class FakeRunner:
    """Registra los comandos y devuelve respuestas preparadas por prefijo."""

    def __init__(self):
        self.calls: List[List[str]] = []
        self.inputs: List[Optional[str]] = []
        self.responses: Dict[Tuple[str, ...], Tuple[bool, str, str]] = {}

    def respond(self, prefix: List[str], ok: bool = True, out: str = "", err: str = "") -> None:
        self.responses[tuple(prefix)] = (ok, out, err)

    def __call__(self, command, cwd=None, timeout=300, input_text=None):
        self.calls.append(list(command))
        self.inputs.append(input_text)
        best = None
        for prefix, response in self.responses.items():
            if tuple(command[:len(prefix)]) == prefix and (best is None or len(prefix) > len(best[0])):
                best = (prefix, response)
        return best[1] if best else (True, "", "")


@pytest.fixture
def host():
    return MemoryHost(DEBIAN)


@pytest.fixture
def engine(host):
    return ConvergenceEngine(host)


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def write_manifest(tmp_path):
    """Escribe un manifiesto YAML en tmp_path y devuelve su ruta."""
    def _write(text: str, name: str = "jenkins.yaml"):
        path = tmp_path / name
        path.write_text(text)
        return path
    return _write
