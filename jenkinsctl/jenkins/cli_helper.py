"""
Wrapper de la CLI remota de Jenkins (jenkins-cli.jar).

Ejecuta `java -jar jenkins-cli.jar -s <url> groovy = <comando> [valor]`
pasando por stdin el script helper.groovy incluido en el paquete. La salida
se trata como texto opaco; un código de salida distinto de 0 es ProviderError.

Las credenciales nunca van en la línea de comandos: se pasan como
`-auth @fichero` (visible en `ps` solo la ruta).
"""

import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

from converge.core.errors import ProviderError
from jenkinsctl.core.tools import Runner, mask_sensitive_data, run_command

logger = logging.getLogger(__name__)

HELPER_SCRIPT = Path(__file__).parent / "files" / "helper.groovy"
CLI_TIMEOUT = 120


class JenkinsCli:
    """Cliente de la CLI de Jenkins"""

    def __init__(
        self,
        jar: str,
        url: str = "http://localhost:8080/",
        java: str = "java",
        auth: Optional[str] = None,
        runner: Runner = run_command,
    ):
        """
        Args:
            jar: Ruta a jenkins-cli.jar
            url: URL del master
            java: Ejecutable de Java
            auth: "usuario:token" o "@/ruta/al/fichero" con ese contenido (opcional)
            runner: Ejecutor de comandos (inyectable en tests)
        """
        self.jar = jar
        self.url = url
        self.java = java
        self.auth = auth
        self.runner = runner

    def command(self, args: List[str], auth_ref: Optional[str] = None) -> List[str]:
        cmd = [self.java, "-jar", self.jar, "-s", self.url]
        if auth_ref:
            cmd += ["-auth", auth_ref]
        return cmd + ["groovy", "="] + [str(a) for a in args]

    @contextmanager
    def auth_file(self) -> Iterator[Optional[str]]:
        """Referencia `@fichero` para -auth; el fichero temporal (0600) se borra al salir."""
        if not self.auth:
            yield None
            return
        if self.auth.startswith("@"):
            yield self.auth
            return

        fd, path = tempfile.mkstemp(prefix="jenkinsctl-auth-")
        try:
            with os.fdopen(fd, "w") as f:
                f.write(self.auth)
            yield f"@{path}"
        finally:
            os.unlink(path)

    def call(self, args: List[str]) -> str:
        if not args:
            raise ProviderError("jenkins-cli: falta el comando")
        script = HELPER_SCRIPT.read_text(encoding="utf-8")
        try:
            with self.auth_file() as auth_ref:
                ok, out, err = self.runner(self.command(args, auth_ref), input_text=script, timeout=CLI_TIMEOUT)
        except OSError as e:
            raise ProviderError(f"jenkins-cli: no se pudo preparar la autenticación: {e}") from e
        if not ok:
            raise ProviderError(f"jenkins-cli {args[0]}: {mask_sensitive_data((err or out).strip())}")
        logger.debug("jenkins-cli %s -> %s", args[0], out.strip())
        return out

    def get_agentagent_port(self) -> int:
        return int(self.call(["get_agentagent_port"]).strip())

    def set_agentagent_port(self, port: int) -> None:
        self.call(["set_agentagent_port", str(port)])

    def get_num_executors(self) -> int:
        return int(self.call(["get_num_executors"]).strip())

    def set_num_executors(self, executors: int) -> None:
        self.call(["set_num_executors", str(executors)])
