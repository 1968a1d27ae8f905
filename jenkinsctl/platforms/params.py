"""
Parámetros por familia de sistema operativo (nombres de paquete, rutas, servicio).

Se eligen una vez al arrancar; el resto del código no ramifica por SO.
"""

from typing import Dict, Literal, Optional

from pydantic import BaseModel, Field

from converge.core.errors import ValidationError


class PlatformParams(BaseModel):
    """Convenciones de una familia de SO para instalar y supervisar Jenkins"""
    family: str = Field(..., description="debian | redhat | darwin")
    jenkins_package: str = Field("jenkins", description="Paquete de Jenkins")
    java_package: str = Field(..., description="Paquete del runtime Java")
    service_name: str = Field("jenkins", description="Servicio supervisado")
    home: str = Field("/var/lib/jenkins", description="JENKINS_HOME")
    libdir: str = Field(..., description="Directorio donde vive jenkins-cli.jar")
    service_override: str = Field(..., description="Fichero con puerto y JAVA_OPTS del servicio")
    override_format: Literal["systemd", "env"] = "systemd"
    shell: str = "/bin/bash"
    agent_unit: Optional[str] = Field(None, description="Unidad systemd del agente swarm (None = no soportado)")
    agent_defaults: Optional[str] = Field(None, description="Fichero de entorno del agente swarm")

    @property
    def override_dir(self) -> str:
        return self.service_override.rsplit("/", 1)[0]

    @property
    def cli_jar(self) -> str:
        return f"{self.libdir}/jenkins-cli.jar"

    @property
    def config_xml(self) -> str:
        return f"{self.home}/config.xml"


DEBIAN = PlatformParams(
    family="debian",
    java_package="openjdk-17-jre-headless",
    libdir="/usr/share/jenkins",
    service_override="/etc/systemd/system/jenkins.service.d/override.conf",
    agent_unit="/etc/systemd/system/jenkins-slave.service",
    agent_defaults="/etc/default/jenkins-slave",
)

REDHAT = PlatformParams(
    family="redhat",
    java_package="java-17-openjdk-headless",
    libdir="/usr/lib/jenkins",
    service_override="/etc/systemd/system/jenkins.service.d/override.conf",
    agent_unit="/etc/systemd/system/jenkins-slave.service",
    agent_defaults="/etc/sysconfig/jenkins-slave",
)

DARWIN = PlatformParams(
    family="darwin",
    jenkins_package="jenkins-lts",
    java_package="openjdk@17",
    service_name="jenkins-lts",
    home="/Users/Shared/Jenkins/Home",
    libdir="/usr/local/opt/jenkins-lts/libexec",
    service_override="/usr/local/etc/jenkins-lts/jenkins.env",
    override_format="env",
    shell="/bin/zsh",
)

PARAMS: Dict[str, PlatformParams] = {
    "debian": DEBIAN,
    "redhat": REDHAT,
    "darwin": DARWIN,
}

# Familias sin entrada propia usan los valores de RedHat
DEFAULT_FAMILY = "redhat"


def params_for(family: str) -> PlatformParams:
    family = (family or "").lower()
    if family == "default":
        family = DEFAULT_FAMILY
    if family not in PARAMS:
        raise ValidationError(f"Plataforma desconocida: {family!r} (permitidas: {', '.join(PARAMS)}, default)")
    return PARAMS[family]
