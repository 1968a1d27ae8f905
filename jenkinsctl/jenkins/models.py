"""
Modelos del manifiesto de un host Jenkins
Usa Pydantic para validación y serialización
"""

import socket
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, validator

SWARM_REPO = "https://repo.jenkins-ci.org/releases/org/jenkins-ci/plugins/swarm-client"


class ServiceEnsure(str, Enum):
    """Estado deseado de un servicio"""
    RUNNING = "running"
    STOPPED = "stopped"


class AgentMode(str, Enum):
    """Modo de uso del agente swarm"""
    NORMAL = "normal"
    EXCLUSIVE = "exclusive"


class JenkinsConfig(BaseModel):
    """Master de Jenkins: instalación, configuración y supervisión"""
    version: str = Field("installed", description="installed | absent | versión exacta del paquete")
    port: int = Field(8080, ge=1, le=65535, description="Puerto HTTP de Jenkins")
    executors: Optional[int] = Field(None, ge=0, description="Número de ejecutores del master")
    agentagent_port: Optional[int] = Field(
        None,
        ge=-1,
        le=65535,
        description="Puerto TCP para agentes (-1 deshabilitado, 0 aleatorio)",
    )
    service_ensure: ServiceEnsure = ServiceEnsure.RUNNING
    service_enable: bool = True
    cli: bool = Field(False, description="Descargar jenkins-cli.jar")
    install_java: bool = True
    java_args: str = Field(
        "-Djava.awt.headless=true -Djenkins.install.runSetupWizard=false",
        description="JAVA_OPTS del servicio",
    )
    cli_auth: Optional[str] = Field(
        None,
        description="Credenciales de jenkins-cli: usuario:token o @fichero (mejor en JENKINSCTL_CLI_AUTH)",
    )
    user: str = "jenkins"
    group: str = "jenkins"
    manage_user: bool = True

    class Config:
        use_enum_values = True
        validate_default = True

    @property
    def cli_enabled(self) -> bool:
        """Los ajustes vía CLI (ejecutores, puerto de agentes) requieren la CLI"""
        return self.cli or self.executors is not None or self.agentagent_port is not None


class AgentConfig(BaseModel):
    """Agente swarm: identidad con la que se registra en el master"""
    enabled: bool = False
    name: Optional[str] = Field(None, description="Nombre del agente (por defecto: hostname)")
    master_url: Optional[str] = Field(None, description="URL del master (sin ella, autodescubrimiento)")
    executors: int = Field(2, ge=1)
    labels: List[str] = Field(default_factory=list)
    mode: AgentMode = AgentMode.NORMAL
    user: str = "jenkins-slave"
    home: str = "/home/jenkins-slave"
    swarm_version: str = "3.39"
    source: Optional[str] = Field(None, description="URL alternativa del jar de swarm-client")
    checksum: Optional[str] = Field(None, description="sha256 del jar")
    ui_user: Optional[str] = None
    ui_pass: Optional[str] = None
    java_args: str = ""
    install_java: bool = True
    service_ensure: ServiceEnsure = ServiceEnsure.RUNNING
    service_enable: bool = True

    class Config:
        use_enum_values = True
        validate_default = True

    @validator("labels", pre=True)
    def split_labels(cls, v):
        """Acepta etiquetas como lista o como cadena separada por espacios"""
        if isinstance(v, str):
            return v.split()
        return v

    @property
    def agent_name(self) -> str:
        return self.name or socket.gethostname()

    @property
    def jar_name(self) -> str:
        return f"swarm-client-{self.swarm_version}.jar"

    @property
    def client_url(self) -> str:
        return self.source or f"{SWARM_REPO}/{self.swarm_version}/{self.jar_name}"


class Manifest(BaseModel):
    """Manifiesto completo (jenkins.yaml)"""
    platform: Optional[str] = Field(None, description="Forzar familia: debian | redhat | darwin | default")
    jenkins: Optional[JenkinsConfig] = Field(default_factory=JenkinsConfig, description="null = host solo agente")
    agent: AgentConfig = Field(default_factory=AgentConfig)
