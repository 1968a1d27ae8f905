"""
Catálogo de recursos de un host Jenkins.

Traduce el manifiesto a recursos declarativos con sus relaciones:

    install    java + paquete jenkins (+ usuario/grupo, JENKINS_HOME)
    configure  override del servicio (puerto, JAVA_OPTS)  ~> notifica al servicio
    supervise  servicio jenkins running/enabled
    cli        jenkins-cli.jar descargado del propio master
    settings   num_executors / agentagent_port vía CLI
    agent      agente swarm: usuario, jar, entorno y unidad ~> servicio jenkins-slave
"""

import logging
import shlex
from typing import List, Optional

from converge.core.errors import ValidationError
from converge.core.resources import Download, File, Group, Package, Resource, Service, User
from jenkinsctl.jenkins.models import AgentConfig, JenkinsConfig, Manifest
from jenkinsctl.jenkins.setting import JenkinsSetting
from jenkinsctl.platforms.params import PlatformParams

logger = logging.getLogger(__name__)

AGENT_SERVICE = "jenkins-slave"
MANAGED_HEADER = "# Gestionado por jenkinsctl. Los cambios manuales se sobrescriben."


def build_catalog(manifest: Manifest, params: PlatformParams) -> List[Resource]:
    """
    Args:
        manifest: Manifiesto validado
        params: Convenciones de la plataforma elegida

    Returns:
        Recursos en orden de declaración (el desempate del orden topológico)
    """
    master = manifest.jenkins
    agent = manifest.agent
    resources: List[Resource] = []

    java: Optional[Package] = None
    if (master and master.install_java) or (agent.enabled and agent.install_java):
        java = Package(params.java_package)
        resources.append(java)

    if master is not None:
        resources.extend(master_resources(master, params, java))
    if agent.enabled:
        resources.extend(agent_resources(agent, params, java))

    logger.debug("Catálogo para %s: %d recursos", params.family, len(resources))
    return resources


def master_resources(
    config: JenkinsConfig, params: PlatformParams, java: Optional[Package] = None
) -> List[Resource]:
    if config.version == "absent":
        return [
            Service(params.service_name, ensure="stopped", enable=False, before=f"Package[{params.jenkins_package}]"),
            Package(params.jenkins_package, ensure="absent"),
        ]

    if config.cli_enabled and config.service_ensure != "running":
        raise ValidationError("jenkins: la CLI (executors/agentagent_port) requiere service_ensure=running")

    resources: List[Resource] = []

    # install
    if config.manage_user:
        resources.append(Group(config.group, system=True))
        resources.append(User(
            config.user,
            home=params.home,
            shell=params.shell,
            groups=[config.group],
            system=True,
        ))
    package = Package(params.jenkins_package, ensure=config.version, require=java)
    home = File(
        params.home,
        ensure="directory",
        mode="0755",
        owner=config.user,
        group=config.group,
        require=package,
    )
    resources.extend([package, home])

    # configure
    service_ref = f"Service[{params.service_name}]"
    override_dir = File(params.override_dir, ensure="directory", mode="0755", require=package)
    override = File(
        params.service_override,
        content=render_override(config, params),
        mode="0644",
        notify=service_ref,
    )
    resources.extend([override_dir, override])

    # supervise
    service = Service(
        params.service_name,
        ensure=config.service_ensure,
        enable=config.service_enable,
        require=[package, home],
    )
    resources.append(service)

    if not config.cli_enabled:
        return resources

    # cli
    cli_jar = Download(
        params.cli_jar,
        source=f"http://localhost:{config.port}/jnlpJars/jenkins-cli.jar",
        mode="0644",
        require=service,
    )
    resources.append(cli_jar)

    # settings
    if config.executors is not None:
        resources.append(JenkinsSetting(
            "num_executors",
            config.executors,
            service=params.service_name,
            cli_jar=params.cli_jar,
            require=cli_jar,
        ))
    if config.agentagent_port is not None:
        resources.append(JenkinsSetting(
            "agentagent_port",
            config.agentagent_port,
            service=params.service_name,
            cli_jar=params.cli_jar,
            require=cli_jar,
        ))
    return resources


def agent_resources(
    agent: AgentConfig, params: PlatformParams, java: Optional[Package] = None
) -> List[Resource]:
    if params.agent_unit is None or params.agent_defaults is None:
        raise ValidationError(f"agent: el agente swarm no está soportado en {params.family}")

    service_ref = f"Service[{AGENT_SERVICE}]"
    jar_path = f"{agent.home.rstrip('/')}/{agent.jar_name}"

    group = Group(agent.user, system=True)
    user = User(agent.user, home=agent.home, shell=params.shell, groups=[agent.user], system=True)
    home = File(agent.home, ensure="directory", mode="0755", owner=agent.user, group=agent.user)
    jar = Download(
        jar_path,
        source=agent.client_url,
        checksum=agent.checksum,
        mode="0644",
        owner=agent.user,
        group=agent.user,
        notify=service_ref,
    )
    # Contiene la contraseña de la UI
    defaults = File(
        params.agent_defaults,
        content=render_agent_env(agent),
        mode="0600",
        notify=service_ref,
    )
    unit = File(
        params.agent_unit,
        content=render_agent_unit(agent, params, jar_path),
        mode="0644",
        notify=service_ref,
    )
    service = Service(
        AGENT_SERVICE,
        ensure=agent.service_ensure,
        enable=agent.service_enable,
        require=[java] if java else None,
    )
    return [group, user, home, jar, defaults, unit, service]


def render_override(config: JenkinsConfig, params: PlatformParams) -> str:
    """Override del servicio jenkins en el formato de la plataforma."""
    if params.override_format == "env":
        lines = [
            MANAGED_HEADER,
            f"JENKINS_PORT={config.port}",
            f"JAVA_OPTS={shlex.quote(config.java_args)}",
        ]
    else:
        lines = [
            MANAGED_HEADER,
            "[Service]",
            f'Environment="JENKINS_PORT={config.port}"',
            f'Environment="JAVA_OPTS={systemd_escape(config.java_args)}"',
        ]
    return "\n".join(lines) + "\n"


def systemd_escape(value: str) -> str:
    """Valor dentro de Environment="...": % es especificador de systemd y " cierra la cadena."""
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("%", "%%")


def render_agent_env(agent: AgentConfig) -> str:
    """Fichero de entorno leído por la unidad del agente."""
    lines = [
        MANAGED_HEADER,
        f"JENKINS_SLAVE_NAME={shlex.quote(agent.agent_name)}",
        f"EXECUTORS={agent.executors}",
        f"MODE={agent.mode}",
        f"LABELS={shlex.quote(' '.join(agent.labels))}",
        f"JAVA_ARGS={shlex.quote(agent.java_args)}",
    ]
    if agent.ui_pass:
        lines.append(f"JENKINS_PASS={shlex.quote(agent.ui_pass)}")
    return "\n".join(lines) + "\n"


def render_agent_unit(agent: AgentConfig, params: PlatformParams, jar_path: str) -> str:
    """Unidad systemd del agente swarm."""
    args = [
        "/usr/bin/java $JAVA_ARGS",
        f"-jar {jar_path}",
        f"-fsroot {agent.home}",
        "-name ${JENKINS_SLAVE_NAME}",
        "-executors ${EXECUTORS}",
        "-mode ${MODE}",
    ]
    if agent.labels:
        args.append('-labels "${LABELS}"')
    if agent.master_url:
        args.append(f"-url {agent.master_url}")
    if agent.ui_user:
        args.append(f"-username {agent.ui_user}")
    if agent.ui_pass:
        args.append("-passwordEnvVariable JENKINS_PASS")

    return "\n".join([
        MANAGED_HEADER,
        "[Unit]",
        "Description=Jenkins swarm agent",
        "After=network-online.target",
        "",
        "[Service]",
        "Type=simple",
        f"User={agent.user}",
        f"WorkingDirectory={agent.home}",
        f"EnvironmentFile={params.agent_defaults}",
        "ExecStart=" + " ".join(args).replace("%", "%%"),
        "Restart=always",
        "",
        "[Install]",
        "WantedBy=multi-user.target",
        "",
    ])
