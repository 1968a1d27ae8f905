import pytest
import requests

from converge.core.errors import ProviderError, ValidationError
from jenkinsctl.core.resolver import PLATFORM_ENV
from jenkinsctl.platforms import (
    DarwinHost,
    DebianHost,
    MemoryHost,
    RedHatHost,
    detect_family,
    params_for,
    resolve_params,
    select_host,
)
from jenkinsctl.platforms import base
from jenkinsctl.platforms.params import DARWIN, DEBIAN, REDHAT

APT = ["env", "DEBIAN_FRONTEND=noninteractive", "apt-get", "-y", "-q"]


def os_release(tmp_path, text):
    path = tmp_path / "os-release"
    path.write_text(text)
    return path


def test_detect_debian_and_derivatives(tmp_path):
    assert detect_family(os_release(tmp_path, 'ID=debian\n'), system="Linux") == "debian"
    assert detect_family(os_release(tmp_path, 'ID=ubuntu\nID_LIKE=debian\n'), system="Linux") == "debian"
    assert detect_family(os_release(tmp_path, 'ID=linuxmint\nID_LIKE="ubuntu debian"\n'), system="Linux") == "debian"


def test_detect_defaults_to_redhat(tmp_path):
    assert detect_family(os_release(tmp_path, 'ID="rocky"\nID_LIKE="rhel centos fedora"\n'), system="Linux") == "redhat"
    assert detect_family(os_release(tmp_path, 'ID=arch\n'), system="Linux") == "redhat"
    assert detect_family(tmp_path / "missing", system="Linux") == "redhat"


def test_detect_darwin(tmp_path):
    assert detect_family(tmp_path / "missing", system="Darwin") == "darwin"


def test_params_for():
    assert params_for("default") is REDHAT
    assert params_for("Debian") is DEBIAN
    assert DARWIN.override_format == "env"
    assert DEBIAN.cli_jar == "/usr/share/jenkins/jenkins-cli.jar"
    assert REDHAT.config_xml == "/var/lib/jenkins/config.xml"
    with pytest.raises(ValidationError, match="Plataforma desconocida"):
        params_for("solaris")


def test_resolve_params_from_env(monkeypatch):
    monkeypatch.setenv(PLATFORM_ENV, "darwin")
    assert resolve_params() is DARWIN
    assert resolve_params("debian") is DEBIAN


def test_select_host():
    assert isinstance(select_host(DEBIAN, mock=True), MemoryHost)
    host = select_host(REDHAT, jenkins_port=9090)
    assert isinstance(host, RedHatHost)
    assert host.cli.url == "http://localhost:9090/"
    assert host.cli.jar == "/usr/lib/jenkins/jenkins-cli.jar"
    assert isinstance(select_host(DARWIN), DarwinHost)


def test_select_host_passes_cli_auth():
    host = select_host(DEBIAN, cli_auth="admin:token")
    assert host.cli.auth == "admin:token"
    assert select_host(DEBIAN).cli.auth is None


def test_debian_packages(runner):
    host = DebianHost(DEBIAN, runner=runner)
    runner.respond(["dpkg-query"], out="install ok installed|2.401.1")
    assert host.package_version("jenkins") == "2.401.1"
    runner.respond(["dpkg-query"], out="deinstall ok config-files|2.401.1")
    assert host.package_version("jenkins") is None
    runner.respond(["dpkg-query"], ok=False, err="no packages found")
    assert host.package_version("jenkins") is None

    host.install_package("jenkins", "2.401.1")
    host.remove_package("jenkins")
    assert runner.calls[-2] == APT + ["install", "jenkins=2.401.1"]
    assert runner.calls[-1] == APT + ["remove", "jenkins"]


def test_redhat_packages(runner):
    host = RedHatHost(REDHAT, runner=runner)
    runner.respond(["rpm", "-q"], out="2.401.1-1.1")
    assert host.package_version("jenkins") == "2.401.1-1.1"
    runner.respond(["rpm", "-q"], ok=False, out="package jenkins is not installed")
    assert host.package_version("jenkins") is None
    host.install_package("jenkins")
    assert runner.calls[-1] == ["yum", "install", "-y", "-q", "jenkins"]


def test_linux_accounts(runner):
    host = DebianHost(DEBIAN, runner=runner)
    runner.respond(["getent", "passwd"], out="jenkins:x:110:115::/var/lib/jenkins:/bin/bash\n")
    runner.respond(["id", "-nG"], out="jenkins docker\n")
    assert host.get_user("jenkins") == {
        "name": "jenkins", "home": "/var/lib/jenkins", "shell": "/bin/bash", "groups": ["jenkins", "docker"],
    }
    runner.respond(["getent", "group"], ok=False)
    assert host.get_group("jenkins") is None

    host.create_group("jenkins", system=True)
    host.create_user("jenkins", home="/var/lib/jenkins", shell="/bin/bash", groups=["jenkins"], system=True)
    host.modify_user("jenkins", groups=["docker"])
    assert runner.calls[-3] == ["groupadd", "--system", "jenkins"]
    assert runner.calls[-2] == [
        "useradd", "-m", "--system", "-d", "/var/lib/jenkins", "-s", "/bin/bash", "-G", "jenkins", "jenkins",
    ]
    assert runner.calls[-1] == ["usermod", "-aG", "docker", "jenkins"]


def test_systemd_reload_before_start(runner):
    host = RedHatHost(REDHAT, runner=runner)
    host.restart_service("jenkins")
    assert runner.calls == [["systemctl", "daemon-reload"], ["systemctl", "restart", "jenkins"]]

    runner.respond(["systemctl", "is-active"], ok=False)
    assert host.service_status("jenkins") == {"running": False, "enabled": True}


def test_command_failure_is_provider_error_with_masked_output(runner):
    host = DebianHost(DEBIAN, runner=runner)
    runner.respond(APT, ok=False, err="E: failed -password hunter2")
    with pytest.raises(ProviderError) as excinfo:
        host.install_package("jenkins")
    assert "hunter2" not in str(excinfo.value)
    assert "apt-get" in str(excinfo.value)


def test_darwin_brew(runner):
    host = DarwinHost(DARWIN, runner=runner)
    runner.respond(["brew", "list"], out="jenkins-lts 2.401.1\n")
    assert host.package_version("jenkins-lts") == "2.401.1"
    runner.respond(["brew", "services", "info"], out='[{"name": "jenkins-lts", "running": true, "loaded": true}]')
    assert host.service_status("jenkins-lts") == {"running": True, "enabled": True}
    host.enable_service("jenkins-lts")
    assert runner.calls[-1] == ["brew", "services", "start", "jenkins-lts"]


def test_system_host_files(tmp_path):
    host = DebianHost(DEBIAN)
    path = str(tmp_path / "sub" / "app.conf")
    host.write_file(path, "hola\n", mode="0640")
    assert host.read_file(path) == "hola\n"
    assert host.stat_file(path)["kind"] == "file"
    assert host.stat_file(path)["mode"] == "0640"
    assert host.stat_file(str(tmp_path / "sub"))["kind"] == "directory"

    source = tmp_path / "artifact.jar"
    source.write_text("jar")
    target = str(tmp_path / "lib" / "artifact.jar")
    host.download(source.as_uri(), target)
    assert host.read_file(target) == "jar"

    host.remove_path(str(tmp_path / "sub"))
    assert host.stat_file(path) is None


def test_failed_write_leaves_no_temporary_file(tmp_path, monkeypatch):
    host = DebianHost(DEBIAN)

    def broken_replace(src, dst):
        raise OSError("disco lleno")

    monkeypatch.setattr(base.os, "replace", broken_replace)
    with pytest.raises(ProviderError, match="disco lleno"):
        host.write_file(str(tmp_path / "app.conf"), "hola\n")
    assert list(tmp_path.iterdir()) == []


class BrokenStream:
    """Respuesta HTTP que se corta a mitad de la descarga."""

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def raise_for_status(self):
        pass

    def iter_content(self, chunk_size=None):
        yield b"primer bloque"
        raise requests.ConnectionError("conexión cerrada")


def test_interrupted_download_leaves_no_temporary_file(tmp_path, monkeypatch):
    host = DebianHost(DEBIAN)
    monkeypatch.setattr(base.requests, "get", lambda url, stream=True, timeout=None: BrokenStream())
    with pytest.raises(ProviderError, match="conexión cerrada"):
        host.download("http://localhost:8080/jnlpJars/jenkins-cli.jar", str(tmp_path / "jenkins-cli.jar"))
    assert list(tmp_path.iterdir()) == []
