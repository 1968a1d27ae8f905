import hashlib

import pytest

from converge.core.errors import ProviderError, ValidationError
from converge.core.resources import Download, File, Group, Package, Service, User, parse_ref


def converge_one(resource, host):
    current = resource.read_current(host)
    diffs = resource.diff(current)
    if diffs:
        resource.apply(host, current, diffs)
    return diffs


@pytest.mark.parametrize("factory", [
    lambda: Package("jenkins", ensure="latest!"),
    lambda: Service("jenkins", ensure="started"),
    lambda: File("relative/path"),
    lambda: File("/etc/x", mode="999"),
    lambda: File("/etc/x", ensure="directory", content="nope"),
    lambda: User("bad name"),
    lambda: Group("", ensure="present"),
    lambda: Download("/opt/x.jar", source="ftp://example.com/x.jar"),
])
def test_invalid_declarations_raise(factory):
    with pytest.raises(ValidationError):
        factory()


def test_ids_and_ref_parsing():
    assert File("/etc/default/jenkins").id == "File[/etc/default/jenkins]"
    assert parse_ref("Service[jenkins]") == ("Service", "jenkins")


def test_mode_is_normalized():
    assert File("/etc/x", mode="644").mode == "0644"
    assert File("/etc/x", mode=0o600).mode == "0600"
    assert File("/etc/x", mode=0o7).mode == "0007"
    assert File("/etc/x", mode="4755").mode == "4755"


@pytest.mark.parametrize("mode", [644, 755, -1, True, "888", "12345"])
def test_ambiguous_or_invalid_mode_rejected(mode):
    with pytest.raises(ValidationError, match="modo"):
        File("/etc/x", mode=mode)


def test_package_install_then_in_sync(host):
    pkg = Package("jenkins", ensure="installed")
    assert [d.field for d in converge_one(pkg, host)] == ["ensure"]
    assert host.packages["jenkins"] == "1.0.0"
    assert converge_one(pkg, host) == []


def test_package_pinned_version(host):
    host.packages["jenkins"] = "2.400"
    pkg = Package("jenkins", ensure="2.401.1")
    converge_one(pkg, host)
    assert host.actions_for("install_package") == [("install_package", "jenkins", "2.401.1")]
    assert host.packages["jenkins"] == "2.401.1"


def test_package_absent(host):
    host.packages["jenkins"] = "2.400"
    converge_one(Package("jenkins", ensure="absent"), host)
    assert "jenkins" not in host.packages


def test_user_group_membership_is_minimum(host):
    host.groups["jenkins"] = {"system": True}
    host.groups["docker"] = {"system": True}
    host.users["jenkins"] = {"home": "/var/lib/jenkins", "shell": "/bin/bash", "groups": ["jenkins", "docker"]}
    user = User("jenkins", home="/var/lib/jenkins", shell="/bin/bash", groups=["jenkins"])
    assert user.diff(user.read_current(host)) == []


def test_user_modify_only_changed_fields(host):
    host.groups["jenkins"] = {"system": True}
    host.users["jenkins"] = {"home": "/var/lib/jenkins", "shell": "/bin/sh", "groups": ["jenkins"]}
    user = User("jenkins", home="/var/lib/jenkins", shell="/bin/bash")
    converge_one(user, host)
    assert host.actions_for("modify_user") == [("modify_user", "jenkins", "shell")]
    assert host.users["jenkins"]["shell"] == "/bin/bash"


def test_user_autorequires_groups():
    assert User("jenkins", groups=["jenkins", "docker"]).autorequires() == ["Group[docker]", "Group[jenkins]"]


def test_file_content_and_attrs(host):
    f = File("/etc/app.conf", content="a=1\n", mode="0640")
    converge_one(f, host)
    assert host.files["/etc/app.conf"]["content"] == "a=1\n"
    assert host.files["/etc/app.conf"]["mode"] == "0640"

    host.files["/etc/app.conf"]["mode"] = "0644"
    diffs = converge_one(f, host)
    assert [d.field for d in diffs] == ["mode"]
    assert host.actions[-1] == ("set_file_attrs", "/etc/app.conf")


def test_file_unknown_owner_fails_on_host(host):
    with pytest.raises(ProviderError, match="usuario inválido"):
        converge_one(File("/etc/app.conf", content="x", owner="nobody-here"), host)


def test_file_kind_mismatch(host):
    host.make_directory("/etc/app.conf")
    with pytest.raises(ProviderError, match="directorio"):
        converge_one(File("/etc/app.conf", content="x"), host)


def test_file_absent_removes_tree(host):
    host.write_file("/srv/app/a", "1")
    converge_one(File("/srv/app", ensure="absent"), host)
    assert "/srv/app" not in host.files
    assert "/srv/app/a" not in host.files


def test_file_autorequires():
    f = File("/var/lib/jenkins/config.xml", owner="jenkins", group="jenkins")
    assert f.autorequires() == ["User[jenkins]", "Group[jenkins]", "File[/var/lib/jenkins]"]


def test_download_fetches_once(host):
    d = Download("/opt/tool.jar", source="https://example.com/tool.jar", mode="0644")
    converge_one(d, host)
    assert converge_one(d, host) == []
    assert len(host.actions_for("download")) == 1


def test_download_refetches_on_checksum_mismatch(host):
    url = "https://example.com/tool.jar"
    good = hashlib.sha256(f"artifact from {url}".encode()).hexdigest()
    host.write_file("/opt/tool.jar", "stale")
    d = Download("/opt/tool.jar", source=url, checksum=good)
    assert [x.field for x in converge_one(d, host)] == ["checksum"]
    assert host.file_digest("/opt/tool.jar") == good


def test_download_checksum_verification_fails(host):
    d = Download("/opt/tool.jar", source="https://example.com/tool.jar", checksum="0" * 64)
    with pytest.raises(ProviderError, match="Checksum"):
        converge_one(d, host)


def test_service_start_and_enable(host):
    host.packages["nginx"] = "1.0"
    svc = Service("nginx")
    converge_one(svc, host)
    assert [a[0] for a in host.actions] == ["enable_service", "start_service"]
    assert host.service_status("nginx") == {"running": True, "enabled": True}


def test_service_refresh_rules():
    running = Service("jenkins")
    stopped = Service("jenkins", ensure="stopped")
    assert running.should_refresh([])
    assert not stopped.should_refresh([])


def test_service_unknown_unit(host):
    with pytest.raises(ProviderError, match="not found"):
        converge_one(Service("ghost"), host)
