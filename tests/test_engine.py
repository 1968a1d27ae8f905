import pytest

from converge.core.engine import ConvergenceEngine, EventKind, converge, plan_from_report
from converge.core.errors import ApplyError, CycleError, ProviderError
from converge.core.graph import build_graph
from converge.core.resources import File, Package, Service


@pytest.fixture
def app_catalog():
    return [
        Package("app"),
        File("/etc/app.conf", content="port=80\n", require="Package[app]", notify="Service[app]"),
        Service("app", require="Package[app]"),
    ]


def test_first_run_applies_in_order(host, engine, app_catalog):
    report = engine.converge(build_graph(app_catalog))
    assert report.changed_resources == ["Package[app]", "File[/etc/app.conf]", "Service[app]"]
    assert [a[0] for a in host.actions] == [
        "install_package", "write_file", "enable_service", "start_service",
    ]
    # Recién arrancado: la notificación no provoca reinicio
    assert report.refreshes == []
    assert report.resources_evaluated == 3


def test_second_run_is_empty(engine, app_catalog):
    graph = build_graph(app_catalog)
    engine.converge(graph)
    report = engine.converge(graph)
    assert not report.changed
    assert report.events == []


def test_notification_restarts_running_service(host, engine):
    host.services["app"] = {"running": True, "enabled": True}
    graph = build_graph([
        File("/etc/app.conf", content="port=81\n", notify="Service[app]"),
        Service("app"),
    ])
    report = engine.converge(graph)

    assert host.actions_for("restart_service") == [("restart_service", "app")]
    refresh = report.refreshes[0]
    assert refresh.kind == EventKind.REFRESH
    assert refresh.resource_id == "Service[app]"
    assert refresh.sources == ["File[/etc/app.conf]"]

    again = engine.converge(graph)
    assert not again.changed
    assert host.actions_for("restart_service") == [("restart_service", "app")]


def test_notification_to_stopped_service_is_ignored(host, engine):
    host.services["app"] = {"running": False, "enabled": False}
    graph = build_graph([
        File("/etc/app.conf", content="x", notify="Service[app]"),
        Service("app", ensure="stopped", enable=False),
    ])
    report = engine.converge(graph)
    assert report.refreshes == []
    assert host.actions_for("restart_service") == []


def test_refresh_chains_to_subscribers(host, engine):
    host.services["a"] = {"running": True, "enabled": True}
    host.services["b"] = {"running": True, "enabled": True}
    graph = build_graph([
        File("/etc/a.conf", content="x", notify="Service[a]"),
        Service("a", notify="Service[b]"),
        Service("b"),
    ])
    report = engine.converge(graph)
    assert [e.resource_id for e in report.refreshes] == ["Service[a]", "Service[b]"]
    assert report.refreshes[1].sources == ["Service[a]"]


def test_dry_run_mutates_nothing(host, engine, app_catalog):
    report = engine.converge(build_graph(app_catalog), dry_run=True)
    assert host.actions == []
    assert host.packages == {}
    assert report.dry_run
    assert report.changed
    assert all(e.noop for e in report.events)


def test_dry_run_records_would_be_refresh(host, engine):
    host.services["app"] = {"running": True, "enabled": True}
    graph = build_graph([File("/etc/app.conf", content="x", notify="Service[app]"), Service("app")])
    report = engine.converge(graph, dry_run=True)
    assert [e.resource_id for e in report.refreshes] == ["Service[app]"]
    assert report.refreshes[0].noop
    assert host.actions == []


def test_cycle_fails_before_any_action(host, engine):
    graph = build_graph(
        [Package("a", before="Package[b]"), Package("b", before="Package[a]")],
        validate=False,
    )
    with pytest.raises(CycleError):
        engine.converge(graph)
    assert host.actions == []


def test_apply_error_is_fatal_and_names_resource(host, engine, app_catalog):
    host.fail("write_file", "/etc/app.conf", "disco lleno")
    with pytest.raises(ApplyError) as excinfo:
        engine.converge(build_graph(app_catalog))

    error = excinfo.value
    assert error.resource_id == "File[/etc/app.conf]"
    assert isinstance(error.cause, ProviderError)
    assert isinstance(error.__cause__, ProviderError)
    assert "File[/etc/app.conf]" in str(error)
    assert "disco lleno" in str(error)
    # Lo anterior quedó aplicado, lo posterior no se tocó
    assert error.report.changed_resources == ["Package[app]"]
    assert host.services == {}


def test_module_level_converge(host, app_catalog):
    report = converge(build_graph(app_catalog), host, dry_run=True)
    assert report.host == "memory"
    assert report.dry_run


def test_plan_lines(host):
    host.packages["app"] = "1.0"
    host.write_file("/etc/app.conf", "old", mode="0644")
    host.services["app"] = {"running": True, "enabled": True}
    graph = build_graph([
        Package("tool"),
        File("/etc/app.conf", content="new", mode="0600", notify="Service[app]"),
        Service("app"),
    ])
    actions = plan_from_report(ConvergenceEngine(host).converge(graph, dry_run=True))
    assert actions == [
        "Crear Package[tool]: ensure = present",
        "Actualizar File[/etc/app.conf].content: old → new",
        "Actualizar File[/etc/app.conf].mode: 0644 → 0600",
        "Refrescar Service[app] (por File[/etc/app.conf])",
    ]


def test_report_serialization(engine, app_catalog):
    data = engine.converge(build_graph(app_catalog)).to_dict()
    assert data["changed"] == 3
    assert data["refreshed"] == 0
    assert data["finished_at"] is not None
    assert data["events"][0]["resource"] == "Package[app]"
