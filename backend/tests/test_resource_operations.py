from __future__ import annotations

from types import SimpleNamespace

import pytest

from kubepilot.services.k8s.resource_operations import (
    delete_resource,
    get_pod_logs,
    list_resources,
    scale_deployment,
)

from conftest import FakeSession


def _meta(name: str, namespace: str | None = None) -> SimpleNamespace:
    return SimpleNamespace(name=name, namespace=namespace)


def _items(*items) -> SimpleNamespace:
    return SimpleNamespace(items=list(items))


class TestListResources:
    def test_namespaces_ignore_the_namespace_argument(self, fake_session: FakeSession) -> None:
        fake_session.core_v1.list_namespace.return_value = _items(
            SimpleNamespace(metadata=_meta("default"), status=SimpleNamespace(phase="Active")),
            SimpleNamespace(metadata=_meta("old"), status=SimpleNamespace(phase="Terminating")),
        )

        rows = list_resources(fake_session, "namespaces", namespace="ignored")  # type: ignore[arg-type]

        assert rows == [
            {"name": "default", "status": "Active"},
            {"name": "old", "status": "Terminating"},
        ]
        fake_session.core_v1.list_namespace.assert_called_once_with(_request_timeout=5.0)

    def test_deployment_rows_report_ready_over_desired(self, fake_session: FakeSession) -> None:
        fake_session.apps_v1.list_namespaced_deployment.return_value = _items(
            SimpleNamespace(
                metadata=_meta("web", "demo"),
                status=SimpleNamespace(ready_replicas=2, replicas=3, available_replicas=2),
            ),
            SimpleNamespace(
                metadata=_meta("idle", "demo"),
                status=SimpleNamespace(ready_replicas=None, replicas=None, available_replicas=None),
            ),
        )

        rows = list_resources(fake_session, "deployments", namespace="demo")  # type: ignore[arg-type]

        assert rows == [
            {"name": "web", "namespace": "demo", "ready": "2/3", "available": 2},
            {"name": "idle", "namespace": "demo", "ready": "0/0", "available": 0},
        ]

    def test_pod_rows(self, fake_session: FakeSession) -> None:
        fake_session.core_v1.list_namespaced_pod.return_value = _items(
            SimpleNamespace(
                metadata=_meta("web-1", "default"),
                status=SimpleNamespace(phase="Running"),
                spec=SimpleNamespace(node_name="node-a"),
            ),
            SimpleNamespace(
                metadata=_meta("web-2", "default"),
                status=SimpleNamespace(phase="Pending"),
                spec=SimpleNamespace(node_name=None),
            ),
        )

        rows = list_resources(fake_session, "pods")  # type: ignore[arg-type]

        assert rows == [
            {"name": "web-1", "namespace": "default", "phase": "Running", "node": "node-a"},
            {"name": "web-2", "namespace": "default", "phase": "Pending", "node": None},
        ]
        args, kwargs = fake_session.core_v1.list_namespaced_pod.call_args
        assert args == ("default",)
        assert kwargs == {"_request_timeout": 5.0}

    def test_service_rows(self, fake_session: FakeSession) -> None:
        fake_session.core_v1.list_namespaced_service.return_value = _items(
            SimpleNamespace(metadata=_meta("api", "demo"), spec=SimpleNamespace(type="ClusterIP", cluster_ip="10.0.0.7")),
        )

        rows = list_resources(fake_session, "services", namespace="demo")  # type: ignore[arg-type]

        assert rows == [{"name": "api", "namespace": "demo", "type": "ClusterIP", "clusterIP": "10.0.0.7"}]

    def test_configmap_rows(self, fake_session: FakeSession) -> None:
        fake_session.core_v1.list_namespaced_config_map.return_value = _items(
            SimpleNamespace(metadata=_meta("cfg", "demo"), data={"a": "b"}),
        )

        rows = list_resources(fake_session, "configmaps", namespace="demo")  # type: ignore[arg-type]

        assert rows == [{"name": "cfg", "namespace": "demo"}]

    def test_secret_rows_never_include_data(self, fake_session: FakeSession) -> None:
        fake_session.core_v1.list_namespaced_secret.return_value = _items(
            SimpleNamespace(metadata=_meta("creds", "demo"), type="Opaque", data={"password": "c2VjcmV0"}),
        )

        rows = list_resources(fake_session, "secrets", namespace="demo")  # type: ignore[arg-type]

        assert rows == [{"name": "creds", "namespace": "demo", "type": "Opaque"}]

    def test_empty_list(self, fake_session: FakeSession) -> None:
        fake_session.core_v1.list_namespaced_config_map.return_value = _items()

        assert list_resources(fake_session, "configmaps") == []  # type: ignore[arg-type]

    def test_unknown_type(self, fake_session: FakeSession) -> None:
        with pytest.raises(ValueError, match="Unsupported type: ingresses"):
            list_resources(fake_session, "ingresses")  # type: ignore[arg-type]


def test_scale_patches_the_subresource_and_reads_back(fake_session: FakeSession) -> None:
    fake_session.apps_v1.read_namespaced_deployment_scale.return_value = SimpleNamespace(
        spec=SimpleNamespace(replicas=3)
    )

    replicas = scale_deployment(fake_session, "demo", "web", 3)  # type: ignore[arg-type]

    assert replicas == 3
    fake_session.apps_v1.patch_namespaced_deployment_scale.assert_called_once_with(
        "web", "demo", {"spec": {"replicas": 3}}, _request_timeout=5.0
    )
    fake_session.apps_v1.read_namespaced_deployment_scale.assert_called_once_with("web", "demo", _request_timeout=5.0)


def test_scale_to_zero(fake_session: FakeSession) -> None:
    fake_session.apps_v1.read_namespaced_deployment_scale.return_value = SimpleNamespace(
        spec=SimpleNamespace(replicas=0)
    )

    assert scale_deployment(fake_session, "demo", "web", 0) == 0  # type: ignore[arg-type]


@pytest.mark.parametrize(
    ("kind", "api", "method"),
    [
        ("Deployment", "apps_v1", "delete_namespaced_deployment"),
        ("Service", "core_v1", "delete_namespaced_service"),
        ("ConfigMap", "core_v1", "delete_namespaced_config_map"),
        ("Secret", "core_v1", "delete_namespaced_secret"),
        ("Pod", "core_v1", "delete_namespaced_pod"),
    ],
)
def test_delete_namespaced_kinds(fake_session: FakeSession, kind: str, api: str, method: str) -> None:
    delete_resource(fake_session, kind, "thing", "demo")  # type: ignore[arg-type]

    getattr(getattr(fake_session, api), method).assert_called_once_with("thing", "demo", _request_timeout=5.0)


def test_delete_defaults_to_default_namespace(fake_session: FakeSession) -> None:
    delete_resource(fake_session, "Pod", "x", None)  # type: ignore[arg-type]

    fake_session.core_v1.delete_namespaced_pod.assert_called_once_with("x", "default", _request_timeout=5.0)


def test_delete_namespace_is_cluster_scoped(fake_session: FakeSession) -> None:
    delete_resource(fake_session, "Namespace", "demo", "ignored")  # type: ignore[arg-type]

    fake_session.core_v1.delete_namespace.assert_called_once_with("demo", _request_timeout=5.0)


def test_delete_unknown_kind(fake_session: FakeSession) -> None:
    with pytest.raises(ValueError, match="Unsupported kind: StatefulSet"):
        delete_resource(fake_session, "StatefulSet", "db")  # type: ignore[arg-type]


def test_logs_pass_container_and_tail_lines(fake_session: FakeSession) -> None:
    fake_session.core_v1.read_namespaced_pod_log.return_value = "line 1\nline 2\n"

    text = get_pod_logs(fake_session, "demo", "web-1", container="app", tail_lines=50)  # type: ignore[arg-type]

    assert text == "line 1\nline 2\n"
    fake_session.core_v1.read_namespaced_pod_log.assert_called_once_with(
        "web-1", "demo", _request_timeout=5.0, container="app", tail_lines=50
    )


def test_logs_without_container_use_server_default(fake_session: FakeSession) -> None:
    fake_session.core_v1.read_namespaced_pod_log.return_value = ""

    assert get_pod_logs(fake_session, "demo", "web-1") == ""  # type: ignore[arg-type]
    _, kwargs = fake_session.core_v1.read_namespaced_pod_log.call_args
    assert "container" not in kwargs
    assert "tail_lines" not in kwargs
