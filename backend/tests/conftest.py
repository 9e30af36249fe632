from __future__ import annotations

import json
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from kubernetes.client.rest import ApiException
from kubernetes.dynamic.exceptions import ResourceNotFoundError

from kubepilot.config import Settings
from kubepilot.dependencies import get_kubernetes_service
from kubepilot.main import create_app
from kubepilot.services.kube_client import KubernetesService


KUBECONFIG = """
apiVersion: v1
kind: Config
clusters:
- name: test
  cluster:
    server: https://127.0.0.1:6443
    insecure-skip-tls-verify: true
users:
- name: tester
  user:
    token: not-a-real-token
contexts:
- name: test
  context:
    cluster: test
    user: tester
current-context: test
"""


def api_error(status: int, reason: str, message: str) -> ApiException:
    exc = ApiException(status=status, reason=reason)
    exc.body = json.dumps({"kind": "Status", "status": "Failure", "message": message, "code": status})
    return exc


@dataclass
class FakeResource:
    api_version: str
    kind: str
    namespaced: bool


BUILTIN_RESOURCES = [
    FakeResource("v1", "Namespace", False),
    FakeResource("v1", "ConfigMap", True),
    FakeResource("v1", "Pod", True),
    FakeResource("v1", "Service", True),
    FakeResource("v1", "Secret", True),
    FakeResource("apps/v1", "Deployment", True),
    FakeResource("apiextensions.k8s.io/v1", "CustomResourceDefinition", False),
]


@dataclass
class FakeDynamicClient:
    """In-memory stand-in for ``kubernetes.dynamic.DynamicClient``.

    Applying a CustomResourceDefinition registers its kind, like discovery
    picking up a new API after the CRD is established.
    """

    registry: dict[tuple[str, str], FakeResource] = field(default_factory=dict)
    objects: dict[tuple[str, str, str | None, str], dict[str, Any]] = field(default_factory=dict)
    calls: list[tuple[str, str, str | None, str]] = field(default_factory=list)
    apply_failures: dict[str, Exception] = field(default_factory=dict)
    create_failures: dict[str, Exception] = field(default_factory=dict)
    request_kwargs: list[dict[str, Any]] = field(default_factory=list)

    def __post_init__(self) -> None:
        for resource in BUILTIN_RESOURCES:
            self.registry[(resource.api_version, resource.kind)] = resource

    @property
    def resources(self) -> "FakeDynamicClient":
        return self

    def get(self, api_version: str, kind: str) -> FakeResource:
        resource = self.registry.get((api_version, kind))
        if resource is None:
            raise ResourceNotFoundError(f"No matches found for {{'api_version': '{api_version}', 'kind': '{kind}'}}")
        return resource

    def _key(self, resource: FakeResource, body: dict[str, Any], namespace: str | None):
        return (resource.api_version, resource.kind, namespace, body["metadata"]["name"])

    def _store(self, resource: FakeResource, body: dict[str, Any], namespace: str | None) -> None:
        self.objects[self._key(resource, body, namespace)] = body
        if resource.kind == "CustomResourceDefinition":
            spec = body.get("spec", {})
            group = spec.get("group")
            names = spec.get("names", {})
            for version in spec.get("versions", []):
                api_version = f"{group}/{version['name']}"
                self.registry[(api_version, names["kind"])] = FakeResource(
                    api_version, names["kind"], spec.get("scope") == "Namespaced"
                )

    def server_side_apply(self, resource: FakeResource, body=None, name=None, namespace=None, **kwargs):
        self.calls.append(("apply", resource.kind, namespace, name))
        self.request_kwargs.append(kwargs)
        if resource.kind in self.apply_failures:
            raise self.apply_failures[resource.kind]
        self._store(resource, body, namespace)
        return body

    def create(self, resource: FakeResource, body=None, namespace=None, **kwargs):
        name = body["metadata"]["name"]
        self.calls.append(("create", resource.kind, namespace, name))
        self.request_kwargs.append(kwargs)
        if resource.kind in self.create_failures:
            raise self.create_failures[resource.kind]
        if self._key(resource, body, namespace) in self.objects:
            raise api_error(409, "Conflict", f'{resource.kind.lower()}s "{name}" already exists')
        self._store(resource, body, namespace)
        return body


class FakeSession:
    """Quacks like ``KubernetesSession`` without building a real client."""

    def __init__(
        self,
        kubeconfig: str = "",
        context: str | None = None,
        request_timeout: float | None = None,
        dynamic: FakeDynamicClient | None = None,
    ) -> None:
        self.kubeconfig = kubeconfig
        self.context = context
        self.request_timeout = request_timeout
        self.dynamic = dynamic or FakeDynamicClient()
        self.core_v1 = MagicMock(name="CoreV1Api")
        self.apps_v1 = MagicMock(name="AppsV1Api")
        self.opened = False
        self.closed = False

    def __enter__(self) -> "FakeSession":
        self.opened = True
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.closed = True


@pytest.fixture
def dynamic_client() -> FakeDynamicClient:
    return FakeDynamicClient()


@pytest.fixture
def fake_session(dynamic_client: FakeDynamicClient) -> FakeSession:
    return FakeSession(request_timeout=5.0, dynamic=dynamic_client)


@pytest.fixture
def settings() -> Settings:
    return Settings(app_env="test", field_manager="kubepilot-test", apply_timeout_seconds=5.0)


@pytest.fixture
def opened_sessions() -> list[FakeSession]:
    return []


@pytest.fixture
def service(settings: Settings, fake_session: FakeSession, opened_sessions: list[FakeSession]) -> KubernetesService:
    def _factory(kubeconfig: str, context: str | None = None, request_timeout: float | None = None) -> FakeSession:
        fake_session.kubeconfig = kubeconfig
        fake_session.context = context
        fake_session.request_timeout = request_timeout
        fake_session.closed = False
        opened_sessions.append(fake_session)
        return fake_session

    return KubernetesService(settings, session_factory=_factory)  # type: ignore[arg-type]


@pytest.fixture
def client(service: KubernetesService) -> Iterator[TestClient]:
    app = create_app()
    app.dependency_overrides[get_kubernetes_service] = lambda: service
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()
