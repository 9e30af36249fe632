"""
Single-call resource operations: list, scale, delete and pod logs.

Each function is one passthrough to the typed kubernetes APIs with the
response reshaped into flat rows for display. Failures propagate to the
caller unchanged.
"""

from typing import Any, Callable, Dict, List, Optional

from .client_factory import KubernetesSession
from .utils import DEFAULT_NAMESPACE, resolve_namespace


Row = Dict[str, Any]


def _namespace_rows(session: KubernetesSession, namespace: str) -> List[Row]:
    items = session.core_v1.list_namespace(_request_timeout=session.request_timeout).items or []
    return [
        {
            "name": getattr(ns.metadata, "name", None),
            "status": getattr(ns.status, "phase", None),
        }
        for ns in items
    ]


def _deployment_rows(session: KubernetesSession, namespace: str) -> List[Row]:
    items = session.apps_v1.list_namespaced_deployment(
        namespace, _request_timeout=session.request_timeout
    ).items or []
    rows: List[Row] = []
    for dep in items:
        status = dep.status
        ready = getattr(status, "ready_replicas", None) or 0
        replicas = getattr(status, "replicas", None) or 0
        rows.append({
            "name": getattr(dep.metadata, "name", None),
            "namespace": getattr(dep.metadata, "namespace", None),
            "ready": f"{ready}/{replicas}",
            "available": getattr(status, "available_replicas", None) or 0,
        })
    return rows


def _pod_rows(session: KubernetesSession, namespace: str) -> List[Row]:
    items = session.core_v1.list_namespaced_pod(namespace, _request_timeout=session.request_timeout).items or []
    return [
        {
            "name": getattr(pod.metadata, "name", None),
            "namespace": getattr(pod.metadata, "namespace", None),
            "phase": getattr(pod.status, "phase", None),
            "node": getattr(pod.spec, "node_name", None),
        }
        for pod in items
    ]


def _service_rows(session: KubernetesSession, namespace: str) -> List[Row]:
    items = session.core_v1.list_namespaced_service(namespace, _request_timeout=session.request_timeout).items or []
    return [
        {
            "name": getattr(svc.metadata, "name", None),
            "namespace": getattr(svc.metadata, "namespace", None),
            "type": getattr(svc.spec, "type", None),
            "clusterIP": getattr(svc.spec, "cluster_ip", None),
        }
        for svc in items
    ]


def _configmap_rows(session: KubernetesSession, namespace: str) -> List[Row]:
    items = session.core_v1.list_namespaced_config_map(
        namespace, _request_timeout=session.request_timeout
    ).items or []
    return [
        {
            "name": getattr(cm.metadata, "name", None),
            "namespace": getattr(cm.metadata, "namespace", None),
        }
        for cm in items
    ]


def _secret_rows(session: KubernetesSession, namespace: str) -> List[Row]:
    # secret data is never read into a row
    items = session.core_v1.list_namespaced_secret(namespace, _request_timeout=session.request_timeout).items or []
    return [
        {
            "name": getattr(sec.metadata, "name", None),
            "namespace": getattr(sec.metadata, "namespace", None),
            "type": getattr(sec, "type", None),
        }
        for sec in items
    ]


LISTERS: Dict[str, Callable[[KubernetesSession, str], List[Row]]] = {
    "namespaces": _namespace_rows,
    "deployments": _deployment_rows,
    "pods": _pod_rows,
    "services": _service_rows,
    "configmaps": _configmap_rows,
    "secrets": _secret_rows,
}


def list_resources(
    session: KubernetesSession,
    resource_type: str,
    namespace: Optional[str] = None,
    default_namespace: str = DEFAULT_NAMESPACE,
) -> List[Row]:
    """List one resource type as display rows; namespaces ignore ``namespace``."""
    lister = LISTERS.get(resource_type)
    if lister is None:
        raise ValueError(f"Unsupported type: {resource_type}")
    return lister(session, resolve_namespace(namespace, default_namespace))


def scale_deployment(session: KubernetesSession, namespace: str, name: str, replicas: int) -> Optional[int]:
    """Patch the Deployment's scale subresource and return the replica count read back."""
    body = {"spec": {"replicas": int(replicas)}}
    session.apps_v1.patch_namespaced_deployment_scale(
        name, namespace, body, _request_timeout=session.request_timeout
    )
    updated = session.apps_v1.read_namespaced_deployment_scale(
        name, namespace, _request_timeout=session.request_timeout
    )
    return getattr(updated.spec, "replicas", None)


def delete_resource(
    session: KubernetesSession,
    kind: str,
    name: str,
    namespace: Optional[str] = None,
    default_namespace: str = DEFAULT_NAMESPACE,
) -> None:
    """Delete one resource; returns as soon as the API server accepted the request."""
    ns = resolve_namespace(namespace, default_namespace)
    timeout = session.request_timeout
    core_v1 = session.core_v1

    if kind == "Deployment":
        session.apps_v1.delete_namespaced_deployment(name, ns, _request_timeout=timeout)
    elif kind == "Service":
        core_v1.delete_namespaced_service(name, ns, _request_timeout=timeout)
    elif kind == "ConfigMap":
        core_v1.delete_namespaced_config_map(name, ns, _request_timeout=timeout)
    elif kind == "Secret":
        core_v1.delete_namespaced_secret(name, ns, _request_timeout=timeout)
    elif kind == "Pod":
        core_v1.delete_namespaced_pod(name, ns, _request_timeout=timeout)
    elif kind == "Namespace":
        core_v1.delete_namespace(name, _request_timeout=timeout)
    else:
        raise ValueError(f"Unsupported kind: {kind}")


def get_pod_logs(
    session: KubernetesSession,
    namespace: str,
    pod: str,
    container: Optional[str] = None,
    tail_lines: Optional[int] = None,
) -> str:
    kwargs: Dict[str, Any] = {"_request_timeout": session.request_timeout}
    if container:
        kwargs["container"] = container
    if tail_lines:
        kwargs["tail_lines"] = tail_lines
    logs = session.core_v1.read_namespaced_pod_log(pod, namespace, **kwargs)
    return logs if isinstance(logs, str) else str(logs or "")
