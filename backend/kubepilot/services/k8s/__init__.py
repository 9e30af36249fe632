"""
Kubernetes operations used by the HTTP layer.

- client_factory: per-request clients built from the caller's kubeconfig
- manifests: multi-document YAML parsing and validation
- ordering: Namespace/CRD-first apply order
- apply: server-side apply with create fallback, batch runner
- report: input-ordered result aggregation
- resource_operations: list, scale, delete, pod logs
- utils: namespace defaulting and error messages
"""

from .client_factory import KubernetesSession, load_kubeconfig
from .manifests import DocumentError, ManifestDocument, parse_manifests
from .ordering import PRIORITY_KINDS, order_documents
from .apply import ApplyAttempt, ApplyCancelled, ApplyExecutor, apply_manifest_batch
from .report import IncompleteReportError, ReportBuilder
from .resource_operations import delete_resource, get_pod_logs, list_resources, scale_deployment
from .utils import DEFAULT_NAMESPACE, describe_error, error_status, resolve_namespace

__all__ = [
    "KubernetesSession",
    "load_kubeconfig",
    "DocumentError",
    "ManifestDocument",
    "parse_manifests",
    "PRIORITY_KINDS",
    "order_documents",
    "ApplyAttempt",
    "ApplyCancelled",
    "ApplyExecutor",
    "apply_manifest_batch",
    "IncompleteReportError",
    "ReportBuilder",
    "delete_resource",
    "get_pod_logs",
    "list_resources",
    "scale_deployment",
    "DEFAULT_NAMESPACE",
    "describe_error",
    "error_status",
    "resolve_namespace",
]
