"""
Apply executor for manifest batches.

Each document gets one server-side apply; if that fails for any reason it
gets one plain create. There is no further retry, no backoff and no waiting
for the resource to become ready.
"""

import threading
from dataclasses import dataclass
from typing import Any, Optional

from ...core.logging import get_logger
from ...schemas.kubernetes import ApplyOutcome
from .client_factory import KubernetesSession
from .manifests import DocumentError, ManifestDocument, parse_manifests
from .ordering import order_documents
from .report import ReportBuilder
from .utils import DEFAULT_NAMESPACE, describe_error, resolve_namespace


logger = get_logger(__name__)


class ApplyCancelled(Exception):
    """The batch was cancelled; documents not yet attempted were skipped."""

    def __init__(self, attempted: int, total: int) -> None:
        super().__init__(f"apply cancelled after {attempted} of {total} documents")
        self.attempted = attempted
        self.total = total


@dataclass(frozen=True)
class ApplyAttempt:
    """Two-step result for one document.

    ``verb`` names the step that succeeded. When both steps failed it is
    None and both causes are kept.
    """

    document: ManifestDocument
    verb: Optional[str] = None
    apply_error: Optional[str] = None
    create_error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.verb is not None

    def to_outcome(self) -> ApplyOutcome:
        if self.succeeded:
            return ApplyOutcome(
                kind=self.document.kind,
                name=self.document.name,
                namespace=self.document.namespace,
                verb=self.verb,  # type: ignore[arg-type]
                status="success",
            )
        return ApplyOutcome(
            kind=self.document.kind,
            name=self.document.name,
            namespace=self.document.namespace,
            verb="create",
            status="error",
            detail=self.create_error,
            apply_error=self.apply_error,
        )


class ApplyExecutor:
    """Applies single documents through the session's dynamic client."""

    def __init__(
        self,
        session: KubernetesSession,
        field_manager: str,
        force_conflicts: bool = False,
        default_namespace: str = DEFAULT_NAMESPACE,
    ) -> None:
        self._session = session
        self._field_manager = field_manager
        self._force_conflicts = force_conflicts
        self._default_namespace = default_namespace

    def apply(self, document: ManifestDocument) -> ApplyOutcome:
        return self.attempt(document).to_outcome()

    def attempt(self, document: ManifestDocument) -> ApplyAttempt:
        try:
            self._server_side_apply(document)
            return ApplyAttempt(document=document, verb="apply")
        except Exception as apply_exc:
            apply_error = describe_error(apply_exc)
            logger.info(
                "kubernetes.apply_fallback_to_create",
                kind=document.kind,
                name=document.name,
                error=apply_error,
            )

        try:
            self._create(document)
        except Exception as create_exc:
            return ApplyAttempt(
                document=document,
                apply_error=apply_error,
                create_error=describe_error(create_exc),
            )
        return ApplyAttempt(document=document, verb="create", apply_error=apply_error)

    def _resource(self, document: ManifestDocument) -> Any:
        return self._session.dynamic.resources.get(api_version=document.api_version, kind=document.kind)

    def _namespace_for(self, resource: Any, document: ManifestDocument) -> Optional[str]:
        if not getattr(resource, "namespaced", False):
            return None
        return resolve_namespace(document.namespace, self._default_namespace)

    def _server_side_apply(self, document: ManifestDocument) -> None:
        resource = self._resource(document)
        self._session.dynamic.server_side_apply(
            resource,
            body=document.body,
            name=document.name,
            namespace=self._namespace_for(resource, document),
            field_manager=self._field_manager,
            force_conflicts=self._force_conflicts or None,
            _request_timeout=self._session.request_timeout,
        )

    def _create(self, document: ManifestDocument) -> None:
        resource = self._resource(document)
        self._session.dynamic.create(
            resource,
            body=document.body,
            namespace=self._namespace_for(resource, document),
            field_manager=self._field_manager,
            _request_timeout=self._session.request_timeout,
        )


def apply_manifest_batch(
    manifest: str,
    executor: ApplyExecutor,
    cancel_event: Optional[threading.Event] = None,
) -> list[ApplyOutcome]:
    """
    Parse, order and apply a multi-document manifest.

    Documents run one after another in dependency order. Rejected documents
    never reach the executor. The report lists one outcome per non-blank
    document in input order and is only returned once every document was
    attempted.

    Raises:
        ManifestParseError: the payload is not well-formed YAML.
        ApplyCancelled: ``cancel_event`` was set before the batch finished.
    """
    parsed = parse_manifests(manifest)
    report = ReportBuilder(len(parsed))

    documents: list[ManifestDocument] = []
    for item in parsed:
        if isinstance(item, DocumentError):
            report.record_rejection(item)
        else:
            documents.append(item)

    for attempted, document in enumerate(order_documents(documents)):
        if cancel_event is not None and cancel_event.is_set():
            raise ApplyCancelled(attempted, len(documents))
        outcome = executor.apply(document)
        logger.info(
            "kubernetes.apply_document",
            kind=document.kind,
            name=document.name,
            namespace=document.namespace,
            verb=outcome.verb,
            status=outcome.status,
        )
        report.record(document.index, outcome)

    return report.build()
