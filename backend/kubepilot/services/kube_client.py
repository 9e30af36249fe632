from __future__ import annotations

import asyncio
import threading
from collections.abc import Callable
from typing import Any, TypeVar

import structlog

from kubepilot.config import Settings, get_settings
from kubepilot.exceptions import (
    AppException,
    ApplyCancelledError,
    ApplyTimeoutError,
    ClusterOperationError,
)
from kubepilot.schemas.kubernetes import ApplyOutcome
from kubepilot.services.k8s import (
    ApplyCancelled,
    ApplyExecutor,
    KubernetesSession,
    apply_manifest_batch,
    delete_resource,
    describe_error,
    error_status,
    get_pod_logs,
    list_resources,
    scale_deployment,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T")

SessionFactory = Callable[..., KubernetesSession]


class KubernetesService:
    """Async facade over the blocking Kubernetes Python client.

    Holds configuration only. Every call opens a ``KubernetesSession`` from
    the kubeconfig it was given, runs in a worker thread and closes the
    session before returning.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        session_factory: SessionFactory | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._session_factory: SessionFactory = session_factory or KubernetesSession

    def _open_session(self, kubeconfig: str, context: str | None) -> KubernetesSession:
        return self._session_factory(
            kubeconfig,
            context=context,
            request_timeout=self.settings.request_timeout_seconds,
        )

    async def apply_manifests(
        self,
        kubeconfig: str,
        manifest: str,
        context: str | None = None,
        cancel_event: threading.Event | None = None,
    ) -> list[ApplyOutcome]:
        """Apply every document of ``manifest``; per-document failures end up in the report.

        Setting ``cancel_event`` from outside (client disconnect) stops the
        batch before the next document and raises ``ApplyCancelledError``.
        """
        if len(manifest.encode("utf-8")) > self.settings.max_manifest_bytes:
            raise AppException(
                f"Manifest exceeds {self.settings.max_manifest_bytes} bytes",
                status_code=413,
                code="MANIFEST_TOO_LARGE",
            )

        if cancel_event is None:
            cancel_event = threading.Event()

        def _apply() -> list[ApplyOutcome]:
            with self._open_session(kubeconfig, context) as session:
                executor = ApplyExecutor(
                    session,
                    field_manager=self.settings.field_manager,
                    force_conflicts=self.settings.force_conflicts,
                    default_namespace=self.settings.default_namespace,
                )
                return apply_manifest_batch(manifest, executor, cancel_event)

        try:
            report = await asyncio.wait_for(
                asyncio.to_thread(_apply),
                timeout=self.settings.apply_timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            cancel_event.set()
            logger.warning("kubernetes.apply_timeout", timeout=self.settings.apply_timeout_seconds)
            raise ApplyTimeoutError(
                f"Apply did not finish within {self.settings.apply_timeout_seconds:g}s; "
                "remaining documents were not attempted"
            ) from exc
        except ApplyCancelled as exc:
            logger.info("kubernetes.apply_cancelled", attempted=exc.attempted, total=exc.total)
            raise ApplyCancelledError(
                f"Apply cancelled after {exc.attempted} of {exc.total} documents",
                details={"attempted": exc.attempted, "total": exc.total},
            ) from exc
        except asyncio.CancelledError:
            # handler task cancelled (server shutdown): stop before the next document
            cancel_event.set()
            logger.info("kubernetes.apply_cancelled", reason="task_cancelled")
            raise

        failed = sum(1 for outcome in report if outcome.status == "error")
        logger.info("kubernetes.apply_finished", documents=len(report), failed=failed)
        return report

    async def list_resources(
        self,
        kubeconfig: str,
        resource_type: str,
        namespace: str | None = None,
        context: str | None = None,
    ) -> list[dict[str, Any]]:
        return await self._run_single(
            "list",
            kubeconfig,
            context,
            lambda session: list_resources(
                session, resource_type, namespace, default_namespace=self.settings.default_namespace
            ),
        )

    async def scale_deployment(
        self,
        kubeconfig: str,
        namespace: str,
        name: str,
        replicas: int,
        context: str | None = None,
    ) -> int | None:
        """Scale deployment through its scale subresource."""
        return await self._run_single(
            "scale_deployment",
            kubeconfig,
            context,
            lambda session: scale_deployment(session, namespace, name, replicas),
        )

    async def delete_resource(
        self,
        kubeconfig: str,
        kind: str,
        name: str,
        namespace: str | None = None,
        context: str | None = None,
    ) -> None:
        await self._run_single(
            "delete",
            kubeconfig,
            context,
            lambda session: delete_resource(
                session, kind, name, namespace, default_namespace=self.settings.default_namespace
            ),
        )

    async def get_pod_logs(
        self,
        kubeconfig: str,
        namespace: str,
        pod: str,
        container: str | None = None,
        tail_lines: int | None = None,
        context: str | None = None,
    ) -> str:
        return await self._run_single(
            "pod_logs",
            kubeconfig,
            context,
            lambda session: get_pod_logs(session, namespace, pod, container, tail_lines),
        )

    async def _run_single(
        self,
        operation: str,
        kubeconfig: str,
        context: str | None,
        call: Callable[[KubernetesSession], T],
    ) -> T:
        def _do() -> T:
            with self._open_session(kubeconfig, context) as session:
                return call(session)

        try:
            return await asyncio.to_thread(_do)
        except AppException:
            raise
        except Exception as exc:
            message = describe_error(exc)
            status = error_status(exc)
            logger.warning(f"kubernetes.{operation}_error", error=message, status=status)
            raise ClusterOperationError(
                message,
                details={"status": status} if status is not None else None,
            ) from exc
