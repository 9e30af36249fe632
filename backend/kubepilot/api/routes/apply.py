import asyncio
import contextlib
import threading

import structlog
from fastapi import APIRouter, Depends, Request

from kubepilot.dependencies import get_kubernetes_service
from kubepilot.schemas.kubernetes import ApplyRequest, ApplyResponse
from kubepilot.services.kube_client import KubernetesService


router = APIRouter(tags=["apply"])

logger = structlog.get_logger(__name__)


async def cancel_on_disconnect(request: Request, cancel_event: threading.Event) -> None:
    """Set ``cancel_event`` once the client closes the connection.

    The body has already been read, so the next ASGI message is
    ``http.disconnect``; uvicorn does not cancel the handler by itself.
    """
    while True:
        message = await request.receive()
        if message["type"] == "http.disconnect":
            cancel_event.set()
            logger.info("http.client_disconnected", path=request.url.path)
            return


@router.post(
    "/apply",
    response_model=ApplyResponse,
    response_model_exclude_none=True,
    summary="Apply multi-document YAML (server-side apply, create fallback)",
)
async def apply_manifest(
    payload: ApplyRequest,
    request: Request,
    service: KubernetesService = Depends(get_kubernetes_service),
) -> ApplyResponse:
    cancel_event = threading.Event()
    watcher = asyncio.create_task(cancel_on_disconnect(request, cancel_event))
    try:
        result = await service.apply_manifests(
            payload.kubeconfig, payload.manifest, payload.context, cancel_event=cancel_event
        )
    finally:
        watcher.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await watcher
    return ApplyResponse(result=result)
