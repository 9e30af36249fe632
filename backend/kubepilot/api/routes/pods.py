from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from kubepilot.dependencies import get_kubernetes_service
from kubepilot.schemas.kubernetes import LogsRequest
from kubepilot.services.kube_client import KubernetesService


router = APIRouter(tags=["pods"])


@router.post("/logs", response_class=PlainTextResponse, summary="Fetch pod logs as plain text")
async def get_pod_logs(
    payload: LogsRequest,
    service: KubernetesService = Depends(get_kubernetes_service),
) -> PlainTextResponse:
    text = await service.get_pod_logs(
        payload.kubeconfig,
        payload.namespace,
        payload.pod,
        container=payload.container,
        tail_lines=payload.tail_lines,
        context=payload.context,
    )
    return PlainTextResponse(text, media_type="text/plain; charset=utf-8")
