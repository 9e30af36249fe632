from fastapi import APIRouter, Depends

from kubepilot.dependencies import get_kubernetes_service
from kubepilot.schemas.kubernetes import ScaleRequest, ScaleResponse
from kubepilot.services.kube_client import KubernetesService


router = APIRouter(tags=["deployments"])


@router.post("/scale", response_model=ScaleResponse, summary="Scale a Deployment")
async def scale_deployment(
    payload: ScaleRequest,
    service: KubernetesService = Depends(get_kubernetes_service),
) -> ScaleResponse:
    replicas = await service.scale_deployment(
        payload.kubeconfig, payload.namespace, payload.name, payload.replicas, payload.context
    )
    return ScaleResponse(replicas=replicas)
