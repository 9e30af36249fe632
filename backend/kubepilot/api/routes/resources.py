from fastapi import APIRouter, Depends

from kubepilot.dependencies import get_kubernetes_service
from kubepilot.schemas.kubernetes import DeleteRequest, DeleteResponse, ListRequest, ListResponse
from kubepilot.services.kube_client import KubernetesService


router = APIRouter(tags=["resources"])


@router.post("/list", response_model=ListResponse, summary="List resources of one type")
async def list_resources(
    payload: ListRequest,
    service: KubernetesService = Depends(get_kubernetes_service),
) -> ListResponse:
    data = await service.list_resources(payload.kubeconfig, payload.type, payload.namespace, payload.context)
    return ListResponse(data=data)


@router.post("/delete", response_model=DeleteResponse, summary="Delete a resource")
async def delete_resource(
    payload: DeleteRequest,
    service: KubernetesService = Depends(get_kubernetes_service),
) -> DeleteResponse:
    await service.delete_resource(payload.kubeconfig, payload.kind, payload.name, payload.namespace, payload.context)
    return DeleteResponse(deleted=True)
