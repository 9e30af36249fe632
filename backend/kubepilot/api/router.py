from fastapi import APIRouter

from kubepilot.api.routes import apply, deployments, pods, resources

# kubeconfig travels in every request body, so there is no session or auth layer
api_router = APIRouter(prefix="/api")
api_router.include_router(apply.router)
api_router.include_router(resources.router)
api_router.include_router(deployments.router)
api_router.include_router(pods.router)
