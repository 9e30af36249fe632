from functools import lru_cache

from kubepilot.config import get_settings
from kubepilot.services.kube_client import KubernetesService


@lru_cache(maxsize=1)
def _get_kubernetes_service() -> KubernetesService:
    return KubernetesService(get_settings())


def get_kubernetes_service() -> KubernetesService:
    return _get_kubernetes_service()
