"""
Per-request Kubernetes client construction.

Every request carries its own kubeconfig, so clients are built for the
request, handed explicitly to whatever needs them and closed afterwards.
Nothing here is shared between requests.
"""

import functools
import os
import tempfile
from typing import Any, Optional

import yaml
from kubernetes import client, config
from kubernetes.config.config_exception import ConfigException
from kubernetes.dynamic import DynamicClient

from ...core.logging import get_logger
from ...exceptions import InvalidKubeconfigError


logger = get_logger(__name__)


def load_kubeconfig(kubeconfig: str) -> dict[str, Any]:
    """Parse kubeconfig text into the dict form the kubernetes loader accepts."""
    try:
        data = yaml.safe_load(kubeconfig)
    except yaml.YAMLError as exc:
        raise InvalidKubeconfigError(f"Invalid kubeconfig: {exc}") from exc
    if not isinstance(data, dict):
        raise InvalidKubeconfigError("Invalid kubeconfig: expected a YAML mapping")
    return data


def _default_request_timeout(api_client: client.ApiClient, timeout: float) -> None:
    """Apply ``timeout`` to every call of ``api_client`` that does not pass its own.

    API discovery in ``DynamicClient`` calls the REST client without
    ``_request_timeout``, and urllib3 then waits on the socket forever.
    """
    rest_client = api_client.rest_client
    send = rest_client.request

    @functools.wraps(send)
    def request(method, url, *args, **kwargs):
        if kwargs.get("_request_timeout") is None:
            kwargs["_request_timeout"] = timeout
        return send(method, url, *args, **kwargs)

    rest_client.request = request


class KubernetesSession:
    """Kubernetes API clients scoped to a single request.

    Use as a context manager::

        with KubernetesSession(kubeconfig, request_timeout=30) as session:
            session.core_v1.list_namespace(_request_timeout=session.request_timeout)

    Typed APIs and the dynamic client are created lazily and share one
    ``ApiClient``. The dynamic client's discovery cache lives in a private
    temporary directory removed on ``close``.
    """

    def __init__(
        self,
        kubeconfig: str,
        context: Optional[str] = None,
        request_timeout: Optional[float] = None,
    ) -> None:
        self._kubeconfig = kubeconfig
        self.context = context
        self.request_timeout = request_timeout
        self._api_client: Optional[client.ApiClient] = None
        self._core_v1: Optional[client.CoreV1Api] = None
        self._apps_v1: Optional[client.AppsV1Api] = None
        self._dynamic: Optional[DynamicClient] = None
        self._cache_dir: Optional[tempfile.TemporaryDirectory] = None

    def __enter__(self) -> "KubernetesSession":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def open(self) -> None:
        if self._api_client is not None:
            return
        config_dict = load_kubeconfig(self._kubeconfig)
        try:
            self._api_client = config.new_client_from_config_dict(
                config_dict,
                context=self.context,
                persist_config=False,
            )
        except ConfigException as exc:
            raise InvalidKubeconfigError(f"Invalid kubeconfig: {exc}") from exc
        if self.request_timeout:
            _default_request_timeout(self._api_client, self.request_timeout)
        # the text is only needed to build the client
        self._kubeconfig = ""
        logger.debug("kubernetes.session_opened", host=self._api_client.configuration.host, context=self.context)

    @property
    def api_client(self) -> client.ApiClient:
        if self._api_client is None:
            raise RuntimeError("KubernetesSession is not open")
        return self._api_client

    @property
    def core_v1(self) -> client.CoreV1Api:
        if self._core_v1 is None:
            self._core_v1 = client.CoreV1Api(self.api_client)
        return self._core_v1

    @property
    def apps_v1(self) -> client.AppsV1Api:
        if self._apps_v1 is None:
            self._apps_v1 = client.AppsV1Api(self.api_client)
        return self._apps_v1

    @property
    def dynamic(self) -> DynamicClient:
        """Dynamic client for arbitrary group/version/kind; runs API discovery on first use."""
        if self._dynamic is None:
            if self._cache_dir is None:
                self._cache_dir = tempfile.TemporaryDirectory(prefix="kubepilot-discovery-")
            cache_file = os.path.join(self._cache_dir.name, "discovery.json")
            self._dynamic = DynamicClient(self.api_client, cache_file=cache_file)
        return self._dynamic

    def close(self) -> None:
        if self._api_client is not None:
            try:
                self._api_client.close()
            except Exception as exc:  # pragma: no cover - pool teardown is best effort
                logger.debug("kubernetes.session_close_failed", error=str(exc))
        if self._cache_dir is not None:
            self._cache_dir.cleanup()
        self._api_client = None
        self._core_v1 = None
        self._apps_v1 = None
        self._dynamic = None
        self._cache_dir = None
