"""
Kubelet and Kubernetes API client.

The pod list comes from the local kubelet's `/pods` endpoint, which only
lists pods scheduled on this node. Node metadata comes from the Kubernetes
API. Inside a cluster both use the pod's service account credentials.
"""

import logging
import threading
from typing import Any, Dict, List, Optional

import requests
from kubernetes import client as k8s_client
from kubernetes import config as k8s_config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException

from ..errors import KubeletError
from ..models.config import KubeletConfig
from ..models.pods import PodInfo

logger = logging.getLogger(__name__)

POD_LIST_API_ENDPOINT = "/pods"


class KubeletClient:
    """
    HTTP client for the kubelet API plus a Kubernetes API client for nodes.

    `requests.Session` is not documented as thread-safe, so every thread that
    lists pods gets its own session. An injected session is shared as is.
    """

    def __init__(
        self,
        config: KubeletConfig,
        session: Optional[requests.Session] = None,
        core_api: Optional[k8s_client.CoreV1Api] = None,
        api_configuration: Optional[k8s_client.Configuration] = None,
        verify: Any = True,
    ):
        self.config = config
        # Passed to every session: a bool or a CA bundle path.
        self.verify = verify
        self._session = session
        self._local = threading.local()
        self.core_api = core_api
        self.api_configuration = api_configuration

    @property
    def session(self) -> requests.Session:
        """The injected session, else this thread's own session."""
        if self._session is not None:
            return self._session
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            session.verify = self.verify
            self._local.session = session
        return session

    @classmethod
    def from_config(cls, config: KubeletConfig) -> "KubeletClient":
        """
        Build a client from the in-cluster service account.

        Outside a cluster the kubelet is queried without credentials and node
        lookups are unavailable.
        """
        try:
            k8s_config.load_incluster_config()
        except ConfigException:
            logger.info("Not running in a cluster, querying the kubelet without credentials")
            return cls(config, verify=not config.insecure_skip_verify)

        configuration = k8s_client.Configuration.get_default_copy()
        verify = False if config.insecure_skip_verify else (configuration.ssl_ca_cert or True)
        core_api = k8s_client.CoreV1Api(k8s_client.ApiClient(configuration))
        return cls(config, core_api=core_api, api_configuration=configuration, verify=verify)

    def pod_list_endpoint(self) -> str:
        """Return the kubelet pod list URL, preferring the node name as host."""
        host = self.config.node_name or self.config.api_host
        return f"https://{host}:{self.config.api_port}{POD_LIST_API_ENDPOINT}"

    def _auth_headers(self) -> Dict[str, str]:
        if self.api_configuration is None:
            return {}
        # Re-read on every call so rotated service account tokens are picked up.
        token = self.api_configuration.get_api_key_with_prefix("authorization")
        return {"Authorization": token} if token else {}

    def get_pod_list(self) -> List[PodInfo]:
        """
        Return the pods the kubelet is managing.

        Raises:
            KubeletError: If the request fails or the response is not a pod list.
        """
        endpoint = self.pod_list_endpoint()
        logger.debug(f"Requesting the kubelet pod list from {endpoint}")
        try:
            response = self.session.get(
                endpoint, headers=self._auth_headers(), timeout=self.config.timeout
            )
        except requests.RequestException as e:
            raise KubeletError(f"kubelet request to {endpoint} failed: {e}") from e

        if response.status_code != 200:
            logger.error(f"Kubelet pod list request failed with HTTP {response.status_code}")
            raise KubeletError(f"get pod list failed: HTTP {response.status_code}")

        try:
            payload: Dict[str, Any] = response.json()
        except ValueError as e:
            raise KubeletError(f"invalid pod list JSON from {endpoint}: {e}") from e

        if not isinstance(payload, dict):
            raise KubeletError(f"unexpected pod list payload from {endpoint}")
        return [PodInfo.from_dict(item) for item in payload.get("items") or []]

    def get_node_labels(self) -> Dict[str, str]:
        """
        Return the labels of this exporter's node.

        Raises:
            KubeletError: If the node name is unknown or the lookup fails.
        """
        if not self.config.node_name:
            raise KubeletError("node name is not configured")
        if self.core_api is None:
            raise KubeletError("Kubernetes API is not available outside a cluster")
        try:
            node = self.core_api.read_node(self.config.node_name)
        except ApiException as e:
            raise KubeletError(f"get node {self.config.node_name} failed: {e.status} {e.reason}") from e
        return dict(node.metadata.labels or {})
