import logging

from kubernetes import config, client
from openshift.dynamic import DynamicClient
from typing_extensions import Protocol

from exc import ProviderError
from models import Namespace

LOG = logging.getLogger(__name__)


class Provider(Protocol):
    def get_namespace(self, name: str) -> Namespace: ...


class KubernetesProvider(Provider):
    def __init__(self, kubeconfig: str | None = None):
        """Allocate a Kubernetes dynamic client and Namespace API client"""

        super().__init__()

        try:
            if kubeconfig:
                config.load_config(config_file=kubeconfig)
            else:
                config.load_config()
        except config.ConfigException as err:
            LOG.warning("unable to configure Kubernetes client: %s", err)
            raise ProviderError("unable to configure Kubernetes client")

        k8s_client = client.ApiClient()
        dyn_client = DynamicClient(k8s_client)

        self._client = dyn_client
        self._namespace_resource = dyn_client.resources.get(
            api_version="v1", kind="Namespace"
        )

    def get_namespace(self, name):
        namespace_obj = self._namespace_resource.get(name=name)
        return Namespace.model_validate(namespace_obj.to_dict())
