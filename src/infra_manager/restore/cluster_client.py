"""Access to the managed clusters behind runtimes."""

import base64
import logging

import kubernetes
import yaml

from infra_manager.config import DEFAULT_API_TIMEOUT, DEFAULT_FIELD_MANAGER

logger = logging.getLogger(__name__)

KUBECONFIG_NAMESPACE = "kcp-system"
KUBECONFIG_SECRET_KEY = "config"

OIDC_GROUP = "authentication.gardener.cloud"
OIDC_VERSION = "v1alpha1"
OIDC_PLURAL = "openidconnects"


class AuxiliaryObjectClient:
    """Replaces cluster-scoped objects inside one managed cluster."""

    def __init__(self, api_client, field_manager=DEFAULT_FIELD_MANAGER, timeout=DEFAULT_API_TIMEOUT):
        self.rbac_api = kubernetes.client.RbacAuthorizationV1Api(api_client)
        self.custom_api = kubernetes.client.CustomObjectsApi(api_client)
        self.field_manager = field_manager
        self.timeout = timeout

    def update_cluster_role_binding(self, crb):
        name = crb["metadata"]["name"]
        self.rbac_api.replace_cluster_role_binding(
            name, crb, field_manager=self.field_manager, _request_timeout=self.timeout
        )
        logger.debug(f"Updated ClusterRoleBinding {name}")

    def update_oidc(self, oidc):
        name = oidc["metadata"]["name"]
        self.custom_api.replace_cluster_custom_object(
            OIDC_GROUP,
            OIDC_VERSION,
            OIDC_PLURAL,
            name,
            oidc,
            field_manager=self.field_manager,
            _request_timeout=self.timeout,
        )
        logger.debug(f"Updated OpenIDConnect {name}")


class ClusterClientAccessor:
    """Builds clients for managed clusters from kubeconfig secrets in the control plane."""

    def __init__(self, kcp_api_client=None, field_manager=DEFAULT_FIELD_MANAGER, timeout=DEFAULT_API_TIMEOUT):
        self.core_api = kubernetes.client.CoreV1Api(kcp_api_client)
        self.field_manager = field_manager
        self.timeout = timeout

    def get_client(self, runtime_id):
        secret = self.core_api.read_namespaced_secret(
            f"kubeconfig-{runtime_id}", KUBECONFIG_NAMESPACE, _request_timeout=self.timeout
        )
        data = (secret.data or {}).get(KUBECONFIG_SECRET_KEY)
        if not data:
            raise ValueError(f"kubeconfig secret for runtime {runtime_id} has no {KUBECONFIG_SECRET_KEY} key")

        kubeconfig = yaml.safe_load(base64.b64decode(data))
        api_client = kubernetes.config.new_client_from_config_dict(kubeconfig)
        return AuxiliaryObjectClient(api_client, self.field_manager, self.timeout)
