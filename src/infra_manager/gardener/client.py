"""Kubernetes API access for shoots and runtimes."""

import logging

import kubernetes

from infra_manager.config import DEFAULT_API_TIMEOUT, DEFAULT_FIELD_MANAGER
from infra_manager.crd.registry import api_coordinates
from infra_manager.models.runtime import Runtime
from infra_manager.models.shoot import Shoot

logger = logging.getLogger(__name__)

APPLY_PATCH_CONTENT_TYPE = "application/apply-patch+yaml"
MERGE_PATCH_CONTENT_TYPE = "application/merge-patch+json"


class ShootClient:
    """Reads and writes Gardener shoots in one project namespace.

    Every call is bounded by ``timeout`` seconds; API failures surface as
    ``kubernetes.client.exceptions.ApiException``.
    """

    def __init__(
        self,
        namespace,
        api_client=None,
        field_manager=DEFAULT_FIELD_MANAGER,
        timeout=DEFAULT_API_TIMEOUT,
    ):
        self.namespace = namespace
        self.api = kubernetes.client.CustomObjectsApi(api_client)
        self.field_manager = field_manager
        self.timeout = timeout
        self.group, self.version, self.plural = api_coordinates(Shoot)

    def get(self, name):
        obj = self.api.get_namespaced_custom_object(
            self.group,
            self.version,
            self.namespace,
            self.plural,
            name,
            _request_timeout=self.timeout,
        )
        return Shoot.from_manifest(obj)

    def list(self):
        result = self.api.list_namespaced_custom_object(
            self.group,
            self.version,
            self.namespace,
            self.plural,
            _request_timeout=self.timeout,
        )
        return [Shoot.from_manifest(item) for item in result.get("items", [])]

    def create(self, shoot):
        """Create a new shoot; later applies leave its create-only fields alone."""
        manifest = shoot.to_manifest()
        manifest["metadata"].pop("resourceVersion", None)
        manifest["metadata"].pop("generation", None)

        obj = self.api.create_namespaced_custom_object(
            self.group,
            self.version,
            shoot.namespace,
            self.plural,
            manifest,
            field_manager=self.field_manager,
            _request_timeout=self.timeout,
        )
        logger.debug(f"Created shoot {shoot.namespace}/{shoot.name}")
        return Shoot.from_manifest(obj)

    def update(self, shoot):
        """Replace the whole shoot; collections are taken exactly as given."""
        obj = self.api.replace_namespaced_custom_object(
            self.group,
            self.version,
            shoot.namespace,
            self.plural,
            shoot.name,
            shoot.to_manifest(),
            field_manager=self.field_manager,
            _request_timeout=self.timeout,
        )
        logger.debug(f"Updated shoot {shoot.namespace}/{shoot.name}")
        return Shoot.from_manifest(obj)

    def apply(self, shoot):
        """Server-side apply with forced field ownership."""
        manifest = shoot.to_manifest()
        manifest["metadata"].pop("resourceVersion", None)
        manifest["metadata"].pop("generation", None)

        obj = self.api.patch_namespaced_custom_object(
            self.group,
            self.version,
            shoot.namespace,
            self.plural,
            shoot.name,
            manifest,
            field_manager=self.field_manager,
            force=True,
            _content_type=APPLY_PATCH_CONTENT_TYPE,
            _request_timeout=self.timeout,
        )
        logger.debug(f"Applied shoot {shoot.namespace}/{shoot.name}")
        return Shoot.from_manifest(obj)


class RuntimeClient:
    """Writes back to Runtime objects in the control plane."""

    def __init__(self, api_client=None, timeout=DEFAULT_API_TIMEOUT):
        self.api = kubernetes.client.CustomObjectsApi(api_client)
        self.timeout = timeout
        self.group, self.version, self.plural = api_coordinates(Runtime)

    def remove_annotation(self, runtime, key):
        """Drop an annotation from the stored Runtime and from ``runtime``."""
        self.api.patch_namespaced_custom_object(
            self.group,
            self.version,
            runtime.metadata.namespace,
            self.plural,
            runtime.name,
            {"metadata": {"annotations": {key: None}}},
            _content_type=MERGE_PATCH_CONTENT_TYPE,
            _request_timeout=self.timeout,
        )
        annotations = dict(runtime.metadata.annotations)
        annotations.pop(key, None)
        runtime.metadata.annotations = annotations

