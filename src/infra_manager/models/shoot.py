"""Gardener Shoot models.

The shoot is the provisioning object infra-manager derives from a Runtime.
Fields set by the API server but unknown here are kept as extras so that a
shoot read from the cluster can be sent back without loss.
"""

from pydantic import Field
from typing import List, Optional, Dict, Any

from infra_manager.crd.registry import CRDRegistry
from infra_manager.crd.base import CRDSpec, CRDMetadata, to_plain

SHOOT_API_VERSION = "core.gardener.cloud/v1beta1"
SHOOT_KIND = "Shoot"


class ShootMachineImage(CRDSpec):
    name: Optional[str] = None
    version: Optional[str] = None


class ShootMachine(CRDSpec):
    type: str
    image: Optional[ShootMachineImage] = None


class ShootVolume(CRDSpec):
    type: Optional[str] = None
    size: Optional[str] = None


class ShootWorker(CRDSpec):
    """Worker pool as stored on the shoot."""

    name: str
    machine: ShootMachine
    minimum: int
    maximum: int
    maxSurge: Optional[Any] = None
    maxUnavailable: Optional[Any] = None
    zones: List[str] = Field(default_factory=list)
    volume: Optional[ShootVolume] = None
    providerConfig: Optional[Dict[str, Any]] = None


class ShootProvider(CRDSpec):
    type: str
    workers: List[ShootWorker] = Field(default_factory=list)
    infrastructureConfig: Optional[Dict[str, Any]] = None
    controlPlaneConfig: Optional[Dict[str, Any]] = None


class ShootNetworking(CRDSpec):
    type: Optional[str] = None
    nodes: Optional[str] = None
    pods: Optional[str] = None
    services: Optional[str] = None


class KubeAPIServerConfig(CRDSpec):
    oidcConfig: Optional[Dict[str, Any]] = None
    auditConfig: Optional[Dict[str, Any]] = None


class ShootKubernetes(CRDSpec):
    version: Optional[str] = None
    kubeAPIServer: Optional[KubeAPIServerConfig] = None


class Extension(CRDSpec):
    type: str
    disabled: Optional[bool] = None
    providerConfig: Optional[Dict[str, Any]] = None


class NamedResourceReference(CRDSpec):
    name: str
    resourceRef: Dict[str, Any]


class ShootSpecBody(CRDSpec):
    purpose: Optional[str] = None
    region: Optional[str] = None
    secretBindingName: Optional[str] = None
    networking: Optional[ShootNetworking] = None
    controlPlane: Optional[Dict[str, Any]] = None
    provider: Optional[ShootProvider] = None
    kubernetes: ShootKubernetes = Field(default_factory=ShootKubernetes)
    extensions: List[Extension] = Field(default_factory=list)
    resources: List[NamedResourceReference] = Field(default_factory=list)
    seedSelector: Optional[Dict[str, Any]] = None
    cloudProfileName: Optional[str] = None
    exposureClassName: Optional[str] = None
    maintenance: Optional[Dict[str, Any]] = None
    dns: Optional[Dict[str, Any]] = None
    tolerations: Optional[List[Dict[str, Any]]] = None


@CRDRegistry.register("core.gardener.cloud", "v1beta1", "Shoot", "shoots")
class Shoot(CRDSpec):
    """Gardener Shoot resource."""

    apiVersion: str = SHOOT_API_VERSION
    kind: str = SHOOT_KIND
    metadata: CRDMetadata
    spec: ShootSpecBody = Field(default_factory=ShootSpecBody)

    @classmethod
    def from_manifest(cls, manifest):
        """Parse a shoot from an API response or a YAML document."""
        data = to_plain(manifest)
        data.pop("status", None)
        return cls.model_validate(data)

    def to_manifest(self):
        return self.model_dump(mode="json", exclude_none=True)

    @property
    def name(self):
        return self.metadata.name

    @property
    def namespace(self):
        return self.metadata.namespace

    @property
    def generation(self):
        return self.metadata.generation

    def is_being_deleted(self):
        return self.metadata.deletionTimestamp is not None

    def ensure_kube_apiserver(self):
        if self.spec.kubernetes.kubeAPIServer is None:
            self.spec.kubernetes.kubeAPIServer = KubeAPIServerConfig()
        return self.spec.kubernetes.kubeAPIServer


def _worker_signature(worker):
    image = worker.machine.image
    volume = worker.volume
    return (
        worker.name,
        worker.machine.type,
        image.name if image else None,
        image.version if image else None,
        worker.minimum,
        worker.maximum,
        worker.maxSurge,
        worker.maxUnavailable,
        tuple(worker.zones),
        (volume.type, volume.size) if volume else None,
        worker.providerConfig,
    )


def workers_are_equal(workers, other):
    """Compare two worker collections element by element.

    Only the fields infra-manager sets take part in the comparison, so values
    defaulted by the API server (e.g. CRI settings) never register as a
    difference.
    """
    if len(workers) != len(other):
        return False
    return all(
        _worker_signature(a) == _worker_signature(b) for a, b in zip(workers, other)
    )
