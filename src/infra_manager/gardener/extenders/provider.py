"""Provider section of the shoot: workers and provider specific configs."""

import copy

from infra_manager.gardener.pipeline import Extender
from infra_manager.models.shoot import (
    ShootMachine,
    ShootMachineImage,
    ShootProvider,
    ShootVolume,
    ShootWorker,
)

PROVIDER_API_VERSIONS = {
    "aws": "aws.provider.extensions.gardener.cloud/v1alpha1",
    "azure": "azure.provider.extensions.gardener.cloud/v1alpha1",
    "gcp": "gcp.provider.extensions.gardener.cloud/v1alpha1",
    "openstack": "openstack.provider.extensions.gardener.cloud/v1alpha1",
}

OPENSTACK_FLOATING_POOL = "FloatingIP-external-kyma-01"
OPENSTACK_LOAD_BALANCER = "f5"


def _api_version(provider_type):
    if provider_type not in PROVIDER_API_VERSIONS:
        raise ValueError(f"unsupported provider type: {provider_type}")
    return PROVIDER_API_VERSIONS[provider_type]


def infrastructure_config(provider_type, nodes_cidr, zones):
    config = {
        "apiVersion": _api_version(provider_type),
        "kind": "InfrastructureConfig",
    }
    if provider_type == "aws":
        config["networks"] = {
            "vpc": {"cidr": nodes_cidr},
            "zones": [{"name": zone} for zone in zones],
        }
    elif provider_type == "azure":
        config["networks"] = {"vnet": {"cidr": nodes_cidr}, "workers": nodes_cidr}
        config["zoned"] = True
    elif provider_type == "openstack":
        config["floatingPoolName"] = OPENSTACK_FLOATING_POOL
        config["networks"] = {"workers": nodes_cidr}
    else:
        config["networks"] = {"workers": nodes_cidr}
    return config


def control_plane_config(provider_type, zones):
    config = {
        "apiVersion": _api_version(provider_type),
        "kind": "ControlPlaneConfig",
    }
    if provider_type == "gcp" and zones:
        config["zone"] = zones[0]
    elif provider_type == "openstack":
        config["loadBalancerProvider"] = OPENSTACK_LOAD_BALANCER
    return config


def _imdsv2_worker_config():
    return {
        "apiVersion": PROVIDER_API_VERSIONS["aws"],
        "kind": "WorkerConfig",
        "instanceMetadataOptions": {
            "httpTokens": "required",
            "httpPutResponseHopLimit": 2,
        },
    }


def _zones(workers):
    zones = []
    for worker in workers:
        for zone in worker.zones:
            if zone not in zones:
                zones.append(zone)
    return zones


class ProviderExtender(Extender):
    """Builds the shoot provider from the Runtime worker pools.

    Machine images fall back to the image a worker already runs on the shoot
    (patch only), then to the configured default. Infrastructure and control
    plane configs already present on the shoot are kept as they are.
    """

    def __init__(
        self,
        enable_imdsv2,
        default_image_name,
        default_image_version,
        current_workers=None,
        current_infrastructure_config=None,
        current_control_plane_config=None,
    ):
        self.enable_imdsv2 = enable_imdsv2
        self.default_image_name = default_image_name
        self.default_image_version = default_image_version
        self.current_workers = list(current_workers or [])
        self.current_infrastructure_config = current_infrastructure_config
        self.current_control_plane_config = current_control_plane_config

    @classmethod
    def for_create(cls, enable_imdsv2, default_image_name, default_image_version):
        return cls(enable_imdsv2, default_image_name, default_image_version)

    @classmethod
    def for_patch(
        cls,
        enable_imdsv2,
        default_image_name,
        default_image_version,
        current_workers,
        current_infrastructure_config,
        current_control_plane_config,
    ):
        return cls(
            enable_imdsv2,
            default_image_name,
            default_image_version,
            current_workers=current_workers,
            current_infrastructure_config=current_infrastructure_config,
            current_control_plane_config=current_control_plane_config,
        )

    def _fallback_image(self, worker_name):
        for worker in self.current_workers:
            image = worker.machine.image
            if worker.name == worker_name and image and image.name:
                return image.name, image.version
        for worker in self.current_workers:
            image = worker.machine.image
            if image and image.name:
                return image.name, image.version
        return self.default_image_name, self.default_image_version

    def _image_for(self, worker):
        fallback_name, fallback_version = self._fallback_image(worker.name)
        image = worker.machine.image
        if image is None or not image.name:
            return fallback_name, fallback_version
        if image.version:
            return image.name, image.version
        if image.name == fallback_name:
            return image.name, fallback_version
        return image.name, None

    def _to_shoot_worker(self, provider_type, worker):
        image_name, image_version = self._image_for(worker)

        # Fields the Runtime model does not know about (labels, taints, ...) pass through as is.
        fields = copy.deepcopy(worker.model_extra or {})
        fields.update(
            name=worker.name,
            machine=ShootMachine(
                type=worker.machine.type,
                image=ShootMachineImage(name=image_name or None, version=image_version or None),
            ),
            minimum=worker.minimum,
            maximum=worker.maximum,
            maxSurge=worker.maxSurge,
            maxUnavailable=worker.maxUnavailable,
            zones=list(worker.zones),
        )
        shoot_worker = ShootWorker.model_validate(fields)
        if worker.volume is not None:
            shoot_worker.volume = ShootVolume(type=worker.volume.type, size=worker.volume.size)
        if provider_type == "aws" and self.enable_imdsv2:
            shoot_worker.providerConfig = _imdsv2_worker_config()
        return shoot_worker

    def apply(self, runtime, shoot):
        provider = runtime.spec.shoot.provider
        runtime_workers = list(provider.workers) + list(provider.additionalWorkers or [])
        if not runtime_workers:
            raise ValueError("runtime defines no worker pools")

        workers = [self._to_shoot_worker(provider.type, w) for w in runtime_workers]
        zones = _zones(self.current_workers)
        for zone in _zones(runtime_workers):
            if zone not in zones:
                zones.append(zone)

        nodes_cidr = runtime.spec.shoot.networking.nodes
        infra_config = copy.deepcopy(self.current_infrastructure_config) or infrastructure_config(
            provider.type, nodes_cidr, zones
        )
        cp_config = copy.deepcopy(self.current_control_plane_config) or control_plane_config(
            provider.type, zones
        )

        shoot.spec.provider = ShootProvider(
            type=provider.type,
            workers=workers,
            infrastructureConfig=infra_config,
            controlPlaneConfig=cp_config,
        )
