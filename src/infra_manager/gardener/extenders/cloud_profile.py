"""Cloud profile and exposure class selection by provider type."""

from infra_manager.gardener.pipeline import Extender

CLOUD_PROFILES = {
    "aws": "aws",
    "azure": "az",
    "gcp": "gcp",
    "openstack": "converged-cloud-kyma",
}

EXPOSURE_CLASSES = {
    "openstack": "converged-cloud-internet",
}


class CloudProfileExtender(Extender):
    def apply(self, runtime, shoot):
        provider_type = runtime.spec.shoot.provider.type
        if provider_type not in CLOUD_PROFILES:
            raise ValueError(f"unsupported provider type: {provider_type}")
        shoot.spec.cloudProfileName = CLOUD_PROFILES[provider_type]


class ExposureClassExtender(Extender):
    def apply(self, runtime, shoot):
        shoot.spec.exposureClassName = EXPOSURE_CLASSES.get(runtime.spec.shoot.provider.type)
