"""Seed placement."""

from infra_manager.gardener.pipeline import Extender

SEED_REGION_LABEL = "seed.gardener.cloud/region"


class SeedSelectorExtender(Extender):
    """Pins the shoot to seeds in its own region when the Runtime asks for it."""

    def apply(self, runtime, shoot):
        if runtime.spec.shoot.enforceSeedLocation:
            shoot.spec.seedSelector = {
                "matchLabels": {SEED_REGION_LABEL: runtime.spec.shoot.region}
            }
        else:
            shoot.spec.seedSelector = None
