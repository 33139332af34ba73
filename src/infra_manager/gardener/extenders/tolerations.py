"""Region specific seed tolerations."""

from infra_manager.gardener.pipeline import Extender

REGION_TOLERATIONS = {
    "me-central2": [{"key": "ksa--aramco-tenant"}],
}


class TolerationsExtender(Extender):
    def apply(self, runtime, shoot):
        tolerations = REGION_TOLERATIONS.get(runtime.spec.shoot.region)
        shoot.spec.tolerations = [dict(t) for t in tolerations] if tolerations else None
