"""Named resource references of the shoot."""

from infra_manager.gardener.pipeline import Extender


class ResourcesExtender(Extender):
    """Keeps the resource references the shoot already has."""

    def __init__(self, current_resources):
        self.current_resources = list(current_resources or [])

    @classmethod
    def for_patch(cls, current_resources):
        return cls(current_resources)

    def apply(self, runtime, shoot):
        shoot.spec.resources = [r.model_copy(deep=True) for r in self.current_resources]
