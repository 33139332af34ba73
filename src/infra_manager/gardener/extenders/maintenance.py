"""Maintenance auto-update policy."""

from infra_manager.gardener.pipeline import Extender


class MaintenanceExtender(Extender):
    def __init__(self, kubernetes_auto_update, machine_image_auto_update):
        self.kubernetes_auto_update = kubernetes_auto_update
        self.machine_image_auto_update = machine_image_auto_update

    def apply(self, runtime, shoot):
        maintenance = dict(shoot.spec.maintenance or {})
        maintenance["autoUpdate"] = {
            "kubernetesVersion": self.kubernetes_auto_update,
            "machineImageVersion": self.machine_image_auto_update,
        }
        shoot.spec.maintenance = maintenance
