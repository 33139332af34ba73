"""Annotations and labels copied from the Runtime onto the shoot."""

from infra_manager.gardener.pipeline import Extender
from infra_manager.models.runtime import (
    LABEL_GLOBAL_ACCOUNT_ID,
    LABEL_SUBACCOUNT_ID,
)

ANNOTATION_RUNTIME_ID = "infrastructuremanager.kyma-project.io/runtime-id"
ANNOTATION_LICENCE_TYPE = "infrastructuremanager.kyma-project.io/licence-type"
ANNOTATION_EU_ACCESS = "support.gardener.cloud/eu-access-for-cluster-nodes"

EU_ACCESS_PLATFORM_REGIONS = {"cf-eu11", "cf-ch20"}


class AnnotationsExtender(Extender):
    def apply(self, runtime, shoot):
        annotations = dict(shoot.metadata.annotations)
        annotations[ANNOTATION_RUNTIME_ID] = runtime.runtime_id

        licence_type = runtime.spec.shoot.licenceType
        if licence_type:
            annotations[ANNOTATION_LICENCE_TYPE] = licence_type
        else:
            annotations.pop(ANNOTATION_LICENCE_TYPE, None)

        if runtime.spec.shoot.platformRegion in EU_ACCESS_PLATFORM_REGIONS:
            annotations[ANNOTATION_EU_ACCESS] = "true"

        shoot.metadata.annotations = annotations


class LabelsExtender(Extender):
    def apply(self, runtime, shoot):
        labels = dict(shoot.metadata.labels)
        labels["account"] = runtime.metadata.labels.get(LABEL_GLOBAL_ACCOUNT_ID, "")
        labels["subaccount"] = runtime.metadata.labels.get(LABEL_SUBACCOUNT_ID, "")
        shoot.metadata.labels = labels
