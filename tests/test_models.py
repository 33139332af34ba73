"""
Tests for the Runtime and Shoot resource models.
"""
import pytest

from conftest import runtime_body
from infra_manager.crd import api_coordinates
from infra_manager.crd.base import CRDStatus
from infra_manager.errors import MissingLabelError
from infra_manager.models.runtime import (
    FORCE_RECONCILE_ANNOTATION,
    LABEL_REGION,
    LABEL_SHOOT_NAME,
    Runtime,
)
from infra_manager.models.shoot import Shoot


class TestRegistry:
    def test_api_coordinates(self):
        assert api_coordinates(Shoot) == ("core.gardener.cloud", "v1beta1", "shoots")
        assert api_coordinates(Runtime) == ("infrastructuremanager.kyma-project.io", "v1", "runtimes")

    def test_unregistered_model(self):
        with pytest.raises(ValueError):
            api_coordinates(CRDStatus)


class TestRuntime:
    def test_from_body_keeps_unknown_fields(self):
        body = runtime_body()
        body["spec"]["shoot"]["futureField"] = {"x": 1}

        runtime = Runtime.from_body(body)

        assert runtime.runtime_id == "rt-1"
        assert runtime.to_manifest()["spec"]["shoot"]["futureField"] == {"x": 1}

    def test_missing_labels_are_listed(self):
        body = runtime_body()
        del body["metadata"]["labels"][LABEL_REGION]
        body["metadata"]["labels"][LABEL_SHOOT_NAME] = ""

        with pytest.raises(MissingLabelError) as exc_info:
            Runtime.from_body(body).validate_required_labels()

        assert set(exc_info.value.missing) == {LABEL_REGION, LABEL_SHOOT_NAME}

    def test_force_reconciliation_annotation(self):
        body = runtime_body()
        body["metadata"]["annotations"] = {FORCE_RECONCILE_ANNOTATION: "true"}

        assert Runtime.from_body(body).should_force_reconciliation()
        assert not Runtime.from_body(runtime_body()).should_force_reconciliation()

    def test_condition_upsert(self, runtime):
        runtime.status.update_state_pending("Provisioned", "Processing", "Unknown", "pending")
        runtime.status.update_state_pending("Provisioned", "ConversionError", "False", "failed")

        assert len(runtime.status.conditions) == 1
        assert runtime.status.state == "Pending"
        assert runtime.status.get_condition("Provisioned").status == "False"


class TestShoot:
    def test_from_manifest_drops_status(self):
        shoot = Shoot.from_manifest(
            {
                "apiVersion": "core.gardener.cloud/v1beta1",
                "kind": "Shoot",
                "metadata": {"name": "shoot-1", "namespace": "garden-kyma", "generation": 3},
                "spec": {"region": "eu-west-1", "addons": {"kept": True}},
                "status": {"lastOperation": {}},
            }
        )

        manifest = shoot.to_manifest()
        assert shoot.generation == 3
        assert "status" not in manifest
        assert manifest["spec"]["addons"] == {"kept": True}

    def test_missing_generation_stays_unset(self):
        shoot = Shoot.from_manifest({"metadata": {"name": "shoot-1"}})

        assert shoot.generation is None
        assert not shoot.is_being_deleted()
