"""
Tests for drift classification and the restore workflow.
"""
import json

import pytest
import yaml

from conftest import FakeClusterAccessor, FakeShootClient, api_error
from infra_manager.config import RestoreConfig
from infra_manager.errors import BackupReadError, NegativeDriftError
from infra_manager.restore.backup_reader import BackupReader
from infra_manager.restore.drift import DriftOutcome, classify_drift
from infra_manager.restore.output_writer import RESULTS_FILE_NAME, OutputWriter
from infra_manager.restore.restorer import Restore
from infra_manager.restore.results import (
    STATUS_ERROR,
    STATUS_SKIPPED,
    STATUS_SUCCESS,
    STATUS_UPDATE_DETECTED,
    RestoreResults,
)


def crb(name, generation=3):
    return {
        "apiVersion": "rbac.authorization.k8s.io/v1",
        "kind": "ClusterRoleBinding",
        "metadata": {"name": name, "generation": generation, "resourceVersion": "42"},
        "roleRef": {"apiGroup": "rbac.authorization.k8s.io", "kind": "ClusterRole", "name": "cluster-admin"},
        "subjects": [{"kind": "User", "name": "admin@example.com"}],
    }


def write_backup(root, runtime_id, shoot, original_generation, crbs=None, oidcs=None):
    runtime_dir = root / "backup" / runtime_id
    runtime_dir.mkdir(parents=True)

    to_restore = shoot.to_manifest()
    original = shoot.to_manifest()
    for manifest in (to_restore, original):
        manifest["metadata"].pop("generation", None)
        if original_generation is not None:
            manifest["metadata"]["generation"] = original_generation
    (runtime_dir / f"{shoot.name}-to-restore.yaml").write_text(yaml.safe_dump(to_restore))
    (runtime_dir / f"{shoot.name}-original.yaml").write_text(yaml.safe_dump(original))

    for sub_dir, objects in (("crb", crbs), ("oidc", oidcs)):
        if objects is None:
            continue
        (runtime_dir / sub_dir).mkdir()
        for obj in objects:
            (runtime_dir / sub_dir / f"{obj['metadata']['name']}.yaml").write_text(yaml.safe_dump(obj))


@pytest.fixture
def live_shoot(make_runtime, make_shoot):
    def _make(runtime_id, shoot_name, generation):
        runtime = make_runtime(runtime_id=runtime_id, shoot_name=shoot_name)
        return make_shoot(runtime, generation=generation)

    return _make


def make_restore(tmp_path, shoots, dry_run=False, restore_crb=False):
    config = RestoreConfig(
        backup_dir=tmp_path,
        output_path=tmp_path / "out",
        gardener_project="kyma",
        is_dry_run=dry_run,
        restore_crb=restore_crb,
    )
    shoot_client = FakeShootClient(shoots=shoots)
    accessor = FakeClusterAccessor()
    restore = Restore(
        config,
        shoot_client,
        BackupReader(tmp_path, restore_crb=restore_crb),
        accessor,
    )
    return restore, shoot_client, accessor


class TestDriftClassification:
    @pytest.mark.parametrize(
        "original,current,expected",
        [
            (5, 5, DriftOutcome.UNCHANGED),
            (5, 6, DriftOutcome.SAFE_TO_APPLY),
            (5, 7, DriftOutcome.AMBIGUOUS_MANUAL_REQUIRED),
            (1, 40, DriftOutcome.AMBIGUOUS_MANUAL_REQUIRED),
        ],
    )
    def test_delta_law(self, original, current, expected):
        assert classify_drift(original, current) == expected

    def test_negative_delta_is_an_error(self):
        with pytest.raises(NegativeDriftError) as exc_info:
            classify_drift(6, 5)

        assert exc_info.value.original_generation == 6
        assert exc_info.value.current_generation == 5


class TestBackupReader:
    def test_reads_shoots_and_strips_crb_versions(self, tmp_path, live_shoot):
        shoot = live_shoot("rt-1", "shoot-1", 5)
        write_backup(tmp_path, "rt-1", shoot, 5, crbs=[crb("b-admin"), crb("a-admin")])

        backup = BackupReader(tmp_path, restore_crb=True).read("rt-1", "shoot-1")

        assert backup.original_shoot.generation == 5
        assert backup.shoot_for_patch.kind == "Shoot"
        assert [c["metadata"]["name"] for c in backup.cluster_role_bindings] == ["a-admin", "b-admin"]
        assert "generation" not in backup.cluster_role_bindings[0]["metadata"]
        assert "resourceVersion" not in backup.cluster_role_bindings[0]["metadata"]
        assert backup.oidc_config == []

    def test_missing_backup_file(self, tmp_path):
        with pytest.raises(BackupReadError):
            BackupReader(tmp_path).read("rt-1", "shoot-1")

    def test_missing_crb_directory(self, tmp_path, live_shoot):
        write_backup(tmp_path, "rt-1", live_shoot("rt-1", "shoot-1", 5), 5)

        with pytest.raises(BackupReadError):
            BackupReader(tmp_path, restore_crb=True).read("rt-1", "shoot-1")


class TestRestoreWorkflow:
    def test_one_generation_ahead_is_applied(self, tmp_path, live_shoot):
        current = live_shoot("rt-1", "shoot-1", 6)
        write_backup(tmp_path, "rt-1", current, 5)
        restore, shoot_client, _ = make_restore(tmp_path, [current])

        results = restore.do(["rt-1"])

        assert [r.status for r in results.results] == [STATUS_SUCCESS]
        assert len(shoot_client.applied) == 1

    def test_two_generations_ahead_is_left_alone(self, tmp_path, live_shoot):
        current = live_shoot("rt-1", "shoot-1", 7)
        write_backup(tmp_path, "rt-1", current, 5)
        restore, shoot_client, _ = make_restore(tmp_path, [current])
        before = shoot_client.shoots["shoot-1"].to_manifest()

        results = restore.do(["rt-1"])

        assert [r.status for r in results.results] == [STATUS_UPDATE_DETECTED]
        assert results.update_detected == 1
        assert shoot_client.applied == []
        assert shoot_client.shoots["shoot-1"].to_manifest() == before

    def test_unchanged_generation_is_skipped(self, tmp_path, live_shoot):
        current = live_shoot("rt-1", "shoot-1", 5)
        write_backup(tmp_path, "rt-1", current, 5)
        restore, shoot_client, _ = make_restore(tmp_path, [current])

        results = restore.do(["rt-1"])

        assert [r.status for r in results.results] == [STATUS_SKIPPED]
        assert shoot_client.applied == []

    def test_negative_drift_is_an_error(self, tmp_path, live_shoot):
        current = live_shoot("rt-1", "shoot-1", 4)
        write_backup(tmp_path, "rt-1", current, 5)
        restore, shoot_client, _ = make_restore(tmp_path, [current])

        results = restore.do(["rt-1"])

        assert [r.status for r in results.results] == [STATUS_ERROR]
        assert shoot_client.applied == []

    def test_backup_without_generation_is_an_error(self, tmp_path, live_shoot):
        current = live_shoot("rt-1", "shoot-1", 1)
        write_backup(tmp_path, "rt-1", current, None)
        restore, shoot_client, _ = make_restore(tmp_path, [current])

        results = restore.do(["rt-1"])

        assert [r.status for r in results.results] == [STATUS_ERROR]
        assert shoot_client.applied == []

    def test_failed_target_does_not_stop_the_batch(self, tmp_path, live_shoot):
        shoots = [live_shoot(f"rt-{i}", f"shoot-{i}", 6) for i in (1, 2, 3)]
        for i, shoot in enumerate(shoots, start=1):
            write_backup(tmp_path, f"rt-{i}", shoot, 5)
        restore, shoot_client, _ = make_restore(tmp_path, shoots)
        shoot_client.apply_errors["shoot-2"] = api_error(500)

        results = restore.do(["rt-1", "rt-2", "rt-3"])

        assert [r.status for r in results.results] == [STATUS_SUCCESS, STATUS_ERROR, STATUS_SUCCESS]
        assert [r.runtimeId for r in results.results] == ["rt-1", "rt-2", "rt-3"]
        assert (results.succeeded, results.failed) == (2, 1)

    def test_unknown_runtime_is_an_error(self, tmp_path):
        restore, _, _ = make_restore(tmp_path, [])

        results = restore.do(["rt-missing"])

        assert results.results[0].status == STATUS_ERROR
        assert "Failed to fetch shoot" in results.results[0].errorMessage

    def test_shoot_being_deleted_is_an_error(self, tmp_path, live_shoot):
        current = live_shoot("rt-1", "shoot-1", 6)
        current.metadata.deletionTimestamp = "2026-01-01T00:00:00Z"
        write_backup(tmp_path, "rt-1", current, 5)
        restore, shoot_client, _ = make_restore(tmp_path, [current])

        results = restore.do(["rt-1"])

        assert results.results[0].errorMessage == "Shoot is being deleted"
        assert shoot_client.applied == []

    def test_dry_run_applies_nothing(self, tmp_path, live_shoot):
        current = live_shoot("rt-1", "shoot-1", 6)
        write_backup(tmp_path, "rt-1", current, 5)
        restore, shoot_client, _ = make_restore(tmp_path, [current], dry_run=True)

        results = restore.do(["rt-1"])

        assert results.results[0].status == STATUS_SUCCESS
        assert shoot_client.applied == []

    def test_cluster_role_bindings_restored(self, tmp_path, live_shoot):
        current = live_shoot("rt-1", "shoot-1", 6)
        write_backup(tmp_path, "rt-1", current, 5, crbs=[crb("admin")])
        restore, _, accessor = make_restore(tmp_path, [current], restore_crb=True)

        results = restore.do(["rt-1"])

        assert [c["metadata"]["name"] for c in accessor.clients["rt-1"].crbs] == ["admin"]
        assert results.results[0].restoredCRBs == ["admin"]


class TestRestoreReport:
    def test_summary_counts(self):
        results = RestoreResults()
        results.operation_succeeded("rt-1", "shoot-1")
        results.error_occurred("rt-2", "shoot-2", "boom")
        results.operation_skipped("rt-3", "shoot-3")
        results.automatic_restore_impossible("rt-4", "shoot-4")

        assert results.summary() == {"succeeded": 1, "failed": 1, "skipped": 1, "updateDetected": 1}

    def test_results_written_to_timestamped_directory(self, tmp_path):
        writer = OutputWriter(tmp_path)
        results = RestoreResults()
        results.error_occurred("rt-2", "shoot-2", "boom")

        path = writer.save_restore_results(results)

        assert path.name == RESULTS_FILE_NAME
        assert path.parent.name.startswith("restore-")
        report = json.loads(path.read_text())
        assert report["failed"] == 1
        assert report["results"][0] == {
            "runtimeId": "rt-2",
            "shootName": "shoot-2",
            "status": STATUS_ERROR,
            "errorMessage": "boom",
        }
