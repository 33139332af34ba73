"""Restore workflow: re-apply backed up shoots where it is safe to do so."""

import logging

from infra_manager.errors import NegativeDriftError, ShootNotFoundError
from infra_manager.gardener.extenders.metadata import ANNOTATION_RUNTIME_ID
from infra_manager.models.runtime import LABEL_RUNTIME_ID
from infra_manager.restore.drift import DriftOutcome, classify_drift
from infra_manager.restore.results import RestoreResults

logger = logging.getLogger(__name__)


def fetch_shoot(shoot_list, shoot_client, runtime_id):
    """Find the shoot of a runtime and read its latest state."""
    for shoot in shoot_list:
        if (
            shoot.metadata.annotations.get(ANNOTATION_RUNTIME_ID) == runtime_id
            or shoot.metadata.labels.get(LABEL_RUNTIME_ID) == runtime_id
        ):
            return shoot_client.get(shoot.name)
    raise ShootNotFoundError(f"shoot for runtime {runtime_id} not found")


class Restore:
    """Processes restore targets one after another.

    A failing target is recorded and never stops the run.
    """

    def __init__(self, config, shoot_client, backup_reader, cluster_accessor, output_writer=None):
        self.config = config
        self.shoot_client = shoot_client
        self.backup_reader = backup_reader
        self.cluster_accessor = cluster_accessor
        self.output_writer = output_writer
        self.results = RestoreResults(
            output_directory=str(output_writer.new_results_dir) if output_writer else ""
        )

    def do(self, runtime_ids):
        shoot_list = self.shoot_client.list()

        for runtime_id in runtime_ids:
            self._restore_one(shoot_list, runtime_id)

        logger.info(
            f"Restore completed. Successfully restored backups: {self.results.succeeded}, "
            f"Failed operations: {self.results.failed}, Skipped backups: {self.results.skipped}, "
            f"Automatic restore impossible: {self.results.update_detected}"
        )

        if self.output_writer is not None:
            self.output_writer.save_restore_results(self.results)

        return self.results

    def _error(self, runtime_id, shoot_name, msg):
        logger.error(f"{msg} (runtimeID: {runtime_id})")
        self.results.error_occurred(runtime_id, shoot_name, msg)

    def _restore_one(self, shoot_list, runtime_id):
        try:
            current = fetch_shoot(shoot_list, self.shoot_client, runtime_id)
        except Exception as e:
            self._error(runtime_id, "", f"Failed to fetch shoot: {e}")
            return

        if current.is_being_deleted():
            self._error(runtime_id, current.name, "Shoot is being deleted")
            return

        try:
            backup = self.backup_reader.read(runtime_id, current.name)
        except Exception as e:
            self._error(runtime_id, current.name, f"Failed to restore runtime: {e}")
            return

        if backup.original_shoot.generation is None or current.generation is None:
            self._error(runtime_id, current.name, "Shoot generation missing, cannot compare with backup")
            return

        try:
            outcome = classify_drift(backup.original_shoot.generation, current.generation)
        except NegativeDriftError as e:
            self._error(runtime_id, current.name, f"Backup is inconsistent with the shoot: {e}")
            return

        if outcome == DriftOutcome.UNCHANGED:
            logger.warning(
                "Verify the current state of the system. Shoot was not modified after "
                f"backup was prepared. Skipping. (runtimeID: {runtime_id})"
            )
            self.results.operation_skipped(runtime_id, current.name)
            return

        if outcome == DriftOutcome.AMBIGUOUS_MANUAL_REQUIRED:
            logger.warning(
                "Verify the current state of the system. Restore should be performed manually, "
                f"as the backup may overwrite more than one change. (runtimeID: {runtime_id})"
            )
            self.results.automatic_restore_impossible(runtime_id, current.name)
            return

        if self.config.is_dry_run:
            logger.info(f"Runtime processed successfully (dry-run) (runtimeID: {runtime_id})")
            self.results.operation_succeeded(runtime_id, current.name)
            return

        try:
            self._apply_resources(backup, runtime_id)
        except Exception as e:
            self._error(runtime_id, current.name, f"Failed to restore runtime: {e}")
            return

        logger.info(f"Runtime restore performed successfully (runtimeID: {runtime_id})")
        self.results.operation_succeeded(
            runtime_id, current.name, backup.cluster_role_bindings, backup.oidc_config
        )

    def _apply_resources(self, backup, runtime_id):
        self.shoot_client.apply(backup.shoot_for_patch)

        if not backup.cluster_role_bindings and not backup.oidc_config:
            return

        cluster_client = self.cluster_accessor.get_client(runtime_id)
        for crb in backup.cluster_role_bindings:
            cluster_client.update_cluster_role_binding(crb)
        for oidc in backup.oidc_config:
            cluster_client.update_oidc(oidc)
