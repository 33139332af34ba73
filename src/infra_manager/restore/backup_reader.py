"""Reads runtime backups from disk.

Layout under the backup directory::

    backup/<runtime-id>/<shoot>-to-restore.yaml
    backup/<runtime-id>/<shoot>-original.yaml
    backup/<runtime-id>/crb/*.yaml
    backup/<runtime-id>/oidc/*.yaml
"""

import logging
from pathlib import Path
from typing import Any, Dict, List

import yaml
from pydantic import BaseModel, Field

from infra_manager.errors import BackupReadError
from infra_manager.models.shoot import SHOOT_API_VERSION, SHOOT_KIND, Shoot

logger = logging.getLogger(__name__)


class RuntimeBackup(BaseModel):
    """Snapshot taken before a risky shoot mutation."""

    shoot_for_patch: Shoot
    original_shoot: Shoot
    cluster_role_bindings: List[Dict[str, Any]] = Field(default_factory=list)
    oidc_config: List[Dict[str, Any]] = Field(default_factory=list)


def _read_yaml(file_path):
    try:
        with open(file_path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise BackupReadError(f"failed to read {file_path}: {e}") from e
    if not isinstance(data, dict):
        raise BackupReadError(f"{file_path} does not contain a resource document")
    return data


class BackupReader:
    def __init__(self, backup_dir, restore_crb=True, restore_oidc=False):
        self.backup_dir = Path(backup_dir)
        self.restore_crb = restore_crb
        self.restore_oidc = restore_oidc

    def runtime_dir(self, runtime_id):
        return self.backup_dir / "backup" / runtime_id

    def read(self, runtime_id, shoot_name):
        """Load the backup of one runtime.

        Raises:
            BackupReadError: a required file is missing or malformed
        """
        shoot_for_patch = self._read_shoot(runtime_id, f"{shoot_name}-to-restore")
        original_shoot = self._read_shoot(runtime_id, f"{shoot_name}-original")

        crbs = []
        if self.restore_crb:
            crbs = self._read_objects(self.runtime_dir(runtime_id) / "crb")

        oidc_config = []
        if self.restore_oidc:
            oidc_config = self._read_objects(self.runtime_dir(runtime_id) / "oidc")

        return RuntimeBackup(
            shoot_for_patch=shoot_for_patch,
            original_shoot=original_shoot,
            cluster_role_bindings=crbs,
            oidc_config=oidc_config,
        )

    def _read_shoot(self, runtime_id, file_name):
        data = _read_yaml(self.runtime_dir(runtime_id) / f"{file_name}.yaml")
        data["kind"] = SHOOT_KIND
        data["apiVersion"] = SHOOT_API_VERSION
        try:
            return Shoot.from_manifest(data)
        except ValueError as e:
            raise BackupReadError(f"invalid shoot backup {file_name}: {e}") from e

    def _read_objects(self, directory):
        if not directory.is_dir():
            raise BackupReadError(f"backup directory {directory} not found")

        objects = []
        for file_path in sorted(directory.iterdir()):
            if not file_path.is_file():
                continue
            obj = _read_yaml(file_path)
            # Stored versions are stale; the server assigns fresh ones.
            metadata = obj.setdefault("metadata", {})
            metadata.pop("generation", None)
            metadata.pop("resourceVersion", None)
            objects.append(obj)

        logger.debug(f"Read {len(objects)} objects from {directory}")
        return objects
