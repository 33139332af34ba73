"""Audit log tenant configuration lookup."""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, ValidationError

from infra_manager.errors import AuditLogDataError

logger = logging.getLogger(__name__)


class AuditLogData(BaseModel):
    """Audit log tenant assigned to a provider region."""

    tenantID: str = ""
    serviceURL: str = ""
    secretName: str = ""

    def is_empty(self):
        return self == AuditLogData()


class AuditLogResolver:
    """Resolves audit log data from a tenant configuration file.

    The file maps provider type to region to tenant data::

        aws:
          eu-central-1:
            tenantID: ...
            serviceURL: ...
            secretName: ...
    """

    def __init__(self, tenant_config_path):
        self.tenant_config_path = Path(tenant_config_path) if tenant_config_path else None

    def _load(self):
        if self.tenant_config_path is None:
            raise AuditLogDataError("audit log tenant config path not set")
        try:
            with open(self.tenant_config_path) as f:
                return yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise AuditLogDataError(
                f"failed to read audit log config {self.tenant_config_path}: {e}"
            ) from e

    def get_audit_log_data(self, provider_type, region):
        """Return the audit log data for a provider region.

        Raises:
            AuditLogDataError: no complete, well-typed entry exists for the region
        """
        config = self._load()

        if not isinstance(config, dict):
            raise AuditLogDataError(f"audit log config {self.tenant_config_path} is not a mapping")

        provider_config = config.get(provider_type)
        if not isinstance(provider_config, dict) or not provider_config:
            raise AuditLogDataError(f"missing audit log configuration for provider {provider_type}")

        entry = provider_config.get(region)
        if not isinstance(entry, dict) or not entry:
            raise AuditLogDataError(
                f"missing audit log configuration for provider {provider_type} in region {region}"
            )

        try:
            data = AuditLogData.model_validate(entry)
        except ValidationError as e:
            raise AuditLogDataError(
                f"invalid audit log configuration for {provider_type}/{region}: {e}"
            ) from e
        missing = [name for name, value in data.model_dump().items() if not value]
        if missing:
            raise AuditLogDataError(
                f"audit log configuration for {provider_type}/{region} missing: {', '.join(missing)}"
            )

        logger.debug(f"Resolved audit log tenant {data.tenantID} for {provider_type}/{region}")
        return data
