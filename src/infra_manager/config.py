"""Configuration for the converter, the reconciler and the restore tool."""

import logging
import os
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_FIELD_MANAGER = "kim"
DEFAULT_API_TIMEOUT = 20.0


class OidcDefaults(BaseModel):
    clientID: str = ""
    groupsClaim: str = "groups"
    issuerURL: str = ""
    signingAlgs: List[str] = Field(default_factory=lambda: ["RS256"])
    usernameClaim: str = "sub"
    usernamePrefix: str = "-"


class KubernetesConfig(BaseModel):
    defaultVersion: str = "1.30"
    enableKubernetesVersionAutoUpdate: bool = False
    enableMachineImageVersionAutoUpdate: bool = False
    defaultOperatorOidc: OidcDefaults = Field(default_factory=OidcDefaults)


class DNSConfig(BaseModel):
    secretName: str = ""
    domainPrefix: str = ""
    providerType: str = ""


class AWSConfig(BaseModel):
    enableIMDSv2: bool = False


class ProviderConfig(BaseModel):
    aws: AWSConfig = Field(default_factory=AWSConfig)


class MachineImageConfig(BaseModel):
    defaultName: str = ""
    defaultVersion: str = ""


class GardenerConfig(BaseModel):
    projectName: str = ""


class AuditLogConfig(BaseModel):
    policyConfigMapName: str = ""
    tenantConfigPath: str = ""


class ConverterConfig(BaseModel):
    """Settings the shoot converter takes from the operator configuration."""

    kubernetes: KubernetesConfig = Field(default_factory=KubernetesConfig)
    dns: DNSConfig = Field(default_factory=DNSConfig)
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    machineImage: MachineImageConfig = Field(default_factory=MachineImageConfig)
    gardener: GardenerConfig = Field(default_factory=GardenerConfig)
    auditLogging: AuditLogConfig = Field(default_factory=AuditLogConfig)


def load_converter_config(path):
    """Read the converter configuration from a YAML or JSON file."""
    path = Path(path)
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    logger.info(f"Loaded converter config from {path}")
    return ConverterConfig.model_validate(data)


def _env_bool(name, default="false"):
    return os.getenv(name, default).lower() == "true"


class ReconcilerConfig(BaseModel):
    """Settings of the runtime reconciliation loop."""

    gardener_requeue_duration: float = 15.0
    metrics_port: int = 8080
    audit_log_mandatory: bool = True
    field_manager: str = DEFAULT_FIELD_MANAGER
    api_timeout: float = DEFAULT_API_TIMEOUT

    @classmethod
    def from_env(cls):
        return cls(
            gardener_requeue_duration=float(os.getenv("GARDENER_REQUEUE_DURATION", "15")),
            metrics_port=int(os.getenv("METRICS_PORT", "8080")),
            audit_log_mandatory=_env_bool("AUDIT_LOG_MANDATORY", "true"),
            field_manager=os.getenv("FIELD_MANAGER", DEFAULT_FIELD_MANAGER),
            api_timeout=float(os.getenv("API_TIMEOUT", str(DEFAULT_API_TIMEOUT))),
        )


class RestoreConfig(BaseModel):
    """Settings of one restore run."""

    backup_dir: Path
    output_path: Path
    gardener_project: str = ""
    kubeconfig: Optional[str] = None
    is_dry_run: bool = False
    restore_crb: bool = True
    restore_oidc: bool = False
    field_manager: str = DEFAULT_FIELD_MANAGER
    api_timeout: float = DEFAULT_API_TIMEOUT
