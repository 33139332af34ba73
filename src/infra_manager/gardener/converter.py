"""Runtime to Shoot conversion.

Fields taken directly from the Runtime are set in ``Converter.to_shoot``;
anything that needs logic lives in an extender.
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from infra_manager.config import ConverterConfig
from infra_manager.crd.base import CRDMetadata
from infra_manager.gardener.auditlogs import AuditLogData
from infra_manager.gardener.extenders import (
    AnnotationsExtender,
    AuditLogExtender,
    CloudProfileExtender,
    DNSExtender,
    ExposureClassExtender,
    ExtensionsExtender,
    KubernetesExtender,
    LabelsExtender,
    MaintenanceExtender,
    OidcExtender,
    ProviderExtender,
    ResourcesExtender,
    SeedSelectorExtender,
    TolerationsExtender,
)
from infra_manager.gardener.pipeline import ExtenderPipeline
from infra_manager.models.shoot import (
    Extension,
    NamedResourceReference,
    Shoot,
    ShootNetworking,
    ShootSpecBody,
    ShootWorker,
)

logger = logging.getLogger(__name__)


class CreateOpts(BaseModel):
    converter_config: ConverterConfig
    audit_log_data: AuditLogData = Field(default_factory=AuditLogData)


class PatchOpts(BaseModel):
    """Inputs for patch mode; ``workers`` onward describe the current shoot."""

    converter_config: ConverterConfig
    audit_log_data: AuditLogData = Field(default_factory=AuditLogData)
    workers: List[ShootWorker] = Field(default_factory=list)
    shoot_k8s_version: str = ""
    extensions: List[Extension] = Field(default_factory=list)
    resources: List[NamedResourceReference] = Field(default_factory=list)
    infrastructure_config: Optional[Dict[str, Any]] = None
    control_plane_config: Optional[Dict[str, Any]] = None


def base_extenders(cfg):
    return [
        AnnotationsExtender(),
        LabelsExtender(),
        SeedSelectorExtender(),
        OidcExtender(cfg.kubernetes.defaultOperatorOidc),
        CloudProfileExtender(),
        ExposureClassExtender(),
        MaintenanceExtender(
            cfg.kubernetes.enableKubernetesVersionAutoUpdate,
            cfg.kubernetes.enableMachineImageVersionAutoUpdate,
        ),
    ]


def _has_audit_log_data(data):
    return data is not None and not data.is_empty()


class Converter:
    """Builds a shoot from a Runtime with a fixed list of extenders."""

    def __init__(self, config, extenders):
        self.config = config
        self.pipeline = ExtenderPipeline(extenders)

    @classmethod
    def for_create(cls, opts):
        cfg = opts.converter_config
        extenders = base_extenders(cfg)
        extenders += [
            ProviderExtender.for_create(
                cfg.provider.aws.enableIMDSv2,
                cfg.machineImage.defaultName,
                cfg.machineImage.defaultVersion,
            ),
            DNSExtender(cfg.dns.secretName, cfg.dns.domainPrefix, cfg.dns.providerType),
            TolerationsExtender(),
            ExtensionsExtender.for_create(opts.audit_log_data),
            KubernetesExtender(cfg.kubernetes.defaultVersion, ""),
        ]

        if _has_audit_log_data(opts.audit_log_data):
            extenders.append(
                AuditLogExtender.for_create(
                    cfg.auditLogging.policyConfigMapName, opts.audit_log_data
                )
            )

        return cls(cfg, extenders)

    @classmethod
    def for_patch(cls, opts):
        cfg = opts.converter_config
        extenders = base_extenders(cfg)
        extenders += [
            ProviderExtender.for_patch(
                cfg.provider.aws.enableIMDSv2,
                cfg.machineImage.defaultName,
                cfg.machineImage.defaultVersion,
                opts.workers,
                opts.infrastructure_config,
                opts.control_plane_config,
            ),
            ExtensionsExtender.for_patch(opts.audit_log_data, opts.extensions),
            ResourcesExtender.for_patch(opts.resources),
            KubernetesExtender(cfg.kubernetes.defaultVersion, opts.shoot_k8s_version),
        ]

        if _has_audit_log_data(opts.audit_log_data):
            extenders.append(
                AuditLogExtender.for_patch(
                    cfg.auditLogging.policyConfigMapName, opts.audit_log_data
                )
            )

        return cls(cfg, extenders)

    def to_shoot(self, runtime):
        """Convert a Runtime to a shoot.

        Raises:
            ExtenderError: a pipeline stage failed; no shoot is returned
        """
        runtime_shoot = runtime.spec.shoot
        networking = runtime_shoot.networking

        shoot = Shoot(
            metadata=CRDMetadata(
                name=runtime_shoot.name,
                namespace=f"garden-{self.config.gardener.projectName}",
            ),
            spec=ShootSpecBody(
                purpose=runtime_shoot.purpose,
                region=runtime_shoot.region,
                secretBindingName=runtime_shoot.secretBindingName,
                networking=ShootNetworking(
                    type=networking.type,
                    nodes=networking.nodes,
                    pods=networking.pods,
                    services=networking.services,
                ),
                controlPlane=dict(runtime_shoot.controlPlane) if runtime_shoot.controlPlane else None,
            ),
        )

        self.pipeline.run(runtime, shoot)
        logger.debug(f"Converted runtime {runtime.name} to shoot {shoot.namespace}/{shoot.name}")
        return shoot
