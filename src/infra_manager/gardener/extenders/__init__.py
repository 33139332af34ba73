"""Shoot pipeline stages."""

from .auditlogs import AuditLogExtender
from .cloud_profile import CloudProfileExtender, ExposureClassExtender
from .dns import DNSExtender
from .extensions import ExtensionsExtender
from .kubernetes import KubernetesExtender
from .maintenance import MaintenanceExtender
from .metadata import AnnotationsExtender, LabelsExtender
from .oidc import OidcExtender
from .provider import ProviderExtender
from .resources import ResourcesExtender
from .seed import SeedSelectorExtender
from .tolerations import TolerationsExtender

__all__ = [
    "AnnotationsExtender",
    "AuditLogExtender",
    "CloudProfileExtender",
    "DNSExtender",
    "ExposureClassExtender",
    "ExtensionsExtender",
    "KubernetesExtender",
    "LabelsExtender",
    "MaintenanceExtender",
    "OidcExtender",
    "ProviderExtender",
    "ResourcesExtender",
    "SeedSelectorExtender",
    "TolerationsExtender",
]
