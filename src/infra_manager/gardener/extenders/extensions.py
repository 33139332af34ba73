"""Gardener extensions enabled on the shoot."""

from infra_manager.gardener.pipeline import Extender
from infra_manager.models.shoot import Extension

DNS_EXTENSION = "shoot-dns-service"
CERT_EXTENSION = "shoot-cert-service"
OIDC_EXTENSION = "shoot-oidc-service"
NETWORKING_FILTER_EXTENSION = "shoot-networking-filter"
AUDITLOG_EXTENSION = "shoot-auditlog-service"

AUDITLOG_SECRET_REFERENCE = "auditlog-credentials"


def dns_extension():
    return Extension(
        type=DNS_EXTENSION,
        providerConfig={
            "apiVersion": "service.dns.extensions.gardener.cloud/v1alpha1",
            "kind": "DNSConfig",
            "dnsProviderReplication": {"enabled": True},
            "syncProvidersFromShootSpecDNS": True,
        },
    )


def cert_extension():
    return Extension(
        type=CERT_EXTENSION,
        providerConfig={
            "apiVersion": "service.cert.extensions.gardener.cloud/v1alpha1",
            "kind": "CertConfig",
            "shootIssuers": {"enabled": True},
        },
    )


def oidc_extension():
    return Extension(type=OIDC_EXTENSION, disabled=False)


def networking_filter_extension(runtime):
    enabled = runtime.spec.security.networking.filter.egress.enabled
    return Extension(
        type=NETWORKING_FILTER_EXTENSION,
        disabled=not enabled,
        providerConfig={
            "apiVersion": "networking-filter.extensions.gardener.cloud/v1alpha1",
            "kind": "Configuration",
            "egressFilter": {"blackholingEnabled": True},
        },
    )


def auditlog_extension(audit_log_data):
    return Extension(
        type=AUDITLOG_EXTENSION,
        providerConfig={
            "apiVersion": "service.auditlog.extensions.gardener.cloud/v1alpha1",
            "kind": "AuditlogConfig",
            "type": "standard",
            "tenantID": audit_log_data.tenantID,
            "serviceURL": audit_log_data.serviceURL,
            "secretReferenceName": AUDITLOG_SECRET_REFERENCE,
        },
    )


class ExtensionsExtender(Extender):
    """Sets the shoot extensions.

    In create mode the list is built from scratch. In patch mode the current
    list is the starting point: extensions managed here are replaced in place,
    missing ones are appended and all others are left untouched.
    """

    def __init__(self, audit_log_data, current_extensions=None, create=False):
        self.audit_log_data = audit_log_data
        self.current_extensions = list(current_extensions or [])
        self.create = create

    @classmethod
    def for_create(cls, audit_log_data):
        return cls(audit_log_data, create=True)

    @classmethod
    def for_patch(cls, audit_log_data, current_extensions):
        return cls(audit_log_data, current_extensions=current_extensions)

    def _managed(self, runtime):
        managed = []
        if self.create:
            managed.extend([dns_extension(), cert_extension()])
        managed.extend([oidc_extension(), networking_filter_extension(runtime)])
        if self.audit_log_data is not None and not self.audit_log_data.is_empty():
            managed.append(auditlog_extension(self.audit_log_data))
        return managed

    def apply(self, runtime, shoot):
        managed = {ext.type: ext for ext in self._managed(runtime)}

        extensions = []
        for current in self.current_extensions:
            replacement = managed.pop(current.type, None)
            extensions.append(replacement or current.model_copy(deep=True))
        extensions.extend(managed.values())

        shoot.spec.extensions = extensions
