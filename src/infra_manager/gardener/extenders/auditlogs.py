"""Audit policy and audit log credentials."""

from infra_manager.gardener.pipeline import Extender
from infra_manager.gardener.extenders.extensions import AUDITLOG_SECRET_REFERENCE
from infra_manager.models.shoot import NamedResourceReference


class AuditLogExtender(Extender):
    """Wires the audit policy config map and the audit log credentials secret.

    Only added to a pipeline when audit log data was resolved.
    """

    def __init__(self, policy_config_map_name, audit_log_data):
        self.policy_config_map_name = policy_config_map_name
        self.audit_log_data = audit_log_data

    @classmethod
    def for_create(cls, policy_config_map_name, audit_log_data):
        return cls(policy_config_map_name, audit_log_data)

    @classmethod
    def for_patch(cls, policy_config_map_name, audit_log_data):
        return cls(policy_config_map_name, audit_log_data)

    def apply(self, runtime, shoot):
        if not self.policy_config_map_name:
            raise ValueError("audit policy config map name is not configured")

        shoot.ensure_kube_apiserver().auditConfig = {
            "auditPolicy": {"configMapRef": {"name": self.policy_config_map_name}}
        }

        credentials = NamedResourceReference(
            name=AUDITLOG_SECRET_REFERENCE,
            resourceRef={
                "apiVersion": "v1",
                "kind": "Secret",
                "name": self.audit_log_data.secretName,
            },
        )
        resources = [r for r in shoot.spec.resources if r.name != AUDITLOG_SECRET_REFERENCE]
        resources.append(credentials)
        shoot.spec.resources = resources
