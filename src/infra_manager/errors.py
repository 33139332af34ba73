"""Exceptions raised by infra-manager."""

from kubernetes.client.exceptions import ApiException


class InfraManagerError(Exception):
    """Base class for all infra-manager errors."""


class MissingLabelError(InfraManagerError):
    """Runtime is missing one or more identifying labels."""

    def __init__(self, missing):
        self.missing = list(missing)
        super().__init__(f"missing required labels: {', '.join(self.missing)}")


class ConversionError(InfraManagerError):
    """Runtime could not be converted to a shoot."""


class ExtenderError(ConversionError):
    """A pipeline stage failed.

    The failing stage's exception is kept as ``cause`` and chained as
    ``__cause__`` so callers can inspect it unchanged.
    """

    def __init__(self, stage, runtime_name, shoot_name, cause):
        self.stage = stage
        self.runtime_name = runtime_name
        self.shoot_name = shoot_name
        self.cause = cause
        super().__init__(
            f"extender {stage} failed for runtime {runtime_name} "
            f"(shoot {shoot_name}): {cause}"
        )


class AuditLogDataError(InfraManagerError):
    """Audit log data could not be resolved for a provider and region."""


class NegativeDriftError(InfraManagerError):
    """Live shoot generation is lower than the one recorded in the backup."""

    def __init__(self, original_generation, current_generation):
        self.original_generation = original_generation
        self.current_generation = current_generation
        super().__init__(
            f"current generation {current_generation} is lower than "
            f"backup generation {original_generation}"
        )


class BackupReadError(InfraManagerError):
    """Backup files for a runtime are missing or unreadable."""


class ShootNotFoundError(InfraManagerError):
    """No shoot exists for the given runtime."""


def is_conflict(err):
    return isinstance(err, ApiException) and err.status == 409


def is_forbidden(err):
    return isinstance(err, ApiException) and err.status == 403


def is_not_found(err):
    return isinstance(err, ApiException) and err.status == 404
