"""Helpers shared by the shoot state functions."""

import logging

from infra_manager.errors import AuditLogDataError, is_conflict, is_forbidden
from infra_manager.gardener.auditlogs import AuditLogData
from infra_manager.models.runtime import (
    CONDITION_REASON_AUDIT_LOG_ERROR,
    CONDITION_REASON_PROCESSING_ERR,
    CONDITION_TYPE_RUNTIME_PROVISIONED,
)
from infra_manager.reconciler.fsm import Event, step

logger = logging.getLogger(__name__)

MSG_FAILED_TO_CONFIGURE_AUDIT_LOGS = "Failed to configure audit logs"
MSG_CONVERSION_ERROR = "Runtime conversion error"
MSG_SHOOT_PATCH_ERROR = "Gardener API shoot patch error"
MSG_SHOOT_CREATE_ERROR = "Gardener API shoot create error"


def stop_with_error(deps, system_state, state, reason, message, error=None):
    """Record a failed condition on the Runtime and stop without retry."""
    system_state.runtime.status.update_state_pending(
        CONDITION_TYPE_RUNTIME_PROVISIONED, reason, "False", message
    )
    deps.metrics.inc_runtime_fsm_stop_counter()
    return step(state, Event.FATAL, error=error)


def handle_update_error(deps, system_state, state, err, status_msg=MSG_SHOOT_PATCH_ERROR):
    """Classify a failed shoot write.

    Conflicts and forbidden responses are transient and requeue the pass;
    anything else stops it with an error condition.
    """
    shoot_name = system_state.runtime.spec.shoot.name
    requeue_after = deps.reconciler_config.gardener_requeue_duration

    if is_conflict(err):
        logger.info(f"Gardener shoot {shoot_name} is outdated, retrying")
        return step(state, Event.CONFLICT, requeue_after=requeue_after)

    # Gardener occasionally answers properly authorised requests with 403.
    if is_forbidden(err):
        logger.info(f"Gardener shoot {shoot_name} is forbidden, retrying")
        return step(state, Event.FORBIDDEN, requeue_after=requeue_after)

    logger.error(f"Failed to write shoot {shoot_name}, exiting with no retry: {err}")
    return stop_with_error(
        deps,
        system_state,
        state,
        CONDITION_REASON_PROCESSING_ERR,
        f"{status_msg}: {err}",
        error=err,
    )


def resolve_audit_log_data(deps, system_state, state):
    """Return ``(data, None)`` or ``(None, stop_result)``.

    Missing audit log data only stops the pass when audit logs are mandatory;
    otherwise the pass continues with empty data.
    """
    runtime = system_state.runtime
    try:
        data = deps.audit_log_resolver.get_audit_log_data(
            runtime.spec.shoot.provider.type, runtime.spec.shoot.region
        )
        return data, None
    except AuditLogDataError as e:
        logger.error(f"{MSG_FAILED_TO_CONFIGURE_AUDIT_LOGS} for runtime {runtime.name}: {e}")
        if deps.reconciler_config.audit_log_mandatory:
            return None, stop_with_error(
                deps,
                system_state,
                state,
                CONDITION_REASON_AUDIT_LOG_ERROR,
                MSG_FAILED_TO_CONFIGURE_AUDIT_LOGS,
                error=e,
            )

    logger.warning(f"Continuing without audit logs for runtime {runtime.name}")
    return AuditLogData(), None
