"""Create state: provision the shoot of a new Runtime."""

import logging

from infra_manager.gardener.converter import Converter, CreateOpts
from infra_manager.models.runtime import (
    CONDITION_REASON_CONVERSION_ERROR,
    CONDITION_REASON_PROCESSING,
    CONDITION_TYPE_RUNTIME_PROVISIONED,
)
from infra_manager.reconciler.common import (
    MSG_CONVERSION_ERROR,
    MSG_SHOOT_CREATE_ERROR,
    handle_update_error,
    resolve_audit_log_data,
    stop_with_error,
)
from infra_manager.reconciler.fsm import Event, State, step

logger = logging.getLogger(__name__)

MSG_SHOOT_CREATED = "Shoot is pending"


def sfn_create_shoot(deps, system_state):
    runtime = system_state.runtime
    logger.info(f"Create shoot state for runtime {runtime.name}")

    audit_log_data, stop = resolve_audit_log_data(deps, system_state, State.CREATE_SHOOT)
    if stop is not None:
        return stop

    try:
        runtime.validate_required_labels()
        converter = Converter.for_create(
            CreateOpts(converter_config=deps.converter_config, audit_log_data=audit_log_data)
        )
        shoot = converter.to_shoot(runtime)
    except Exception as e:
        logger.error(
            f"Failed to convert runtime {runtime.name} to shoot object, exiting with no retry: {e}"
        )
        return stop_with_error(
            deps,
            system_state,
            State.CREATE_SHOOT,
            CONDITION_REASON_CONVERSION_ERROR,
            MSG_CONVERSION_ERROR,
            error=e,
        )

    try:
        created = deps.shoot_client.create(shoot)
    except Exception as e:
        return handle_update_error(
            deps, system_state, State.CREATE_SHOOT, e, status_msg=MSG_SHOOT_CREATE_ERROR
        )

    system_state.shoot = created
    logger.info(f"Gardener shoot {created.namespace}/{created.name} created for runtime {runtime.name}")
    runtime.status.update_state_pending(
        CONDITION_TYPE_RUNTIME_PROVISIONED,
        CONDITION_REASON_PROCESSING,
        "Unknown",
        MSG_SHOOT_CREATED,
    )
    return step(
        State.CREATE_SHOOT,
        Event.SHOOT_CREATED,
        requeue_after=deps.reconciler_config.gardener_requeue_duration,
    )
