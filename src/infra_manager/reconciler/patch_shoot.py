"""Patch state: bring an existing shoot in line with its Runtime."""

import logging

from infra_manager.gardener.converter import Converter, PatchOpts
from infra_manager.models.runtime import (
    CONDITION_REASON_CONVERSION_ERROR,
    CONDITION_REASON_PROCESSING,
    CONDITION_TYPE_RUNTIME_PROVISIONED,
    FORCE_RECONCILE_ANNOTATION,
)
from infra_manager.models.shoot import workers_are_equal
from infra_manager.reconciler.common import (
    MSG_CONVERSION_ERROR,
    handle_update_error,
    resolve_audit_log_data,
    stop_with_error,
)
from infra_manager.reconciler.fsm import Event, State, step

logger = logging.getLogger(__name__)

MSG_SHOOT_PENDING = "Shoot is pending for update"


def convert_patch(runtime, opts):
    runtime.validate_required_labels()
    return Converter.for_patch(opts).to_shoot(runtime)


def handle_force_reconciliation_annotation(deps, runtime):
    if runtime.should_force_reconciliation():
        logger.info(
            f"Force reconciliation annotation found on {runtime.name}, removing it and continuing"
        )
        deps.runtime_client.remove_annotation(runtime, FORCE_RECONCILE_ANNOTATION)


def patch_opts_from_shoot(deps, audit_log_data, current):
    provider = current.spec.provider
    return PatchOpts(
        converter_config=deps.converter_config,
        audit_log_data=audit_log_data,
        workers=provider.workers if provider else [],
        shoot_k8s_version=current.spec.kubernetes.version or "",
        extensions=current.spec.extensions,
        resources=current.spec.resources,
        infrastructure_config=provider.infrastructureConfig if provider else None,
        control_plane_config=provider.controlPlaneConfig if provider else None,
    )


def sfn_patch_shoot(deps, system_state):
    """Patch the existing shoot from the Runtime.

    Returns a ``StepResult``; never raises for API or conversion failures.
    """
    runtime = system_state.runtime
    current = system_state.shoot

    logger.info(f"Patch shoot state for runtime {runtime.name}")

    audit_log_data, stop = resolve_audit_log_data(deps, system_state, State.PATCH_SHOOT)
    if stop is not None:
        return stop

    try:
        updated = convert_patch(runtime, patch_opts_from_shoot(deps, audit_log_data, current))
    except Exception as e:
        logger.error(
            f"Failed to convert runtime {runtime.name} to shoot object, exiting with no retry: {e}"
        )
        return stop_with_error(
            deps,
            system_state,
            State.PATCH_SHOOT,
            CONDITION_REASON_CONVERSION_ERROR,
            MSG_CONVERSION_ERROR,
            error=e,
        )

    logger.info(f"Shoot converted successfully: {updated.namespace}/{updated.name}")

    # Apply patches cannot remove list entries, so a changed worker collection
    # is first written with a full update.
    current_provider = current.spec.provider
    if current_provider is not None and not workers_are_equal(
        current_provider.workers, updated.spec.provider.workers
    ):
        replacement = current.model_copy(deep=True)
        replacement.spec.provider.workers = [
            w.model_copy(deep=True) for w in updated.spec.provider.workers
        ]
        try:
            deps.shoot_client.update(replacement)
        except Exception as e:
            return handle_update_error(deps, system_state, State.PATCH_SHOOT, e)

    try:
        applied = deps.shoot_client.apply(updated)
    except Exception as e:
        return handle_update_error(deps, system_state, State.PATCH_SHOOT, e)

    try:
        handle_force_reconciliation_annotation(deps, runtime)
    except Exception as e:
        logger.error(
            f"Could not handle force reconciliation annotation for {runtime.name}, "
            f"scheduling for retry: {e}"
        )
        return step(State.PATCH_SHOOT, Event.ANNOTATION_UPDATE_FAILED)

    if applied.generation == current.generation:
        logger.info(
            f"Gardener shoot {current.namespace}/{current.name} did not change after patch, "
            "moving to next phase"
        )
        return step(State.PATCH_SHOOT, Event.GENERATION_UNCHANGED)

    logger.info(f"Gardener shoot {current.namespace}/{current.name} patched successfully")
    runtime.status.update_state_pending(
        CONDITION_TYPE_RUNTIME_PROVISIONED,
        CONDITION_REASON_PROCESSING,
        "Unknown",
        MSG_SHOOT_PENDING,
    )
    return step(
        State.PATCH_SHOOT,
        Event.GENERATION_CHANGED,
        requeue_after=deps.reconciler_config.gardener_requeue_duration,
    )
