"""Kopf handlers for Runtime custom resources."""

import logging

import kopf

from infra_manager.crd.registry import api_coordinates
from infra_manager.errors import is_not_found
from infra_manager.models.runtime import Runtime
from infra_manager.reconciler import Effect, RuntimeStateMachine, SystemState

logger = logging.getLogger(__name__)

GROUP, VERSION, PLURAL = api_coordinates(Runtime)

# Set once at operator startup; shared by every reconciliation.
_deps = None


def configure(deps):
    global _deps
    _deps = deps


def get_deps():
    if _deps is None:
        raise kopf.PermanentError("runtime handler used before operator startup")
    return _deps


def read_current_shoot(deps, runtime):
    """Return the runtime's shoot, or ``None`` when it does not exist yet."""
    try:
        return deps.shoot_client.get(runtime.spec.shoot.name)
    except Exception as e:
        if is_not_found(e):
            return None
        raise


def write_status(patch, runtime):
    patch.status.update(runtime.status.model_dump(mode="json", exclude_none=True))


def apply_effect(result, runtime, patch, meta):
    """Carry out the effect of a finished reconciliation pass.

    Requeues are expressed as ``kopf.TemporaryError``; kopf still applies
    ``patch`` when a handler fails with it.
    """
    effect = result.effect

    if effect in (Effect.UPDATE_STATUS_AND_STOP, Effect.UPDATE_STATUS_AND_REQUEUE_AFTER):
        write_status(patch, runtime)

    if effect == Effect.UPDATE_STATUS_AND_STOP:
        condition = runtime.status.conditions[-1] if runtime.status.conditions else None
        kopf.warn(
            meta,
            reason=condition.reason if condition else "ReconciliationStopped",
            message=condition.message if condition else str(result.error),
        )
        return

    if effect == Effect.REQUEUE:
        raise kopf.TemporaryError(f"Runtime {runtime.name} requeued", delay=1)

    if effect in (Effect.REQUEUE_AFTER, Effect.UPDATE_STATUS_AND_REQUEUE_AFTER):
        raise kopf.TemporaryError(
            f"Runtime {runtime.name} requeued after {result.requeue_after}s",
            delay=result.requeue_after,
        )

    kopf.info(meta, reason="ShootReconciled", message=f"Shoot for {runtime.name} is up to date")


def reconcile(deps, body, patch, meta):
    runtime = Runtime.from_body(body)
    if runtime.metadata.deletionTimestamp:
        logger.info(f"Runtime {runtime.name} is being deleted, skipping reconciliation")
        return

    try:
        shoot = read_current_shoot(deps, runtime)
    except Exception as e:
        logger.error(f"Failed to read shoot for runtime {runtime.name}: {e}")
        raise kopf.TemporaryError(
            f"Could not read shoot: {e}",
            delay=deps.reconciler_config.gardener_requeue_duration,
        ) from e

    result = RuntimeStateMachine(deps).run(SystemState(runtime=runtime, shoot=shoot))
    apply_effect(result, runtime, patch, meta)


@kopf.on.create(GROUP, VERSION, PLURAL)
@kopf.on.update(GROUP, VERSION, PLURAL)
@kopf.on.resume(GROUP, VERSION, PLURAL)
def reconcile_runtime(body, meta, patch, name, namespace, **kwargs):
    logger.info(f"Reconciling runtime {namespace}/{name}")
    reconcile(get_deps(), body, patch, meta)
