"""States, events and transitions of one runtime reconciliation pass.

A pass starts in ``State.CREATE_SHOOT`` when the Runtime has no shoot yet
and in ``State.PATCH_SHOOT`` otherwise. The state function for the current
state does its work, reports an ``Event``, and ``transition`` maps the
(state, event) pair to the next state and the effect the caller has to carry
out (persist status, requeue, advance).
"""

import enum
import logging
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel, ConfigDict

from infra_manager.config import ConverterConfig, ReconcilerConfig
from infra_manager.metrics import Metrics
from infra_manager.models.runtime import Runtime
from infra_manager.models.shoot import Shoot

logger = logging.getLogger(__name__)


class State(enum.Enum):
    CREATE_SHOOT = "CreateShoot"
    PATCH_SHOOT = "PatchShoot"
    REQUEUE = "Requeue"
    PENDING = "Pending"
    STOPPED = "Stopped"
    NEXT_PHASE = "NextPhase"


class Event(enum.Enum):
    CONFLICT = "Conflict"
    FORBIDDEN = "Forbidden"
    FATAL = "Fatal"
    ANNOTATION_UPDATE_FAILED = "AnnotationUpdateFailed"
    GENERATION_UNCHANGED = "GenerationUnchanged"
    GENERATION_CHANGED = "GenerationChanged"
    SHOOT_CREATED = "ShootCreated"


class Effect(enum.Enum):
    REQUEUE = "Requeue"
    REQUEUE_AFTER = "RequeueAfter"
    UPDATE_STATUS_AND_STOP = "UpdateStatusAndStop"
    UPDATE_STATUS_AND_REQUEUE_AFTER = "UpdateStatusAndRequeueAfter"
    ADVANCE = "Advance"


TERMINAL_STATES = {State.REQUEUE, State.PENDING, State.STOPPED, State.NEXT_PHASE}

TRANSITIONS = {
    (State.CREATE_SHOOT, Event.CONFLICT): (State.REQUEUE, Effect.REQUEUE_AFTER),
    (State.CREATE_SHOOT, Event.FORBIDDEN): (State.REQUEUE, Effect.REQUEUE_AFTER),
    (State.CREATE_SHOOT, Event.FATAL): (State.STOPPED, Effect.UPDATE_STATUS_AND_STOP),
    (State.CREATE_SHOOT, Event.SHOOT_CREATED): (
        State.PENDING,
        Effect.UPDATE_STATUS_AND_REQUEUE_AFTER,
    ),
    (State.PATCH_SHOOT, Event.CONFLICT): (State.REQUEUE, Effect.REQUEUE_AFTER),
    (State.PATCH_SHOOT, Event.FORBIDDEN): (State.REQUEUE, Effect.REQUEUE_AFTER),
    (State.PATCH_SHOOT, Event.FATAL): (State.STOPPED, Effect.UPDATE_STATUS_AND_STOP),
    (State.PATCH_SHOOT, Event.ANNOTATION_UPDATE_FAILED): (State.REQUEUE, Effect.REQUEUE),
    (State.PATCH_SHOOT, Event.GENERATION_UNCHANGED): (State.NEXT_PHASE, Effect.ADVANCE),
    (State.PATCH_SHOOT, Event.GENERATION_CHANGED): (
        State.PENDING,
        Effect.UPDATE_STATUS_AND_REQUEUE_AFTER,
    ),
}


def transition(state, event):
    """Look up the next state and effect; unknown pairs raise ``ValueError``."""
    try:
        return TRANSITIONS[(state, event)]
    except KeyError:
        raise ValueError(f"no transition from {state.value} on {event.value}") from None


class StepResult(BaseModel):
    """Outcome of one state function."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    state: State
    effect: Effect
    event: Optional[Event] = None
    requeue_after: Optional[float] = None
    error: Optional[Exception] = None

    @property
    def is_terminal(self):
        return self.state in TERMINAL_STATES


class Deps(BaseModel):
    """Dependencies shared by all reconciliation passes."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    shoot_client: Any
    runtime_client: Any
    audit_log_resolver: Any
    converter_config: ConverterConfig
    reconciler_config: ReconcilerConfig
    metrics: Metrics


class SystemState(BaseModel):
    """Per-object state of one pass: the Runtime and its current shoot."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    runtime: Runtime
    shoot: Optional[Shoot] = None


def step(state, event, requeue_after=None, error=None):
    next_state, effect = transition(state, event)
    return StepResult(
        state=next_state,
        effect=effect,
        event=event,
        requeue_after=requeue_after,
        error=error,
    )


class RuntimeStateMachine:
    """Runs state functions until a terminal state is reached."""

    def __init__(self, deps, state_fns=None):
        self.deps = deps
        if state_fns is None:
            from infra_manager.reconciler.create_shoot import sfn_create_shoot
            from infra_manager.reconciler.patch_shoot import sfn_patch_shoot

            state_fns = {
                State.CREATE_SHOOT: sfn_create_shoot,
                State.PATCH_SHOOT: sfn_patch_shoot,
            }
        self.state_fns: Dict[State, Callable] = state_fns

    def run(self, system_state, initial=None):
        if initial is None:
            initial = State.PATCH_SHOOT if system_state.shoot is not None else State.CREATE_SHOOT
        state = initial
        while True:
            fn = self.state_fns.get(state)
            if fn is None:
                raise ValueError(f"no state function registered for {state.value}")

            logger.debug(f"Runtime {system_state.runtime.name}: entering {state.value}")
            result = fn(self.deps, system_state)
            logger.info(
                f"Runtime {system_state.runtime.name}: {state.value} -> "
                f"{result.state.value} ({result.effect.value})"
            )
            if result.is_terminal or result.error is not None:
                return result
            state = result.state
