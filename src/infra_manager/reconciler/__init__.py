"""Runtime reconciliation state machine."""

from .fsm import (
    Deps,
    Effect,
    Event,
    RuntimeStateMachine,
    State,
    StepResult,
    SystemState,
    transition,
)
from .create_shoot import sfn_create_shoot
from .patch_shoot import sfn_patch_shoot

__all__ = [
    "Deps",
    "Effect",
    "Event",
    "RuntimeStateMachine",
    "State",
    "StepResult",
    "SystemState",
    "sfn_create_shoot",
    "sfn_patch_shoot",
    "transition",
]
