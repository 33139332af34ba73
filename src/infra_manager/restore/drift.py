"""Classify how far a live shoot moved away from its backup."""

import enum

from infra_manager.errors import NegativeDriftError


class DriftOutcome(enum.Enum):
    UNCHANGED = "Unchanged"
    SAFE_TO_APPLY = "SafeToApply"
    AMBIGUOUS_MANUAL_REQUIRED = "AmbiguousManualRequired"


def classify_drift(original_generation, current_generation):
    """Compare generations of the same shoot.

    One generation step means exactly the uncaptured mutation happened and the
    backup can be applied. More than one means other changes may be lost, so a
    human has to decide. A lower current generation can't happen for a healthy
    object and raises ``NegativeDriftError``.
    """
    delta = current_generation - original_generation
    if delta < 0:
        raise NegativeDriftError(original_generation, current_generation)
    if delta == 0:
        return DriftOutcome.UNCHANGED
    if delta == 1:
        return DriftOutcome.SAFE_TO_APPLY
    return DriftOutcome.AMBIGUOUS_MANUAL_REQUIRED
