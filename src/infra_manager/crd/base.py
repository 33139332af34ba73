"""Base classes for custom resource models."""

from pydantic import BaseModel, Field
from typing import Optional, Dict, List
from collections.abc import Mapping
from datetime import datetime, timezone


class CRDMetadata(BaseModel):
    """Standard Kubernetes object metadata."""

    name: str
    namespace: Optional[str] = None
    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)
    generation: Optional[int] = None
    resourceVersion: Optional[str] = None
    deletionTimestamp: Optional[str] = None

    class Config:
        extra = "allow"


class CRDCondition(BaseModel):
    """Custom Kubernetes condition."""

    type: str
    status: str  # True, False, Unknown
    reason: str
    message: str
    lastTransitionTime: Optional[datetime] = None


class CRDStatus(BaseModel):
    """Base class for all CRD status objects."""

    phase: Optional[str] = None
    conditions: List[CRDCondition] = Field(default_factory=list)
    observedGeneration: Optional[int] = None

    class Config:
        extra = "allow"

    def set_condition(self, condition_type, reason, status, message):
        """Insert or replace the condition of the given type."""
        condition = CRDCondition(
            type=condition_type,
            status=status,
            reason=reason,
            message=message,
            lastTransitionTime=datetime.now(timezone.utc),
        )
        for i, existing in enumerate(self.conditions):
            if existing.type == condition_type:
                if (
                    existing.status == status
                    and existing.reason == reason
                    and existing.message == message
                ):
                    return
                self.conditions[i] = condition
                return
        self.conditions.append(condition)

    def get_condition(self, condition_type):
        for condition in self.conditions:
            if condition.type == condition_type:
                return condition
        return None


class CRDSpec(BaseModel):
    """Base class for all CRD spec objects.

    Unknown fields are kept so objects read from the API server survive a
    round trip through the model.
    """

    class Config:
        extra = "allow"
        validate_assignment = True


def to_plain(value):
    """Recursively convert mapping views (e.g. kopf bodies) into plain dicts."""
    if isinstance(value, Mapping):
        return {k: to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    return value
