"""Custom resource model base classes and registry."""

from .registry import CRDRegistry, api_coordinates
from .base import CRDSpec, CRDStatus, CRDMetadata, CRDCondition

__all__ = [
    "CRDRegistry",
    "api_coordinates",
    "CRDSpec",
    "CRDStatus",
    "CRDMetadata",
    "CRDCondition",
]
