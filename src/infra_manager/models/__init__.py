"""Pydantic models for the Runtime and Shoot resources."""

# Import all models to ensure they're registered
from . import runtime
from . import shoot

__all__ = ["runtime", "shoot"]
