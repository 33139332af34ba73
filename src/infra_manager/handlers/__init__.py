"""Handler modules for the infrastructure manager operator."""

from . import runtime_handler

__all__ = ["runtime_handler"]
