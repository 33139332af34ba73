"""Ordered pipeline of shoot extenders."""

import logging
from abc import ABC, abstractmethod

from infra_manager.errors import ExtenderError

logger = logging.getLogger(__name__)


class Extender(ABC):
    """One transformation stage of the shoot pipeline.

    An extender reads the Runtime and mutates the shoot in place. It must not
    talk to remote APIs; any external data it needs is passed to its
    constructor. Running it twice with the same inputs gives the same shoot.
    """

    @property
    def name(self):
        return type(self).__name__

    @abstractmethod
    def apply(self, runtime, shoot):
        """Mutate ``shoot`` from ``runtime`` or raise."""
        pass


class ExtenderPipeline:
    """Runs extenders in order against the same shoot."""

    def __init__(self, extenders):
        self.extenders = list(extenders)

    def __len__(self):
        return len(self.extenders)

    def names(self):
        return [extender.name for extender in self.extenders]

    def run(self, runtime, shoot):
        """Apply every stage; the first failure stops the run.

        Raises:
            ExtenderError: wraps the failing stage's exception, which stays
                available as ``cause`` and ``__cause__``
        """
        for extender in self.extenders:
            try:
                extender.apply(runtime, shoot)
            except Exception as e:
                logger.error(
                    f"Extender {extender.name} failed for runtime {runtime.name}: {e}"
                )
                raise ExtenderError(extender.name, runtime.name, shoot.name, e) from e
