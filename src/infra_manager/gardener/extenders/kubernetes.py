"""Kubernetes version of the shoot."""

import logging

from infra_manager.gardener.pipeline import Extender

logger = logging.getLogger(__name__)


def _parse_version(version):
    try:
        return tuple(int(part) for part in version.split("."))
    except (AttributeError, ValueError):
        return None


def is_lower_version(version, other):
    """True if ``version`` is strictly lower than ``other``; False if incomparable."""
    parsed, parsed_other = _parse_version(version), _parse_version(other)
    if parsed is None or parsed_other is None:
        return False
    return parsed < parsed_other


class KubernetesExtender(Extender):
    """Picks the Kubernetes version: Runtime, else current shoot, else default.

    A version lower than the one the shoot currently runs is never applied,
    since Gardener does not support downgrades.
    """

    def __init__(self, default_version, current_version=""):
        self.default_version = default_version
        self.current_version = current_version or ""

    def apply(self, runtime, shoot):
        version = runtime.spec.shoot.kubernetes.version or self.current_version or self.default_version
        if not version:
            raise ValueError("no Kubernetes version requested and no default configured")

        if self.current_version and is_lower_version(version, self.current_version):
            logger.info(
                f"Keeping Kubernetes version {self.current_version} for {runtime.name}, "
                f"requested {version} would be a downgrade"
            )
            version = self.current_version

        shoot.spec.kubernetes.version = version
