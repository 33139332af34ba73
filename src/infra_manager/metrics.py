"""Prometheus counters exposed by the reconciler."""

import logging

from prometheus_client import CollectorRegistry, Counter, start_http_server

logger = logging.getLogger(__name__)

RUNTIME_FSM_STOP_METRIC = "im_runtime_fsm_stop"


class Metrics:
    """Operator metrics kept in their own collector registry.

    Each instance owns a registry unless one is passed in.
    """

    def __init__(self, registry=None):
        self.registry = registry if registry is not None else CollectorRegistry()
        self.runtime_fsm_stop_counter = Counter(
            RUNTIME_FSM_STOP_METRIC,
            "Number of runtime reconciliations stopped on a non-retryable error",
            registry=self.registry,
        )

    def inc_runtime_fsm_stop_counter(self):
        self.runtime_fsm_stop_counter.inc()

    @property
    def runtime_fsm_stop_count(self):
        return self.registry.get_sample_value(f"{RUNTIME_FSM_STOP_METRIC}_total") or 0

    def serve(self, port):
        """Expose the registry over HTTP on ``port``."""
        start_http_server(port, registry=self.registry)
        logger.info(f"Serving metrics on port {port}")
