import kopf
import logging
import kubernetes
import os

from infra_manager.config import ReconcilerConfig, load_converter_config
from infra_manager.gardener.auditlogs import AuditLogResolver
from infra_manager.gardener.client import RuntimeClient, ShootClient
from infra_manager.handlers import runtime_handler
from infra_manager.metrics import Metrics
from infra_manager.reconciler import Deps

logging.basicConfig(
    level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def load_control_plane_config():
    try:
        kubernetes.config.load_incluster_config()
        logger.info("Loaded in-cluster Kubernetes config")
    except kubernetes.config.ConfigException:
        kubernetes.config.load_kube_config()
        logger.info("Loaded local Kubernetes config")


def gardener_api_client():
    """Client for the Gardener project; falls back to the control plane config."""
    path = os.getenv("GARDENER_KUBECONFIG_PATH")
    if not path:
        return None
    logger.info(f"Using Gardener kubeconfig {path}")
    return kubernetes.config.new_client_from_config(config_file=path)


def build_deps():
    converter_config = load_converter_config(
        os.getenv("CONVERTER_CONFIG_PATH", "/converter-config/converter_config.json")
    )
    reconciler_config = ReconcilerConfig.from_env()

    namespace = f"garden-{converter_config.gardener.projectName}"
    shoot_client = ShootClient(
        namespace,
        api_client=gardener_api_client(),
        field_manager=reconciler_config.field_manager,
        timeout=reconciler_config.api_timeout,
    )
    return Deps(
        shoot_client=shoot_client,
        runtime_client=RuntimeClient(timeout=reconciler_config.api_timeout),
        audit_log_resolver=AuditLogResolver(converter_config.auditLogging.tenantConfigPath),
        converter_config=converter_config,
        reconciler_config=reconciler_config,
        metrics=Metrics(),
    )


@kopf.on.startup()
def startup_fn(settings: kopf.OperatorSettings, **kwargs):
    logger.info("Infrastructure manager is starting up...")

    load_control_plane_config()
    deps = build_deps()
    runtime_handler.configure(deps)
    deps.metrics.serve(deps.reconciler_config.metrics_port)

    settings.batching.worker_limit = int(os.getenv("WORKER_LIMIT", "5"))
    settings.posting.enabled = os.getenv("POSTING_ENABLED", "false").lower() == "true"
    settings.watching.server_timeout = int(os.getenv("SERVER_TIMEOUT", "60"))

    logger.info(f"Shoot namespace: {deps.shoot_client.namespace}")
    logger.info(f"Worker limit: {settings.batching.worker_limit}")
    logger.info(f"Audit logs mandatory: {deps.reconciler_config.audit_log_mandatory}")
    logger.info("Infrastructure manager startup complete")


@kopf.on.cleanup()
def cleanup_fn(**kwargs):
    logger.info("Infrastructure manager is shutting down...")
    runtime_handler.configure(None)


def main():
    try:
        kopf.run(clusterwide=True)
    except KeyboardInterrupt:
        logger.info("Operator stopped by user")
    except Exception as e:
        logger.error(f"Operator failed: {e}")
        raise


if __name__ == "__main__":
    main()
