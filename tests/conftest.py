"""
Pytest fixtures for infra-manager tests.

The fakes below stand in for the Gardener and control plane APIs; no cluster
is needed.
"""
import pytest
from kubernetes.client.exceptions import ApiException

from infra_manager.config import (
    AuditLogConfig,
    ConverterConfig,
    DNSConfig,
    GardenerConfig,
    KubernetesConfig,
    MachineImageConfig,
    OidcDefaults,
    ReconcilerConfig,
)
from infra_manager.errors import AuditLogDataError
from infra_manager.gardener.auditlogs import AuditLogData
from infra_manager.gardener.converter import Converter, CreateOpts
from infra_manager.metrics import Metrics
from infra_manager.models.runtime import REQUIRED_LABELS, LABEL_RUNTIME_ID, Runtime
from infra_manager.reconciler import Deps


def api_error(status):
    return ApiException(status=status, reason=f"status {status}")


class FakeShootClient:
    """In-memory shoot store keyed by name.

    ``apply`` bumps the stored generation by ``generation_bump``; set it to 0
    to simulate an apply that changed nothing. ``create`` starts a shoot at
    generation 1.
    """

    def __init__(self, namespace="garden-kyma", shoots=None):
        self.namespace = namespace
        self.shoots = {s.name: s.model_copy(deep=True) for s in (shoots or [])}
        self.generation_bump = 1
        self.updated = []
        self.applied = []
        self.created = []
        self.update_error = None
        self.apply_errors = {}
        self.create_errors = {}

    def get(self, name):
        if name not in self.shoots:
            raise api_error(404)
        return self.shoots[name].model_copy(deep=True)

    def list(self):
        return [s.model_copy(deep=True) for s in self.shoots.values()]

    def update(self, shoot):
        if self.update_error is not None:
            raise self.update_error
        self.updated.append(shoot.model_copy(deep=True))
        stored = shoot.model_copy(deep=True)
        stored.metadata.generation = (shoot.generation or 0) + 1
        self.shoots[shoot.name] = stored
        return stored.model_copy(deep=True)

    def apply(self, shoot):
        error = self.apply_errors.get(shoot.name)
        if error is not None:
            raise error
        self.applied.append(shoot.model_copy(deep=True))
        previous = self.shoots.get(shoot.name)
        stored = shoot.model_copy(deep=True)
        base = previous.generation if previous and previous.generation else 0
        stored.metadata.generation = base + self.generation_bump
        self.shoots[shoot.name] = stored
        return stored.model_copy(deep=True)

    def create(self, shoot):
        error = self.create_errors.get(shoot.name)
        if error is not None:
            raise error
        if shoot.name in self.shoots:
            raise api_error(409)
        self.created.append(shoot.model_copy(deep=True))
        stored = shoot.model_copy(deep=True)
        stored.metadata.generation = 1
        self.shoots[shoot.name] = stored
        return stored.model_copy(deep=True)


class FakeRuntimeClient:
    def __init__(self):
        self.removed = []
        self.error = None

    def remove_annotation(self, runtime, key):
        if self.error is not None:
            raise self.error
        self.removed.append((runtime.name, key))
        annotations = dict(runtime.metadata.annotations)
        annotations.pop(key, None)
        runtime.metadata.annotations = annotations


class FakeAuditLogResolver:
    def __init__(self, data=None, error=None):
        self.data = data
        self.error = error

    def get_audit_log_data(self, provider_type, region):
        if self.error is not None:
            raise self.error
        return self.data or AuditLogData()


class FakeClusterClient:
    def __init__(self):
        self.crbs = []
        self.oidcs = []

    def update_cluster_role_binding(self, crb):
        self.crbs.append(crb)

    def update_oidc(self, oidc):
        self.oidcs.append(oidc)


class FakeClusterAccessor:
    def __init__(self):
        self.clients = {}

    def get_client(self, runtime_id):
        return self.clients.setdefault(runtime_id, FakeClusterClient())


def runtime_body(name="runtime-1", shoot_name="shoot-1", runtime_id="rt-1", workers=None, **shoot):
    labels = {label: f"value-{i}" for i, label in enumerate(REQUIRED_LABELS)}
    labels[LABEL_RUNTIME_ID] = runtime_id
    labels["kyma-project.io/global-account-id"] = "ga-1"
    labels["kyma-project.io/subaccount-id"] = "sa-1"

    if workers is None:
        workers = [worker("pool-1")]

    shoot_spec = {
        "name": shoot_name,
        "purpose": "production",
        "region": "eu-west-1",
        "platformRegion": "cf-eu10",
        "secretBindingName": "sb-aws",
        "networking": {
            "nodes": "10.250.0.0/16",
            "pods": "100.64.0.0/12",
            "services": "100.104.0.0/13",
        },
        "provider": {"type": "aws", "workers": workers},
        "kubernetes": {},
    }
    shoot_spec.update(shoot)

    return {
        "apiVersion": "infrastructuremanager.kyma-project.io/v1",
        "kind": "Runtime",
        "metadata": {
            "name": name,
            "namespace": "kcp-system",
            "labels": labels,
            "annotations": {},
            "generation": 1,
        },
        "spec": {
            "shoot": shoot_spec,
            "security": {"administrators": ["admin@example.com"]},
        },
    }


def worker(name, minimum=1, maximum=3, zones=None, machine_type="m6i.large"):
    return {
        "name": name,
        "machine": {"type": machine_type},
        "minimum": minimum,
        "maximum": maximum,
        "zones": zones or ["eu-west-1a"],
    }


@pytest.fixture
def converter_config():
    """Converter configuration for the ``kyma`` Gardener project."""
    return ConverterConfig(
        kubernetes=KubernetesConfig(
            defaultVersion="1.30",
            defaultOperatorOidc=OidcDefaults(
                clientID="default-client",
                issuerURL="https://issuer.example.com",
            ),
        ),
        dns=DNSConfig(
            secretName="aws-route53-secret",
            domainPrefix="dev.kyma.ondemand.com",
            providerType="aws-route53",
        ),
        machineImage=MachineImageConfig(defaultName="gardenlinux", defaultVersion="1592.1.0"),
        gardener=GardenerConfig(projectName="kyma"),
        auditLogging=AuditLogConfig(policyConfigMapName="policy-config-map"),
    )


@pytest.fixture
def audit_log_data():
    return AuditLogData(
        tenantID="tenant-1",
        serviceURL="https://auditlog.example.com",
        secretName="auditlog-secret",
    )


@pytest.fixture
def runtime():
    return Runtime.from_body(runtime_body())


@pytest.fixture
def make_runtime():
    def _make(**kwargs):
        return Runtime.from_body(runtime_body(**kwargs))

    return _make


@pytest.fixture
def make_shoot(converter_config):
    """Shoot as created from a Runtime, stored with the given generation."""

    def _make(runtime, generation=5, k8s_version=None):
        shoot = Converter.for_create(CreateOpts(converter_config=converter_config)).to_shoot(runtime)
        shoot.metadata.generation = generation
        if k8s_version is not None:
            shoot.spec.kubernetes.version = k8s_version
        return shoot

    return _make


@pytest.fixture
def shoot_client():
    return FakeShootClient()


@pytest.fixture
def deps(converter_config, shoot_client):
    return Deps(
        shoot_client=shoot_client,
        runtime_client=FakeRuntimeClient(),
        audit_log_resolver=FakeAuditLogResolver(error=AuditLogDataError("no tenant")),
        converter_config=converter_config,
        reconciler_config=ReconcilerConfig(audit_log_mandatory=False),
        metrics=Metrics(),
    )
