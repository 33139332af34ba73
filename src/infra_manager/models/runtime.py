"""Runtime CRD models.

Only the fields read by the shoot converter are modelled; everything else on
the custom resource is carried through untouched.
"""

from pydantic import Field
from typing import List, Optional, Dict, Any

from infra_manager.crd.registry import CRDRegistry
from infra_manager.crd.base import CRDSpec, CRDStatus, CRDMetadata, to_plain
from infra_manager.errors import MissingLabelError

LABEL_INSTANCE_ID = "kyma-project.io/instance-id"
LABEL_RUNTIME_ID = "kyma-project.io/runtime-id"
LABEL_BROKER_PLAN_ID = "kyma-project.io/broker-plan-id"
LABEL_BROKER_PLAN_NAME = "kyma-project.io/broker-plan-name"
LABEL_GLOBAL_ACCOUNT_ID = "kyma-project.io/global-account-id"
LABEL_SUBACCOUNT_ID = "kyma-project.io/subaccount-id"
LABEL_SHOOT_NAME = "kyma-project.io/shoot-name"
LABEL_REGION = "kyma-project.io/region"
LABEL_KYMA_NAME = "operator.kyma-project.io/kyma-name"

REQUIRED_LABELS = [
    LABEL_INSTANCE_ID,
    LABEL_RUNTIME_ID,
    LABEL_BROKER_PLAN_ID,
    LABEL_BROKER_PLAN_NAME,
    LABEL_GLOBAL_ACCOUNT_ID,
    LABEL_SUBACCOUNT_ID,
    LABEL_SHOOT_NAME,
    LABEL_REGION,
    LABEL_KYMA_NAME,
]

FORCE_RECONCILE_ANNOTATION = "operator.kyma-project.io/force-patch-reconciliation"

# Runtime states
STATE_PENDING = "Pending"

# Condition types and reasons
CONDITION_TYPE_RUNTIME_PROVISIONED = "Provisioned"
CONDITION_REASON_PROCESSING = "Processing"
CONDITION_REASON_PROCESSING_ERR = "ProcessingErr"
CONDITION_REASON_CONVERSION_ERROR = "ConversionError"
CONDITION_REASON_AUDIT_LOG_ERROR = "AuditLogError"


class MachineImage(CRDSpec):
    name: Optional[str] = None
    version: Optional[str] = None


class Machine(CRDSpec):
    type: str = Field(..., description="Machine type, e.g. m6i.large")
    image: Optional[MachineImage] = Field(
        default=None, description="Machine image; provider default when omitted"
    )


class Volume(CRDSpec):
    type: Optional[str] = None
    size: Optional[str] = Field(default=None, description="Volume size, e.g. 50Gi")


class Worker(CRDSpec):
    """Worker pool as requested on the Runtime."""

    name: str = Field(..., description="Worker pool name")
    machine: Machine
    minimum: int = Field(..., description="Minimum number of nodes")
    maximum: int = Field(..., description="Maximum number of nodes")
    maxSurge: Optional[Any] = None
    maxUnavailable: Optional[Any] = None
    zones: List[str] = Field(default_factory=list)
    volume: Optional[Volume] = None


class Provider(CRDSpec):
    type: str = Field(..., description="Cloud provider type: aws, azure, gcp, openstack")
    workers: List[Worker] = Field(default_factory=list)
    additionalWorkers: Optional[List[Worker]] = None


class Networking(CRDSpec):
    type: Optional[str] = Field(default="calico")
    nodes: str = Field(..., description="Node CIDR")
    pods: str = Field(..., description="Pod CIDR")
    services: str = Field(..., description="Service CIDR")


class OidcConfig(CRDSpec):
    clientID: Optional[str] = None
    groupsClaim: Optional[str] = None
    issuerURL: Optional[str] = None
    signingAlgs: List[str] = Field(default_factory=list)
    usernameClaim: Optional[str] = None
    usernamePrefix: Optional[str] = None


class APIServer(CRDSpec):
    oidcConfig: Optional[OidcConfig] = None
    additionalOidcConfig: Optional[List[OidcConfig]] = None


class Kubernetes(CRDSpec):
    version: Optional[str] = Field(
        default=None, description="Requested Kubernetes version"
    )
    kubeAPIServer: APIServer = Field(default_factory=APIServer)


class RuntimeShoot(CRDSpec):
    """The shoot-facing part of a Runtime."""

    name: str = Field(..., description="Shoot name")
    purpose: str = Field(default="production")
    region: str = Field(..., description="Provider region")
    platformRegion: Optional[str] = None
    secretBindingName: str = Field(..., description="Gardener secret binding")
    licenceType: Optional[str] = None
    enforceSeedLocation: Optional[bool] = None
    controlPlane: Optional[Dict[str, Any]] = None
    networking: Networking
    provider: Provider
    kubernetes: Kubernetes = Field(default_factory=Kubernetes)


class EgressFilter(CRDSpec):
    enabled: bool = False


class NetworkingFilter(CRDSpec):
    egress: EgressFilter = Field(default_factory=EgressFilter)


class NetworkingSecurity(CRDSpec):
    filter: NetworkingFilter = Field(default_factory=NetworkingFilter)


class Security(CRDSpec):
    administrators: List[str] = Field(default_factory=list)
    networking: NetworkingSecurity = Field(default_factory=NetworkingSecurity)


class RuntimeSpec(CRDSpec):
    """Runtime CRD specification."""

    shoot: RuntimeShoot
    security: Security = Field(default_factory=Security)


class RuntimeStatus(CRDStatus):
    state: Optional[str] = None

    def update_state_pending(self, condition_type, reason, status, message):
        self.state = STATE_PENDING
        self.set_condition(condition_type, reason, status, message)


@CRDRegistry.register("infrastructuremanager.kyma-project.io", "v1", "Runtime", "runtimes")
class Runtime(CRDSpec):
    """A Runtime object as stored in the control plane."""

    apiVersion: str = "infrastructuremanager.kyma-project.io/v1"
    kind: str = "Runtime"
    metadata: CRDMetadata
    spec: RuntimeSpec
    status: RuntimeStatus = Field(default_factory=RuntimeStatus)

    @classmethod
    def from_body(cls, body):
        """Build a Runtime from a kopf body or a raw API dict."""
        body = to_plain(body)
        body["status"] = body.get("status") or {}
        return cls.model_validate(body)

    def to_manifest(self):
        return self.model_dump(mode="json", exclude_none=True)

    @property
    def name(self):
        return self.metadata.name

    @property
    def runtime_id(self):
        return self.metadata.labels.get(LABEL_RUNTIME_ID, "")

    def validate_required_labels(self):
        missing = [label for label in REQUIRED_LABELS if not self.metadata.labels.get(label)]
        if missing:
            raise MissingLabelError(missing)

    def should_force_reconciliation(self):
        return self.metadata.annotations.get(FORCE_RECONCILE_ANNOTATION) == "true"
