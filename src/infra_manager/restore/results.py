"""Per-runtime outcome of a restore run."""

from typing import List, Optional

from pydantic import BaseModel, Field

STATUS_SUCCESS = "Success"
STATUS_ERROR = "Error"
STATUS_SKIPPED = "Skipped"
STATUS_UPDATE_DETECTED = "UpdateDetected"


class RuntimeResult(BaseModel):
    runtimeId: str
    shootName: str
    status: str
    errorMessage: Optional[str] = None
    restoredCRBs: Optional[List[str]] = None
    restoredOIDCs: Optional[List[str]] = None


class RestoreResults(BaseModel):
    """Append-only record of a restore run."""

    results: List[RuntimeResult] = Field(default_factory=list)
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    update_detected: int = 0
    output_directory: str = ""

    def error_occurred(self, runtime_id, shoot_name, error_msg):
        self.failed += 1
        self.results.append(
            RuntimeResult(
                runtimeId=runtime_id,
                shootName=shoot_name,
                status=STATUS_ERROR,
                errorMessage=error_msg,
            )
        )

    def operation_succeeded(self, runtime_id, shoot_name, applied_crbs=None, applied_oidcs=None):
        self.succeeded += 1
        self.results.append(
            RuntimeResult(
                runtimeId=runtime_id,
                shootName=shoot_name,
                status=STATUS_SUCCESS,
                restoredCRBs=[_name(o) for o in applied_crbs] if applied_crbs else None,
                restoredOIDCs=[_name(o) for o in applied_oidcs] if applied_oidcs else None,
            )
        )

    def operation_skipped(self, runtime_id, shoot_name):
        self.skipped += 1
        self.results.append(
            RuntimeResult(runtimeId=runtime_id, shootName=shoot_name, status=STATUS_SKIPPED)
        )

    def automatic_restore_impossible(self, runtime_id, shoot_name):
        self.update_detected += 1
        self.results.append(
            RuntimeResult(
                runtimeId=runtime_id, shootName=shoot_name, status=STATUS_UPDATE_DETECTED
            )
        )

    def summary(self):
        return {
            "succeeded": self.succeeded,
            "failed": self.failed,
            "skipped": self.skipped,
            "updateDetected": self.update_detected,
        }

    def to_report(self):
        return {
            **self.summary(),
            "results": [r.model_dump(exclude_none=True) for r in self.results],
        }


def _name(obj):
    return obj.get("metadata", {}).get("name", "")
