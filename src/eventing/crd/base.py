"""Base classes for CRD specifications and status conditions."""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


def get_timestamp():
    """Current UTC time at the precision the API server persists."""
    return datetime.now(timezone.utc).replace(microsecond=0)


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class ConditionStatus(str, Enum):
    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


class ConditionSeverity(str, Enum):
    """Severity of a non-True condition. Absent means Error."""

    ERROR = "Error"
    WARNING = "Warning"
    INFO = "Info"


class Condition(BaseModel):
    """A single observed aspect of a resource's state."""

    type: str = Field(..., description="Type of the condition, unique per resource")
    status: ConditionStatus = Field(
        ..., description='Status of the condition: "True", "False" or "Unknown"'
    )
    reason: str = Field(
        default="", description="Machine-readable reason for the last transition"
    )
    message: str = Field(
        default="", description="Human-readable details about the last transition"
    )
    lastTransitionTime: Optional[datetime] = Field(
        default=None,
        description="Last time the condition transitioned from one status to another",
    )
    severity: Optional[ConditionSeverity] = Field(
        default=None, description="Severity of the condition when it is not True"
    )

    @property
    def is_true(self):
        return self.status == ConditionStatus.TRUE

    @property
    def is_false(self):
        return self.status == ConditionStatus.FALSE

    @property
    def is_unknown(self):
        return self.status == ConditionStatus.UNKNOWN

    def to_dict(self):
        """Serialise to the shape stored under ``status.conditions``."""
        data = {"type": self.type, "status": self.status.value}
        if self.reason:
            data["reason"] = self.reason
        if self.message:
            data["message"] = self.message
        if self.lastTransitionTime is not None:
            data["lastTransitionTime"] = format_timestamp(self.lastTransitionTime)
        if self.severity is not None:
            data["severity"] = self.severity.value
        return data


class CRDStatus(BaseModel):
    """Base class for all CRD status objects.

    Implements the conditions accessor so any status can be bound to a
    ``ConditionManager`` through ``ConditionSet.manage``.
    """

    phase: Optional[str] = None
    conditions: List[Condition] = Field(default_factory=list)
    observedGeneration: Optional[int] = None

    class Config:
        extra = "allow"

    def get_conditions(self) -> List[Condition]:
        return self.conditions

    def set_conditions(self, conditions: List[Condition]):
        self.conditions = list(conditions)

    def to_dict(self):
        """JSON-ready status suitable for ``patch.status``."""
        data = self.model_dump(mode="json", exclude_none=True, exclude={"conditions"})
        data["conditions"] = [c.to_dict() for c in self.conditions]
        return data


class CRDSpec(BaseModel):
    """Base class for all CRD spec objects."""

    class Config:
        extra = "forbid"
        validate_assignment = True
