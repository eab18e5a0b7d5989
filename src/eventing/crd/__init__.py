"""CRD base models, registry and condition management."""

from .registry import CRDRegistry
from .base import Condition, ConditionSeverity, ConditionStatus, CRDSpec, CRDStatus
from .conditions import (
    ConditionManager,
    ConditionSet,
    ConditionsAccessor,
    UnknownConditionTypeError,
    new_batch_condition_set,
    new_living_condition_set,
)

__all__ = [
    "CRDRegistry",
    "CRDSpec",
    "CRDStatus",
    "Condition",
    "ConditionSeverity",
    "ConditionStatus",
    "ConditionManager",
    "ConditionSet",
    "ConditionsAccessor",
    "UnknownConditionTypeError",
    "new_batch_condition_set",
    "new_living_condition_set",
]
