"""Condition sets and the manager that derives a resource's happy condition.

A ``ConditionSet`` declares, once per resource kind, which condition types are
dependents and which single type is the happy (aggregate) condition. Binding
the set to a status object with ``ConditionSet.manage`` returns a
``ConditionManager`` that mutates the dependents and recomputes the happy
condition after every change.

The manager performs no I/O and no locking: callers own the status object for
the duration of a reconcile pass.
"""

import logging
from typing import Callable, Iterable, List, Mapping, Optional, Protocol, runtime_checkable

from .base import Condition, ConditionSeverity, ConditionStatus, get_timestamp

logger = logging.getLogger(__name__)

CONDITION_READY = "Ready"
CONDITION_SUCCEEDED = "Succeeded"


class UnknownConditionTypeError(ValueError):
    """Raised when mutating a condition type the set does not declare as a dependent."""


@runtime_checkable
class ConditionsAccessor(Protocol):
    """Capability a status object exposes to be condition-managed."""

    def get_conditions(self) -> List[Condition]: ...

    def set_conditions(self, conditions: List[Condition]): ...


class ConditionSet:
    """Immutable declaration of a happy condition and its dependents."""

    __slots__ = ("_happy", "_dependents")

    def __init__(self, happy: str, dependents: Iterable[str]):
        if isinstance(dependents, str):
            dependents = [dependents]
        dependents = frozenset(dependents)

        if not happy:
            raise ValueError("happy condition type must be a non-empty string")
        if not dependents:
            raise ValueError(f"condition set for {happy} needs at least one dependent")
        if any(not t for t in dependents):
            raise ValueError("dependent condition types must be non-empty strings")
        if happy in dependents:
            raise ValueError(f"happy condition {happy} cannot also be a dependent")

        object.__setattr__(self, "_happy", happy)
        object.__setattr__(self, "_dependents", dependents)

    def __setattr__(self, name, value):
        raise AttributeError("ConditionSet is immutable")

    def __delattr__(self, name):
        raise AttributeError("ConditionSet is immutable")

    def __repr__(self):
        return f"ConditionSet(happy={self._happy!r}, dependents={sorted(self._dependents)!r})"

    @property
    def happy(self) -> str:
        return self._happy

    @property
    def dependents(self) -> frozenset:
        return self._dependents

    @property
    def types(self) -> List[str]:
        """Every tracked type, happy included, in lexicographic order."""
        return sorted(self._dependents | {self._happy})

    def is_dependent(self, condition_type: str) -> bool:
        return condition_type in self._dependents

    def manage(self, accessor, clock: Callable = get_timestamp):
        """Bind this set to a status object implementing ``ConditionsAccessor``."""
        if not isinstance(accessor, ConditionsAccessor):
            raise TypeError(
                f"{type(accessor).__name__} does not implement get_conditions/set_conditions"
            )
        return ConditionManager(self, accessor, clock=clock)


def new_living_condition_set(*dependents: str) -> ConditionSet:
    """Condition set for long-running resources, happy type ``Ready``."""
    return ConditionSet(CONDITION_READY, dependents)


def new_batch_condition_set(*dependents: str) -> ConditionSet:
    """Condition set for run-to-completion resources, happy type ``Succeeded``."""
    return ConditionSet(CONDITION_SUCCEEDED, dependents)


class ConditionManager:
    """Reads and mutates one status object's conditions for a condition set."""

    def __init__(self, condition_set: ConditionSet, accessor, clock: Callable = get_timestamp):
        self._condition_set = condition_set
        self._accessor = accessor
        self._clock = clock

    @property
    def condition_set(self) -> ConditionSet:
        return self._condition_set

    def get_condition(self, condition_type: str) -> Optional[Condition]:
        for condition in self._accessor.get_conditions():
            if condition.type == condition_type:
                return condition
        return None

    def get_top_level_condition(self) -> Optional[Condition]:
        return self.get_condition(self._condition_set.happy)

    def is_happy(self) -> bool:
        happy = self.get_top_level_condition()
        return happy is not None and happy.is_true

    def initialize_conditions(self):
        """Add an Unknown condition for every tracked type not yet present."""
        conditions = list(self._accessor.get_conditions())
        present = {c.type for c in conditions}
        missing = [t for t in self._condition_set.types if t not in present]
        if not missing:
            return

        now = self._clock()
        for condition_type in missing:
            conditions.append(
                Condition(
                    type=condition_type,
                    status=ConditionStatus.UNKNOWN,
                    lastTransitionTime=now,
                )
            )
        self._accessor.set_conditions(sorted(conditions, key=lambda c: c.type))
        logger.debug(f"Initialized conditions: {missing}")

    def mark_true(self, condition_type: str):
        self._check_dependent(condition_type)
        self._set_condition(Condition(type=condition_type, status=ConditionStatus.TRUE))
        self._recompute_happy()

    def mark_false(
        self,
        condition_type: str,
        reason: str,
        message: str,
        *args,
        severity: Optional[ConditionSeverity] = None,
    ):
        self._mark(ConditionStatus.FALSE, condition_type, reason, message, args, severity)

    def mark_unknown(
        self,
        condition_type: str,
        reason: str,
        message: str,
        *args,
        severity: Optional[ConditionSeverity] = None,
    ):
        self._mark(ConditionStatus.UNKNOWN, condition_type, reason, message, args, severity)

    def _mark(self, status, condition_type, reason, message, args, severity):
        self._check_dependent(condition_type)
        if args:
            message = message % args
        self._set_condition(
            Condition(
                type=condition_type,
                status=status,
                reason=reason or "",
                message=message or "",
                severity=severity,
            )
        )
        self._recompute_happy()

    def _check_dependent(self, condition_type):
        if not self._condition_set.is_dependent(condition_type):
            raise UnknownConditionTypeError(
                f"{condition_type!r} is not a dependent of {self._condition_set!r}"
            )

    def _set_condition(self, condition: Condition) -> bool:
        """Insert or replace a condition, keeping the list sorted by type.

        Transition time moves only when the status changes. An update that
        leaves status, reason, message and severity as they were is a no-op.
        """
        existing = self.get_condition(condition.type)
        if existing is not None and (
            existing.status == condition.status
            and existing.reason == condition.reason
            and existing.message == condition.message
            and existing.severity == condition.severity
        ):
            return False

        if existing is None or existing.status != condition.status:
            transition_time = self._clock()
        else:
            transition_time = existing.lastTransitionTime or self._clock()

        updated = condition.model_copy(update={"lastTransitionTime": transition_time})
        conditions = [c for c in self._accessor.get_conditions() if c.type != condition.type]
        conditions.append(updated)
        self._accessor.set_conditions(sorted(conditions, key=lambda c: c.type))

        if existing is None or existing.status != condition.status:
            previous = existing.status.value if existing is not None else None
            logger.debug(
                f"Condition {condition.type} transitioned {previous} -> "
                f"{condition.status.value} ({condition.reason})"
            )
        return True

    def _recompute_happy(self):
        # False outranks Unknown outranks True; ties go to the first type in
        # lexicographic order.
        first_false = None
        first_unknown = None
        for condition_type in sorted(self._condition_set.dependents):
            condition = self.get_condition(condition_type)
            if condition is None:
                condition = Condition(type=condition_type, status=ConditionStatus.UNKNOWN)
            if condition.is_false:
                first_false = condition
                break
            if condition.is_unknown and first_unknown is None:
                first_unknown = condition

        source = first_false if first_false is not None else first_unknown
        happy_type = self._condition_set.happy
        if source is None:
            happy = Condition(type=happy_type, status=ConditionStatus.TRUE)
        else:
            happy = Condition(
                type=happy_type,
                status=source.status,
                reason=source.reason,
                message=source.message,
            )
        self._set_condition(happy)


def read_condition(raw_status: Optional[Mapping], condition_type: str) -> Optional[Condition]:
    """Parse one condition out of a raw ``status`` mapping read from the API server."""
    if not raw_status:
        return None
    if not isinstance(raw_status, Mapping):
        raise ValueError(f"status must be a mapping, got {type(raw_status).__name__}")
    conditions = raw_status.get("conditions") or []
    if not isinstance(conditions, list):
        raise ValueError(f"status.conditions must be a list, got {type(conditions).__name__}")
    for entry in conditions:
        if not isinstance(entry, Mapping):
            raise ValueError(f"condition must be a mapping, got {type(entry).__name__}")
        if entry.get("type") == condition_type:
            return Condition.model_validate(entry)
    return None
