"""Channel CRD models.

A Channel implements the Sinkable and Subscribable contracts. Its Provisioner
provisions infrastructure to accept events and deliver them to subscriptions.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from eventing.crd.base import CRDSpec, CRDStatus
from eventing.crd.conditions import CONDITION_READY, new_living_condition_set
from eventing.crd.registry import CRDRegistry

GROUP = "eventing.knative.dev"
VERSION = "v1alpha1"
API_VERSION = f"{GROUP}/{VERSION}"

# Ready has status True when the Channel is ready to accept traffic.
CHANNEL_CONDITION_READY = CONDITION_READY

# Provisioned has status True when the Channel's backing resources have been
# provisioned.
CHANNEL_CONDITION_PROVISIONED = "Provisioned"

# Sinkable has status True when the Channel has a non-empty domainInternal.
CHANNEL_CONDITION_SINKABLE = "Sinkable"

# Subscribable has status True when the Channel has a non-empty Channelable
# object reference.
CHANNEL_CONDITION_SUBSCRIBABLE = "Subscribable"

CHANNEL_CONDITION_SET = new_living_condition_set(
    CHANNEL_CONDITION_PROVISIONED,
    CHANNEL_CONDITION_SINKABLE,
    CHANNEL_CONDITION_SUBSCRIBABLE,
)


class ObjectReference(BaseModel):
    """Reference to another Kubernetes object."""

    kind: Optional[str] = None
    apiVersion: Optional[str] = None
    namespace: Optional[str] = None
    name: Optional[str] = None


class ProvisionerReference(CRDSpec):
    """Reference to the ClusterChannelProvisioner backing a Channel."""

    ref: ObjectReference = Field(..., description="Provisioner object reference")


class ChannelSubscriberSpec(CRDSpec):
    """A single subscriber of a Channel."""

    ref: Optional[ObjectReference] = Field(
        default=None, description="Subscription that owns this subscriber"
    )
    callableDomain: Optional[str] = Field(
        default=None, description="Domain events are sent to for processing"
    )
    sinkableDomain: Optional[str] = Field(
        default=None, description="Domain replies are sent to"
    )


class Channelable(CRDSpec):
    """Subscribers the Channel delivers events to."""

    subscribers: List[ChannelSubscriberSpec] = Field(default_factory=list)


class Sinkable(BaseModel):
    """Domain that accepts events for the Channel, published by its provisioner."""

    domainInternal: str = ""


class Subscribable(BaseModel):
    """Points at the object subscriptions attach to; for a Channel, itself."""

    channelable: ObjectReference = Field(default_factory=ObjectReference)


class ChannelStatus(CRDStatus):
    """Observed state of a Channel."""

    sinkable: Sinkable = Field(default_factory=Sinkable)
    subscribable: Subscribable = Field(default_factory=Subscribable)

    def condition_manager(self):
        return CHANNEL_CONDITION_SET.manage(self)

    def get_condition(self, condition_type):
        """Return the condition of the given type, or None."""
        return self.condition_manager().get_condition(condition_type)

    def is_ready(self):
        """True if the Channel is ready overall."""
        return self.condition_manager().is_happy()

    def initialize_conditions(self):
        """Set every unset condition to Unknown."""
        self.condition_manager().initialize_conditions()

    def mark_provisioned(self):
        self.condition_manager().mark_true(CHANNEL_CONDITION_PROVISIONED)

    def mark_not_provisioned(self, reason, message, *args):
        self.condition_manager().mark_false(CHANNEL_CONDITION_PROVISIONED, reason, message, *args)

    def set_subscribable(self, namespace, name):
        """Make this Channel subscribable by pointing it at itself.

        ``namespace`` and ``name`` are those of the Channel owning this status.
        Both empty clears the reference and marks Subscribable False.
        """
        if namespace or name:
            self.subscribable.channelable = ObjectReference(
                kind="Channel",
                apiVersion=API_VERSION,
                namespace=namespace,
                name=name,
            )
            self.condition_manager().mark_true(CHANNEL_CONDITION_SUBSCRIBABLE)
        else:
            self.subscribable.channelable = ObjectReference()
            self.condition_manager().mark_false(
                CHANNEL_CONDITION_SUBSCRIBABLE, "notSubscribable", "not Subscribable"
            )

    def set_sinkable(self, domain_internal):
        """Publish the domain that accepts events and mark Sinkable accordingly."""
        self.sinkable.domainInternal = domain_internal or ""
        if domain_internal:
            self.condition_manager().mark_true(CHANNEL_CONDITION_SINKABLE)
        else:
            self.condition_manager().mark_false(
                CHANNEL_CONDITION_SINKABLE,
                "emptyDomainInternal",
                "domainInternal is the empty string",
            )


@CRDRegistry.register(
    GROUP,
    VERSION,
    "Channel",
    "channels",
    condition_set=CHANNEL_CONDITION_SET,
    status_model=ChannelStatus,
)
class ChannelSpec(CRDSpec):
    """Channel CRD specification."""

    generation: Optional[int] = Field(
        default=None, description="Generation of the spec, set by the API server"
    )
    provisioner: Optional[ProvisionerReference] = Field(
        default=None, description="Provisioner backing this Channel"
    )
    arguments: Optional[Dict[str, Any]] = Field(
        default=None, description="Arguments passed to the Provisioner"
    )
    channelable: Optional[Channelable] = Field(
        default=None, description="Subscribers of this Channel"
    )
