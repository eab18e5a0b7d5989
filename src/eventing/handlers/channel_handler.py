"""Channel handler reconciling Channel custom resources using Kopf."""

import logging

import kopf
import kubernetes
from kubernetes.client.exceptions import ApiException
from pydantic import ValidationError

from eventing.config import PROVISIONER_GROUP, PROVISIONER_PLURAL, PROVISIONER_VERSION
from eventing.crd.conditions import CONDITION_READY, read_condition
from eventing.models.channel import GROUP, VERSION, ChannelSpec, ChannelStatus

logger = logging.getLogger(__name__)


def get_provisioner_ready_condition(name):
    """Read the Ready condition of a ClusterChannelProvisioner.

    Raises ApiException when the provisioner cannot be read.
    """
    api = kubernetes.client.CustomObjectsApi()
    provisioner = api.get_cluster_custom_object(
        group=PROVISIONER_GROUP,
        version=PROVISIONER_VERSION,
        plural=PROVISIONER_PLURAL,
        name=name,
    )
    return read_condition(provisioner.get("status"), CONDITION_READY)


def reconcile_provisioner(channel_status, channel_spec):
    provisioner = channel_spec.provisioner
    if provisioner is None or not provisioner.ref.name:
        channel_status.mark_not_provisioned(
            "NoProvisioner", "Channel does not reference a provisioner"
        )
        return

    provisioner_name = provisioner.ref.name
    try:
        ready = get_provisioner_ready_condition(provisioner_name)
    except ApiException as e:
        if e.status != 404:
            raise
        channel_status.mark_not_provisioned(
            "ProvisionerNotFound",
            "ClusterChannelProvisioner %s not found",
            provisioner_name,
        )
        return

    if ready is not None and ready.is_true:
        channel_status.mark_provisioned()
    elif ready is None:
        channel_status.mark_not_provisioned(
            "ProvisionerNotReady",
            "ClusterChannelProvisioner %s has not reported readiness",
            provisioner_name,
        )
    else:
        channel_status.mark_not_provisioned(
            "ProvisionerNotReady",
            "ClusterChannelProvisioner %s is not ready: %s",
            provisioner_name,
            ready.message or ready.reason or ready.status.value,
        )


def reconcile_status(spec, name, namespace, status, generation=None):
    """Compute a Channel's status for one reconcile pass.

    Returns the updated ChannelStatus; nothing is written to the cluster.
    """
    try:
        channel_spec = ChannelSpec.model_validate(dict(spec or {}))
    except ValidationError as e:
        raise kopf.PermanentError(f"Invalid Channel spec for {namespace}/{name}: {e}")

    # kopf keeps its own progress under status.kopf on older storages
    observed_status = {k: v for k, v in dict(status or {}).items() if k != "kopf"}
    channel_status = ChannelStatus.model_validate(observed_status)
    channel_status.initialize_conditions()

    reconcile_provisioner(channel_status, channel_spec)
    # The provisioner publishes the domain; keep whatever it wrote.
    channel_status.set_sinkable(channel_status.sinkable.domainInternal)
    channel_status.set_subscribable(namespace, name)

    observed = channel_spec.generation if channel_spec.generation is not None else generation
    if observed is not None:
        channel_status.observedGeneration = observed

    return channel_status


@kopf.on.resume(GROUP, VERSION, "channels")
@kopf.on.create(GROUP, VERSION, "channels")
@kopf.on.update(GROUP, VERSION, "channels")
def reconcile_channel(spec, name, namespace, status, meta, patch, **kwargs):
    channel_status = reconcile_status(
        spec, name, namespace, status, generation=meta.get("generation")
    )
    patch.status.update(channel_status.to_dict())

    if channel_status.is_ready():
        logger.info(f"Channel {namespace}/{name} is ready")
    else:
        ready = channel_status.get_condition(CONDITION_READY)
        logger.info(
            f"Channel {namespace}/{name} not ready: {ready.status.value} "
            f"{ready.reason} {ready.message}".rstrip()
        )
