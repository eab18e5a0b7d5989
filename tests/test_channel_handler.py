from types import SimpleNamespace

import kopf
import pytest
from kubernetes.client.exceptions import ApiException

from eventing.crd.base import Condition, ConditionStatus
from eventing.handlers import channel_handler
from eventing.models.channel import ChannelStatus

SPEC = {"generation": 2, "provisioner": {"ref": {"name": "in-memory"}}}
PUBLISHED_STATUS = {"sinkable": {"domainInternal": "chan.default.svc.cluster.local"}}


def mock_provisioner(monkeypatch, result):
    calls = []

    def get_provisioner_ready_condition(name):
        calls.append(name)
        if isinstance(result, Exception):
            raise result
        return result

    monkeypatch.setattr(channel_handler, "get_provisioner_ready_condition", get_provisioner_ready_condition)
    return calls


def reconcile(spec, status, generation=None):
    patch = SimpleNamespace(status={})
    channel_handler.reconcile_channel(
        spec=spec,
        name="chan",
        namespace="default",
        status=status,
        meta={"generation": generation},
        patch=patch,
    )
    return ChannelStatus.model_validate(patch.status), patch.status


def test_ready_channel(monkeypatch):
    calls = mock_provisioner(monkeypatch, Condition(type="Ready", status=ConditionStatus.TRUE))

    status, raw = reconcile(SPEC, PUBLISHED_STATUS)

    assert calls == ["in-memory"]
    assert status.is_ready()
    assert status.observedGeneration == 2
    assert raw["subscribable"]["channelable"]["name"] == "chan"
    assert raw["sinkable"]["domainInternal"] == "chan.default.svc.cluster.local"


def test_generation_falls_back_to_metadata(monkeypatch):
    mock_provisioner(monkeypatch, Condition(type="Ready", status=ConditionStatus.TRUE))

    status, _ = reconcile({"provisioner": {"ref": {"name": "in-memory"}}}, PUBLISHED_STATUS, generation=7)
    assert status.observedGeneration == 7


def test_provisioner_not_found(monkeypatch):
    mock_provisioner(monkeypatch, ApiException(status=404, reason="Not Found"))

    status, _ = reconcile(SPEC, PUBLISHED_STATUS)

    provisioned = status.get_condition("Provisioned")
    assert provisioned.status == ConditionStatus.FALSE
    assert provisioned.reason == "ProvisionerNotFound"
    assert status.get_condition("Ready").reason == "ProvisionerNotFound"


def test_provisioner_not_ready(monkeypatch):
    mock_provisioner(
        monkeypatch,
        Condition(type="Ready", status=ConditionStatus.FALSE, reason="Starting", message="dispatcher starting"),
    )

    status, _ = reconcile(SPEC, PUBLISHED_STATUS)

    provisioned = status.get_condition("Provisioned")
    assert provisioned.reason == "ProvisionerNotReady"
    assert provisioned.message == "ClusterChannelProvisioner in-memory is not ready: dispatcher starting"
    assert not status.is_ready()


def test_provisioner_without_ready_condition(monkeypatch):
    mock_provisioner(monkeypatch, None)

    status, _ = reconcile(SPEC, PUBLISHED_STATUS)
    assert status.get_condition("Provisioned").reason == "ProvisionerNotReady"


def test_api_errors_propagate(monkeypatch):
    mock_provisioner(monkeypatch, ApiException(status=500, reason="Internal Server Error"))

    with pytest.raises(ApiException):
        reconcile(SPEC, PUBLISHED_STATUS)


def test_missing_provisioner_reference(monkeypatch):
    calls = mock_provisioner(monkeypatch, None)

    status, _ = reconcile({}, PUBLISHED_STATUS)

    assert calls == []
    assert status.get_condition("Provisioned").reason == "NoProvisioner"


def test_unpublished_domain_is_not_sinkable(monkeypatch):
    mock_provisioner(monkeypatch, Condition(type="Ready", status=ConditionStatus.TRUE))

    status, _ = reconcile(SPEC, {})

    assert status.get_condition("Sinkable").reason == "emptyDomainInternal"
    assert status.get_condition("Ready").reason == "emptyDomainInternal"


def test_invalid_spec_is_permanent_error(monkeypatch):
    mock_provisioner(monkeypatch, None)

    with pytest.raises(kopf.PermanentError):
        reconcile({"provisioner": "in-memory"}, {})


def test_repeated_passes_keep_transition_times(monkeypatch):
    mock_provisioner(monkeypatch, Condition(type="Ready", status=ConditionStatus.TRUE))

    _, first = reconcile(SPEC, PUBLISHED_STATUS)
    _, second = reconcile(SPEC, first)

    assert second["conditions"] == first["conditions"]


def test_kopf_progress_is_not_written_back(monkeypatch):
    mock_provisioner(monkeypatch, Condition(type="Ready", status=ConditionStatus.TRUE))

    _, raw = reconcile(SPEC, dict(PUBLISHED_STATUS, kopf={"progress": {}}))
    assert "kopf" not in raw
