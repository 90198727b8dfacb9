"""Shared fixtures for sink tests."""

from unittest.mock import MagicMock

import pytest

from core.auth.credentials import StaticCredentialProvider
from kube_eventer.events import DomainEvent
from kube_eventer.sinks.eventbridge.client import EventBridgeClientManager
from kube_eventer.sinks.eventbridge.subject import SinkIdentity


@pytest.fixture
def identity():
    return SinkIdentity(cluster_id="c1234", region="cn-hangzhou", account_id="123456")


@pytest.fixture
def make_event():
    """Factory for Kubernetes Event objects."""

    def _make(name="nginx.17a2", namespace="default", kind="Event", api_version="v1", **fields):
        obj = {
            "apiVersion": api_version,
            "kind": kind,
            "metadata": {"name": name, "namespace": namespace},
            "reason": "BackOff",
            "message": "Back-off restarting failed container",
            "type": "Warning",
        }
        obj.update(fields)
        return DomainEvent.from_kube(obj)

    return _make


@pytest.fixture
def sdk_client():
    client = MagicMock()
    client.put_events_with_options.return_value = MagicMock(failed_entry_count=0)
    return client


@pytest.fixture
def client_factory(sdk_client):
    return MagicMock(return_value=sdk_client)


@pytest.fixture
def client_manager(make_credential, client_factory):
    return EventBridgeClientManager(
        credential_provider=StaticCredentialProvider(make_credential(minutes=60)),
        endpoint="123456.eventbridge.cn-hangzhou-vpc.aliyuncs.com",
        client_factory=client_factory,
    )
