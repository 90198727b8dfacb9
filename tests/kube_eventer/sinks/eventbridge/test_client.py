"""
Tests for EventBridgeClientManager - client reuse and credential refresh.

Test Coverage:
    - Client reuse while the credential is fresh
    - Refresh when the credential is stale or missing
    - Provider and factory failures
    - Invalidation
    - SDK client construction
"""

import threading
from unittest.mock import MagicMock, patch

import pytest

from core.auth.credential_cache import Credential
from core.auth.credentials import StaticCredentialProvider
from core.errors.exceptions import CredentialError, DispatchError
from kube_eventer.sinks.eventbridge.client import (
    EventBridgeClientManager,
    create_eventbridge_client,
    eventbridge_endpoint,
)

ENDPOINT = "123456.eventbridge.cn-hangzhou-vpc.aliyuncs.com"


def _manager(provider, factory):
    return EventBridgeClientManager(provider, ENDPOINT, client_factory=factory)


class TestEndpoint:

    def test_vpc_endpoint(self, identity):
        assert eventbridge_endpoint(identity) == ENDPOINT

    def test_custom_domain(self, identity):
        assert eventbridge_endpoint(identity, "example.com") == (
            "123456.eventbridge.cn-hangzhou-vpc.example.com"
        )


class TestGetClient:

    def test_first_call_builds_client(self, client_manager, client_factory, sdk_client):
        assert client_manager.get_client() is sdk_client
        client_factory.assert_called_once()
        credential, endpoint = client_factory.call_args.args
        assert credential.access_key_id == "LTAI-test"
        assert endpoint == ENDPOINT

    def test_fresh_credential_reuses_client(self, client_manager, client_factory):
        first = client_manager.get_client()
        second = client_manager.get_client()

        assert first is second
        assert client_factory.call_count == 1

    def test_credential_inside_margin_rebuilds(self, make_credential):
        provider = MagicMock()
        provider.fetch.side_effect = [make_credential(minutes=5), make_credential(minutes=60)]
        factory = MagicMock(side_effect=[MagicMock(name="old"), MagicMock(name="new")])
        manager = _manager(provider, factory)

        old = manager.get_client()
        new = manager.get_client()

        assert old is not new
        assert provider.fetch.call_count == 2
        assert factory.call_count == 2
        # now fresh, reused
        assert manager.get_client() is new

    def test_cache_tracks_current_credential(self, make_credential):
        credential = make_credential(minutes=60)
        manager = _manager(StaticCredentialProvider(credential), MagicMock())

        manager.get_client()

        assert manager.credential_cache.get() is credential

    def test_non_expiring_credential_reused(self):
        provider = MagicMock()
        provider.fetch.return_value = Credential("id", "secret")
        factory = MagicMock()
        manager = _manager(provider, factory)

        manager.get_client()
        manager.get_client()

        assert provider.fetch.call_count == 1

    def test_concurrent_callers_build_once(self, client_manager, client_factory):
        results = []

        def worker():
            results.append(client_manager.get_client())

        threads = [threading.Thread(target=worker) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert client_factory.call_count == 1
        assert len({id(r) for r in results}) == 1


class TestRefreshFailures:

    def test_provider_credential_error_propagates(self):
        provider = MagicMock()
        provider.fetch.side_effect = CredentialError("token config missing")
        manager = _manager(provider, MagicMock())

        with pytest.raises(CredentialError, match="token config missing"):
            manager.get_client()

    def test_provider_unexpected_error_wrapped(self):
        provider = MagicMock()
        provider.fetch.side_effect = OSError("disk gone")
        manager = _manager(provider, MagicMock())

        with pytest.raises(CredentialError) as exc_info:
            manager.get_client()
        assert isinstance(exc_info.value.cause, OSError)

    def test_factory_error_wrapped(self, make_credential):
        factory = MagicMock(side_effect=ValueError("bad endpoint"))
        manager = _manager(StaticCredentialProvider(make_credential()), factory)

        with pytest.raises(DispatchError, match="failed to create EventBridge client"):
            manager.get_client()

    def test_failure_leaves_no_client(self, make_credential, sdk_client):
        provider = MagicMock()
        provider.fetch.side_effect = [CredentialError("first"), make_credential()]
        manager = _manager(provider, MagicMock(return_value=sdk_client))

        with pytest.raises(CredentialError):
            manager.get_client()
        assert manager.get_client() is sdk_client


class TestInvalidate:

    def test_next_call_refetches(self, client_manager, client_factory):
        client_manager.get_client()
        client_manager.invalidate()

        assert client_manager.credential_cache.get() is None
        client_manager.get_client()
        assert client_factory.call_count == 2


class TestCreateEventBridgeClient:

    def test_config_from_credential(self):
        credential = Credential("id", "secret", "token", "2030-01-01T00:00:00Z")
        with patch("kube_eventer.sinks.eventbridge.client.EventBridgeClient") as client_cls:
            client = create_eventbridge_client(credential, ENDPOINT)

        assert client is client_cls.return_value
        config = client_cls.call_args.args[0]
        assert config.access_key_id == "id"
        assert config.access_key_secret == "secret"
        assert config.security_token == "token"
        assert config.endpoint == ENDPOINT

    def test_plain_key_pair_has_no_token(self):
        with patch("kube_eventer.sinks.eventbridge.client.EventBridgeClient") as client_cls:
            create_eventbridge_client(Credential("id", "secret"), ENDPOINT)

        config = client_cls.call_args.args[0]
        assert not getattr(config, "security_token", None)
