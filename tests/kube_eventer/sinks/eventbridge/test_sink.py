"""
Tests for EventBridgeSink wiring and end-to-end export.

The SDK client is replaced through the client factory; nothing leaves the
process.
"""

import json
from unittest.mock import MagicMock

import pytest

from config.config import SinkConfig
from core.auth.credentials import StaticCredentialProvider
from core.errors.exceptions import ConfigurationError
from core.logging.context import get_log_context
from kube_eventer.events import EventBatch
from kube_eventer.sinks.eventbridge.sink import EventBridgeSink, new_eventbridge_sink


@pytest.fixture
def resolver():
    resolver = MagicMock()
    resolver.region.return_value = "cn-shenzhen"
    resolver.account_id.return_value = "777"
    return resolver


@pytest.fixture
def sink_kwargs(make_credential, client_factory, resolver):
    return {
        "credential_provider": StaticCredentialProvider(make_credential()),
        "resolver": resolver,
        "client_factory": client_factory,
    }


class TestFromConfig:

    def test_identity_from_metadata(self, sink_kwargs, resolver):
        sink = EventBridgeSink.from_config(SinkConfig(cluster_id="c1234"), **sink_kwargs)

        assert sink.identity.cluster_id == "c1234"
        assert sink.identity.region == "cn-shenzhen"
        assert sink.identity.account_id == "777"
        assert sink.client_manager.endpoint == "777.eventbridge.cn-shenzhen-vpc.aliyuncs.com"

    def test_config_wins_over_metadata(self, sink_kwargs, resolver):
        config = SinkConfig(cluster_id="c1", region="cn-beijing", account_id="42")
        sink = EventBridgeSink.from_config(config, **sink_kwargs)

        assert sink.identity.region == "cn-beijing"
        assert sink.identity.account_id == "42"
        resolver.region.assert_not_called()
        resolver.account_id.assert_not_called()

    def test_missing_cluster_id(self, sink_kwargs):
        with pytest.raises(ConfigurationError, match="cluster id"):
            EventBridgeSink.from_config(SinkConfig(), **sink_kwargs)

    def test_resolver_configuration_error_propagates(self, sink_kwargs, resolver):
        resolver.region.side_effect = ConfigurationError("metadata unreachable")

        with pytest.raises(ConfigurationError, match="metadata unreachable"):
            EventBridgeSink.from_config(SinkConfig(cluster_id="c1"), **sink_kwargs)

    def test_resolver_unexpected_error_wrapped(self, sink_kwargs, resolver):
        resolver.account_id.side_effect = RuntimeError("boom")

        with pytest.raises(ConfigurationError, match="failed to resolve region or account id"):
            EventBridgeSink.from_config(SinkConfig(cluster_id="c1"), **sink_kwargs)

    def test_no_client_built_at_construction(self, sink_kwargs, client_factory):
        EventBridgeSink.from_config(SinkConfig(cluster_id="c1"), **sink_kwargs)
        client_factory.assert_not_called()

    def test_sets_log_context(self, sink_kwargs):
        EventBridgeSink.from_config(SinkConfig(cluster_id="c1"), **sink_kwargs)
        ctx = get_log_context()
        assert ctx["sink"] == "EventBridgeSink"
        assert ctx["cluster_id"] == "c1"


class TestNewEventBridgeSink:

    def test_from_uri(self, sink_kwargs):
        sink = new_eventbridge_sink("eventbridge:?clusterId=c9&busName=ops", **sink_kwargs)

        assert sink.identity.cluster_id == "c9"
        assert sink.exporter.translator.bus_name == "ops"

    def test_uri_without_cluster_id(self, sink_kwargs):
        with pytest.raises(ConfigurationError):
            new_eventbridge_sink("eventbridge:?busName=ops", **sink_kwargs)

    def test_base_config(self, sink_kwargs):
        base = SinkConfig(max_batch_size=4)
        sink = new_eventbridge_sink("eventbridge:?clusterId=c9", base_config=base, **sink_kwargs)
        assert sink.exporter.max_batch_size == 4


class TestExportEvents:

    @pytest.fixture
    def sink(self, sink_kwargs):
        config = SinkConfig(cluster_id="c1234", region="cn-hangzhou", account_id="123456")
        return EventBridgeSink.from_config(config, **sink_kwargs)

    def test_seventeen_events(self, sink, sdk_client, make_event):
        events = [make_event(name=f"e-{i}") for i in range(17)]
        result = sink.export_events(EventBatch(events=events))

        calls = sdk_client.put_events_with_options.call_args_list
        assert [len(c.args[0]) for c in calls] == [16, 1]
        assert result.chunks_sent == 2

        first = calls[0].args[0][0]
        assert first.subject == (
            "acs:cs:cn-hangzhou:123456:c1234/apis/v1/namespaces/default/events/e-0"
        )
        assert first.extensions == {"aliyuneventbusname": "default"}
        assert json.loads(first.data)["metadata"]["name"] == "e-0"

    def test_client_reused_across_batches(self, sink, client_factory, make_event):
        sink.export([make_event()])
        sink.export([make_event()])
        assert client_factory.call_count == 1

    def test_failed_chunk_does_not_raise(self, sink, sdk_client, make_event):
        sdk_client.put_events_with_options.side_effect = [
            ConnectionError("reset"),
            MagicMock(failed_entry_count=0),
        ]
        events = [make_event(name=f"e-{i}") for i in range(20)]

        result = sink.export(events)

        assert result.chunks_failed == 1
        assert result.chunks_sent == 1

    def test_credential_failure_fails_every_chunk(self, resolver, client_factory, make_event):
        provider = MagicMock()
        provider.fetch.side_effect = OSError("no token")
        config = SinkConfig(cluster_id="c1", region="r", account_id="a")
        sink = EventBridgeSink.from_config(
            config, credential_provider=provider, resolver=resolver, client_factory=client_factory
        )

        result = sink.export([make_event(name=f"e-{i}") for i in range(20)])

        assert result.chunks_failed == 2
        assert provider.fetch.call_count == 2

    def test_empty_batch(self, sink, sdk_client):
        result = sink.export_events(EventBatch())
        assert result.events_received == 0
        sdk_client.put_events_with_options.assert_not_called()

    def test_stop_is_noop(self, sink):
        sink.stop()
        sink.stop()
