"""Tests for cloud event subject construction."""

import pytest

from kube_eventer.sinks.eventbridge.subject import (
    SinkIdentity,
    api_version_segment,
    build_subject,
    guess_kind_to_resource,
    mapped_resource_guesser,
)


class TestGuessKindToResource:

    @pytest.mark.parametrize(
        "kind, resource",
        [
            ("Pod", "pods"),
            ("Event", "events"),
            ("Deployment", "deployments"),
            ("Ingress", "ingresses"),
            ("NetworkPolicy", "networkpolicies"),
            ("Endpoints", "endpoints"),
            ("", ""),
        ],
    )
    def test_pluralization(self, kind, resource):
        assert guess_kind_to_resource("v1", kind) == resource


class TestApiVersionSegment:

    @pytest.mark.parametrize(
        "api_version, segment",
        [
            ("v1", "v1"),
            ("apps/v1", "apps/v1"),
            ("events.k8s.io/v1", "events.k8s.io/v1"),
            ("foo.bar", "foo.bar/versionUnknown"),
            ("", ""),
        ],
    )
    def test_segment(self, api_version, segment):
        assert api_version_segment(api_version) == segment


class TestMappedResourceGuesser:

    def test_qualified_key_wins(self):
        guess = mapped_resource_guesser({"Widget": "widgets-any", "example.com/v1/Widget": "widgetz"})
        assert guess("example.com/v1", "Widget") == "widgetz"
        assert guess("other.com/v1", "Widget") == "widgets-any"

    def test_falls_back_to_heuristic(self):
        guess = mapped_resource_guesser({"Widget": "widgetz"})
        assert guess("v1", "Policy") == "policies"

    def test_custom_fallback(self):
        guess = mapped_resource_guesser({}, fallback=lambda api_version, kind: "x")
        assert guess("v1", "Pod") == "x"


class TestBuildSubject:

    def test_core_event(self, identity):
        subject = build_subject(identity, "v1", "Event", "default", "nginx.17a2")
        assert subject == (
            "acs:cs:cn-hangzhou:123456:c1234/apis/v1/namespaces/default/events/nginx.17a2"
        )

    def test_grouped_version(self, identity):
        subject = build_subject(identity, "apps/v1", "Deployment", "prod", "web")
        assert subject.endswith("/apis/apps/v1/namespaces/prod/deployments/web")

    def test_group_without_version(self, identity):
        subject = build_subject(identity, "foo.bar", "Widget", "ns", "w")
        assert "/apis/foo.bar/versionUnknown/namespaces/ns/widgets/w" in subject

    def test_empty_namespace_keeps_slots(self, identity):
        subject = build_subject(identity, "v1", "Node", "", "node-1")
        assert subject.endswith("/apis/v1/namespaces//nodes/node-1")

    def test_custom_guesser(self, identity):
        subject = build_subject(
            identity, "v1", "Event", "default", "e", guess_resource=lambda v, k: "evts"
        )
        assert subject.endswith("/evts/e")

    def test_prefix_uses_identity(self):
        identity = SinkIdentity(cluster_id="cX", region="us-west-1", account_id="42")
        subject = build_subject(identity, "v1", "Pod", "a", "b")
        assert subject.startswith("acs:cs:us-west-1:42:cX/apis/")
