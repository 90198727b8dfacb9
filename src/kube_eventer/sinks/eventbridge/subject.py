"""
Cloud event subjects for Kubernetes objects.

Subjects follow the shape of an object's selfLink, prefixed with the ACS
resource name of the cluster::

    acs:cs:{region}:{account}:{clusterId}/apis/{apiVersion}/namespaces/{namespace}/{resource}/{name}

Consumers route on this string, so the grammar must stay stable.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Optional

# Guesses the lowercase plural resource for (api_version, kind)
ResourceGuesser = Callable[[str, str], str]

# Kinds whose resource name is already plural
UNPLURALIZED_SUFFIXES = ("endpoints",)

VERSION_UNKNOWN_SUFFIX = "/versionUnknown"


@dataclass(frozen=True)
class SinkIdentity:
    """Where events come from: fixed at sink construction."""

    cluster_id: str
    region: str
    account_id: str


def guess_kind_to_resource(api_version: str, kind: str) -> str:
    """
    Best-effort kind to resource guess.

    Lowercases the kind and pluralizes it: kinds ending in "endpoints" stay
    as they are, a trailing "s" gets "es", a trailing "y" becomes "ies",
    anything else gets "s". An empty kind gives an empty resource.

    Example:
        >>> guess_kind_to_resource("apps/v1", "Deployment")
        'deployments'
        >>> guess_kind_to_resource("networking.k8s.io/v1", "NetworkPolicy")
        'networkpolicies'
    """
    if not kind:
        return ""

    singular = kind.lower()
    if singular.endswith(UNPLURALIZED_SUFFIXES):
        return singular
    if singular.endswith("s"):
        return singular + "es"
    if singular.endswith("y"):
        return singular[:-1] + "ies"
    return singular + "s"


def mapped_resource_guesser(
    overrides: Mapping[str, str],
    fallback: ResourceGuesser = guess_kind_to_resource,
) -> ResourceGuesser:
    """
    Guesser that consults an explicit kind to resource table first.

    Keys may be a bare kind ("Ingress") or "apiVersion/Kind"
    ("networking.k8s.io/v1/Ingress"); the more specific key wins.
    """
    table = dict(overrides)

    def guess(api_version: str, kind: str) -> str:
        qualified = f"{api_version}/{kind}" if api_version else kind
        if qualified in table:
            return table[qualified]
        if kind in table:
            return table[kind]
        return fallback(api_version, kind)

    return guess


def api_version_segment(api_version: str) -> str:
    """
    Path segment for an apiVersion.

    A value holding a group but no version (has a "." and no "/") gets
    "/versionUnknown" appended. Core versions like "v1" pass through.

    Example:
        >>> api_version_segment("apps/v1")
        'apps/v1'
        >>> api_version_segment("foo.bar")
        'foo.bar/versionUnknown'
    """
    if "." in api_version and "/" not in api_version:
        return api_version + VERSION_UNKNOWN_SUFFIX
    return api_version


def build_subject(
    identity: SinkIdentity,
    api_version: str,
    kind: str,
    namespace: str,
    name: str,
    guess_resource: Optional[ResourceGuesser] = None,
) -> str:
    """Subject string for one object."""
    resource = (guess_resource or guess_kind_to_resource)(api_version, kind)
    return (
        f"acs:cs:{identity.region}:{identity.account_id}:{identity.cluster_id}"
        f"/apis/{api_version_segment(api_version)}/namespaces/{namespace}/{resource}/{name}"
    )


__all__ = [
    "ResourceGuesser",
    "SinkIdentity",
    "api_version_segment",
    "build_subject",
    "guess_kind_to_resource",
    "mapped_resource_guesser",
]
