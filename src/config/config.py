"""Sink configuration from a sink URI and/or YAML file.

The sink URI is what the event collector is started with, e.g.::

    eventbridge:?clusterId=c1234&busName=default

A YAML file may supply the same settings (plus transport and metadata
tuning) under an ``eventbridge:`` section. Environment variables ARE
supported using ${VAR_NAME} and ${VAR_NAME:-default} syntax in YAML files.
"""

import logging
import os
import re
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import parse_qs, urlparse

import yaml

from core.auth.credentials import DEFAULT_TOKEN_CONFIG_PATH
from core.errors.exceptions import ConfigurationError
from core.metadata.resolver import DEFAULT_METADATA_TIMEOUT_SECONDS, DEFAULT_METADATA_URL

logger = logging.getLogger(__name__)

# PutEvents accepts at most 16 events per call
EVENTBRIDGE_MAX_BATCH_SIZE = 16
DEFAULT_BUS_NAME = "default"
DEFAULT_ENDPOINT_DOMAIN = "aliyuncs.com"

# Default config file: config/config.yaml in src/ directory
DEFAULT_CONFIG_FILE = Path(__file__).parent / "config.yaml"

# Sink URI query keys mapped to SinkConfig fields
URI_QUERY_FIELDS = {
    "clusterId": "cluster_id",
    "region": "region",
    "accountId": "account_id",
    "busName": "bus_name",
    "maxBatchSize": "max_batch_size",
    "endpointDomain": "endpoint_domain",
    "tokenConfig": "token_config_path",
}


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load YAML file and return dict."""
    if not path.exists():
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def _expand_env_vars(data: Any) -> Any:
    """Recursively expand ${VAR_NAME} and ${VAR_NAME:-default} environment variables in config data."""
    if isinstance(data, dict):
        return {key: _expand_env_vars(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        pattern = r"\$\{([^}:]+)(?::-(([^}]*))?)?\}"

        def replacer(match):
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else match.group(0)
            return os.getenv(var_name, default_value)

        return re.sub(pattern, replacer, data)
    else:
        return data


@dataclass(frozen=True)
class SinkConfig:
    """EventBridge sink configuration.

    Region and account id are optional here; when empty they are resolved
    from instance metadata at sink construction.
    """

    cluster_id: str = ""
    region: str = ""
    account_id: str = ""
    bus_name: str = DEFAULT_BUS_NAME
    max_batch_size: int = EVENTBRIDGE_MAX_BATCH_SIZE
    endpoint_domain: str = DEFAULT_ENDPOINT_DOMAIN
    token_config_path: str = DEFAULT_TOKEN_CONFIG_PATH
    metadata_url: str = DEFAULT_METADATA_URL
    metadata_timeout_seconds: float = DEFAULT_METADATA_TIMEOUT_SECONDS

    def validate(self) -> None:
        """Check required fields and numeric ranges.

        Raises:
            ConfigurationError: On the first invalid setting
        """
        if not self.cluster_id:
            raise ConfigurationError(
                "please provide kubernetes cluster id for EventBridge (clusterId)"
            )
        if not self.bus_name:
            raise ConfigurationError("bus_name must not be empty")
        if not 1 <= self.max_batch_size <= EVENTBRIDGE_MAX_BATCH_SIZE:
            raise ConfigurationError(
                f"max_batch_size must be between 1 and {EVENTBRIDGE_MAX_BATCH_SIZE}, "
                f"got {self.max_batch_size}"
            )
        if self.metadata_timeout_seconds <= 0:
            raise ConfigurationError(
                f"metadata_timeout_seconds must be > 0, got {self.metadata_timeout_seconds}"
            )

    def with_overrides(self, overrides: Dict[str, Any]) -> "SinkConfig":
        """Return a copy with the given field values applied.

        Raises:
            ConfigurationError: If a key is unknown or a value has the wrong type
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ConfigurationError(f"Unknown sink settings: {', '.join(unknown)}")

        coerced = {}
        for key, value in overrides.items():
            coerced[key] = _coerce(key, value, getattr(self, key))
        return replace(self, **coerced)

    @classmethod
    def from_uri(cls, uri: str, base: Optional["SinkConfig"] = None) -> "SinkConfig":
        """Build config from a sink URI, layered over ``base``.

        Only the first value of a repeated query key is used.
        """
        parsed = urlparse(uri)
        query = parse_qs(parsed.query)

        overrides = {}
        for key, field_name in URI_QUERY_FIELDS.items():
            values = query.get(key)
            if values:
                overrides[field_name] = values[0]

        config = (base or cls()).with_overrides(overrides)
        config.validate()
        return config


def _coerce(key: str, value: Any, current: Any) -> Any:
    if value is None:
        return current
    if isinstance(current, bool) or not isinstance(current, (int, float)):
        return str(value)
    try:
        return type(current)(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"{key} must be a {type(current).__name__}, got {value!r}", cause=e
        ) from e


def load_config(
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
    validate: bool = True,
) -> SinkConfig:
    """Load sink configuration from a YAML file.

    A missing default file yields an all-defaults config; a missing explicit
    path is an error.

    Args:
        config_path: YAML file; defaults to src/config/config.yaml
        overrides: Field values applied after the file
        validate: Run ``SinkConfig.validate`` (disable when a sink URI will
            supply the cluster id later)
    """
    explicit = config_path is not None
    config_path = config_path or DEFAULT_CONFIG_FILE

    if explicit and not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    logger.info(f"Loading configuration from file: {config_path}")
    try:
        yaml_data = _expand_env_vars(load_yaml(config_path))
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}", cause=e) from e

    section = yaml_data.get("eventbridge", {}) or {}
    if not isinstance(section, dict):
        raise ConfigurationError("Invalid config file: 'eventbridge:' must be a mapping")

    settings = dict(section)
    metadata = settings.pop("metadata", {}) or {}
    if "url" in metadata:
        settings["metadata_url"] = metadata["url"]
    if "timeout_seconds" in metadata:
        settings["metadata_timeout_seconds"] = metadata["timeout_seconds"]

    if overrides:
        logger.debug(f"Applying overrides: {list(overrides.keys())}")
        settings.update(overrides)

    config = SinkConfig().with_overrides(settings)
    if validate:
        config.validate()
    return config
