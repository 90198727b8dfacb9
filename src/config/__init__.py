"""Configuration loading for the event sinks.

Main Functions
--------------

    - load_config(): Load SinkConfig from a YAML file (``eventbridge:`` section)
    - SinkConfig.from_uri(): Build SinkConfig from a sink URI

Usage Examples
--------------

    >>> from config import SinkConfig, load_config
    >>>
    >>> config = SinkConfig.from_uri("eventbridge:?clusterId=c1234")
    >>>
    >>> # File settings first, sink URI on top
    >>> base = load_config(validate=False)
    >>> config = SinkConfig.from_uri("eventbridge:?clusterId=c1234", base=base)

Configuration Priority
---------------------

1. Sink URI query parameters
2. YAML configuration file (with ${VAR} expansion)
3. Dataclass defaults
"""

from config.config import (
    DEFAULT_BUS_NAME,
    DEFAULT_ENDPOINT_DOMAIN,
    EVENTBRIDGE_MAX_BATCH_SIZE,
    SinkConfig,
    load_config,
)

__all__ = [
    "load_config",
    "SinkConfig",
    "DEFAULT_BUS_NAME",
    "DEFAULT_ENDPOINT_DOMAIN",
    "EVENTBRIDGE_MAX_BATCH_SIZE",
]
