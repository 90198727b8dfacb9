"""
Authentication module.

Provides credential caching and credential providers for Alibaba Cloud.

Components:
    - Credential / CredentialCache: expiry-aware credential holder with a
      10 minute refresh margin
    - Credential providers: addon token config file, environment, static
"""

from .credential_cache import (
    CREDENTIAL_REFRESH_MARGIN_MINS,
    EXPIRATION_FORMAT,
    Credential,
    CredentialCache,
    parse_expiration,
)
from .credentials import (
    DEFAULT_TOKEN_CONFIG_PATH,
    EnvCredentialProvider,
    StaticCredentialProvider,
    TokenConfigCredentialProvider,
    get_default_provider,
)

__all__ = [
    # Credential cache
    "Credential",
    "CredentialCache",
    "CREDENTIAL_REFRESH_MARGIN_MINS",
    "EXPIRATION_FORMAT",
    "parse_expiration",
    # Providers
    "TokenConfigCredentialProvider",
    "EnvCredentialProvider",
    "StaticCredentialProvider",
    "get_default_provider",
    "DEFAULT_TOKEN_CONFIG_PATH",
]
