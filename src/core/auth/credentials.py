"""
Alibaba Cloud credential providers.

This module provides the black-box "fetch a credential" step used when a
sink has to build a new EventBridge client.

Supported Sources:
    - Token config file: JSON written by the cluster addon token manager
      (default /var/addon/token-config), refreshed in place before expiry
    - Environment variables: ALIBABA_CLOUD_ACCESS_KEY_ID and friends
    - Static credential: an explicit Credential, for tests and embedding

Security Notes:
    - Secrets and security tokens are never logged
    - Error messages name the source, not its content

Example:
    >>> provider = get_default_provider()
    >>> credential = provider.fetch()
    >>> credential.is_valid()
    True
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional, Union

from core.auth.credential_cache import Credential
from core.errors.exceptions import CredentialError
from core.types import CredentialProvider

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_CONFIG_PATH = "/var/addon/token-config"

# Keys in the addon token config document
TOKEN_CONFIG_KEYS = ("AccessKeyId", "AccessKeySecret", "SecurityToken", "Expiration")

ENV_ACCESS_KEY_ID = "ALIBABA_CLOUD_ACCESS_KEY_ID"
ENV_ACCESS_KEY_SECRET = "ALIBABA_CLOUD_ACCESS_KEY_SECRET"
ENV_SECURITY_TOKEN = "ALIBABA_CLOUD_SECURITY_TOKEN"
ENV_EXPIRATION = "ALIBABA_CLOUD_CREDENTIAL_EXPIRATION"


class TokenConfigCredentialProvider:
    """
    Reads STS credentials from the addon token config file.

    The file is re-read on every fetch; the addon rotates it well before the
    token inside expires, so a fetch triggered by the freshness check picks
    up the rotated token.
    """

    def __init__(self, path: Union[str, Path] = DEFAULT_TOKEN_CONFIG_PATH):
        self.path = Path(path)

    def fetch(self) -> Credential:
        """
        Read and parse the token config file.

        Raises:
            CredentialError: If file is missing, unreadable, not JSON, or
                lacks one of the required keys
        """
        if not self.path.exists():
            raise CredentialError(
                f"Token config file not found: {self.path}",
                context={"token_config_path": str(self.path)},
            )

        try:
            content = self.path.read_text(encoding="utf-8-sig").strip()
        except OSError as e:
            raise CredentialError(
                f"Failed to read token config file: {self.path}", cause=e
            ) from e

        try:
            document = json.loads(content)
        except json.JSONDecodeError as e:
            raise CredentialError(
                f"Token config file is not valid JSON: {self.path}", cause=e
            ) from e

        if not isinstance(document, dict):
            raise CredentialError(f"Token config file must hold a JSON object: {self.path}")

        missing = [key for key in TOKEN_CONFIG_KEYS if not document.get(key)]
        if missing:
            raise CredentialError(
                f"Token config file is missing keys: {', '.join(missing)}",
                context={"token_config_path": str(self.path), "missing": missing},
            )

        credential = Credential(
            access_key_id=str(document["AccessKeyId"]),
            access_key_secret=str(document["AccessKeySecret"]),
            security_token=str(document["SecurityToken"]),
            expiration=str(document["Expiration"]),
        )
        logger.info(
            "Loaded credential from token config",
            extra={
                "token_config_path": str(self.path),
                "access_key_id": credential.access_key_id,
                "expires_at": credential.expiration,
            },
        )
        return credential


class EnvCredentialProvider:
    """
    Reads credentials from environment variables.

    Without ALIBABA_CLOUD_CREDENTIAL_EXPIRATION the key pair is treated as
    non-expiring.
    """

    def fetch(self) -> Credential:
        access_key_id = os.getenv(ENV_ACCESS_KEY_ID)
        access_key_secret = os.getenv(ENV_ACCESS_KEY_SECRET)
        if not access_key_id or not access_key_secret:
            raise CredentialError(
                f"{ENV_ACCESS_KEY_ID} and {ENV_ACCESS_KEY_SECRET} must be set"
            )

        logger.debug("Loaded credential from environment", extra={"access_key_id": access_key_id})
        return Credential(
            access_key_id=access_key_id,
            access_key_secret=access_key_secret,
            security_token=os.getenv(ENV_SECURITY_TOKEN, ""),
            expiration=os.getenv(ENV_EXPIRATION) or None,
        )


class StaticCredentialProvider:
    """Hands out one fixed credential."""

    def __init__(self, credential: Credential):
        self.credential = credential

    def fetch(self) -> Credential:
        return self.credential


def get_default_provider(
    token_config_path: Optional[Union[str, Path]] = None,
) -> CredentialProvider:
    """
    Pick the credential source for this environment.

    Uses the token config file when it exists (in-cluster addon), otherwise
    falls back to environment variables.
    """
    path = Path(token_config_path or DEFAULT_TOKEN_CONFIG_PATH)
    if path.exists():
        logger.info("Using token config credential provider", extra={"token_config_path": str(path)})
        return TokenConfigCredentialProvider(path)

    logger.info("Token config not found, using environment credential provider")
    return EnvCredentialProvider()


__all__ = [
    "TokenConfigCredentialProvider",
    "EnvCredentialProvider",
    "StaticCredentialProvider",
    "get_default_provider",
    "DEFAULT_TOKEN_CONFIG_PATH",
]
