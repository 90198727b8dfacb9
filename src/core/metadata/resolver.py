"""
ECS instance metadata resolver.

Resolves the region and owner account id of the node the sink runs on.
Environment overrides win; otherwise the metadata service is queried.
"""

import logging
import os
from typing import Optional

import requests

from core.errors.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_METADATA_URL = "http://100.100.100.200/latest/meta-data"
DEFAULT_METADATA_TIMEOUT_SECONDS = 5.0

ENV_REGION = "RegionId"
ENV_OWNER_ACCOUNT_ID = "OwnerAccountId"


class MetadataResolver:
    """
    Looks up instance metadata with environment overrides.

    Args:
        base_url: Metadata service root (no trailing slash needed)
        timeout: Per-request timeout in seconds
        session: Optional requests session, created lazily if omitted
    """

    def __init__(
        self,
        base_url: str = DEFAULT_METADATA_URL,
        timeout: float = DEFAULT_METADATA_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session

    def _get_session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def _fetch(self, path: str) -> str:
        url = f"{self.base_url}/{path}"
        try:
            response = self._get_session().get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise ConfigurationError(
                f"Failed to query instance metadata: {path}",
                cause=e,
                context={"http_url": url},
            ) from e

        value = response.text.strip()
        if not value:
            raise ConfigurationError(
                f"Instance metadata returned an empty value: {path}",
                context={"http_url": url},
            )

        logger.debug("Resolved instance metadata", extra={"http_url": url})
        return value

    def _resolve(self, env_var: str, path: str) -> str:
        value = os.getenv(env_var)
        if value:
            return value
        return self._fetch(path)

    def region(self) -> str:
        """Region id, e.g. ``cn-hangzhou``."""
        return self._resolve(ENV_REGION, "region-id")

    def account_id(self) -> str:
        """Owner account id of the instance."""
        return self._resolve(ENV_OWNER_ACCOUNT_ID, "owner-account-id")


__all__ = [
    "MetadataResolver",
    "DEFAULT_METADATA_URL",
    "DEFAULT_METADATA_TIMEOUT_SECONDS",
]
