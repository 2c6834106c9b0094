"""Runtime settings for the registry clients.

Settings come from keyword arguments, falling back to ``NPM_EXPLORER_*``
environment variables and then to the public npm endpoints.
"""

import os
from dataclasses import dataclass
from typing import Optional

from npm_explorer import __version__

DEFAULT_REGISTRY_URL = "https://registry.npmjs.org"
DEFAULT_DOWNLOADS_URL = "https://api.npmjs.org/downloads"
DEFAULT_TIMEOUT = 10.0

ENV_PREFIX = "NPM_EXPLORER_"


@dataclass(frozen=True)
class ExplorerSettings:
    """Endpoints and transport settings.

    Attributes:
        registry_url: Base URL of the package registry.
        downloads_url: Base URL of the downloads statistics API.
        timeout: Total timeout in seconds for a single request.
        user_agent: User-Agent header sent with every request.
        concurrency_limit: Maximum download-count requests in flight per
            listing. None means unbounded.
    """

    registry_url: str = DEFAULT_REGISTRY_URL
    downloads_url: str = DEFAULT_DOWNLOADS_URL
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = f"npm-explorer/{__version__}"
    concurrency_limit: Optional[int] = None

    def __post_init__(self) -> None:
        # Endpoint paths are appended with "/", so normalize trailing slashes.
        object.__setattr__(self, "registry_url", self.registry_url.rstrip("/"))
        object.__setattr__(self, "downloads_url", self.downloads_url.rstrip("/"))

    @classmethod
    def from_env(cls, **overrides) -> "ExplorerSettings":
        """Build settings from the environment.

        Args:
            **overrides: Explicit values that win over the environment.
                None values are ignored.

        Returns:
            The resolved settings.

        Raises:
            ValueError: If a numeric environment variable is malformed.
        """
        values: dict = {}

        registry_url = os.environ.get(f"{ENV_PREFIX}REGISTRY_URL")
        if registry_url:
            values["registry_url"] = registry_url

        downloads_url = os.environ.get(f"{ENV_PREFIX}DOWNLOADS_URL")
        if downloads_url:
            values["downloads_url"] = downloads_url

        timeout = os.environ.get(f"{ENV_PREFIX}TIMEOUT")
        if timeout:
            values["timeout"] = float(timeout)

        limit = os.environ.get(f"{ENV_PREFIX}CONCURRENCY_LIMIT")
        if limit:
            values["concurrency_limit"] = int(limit)

        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)
