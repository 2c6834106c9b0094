"""Exceptions raised by the registry clients.

Only primary content fails loudly. Download statistics never raise; see
:class:`npm_explorer.models.Enriched`.
"""

from typing import Optional


class RegistryError(Exception):
    """Base class for failures talking to the registry."""


class NotFoundError(RegistryError):
    """The requested package or version does not exist upstream."""


class PackageNotFoundError(NotFoundError):
    """The registry has no package with this name."""

    def __init__(self, name: Optional[str]) -> None:
        self.name = name
        super().__init__(f'Package "{name}" not found')


class VersionNotFoundError(NotFoundError):
    """The package exists but the resolved version was never published."""

    def __init__(self, name: str, version: Optional[str]) -> None:
        self.name = name
        self.version = version
        super().__init__(f'Version "{version}" not found for package "{name}"')


class UpstreamError(RegistryError):
    """Any other non-success response or transport failure.

    Attributes:
        status: HTTP status code, or None for transport errors.
    """

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        self.status = status
        super().__init__(message)
