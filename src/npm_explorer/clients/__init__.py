"""HTTP clients for the npm registry and the downloads statistics API."""

from npm_explorer.clients.downloads import DownloadsClient
from npm_explorer.clients.http import HttpClient
from npm_explorer.clients.names import encode_package_name
from npm_explorer.clients.registry import RegistryClient

__all__ = [
    "DownloadsClient",
    "HttpClient",
    "RegistryClient",
    "encode_package_name",
]
