"""Resolve package routes into a package name and optional version.

Routes come in three shapes:

- ``react`` or ``react/v/18.2.0``
- ``@babel/parser`` or ``@babel/parser/v/7.0.0`` (scope split in two segments)
- ``%40babel%2Fparser`` or ``%40babel%2Fparser/v/7.0.0`` (one encoded segment)
"""

import logging
import re
from collections.abc import Sequence
from urllib.parse import unquote

from npm_explorer.models import PackageIdentity

logger = logging.getLogger(__name__)

VERSION_MARKER = "v"

# A "%" not followed by two hex digits makes the whole segment undecodable.
_MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def decode_segment(segment: str) -> str:
    """Percent-decode a single path segment.

    Args:
        segment: Raw segment as it appeared in the route.

    Returns:
        The decoded segment, or the raw segment if it is not valid
        percent-encoded UTF-8.
    """
    if _MALFORMED_ESCAPE.search(segment):
        logger.debug("Keeping malformed path segment as is: %s", segment)
        return segment
    try:
        return unquote(segment, errors="strict")
    except UnicodeDecodeError:
        logger.debug("Keeping undecodable path segment as is: %s", segment)
        return segment


def split_package_path(path: str) -> list[str]:
    """Split a slash-separated route like ``@scope/name/v/1.0.0`` into segments."""
    return [part for part in path.strip("/").split("/") if part]


def parse_package_path(segments: Sequence[str]) -> PackageIdentity:
    """Turn raw route segments into a PackageIdentity.

    Args:
        segments: Route segments in order, possibly percent-encoded.

    Returns:
        The resolved identity. ``name`` is None when ``segments`` is empty;
        callers should treat that as a missing package.
    """
    parts = [decode_segment(segment) for segment in segments]
    if not parts:
        return PackageIdentity(name=None)

    first = parts[0]
    if first.startswith("@") and "/" in first:
        name = first
        version_at = 1
    elif first.startswith("@"):
        name = f"{first}/{_at(parts, 1) or ''}"
        version_at = 2
    else:
        name = first
        version_at = 1

    version = None
    if _at(parts, version_at) == VERSION_MARKER and _at(parts, version_at + 1):
        version = parts[version_at + 1]

    return PackageIdentity(name=name, version=version)


def _at(parts: list[str], index: int):
    return parts[index] if index < len(parts) else None
