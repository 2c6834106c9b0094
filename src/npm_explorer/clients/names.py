"""Package name encoding for registry URLs."""

from urllib.parse import quote

# Characters encodeURIComponent leaves alone on top of quote()'s defaults.
URI_COMPONENT_SAFE = "!*'()"


def encode_package_name(name: str) -> str:
    """Encode a package name as a single registry path segment.

    Scoped packages keep their ``@`` and only have the first ``/`` escaped,
    so ``@scope/name`` becomes ``@scope%2Fname``. Any other name is escaped
    like a URI component.

    Args:
        name: Package name.

    Returns:
        The encoded path segment.
    """
    if name.startswith("@"):
        return name.replace("/", "%2F", 1)
    return quote(name, safe=URI_COMPONENT_SAFE)
