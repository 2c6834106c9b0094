"""Human-readable formatting helpers used by the CLI and the reporters.

Every function here is total: bad input yields a harmless string (or None)
instead of an exception.
"""

import re
from datetime import UTC, datetime
from typing import Optional, Union

from npm_explorer.models import Repository

SECONDS_PER_DAY = 60 * 60 * 24

GITHUB_PATTERN = re.compile(
    r"github\.com[/:]([\w-]+)/([\w.-]+?)(?:\.git)?(?:#.*)?$", re.ASCII
)

PACKAGE_MANAGERS = {
    "npm": "npm install {name}",
    "yarn": "yarn add {name}",
    "pnpm": "pnpm add {name}",
    "bun": "bun add {name}",
}


def format_downloads(count: int) -> str:
    """Format a download count, e.g. 1500 -> "1.5K", 2300000 -> "2.3M"."""
    if count >= 1_000_000_000:
        return f"{count / 1_000_000_000:.1f}B"
    if count >= 1_000_000:
        return f"{count / 1_000_000:.1f}M"
    if count >= 1_000:
        return f"{count / 1_000:.1f}K"
    return str(count)


def format_file_size(size: int) -> str:
    """Format a byte count, e.g. 1500 -> "1.5 KB"."""
    if size >= 1_000_000:
        return f"{size / 1_000_000:.1f} MB"
    if size >= 1_000:
        return f"{size / 1_000:.1f} KB"
    return f"{size} B"


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp from the registry.

    Naive timestamps are taken as UTC.

    Returns:
        Aware datetime, or None if ``value`` is empty or not ISO 8601.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def format_relative_time(timestamp: Optional[str], now: Optional[datetime] = None) -> str:
    """Describe how long ago ``timestamp`` was.

    Args:
        timestamp: ISO 8601 timestamp.
        now: Reference time. Defaults to the current UTC time.

    Returns:
        "today", "yesterday", "N days ago", "N weeks ago", "N months ago"
        or "N years ago". Empty string if the timestamp cannot be parsed.
    """
    then = parse_timestamp(timestamp)
    if then is None:
        return ""
    if now is None:
        now = datetime.now(UTC)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=UTC)

    days = int((now - then).total_seconds() / SECONDS_PER_DAY)

    if days == 0:
        return "today"
    if days == 1:
        return "yesterday"
    if days < 7:
        return f"{days} days ago"
    if days < 30:
        return f"{int(days / 7)} weeks ago"
    if days < 365:
        return f"{int(days / 30)} months ago"
    return f"{int(days / 365)} years ago"


def get_github_url(repository: Union[Repository, dict, str, None]) -> Optional[str]:
    """Extract a canonical GitHub URL from a repository descriptor.

    Accepts ``github.com/owner/repo`` and ``github.com:owner/repo`` forms
    with an optional ``.git`` suffix and ``#fragment``.

    Args:
        repository: Repository URL string, a ``{"url": ...}`` mapping or a
            Repository.

    Returns:
        ``https://github.com/<owner>/<repo>``, or None if not on GitHub.
    """
    if not repository:
        return None
    if isinstance(repository, Repository):
        url = repository.url
    elif isinstance(repository, dict):
        url = repository.get("url")
    else:
        url = repository
    if not url:
        return None

    match = GITHUB_PATTERN.search(url)
    if match is None:
        return None
    owner, repo = match.groups()
    return f"https://github.com/{owner}/{repo}"


def install_commands(name: str) -> dict[str, str]:
    """Return the install command for ``name`` per package manager."""
    return {manager: template.format(name=name) for manager, template in PACKAGE_MANAGERS.items()}
