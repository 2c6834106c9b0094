"""Shape raw registry documents into display-ready package aggregates."""

import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Any, Optional

from npm_explorer.formatting import parse_timestamp
from npm_explorer.models import (
    PackageAggregate,
    RawRegistryMetadata,
    Repository,
    VersionRecord,
    license_text,
)

logger = logging.getLogger(__name__)


def author_name(author: Any) -> Optional[str]:
    """Reduce an author field (string or ``{"name": ...}``) to a display name."""
    if not author:
        return None
    if isinstance(author, str):
        return author
    return author.get("name")


def version_records(metadata: RawRegistryMetadata) -> list[VersionRecord]:
    """Build one VersionRecord per published version, in upstream order."""
    return [
        VersionRecord(
            version=version,
            date=metadata.time.get(version) or "",
            deprecated=document.get("deprecated"),
        )
        for version, document in metadata.versions
    ]


def sort_versions(records: Iterable[VersionRecord]) -> list[VersionRecord]:
    """Sort versions newest first by publish timestamp.

    The sort is stable: versions published at the same instant keep their
    upstream order. Versions without a usable timestamp go last.
    """
    dated: list[tuple[datetime, VersionRecord]] = []
    undated: list[VersionRecord] = []
    for record in records:
        published = parse_timestamp(record.date)
        if published is None:
            undated.append(record)
        else:
            dated.append((published, record))

    dated.sort(key=lambda pair: pair[0], reverse=True)
    return [record for _, record in dated] + undated


def filter_versions(
    records: Iterable[VersionRecord], query: Optional[str]
) -> list[VersionRecord]:
    """Keep versions whose number contains ``query``, ignoring case.

    An empty or missing query keeps every record. Order is preserved.
    """
    if not query:
        return list(records)
    needle = query.lower()
    return [record for record in records if needle in record.version.lower()]


def normalize(metadata: RawRegistryMetadata, version: str) -> PackageAggregate:
    """Build the PackageAggregate for one version of a package.

    Args:
        metadata: Full registry document.
        version: Version to describe. Must be a key of ``metadata.versions``.

    Returns:
        The normalized aggregate.

    Raises:
        KeyError: If ``version`` was never published. Use
            :meth:`RegistryClient.get_details` to get a VersionNotFoundError
            instead.
    """
    document = metadata.version_document(version)
    if document is None:
        raise KeyError(version)

    dist = document.get("dist") or {}
    logger.debug("Normalizing %s@%s", metadata.name, version)

    return PackageAggregate(
        name=metadata.name,
        version=version,
        description=metadata.description,
        keywords=metadata.keywords,
        author=author_name(metadata.author),
        license=license_text(document.get("license")) or metadata.license,
        homepage=metadata.homepage,
        repository=metadata.repository or Repository.from_json(document.get("repository")),
        readme=metadata.readme,
        dependencies=dict(document.get("dependencies") or {}),
        dev_dependencies=dict(document.get("devDependencies") or {}),
        peer_dependencies=dict(document.get("peerDependencies") or {}),
        versions=tuple(sort_versions(version_records(metadata))),
        maintainers=metadata.maintainers,
        published_at=metadata.time.get("created"),
        updated_at=metadata.time.get("modified"),
        deprecated=document.get("deprecated"),
        dist_tags=dict(metadata.dist_tags),
        engines=_mapping(document.get("engines")),
        types=bool(document.get("types") or document.get("typings")),
        unpacked_size=dist.get("unpackedSize"),
        file_count=dist.get("fileCount"),
    )


def _mapping(value: Any) -> dict[str, str]:
    # Some early packages published "engines" as a list of strings.
    return dict(value) if isinstance(value, dict) else {}
