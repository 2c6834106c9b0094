"""Pytest configuration and fixtures."""

import copy
from typing import Any

import pytest

from npm_explorer.config import ExplorerSettings

REGISTRY_URL = "https://registry.npmjs.org"
DOWNLOADS_URL = "https://api.npmjs.org/downloads"

_METADATA = {
    "_id": "left-pad",
    "name": "left-pad",
    "description": "String left pad",
    "dist-tags": {"latest": "1.3.0", "next": "2.0.0-beta.1"},
    "versions": {
        "1.0.0": {
            "name": "left-pad",
            "version": "1.0.0",
            "license": "WTFPL",
            "dist": {"shasum": "a", "tarball": "https://example.com/1.0.0.tgz"},
            "deprecated": "use String.prototype.padStart()",
        },
        "1.3.0": {
            "name": "left-pad",
            "version": "1.3.0",
            "license": "WTFPL",
            "dependencies": {"pad-core": "^1.0.0"},
            "devDependencies": {"tape": "*"},
            "engines": {"node": ">=0.10"},
            "typings": "index.d.ts",
            "dist": {
                "shasum": "b",
                "tarball": "https://example.com/1.3.0.tgz",
                "fileCount": 7,
                "unpackedSize": 10542,
            },
        },
        "1.2.0": {
            "name": "left-pad",
            "version": "1.2.0",
            "license": "WTFPL",
            "dist": {"shasum": "c", "tarball": "https://example.com/1.2.0.tgz"},
        },
        "2.0.0-beta.1": {
            "name": "left-pad",
            "version": "2.0.0-beta.1",
            "license": "MIT",
            "dist": {"shasum": "d", "tarball": "https://example.com/2.0.0-beta.1.tgz"},
        },
    },
    "time": {
        "created": "2014-03-14T01:05:00.000Z",
        "modified": "2018-04-09T12:00:00.000Z",
        "1.0.0": "2014-03-14T01:05:00.000Z",
        "1.2.0": "2017-11-01T09:00:00.000Z",
        "1.3.0": "2018-04-09T12:00:00.000Z",
    },
    "maintainers": [{"name": "stevemao", "email": "steve@example.com"}],
    "author": {"name": "azer", "email": "azer@example.com"},
    "repository": {"type": "git", "url": "git+https://github.com/stevemao/left-pad.git"},
    "license": "WTFPL",
    "homepage": "https://github.com/stevemao/left-pad#readme",
    "keywords": ["leftpad", "left", "pad", "padding"],
    "readme": "# left-pad\n\nString left pad.",
}

_SEARCH = {
    "objects": [
        {
            "package": {
                "name": "react",
                "scope": "unscoped",
                "version": "18.2.0",
                "description": "React is a JavaScript library for building user interfaces.",
                "keywords": ["react"],
                "date": "2022-06-14T19:46:38.369Z",
                "links": {"npm": "https://www.npmjs.com/package/react"},
                "author": {"name": "Meta"},
                "publisher": {"name": "gnoff"},
                "maintainers": [{"name": "gnoff"}],
            },
            "score": {
                "final": 0.93,
                "detail": {"quality": 0.87, "popularity": 0.99, "maintenance": 0.91},
            },
            "searchScore": 100000.0,
        },
        {
            "package": {
                "name": "@types/react",
                "scope": "types",
                "version": "18.2.14",
                "description": "TypeScript definitions for React",
                "date": "2023-06-28T10:00:00.000Z",
                "links": {},
                "publisher": {"name": "types"},
                "maintainers": [],
            },
            "score": {
                "final": 0.8,
                "detail": {"quality": 0.7, "popularity": 0.9, "maintenance": 0.8},
            },
            "searchScore": 90000.0,
        },
    ],
    "total": 2,
    "time": "Wed Jun 28 2023 10:00:00 GMT+0000",
}


@pytest.fixture
def sample_metadata_response() -> dict[str, Any]:
    """Return a registry document for left-pad (deep copy, safe to modify)."""
    return copy.deepcopy(_METADATA)


@pytest.fixture
def sample_search_response() -> dict[str, Any]:
    """Return a search envelope with two hits (deep copy, safe to modify)."""
    return copy.deepcopy(_SEARCH)


@pytest.fixture
def settings() -> ExplorerSettings:
    """Return settings pointing at the public endpoints."""
    return ExplorerSettings(registry_url=REGISTRY_URL, downloads_url=DOWNLOADS_URL)
