from npm_explorer.models import (
    Enriched,
    Maintainer,
    RawRegistryMetadata,
    Repository,
    SearchHit,
    SearchPage,
    UserPage,
)


def test_raw_metadata_keeps_upstream_version_order(sample_metadata_response):
    """Test that versions are kept as ordered pairs in upstream order."""
    metadata = RawRegistryMetadata.from_json(sample_metadata_response)

    assert [version for version, _ in metadata.versions] == [
        "1.0.0",
        "1.3.0",
        "1.2.0",
        "2.0.0-beta.1",
    ]
    assert metadata.latest == "1.3.0"
    assert metadata.version_document("1.2.0")["version"] == "1.2.0"
    assert metadata.version_document("9.9.9") is None


def test_raw_metadata_tolerates_sparse_document():
    """Test that a document with only a name parses."""
    metadata = RawRegistryMetadata.from_json({"name": "empty"})

    assert metadata.versions == ()
    assert metadata.latest is None
    assert metadata.repository is None


def test_maintainer_and_repository_from_strings():
    """Test the legacy string forms of maintainers and repositories."""
    assert Maintainer.from_json("alice") == Maintainer(name="alice")
    assert Repository.from_json("github:foo/bar") == Repository(url="github:foo/bar")
    assert Repository.from_json(None) is None


def test_search_hit_with_downloads_returns_copy():
    """Test that attaching downloads leaves the original hit untouched."""
    hit = SearchHit(name="react", version="18.2.0")

    enriched = hit.with_downloads(42)

    assert enriched.downloads == 42
    assert hit.downloads is None


def test_enriched():
    """Test both states of the enrichment wrapper."""
    ok = Enriched.ok(5)
    degraded = Enriched.degraded(0, "HTTP 404")

    assert ok.value == 5 and not ok.is_degraded
    assert degraded.value == 0 and degraded.is_degraded
    assert degraded.reason == "HTTP 404"


def test_search_page_pagination():
    """Test pagination math for a middle page."""
    page = SearchPage(query="react", page=2, per_page=20, total=45)

    assert page.total_pages == 3
    assert page.first_index == 21
    assert page.last_index == 40
    assert page.has_prev_page
    assert page.has_next_page


def test_search_page_last_page():
    """Test pagination math for the last, partial page."""
    page = SearchPage(query="react", page=3, per_page=20, total=45)

    assert page.last_index == 45
    assert not page.has_next_page


def test_user_page_profile_url():
    """Test the npm profile link."""
    assert UserPage(username="sindresorhus").profile_url == "https://www.npmjs.com/~sindresorhus"
