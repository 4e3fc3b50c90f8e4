import pytest

from services.pages.core.exceptions import UnknownTenantError
from services.pages.models import Redirect, TenantIdentity
from services.pages.services.locator import ArtifactLocator, LocatedArtifact
from services.pages.services.repository_store import AsyncRepositoryReader, DulwichRepositoryStore

ALICE = TenantIdentity(owner="alice", repository="pages")


@pytest.fixture
def locator(storage_root):
    return ArtifactLocator(AsyncRepositoryReader(DulwichRepositoryStore(storage_root)))


@pytest.mark.asyncio
async def test_file_path_is_located_as_is(locator, site_revision):
    result = await locator.locate(ALICE, "blog/post.md", "/blog/post.md")

    assert isinstance(result, LocatedArtifact)
    assert result.path == "blog/post.md"
    assert result.requested_path == "blog/post.md"
    assert result.revision == site_revision


@pytest.mark.asyncio
async def test_root_resolves_to_index(locator, site_revision):
    result = await locator.locate(ALICE, "", "/")

    assert result.path == "index.html"


@pytest.mark.asyncio
async def test_directory_with_slash_resolves_to_index(locator, site_revision):
    result = await locator.locate(ALICE, "blog", "/blog/")

    assert result.path == "blog/index.html"
    assert result.requested_path == "blog"


@pytest.mark.asyncio
async def test_directory_without_slash_redirects(locator, site_revision):
    result = await locator.locate(ALICE, "blog", "/blog", "?x=1")

    assert isinstance(result, Redirect)
    assert result.location == "/blog/?x=1"
    assert result.status_code == 302


@pytest.mark.asyncio
async def test_missing_path_is_still_located(locator, site_revision):
    result = await locator.locate(ALICE, "nope", "/nope")

    assert isinstance(result, LocatedArtifact)
    assert result.path == "nope"


@pytest.mark.asyncio
async def test_unknown_tenant(locator, site_revision):
    with pytest.raises(UnknownTenantError) as exc_info:
        await locator.locate(TenantIdentity(owner="bob", repository="pages"), "", "/")

    assert exc_info.value.status_code == 404
    assert exc_info.value.message == "this user/organization does not have pages"


@pytest.mark.asyncio
async def test_repository_without_branch_has_no_revision(locator, repository_builder):
    repository_builder("dave")

    result = await locator.locate(TenantIdentity(owner="dave", repository="pages"), "x", "/x")

    assert result.revision is None
