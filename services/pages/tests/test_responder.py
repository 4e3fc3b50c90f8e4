import pytest

from services.pages.core.exceptions import ArtifactNotFoundError
from services.pages.models import PageResponse, Redirect, TenantIdentity
from services.pages.services.locator import ArtifactLocator, LocatedArtifact
from services.pages.services.repository_store import AsyncRepositoryReader, DulwichRepositoryStore
from services.pages.services.responder import (
    ConditionalFetchResponder,
    etag_matches,
    parse_entity_tags,
)

ALICE = TenantIdentity(owner="alice", repository="pages")


@pytest.fixture
def reader(storage_root):
    return AsyncRepositoryReader(DulwichRepositoryStore(storage_root))


@pytest.fixture
def responder(reader):
    return ConditionalFetchResponder(reader)


def artifact(path, revision, tenant=ALICE):
    return LocatedArtifact(tenant=tenant, path=path, requested_path=path, revision=revision)


class TestEntityTags:
    def test_parse_list(self):
        assert parse_entity_tags('"abc", W/"def" ,ghi') == ["abc", "def", "ghi"]

    def test_parse_empty(self):
        assert parse_entity_tags(None) == []
        assert parse_entity_tags("") == []

    def test_matches(self):
        assert etag_matches('"other", "rev1"', "rev1")
        assert not etag_matches('"rev10"', "rev1")
        assert not etag_matches(None, "rev1")


class TestConditionalFetchResponder:
    @pytest.mark.asyncio
    async def test_serves_file_with_etag(self, responder, site_revision):
        result = await responder.respond(artifact("logo.svg", site_revision))

        assert isinstance(result, PageResponse)
        assert result.status_code == 200
        assert result.body == b"<svg></svg>"
        assert result.headers["Content-Type"] == "image/svg+xml"
        assert result.headers["ETag"] == f'"{site_revision}"'

    @pytest.mark.asyncio
    async def test_matching_etag_returns_304_without_reading(self, site_revision):
        class CountingReader:
            calls = 0

            async def read_blob(self, *args):
                CountingReader.calls += 1
                return b"content"

        responder = ConditionalFetchResponder(CountingReader())
        result = await responder.respond(
            artifact("index.html", site_revision), f'"{site_revision}"'
        )

        assert result.status_code == 304
        assert result.body == b""
        assert result.headers == {"ETag": f'"{site_revision}"'}
        assert CountingReader.calls == 0

    @pytest.mark.asyncio
    async def test_stale_etag_serves_content(self, responder, site_revision):
        result = await responder.respond(artifact("index.html", site_revision), '"stale"')

        assert result.status_code == 200
        assert result.body == b"<h1>alice</h1>"

    @pytest.mark.asyncio
    async def test_html_fallback(self, responder, site_revision):
        result = await responder.respond(artifact("about", site_revision))

        assert result.status_code == 200
        assert result.body == b"<h1>about</h1>"
        assert result.headers["Content-Type"] == "text/html"

    @pytest.mark.asyncio
    async def test_redirects_file(self, responder, site_revision):
        result = await responder.respond(artifact("old", site_revision), request_path="/old")

        assert isinstance(result, Redirect)
        assert result.location == "/about"
        assert result.status_code == 301

    @pytest.mark.asyncio
    async def test_redirects_splat(self, responder, site_revision):
        result = await responder.respond(
            artifact("docs/intro", site_revision), request_path="/docs/intro"
        )

        assert result.location == "https://docs.example.com/intro"
        assert result.status_code == 302

    @pytest.mark.asyncio
    async def test_custom_not_found_page(self, responder, site_revision):
        result = await responder.respond(
            artifact("missing", site_revision), request_path="/missing"
        )

        assert result.status_code == 404
        assert result.body == b"<h1>custom not found</h1>"
        assert result.headers["Content-Type"] == "text/html"
        assert result.headers["ETag"] == f'"{site_revision}"'

    @pytest.mark.asyncio
    async def test_generic_not_found(self, responder, repository_builder):
        revision = repository_builder("bob", files={"index.html": b"bob"})

        with pytest.raises(ArtifactNotFoundError) as exc_info:
            await responder.respond(
                artifact("blog/post", revision, TenantIdentity(owner="bob", repository="pages")),
                request_path="/blog/post",
            )

        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "no such file in repo: 'blog/post'"
        assert exc_info.value.headers == {"ETag": f'"{revision}"'}

    @pytest.mark.asyncio
    async def test_unknown_extension_uses_default_type(self, reader, repository_builder):
        revision = repository_builder("bob", files={"data.bin": b"\x00\x01"})
        responder = ConditionalFetchResponder(reader, default_mime_type="application/x-custom")

        result = await responder.respond(
            artifact("data.bin", revision, TenantIdentity(owner="bob", repository="pages"))
        )

        assert result.headers["Content-Type"] == "application/x-custom"

    @pytest.mark.asyncio
    async def test_forbidden_type_replaced(self, reader, site_revision):
        responder = ConditionalFetchResponder(reader, forbidden_mime_types=["image/svg+xml"])

        result = await responder.respond(artifact("logo.svg", site_revision))

        assert result.headers["Content-Type"] == "application/octet-stream"

    @pytest.mark.asyncio
    async def test_no_revision_has_no_etag(self, responder, repository_builder):
        repository_builder("dave")

        with pytest.raises(ArtifactNotFoundError):
            await responder.respond(
                artifact("index.html", None, TenantIdentity(owner="dave", repository="pages")),
                '"anything"',
            )

    @pytest.mark.asyncio
    async def test_fetches_use_located_revision(self, reader, responder, repository_builder):
        tenant = TenantIdentity(owner="erin", repository="pages")
        old_revision = repository_builder(
            "erin", files={"page.html": b"old", "_redirects": b"/gone /page 302\n"}
        )
        located = await ArtifactLocator(reader).locate(tenant, "page.html", "/page.html")
        located_missing = await ArtifactLocator(reader).locate(tenant, "gone", "/gone")
        new_revision = repository_builder("erin", files={"page.html": b"new", "gone": b"here"})

        result = await responder.respond(located)
        redirect = await responder.respond(located_missing, request_path="/gone")

        assert new_revision != old_revision
        assert located.revision == old_revision
        assert result.body == b"old"
        assert result.headers["ETag"] == f'"{old_revision}"'
        assert isinstance(redirect, Redirect)
        assert redirect.location == "/page"
