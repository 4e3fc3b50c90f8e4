from services.pages.config import PagesConfig
from services.pages.core.landing import DEFAULT_LANDING_PAGE, load_landing_page


def test_defaults(monkeypatch):
    for name in ["ROUTING_MODE", "MAIN_DOMAIN", "PAGES_BRANCH", "BLACKLISTED_PATHS"]:
        monkeypatch.delenv(name, raising=False)

    config = PagesConfig(_env_file=None)

    assert config.ROUTING_MODE == "single_tld"
    assert config.MAIN_DOMAIN == "codeberg.page"
    assert config.DEFAULT_REPOSITORY == "pages"
    assert config.PAGES_BRANCH == "master"
    assert config.CACHE_CONTROL == "public, max-age=600"
    assert config.BLACKLISTED_PATHS == ["/.well-known/acme-challenge/"]
    assert config.FORBIDDEN_MIME_TYPES == []


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("ROUTING_MODE", "multi_tld")
    monkeypatch.setenv("FORBIDDEN_MIME_TYPES", '["text/html"]')
    monkeypatch.setenv("REPOSITORY_QUERY_TIMEOUT", "1.5")

    config = PagesConfig(_env_file=None)

    assert config.ROUTING_MODE == "multi_tld"
    assert config.FORBIDDEN_MIME_TYPES == ["text/html"]
    assert config.REPOSITORY_QUERY_TIMEOUT == 1.5


def test_landing_page_default_and_file(tmp_path):
    page = tmp_path / "landing.html"
    page.write_bytes(b"<h1>custom</h1>")

    assert load_landing_page("") == DEFAULT_LANDING_PAGE
    assert load_landing_page(str(tmp_path / "missing.html")) == DEFAULT_LANDING_PAGE
    assert load_landing_page(str(page)) == b"<h1>custom</h1>"
