import os
from typing import Dict, Optional, Union

import httpx
import pytest
from dulwich.objects import Blob, Commit, Tree
from dulwich.repo import Repo
from fastapi.testclient import TestClient

from services.pages.config import PagesConfig
from services.pages.main import create_app

# name -> content, or name -> (mode, content) for symlinks and executables
FileSpec = Dict[str, Union[bytes, tuple]]

REGULAR_FILE_MODE = 0o100644
DIRECTORY_MODE = 0o040000
SYMLINK_MODE = 0o120000


def _nest(files: FileSpec) -> dict:
    root: dict = {}
    for path, content in files.items():
        node = root
        *dirs, name = path.split("/")
        for directory in dirs:
            node = node.setdefault(directory, {})
        node[name] = content
    return root


def _write_tree(object_store, node: dict) -> bytes:
    tree = Tree()
    for name, value in sorted(node.items()):
        if isinstance(value, dict):
            tree.add(name.encode("utf-8"), DIRECTORY_MODE, _write_tree(object_store, value))
            continue
        mode, data = value if isinstance(value, tuple) else (REGULAR_FILE_MODE, value)
        blob = Blob.from_string(data)
        object_store.add_object(blob)
        tree.add(name.encode("utf-8"), mode, blob.id)
    object_store.add_object(tree)
    return tree.id


def build_repository(
    storage_root: str,
    owner: str,
    repository: str = "pages",
    files: Optional[FileSpec] = None,
    branch: str = "master",
    message: bytes = b"Publish pages",
) -> Optional[str]:
    """
    Create (or extend) a bare repository and commit `files` on `branch`.

    Returns the new head commit id, or None when `files` is None and only an
    empty repository was created.
    """
    path = os.path.join(storage_root, owner, f"{repository}.git")
    if os.path.isdir(path):
        repo = Repo(path)
    else:
        os.makedirs(path)
        repo = Repo.init_bare(path)

    try:
        if files is None:
            return None

        commit = Commit()
        commit.tree = _write_tree(repo.object_store, _nest(files))
        commit.author = commit.committer = b"Pages Test <pages@example.com>"
        commit.author_time = commit.commit_time = 1700000000
        commit.author_timezone = commit.commit_timezone = 0
        commit.encoding = b"UTF-8"
        commit.message = message

        branch_ref = b"refs/heads/" + branch.encode("utf-8")
        try:
            commit.parents = [repo.refs[branch_ref]]
        except KeyError:
            pass

        repo.object_store.add_object(commit)
        repo.refs[branch_ref] = commit.id
        return commit.id.decode("ascii")
    finally:
        repo.close()


SITE_FILES: FileSpec = {
    "index.html": b"<h1>alice</h1>",
    "about.html": b"<h1>about</h1>",
    "logo.svg": b"<svg></svg>",
    "style.css": b"body {}",
    "my file.txt": b"spaced",
    "blog/index.html": b"<h1>blog</h1>",
    "blog/post.md": b"# post",
    "404.html": b"<h1>custom not found</h1>",
    "_redirects": b"/old /about 301\n/docs/* https://docs.example.com/:splat 302\n",
    "link.html": (SYMLINK_MODE, b"index.html"),
}


@pytest.fixture
def storage_root(tmp_path):
    root = tmp_path / "repositories"
    root.mkdir()
    return str(root)


@pytest.fixture
def site_revision(storage_root):
    """alice/pages with a complete site; returns the head commit id."""
    return build_repository(storage_root, "alice", files=SITE_FILES)


@pytest.fixture
def pages_config_factory(storage_root, tmp_path):
    def _factory(**overrides) -> PagesConfig:
        values = {
            "STORAGE_ROOT": storage_root,
            "ROUTING_CONFIG_PATH": str(tmp_path / "missing-routing.yml"),
            "MAIN_DOMAIN": "codeberg.page",
            "UPSTREAM_API_URL": "http://upstream.test",
            "REPOSITORY_QUERY_TIMEOUT": 5.0,
        }
        values.update(overrides)
        return PagesConfig(**values)

    return _factory


@pytest.fixture
def pages_config(pages_config_factory):
    return pages_config_factory()


@pytest.fixture
def client(pages_config):
    app = create_app(pages_config)
    with TestClient(app, follow_redirects=False) as test_client:
        yield test_client


@pytest.fixture
def repository_builder(storage_root):
    """Callable creating repositories under the test storage root."""

    def _build(owner: str, repository: str = "pages", files: Optional[FileSpec] = None, **kwargs):
        return build_repository(storage_root, owner, repository, files, **kwargs)

    return _build


class UpstreamBody(httpx.AsyncByteStream):
    """Response body that is only read when the relay iterates it."""

    def __init__(self, content: bytes):
        self.content = content

    async def __aiter__(self):
        yield self.content


@pytest.fixture
def unread_body():
    """Callable building an unread upstream body for `httpx.Response(stream=...)`."""
    return UpstreamBody
