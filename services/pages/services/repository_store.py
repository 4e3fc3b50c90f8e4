"""
Repository store.

Read-only access to the bare repositories holding tenant content. Blocking
git access goes through dulwich; `AsyncRepositoryReader` runs those calls on
worker threads with a bounded timeout.

Storage layout: {storage_root}/{owner}/{repository}.git
"""

import asyncio
import logging
import os
import stat
from typing import Callable, Optional, Protocol, Tuple, TypeVar

from dulwich.errors import NotGitRepository, NotTreeError
from dulwich.object_store import tree_lookup_path
from dulwich.repo import Repo

from ..core.exceptions import InvalidRequestPathError

logger = logging.getLogger("pages.repository_store")

T = TypeVar("T")


def resolve_repository_root(storage_root: str, owner: str, repository: str) -> str:
    """
    Return the canonical on-disk path of a tenant repository.

    Symlinks and aliases are resolved first; the result must stay inside the
    canonical storage root.

    Raises:
        InvalidRequestPathError: 404 when the path escapes the storage root
    """
    root = os.path.realpath(storage_root)
    candidate = os.path.realpath(os.path.join(root, owner, f"{repository}.git"))
    if os.path.commonpath([root, candidate]) != root or candidate == root:
        logger.warning(
            "Repository path escapes storage root",
            extra={"owner": owner, "repository": repository},
        )
        raise InvalidRequestPathError(f"/{owner}/{repository}")
    return candidate


class RepositoryStore(Protocol):
    """Query interface over tenant repositories. `revision=None` means latest."""

    def repository_exists(self, owner: str, repository: str) -> bool: ...

    def latest_revision_id(self, owner: str, repository: str) -> Optional[str]: ...

    def is_directory(
        self, owner: str, repository: str, path: str, revision: Optional[str] = None
    ) -> bool: ...

    def read_blob(
        self, owner: str, repository: str, path: str, revision: Optional[str] = None
    ) -> Optional[bytes]: ...


class DulwichRepositoryStore:
    """
    RepositoryStore over bare git repositories on local disk.

    Content is read from a single branch; its head commit id is the revision id.
    """

    def __init__(self, storage_root: str, branch: str = "master"):
        self.storage_root = storage_root
        self.branch_ref = b"refs/heads/" + branch.encode("utf-8")

    def _open(self, owner: str, repository: str) -> Repo:
        return Repo(resolve_repository_root(self.storage_root, owner, repository))

    def repository_exists(self, owner: str, repository: str) -> bool:
        path = resolve_repository_root(self.storage_root, owner, repository)
        if not os.path.isdir(path):
            return False
        try:
            Repo(path).close()
        except NotGitRepository:
            return False
        return True

    def latest_revision_id(self, owner: str, repository: str) -> Optional[str]:
        try:
            with self._open(owner, repository) as repo:
                return repo.refs[self.branch_ref].decode("ascii")
        except (KeyError, NotGitRepository):
            return None

    def _lookup(
        self, repo: Repo, path: str, revision: Optional[str]
    ) -> Optional[Tuple[int, bytes]]:
        """Return (mode, sha) of `path` at `revision`, or None when absent."""
        try:
            commit_id = revision.encode("ascii") if revision else repo.refs[self.branch_ref]
            tree_id = repo[commit_id].tree
            if not path:
                return stat.S_IFDIR, tree_id
            return tree_lookup_path(repo.object_store.__getitem__, tree_id, path.encode("utf-8"))
        except (KeyError, NotTreeError):
            return None

    def is_directory(
        self, owner: str, repository: str, path: str, revision: Optional[str] = None
    ) -> bool:
        try:
            with self._open(owner, repository) as repo:
                entry = self._lookup(repo, path, revision)
        except NotGitRepository:
            return False
        return entry is not None and stat.S_ISDIR(entry[0])

    def read_blob(
        self, owner: str, repository: str, path: str, revision: Optional[str] = None
    ) -> Optional[bytes]:
        """Read a regular file; symlinks, submodules and trees count as absent."""
        try:
            with self._open(owner, repository) as repo:
                entry = self._lookup(repo, path, revision)
                if entry is None or not stat.S_ISREG(entry[0]):
                    return None
                return repo.object_store[entry[1]].as_raw_string()
        except (KeyError, NotGitRepository):
            return None


class AsyncRepositoryReader:
    """
    Awaitable facade over a RepositoryStore.

    Each query runs on a worker thread. A query that times out is logged and
    answered with the "not found" value, so it folds into the fallback chain.
    """

    def __init__(self, store: RepositoryStore, timeout: float = 5.0):
        self.store = store
        self.timeout = timeout

    async def _query(self, default: T, func: Callable[..., T], *args) -> T:
        try:
            return await asyncio.wait_for(asyncio.to_thread(func, *args), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(
                f"Repository query {func.__name__} timed out",
                extra={"query": func.__name__, "timeout": self.timeout},
            )
            return default

    async def repository_exists(self, owner: str, repository: str) -> bool:
        return await self._query(False, self.store.repository_exists, owner, repository)

    async def latest_revision_id(self, owner: str, repository: str) -> Optional[str]:
        return await self._query(None, self.store.latest_revision_id, owner, repository)

    async def is_directory(
        self, owner: str, repository: str, path: str, revision: Optional[str] = None
    ) -> bool:
        return await self._query(
            False, self.store.is_directory, owner, repository, path, revision
        )

    async def read_blob(
        self, owner: str, repository: str, path: str, revision: Optional[str] = None
    ) -> Optional[bytes]:
        return await self._query(None, self.store.read_blob, owner, repository, path, revision)
