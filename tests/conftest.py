"""Shared pytest fixtures: SQLite in-memory record store and an in-memory GitHub remote."""

import base64
import hashlib
import json
import logging
import os
from typing import Dict, Optional, Set
from urllib.parse import unquote

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Tell app lifespan to skip real DB init
os.environ["GITLEARN_SKIP_LIFESPAN_DB"] = "1"

from gitlearn.core.github import client as github_client_module  # noqa: E402
from gitlearn.core.github import GitHubClient  # noqa: E402
from gitlearn.core.models.base import BaseModel  # noqa: E402
from gitlearn.core.services import clear_tree_caches  # noqa: E402
from gitlearn.core.session import GitHubSession  # noqa: E402

# Silence extremely verbose DEBUG logs from aiosqlite to keep test output readable
logging.getLogger("aiosqlite").setLevel(logging.WARNING)

LOGIN = "octocat"
REPO = "learning-octocat"
TOKEN = "gho_test_token"


def blob_sha(data: bytes) -> str:
    """Git's blob id for ``data``."""
    return hashlib.sha1(b"blob %d\x00" % len(data) + data).hexdigest()


def wrap_base64(data: bytes) -> str:
    """Base64 with a newline every 60 characters, as the Contents API sends it."""
    encoded = base64.b64encode(data).decode("ascii")
    return "\n".join(encoded[i:i + 60] for i in range(0, len(encoded), 60)) + "\n"


class FakeGitHub:
    """Just enough of GitHub's Contents and Git-Trees API, kept in memory.

    Writes are checked against the current blob sha like the real remote:
    updating without a sha is a 422, a stale sha is a 409.
    """

    def __init__(self, login: str = LOGIN, repo: str = REPO, branch: str = "main", default_branch: str = "main"):
        self.login = login
        self.repo = repo
        # files live on ``branch``; reads without a ref go to ``default_branch`` like on GitHub
        self.branch = branch
        self.default_branch = default_branch
        self.files: Dict[str, bytes] = {}
        self.commits: Dict[str, Dict[str, bytes]] = {}
        self.omit_content: Set[str] = set()
        self.fail_with: Optional[int] = None
        self.fail_headers: Dict[str, str] = {}
        self.requests = []
        self._commit_count = 0

    @property
    def prefix(self) -> str:
        return f"/repos/{self.login}/{self.repo}"

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def seed(self, path: str, data, message: str = "seed") -> str:
        """Commit a file directly; returns the commit sha."""
        raw = data.encode("utf-8") if isinstance(data, str) else data
        self.files[path] = raw
        return self._commit()

    def sha_of(self, path: str) -> str:
        return blob_sha(self.files[path])

    def _commit(self) -> str:
        self._commit_count += 1
        commit_sha = hashlib.sha1(f"commit-{self._commit_count}".encode()).hexdigest()
        self.commits[commit_sha] = dict(self.files)
        return commit_sha

    def _file_body(self, path: str, data: bytes, ref: Optional[str]) -> dict:
        omitted = path in self.omit_content
        return {
            "type": "file",
            "name": path.rsplit("/", 1)[-1],
            "path": path,
            "sha": blob_sha(data),
            "size": len(data),
            "encoding": "none" if omitted else "base64",
            "content": "" if omitted else wrap_base64(data),
            "download_url": (
                f"https://raw.githubusercontent.com/{self.login}/{self.repo}/{ref or self.branch}/{path}"
            ),
        }

    def _children(self, files: Dict[str, bytes], folder: str) -> list:
        prefix = f"{folder}/" if folder else ""
        seen = {}
        for path, data in files.items():
            if not path.startswith(prefix):
                continue
            rest = path[len(prefix):]
            name, _, remainder = rest.partition("/")
            child_path = prefix + name
            if remainder:
                seen.setdefault(name, {"type": "dir", "name": name, "path": child_path, "sha": "0" * 40})
            else:
                seen[name] = {"type": "file", "name": name, "path": child_path, "sha": blob_sha(data)}
        return list(seen.values())

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append((request.method, request.url.path))
        if self.fail_with is not None:
            return httpx.Response(self.fail_with, json={"message": "forced failure"}, headers=self.fail_headers)

        path = unquote(request.url.path)
        if path == "/":
            return httpx.Response(200, json={"current_user_url": "https://api.github.com/user"})

        contents = self.prefix + "/contents"
        trees = self.prefix + "/git/trees/"
        if path == contents or path.startswith(contents + "/"):
            file_path = path[len(contents):].strip("/")
            if request.method == "GET":
                return self._get_contents(file_path, request.url.params.get("ref"))
            if request.method == "PUT":
                return self._put_contents(file_path, json.loads(request.content))
        if path.startswith(trees) and request.method == "GET":
            return self._get_tree(path[len(trees):])
        return httpx.Response(404, json={"message": "Not Found"})

    def _get_contents(self, path: str, ref: Optional[str]) -> httpx.Response:
        ref = ref or self.default_branch
        if ref == self.branch:
            files = self.files
        elif ref in self.commits:
            files = self.commits[ref]
        else:
            return httpx.Response(404, json={"message": f"No commit found for the ref {ref}"})

        if not files and not path:
            return httpx.Response(404, json={"message": "This repository is empty."})
        if path in files:
            return httpx.Response(200, json=self._file_body(path, files[path], ref))
        children = self._children(files, path)
        if children:
            return httpx.Response(200, json=children)
        return httpx.Response(404, json={"message": "Not Found"})

    def _put_contents(self, path: str, body: dict) -> httpx.Response:
        if body.get("branch", self.default_branch) != self.branch:
            return httpx.Response(404, json={"message": "Branch not found"})
        sha = body.get("sha")
        existing = self.files.get(path)
        if existing is not None and not sha:
            return httpx.Response(422, json={"message": 'Invalid request.\n\n"sha" wasn\'t supplied.'})
        if existing is not None and sha != blob_sha(existing):
            return httpx.Response(409, json={"message": f"{path} does not match {sha}"})
        if existing is None and sha:
            return httpx.Response(409, json={"message": f"{path} does not match {sha}"})

        data = base64.b64decode(body["content"])
        self.files[path] = data
        commit_sha = self._commit()
        return httpx.Response(
            201 if existing is None else 200,
            json={
                "content": {"name": path.rsplit("/", 1)[-1], "path": path, "sha": blob_sha(data)},
                "commit": {"sha": commit_sha, "message": body.get("message")},
            },
        )

    def _get_tree(self, ref: str) -> httpx.Response:
        if not self.files:
            return httpx.Response(409, json={"message": "Git Repository is empty."})
        if ref != self.branch and ref not in self.commits:
            return httpx.Response(404, json={"message": "Not Found"})
        files = self.files if ref == self.branch else self.commits[ref]

        entries = []
        folders = set()
        for path, data in sorted(files.items()):
            parts = path.split("/")
            for i in range(1, len(parts)):
                folders.add("/".join(parts[:i]))
            entries.append({"path": path, "mode": "100644", "type": "blob", "sha": blob_sha(data), "size": len(data)})
        entries.extend({"path": folder, "mode": "040000", "type": "tree", "sha": "0" * 40} for folder in sorted(folders))
        return httpx.Response(200, json={"sha": "f" * 40, "tree": entries, "truncated": False})


@pytest.fixture
def fake_github():
    """In-memory GitHub remote."""
    return FakeGitHub()


@pytest.fixture
async def github_client(fake_github, monkeypatch):
    """GitHubClient talking to the fake remote, also installed as the app singleton."""
    client = GitHubClient(transport=fake_github.transport())
    monkeypatch.setattr(github_client_module, "_github_client", client)
    yield client
    clear_tree_caches()
    await client.aclose()


@pytest.fixture
async def notes_branch(monkeypatch):
    """Remote whose files live on ``notes`` while its default branch stays ``main``.

    Yields (remote, client, session) with the session configured for ``notes``.
    """
    remote = FakeGitHub(branch="notes")
    client = GitHubClient(transport=remote.transport())
    monkeypatch.setattr(github_client_module, "_github_client", client)
    session = GitHubSession(token=TOKEN, login=LOGIN, repo=REPO, branch="notes", owner_id=1)
    yield remote, client, session
    clear_tree_caches()
    await client.aclose()


@pytest.fixture
def github_session():
    """Session for the fake remote's owner."""
    return GitHubSession(token=TOKEN, login=LOGIN, repo=REPO, branch="main", owner_id=1)


@pytest.fixture
async def test_engine():
    """SQLite in-memory engine with the schema created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,  # keep the same memory DB across connections
        connect_args={"check_same_thread": False},
    )

    # Ensure SQLite enforces foreign key constraints (required for CASCADE/SET NULL)
    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):  # noqa: ANN001
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
        finally:
            cursor.close()

    from gitlearn.core import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
async def test_session(test_engine):
    """Database session per test."""
    session_maker = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        try:
            yield session
        finally:
            await session.rollback()


@pytest.fixture
def test_app(test_session, github_client):
    """FastAPI app with the database and GitHub client swapped for test doubles."""
    from gitlearn.database import get_db_session
    from gitlearn.main import app

    async def _override_get_db():
        yield test_session

    app.dependency_overrides[get_db_session] = _override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def async_client(test_app):
    """Async test client."""
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers():
    """Headers the auth collaborator would attach."""
    return {
        "Authorization": f"Bearer {TOKEN}",
        "X-GitHub-Login": LOGIN,
        "X-Owner-Id": "1",
    }
