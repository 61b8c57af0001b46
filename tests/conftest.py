"""Shared fixtures: a fake requests session and throwaway app directories."""

from pathlib import Path
from urllib.parse import unquote

import pytest
import requests

from sync_manager import SyncManager

API_BASE = "https://api.test"
RAW_BASE = "https://raw.test"
OWNER, REPO, BRANCH = "owner", "repo", "main"
RAW_PREFIX = f"{RAW_BASE}/{OWNER}/{REPO}/{BRANCH}/"


class FakeResponse:
    def __init__(self, status_code=200, payload=None, content=b"", text=None):
        self.status_code = status_code
        self._payload = payload
        self._content = content
        self._text = text

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def json(self):
        if self._payload is None:
            raise ValueError(f"Expecting value: {self._text!r}")
        return self._payload

    def iter_content(self, chunk_size=1):
        for start in range(0, len(self._content), chunk_size):
            yield self._content[start:start + chunk_size]

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


def tree_payload(files, truncated=False, extra=()):
    tree = [{"path": path, "type": "blob", "sha": sha} for path, sha in files]
    tree.extend(extra)
    return {"sha": "root", "tree": tree, "truncated": truncated}


class FakeSession:
    """Serves a GitHub-like tree listing and raw files from dictionaries.

    ``files`` maps a repository path to bytes, an HTTP status code, or an
    exception instance to raise.
    """

    def __init__(self, tree=None, files=None, head_status=200, head_error=None,
                 tree_response=None):
        self.tree = tree if tree is not None else []
        self.files = files or {}
        self.head_status = head_status
        self.head_error = head_error
        self.tree_response = tree_response
        self.calls = []
        self.headers = {}

    @property
    def raw_downloads(self):
        return [url for method, url in self.calls if url.startswith(RAW_PREFIX)]

    def head(self, url, **kwargs):
        self.calls.append(("HEAD", url))
        if self.head_error is not None:
            raise self.head_error
        return FakeResponse(self.head_status)

    def get(self, url, **kwargs):
        self.calls.append(("GET", url))
        if url.startswith(API_BASE):
            if self.tree_response is not None:
                if isinstance(self.tree_response, Exception):
                    raise self.tree_response
                return self.tree_response
            return FakeResponse(payload=tree_payload(self.tree))
        if url.startswith(RAW_PREFIX):
            body = self.files.get(unquote(url[len(RAW_PREFIX):]), 404)
            if isinstance(body, Exception):
                raise body
            if isinstance(body, int):
                return FakeResponse(body)
            return FakeResponse(content=body)
        raise AssertionError(f"unexpected request to {url}")


def snapshot(root):
    """Map every file under ``root`` to its bytes."""
    root = Path(root)
    if not root.exists():
        return {}
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


@pytest.fixture
def app_dir(tmp_path):
    return tmp_path / "app"


@pytest.fixture
def bundled_dir(tmp_path):
    bundled = tmp_path / "bundled"
    (bundled / "assets").mkdir(parents=True)
    (bundled / "index.html").write_text("<h1>bundled</h1>", encoding="utf-8")
    (bundled / "assets" / "style.css").write_text("body {}", encoding="utf-8")
    return bundled


@pytest.fixture
def make_manager(app_dir, bundled_dir):
    def factory(session, **kwargs):
        kwargs.setdefault("app_dir", app_dir)
        kwargs.setdefault("bundled_dir", bundled_dir)
        return SyncManager(
            owner=OWNER,
            repo=REPO,
            branch=BRANCH,
            api_base_url=API_BASE,
            raw_base_url=RAW_BASE,
            session=session,
            **kwargs,
        )

    return factory


@pytest.fixture
def remote_files():
    return {
        "index.html": b"<h1>remote</h1>",
        "assets/a.js": b"console.log('a');",
    }


@pytest.fixture
def online_session(remote_files):
    return FakeSession(
        tree=[("index.html", "h1"), ("assets/a.js", "h2")],
        files=dict(remote_files),
    )
