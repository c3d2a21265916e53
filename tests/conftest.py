"""Test fixtures: in-memory storage server behind httpx.MockTransport."""

import json
import posixpath
from typing import Dict, List, Set, Tuple

import httpx
import pytest

from nsclient.browser import InlineRunner, Navigator
from nsclient.client import StorageClient


class FakeStore:
    """Mimics the HTTP adapter: 409 for existing names and non-empty dirs."""

    def __init__(self) -> None:
        self.dirs: Set[str] = {"/"}
        self.files: Dict[str, bytes] = {}
        self.calls: List[Tuple[str, str]] = []
        self.fail: Set[str] = set()

    def _norm(self, path: str) -> str:
        return posixpath.normpath("/" + (path or "").lstrip("/"))

    def _children(self, path: str) -> Tuple[List[dict], List[dict]]:
        dirs = [d for d in sorted(self.dirs) if d != "/" and posixpath.dirname(d) == path]
        files = [f for f in sorted(self.files) if posixpath.dirname(f) == path]
        to_row = lambda p: {"name": posixpath.basename(p), "path": p}
        return [to_row(d) for d in dirs], [to_row(f) for f in files]

    def _exists(self, path: str) -> bool:
        return path in self.dirs or path in self.files

    def handle(self, request: httpx.Request) -> httpx.Response:
        route = request.url.path
        self.calls.append((request.method, route))
        if route in self.fail:
            return httpx.Response(500, json={"msg": "internal error"})

        if route == "/api/readdir/":
            path = self._norm(json.loads(request.content)["path"])
            if path not in self.dirs:
                return httpx.Response(404, json={"msg": f"Directory {path} not exist"})
            dirs, files = self._children(path)
            body = {}
            # omitted keys mean empty
            if dirs:
                body["dirs"] = dirs
            if files:
                body["files"] = files
            return httpx.Response(200, json=body)

        if route == "/api/mkdir/":
            path = self._norm(json.loads(request.content)["path"])
            if self._exists(path):
                return httpx.Response(409, json={"msg": f"Directory of file {path} already exist"})
            if posixpath.dirname(path) not in self.dirs:
                return httpx.Response(404, json={"msg": "parent not found"})
            self.dirs.add(path)
            return httpx.Response(200)

        if route == "/api/remove/":
            path = self._norm(json.loads(request.content)["path"])
            if path in self.files:
                del self.files[path]
                return httpx.Response(200)
            if path in self.dirs and path != "/":
                dirs, files = self._children(path)
                if dirs or files:
                    return httpx.Response(409, json={"msg": "Directory not empty"})
                self.dirs.discard(path)
                return httpx.Response(200)
            return httpx.Response(404, json={"msg": f"File or Directory {path} not found"})

        if route == "/api/upload/":
            path = self._norm(request.url.params.get("path", ""))
            if self._exists(path):
                return httpx.Response(409, json={"msg": f"file {path} already exist"})
            self.files[path] = request.content
            return httpx.Response(200)

        if route == "/api/download/":
            path = self._norm(request.url.params.get("path", ""))
            if path not in self.files:
                return httpx.Response(404, json={"msg": f"file {path} not found"})
            return httpx.Response(
                200,
                content=self.files[path],
                headers={"content-type": "application/octet-stream"},
            )

        return httpx.Response(404, json={"msg": "no route"})

    def count(self, route: str) -> int:
        return sum(1 for _method, path in self.calls if path == route)


class DeferredRunner:
    """Queues jobs until the test completes them, in any order."""

    def __init__(self) -> None:
        self.jobs: list = []

    def run(self, fn, on_result=None, on_error=None, on_finished=None) -> None:
        self.jobs.append((fn, on_result, on_error, on_finished))

    def complete(self, index: int = 0) -> None:
        fn, on_result, on_error, on_finished = self.jobs.pop(index)
        InlineRunner().run(fn, on_result=on_result, on_error=on_error, on_finished=on_finished)

    def drain(self) -> None:
        while self.jobs:
            self.complete(0)


class Notices:
    def __init__(self) -> None:
        self.items: List[Tuple[str, str]] = []

    def __call__(self, title: str, message: str) -> None:
        self.items.append((title, message))

    @property
    def messages(self) -> List[str]:
        return [message for _title, message in self.items]


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def client(store, tmp_path):
    c = StorageClient(
        base_url="http://storage.test",
        transport=httpx.MockTransport(store.handle),
        http_log=str(tmp_path / "http.log"),
    )
    yield c
    c.close()


@pytest.fixture
def notices():
    return Notices()


@pytest.fixture
def navigator(client, notices):
    nav = Navigator(client, runner=InlineRunner(), notify=notices)
    nav.navigate_to("/")
    return nav


@pytest.fixture
def client_for(tmp_path):
    """Build a client whose requests are answered by ``handler``."""
    clients = []

    def factory(handler):
        c = StorageClient(
            base_url="http://storage.test",
            transport=httpx.MockTransport(handler),
            http_log=str(tmp_path / "http.log"),
        )
        clients.append(c)
        return c

    yield factory
    for c in clients:
        c.close()


@pytest.fixture
def deferred():
    return DeferredRunner()
