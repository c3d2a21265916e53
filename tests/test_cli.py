"""Tests for the command line: output, exit codes and remote paths."""

import json
from unittest.mock import patch

import httpx
import pytest

from nsclient import cli
from nsclient.client import StorageClient


@pytest.fixture
def run(store, tmp_path):
    def _run(*argv):
        def factory(base_url=None, timeout=None):
            return StorageClient(
                base_url=base_url or "http://storage.test",
                transport=httpx.MockTransport(store.handle),
                http_log=str(tmp_path / "http.log"),
            )

        with patch("nsclient.cli.StorageClient", side_effect=factory):
            return cli.main(list(argv))

    return _run


class TestLs:
    def test_plain(self, run, store, capsys):
        store.dirs.add("/docs")
        store.files["/a.txt"] = b"a"
        assert run("ls") == cli.EXIT_OK
        assert capsys.readouterr().out.splitlines() == ["docs/", "a.txt"]

    def test_json(self, run, store, capsys):
        store.dirs.add("/docs")
        assert run("ls", "/", "--json") == cli.EXIT_OK
        data = json.loads(capsys.readouterr().out)
        assert data == {"path": "/", "dirs": [{"name": "docs", "path": "/docs"}], "files": []}

    def test_malformed_listing(self, run, store, capsys):
        store.handle = lambda request: httpx.Response(200, json={"dirs": ["docs"]})
        assert run("ls", "/") == cli.EXIT_FAILURE
        assert "Unexpected listing" in capsys.readouterr().err

    def test_missing_directory(self, run, capsys):
        assert run("ls", "/nope") == cli.EXIT_FAILURE
        assert "Error" in capsys.readouterr().err


class TestMkdir:
    def test_creates(self, run, store):
        assert run("mkdir", "/docs") == cli.EXIT_OK
        assert "/docs" in store.dirs

    def test_conflict(self, run, store, capsys):
        store.dirs.add("/docs")
        assert run("mkdir", "docs/") == cli.EXIT_CONFLICT
        assert "Directory already exists" in capsys.readouterr().err

    def test_root_rejected(self, run, store):
        assert run("mkdir", "/") == cli.EXIT_FAILURE
        assert store.count("/api/mkdir/") == 0


class TestRm:
    def test_not_empty(self, run, store, capsys):
        store.dirs.add("/docs")
        store.files["/docs/a"] = b"a"
        assert run("rm", "/docs") == cli.EXIT_CONFLICT
        assert "Directory not empty" in capsys.readouterr().err

    def test_failure(self, run, capsys):
        assert run("rm", "/nope") == cli.EXIT_FAILURE
        assert "Something went wrong" in capsys.readouterr().err


class TestTransfer:
    def test_put_into_dir(self, run, store, tmp_path):
        store.dirs.add("/docs")
        local = tmp_path / "a.txt"
        local.write_bytes(b"payload")
        assert run("put", str(local), "--dir", "/docs") == cli.EXIT_OK
        assert b"payload" in store.files["/docs/a.txt"]

    def test_put_existing(self, run, store, tmp_path):
        local = tmp_path / "a.txt"
        local.write_bytes(b"payload")
        store.files["/a.txt"] = b"old"
        assert run("put", str(local)) == cli.EXIT_CONFLICT

    def test_get(self, run, store, tmp_path):
        store.files["/docs/a.txt"] = b"payload"
        dest = tmp_path / "copy.txt"
        assert run("get", "/docs/a.txt", "--out", str(dest)) == cli.EXIT_OK
        assert dest.read_bytes() == b"payload"

    def test_get_missing(self, run, tmp_path):
        assert run("get", "/nope", "--out", str(tmp_path / "x")) == cli.EXIT_FAILURE
