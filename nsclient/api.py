from typing import Any, Dict, List, Tuple
import os

import httpx

from endpoints import STORAGE
from .client import StorageClient
from .models import Entry, EntryKind, Listing, Outcome
from .paths import leaf_name, normalize
from .utils import get_logger

logger = get_logger('nsclient')

STATUS_OK = 200
STATUS_CONFLICT = 409


class StorageError(RuntimeError):
    pass


def classify(status_code: int) -> Outcome:
    if status_code == STATUS_OK:
        return Outcome.SUCCESS
    if status_code == STATUS_CONFLICT:
        return Outcome.CONFLICT
    return Outcome.FAILURE


def _error_message(resp: httpx.Response) -> str:
    try:
        payload = resp.json()
    except ValueError:
        return resp.text[:200]
    if isinstance(payload, dict) and payload.get("msg"):
        return str(payload["msg"])
    return resp.text[:200]


def _entries(location: str, rows: Any, kind: EntryKind) -> Tuple[Entry, ...]:
    if rows is None:
        return ()
    if not isinstance(rows, list):
        raise StorageError(f"Unexpected listing for {location}: {kind.value} rows {rows!r}")
    items: List[Entry] = []
    for row in rows:
        # every later operation addresses the entry by its path
        if not isinstance(row, dict) or not isinstance(row.get("path"), str) or not row["path"]:
            raise StorageError(f"Unexpected listing for {location}: {kind.value} row {row!r}")
        name = row.get("name")
        items.append(Entry(name=str(name) if name else leaf_name(row["path"]), path=row["path"], kind=kind))
    return tuple(items)


def _mutate(client: StorageClient, route: Dict[str, str], **kwargs: Any) -> Outcome:
    try:
        resp = client.request(route["method"], route["path"], **kwargs)
    except httpx.HTTPError as exc:
        logger.warning("%s %s failed: %s", route["method"], route["path"], exc)
        return Outcome.FAILURE
    outcome = classify(resp.status_code)
    if outcome is not Outcome.SUCCESS:
        logger.info("%s %s -> %s (%s)", route["method"], route["path"], resp.status_code, _error_message(resp))
    return outcome


def list_directory(client: StorageClient, location: str) -> Listing:
    location = normalize(location)
    route = STORAGE["readdir"]
    try:
        resp = client.request(route["method"], route["path"], json={"path": location})
    except httpx.HTTPError as exc:
        raise StorageError(f"Listing {location} failed: {exc}") from exc
    if resp.status_code != STATUS_OK:
        raise StorageError(f"Listing {location} failed: status={resp.status_code} msg={_error_message(resp)}")
    try:
        payload = resp.json()
    except ValueError as exc:
        raise StorageError(f"Non-JSON listing for {location}: {resp.text[:200]}") from exc
    if not isinstance(payload, dict):
        raise StorageError(f"Unexpected listing for {location}: {payload!r}")
    return Listing(
        location=location,
        dirs=_entries(location, payload.get("dirs"), EntryKind.DIRECTORY),
        files=_entries(location, payload.get("files"), EntryKind.FILE),
    )


def make_directory(client: StorageClient, path: str) -> Outcome:
    return _mutate(client, STORAGE["mkdir"], json={"path": path})


def remove_entry(client: StorageClient, path: str) -> Outcome:
    return _mutate(client, STORAGE["remove"], json={"path": path})


def upload_file(client: StorageClient, path: str, local_path: str) -> Outcome:
    filename = os.path.basename(local_path)
    with open(local_path, 'rb') as f:
        files = {"file": (filename, f, "application/octet-stream")}
        return _mutate(client, STORAGE["upload"], params={"path": path}, files=files)


def download_file(client: StorageClient, path: str, dest: str) -> str:
    route = STORAGE["download"]
    try:
        with client.stream(route["method"], route["path"], params={"path": path}) as resp:
            if resp.status_code != STATUS_OK:
                resp.read()
                raise StorageError(f"Download {path} failed: status={resp.status_code} msg={_error_message(resp)}")
            with open(dest, "wb") as handle:
                for chunk in resp.iter_bytes():
                    handle.write(chunk)
    except httpx.HTTPError as exc:
        raise StorageError(f"Download {path} failed: {exc}") from exc
    return dest
