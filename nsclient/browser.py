"""Navigation and synchronization state for the remote file browser.

The navigator owns the current location and the listing shown for it. The
mutation controllers own only their pending input; once a remote call
resolves, whatever its outcome, they ask the navigator to re-fetch the
listing. Remote work goes through a ``Runner`` so the same code drives the
Qt worker pool and the inline runner used by the CLI and tests.
"""
import itertools
import os
from typing import Any, Callable, Optional, Protocol

from .api import download_file, list_directory, make_directory, remove_entry, upload_file
from .client import StorageClient
from .models import Entry, Listing, Outcome
from .paths import ROOT, InvalidNameError, child_path, normalize, parent_of, validate_name
from .utils import get_logger

Notify = Callable[[str, str], None]
Busy = Callable[[bool], None]

MSG_GENERIC = "Something went wrong"
MSG_DIR_EXISTS = "Directory already exists"
MSG_FILE_EXISTS = "File already exists"
MSG_NOT_EMPTY = "Directory not empty"


class Runner(Protocol):
    """Schedules ``fn`` and reports its outcome through the callbacks.

    Exactly one of ``on_result`` or ``on_error`` fires, then ``on_finished``.
    Callbacks run on the thread that owns the browser state, so they may
    write it without locking. Nothing is returned; callers observe the job
    only through its callbacks. A failure with no ``on_error`` is never
    dropped silently: it is raised where there is a caller, logged otherwise.
    """

    def run(
        self,
        fn: Callable[[], Any],
        on_result: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
        on_finished: Optional[Callable[[], None]] = None,
    ) -> None:
        ...


class InlineRunner:
    """Runs each job immediately in the calling thread."""

    def run(
        self,
        fn: Callable[[], Any],
        on_result: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
        on_finished: Optional[Callable[[], None]] = None,
    ) -> None:
        try:
            result = fn()
        except Exception as exc:
            if on_error is None:
                raise
            on_error(exc)
        else:
            if on_result:
                on_result(result)
        finally:
            if on_finished:
                on_finished()


def _ignore_notice(_title: str, _message: str) -> None:
    return None


class ListingCache:
    """Holds the listing of exactly one location.

    Every refresh takes a new token; a response is applied only while its
    token is still the latest one issued, so overlapping refreshes resolve in
    issue order whatever order their responses arrive in. A failed listing
    shows as an empty one, with the error kept in ``last_error``.
    """

    def __init__(self, client: StorageClient, runner: Runner, on_change: Optional[Callable[[], None]] = None) -> None:
        self._client = client
        self._runner = runner
        self._tokens = itertools.count(1)
        self._latest = 0
        self.listing = Listing.empty(ROOT)
        self.last_error: Optional[Exception] = None
        self.on_change = on_change or (lambda: None)
        self.logger = get_logger('nsclient.browser')

    def refresh(self, location: str) -> int:
        token = next(self._tokens)
        self._latest = token
        self.logger.debug("refresh #%s %s", token, location)
        self._runner.run(
            lambda: list_directory(self._client, location),
            on_result=lambda listing: self._apply(token, listing),
            on_error=lambda exc: self._fail(token, location, exc),
        )
        return token

    def _apply(self, token: int, listing: Listing) -> None:
        if token != self._latest:
            self.logger.debug("drop stale listing #%s %s", token, listing.location)
            return
        self.listing = listing
        self.last_error = None
        self.on_change()

    def _fail(self, token: int, location: str, exc: Exception) -> None:
        if token != self._latest:
            return
        self.logger.warning("Listing %s failed: %s", location, exc)
        self.listing = Listing.empty(location)
        self.last_error = exc
        self.on_change()


class Navigator:
    def __init__(
        self,
        client: StorageClient,
        runner: Optional[Runner] = None,
        notify: Optional[Notify] = None,
        on_change: Optional[Callable[[], None]] = None,
    ) -> None:
        self.client = client
        self.runner = runner or InlineRunner()
        self.notify = notify or _ignore_notice
        self.cache = ListingCache(client, self.runner, on_change=self._changed)
        self.on_change = on_change or (lambda: None)
        self.actions = EntryActions(self)
        self._location = ROOT
        self._parent: Optional[str] = None

    @property
    def location(self) -> str:
        return self._location

    @property
    def parent(self) -> Optional[str]:
        return self._parent

    @property
    def listing(self) -> Listing:
        return self.cache.listing

    @property
    def last_error(self) -> Optional[Exception]:
        return self.cache.last_error

    def _changed(self) -> None:
        self.on_change()

    def navigate_to(self, location: str) -> None:
        self._location = normalize(location)
        self._parent = parent_of(self._location)
        self.on_change()
        self.refresh()

    def navigate_to_parent(self) -> bool:
        if self._parent is None:
            return False
        self.navigate_to(self._parent)
        return True

    def refresh(self) -> None:
        self.cache.refresh(self._location)

    def open(self, entry: Entry, dest: Optional[str] = None) -> None:
        if entry.is_dir:
            self.navigate_to(entry.path)
        elif dest:
            self.actions.download(entry, dest)


class EntryActions:
    """Remove and download, attached to the rows of the current listing."""

    def __init__(self, navigator: Navigator) -> None:
        self._nav = navigator

    def remove(self, entry: Entry) -> None:
        nav = self._nav

        def done(outcome: Outcome) -> None:
            if outcome is Outcome.CONFLICT:
                nav.notify("Remove", MSG_NOT_EMPTY)
            elif outcome is Outcome.FAILURE:
                nav.notify("Remove", MSG_GENERIC)

        nav.runner.run(
            lambda: remove_entry(nav.client, entry.path),
            on_result=done,
            on_error=lambda exc: nav.notify("Remove", MSG_GENERIC),
            on_finished=nav.refresh,
        )

    def download(self, entry: Entry, dest: str) -> None:
        nav = self._nav

        def err(exc: Exception) -> None:
            get_logger('nsclient.browser').warning("Download %s failed: %s", entry.path, exc)
            nav.notify("Download", MSG_GENERIC)

        nav.runner.run(lambda: download_file(nav.client, entry.path, dest), on_error=err)


class CreateDirectoryController:
    def __init__(
        self,
        navigator: Navigator,
        busy_changed: Optional[Busy] = None,
        created: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._nav = navigator
        self.name = ""
        self.in_flight = False
        self.busy_changed = busy_changed or (lambda _busy: None)
        # receives the new path; name is cleared only on success
        self.created = created or (lambda _path: None)

    def _set_in_flight(self, value: bool) -> None:
        self.in_flight = value
        self.busy_changed(value)

    def submit(self) -> bool:
        if self.in_flight:
            return False
        nav = self._nav
        try:
            name = validate_name(self.name)
        except InvalidNameError as exc:
            nav.notify("Create directory", f"Invalid name: {exc}")
            return False
        path = child_path(nav.location, name)
        self._set_in_flight(True)

        def done(outcome: Outcome) -> None:
            if outcome is Outcome.SUCCESS:
                self.name = ""
                self.created(path)
            elif outcome is Outcome.CONFLICT:
                nav.notify("Create directory", MSG_DIR_EXISTS)
            else:
                nav.notify("Create directory", MSG_GENERIC)

        def finished() -> None:
            self._set_in_flight(False)
            nav.refresh()

        nav.runner.run(
            lambda: make_directory(nav.client, path),
            on_result=done,
            on_error=lambda exc: nav.notify("Create directory", MSG_GENERIC),
            on_finished=finished,
        )
        return True


class UploadController:
    def __init__(self, navigator: Navigator, busy_changed: Optional[Busy] = None) -> None:
        self._nav = navigator
        self.file: Optional[str] = None
        self.in_flight = False
        self.busy_changed = busy_changed or (lambda _busy: None)

    def _set_in_flight(self, value: bool) -> None:
        self.in_flight = value
        self.busy_changed(value)

    def submit(self) -> bool:
        if not self.file or self.in_flight:
            return False
        nav = self._nav
        local_path = self.file
        path = child_path(nav.location, os.path.basename(local_path))
        self._set_in_flight(True)

        def done(outcome: Outcome) -> None:
            if outcome is Outcome.CONFLICT:
                nav.notify("Upload", MSG_FILE_EXISTS)
            elif outcome is Outcome.FAILURE:
                nav.notify("Upload", MSG_GENERIC)

        def finished() -> None:
            self._set_in_flight(False)
            nav.refresh()

        nav.runner.run(
            lambda: upload_file(nav.client, path, local_path),
            on_result=done,
            on_error=lambda exc: nav.notify("Upload", MSG_GENERIC),
            on_finished=finished,
        )
        return True
