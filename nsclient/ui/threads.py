"""Qt implementation of the browser's ``Runner``."""
from typing import Any, Callable, Optional, Set

from PySide6.QtCore import QObject, QRunnable, Qt, QThreadPool, Signal

from ..browser import Runner
from ..utils import get_logger


class _Relay(QObject):
    # (True, result) or (False, exception)
    outcome = Signal(bool, object)
    finished = Signal()


class _Job(QRunnable):
    def __init__(self, fn: Callable[[], Any]) -> None:
        super().__init__()
        self.fn = fn
        self.relay = _Relay()

    def run(self) -> None:
        try:
            value = self.fn()
        except Exception as exc:
            self.relay.outcome.emit(False, exc)
        else:
            self.relay.outcome.emit(True, value)
        self.relay.finished.emit()


class TaskRunner(Runner):
    """Runs jobs on a QThreadPool.

    Each job's relay is created on the calling (GUI) thread and its signals
    use queued connections, so callbacks land back on that thread in emit
    order: outcome first, then finished. A failure with no ``on_error`` is
    logged, since a worker has no caller to raise to.
    """

    def __init__(self, pool: Optional[QThreadPool] = None) -> None:
        self.pool = pool or QThreadPool.globalInstance()
        self.logger = get_logger("nsclient.qt")
        self._live: Set[_Job] = set()

    @property
    def pending(self) -> int:
        return len(self._live)

    def run(
        self,
        fn: Callable[[], Any],
        on_result: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
        on_finished: Optional[Callable[[], None]] = None,
    ) -> None:
        job = _Job(fn)
        self._live.add(job)

        def deliver(ok: bool, value: Any) -> None:
            if ok:
                if on_result:
                    on_result(value)
            elif on_error:
                on_error(value)
            else:
                self.logger.warning("Background job failed: %s", value)

        def finish() -> None:
            self._live.discard(job)
            if on_finished:
                on_finished()

        job.relay.outcome.connect(deliver, Qt.QueuedConnection)
        job.relay.finished.connect(finish, Qt.QueuedConnection)
        self.pool.start(job)
