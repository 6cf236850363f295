"""Run coordination for directory classification.

A run walks the whole tree first so the total is known up front, then
classifies the collected files batch by batch. Statistics are only folded on
the coordinating thread after a batch has fully joined.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from filesift.ingestion.access import DirectoryAccess, LocalDirectoryAccess
from filesift.ingestion.discovery import DirectoryWalker
from filesift.ingestion.models import FileRef

from .engine import FileClassifier
from .events import Severity
from .models import FileMeta, NO_MATCH, RunOptions
from .scheduler import BatchOutcome, BatchScheduler
from .stats import RunStats, StatsAggregator

LOGGER = logging.getLogger(__name__)

LogCallback = Callable[[str, Severity], None]
StatsCallback = Callable[[RunStats], None]
FileCallback = Callable[[FileMeta], None]


class RunState(str, Enum):
    """Lifecycle states of a classification run."""

    IDLE = "idle"
    SCANNING = "scanning"
    PROCESSING = "processing"
    COMPLETED = "completed"
    STOPPED = "stopped"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RunState.COMPLETED, RunState.STOPPED, RunState.FAILED)


@dataclass(slots=True)
class RunOutcome:
    """Terminal state and final statistics of a run.

    Attributes:
        state: Terminal state reached.
        stats: Final statistics snapshot.
        error: Failure description when ``state`` is ``failed``.
    """

    state: RunState
    stats: RunStats
    error: Optional[str] = None


class CancellationSignal:
    """Thread-safe stop flag that doubles as a ``should_stop`` predicate."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def request(self) -> None:
        self._event.set()

    @property
    def requested(self) -> bool:
        return self._event.is_set()

    def __call__(self) -> bool:
        return self._event.is_set()


class _Stopped(Exception):
    """Internal marker raised when scanning is cancelled."""


def _never() -> bool:
    return False


class ClassificationManager:
    """Wire discovery, batched classification, and statistics into one run.

    Args:
        on_log: Receives every log line with its severity.
        on_stats_update: Receives a statistics snapshot after scanning and
            after every batch.
        on_file: Receives each successfully classified file in fold order.
        access: Directory access collaborator; defaults to the local filesystem.
        classifier: Classifier override, mainly for tests.
    """

    def __init__(
        self,
        *,
        on_log: LogCallback | None = None,
        on_stats_update: StatsCallback | None = None,
        on_file: FileCallback | None = None,
        access: DirectoryAccess | None = None,
        classifier: FileClassifier | None = None,
    ) -> None:
        self.on_log = on_log
        self.on_stats_update = on_stats_update
        self.on_file = on_file
        self.access = access or LocalDirectoryAccess()
        self.walker = DirectoryWalker(self.access)
        self.classifier = classifier or FileClassifier(self.access)
        self._state = RunState.IDLE
        self._state_lock = threading.Lock()

    @property
    def state(self) -> RunState:
        return self._state

    def run(
        self,
        root: Any,
        options: RunOptions | None = None,
        should_stop: Callable[[], bool] | None = None,
    ) -> RunOutcome:
        """Classify every file beneath ``root``.

        Args:
            root: Root handle understood by the access collaborator.
            options: Run options; defaults apply when omitted.
            should_stop: Cancellation predicate polled at scan steps and
                batch boundaries.

        Returns:
            RunOutcome: Terminal state with the final statistics.

        Raises:
            RuntimeError: If this manager is already running.
        """
        with self._state_lock:
            if self._state in (RunState.SCANNING, RunState.PROCESSING):
                raise RuntimeError("A classification run is already in progress.")
            self._state = RunState.SCANNING

        options = options or RunOptions()
        stop = should_stop or _never
        aggregator = StatsAggregator(options.min_confidence)

        try:
            self._emit("Starting classification job...", "info")
            state = self._execute(root, options, stop, aggregator)
            return self._finish(state, aggregator)
        except Exception as exc:
            LOGGER.debug("Run failed", exc_info=True)
            self._state = RunState.FAILED
            self._emit(f"Job failed: {exc}", "error")
            return self._finish(RunState.FAILED, aggregator, error=str(exc))
        finally:
            # Every exit, including BaseException, leaves a terminal state.
            if not self._state.is_terminal:
                self._state = RunState.FAILED

    # ------------------------------------------------------------------ #
    # Internal helpers                                                   #
    # ------------------------------------------------------------------ #

    def _execute(
        self,
        root: Any,
        options: RunOptions,
        stop: Callable[[], bool],
        aggregator: StatsAggregator,
    ) -> RunState:
        self._emit("Scanning directory to collect all files...", "info")
        try:
            files = self._collect(root, stop)
        except _Stopped:
            self._emit("Job stopped during file collection.", "warn")
            return RunState.STOPPED

        aggregator.set_total(len(files))
        self._publish(aggregator)

        if not options.enabled:
            self._emit(f"Classification disabled; skipped {len(files)} files.", "warn")
            self._emit("Classification job finished.", "success")
            return RunState.COMPLETED

        self._emit(
            f"Found {len(files)} files. "
            f"Starting classification in batches of {options.batch_size}.",
            "info",
        )
        self._state = RunState.PROCESSING
        scheduler = BatchScheduler(options.batch_size)

        def fold(outcomes: list[BatchOutcome[FileRef, FileMeta]]) -> None:
            for outcome in outcomes:
                self._fold(outcome, aggregator)
            self._publish(aggregator)

        finished = scheduler.run(files, self.classifier.classify, should_stop=stop, on_batch=fold)
        if not finished:
            self._emit("Job stopped during processing.", "warn")
            return RunState.STOPPED

        self._emit("Classification job finished.", "success")
        return RunState.COMPLETED

    def _collect(self, root: Any, stop: Callable[[], bool]) -> list[FileRef]:
        if stop():
            raise _Stopped()
        files: list[FileRef] = []
        walk = self.walker.walk(root)
        try:
            for ref in walk:
                if stop():
                    raise _Stopped()
                files.append(ref)
        finally:
            walk.close()
        return files

    def _fold(self, outcome: BatchOutcome[FileRef, FileMeta], aggregator: StatsAggregator) -> None:
        if not outcome.ok or outcome.result is None:
            LOGGER.debug("Failed to classify %s", outcome.item.rel, exc_info=outcome.error)
            self._emit(f"Failed to classify {outcome.item.rel}: {outcome.error}", "error")
            return

        meta = outcome.result
        if aggregator.record(meta):
            result = meta.classification or NO_MATCH
            self._emit(
                f"[{result.category.upper()}] {meta.rel} "
                f"(Confidence: {round(result.confidence * 100)}%)",
                "info",
            )
        else:
            self._emit(f"[UNCLASSIFIED] {meta.rel}", "warn")
        if self.on_file is not None:
            self.on_file(meta)

    def _finish(
        self, state: RunState, aggregator: StatsAggregator, *, error: str | None = None
    ) -> RunOutcome:
        self._state = state
        LOGGER.info("Classification run ended in state %s", state.value)
        return RunOutcome(state=state, stats=aggregator.snapshot(), error=error)

    def _publish(self, aggregator: StatsAggregator) -> None:
        if self.on_stats_update is not None:
            self.on_stats_update(aggregator.snapshot())

    def _emit(self, message: str, severity: Severity) -> None:
        LOGGER.debug("[%s] %s", severity, message)
        if self.on_log is not None:
            self.on_log(message, severity)


__all__ = [
    "CancellationSignal",
    "ClassificationManager",
    "RunOutcome",
    "RunState",
]
