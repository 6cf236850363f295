"""Classification pipeline package."""

from .detectors import ExtensionClassifier, HeuristicClassifier, SignatureDetector
from .engine import FileClassifier, select_best
from .events import LogEvent, LogHistory, Severity
from .manager import CancellationSignal, ClassificationManager, RunOutcome, RunState
from .models import ClassificationResult, FileMeta, RunOptions
from .scheduler import BatchOutcome, BatchScheduler
from .stats import RunStats, StatsAggregator

__all__ = [
    "BatchOutcome",
    "BatchScheduler",
    "CancellationSignal",
    "ClassificationManager",
    "ClassificationResult",
    "ExtensionClassifier",
    "FileClassifier",
    "FileMeta",
    "HeuristicClassifier",
    "LogEvent",
    "LogHistory",
    "RunOptions",
    "RunOutcome",
    "RunState",
    "RunStats",
    "Severity",
    "SignatureDetector",
    "StatsAggregator",
    "select_best",
]
