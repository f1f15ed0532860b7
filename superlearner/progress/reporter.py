"""Progress reporting for Super Learner training.

Stages report a ProgressUpdate to a ProgressReporter. A callback reporter
forwards updates to user code, the logging reporter writes them to the
module logger, and the null reporter drops them.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

logger = logging.getLogger(__name__)


class TrainingStage(Enum):
    """Where a Super Learner is in its training run."""

    INITIALIZING = "initializing"
    VALIDATING = "validating"
    CROSS_VALIDATING = "cross_validating"
    META_TRAINING = "meta_training"
    REFITTING = "refitting"
    RISK = "risk"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass(frozen=True)
class ProgressUpdate:
    """A single progress report.

    Attributes:
        stage: Stage being entered.
        progress: Fraction of the run done, between 0.0 and 1.0.
        message: Status line for display.
        learners: Number of stack members involved, if relevant.
    """

    stage: TrainingStage
    progress: float
    message: str
    learners: int | None = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.progress <= 1.0:
            raise ValueError(f"progress must be within [0, 1], got {self.progress}")


ProgressCallback = Callable[[ProgressUpdate], None]


class ProgressReporter(Protocol):
    """Anything that accepts progress updates."""

    def report(self, update: ProgressUpdate) -> None: ...


class CallbackProgressReporter:
    """Forwards every update to a user callback."""

    def __init__(self, progress_callback: ProgressCallback) -> None:
        self._progress_callback = progress_callback

    def report(self, update: ProgressUpdate) -> None:
        self._progress_callback(update)


class LoggingProgressReporter:
    """Writes updates to the logger; failures are logged as errors.

    Args:
        level: Log level for regular updates.
    """

    def __init__(self, level: int = logging.DEBUG) -> None:
        self._level = level

    def report(self, update: ProgressUpdate) -> None:
        level = logging.ERROR if update.stage == TrainingStage.FAILED else self._level
        logger.log(level, f"[{update.progress:4.0%}] {update.stage.value}: {update.message}")


class NullProgressReporter:
    """Drops every update."""

    def report(self, update: ProgressUpdate) -> None:
        return None
