"""Progress reporting for superlearner.

This module provides stage tracking and callbacks during Super Learner
training.
"""

from __future__ import annotations

from .reporter import (
    CallbackProgressReporter,
    LoggingProgressReporter,
    NullProgressReporter,
    ProgressCallback,
    ProgressReporter,
    ProgressUpdate,
    TrainingStage,
)

__all__ = [
    "TrainingStage",
    "ProgressUpdate",
    "ProgressCallback",
    "ProgressReporter",
    "CallbackProgressReporter",
    "LoggingProgressReporter",
    "NullProgressReporter",
]
