"""Tests for progress reporting."""

from __future__ import annotations

import logging

import pytest

from superlearner import (
    CallbackProgressReporter,
    LoggingProgressReporter,
    NullProgressReporter,
    ProgressUpdate,
    TrainingStage,
)


class TestProgressUpdate:
    """Tests for ProgressUpdate."""

    def test_fields(self):
        """Updates carry stage, progress, message and member count."""
        update = ProgressUpdate(TrainingStage.REFITTING, 0.7, "refit", learners=3)
        assert update.stage == TrainingStage.REFITTING
        assert update.learners == 3

    @pytest.mark.parametrize("progress", [-0.1, 1.5])
    def test_progress_out_of_range(self, progress):
        """Progress outside [0, 1] is rejected."""
        with pytest.raises(ValueError, match="progress"):
            ProgressUpdate(TrainingStage.VALIDATING, progress, "bad")


class TestReporters:
    """Tests for reporter implementations."""

    def test_callback_reporter(self):
        """Callback reporter forwards each update."""
        received = []
        reporter = CallbackProgressReporter(received.append)
        update = ProgressUpdate(TrainingStage.COMPLETE, 1.0, "done")

        reporter.report(update)

        assert received == [update]

    def test_logging_reporter(self, caplog):
        """Logging reporter writes the stage and message."""
        reporter = LoggingProgressReporter(level=logging.INFO)
        with caplog.at_level(logging.INFO, logger="superlearner.progress.reporter"):
            reporter.report(ProgressUpdate(TrainingStage.META_TRAINING, 0.6, "meta"))
        assert "meta_training: meta" in caplog.text

    def test_logging_reporter_failure_is_error(self, caplog):
        """Failures are logged at ERROR whatever the configured level."""
        reporter = LoggingProgressReporter()
        with caplog.at_level(logging.ERROR, logger="superlearner.progress.reporter"):
            reporter.report(ProgressUpdate(TrainingStage.FAILED, 0.0, "boom"))
        assert [r.levelno for r in caplog.records] == [logging.ERROR]

    def test_null_reporter(self):
        """Null reporter accepts updates silently."""
        assert NullProgressReporter().report(ProgressUpdate(TrainingStage.RISK, 0.9, "x")) is None
