"""Shared test fixtures and utilities for superlearner tests."""

from __future__ import annotations

from typing import Any

import numpy as np
import pandas as pd
import pytest

from superlearner import FoldScheme, Learner, Task

COVARIATES = ["x1", "x2", "x3", "x4", "x5", "x6", "x7"]

# =============================================================================
# Test Data Fixtures
# =============================================================================


@pytest.fixture
def continuous_data() -> pd.DataFrame:
    """Create a regression dataset with 600 rows and 7 covariates.

    Only x1, x2 and x3 carry signal.

    Returns:
        DataFrame with numeric covariates and continuous outcome y.
    """
    np.random.seed(42)
    n_samples = 600

    data = {name: np.random.randn(n_samples) for name in COVARIATES}
    data["y"] = (
        2.0 * data["x1"]
        - 1.5 * data["x2"]
        + data["x3"] ** 2
        + np.random.randn(n_samples) * 0.5
    )

    return pd.DataFrame(data)


@pytest.fixture
def binary_data() -> pd.DataFrame:
    """Create a binary classification dataset with 600 rows and 7 covariates.

    Returns:
        DataFrame with numeric covariates and a 0/1 outcome y.
    """
    np.random.seed(42)
    n_samples = 600

    data = {name: np.random.randn(n_samples) for name in COVARIATES}
    logit = 1.5 * data["x1"] - data["x2"]
    prob = 1 / (1 + np.exp(-logit))
    data["y"] = (np.random.random(n_samples) < prob).astype(int)

    return pd.DataFrame(data)


@pytest.fixture
def categorical_data() -> pd.DataFrame:
    """Create a three-level classification dataset.

    Returns:
        DataFrame with numeric covariates and a string outcome y.
    """
    np.random.seed(42)
    n_samples = 300

    data = {name: np.random.randn(n_samples) for name in ["x1", "x2", "x3"]}
    score = data["x1"] + 0.5 * data["x2"]
    data["y"] = pd.cut(score, bins=3, labels=["low", "mid", "high"]).astype(str)

    return pd.DataFrame(data)


@pytest.fixture
def mixed_types_data() -> pd.DataFrame:
    """Create a dataset with numeric and categorical covariates.

    Returns:
        DataFrame with both numeric and string covariates.
    """
    np.random.seed(42)
    n_samples = 150

    data = {
        "numeric_1": np.random.randn(n_samples),
        "numeric_2": np.random.uniform(0, 100, n_samples),
        "category_1": np.random.choice(["A", "B", "C"], n_samples),
        "category_2": np.random.choice(["X", "Y"], n_samples),
    }
    data["y"] = data["numeric_1"] * 3 + (data["category_1"] == "A") * 2.0

    return pd.DataFrame(data)


@pytest.fixture
def small_data() -> pd.DataFrame:
    """Create a very small regression dataset for fast tests.

    Returns:
        DataFrame with 50 samples for quick testing.
    """
    np.random.seed(42)
    n_samples = 50

    x1 = np.random.randn(n_samples)
    x2 = np.random.randn(n_samples)

    data = {
        "x1": x1,
        "x2": x2,
        "y": x1 * 2 + x2 * 3 + np.random.randn(n_samples) * 0.5,
    }

    return pd.DataFrame(data)


# =============================================================================
# Task Fixtures
# =============================================================================


@pytest.fixture
def continuous_task(continuous_data: pd.DataFrame) -> Task:
    """10-fold task over the continuous dataset."""
    return Task.create(continuous_data, COVARIATES, "y")


@pytest.fixture
def binary_task(binary_data: pd.DataFrame) -> Task:
    """10-fold task over the binary dataset."""
    return Task.create(binary_data, COVARIATES, "y")


@pytest.fixture
def categorical_task(categorical_data: pd.DataFrame) -> Task:
    """5-fold task over the categorical dataset."""
    return Task.create(categorical_data, ["x1", "x2", "x3"], "y", folds=FoldScheme(n_folds=5))


@pytest.fixture
def small_task(small_data: pd.DataFrame) -> Task:
    """5-fold task over the small dataset."""
    return Task.create(small_data, ["x1", "x2"], "y", folds=FoldScheme(n_folds=5))


# =============================================================================
# Utility Fixtures
# =============================================================================


class RowCountLearner(Learner):
    """Predicts 1.0 for rows it was trained on and 0.0 for unseen rows.

    Rows are identified by a "row_id" column, so a test can tell whether a
    prediction came from a fit that saw the row.
    """

    requires_numeric = False
    default_name = "row_count"

    def _train(self, task: Task) -> Any:
        return frozenset(task.data["row_id"].tolist())

    def _predict(self, fit: Any, task: Task) -> pd.Series:
        seen = fit.fit_object
        return pd.Series([float(r in seen) for r in task.data["row_id"]])


@pytest.fixture
def progress_tracker() -> dict[str, Any]:
    """Create a progress tracker for testing callbacks.

    Returns:
        Dictionary to store progress updates.
    """
    tracker: dict[str, Any] = {
        "updates": [],
        "stages": [],
        "final_progress": 0.0,
    }
    return tracker


def make_progress_callback(tracker: dict[str, Any]):
    """Create a progress callback that stores updates in the tracker."""
    from superlearner import ProgressUpdate

    def callback(update: ProgressUpdate) -> None:
        tracker["updates"].append(update)
        tracker["stages"].append(update.stage)
        tracker["final_progress"] = update.progress

    return callback


# =============================================================================
# Markers
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (full Super Learner)"
    )
