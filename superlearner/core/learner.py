"""Learner and Fit: the train/predict/chain contract.

A Learner is a stateless description of an algorithm and its
hyperparameters. Training it on a Task returns a Fit, an immutable value
holding the trained state. Only fits can predict or chain; asking a bare
learner to do so raises NotTrainedError.

Pipelines, stacks, cross-validated wrappers and the Super Learner are all
Learners, so they nest freely.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar

import numpy as np
import pandas as pd

from ..config import OutcomeType
from ..errors import (
    DataError,
    DimensionMismatchError,
    InvalidTaskError,
    NotTrainedError,
    SchemaMismatchError,
)
from .task import Task

logger = logging.getLogger(__name__)

Predictions = pd.Series | pd.DataFrame


class ChainPolicy(Enum):
    """What a predictive learner's chain does with its predictions."""

    PASSTHROUGH = "passthrough"  # hand the task on unchanged
    REPLACE = "replace"  # predictions become the only covariates
    APPEND = "append"  # predictions are added to the covariates


class Learner(ABC):
    """Base class for all learners.

    Subclasses implement _train() and _predict(), and override _chain()
    when their output should reshape the next stage's task.

    Class attributes:
        outcome_types: Outcome types the learner can be trained on.
        requires_numeric: Whether covariates must be numeric and non-missing.
    """

    outcome_types: ClassVar[frozenset[OutcomeType]] = frozenset(OutcomeType)
    requires_numeric: ClassVar[bool] = True
    default_name: ClassVar[str] = "learner"

    def __init__(self, name: str | None = None, **params: Any) -> None:
        self._name = name or self.default_name
        self._params = dict(params)

    @property
    def name(self) -> str:
        """Label used for prediction columns and reports."""
        return self._name

    @property
    def params(self) -> dict[str, Any]:
        """Hyperparameters the learner was constructed with."""
        return self._params.copy()

    @property
    def is_trained(self) -> bool:
        """A bare learner is never trained."""
        return False

    def train(self, task: Task) -> Fit:
        """Train on a task.

        Args:
            task: Task to train on. It is not modified.

        Returns:
            A new Fit.

        Raises:
            InvalidTaskError: If the task's outcome type is unsupported.
            DataError: If covariates are unusable by this learner.
        """
        self.check_task(task)
        logger.debug(f"Training {self.name} on {task.n_rows} rows")
        fit_object = self._train(task)
        return Fit(learner=self, fit_object=fit_object, training_task=task)

    def predict(self, task: Task | None = None) -> Predictions:
        """Bare learners cannot predict."""
        raise NotTrainedError(self.name)

    def chain(self, task: Task | None = None) -> Task:
        """Bare learners cannot chain."""
        raise NotTrainedError(self.name)

    def check_task(self, task: Task) -> None:
        """Validate that a task can be used to train this learner."""
        if task.outcome_type not in self.outcome_types:
            supported = sorted(t.value for t in self.outcome_types)
            raise InvalidTaskError(
                f"learner '{self.name}' does not support {task.outcome_type.value} outcomes. "
                f"Supported: {supported}"
            )
        if self.requires_numeric:
            check_numeric_covariates(task, self.name)

    @abstractmethod
    def _train(self, task: Task) -> Any:
        """Fit the algorithm and return its trained state."""
        ...

    @abstractmethod
    def _predict(self, fit: Fit, task: Task) -> Predictions | np.ndarray:
        """Predict for every row of `task` using a fit of this learner."""
        ...

    def _chain(self, fit: Fit, task: Task) -> Task:
        """Derive the next stage's task; terminal learners pass it through."""
        return task

    def _as_covariates(self, predictions: Predictions) -> pd.DataFrame:
        """Label predictions as covariate columns for a chained task."""
        return prediction_columns(predictions, self.name)

    def __repr__(self) -> str:
        params = ", ".join(f"{k}={v!r}" for k, v in self._params.items())
        return f"{type(self).__name__}(name={self.name!r}{', ' + params if params else ''})"


@dataclass(frozen=True, eq=False)
class Fit:
    """A trained instance of a learner, bound to the task it was trained on."""

    learner: Learner
    fit_object: Any
    training_task: Task

    @property
    def is_trained(self) -> bool:
        """Fits are always trained."""
        return True

    @property
    def name(self) -> str:
        """Name of the learner that produced this fit."""
        return self.learner.name

    @property
    def covariate_names(self) -> tuple[str, ...]:
        """Covariates the fit was trained on."""
        return self.training_task.covariate_names

    def train(self, task: Task) -> Fit:
        """A fit is already trained; training again returns it unchanged."""
        return self

    def predict(self, task: Task | None = None) -> Predictions:
        """Predict for every row of a task.

        Args:
            task: Task to predict on; defaults to the training task.

        Returns:
            Series of scalar predictions, or DataFrame for multi-column output,
            indexed like the task's data.

        Raises:
            SchemaMismatchError: If the task's covariates differ from the training covariates.
        """
        task = self._resolve(task)
        raw = self.learner._predict(self, task)
        return as_predictions(raw, task, self.name)

    def chain(self, task: Task | None = None) -> Task:
        """Derive the next stage's task from this fit.

        Raises:
            SchemaMismatchError: If the task's covariates differ from the training covariates.
        """
        task = self._resolve(task)
        return self.learner._chain(self, task)

    def _resolve(self, task: Task | None) -> Task:
        if task is None:
            return self.training_task
        check_schema(self.covariate_names, task.covariate_names)
        return task

    def __repr__(self) -> str:
        return f"Fit(learner={self.learner!r}, covariates={list(self.covariate_names)})"


def check_schema(expected: tuple[str, ...], actual: tuple[str, ...]) -> None:
    """Raise SchemaMismatchError unless both covariate sets are equal."""
    if set(expected) != set(actual):
        raise SchemaMismatchError(list(expected), list(actual))


def check_numeric_covariates(task: Task, learner_name: str) -> None:
    """Raise DataError if any covariate is non-numeric or missing values."""
    if not task.covariate_names:
        raise DataError(f"learner '{learner_name}' needs at least one covariate")
    X = task.X
    non_numeric = [c for c in X.columns if not pd.api.types.is_numeric_dtype(X[c])]
    if non_numeric:
        raise DataError(f"learner '{learner_name}' requires numeric covariates: {non_numeric}")
    null_cols = X.columns[X.isnull().any()].tolist()
    if null_cols:
        raise DataError(f"covariates contain missing values: {null_cols}")


def as_predictions(raw: Predictions | np.ndarray, task: Task, name: str) -> Predictions:
    """Normalize raw learner output to a Series or DataFrame indexed like the task.

    Raises:
        DimensionMismatchError: If the output does not have one row per task row.
    """
    if len(raw) != task.n_rows:
        raise DimensionMismatchError(name, task.n_rows, len(raw))
    if isinstance(raw, pd.DataFrame):
        frame = raw.copy()
        frame.index = task.data.index
        return frame
    if isinstance(raw, pd.Series):
        series = raw.copy()
        series.index = task.data.index
        series.name = name
        return series

    values = np.asarray(raw)
    if values.ndim == 2 and values.shape[1] == 1:
        values = values[:, 0]
    if values.ndim == 1:
        return pd.Series(values, index=task.data.index, name=name)
    return pd.DataFrame(
        values,
        index=task.data.index,
        columns=[f"{name}_{i}" for i in range(values.shape[1])],
    )


def prediction_columns(predictions: Predictions, label: str) -> pd.DataFrame:
    """Turn predictions into labelled covariate columns."""
    if isinstance(predictions, pd.Series):
        return predictions.to_frame(name=label)
    return predictions.rename(columns=lambda c: f"{label}_{c}")


def chain_predictions(fit: Fit, task: Task, policy: ChainPolicy) -> Task:
    """Apply a chain policy using a fit's predictions on `task`."""
    if policy == ChainPolicy.PASSTHROUGH:
        return task
    columns = fit.learner._as_covariates(fit.predict(task))
    return task.next_in_chain(columns, replace=policy == ChainPolicy.REPLACE)
