"""Meta-learner base: learners that combine stacked predictions."""

from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from ..config import OutcomeType
from ..core.learner import Fit, Learner
from ..core.task import Task


@dataclass(frozen=True)
class Combination:
    """A linear combination of prediction columns.

    Attributes:
        columns: Prediction columns, in coefficient order.
        coefficients: One coefficient per column.
        intercept: Constant added to every prediction.
    """

    columns: tuple[str, ...]
    coefficients: NDArray[np.float64]
    intercept: float = 0.0

    def apply(self, task: Task) -> NDArray[np.float64]:
        X = task.data[list(self.columns)].to_numpy(dtype=np.float64)
        return X @ self.coefficients + self.intercept


class MetaLearner(Learner):
    """Base class for meta-learners.

    A meta-learner is trained on a task whose covariates are the out-of-fold
    predictions of a stack and learns how to combine them. Subclasses
    implement _combine() and return a Combination.
    """

    outcome_types = frozenset({OutcomeType.CONTINUOUS, OutcomeType.BINARY})
    default_name = "meta"

    def _train(self, task: Task) -> Combination:
        return self._combine(task)

    @abstractmethod
    def _combine(self, task: Task) -> Combination:
        """Learn a combination of the task's covariate columns."""
        ...

    def _predict(self, fit: Fit, task: Task) -> NDArray[np.float64]:
        predictions = fit.fit_object.apply(task)
        if fit.training_task.outcome_type == OutcomeType.BINARY:
            return np.clip(predictions, 0.0, 1.0)
        return predictions

    def coefficients(self, fit: Fit) -> dict[str, float]:
        """Coefficient of each prediction column in a fit of this meta-learner."""
        combination: Combination = fit.fit_object
        return {
            column: float(value)
            for column, value in zip(combination.columns, combination.coefficients)
        }
