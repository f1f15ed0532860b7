"""Unconstrained linear meta-learner."""

from __future__ import annotations

import numpy as np
from sklearn.linear_model import LinearRegression

from ..config import OutcomeType
from ..core.task import Task
from .base import Combination, MetaLearner


class LinearMetaLearner(MetaLearner):
    """Combines predictions with an ordinary least squares fit.

    Coefficients may be negative and need not sum to one.
    """

    outcome_types = frozenset({OutcomeType.CONTINUOUS})
    default_name = "linear"

    def __init__(self, fit_intercept: bool = True, name: str | None = None) -> None:
        super().__init__(name=name, fit_intercept=fit_intercept)
        self._fit_intercept = fit_intercept

    def _combine(self, task: Task) -> Combination:
        model = LinearRegression(fit_intercept=self._fit_intercept)
        model.fit(
            task.X.to_numpy(dtype=np.float64),
            task.numeric_outcome(),
            sample_weight=task.weights,
        )
        return Combination(
            columns=task.covariate_names,
            coefficients=np.asarray(model.coef_, dtype=np.float64),
            intercept=float(model.intercept_),
        )
