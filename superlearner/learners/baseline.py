"""Baseline learner predicting the outcome mean."""

from __future__ import annotations

from typing import Any

import numpy as np
import pandas as pd

from ..config import OutcomeType
from ..core.learner import ChainPolicy, Fit, Learner, Predictions, chain_predictions
from ..core.task import Task


class MeanLearner(Learner):
    """Predicts the (weighted) training outcome mean for every row.

    Binary outcomes get the proportion of the second level; categorical
    outcomes get the proportion of every level. Covariates are ignored, so
    they need not be numeric.
    """

    requires_numeric = False
    default_name = "mean"

    def __init__(self, chain: ChainPolicy = ChainPolicy.PASSTHROUGH, name: str | None = None) -> None:
        super().__init__(name=name)
        self._chain_policy = chain

    def _train(self, task: Task) -> Any:
        weights = task.weights
        if task.outcome_type == OutcomeType.CATEGORICAL:
            codes = task.encoded_outcome()
            levels = task.outcome_levels or ()
            indicators = np.eye(len(levels))[codes]
            return np.average(indicators, axis=0, weights=_usable(weights))
        return float(np.average(task.numeric_outcome(), weights=_usable(weights)))

    def _predict(self, fit: Fit, task: Task) -> Predictions:
        if isinstance(fit.fit_object, np.ndarray):
            levels = list(fit.training_task.outcome_levels or ())
            values = np.tile(fit.fit_object, (task.n_rows, 1))
            return pd.DataFrame(values, index=task.data.index, columns=levels)
        return pd.Series(fit.fit_object, index=task.data.index, dtype=np.float64)

    def _chain(self, fit: Fit, task: Task) -> Task:
        return chain_predictions(fit, task, self._chain_policy)


def _usable(weights: np.ndarray | None) -> np.ndarray | None:
    # np.average rejects weights summing to zero
    if weights is None or weights.sum() <= 0:
        return None
    return weights
