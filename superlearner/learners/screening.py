"""Covariate screening by marginal correlation with the outcome."""

from __future__ import annotations

import logging
import warnings

import numpy as np
import pandas as pd
from scipy import stats

from ..config import OutcomeType
from ..core.learner import Fit, Learner
from ..core.task import Task

logger = logging.getLogger(__name__)


class CorrelationScreener(Learner):
    """Keeps the covariates most correlated with the outcome.

    A screener is a preprocessing learner: its chain() hands the next learner
    the same data with only the selected covariates. Its predictions are the
    selected covariate columns themselves.

    Args:
        num_screen: Keep this many covariates with the largest absolute
            Pearson correlation. When None, keep those whose correlation
            test has a p-value below `p_value`.
        p_value: Significance threshold used when num_screen is None.
        min_screen: Never keep fewer covariates than this.
        name: Learner name.
    """

    outcome_types = frozenset({OutcomeType.CONTINUOUS, OutcomeType.BINARY})
    default_name = "screen_corr"

    def __init__(
        self,
        num_screen: int | None = None,
        p_value: float = 0.1,
        min_screen: int = 2,
        name: str | None = None,
    ) -> None:
        if num_screen is not None and num_screen < 1:
            raise ValueError(f"num_screen must be >= 1, got {num_screen}")
        if not 0.0 < p_value <= 1.0:
            raise ValueError(f"p_value must be in (0, 1], got {p_value}")
        if min_screen < 1:
            raise ValueError(f"min_screen must be >= 1, got {min_screen}")
        super().__init__(name=name, num_screen=num_screen, p_value=p_value, min_screen=min_screen)
        self._num_screen = num_screen
        self._p_value = p_value
        self._min_screen = min_screen

    def _train(self, task: Task) -> tuple[str, ...]:
        y = task.numeric_outcome()
        scores = correlation_scores(task.X, y)
        ranked = scores.sort_values("abs_r", ascending=False, kind="stable")
        n_available = len(ranked)

        if self._num_screen is not None:
            keep = ranked.index[: min(self._num_screen, n_available)]
        else:
            keep = ranked.index[ranked["p_value"] < self._p_value]
            floor = min(self._min_screen, n_available)
            if len(keep) < floor:
                logger.warning(
                    f"{self.name}: only {len(keep)} covariates below p={self._p_value}, "
                    f"keeping the top {floor} by correlation"
                )
                keep = ranked.index[:floor]

        # Preserve the task's covariate order
        selected = tuple(c for c in task.covariate_names if c in set(keep))
        logger.debug(f"{self.name} selected {len(selected)}/{n_available} covariates: {list(selected)}")
        return selected

    def _predict(self, fit: Fit, task: Task) -> pd.DataFrame:
        return task.data[list(fit.fit_object)]

    def _chain(self, fit: Fit, task: Task) -> Task:
        return task.with_covariates(fit.fit_object)


def correlation_scores(X: pd.DataFrame, y: np.ndarray) -> pd.DataFrame:
    """Pearson correlation of each column with y.

    Constant columns get r = 0 and p-value = 1.

    Returns:
        DataFrame indexed by column name with columns r, abs_r, p_value.
    """
    rows = []
    for column in X.columns:
        values = X[column].to_numpy(dtype=np.float64)
        if np.ptp(values) == 0 or np.ptp(y) == 0:
            r, p = 0.0, 1.0
        else:
            with warnings.catch_warnings():
                warnings.simplefilter("ignore")
                result = stats.pearsonr(values, y)
            r, p = float(result[0]), float(result[1])
        rows.append({"column": column, "r": r, "abs_r": abs(r), "p_value": p})
    return pd.DataFrame(rows).set_index("column")
