"""Non-negative least squares meta-learner."""

from __future__ import annotations

import logging

import numpy as np
from scipy.optimize import nnls

from ..core.task import Task
from .base import Combination, MetaLearner

logger = logging.getLogger(__name__)


class NNLSMetaLearner(MetaLearner):
    """Combines predictions with non-negative least squares weights.

    With convex=True the weights are normalized to sum to one, so for
    binary outcomes the combined prediction stays a probability. Task
    weights scale each row's contribution to the squared error.

    Args:
        convex: Whether to normalize the weights to sum to one.
        name: Learner name.
    """

    default_name = "nnls"

    def __init__(self, convex: bool = True, name: str | None = None) -> None:
        super().__init__(name=name, convex=convex)
        self._convex = convex

    def _combine(self, task: Task) -> Combination:
        columns = task.covariate_names
        X = task.X.to_numpy(dtype=np.float64)
        y = task.numeric_outcome()
        if task.weights is not None:
            root = np.sqrt(task.weights)
            X = X * root[:, None]
            y = y * root

        coefficients, residual = nnls(X, y)
        logger.debug(f"NNLS residual norm {residual:.6g} over {len(columns)} columns")

        total = coefficients.sum()
        if total <= 0:
            logger.warning(
                f"{self.name}: all NNLS weights are zero; falling back to equal weights"
            )
            coefficients = np.full(len(columns), 1.0 / len(columns))
        elif self._convex:
            coefficients = coefficients / total

        return Combination(columns=columns, coefficients=coefficients)
