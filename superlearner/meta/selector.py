"""Discrete Super Learner: pick the single best column."""

from __future__ import annotations

import logging

import numpy as np

from ..core.risk import LossFunction, default_loss, risk
from ..core.task import Task
from .base import Combination, MetaLearner

logger = logging.getLogger(__name__)


class SelectorMetaLearner(MetaLearner):
    """Selects the prediction column with the lowest risk.

    Ties go to the earliest column.

    Args:
        loss: Loss to minimize; defaults to one matching the outcome type.
        name: Learner name.
    """

    default_name = "selector"

    def __init__(self, loss: LossFunction | None = None, name: str | None = None) -> None:
        super().__init__(name=name)
        self._loss = loss

    def _combine(self, task: Task) -> Combination:
        loss = self._loss or default_loss(task.outcome_type)
        outcomes = task.numeric_outcome()
        risks = [
            risk(task.data[column].to_numpy(dtype=np.float64), outcomes, loss, task.weights)
            for column in task.covariate_names
        ]
        best = int(np.argmin(risks))
        logger.info(f"Selected '{task.covariate_names[best]}' with risk {risks[best]:.6g}")

        coefficients = np.zeros(len(risks))
        coefficients[best] = 1.0
        return Combination(columns=task.covariate_names, coefficients=coefficients)
