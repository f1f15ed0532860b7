"""Parallel composition of learners sharing one task."""

from __future__ import annotations

import logging

import pandas as pd
from joblib import Parallel, delayed

from ..core.learner import ChainPolicy, Fit, Learner, Predictions, prediction_columns
from ..core.task import Task
from ..errors import DimensionMismatchError

logger = logging.getLogger(__name__)


def _train_member(member: Learner | Fit, task: Task) -> Fit:
    return member.train(task)


class Stack(Learner):
    """Trains several learners on the same task and concatenates their predictions.

    Members are independent, so they are trained in parallel when n_jobs != 1.
    Prediction columns follow member order; each member is labelled by its
    name, with `_2`, `_3`, ... appended to repeated names.
    """

    requires_numeric = False
    default_name = "stack"

    def __init__(
        self,
        *learners: Learner | Fit,
        n_jobs: int = 1,
        chain: ChainPolicy = ChainPolicy.REPLACE,
        name: str | None = None,
    ) -> None:
        if not learners:
            raise ValueError("Stack needs at least one learner")
        super().__init__(name=name)
        self._members: tuple[Learner | Fit, ...] = tuple(learners)
        self._labels = _unique_labels([m.name for m in learners])
        self._n_jobs = n_jobs
        self._chain_policy = chain

    @property
    def members(self) -> tuple[Learner | Fit, ...]:
        """Stack members, in column order."""
        return self._members

    @property
    def labels(self) -> tuple[str, ...]:
        """Prediction column label of each member."""
        return self._labels

    def _train(self, task: Task) -> tuple[Fit, ...]:
        logger.info(f"Training stack of {len(self._members)} learners on {task.n_rows} rows")
        fits = Parallel(n_jobs=self._n_jobs)(
            delayed(_train_member)(member, task) for member in self._members
        )
        return tuple(fits)

    def _predict(self, fit: Fit, task: Task) -> pd.DataFrame:
        columns: list[pd.DataFrame] = []
        for label, member_fit in zip(self._labels, fit.fit_object):
            predictions = member_fit.predict(task)
            if len(predictions) != task.n_rows:
                raise DimensionMismatchError(label, task.n_rows, len(predictions))
            columns.append(prediction_columns(predictions, label))
        frame = pd.concat(columns, axis=1)
        frame.columns = list(_unique_labels([str(c) for c in frame.columns]))
        return frame

    def _chain(self, fit: Fit, task: Task) -> Task:
        if self._chain_policy == ChainPolicy.PASSTHROUGH:
            return task
        return task.next_in_chain(
            fit.predict(task), replace=self._chain_policy == ChainPolicy.REPLACE
        )

    def _as_covariates(self, predictions: Predictions) -> pd.DataFrame:
        # Stack predictions are already labelled per member
        if isinstance(predictions, pd.Series):
            return predictions.to_frame()
        return predictions


def _unique_labels(names: list[str]) -> tuple[str, ...]:
    """Make names unique by suffixing repeats with the first free occurrence number."""
    used: set[str] = set()
    labels = []
    for name in names:
        label, n = name, 1
        while label in used:
            n += 1
            label = f"{name}_{n}"
        used.add(label)
        labels.append(label)
    return tuple(labels)
