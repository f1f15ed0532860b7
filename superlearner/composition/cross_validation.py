"""Cross-validated training of a learner.

For every fold the inner learner is trained on the fold's training rows and
predicts its validation rows. Stitching the validation predictions together
gives one out-of-fold prediction per row, none of which was produced by a
fit that saw that row.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd
from joblib import Parallel, delayed

from ..core.folds import Fold, validate_folds
from ..core.learner import ChainPolicy, Fit, Learner, Predictions
from ..core.task import Task
from ..errors import DimensionMismatchError, FoldCoverageError, NotTrainedError

logger = logging.getLogger(__name__)


def _train_fold(learner: Learner, task: Task, fold: Fold) -> tuple[Fit, Predictions]:
    """Train on a fold's training rows and predict its validation rows."""
    training_task = task.subset(fold.training)
    validation_task = task.subset(fold.validation)
    fit = learner.train(training_task)
    return fit, fit.predict(validation_task)


@dataclass(frozen=True, eq=False)
class CrossValidatedFit:
    """Trained state of a CrossValidatedLearner.

    Attributes:
        folds: Folds the fits were trained on.
        fold_fits: One fit of the inner learner per fold.
        oof_predictions: Out-of-fold predictions in original row order.
        full_fit: Inner learner trained on every row, if requested.
    """

    folds: tuple[Fold, ...]
    fold_fits: tuple[Fit, ...]
    oof_predictions: Predictions
    full_fit: Fit | None = None

    def predict_fold(self, task: Task, fold: str | int = "validation") -> Predictions:
        """Predict with a specific fit.

        Args:
            task: Task to predict on.
            fold: "validation" for each row's out-of-fold fit, "full" for the
                full-data fit, or a fold index.

        Returns:
            Predictions for every row of the task.

        Raises:
            NotTrainedError: If "full" is requested but no full fit was kept.
            FoldCoverageError: If "validation" is requested for a task whose rows
                do not line up with the folds.
        """
        if fold == "full":
            if self.full_fit is None:
                raise NotTrainedError("full-data fit")
            return self.full_fit.predict(task)
        if isinstance(fold, int):
            if not 0 <= fold < len(self.fold_fits):
                raise IndexError(f"fold {fold} out of range 0..{len(self.fold_fits) - 1}")
            return self.fold_fits[fold].predict(task)
        if fold != "validation":
            raise ValueError(f"Unknown fold selector '{fold}'")

        n_rows = sum(len(f.validation) for f in self.folds)
        if task.n_rows != n_rows:
            raise FoldCoverageError(f"task has {task.n_rows} rows but folds cover {n_rows}")
        parts = [
            (f, fit.predict(task.subset(f.validation)))
            for f, fit in zip(self.folds, self.fold_fits)
        ]
        return _assemble(parts, task, self.fold_fits[0].name)


class CrossValidatedLearner(Learner):
    """Wraps a learner so it is trained and evaluated across the task's folds.

    Predicting on the training task returns the out-of-fold predictions;
    predicting on any other task uses the full-data fit.

    Args:
        learner: Inner learner.
        full_fit: Whether to also train the inner learner on all rows.
        n_jobs: Parallel workers across folds.
        chain: Chain policy for the out-of-fold predictions.
    """

    requires_numeric = False
    default_name = "cv"

    def __init__(
        self,
        learner: Learner,
        full_fit: bool = True,
        n_jobs: int = 1,
        chain: ChainPolicy = ChainPolicy.REPLACE,
        name: str | None = None,
    ) -> None:
        super().__init__(name=name or f"cv_{learner.name}")
        self._learner = learner
        self._full_fit = full_fit
        self._n_jobs = n_jobs
        self._chain_policy = chain

    @property
    def learner(self) -> Learner:
        """The wrapped learner."""
        return self._learner

    def check_task(self, task: Task) -> None:
        """Folds must partition the task's rows."""
        super().check_task(task)
        validate_folds(task.folds, task.n_rows)

    def _train(self, task: Task) -> CrossValidatedFit:
        logger.info(
            f"Cross-validating {self._learner.name} over {len(task.folds)} folds "
            f"({task.n_rows} rows)"
        )
        results = Parallel(n_jobs=self._n_jobs)(
            delayed(_train_fold)(self._learner, task, fold) for fold in task.folds
        )
        fold_fits = tuple(fit for fit, _ in results)
        parts = [(fold, predictions) for fold, (_, predictions) in zip(task.folds, results)]
        oof = _assemble(parts, task, self._learner.name)

        full = None
        if self._full_fit:
            logger.debug(f"Training full-data fit of {self._learner.name}")
            full = self._learner.train(task)

        return CrossValidatedFit(
            folds=task.folds,
            fold_fits=fold_fits,
            oof_predictions=oof,
            full_fit=full,
        )

    def _predict(self, fit: Fit, task: Task) -> Predictions:
        state: CrossValidatedFit = fit.fit_object
        if task.shares_rows_with(fit.training_task):
            return state.oof_predictions
        if state.full_fit is None:
            raise NotTrainedError(f"{self.name} full-data fit")
        return state.full_fit.predict(task)

    def _chain(self, fit: Fit, task: Task) -> Task:
        if self._chain_policy == ChainPolicy.PASSTHROUGH:
            return task
        columns = self._learner._as_covariates(fit.predict(task))
        return task.next_in_chain(columns, replace=self._chain_policy == ChainPolicy.REPLACE)

    def _as_covariates(self, predictions: Predictions) -> pd.DataFrame:
        return self._learner._as_covariates(predictions)


def _assemble(parts: list[tuple[Fold, Predictions]], task: Task, name: str) -> Predictions:
    """Place each fold's validation predictions at its rows' original positions."""
    first = parts[0][1]
    for fold, predictions in parts:
        if len(predictions) != len(fold.validation):
            raise DimensionMismatchError(name, len(fold.validation), len(predictions))

    if isinstance(first, pd.Series):
        values = np.full(task.n_rows, np.nan, dtype=_result_dtype(p for _, p in parts))
        for fold, predictions in parts:
            values[fold.validation] = predictions.to_numpy()
        return pd.Series(values, index=task.data.index, name=first.name)

    columns = list(first.columns)
    frame = pd.DataFrame(np.nan, index=task.data.index, columns=columns)
    for fold, predictions in parts:
        frame.iloc[fold.validation, :] = predictions[columns].to_numpy()
    return frame


def _result_dtype(predictions: Any) -> Any:
    """Float unless some fold produced non-numeric predictions."""
    for p in predictions:
        if not pd.api.types.is_numeric_dtype(p):
            return object
    return np.float64
