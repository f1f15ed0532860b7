"""Learners backed by scikit-learn compatible estimators."""

from __future__ import annotations

import inspect
import logging
import warnings
from typing import Any

import numpy as np
import pandas as pd
from sklearn.base import clone, is_classifier

from ..config import OutcomeType
from ..core.learner import ChainPolicy, Fit, Learner, Predictions, chain_predictions
from ..core.task import Task
from .registry import create_estimator, supported_outcome_types

logger = logging.getLogger(__name__)


class SklearnLearner(Learner):
    """Wraps a registry algorithm or any scikit-learn style estimator.

    The estimator class is picked from the task's outcome type at training
    time, so one learner serves continuous, binary and categorical tasks.
    Binary predictions are the probability of the second outcome level;
    categorical predictions are one probability column per level.

    Args:
        algorithm: Registry algorithm name (e.g. "glm", "random_forest").
        estimator: Unfitted estimator to clone instead of using the registry.
        chain: What chain() does with the predictions.
        name: Label for prediction columns; defaults to the algorithm name.
        random_seed: Seed injected into estimators that accept one.
        n_jobs: Parallel jobs inside the estimator.
        **params: Hyperparameters overriding the registry defaults.

    Example:
        >>> learner = SklearnLearner("random_forest", n_estimators=200)
        >>> fit = learner.train(task)
        >>> fit.predict(new_task)
    """

    def __init__(
        self,
        algorithm: str | None = None,
        estimator: Any = None,
        chain: ChainPolicy = ChainPolicy.PASSTHROUGH,
        name: str | None = None,
        random_seed: int = 42,
        n_jobs: int = 1,
        **params: Any,
    ) -> None:
        if (algorithm is None) == (estimator is None):
            raise ValueError("Provide exactly one of algorithm or estimator")
        if algorithm is not None:
            # Fails fast on unknown algorithms
            self._outcome_types = supported_outcome_types(algorithm)
            default = algorithm
        else:
            if is_classifier(estimator):
                self._outcome_types = frozenset({OutcomeType.BINARY, OutcomeType.CATEGORICAL})
            else:
                self._outcome_types = frozenset({OutcomeType.CONTINUOUS})
            default = type(estimator).__name__.lower()
        super().__init__(name=name or default, **params)
        self._algorithm = algorithm
        self._estimator = estimator
        self._chain_policy = chain
        self._random_seed = random_seed
        self._n_jobs = n_jobs

    @property
    def outcome_types(self) -> frozenset[OutcomeType]:  # type: ignore[override]
        """Outcome types supported by the wrapped algorithm."""
        return self._outcome_types

    @property
    def algorithm(self) -> str | None:
        """Registry algorithm name, if any."""
        return self._algorithm

    def make_estimator(self, outcome_type: OutcomeType) -> Any:
        """Build a fresh, unfitted estimator for an outcome type."""
        if self._estimator is not None:
            return clone(self._estimator)
        return create_estimator(
            self._algorithm,
            outcome_type,
            params=self._params,
            random_seed=self._random_seed,
            n_jobs=self._n_jobs,
        )

    def _train(self, task: Task) -> Any:
        estimator = self.make_estimator(task.outcome_type)
        X = task.X.to_numpy(dtype=np.float64)
        if task.outcome_type == OutcomeType.CONTINUOUS:
            y = task.numeric_outcome()
        else:
            y = task.encoded_outcome()

        fit_kwargs: dict[str, Any] = {}
        if task.weights is not None:
            if _accepts_sample_weight(estimator):
                fit_kwargs["sample_weight"] = task.weights
            else:
                logger.warning(f"{self.name} does not accept sample weights; ignoring them")

        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            estimator.fit(X, y, **fit_kwargs)
        return estimator

    def _predict(self, fit: Fit, task: Task) -> Predictions | np.ndarray:
        estimator = fit.fit_object
        # Column order as in training, whatever the order of the new task
        X = task.data[list(fit.covariate_names)].to_numpy(dtype=np.float64)
        outcome_type = fit.training_task.outcome_type

        if outcome_type == OutcomeType.CONTINUOUS:
            return np.asarray(estimator.predict(X), dtype=np.float64)

        if not hasattr(estimator, "predict_proba"):
            predicted = np.asarray(estimator.predict(X))
            if outcome_type == OutcomeType.BINARY:
                return (predicted == 1).astype(np.float64)
            return _one_hot(predicted, fit.training_task.outcome_levels)

        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            proba = np.asarray(estimator.predict_proba(X), dtype=np.float64)
        classes = [int(c) for c in estimator.classes_]

        if outcome_type == OutcomeType.BINARY:
            if 1 not in classes:
                return np.zeros(task.n_rows)
            return proba[:, classes.index(1)]

        levels = fit.training_task.outcome_levels or ()
        frame = pd.DataFrame(0.0, index=task.data.index, columns=list(levels))
        for position, code in enumerate(classes):
            frame.iloc[:, code] = proba[:, position]
        return frame

    def _chain(self, fit: Fit, task: Task) -> Task:
        return chain_predictions(fit, task, self._chain_policy)


def _accepts_sample_weight(estimator: Any) -> bool:
    try:
        return "sample_weight" in inspect.signature(estimator.fit).parameters
    except (ValueError, TypeError):
        return False


def _one_hot(codes: np.ndarray, levels: tuple[Any, ...] | None) -> pd.DataFrame:
    levels = levels or ()
    frame = pd.DataFrame(0.0, index=range(len(codes)), columns=list(levels))
    for code in range(len(levels)):
        frame.iloc[codes == code, code] = 1.0
    return frame
