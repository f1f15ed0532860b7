"""Hyperparameter tuning using Optuna."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import numpy as np
import optuna

from ..composition.cross_validation import CrossValidatedLearner
from ..config import OutcomeType
from ..core.learner import ChainPolicy, Fit, Learner, Predictions, chain_predictions
from ..core.risk import LossFunction, default_loss, risk
from ..core.task import Task
from .estimator import SklearnLearner
from .registry import suggest_params, supported_outcome_types

logger = logging.getLogger(__name__)

# Suppress Optuna logging
optuna.logging.set_verbosity(optuna.logging.WARNING)


@dataclass(frozen=True)
class TuningResult:
    """Outcome of a tuning study.

    Attributes:
        best_fit: Best configuration trained on the full task.
        best_params: Hyperparameters of the best configuration.
        best_risk: Its cross-validated risk.
        trial_risks: Cross-validated risk of every completed trial.
    """

    best_fit: Fit
    best_params: dict[str, Any]
    best_risk: float
    trial_risks: list[float] = field(default_factory=list)


class TunedLearner(Learner):
    """A registry algorithm whose hyperparameters are tuned on the task.

    Each Optuna trial draws hyperparameters from the algorithm's search
    space and is scored by cross-validated risk on the task's folds. The
    best configuration is then trained on the full task.

    Args:
        algorithm: Registry algorithm name.
        n_trials: Number of Optuna trials.
        loss: Loss to minimize; defaults to one matching the outcome type.
        random_seed: Seed for the sampler and the estimators.
        chain: What chain() does with the predictions.
        name: Learner name; defaults to "tuned_<algorithm>".
    """

    def __init__(
        self,
        algorithm: str,
        n_trials: int = 20,
        loss: LossFunction | None = None,
        random_seed: int = 42,
        chain: ChainPolicy = ChainPolicy.PASSTHROUGH,
        name: str | None = None,
    ) -> None:
        if n_trials < 1:
            raise ValueError(f"n_trials must be >= 1, got {n_trials}")
        # Risk needs a numeric outcome
        self._outcome_types = supported_outcome_types(algorithm) - {OutcomeType.CATEGORICAL}
        super().__init__(name=name or f"tuned_{algorithm}", n_trials=n_trials)
        self._algorithm = algorithm
        self._n_trials = n_trials
        self._loss = loss
        self._random_seed = random_seed
        self._chain_policy = chain

    @property
    def outcome_types(self) -> frozenset[OutcomeType]:  # type: ignore[override]
        """Outcome types the tuned algorithm supports."""
        return self._outcome_types

    def _train(self, task: Task) -> TuningResult:
        loss = self._loss or default_loss(task.outcome_type)
        outcomes = task.numeric_outcome()

        def objective(trial: optuna.Trial) -> float:
            params = suggest_params(self._algorithm, trial, task.outcome_type)
            trial.set_user_attr("params", params)
            candidate = SklearnLearner(self._algorithm, random_seed=self._random_seed, **params)
            cv_fit = CrossValidatedLearner(candidate, full_fit=False).train(task)
            predictions = cv_fit.predict(task).to_numpy(dtype=np.float64)
            return risk(predictions, outcomes, loss, task.weights)

        study = optuna.create_study(
            direction="minimize",
            sampler=optuna.samplers.TPESampler(seed=self._random_seed),
        )
        study.optimize(
            objective,
            n_trials=self._n_trials,
            show_progress_bar=False,
            catch=(ValueError,),
        )

        completed = [t for t in study.trials if t.state == optuna.trial.TrialState.COMPLETE]
        if not completed:
            raise ValueError(f"all {self._n_trials} tuning trials of {self._algorithm} failed")

        best = study.best_trial
        best_params: dict[str, Any] = dict(best.user_attrs["params"])
        logger.info(
            f"Tuned {self._algorithm}: best risk {best.value:.6g} after {len(completed)} trials"
        )

        best_learner = SklearnLearner(
            self._algorithm, name=self.name, random_seed=self._random_seed, **best_params
        )
        return TuningResult(
            best_fit=best_learner.train(task),
            best_params=best_params,
            best_risk=float(best.value),
            trial_risks=[float(t.value) for t in completed],
        )

    def _predict(self, fit: Fit, task: Task) -> Predictions:
        result: TuningResult = fit.fit_object
        return result.best_fit.predict(task)

    def _chain(self, fit: Fit, task: Task) -> Task:
        return chain_predictions(fit, task, self._chain_policy)
