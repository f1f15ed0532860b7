"""Scikit-learn algorithms available as registry learners.

Every entry maps outcome type values to the estimator class used for that
outcome, plus default hyperparameters and an Optuna search space. Defaults
favour fast members, since a Super Learner trains each one once per fold.
"""

from __future__ import annotations

from typing import Any

import optuna
from sklearn.ensemble import (
    ExtraTreesClassifier,
    ExtraTreesRegressor,
    GradientBoostingClassifier,
    GradientBoostingRegressor,
    RandomForestClassifier,
    RandomForestRegressor,
)
from sklearn.linear_model import Lasso, LinearRegression, LogisticRegression, Ridge
from sklearn.neighbors import KNeighborsClassifier, KNeighborsRegressor
from sklearn.svm import SVC, SVR
from sklearn.tree import DecisionTreeClassifier, DecisionTreeRegressor

from ..config import OutcomeType

_ALL_OUTCOMES = [t.value for t in OutcomeType]


def _suggest_glm(trial: optuna.Trial, outcome_type: OutcomeType) -> dict[str, Any]:
    # Ordinary least squares has nothing to tune
    if outcome_type == OutcomeType.CONTINUOUS:
        return {}
    return {"C": trial.suggest_float("C", 1e-3, 1e3, log=True), "max_iter": 2000}


def _suggest_penalty(trial: optuna.Trial, _: OutcomeType) -> dict[str, Any]:
    return {"alpha": trial.suggest_float("alpha", 1e-4, 1e2, log=True)}


def _suggest_decision_tree(trial: optuna.Trial, _: OutcomeType) -> dict[str, Any]:
    return {
        "max_depth": trial.suggest_int("max_depth", 1, 12),
        "min_samples_leaf": trial.suggest_int("min_samples_leaf", 1, 25, log=True),
        "ccp_alpha": trial.suggest_float("ccp_alpha", 1e-6, 1e-1, log=True),
    }


def _suggest_forest(trial: optuna.Trial, _: OutcomeType) -> dict[str, Any]:
    """Shared space for random forests and extra trees."""
    return {
        "n_estimators": trial.suggest_int("n_estimators", 100, 500, step=100),
        "max_features": trial.suggest_float("max_features", 0.2, 1.0),
        "min_samples_leaf": trial.suggest_int("min_samples_leaf", 1, 20, log=True),
    }


def _suggest_gradient_boosting(trial: optuna.Trial, _: OutcomeType) -> dict[str, Any]:
    return {
        "n_estimators": trial.suggest_int("n_estimators", 50, 400, step=50),
        "learning_rate": trial.suggest_float("learning_rate", 0.01, 0.2, log=True),
        "max_depth": trial.suggest_int("max_depth", 1, 5),
        "subsample": trial.suggest_float("subsample", 0.5, 1.0),
    }


def _suggest_knn(trial: optuna.Trial, _: OutcomeType) -> dict[str, Any]:
    return {
        "n_neighbors": trial.suggest_int("n_neighbors", 2, 50, log=True),
        "weights": trial.suggest_categorical("weights", ["uniform", "distance"]),
        "p": trial.suggest_categorical("p", [1, 2]),
    }


def _suggest_svm(trial: optuna.Trial, outcome_type: OutcomeType) -> dict[str, Any]:
    params: dict[str, Any] = {
        "C": trial.suggest_float("C", 1e-2, 1e2, log=True),
        "gamma": trial.suggest_float("gamma", 1e-4, 1.0, log=True),
    }
    if outcome_type != OutcomeType.CONTINUOUS:
        params["probability"] = True
    return params


def _per_outcome(regressor: type, classifier: type) -> dict[str, type]:
    return {
        OutcomeType.CONTINUOUS.value: regressor,
        OutcomeType.BINARY.value: classifier,
        OutcomeType.CATEGORICAL.value: classifier,
    }


SKLEARN_MODELS: dict[str, dict[str, Any]] = {
    "glm": {
        "outcome_types": _ALL_OUTCOMES,
        **_per_outcome(LinearRegression, LogisticRegression),
        "suggest_params": _suggest_glm,
        "default_params": {"max_iter": 2000},
    },
    "ridge": {
        "outcome_types": [OutcomeType.CONTINUOUS.value],
        OutcomeType.CONTINUOUS.value: Ridge,
        "suggest_params": _suggest_penalty,
        "default_params": {"alpha": 1.0},
    },
    "lasso": {
        "outcome_types": [OutcomeType.CONTINUOUS.value],
        OutcomeType.CONTINUOUS.value: Lasso,
        "suggest_params": _suggest_penalty,
        "default_params": {"alpha": 0.01, "max_iter": 5000},
    },
    "decision_tree": {
        "outcome_types": _ALL_OUTCOMES,
        **_per_outcome(DecisionTreeRegressor, DecisionTreeClassifier),
        "suggest_params": _suggest_decision_tree,
        "default_params": {"max_depth": 6, "min_samples_leaf": 5},
    },
    "random_forest": {
        "outcome_types": _ALL_OUTCOMES,
        **_per_outcome(RandomForestRegressor, RandomForestClassifier),
        "suggest_params": _suggest_forest,
        "default_params": {"n_estimators": 200, "min_samples_leaf": 5},
    },
    "extra_trees": {
        "outcome_types": _ALL_OUTCOMES,
        **_per_outcome(ExtraTreesRegressor, ExtraTreesClassifier),
        "suggest_params": _suggest_forest,
        "default_params": {"n_estimators": 200, "min_samples_leaf": 5},
    },
    "gradient_boosting": {
        "outcome_types": _ALL_OUTCOMES,
        **_per_outcome(GradientBoostingRegressor, GradientBoostingClassifier),
        "suggest_params": _suggest_gradient_boosting,
        "default_params": {"n_estimators": 150, "learning_rate": 0.05, "max_depth": 3},
    },
    "knn": {
        "outcome_types": _ALL_OUTCOMES,
        **_per_outcome(KNeighborsRegressor, KNeighborsClassifier),
        "suggest_params": _suggest_knn,
        "default_params": {"n_neighbors": 10, "weights": "distance"},
    },
    "svm": {
        "outcome_types": _ALL_OUTCOMES,
        **_per_outcome(SVR, SVC),
        "suggest_params": _suggest_svm,
        # probability is dropped for SVR, which does not accept it
        "default_params": {"C": 1.0, "gamma": "scale", "probability": True},
    },
}
