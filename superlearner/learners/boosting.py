"""Gradient boosting libraries as optional registry entries.

XGBoost and LightGBM are only registered when they can be imported; install
the `boosting` extra to get them.
"""

from __future__ import annotations

from typing import Any

import optuna

from ..config import OutcomeType

try:
    import xgboost as xgb
except ImportError:
    xgb = None  # type: ignore[assignment]

try:
    import lightgbm as lgb
except ImportError:
    lgb = None  # type: ignore[assignment]


def _suggest_xgboost(trial: optuna.Trial, outcome_type: OutcomeType) -> dict[str, Any]:
    """Search space for XGBoost.

    Args:
        trial: Optuna trial drawing the values.
        outcome_type: Outcome type of the task being tuned; picks the eval metric.

    Returns:
        Estimator keyword arguments.
    """
    return {
        "n_estimators": trial.suggest_int("n_estimators", 50, 500, step=50),
        "learning_rate": trial.suggest_float("learning_rate", 0.005, 0.3, log=True),
        "max_depth": trial.suggest_int("max_depth", 2, 8),
        "min_child_weight": trial.suggest_float("min_child_weight", 0.5, 20.0, log=True),
        "subsample": trial.suggest_float("subsample", 0.5, 1.0),
        "colsample_bytree": trial.suggest_float("colsample_bytree", 0.5, 1.0),
        "reg_alpha": trial.suggest_float("reg_alpha", 1e-8, 1.0, log=True),
        "reg_lambda": trial.suggest_float("reg_lambda", 1e-8, 10.0, log=True),
        "eval_metric": "rmse" if outcome_type == OutcomeType.CONTINUOUS else "logloss",
        "verbosity": 0,
    }


def _suggest_lightgbm(trial: optuna.Trial, _: OutcomeType) -> dict[str, Any]:
    return {
        "n_estimators": trial.suggest_int("n_estimators", 50, 500, step=50),
        "learning_rate": trial.suggest_float("learning_rate", 0.005, 0.3, log=True),
        "num_leaves": trial.suggest_int("num_leaves", 8, 128, log=True),
        "min_child_samples": trial.suggest_int("min_child_samples", 5, 50),
        "subsample": trial.suggest_float("subsample", 0.5, 1.0),
        "subsample_freq": 1,
        "colsample_bytree": trial.suggest_float("colsample_bytree", 0.5, 1.0),
        "verbose": -1,
    }


def _entry(
    regressor: type, classifier: type, suggest: Any, defaults: dict[str, Any]
) -> dict[str, Any]:
    """Registry entry serving every outcome type with one regressor/classifier pair."""
    return {
        "outcome_types": [t.value for t in OutcomeType],
        OutcomeType.CONTINUOUS.value: regressor,
        OutcomeType.BINARY.value: classifier,
        OutcomeType.CATEGORICAL.value: classifier,
        "suggest_params": suggest,
        "default_params": defaults,
    }


BOOSTING_MODELS: dict[str, dict[str, Any]] = {}

if xgb is not None:
    BOOSTING_MODELS["xgboost"] = _entry(
        xgb.XGBRegressor,
        xgb.XGBClassifier,
        _suggest_xgboost,
        {"n_estimators": 200, "learning_rate": 0.05, "max_depth": 4, "verbosity": 0},
    )

if lgb is not None:
    BOOSTING_MODELS["lightgbm"] = _entry(
        lgb.LGBMRegressor,
        lgb.LGBMClassifier,
        _suggest_lightgbm,
        {"n_estimators": 200, "learning_rate": 0.05, "verbose": -1},
    )
