"""Estimator registry.

Provides a unified interface for creating estimators and their
hyperparameter search spaces for Optuna tuning.
"""

from __future__ import annotations

import inspect
from typing import Any

import optuna

from ..config import OutcomeType
from .boosting import BOOSTING_MODELS
from .sklearn_models import SKLEARN_MODELS

# Combine all estimator definitions
_ALL_MODELS: dict[str, dict[str, Any]] = {
    **SKLEARN_MODELS,
    **BOOSTING_MODELS,
}


def get_available_algorithms(outcome_type: OutcomeType | None = None) -> list[str]:
    """Get the registered algorithm names.

    Args:
        outcome_type: Only list algorithms supporting this outcome type.

    Returns:
        List of algorithm names.
    """
    return [
        name
        for name, config in _ALL_MODELS.items()
        if outcome_type is None or outcome_type.value in config["outcome_types"]
    ]


def supported_outcome_types(algorithm: str) -> frozenset[OutcomeType]:
    """Outcome types an algorithm can be trained on."""
    return frozenset(OutcomeType(v) for v in _get_config(algorithm)["outcome_types"])


def create_estimator(
    algorithm: str,
    outcome_type: OutcomeType,
    params: dict[str, Any] | None = None,
    trial: optuna.Trial | None = None,
    random_seed: int = 42,
    n_jobs: int = 1,
) -> Any:
    """Create an estimator instance.

    Args:
        algorithm: Algorithm name (e.g., "glm", "random_forest").
        outcome_type: Outcome type of the task it will be trained on.
        params: Hyperparameters overriding the defaults.
        trial: Optional Optuna trial for hyperparameter suggestions.
        random_seed: Random seed for reproducibility.
        n_jobs: Number of parallel jobs used inside the estimator.

    Returns:
        Configured, unfitted estimator.

    Raises:
        ValueError: If the algorithm is unknown or does not support the outcome type.
    """
    config = _get_config(algorithm)

    if outcome_type.value not in config["outcome_types"]:
        raise ValueError(
            f"Algorithm '{algorithm}' does not support {outcome_type.value} outcomes. "
            f"Supported: {config['outcome_types']}"
        )

    estimator_class = config[outcome_type.value]

    if trial is not None:
        merged = config["suggest_params"](trial, outcome_type)
    else:
        merged = config.get("default_params", {}).copy()
    merged.update(params or {})

    accepted, open_kwargs = _get_model_params(estimator_class)
    if "random_state" in accepted or open_kwargs:
        merged["random_state"] = random_seed
    if "n_jobs" in accepted or open_kwargs:
        merged["n_jobs"] = n_jobs
    if "seed" in accepted:
        merged["seed"] = random_seed

    if open_kwargs:
        return estimator_class(**merged)
    # Defaults are shared across outcome types; keep only what this class accepts
    return estimator_class(**{k: v for k, v in merged.items() if k in accepted})


def suggest_params(
    algorithm: str, trial: optuna.Trial, outcome_type: OutcomeType
) -> dict[str, Any]:
    """Suggest hyperparameters for an algorithm from an Optuna trial."""
    return dict(_get_config(algorithm)["suggest_params"](trial, outcome_type))


def get_default_params(algorithm: str) -> dict[str, Any]:
    """Get default parameters for an algorithm.

    Args:
        algorithm: Algorithm name.

    Returns:
        Dictionary of default parameters.
    """
    if algorithm not in _ALL_MODELS:
        return {}
    return _ALL_MODELS[algorithm].get("default_params", {}).copy()


def _get_config(algorithm: str) -> dict[str, Any]:
    if algorithm not in _ALL_MODELS:
        available = list(_ALL_MODELS.keys())
        raise ValueError(f"Unknown algorithm '{algorithm}'. Available: {available}")
    return _ALL_MODELS[algorithm]


def _get_model_params(model_class: type) -> tuple[set[str], bool]:
    """Get parameter names accepted by an estimator class, and whether it takes **kwargs."""
    try:
        sig = inspect.signature(model_class.__init__)
    except (ValueError, TypeError):
        return set(), True
    open_kwargs = any(p.kind == inspect.Parameter.VAR_KEYWORD for p in sig.parameters.values())
    return set(sig.parameters.keys()) - {"self"}, open_kwargs
