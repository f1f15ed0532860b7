"""Concrete learners and the learner factory."""

from __future__ import annotations

from typing import Any

from ..config import OutcomeType
from ..core.learner import Learner
from .baseline import MeanLearner
from .estimator import SklearnLearner
from .preprocessing import EncodingLearner
from .registry import (
    create_estimator,
    get_available_algorithms,
    get_default_params,
    suggest_params,
    supported_outcome_types,
)
from .screening import CorrelationScreener
from .tuning import TunedLearner, TuningResult

# Learners that are not backed by a registry algorithm
_SPECIAL_LEARNERS: dict[str, type[Learner]] = {
    "mean": MeanLearner,
    "screen_corr": CorrelationScreener,
    "encode": EncodingLearner,
}


def create_learner(name: str, **params: Any) -> Learner:
    """Create a learner by name.

    Args:
        name: "mean", "screen_corr", "encode", a registry algorithm name
            (e.g. "glm", "random_forest"), or "tuned_<algorithm>".
        **params: Constructor arguments for the learner.

    Returns:
        A new, untrained learner.

    Raises:
        ValueError: If the name is unknown.
    """
    if name in _SPECIAL_LEARNERS:
        return _SPECIAL_LEARNERS[name](**params)
    if name.startswith("tuned_"):
        return TunedLearner(name.removeprefix("tuned_"), **params)
    if name in get_available_algorithms():
        return SklearnLearner(name, **params)
    raise ValueError(f"Unknown learner '{name}'. Available: {get_available_learners()}")


def get_available_learners(outcome_type: OutcomeType | None = None) -> list[str]:
    """Get the learner names accepted by create_learner.

    Args:
        outcome_type: Only list learners supporting this outcome type.

    Returns:
        List of learner names.
    """
    names = [
        name
        for name, cls in _SPECIAL_LEARNERS.items()
        if outcome_type is None or outcome_type in cls.outcome_types
    ]
    return names + get_available_algorithms(outcome_type)


__all__ = [
    "MeanLearner",
    "SklearnLearner",
    "EncodingLearner",
    "CorrelationScreener",
    "TunedLearner",
    "TuningResult",
    "create_learner",
    "get_available_learners",
    "create_estimator",
    "get_available_algorithms",
    "get_default_params",
    "suggest_params",
    "supported_outcome_types",
]
