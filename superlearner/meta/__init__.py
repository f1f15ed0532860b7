"""Meta-learners that combine a stack's predictions."""

from __future__ import annotations

from typing import Any

from .base import Combination, MetaLearner
from .linear import LinearMetaLearner
from .nnls import NNLSMetaLearner
from .selector import SelectorMetaLearner

_META_LEARNERS: dict[str, type[MetaLearner]] = {
    "nnls": NNLSMetaLearner,
    "linear": LinearMetaLearner,
    "selector": SelectorMetaLearner,
}


def create_meta_learner(name: str, **params: Any) -> MetaLearner:
    """Create a meta-learner by name.

    Args:
        name: "nnls", "linear" or "selector".
        **params: Constructor arguments.

    Raises:
        ValueError: If the name is unknown.
    """
    if name not in _META_LEARNERS:
        raise ValueError(f"Unknown meta-learner '{name}'. Available: {list(_META_LEARNERS)}")
    return _META_LEARNERS[name](**params)


__all__ = [
    "MetaLearner",
    "Combination",
    "NNLSMetaLearner",
    "LinearMetaLearner",
    "SelectorMetaLearner",
    "create_meta_learner",
]
