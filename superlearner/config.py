"""Configuration dataclasses for superlearner."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

import pandas as pd

if TYPE_CHECKING:
    from typing import Self

    from .core.risk import LossFunction

# Integer outcomes with at most this many distinct values are treated as categorical
MAX_CATEGORICAL_LEVELS = 10


class OutcomeType(Enum):
    """Type of outcome a task predicts."""

    CONTINUOUS = "continuous"
    BINARY = "binary"
    CATEGORICAL = "categorical"

    @classmethod
    def infer(cls, outcome: pd.Series) -> OutcomeType:
        """Guess the outcome type from the outcome values."""
        n_unique = outcome.nunique(dropna=True)
        if n_unique == 2:
            return cls.BINARY
        if not pd.api.types.is_numeric_dtype(outcome) or pd.api.types.is_bool_dtype(outcome):
            return cls.CATEGORICAL
        if pd.api.types.is_integer_dtype(outcome) and n_unique <= MAX_CATEGORICAL_LEVELS:
            return cls.CATEGORICAL
        return cls.CONTINUOUS


class FoldKind(Enum):
    """How rows are assigned to cross-validation folds."""

    VFOLD = "vfold"
    STRATIFIED = "stratified"
    CLUSTER = "cluster"


@dataclass(frozen=True)
class FoldScheme:
    """Recipe for generating cross-validation folds.

    Attributes:
        kind: Fold assignment strategy.
        n_folds: Number of folds (V).
        shuffle: Whether rows are shuffled before assignment.
        random_seed: Seed for the shuffle; folds are reproducible for a given seed.
    """

    kind: FoldKind = FoldKind.VFOLD
    n_folds: int = 10
    shuffle: bool = True
    random_seed: int = 42

    def __post_init__(self) -> None:
        if self.n_folds < 2:
            raise ValueError("n_folds must be at least 2")


@dataclass
class SuperLearnerConfig:
    """Configuration for Super Learner training.

    Attributes:
        n_jobs: Number of parallel workers for stack members and folds (-1 for all cores).
        meta_learner: Name of the meta-learner used when none is given explicitly.
        compute_risk: Whether to compute the cross-validated risk table.
        loss: Loss used for risk; defaults to one matching the outcome type.
    """

    n_jobs: int = 1
    meta_learner: str = "nnls"
    compute_risk: bool = True
    loss: LossFunction | None = None

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.n_jobs == 0:
            raise ValueError("n_jobs must be non-zero")
        if not self.meta_learner:
            raise ValueError("meta_learner must be a non-empty name")

    @classmethod
    def builder(cls) -> SuperLearnerConfigBuilder:
        """Create a builder for SuperLearnerConfig."""
        return SuperLearnerConfigBuilder()


class SuperLearnerConfigBuilder:
    """Builder for SuperLearnerConfig with fluent interface."""

    def __init__(self) -> None:
        self._n_jobs: int = 1
        self._meta_learner: str = "nnls"
        self._compute_risk: bool = True
        self._loss: LossFunction | None = None

    def n_jobs(self, value: int) -> Self:
        """Set the number of parallel workers."""
        self._n_jobs = value
        return self

    def meta_learner(self, value: str) -> Self:
        """Set the default meta-learner name."""
        self._meta_learner = value
        return self

    def compute_risk(self, value: bool) -> Self:
        """Enable or disable the cross-validated risk table."""
        self._compute_risk = value
        return self

    def loss(self, value: LossFunction) -> Self:
        """Set the loss function used for risk."""
        self._loss = value
        return self

    def build(self) -> SuperLearnerConfig:
        """Build the SuperLearnerConfig."""
        return SuperLearnerConfig(
            n_jobs=self._n_jobs,
            meta_learner=self._meta_learner,
            compute_risk=self._compute_risk,
            loss=self._loss,
        )
