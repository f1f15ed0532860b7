"""Super Learner: cross-validated stacking of learners.

This module provides the SuperLearner orchestrator and the stages it
executes during training.
"""

from __future__ import annotations

from .context import SuperLearnerContext, SuperLearnerStage
from .stages import (
    DEFAULT_STAGES,
    CrossValidationStage,
    MetaLearnerStage,
    RefitStage,
    RiskStage,
    ValidationStage,
)
from .super_learner import (
    StackedEnsemble,
    SuperLearner,
    SuperLearnerBuilder,
    SuperLearnerFit,
)

__all__ = [
    # Main orchestrator
    "SuperLearner",
    "SuperLearnerBuilder",
    "SuperLearnerFit",
    "StackedEnsemble",
    # Stages
    "SuperLearnerContext",
    "SuperLearnerStage",
    "ValidationStage",
    "CrossValidationStage",
    "MetaLearnerStage",
    "RefitStage",
    "RiskStage",
    "DEFAULT_STAGES",
]
