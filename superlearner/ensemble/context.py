"""Context and stage protocol for Super Learner training.

The SuperLearnerContext flows through the training stages; each stage
reads what earlier stages produced and records its own results on it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

import pandas as pd

if TYPE_CHECKING:
    from ..composition import Stack
    from ..config import SuperLearnerConfig
    from ..core.learner import Fit, Learner
    from ..core.task import Task
    from ..progress import ProgressReporter


@dataclass
class SuperLearnerContext:
    """State shared by the Super Learner training stages."""

    # Inputs (always present)
    config: SuperLearnerConfig
    reporter: ProgressReporter
    task: Task
    learners: tuple[Learner, ...]
    meta_learner: Learner

    # Set by the cross-validation stage
    stack: Stack | None = None
    cv_fit: Fit | None = None
    oof_task: Task | None = None

    # Set by the meta-learner stage
    meta_fit: Fit | None = None
    coefficients: dict[str, float] = field(default_factory=dict)

    # Set by the refit stage
    stack_fit: Fit | None = None

    # Set by the risk stage
    risk: pd.DataFrame | None = None

    # Warnings accumulated during training
    warnings: list[str] = field(default_factory=list)

    # Training start time for calculating total duration
    start_time: float = 0.0


class SuperLearnerStage(Protocol):
    """Protocol for Super Learner training stages.

    Each stage takes a SuperLearnerContext, performs its work, and returns
    the (possibly modified) context.
    """

    def execute(self, context: SuperLearnerContext) -> SuperLearnerContext:
        """Execute the stage.

        Args:
            context: The current training context.

        Returns:
            The updated context.
        """
        ...
