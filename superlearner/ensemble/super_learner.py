"""Super Learner orchestrator.

This module provides the SuperLearner class, which trains a stack of
learners with cross-validation, learns how to combine their out-of-fold
predictions with a meta-learner, and refits the stack for production use.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import pandas as pd

from ..composition import Pipeline
from ..config import OutcomeType, SuperLearnerConfig
from ..core.learner import ChainPolicy, Fit, Learner, Predictions, chain_predictions
from ..core.task import Task
from ..learners import create_learner
from ..meta import create_meta_learner
from ..progress import (
    CallbackProgressReporter,
    LoggingProgressReporter,
    ProgressCallback,
    ProgressReporter,
    ProgressUpdate,
    TrainingStage,
)
from .context import SuperLearnerContext
from .stages import DEFAULT_STAGES

if TYPE_CHECKING:
    from typing import Self

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class SuperLearnerFit:
    """Trained state of a Super Learner.

    Attributes:
        stack_fit: Stack of learners refit on the full task.
        meta_fit: Meta-learner trained on the out-of-fold predictions.
        cv_fit: Cross-validated stack that produced the out-of-fold predictions.
        production: Pipeline of stack_fit then meta_fit, used for prediction.
        risk: Cross-validated risk of each learner, if computed.
        coefficients: Meta-learner coefficient of each learner, if it has any.
        training_time_seconds: Wall-clock training time.
        warnings: Degraded conditions noticed during training.
    """

    stack_fit: Fit
    meta_fit: Fit
    cv_fit: Fit
    production: Fit
    risk: pd.DataFrame | None = None
    coefficients: dict[str, float] = field(default_factory=dict)
    training_time_seconds: float = 0.0
    warnings: list[str] = field(default_factory=list)


class SuperLearner(Learner):
    """Cross-validated ensemble of learners combined by a meta-learner.

    Training executes a sequence of stages:
    1. ValidationStage - Checks outcome type and folds
    2. CrossValidationStage - Out-of-fold predictions of the stack
    3. MetaLearnerStage - Meta-learner trained on those predictions
    4. RefitStage - Stack refit on the full task
    5. RiskStage - Cross-validated risk table

    A SuperLearner is itself a Learner, so it can be stacked, chained and
    cross-validated like any other.

    Usage:
        fit = SuperLearner.builder() \\
            .learners(["glm", "random_forest"]) \\
            .meta_learner("nnls") \\
            .on_progress(lambda u: print(u.message)) \\
            .build() \\
            .train(task)
        predictions = fit.predict(new_task)
    """

    requires_numeric = False
    default_name = "super_learner"

    def __init__(
        self,
        learners: Sequence[Learner | str],
        meta_learner: Learner | str | None = None,
        config: SuperLearnerConfig | None = None,
        progress_callback: ProgressCallback | None = None,
        chain: ChainPolicy = ChainPolicy.PASSTHROUGH,
        name: str | None = None,
    ) -> None:
        """Initialize a Super Learner.

        Use SuperLearner.builder() for a fluent interface.

        Args:
            learners: Stack members, or names accepted by create_learner.
            meta_learner: Meta-learner or its name; defaults to config.meta_learner.
            config: Training configuration.
            progress_callback: Called with a ProgressUpdate at each stage.
            chain: What chain() does with the predictions.
            name: Learner name.
        """
        if not learners:
            raise ValueError("SuperLearner needs at least one learner")
        super().__init__(name=name)
        self._config = config or SuperLearnerConfig()
        self._learners: tuple[Learner, ...] = tuple(
            create_learner(learner) if isinstance(learner, str) else learner
            for learner in learners
        )
        if meta_learner is None:
            meta_learner = self._config.meta_learner
        self._meta_learner: Learner = (
            create_meta_learner(meta_learner) if isinstance(meta_learner, str) else meta_learner
        )
        self._progress_callback = progress_callback
        self._reporter: ProgressReporter = (
            CallbackProgressReporter(progress_callback)
            if progress_callback
            else LoggingProgressReporter()
        )
        self._chain_policy = chain
        self._stages = [stage() for stage in DEFAULT_STAGES]

    @classmethod
    def builder(cls) -> SuperLearnerBuilder:
        """Create a builder for SuperLearner."""
        return SuperLearnerBuilder()

    @property
    def learners(self) -> tuple[Learner, ...]:
        """Stack members."""
        return self._learners

    @property
    def meta_learner(self) -> Learner:
        """Learner combining the members' predictions."""
        return self._meta_learner

    @property
    def config(self) -> SuperLearnerConfig:
        """Training configuration."""
        return self._config

    @property
    def outcome_types(self) -> frozenset[OutcomeType]:  # type: ignore[override]
        """Outcome types supported by the meta-learner."""
        return self._meta_learner.outcome_types

    def _train(self, task: Task) -> SuperLearnerFit:
        """Run the training stages.

        Raises:
            InvalidTaskError: If a learner or the meta-learner cannot use the task.
            FoldCoverageError: If the task's folds do not partition its rows.
        """
        start_time = time.time()

        try:
            self._report(TrainingStage.INITIALIZING, 0.0, "Initializing Super Learner...")
            logger.info(
                f"Training {self.name}: {len(self._learners)} learners, "
                f"meta-learner {self._meta_learner.name}, {len(task.folds)} folds"
            )

            context = SuperLearnerContext(
                config=self._config,
                reporter=self._reporter,
                task=task,
                learners=self._learners,
                meta_learner=self._meta_learner,
                start_time=start_time,
            )

            # Execute each stage
            for stage in self._stages:
                context = stage.execute(context)

            training_time = time.time() - start_time
            self._report(TrainingStage.COMPLETE, 1.0, "Training complete!")
            return self._build_result(context, training_time)

        except Exception as e:
            self._report(TrainingStage.FAILED, 0.0, f"Training failed: {e}")
            raise

    def _build_result(self, context: SuperLearnerContext, training_time: float) -> SuperLearnerFit:
        """Build the SuperLearnerFit from a completed context."""
        assert context.stack_fit is not None
        assert context.meta_fit is not None
        assert context.cv_fit is not None

        production = Pipeline(context.stack_fit, context.meta_fit).train(context.task)
        return SuperLearnerFit(
            stack_fit=context.stack_fit,
            meta_fit=context.meta_fit,
            cv_fit=context.cv_fit,
            production=production,
            risk=context.risk,
            coefficients=context.coefficients,
            training_time_seconds=training_time,
            warnings=context.warnings,
        )

    def _predict(self, fit: Fit, task: Task) -> Predictions:
        state: SuperLearnerFit = fit.fit_object
        return state.production.predict(task)

    def _chain(self, fit: Fit, task: Task) -> Task:
        return chain_predictions(fit, task, self._chain_policy)

    def _report(self, stage: TrainingStage, progress: float, message: str) -> None:
        """Report progress."""
        self._reporter.report(
            ProgressUpdate(
                stage=stage,
                progress=progress,
                message=message,
            )
        )

    def __getstate__(self) -> dict[str, object]:
        # Callbacks may be closures and are not pickled
        state = self.__dict__.copy()
        state["_progress_callback"] = None
        state["_reporter"] = LoggingProgressReporter()
        return state


# Alias used in the stacking literature
StackedEnsemble = SuperLearner


class SuperLearnerBuilder:
    """Builder for SuperLearner with fluent interface."""

    def __init__(self) -> None:
        self._learners: list[Learner | str] = []
        self._meta_learner: Learner | str | None = None
        self._config: SuperLearnerConfig | None = None
        self._progress_callback: ProgressCallback | None = None
        self._name: str | None = None

    def learners(self, learners: Sequence[Learner | str]) -> Self:
        """Set the stack members."""
        self._learners = list(learners)
        return self

    def meta_learner(self, meta_learner: Learner | str) -> Self:
        """Set the meta-learner."""
        self._meta_learner = meta_learner
        return self

    def config(self, config: SuperLearnerConfig) -> Self:
        """Set the training configuration."""
        self._config = config
        return self

    def on_progress(self, callback: ProgressCallback) -> Self:
        """Set the progress callback."""
        self._progress_callback = callback
        return self

    def name(self, name: str) -> Self:
        """Set the learner name."""
        self._name = name
        return self

    def build(self) -> SuperLearner:
        """Build the SuperLearner."""
        if not self._learners:
            raise ValueError("learners are required")

        return SuperLearner(
            learners=self._learners,
            meta_learner=self._meta_learner,
            config=self._config,
            progress_callback=self._progress_callback,
            name=self._name,
        )
