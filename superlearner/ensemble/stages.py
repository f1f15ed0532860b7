"""Training stages implementing the SuperLearnerStage protocol.

Each stage is a single-responsibility class operating on the
SuperLearnerContext, performing one step of Super Learner training.
"""

from __future__ import annotations

import logging

from ..composition import CrossValidatedLearner, Stack
from ..core.folds import validate_folds
from ..core.risk import cv_risk
from ..errors import InvalidTaskError
from ..meta import MetaLearner
from ..progress import ProgressUpdate, TrainingStage
from .context import SuperLearnerContext

logger = logging.getLogger(__name__)


class ValidationStage:
    """Checks that the task can be used by every learner and the meta-learner.

    Checks for:
    - Outcome type supported by the meta-learner and every stack member
    - Folds partitioning the task's rows
    """

    def execute(self, context: SuperLearnerContext) -> SuperLearnerContext:
        """Execute validation stage."""
        context.reporter.report(
            ProgressUpdate(
                stage=TrainingStage.VALIDATING,
                progress=0.05,
                message="Validating task...",
                learners=len(context.learners),
            )
        )

        task = context.task
        outcome_type = task.outcome_type
        if outcome_type not in context.meta_learner.outcome_types:
            raise InvalidTaskError(
                f"meta-learner '{context.meta_learner.name}' does not support "
                f"{outcome_type.value} outcomes"
            )

        unsupported = [
            learner.name
            for learner in context.learners
            if outcome_type not in learner.outcome_types
        ]
        if unsupported:
            raise InvalidTaskError(
                f"learners {unsupported} do not support {outcome_type.value} outcomes"
            )

        validate_folds(task.folds, task.n_rows)
        return context


class CrossValidationStage:
    """Trains the stack within each fold to get out-of-fold predictions.

    Sets on context: stack, cv_fit, oof_task
    """

    def execute(self, context: SuperLearnerContext) -> SuperLearnerContext:
        """Execute cross-validation stage."""
        task = context.task
        context.reporter.report(
            ProgressUpdate(
                stage=TrainingStage.CROSS_VALIDATING,
                progress=0.10,
                message=(
                    f"Cross-validating {len(context.learners)} learners "
                    f"over {len(task.folds)} folds..."
                ),
                learners=len(context.learners),
            )
        )

        # Folds run in parallel, so members within a fold run serially
        cv_stack = Stack(*context.learners, n_jobs=1)
        cv_learner = CrossValidatedLearner(
            cv_stack, full_fit=False, n_jobs=context.config.n_jobs
        )
        cv_fit = cv_learner.train(task)

        context.stack = Stack(*context.learners, n_jobs=context.config.n_jobs)
        context.cv_fit = cv_fit
        context.oof_task = cv_fit.chain(task)
        logger.info(
            f"Out-of-fold predictions ready: {list(context.oof_task.covariate_names)}"
        )
        return context


class MetaLearnerStage:
    """Trains the meta-learner on the out-of-fold predictions.

    Sets on context: meta_fit, coefficients
    """

    def execute(self, context: SuperLearnerContext) -> SuperLearnerContext:
        """Execute meta-learner stage."""
        context.reporter.report(
            ProgressUpdate(
                stage=TrainingStage.META_TRAINING,
                progress=0.60,
                message=f"Training meta-learner {context.meta_learner.name}...",
            )
        )

        if context.oof_task is None:
            raise InvalidTaskError("cross-validation stage must run before the meta-learner")

        meta_fit = context.meta_learner.train(context.oof_task)
        context.meta_fit = meta_fit

        if isinstance(context.meta_learner, MetaLearner):
            context.coefficients = context.meta_learner.coefficients(meta_fit)
            logger.info(f"Meta-learner coefficients: {context.coefficients}")
            if all(v == 0 for v in context.coefficients.values()):
                context.warnings.append("All meta-learner coefficients are zero")

        return context


class RefitStage:
    """Refits the stack on the full task for production predictions.

    Sets on context: stack_fit
    """

    def execute(self, context: SuperLearnerContext) -> SuperLearnerContext:
        """Execute refit stage."""
        context.reporter.report(
            ProgressUpdate(
                stage=TrainingStage.REFITTING,
                progress=0.70,
                message="Refitting learners on the full task...",
                learners=len(context.learners),
            )
        )

        if context.stack is None:
            raise InvalidTaskError("cross-validation stage must run before the refit")

        context.stack_fit = context.stack.train(context.task)
        return context


class RiskStage:
    """Computes the cross-validated risk of every stack member.

    Skipped when the configuration disables it.

    Sets on context: risk
    """

    def execute(self, context: SuperLearnerContext) -> SuperLearnerContext:
        """Execute risk stage."""
        if not context.config.compute_risk or context.cv_fit is None:
            return context

        context.reporter.report(
            ProgressUpdate(
                stage=TrainingStage.RISK,
                progress=0.90,
                message="Computing cross-validated risk...",
            )
        )

        context.risk = cv_risk(
            context.cv_fit,
            loss=context.config.loss,
            coefficients=context.coefficients,
        )
        best = context.risk.sort_values("risk").iloc[0]
        logger.info(f"Lowest cross-validated risk: {best['learner']} ({best['risk']:.6g})")
        return context


DEFAULT_STAGES = (
    ValidationStage,
    CrossValidationStage,
    MetaLearnerStage,
    RefitStage,
    RiskStage,
)
