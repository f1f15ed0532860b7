"""superlearner: composable learners and cross-validated ensembles.

This library provides learners that train on a Task and return immutable
Fits, ways to compose them (pipelines, stacks, cross-validation), and the
Super Learner, which combines a stack's out-of-fold predictions with a
meta-learner.

Example usage:
    from superlearner import SuperLearner, SklearnLearner, Task

    task = Task.create(dataframe, covariates=["x1", "x2", "x3"], outcome="y")

    fit = SuperLearner.builder() \\
        .learners([SklearnLearner("glm"), SklearnLearner("random_forest")]) \\
        .meta_learner("nnls") \\
        .on_progress(lambda u: print(f"{u.progress:.0%} - {u.message}")) \\
        .build() \\
        .train(task)

    predictions = fit.predict(task.like(new_dataframe))

    # Save and reload
    save_fit(fit, "fit.pkl")
    fit = load_fit("fit.pkl")
"""

from __future__ import annotations

# Composition
from .composition import CrossValidatedFit, CrossValidatedLearner, Pipeline, Stack

# Configuration
from .config import (
    FoldKind,
    FoldScheme,
    OutcomeType,
    SuperLearnerConfig,
    SuperLearnerConfigBuilder,
)

# Core types
from .core import (
    ChainPolicy,
    Fit,
    Fold,
    Learner,
    Predictions,
    Task,
    absolute_error,
    binomial_log_likelihood,
    cv_risk,
    default_loss,
    make_folds,
    risk,
    squared_error,
    validate_folds,
)

# Super Learner
from .ensemble import StackedEnsemble, SuperLearner, SuperLearnerBuilder, SuperLearnerFit

# Errors
from .errors import (
    ChainError,
    DataError,
    DimensionMismatchError,
    FitNotFoundError,
    FoldCoverageError,
    InvalidTaskError,
    NotTrainedError,
    SchemaMismatchError,
    SuperLearnerError,
)

# Learners
from .learners import (
    CorrelationScreener,
    EncodingLearner,
    MeanLearner,
    SklearnLearner,
    TunedLearner,
    create_learner,
    get_available_learners,
)

# Meta-learners
from .meta import (
    LinearMetaLearner,
    MetaLearner,
    NNLSMetaLearner,
    SelectorMetaLearner,
    create_meta_learner,
)

# Persistence
from .persistence import FitArtifact, load_artifact, load_fit, save_fit

# Progress
from .progress import (
    CallbackProgressReporter,
    LoggingProgressReporter,
    NullProgressReporter,
    ProgressCallback,
    ProgressReporter,
    ProgressUpdate,
    TrainingStage,
)

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Configuration
    "OutcomeType",
    "FoldKind",
    "FoldScheme",
    "SuperLearnerConfig",
    "SuperLearnerConfigBuilder",
    # Core
    "Task",
    "Fold",
    "make_folds",
    "validate_folds",
    "Learner",
    "Fit",
    "ChainPolicy",
    "Predictions",
    "squared_error",
    "absolute_error",
    "binomial_log_likelihood",
    "default_loss",
    "risk",
    "cv_risk",
    # Composition
    "Pipeline",
    "Stack",
    "CrossValidatedLearner",
    "CrossValidatedFit",
    # Super Learner
    "SuperLearner",
    "SuperLearnerBuilder",
    "SuperLearnerFit",
    "StackedEnsemble",
    # Learners
    "SklearnLearner",
    "MeanLearner",
    "CorrelationScreener",
    "EncodingLearner",
    "TunedLearner",
    "create_learner",
    "get_available_learners",
    # Meta-learners
    "MetaLearner",
    "NNLSMetaLearner",
    "LinearMetaLearner",
    "SelectorMetaLearner",
    "create_meta_learner",
    # Persistence
    "FitArtifact",
    "save_fit",
    "load_fit",
    "load_artifact",
    # Progress
    "TrainingStage",
    "ProgressUpdate",
    "ProgressCallback",
    "ProgressReporter",
    "CallbackProgressReporter",
    "LoggingProgressReporter",
    "NullProgressReporter",
    # Errors
    "SuperLearnerError",
    "InvalidTaskError",
    "DataError",
    "NotTrainedError",
    "SchemaMismatchError",
    "ChainError",
    "DimensionMismatchError",
    "FoldCoverageError",
    "FitNotFoundError",
]
