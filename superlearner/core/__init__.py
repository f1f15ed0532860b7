"""Core types for superlearner.

This module contains the Task, the Learner/Fit contract, fold handling
and loss/risk functions used throughout the library.
"""

from __future__ import annotations

from .folds import Fold, make_folds, validate_folds
from .learner import ChainPolicy, Fit, Learner, Predictions
from .risk import (
    LossFunction,
    absolute_error,
    binomial_log_likelihood,
    cv_risk,
    default_loss,
    risk,
    squared_error,
)
from .task import Task

__all__ = [
    # Task
    "Task",
    "Fold",
    "make_folds",
    "validate_folds",
    # Learner contract
    "Learner",
    "Fit",
    "ChainPolicy",
    "Predictions",
    # Risk
    "LossFunction",
    "squared_error",
    "absolute_error",
    "binomial_log_likelihood",
    "default_loss",
    "risk",
    "cv_risk",
]
