"""Composition of learners: pipelines, stacks and cross-validation.

Every composite is itself a Learner, so composites nest freely.
"""

from __future__ import annotations

from .cross_validation import CrossValidatedFit, CrossValidatedLearner
from .pipeline import Pipeline
from .stack import Stack

__all__ = [
    "Pipeline",
    "Stack",
    "CrossValidatedLearner",
    "CrossValidatedFit",
]
