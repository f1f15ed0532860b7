"""Exception hierarchy for superlearner."""

from __future__ import annotations


class SuperLearnerError(Exception):
    """Base exception for superlearner."""

    pass


class InvalidTaskError(SuperLearnerError):
    """Task is malformed or incompatible with a learner."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Invalid task: {message}")


class DataError(SuperLearnerError):
    """Covariate data is missing or has the wrong type for a learner."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Invalid data: {message}")


class NotTrainedError(SuperLearnerError):
    """Prediction requested from a learner that has not been trained."""

    def __init__(self, learner_name: str) -> None:
        self.learner_name = learner_name
        super().__init__(f"Learner '{learner_name}' has not been trained; call train() first")


class SchemaMismatchError(SuperLearnerError):
    """Task covariates differ from the covariates a fit was trained on."""

    def __init__(self, expected: list[str], actual: list[str]) -> None:
        self.expected = expected
        self.actual = actual
        missing = sorted(set(expected) - set(actual))
        extra = sorted(set(actual) - set(expected))
        super().__init__(
            f"Covariates do not match the trained fit. Missing: {missing}, unexpected: {extra}"
        )


class ChainError(SuperLearnerError):
    """A pipeline stage produced a task the next stage cannot use."""

    def __init__(self, stage: int, message: str) -> None:
        self.stage = stage
        self.message = message
        super().__init__(f"Chain failed after stage {stage}: {message}")


class DimensionMismatchError(SuperLearnerError):
    """A learner produced a different number of prediction rows than the task has."""

    def __init__(self, member: str, expected: int, actual: int) -> None:
        self.member = member
        self.expected = expected
        self.actual = actual
        super().__init__(f"Learner '{member}' returned {actual} rows, expected {expected}")


class FoldCoverageError(SuperLearnerError):
    """Folds do not partition the task rows."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Invalid folds: {message}")


class FitNotFoundError(SuperLearnerError):
    """Saved fit file not found."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Fit file not found: {path}")
