"""Sequential composition of learners."""

from __future__ import annotations

import logging

from ..core.learner import Fit, Learner, Predictions
from ..core.task import Task
from ..errors import (
    ChainError,
    DataError,
    InvalidTaskError,
    NotTrainedError,
    SchemaMismatchError,
)

logger = logging.getLogger(__name__)


class Pipeline(Learner):
    """Chains learners: each stage trains on the task chained out of the previous fit.

    Elements may be bare learners or existing fits. Fits are reused as-is,
    so a pipeline made only of fits is already trained and can predict
    without calling train().

    Usage:
        fit = Pipeline(CorrelationScreener(num_screen=3), SklearnLearner("glm")).train(task)
        predictions = fit.predict(new_task)
    """

    requires_numeric = False
    default_name = "pipeline"

    def __init__(self, *elements: Learner | Fit, name: str | None = None) -> None:
        if not elements:
            raise ValueError("Pipeline needs at least one element")
        super().__init__(name=name or "_".join(e.name for e in elements))
        self._elements: tuple[Learner | Fit, ...] = tuple(elements)

    @property
    def elements(self) -> tuple[Learner | Fit, ...]:
        """Pipeline stages, in order."""
        return self._elements

    @property
    def is_trained(self) -> bool:
        """A pipeline made only of fits behaves as a fit."""
        return all(e.is_trained for e in self._elements)

    def predict(self, task: Task | None = None) -> Predictions:
        """Predict with an all-fit pipeline; bare pipelines raise NotTrainedError."""
        return self._as_fit(task).predict(task)

    def chain(self, task: Task | None = None) -> Task:
        """Chain through an all-fit pipeline; bare pipelines raise NotTrainedError."""
        return self._as_fit(task).chain(task)

    def _as_fit(self, task: Task | None) -> Fit:
        if not self.is_trained:
            raise NotTrainedError(self.name)
        return self.train(task or _reuse(self._elements[0]).training_task)

    def _train(self, task: Task) -> tuple[Fit, ...]:
        if self.is_trained:
            logger.debug(f"Pipeline {self.name} is already trained; reusing its fits")
            return tuple(_reuse(e) for e in self._elements)

        fits: list[Fit] = []
        current = task
        last = len(self._elements) - 1

        for i, element in enumerate(self._elements):
            if i > 0:
                if not current.covariate_names:
                    raise ChainError(i, "no covariates remain for the next stage")
                fit = self._train_chained(i, element, current)
            else:
                fit = element.train(current)
            fits.append(fit)

            if i < last:
                current = self._chain_stage(i, fit, current)
                logger.debug(
                    f"Stage {i + 1} ({fit.name}) chained {len(current.covariate_names)} covariates"
                )

        return tuple(fits)

    def _train_chained(self, i: int, element: Learner | Fit, task: Task) -> Fit:
        """Train stage i on a chained task, reporting incompatibilities as ChainError."""
        try:
            if isinstance(element, Fit):
                if set(element.covariate_names) != set(task.covariate_names):
                    raise SchemaMismatchError(
                        list(element.covariate_names), list(task.covariate_names)
                    )
                return element
            return element.train(task)
        except (InvalidTaskError, DataError, SchemaMismatchError) as e:
            raise ChainError(i, f"stage {i + 1} ({element.name}) rejected the task: {e}") from e

    def _chain_stage(self, i: int, fit: Fit, task: Task) -> Task:
        try:
            return fit.chain(task)
        except ChainError as e:
            raise ChainError(i + 1, e.message) from e
        except SchemaMismatchError as e:
            if i == 0:
                raise
            raise ChainError(i + 1, str(e)) from e

    def _predict(self, fit: Fit, task: Task) -> Predictions:
        fits: tuple[Fit, ...] = fit.fit_object
        current = task
        for stage in fits[:-1]:
            current = stage.chain(current)
        return fits[-1].predict(current)

    def _chain(self, fit: Fit, task: Task) -> Task:
        current = task
        for stage in fit.fit_object:
            current = stage.chain(current)
        return current


def _reuse(element: Learner | Fit) -> Fit:
    """Fit of an already trained element; all-fit pipelines become fits on their own task."""
    if isinstance(element, Fit):
        return element
    if isinstance(element, Pipeline) and element.is_trained:
        return element._as_fit(None)
    raise NotTrainedError(element.name)
