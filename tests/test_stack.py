"""Tests for parallel composition of learners."""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from superlearner import (
    DimensionMismatchError,
    Learner,
    MeanLearner,
    SklearnLearner,
    Stack,
    Task,
)


class ShortPredictions(Learner):
    """Learner whose predictions are one row short."""

    default_name = "short"

    def _train(self, task: Task) -> None:
        return None

    def _predict(self, fit, task: Task) -> np.ndarray:
        return np.zeros(task.n_rows - 1)


class SingleColumnFrame(Learner):
    """Learner predicting a one-column DataFrame with column "b"."""

    default_name = "pair"

    def _train(self, task: Task) -> None:
        return None

    def _predict(self, fit, task: Task) -> pd.DataFrame:
        return pd.DataFrame({"b": np.zeros(task.n_rows)}, index=task.data.index)


class TestStack:
    """Tests for Stack training and prediction."""

    def test_requires_learners(self):
        """An empty stack is rejected."""
        with pytest.raises(ValueError):
            Stack()

    def test_columns_follow_member_order(self, continuous_task):
        """Prediction columns are the member names, in order."""
        fit = Stack(SklearnLearner("glm"), MeanLearner()).train(continuous_task)
        predictions = fit.predict(continuous_task)

        assert isinstance(predictions, pd.DataFrame)
        assert list(predictions.columns) == ["glm", "mean"]
        assert len(predictions) == continuous_task.n_rows

    def test_columns_match_members(self, continuous_task):
        """Each column equals its member's own predictions."""
        stack_fit = Stack(SklearnLearner("glm"), MeanLearner()).train(continuous_task)
        glm_fit, mean_fit = stack_fit.fit_object
        predictions = stack_fit.predict()

        np.testing.assert_allclose(predictions["glm"], glm_fit.predict())
        np.testing.assert_allclose(predictions["mean"], mean_fit.predict())

    def test_repeated_names_are_suffixed(self, continuous_task):
        """Members sharing a name get numbered labels."""
        stack = Stack(
            SklearnLearner("random_forest", n_estimators=5),
            SklearnLearner("random_forest", n_estimators=20),
        )
        assert stack.labels == ("random_forest", "random_forest_2")

    def test_categorical_members_prefix_levels(self, categorical_task):
        """Multi-column member predictions are prefixed with the member label."""
        predictions = Stack(MeanLearner()).train(categorical_task).predict()
        assert list(predictions.columns) == ["mean_high", "mean_low", "mean_mid"]

    def test_colliding_column_labels_are_suffixed(self, continuous_task):
        """A prefixed column that clashes with another member's label is renumbered."""
        fit = Stack(SingleColumnFrame(), MeanLearner(name="pair_b")).train(continuous_task)
        predictions = fit.predict(continuous_task)
        assert list(predictions.columns) == ["pair_b", "pair_b_2"]
        assert fit.chain(continuous_task).covariate_names == ("pair_b", "pair_b_2")

    def test_chain_replaces_covariates(self, continuous_task):
        """chain() hands on the member predictions as covariates."""
        fit = Stack(SklearnLearner("glm"), MeanLearner()).train(continuous_task)
        chained = fit.chain(continuous_task)
        assert chained.covariate_names == ("glm", "mean")
        assert chained.outcome_name == "y"

    def test_dimension_mismatch(self, small_task):
        """A member returning the wrong number of rows is reported."""
        fit = Stack(MeanLearner(), ShortPredictions()).train(small_task)
        with pytest.raises(DimensionMismatchError) as exc_info:
            fit.predict(small_task)
        assert exc_info.value.member == "short"

    def test_reuses_member_fits(self, continuous_task):
        """Existing fits are kept as members."""
        glm_fit = SklearnLearner("glm").train(continuous_task)
        fit = Stack(glm_fit, MeanLearner()).train(continuous_task)
        assert fit.fit_object[0] is glm_fit

    @pytest.mark.slow
    def test_parallel_matches_serial(self, continuous_task):
        """Training members in parallel gives the same predictions."""
        members = (SklearnLearner("glm"), SklearnLearner("decision_tree"))
        serial = Stack(*members).train(continuous_task).predict()
        parallel = Stack(*members, n_jobs=2).train(continuous_task).predict()
        pd.testing.assert_frame_equal(serial, parallel)
