"""Tests for loss functions and cross-validated risk."""

from __future__ import annotations

import numpy as np
import pytest

from conftest import COVARIATES
from superlearner import (
    CrossValidatedLearner,
    InvalidTaskError,
    MeanLearner,
    OutcomeType,
    SklearnLearner,
    Stack,
    Task,
    absolute_error,
    binomial_log_likelihood,
    cv_risk,
    default_loss,
    risk,
    squared_error,
)


class TestLossFunctions:
    """Tests for per-row losses."""

    def test_squared_error(self):
        """Squared error is the squared difference."""
        np.testing.assert_allclose(squared_error(np.array([1.0, 3.0]), np.array([2.0, 1.0])), [1, 4])

    def test_absolute_error(self):
        """Absolute error is the absolute difference."""
        np.testing.assert_allclose(absolute_error(np.array([1.0, 3.0]), np.array([2.0, 1.0])), [1, 2])

    def test_log_likelihood(self):
        """Log-likelihood loss is small for confident correct predictions."""
        losses = binomial_log_likelihood(np.array([0.99, 0.01]), np.array([1, 1]))
        assert losses[0] < 0.02
        assert losses[1] > 4

    def test_log_likelihood_clips(self):
        """Predictions of exactly 0 or 1 give finite losses."""
        losses = binomial_log_likelihood(np.array([0.0, 1.0]), np.array([1, 0]))
        assert np.isfinite(losses).all()

    def test_default_loss(self):
        """Default losses follow the outcome type."""
        assert default_loss(OutcomeType.CONTINUOUS) is squared_error
        assert default_loss(OutcomeType.BINARY) is binomial_log_likelihood
        with pytest.raises(InvalidTaskError):
            default_loss(OutcomeType.CATEGORICAL)


class TestRisk:
    """Tests for mean and cross-validated risk."""

    def test_risk_is_mean_loss(self):
        """Risk is the mean loss."""
        assert risk(np.array([1.0, 2.0]), np.array([0.0, 0.0])) == pytest.approx(2.5)

    def test_weighted_risk(self):
        """Weights scale each row's loss."""
        value = risk(np.array([1.0, 2.0]), np.array([0.0, 0.0]), weights=np.array([1.0, 0.0]))
        assert value == pytest.approx(1.0)

    def test_zero_weights_fall_back_to_mean(self):
        """Weights summing to zero give the unweighted mean loss."""
        value = risk(np.array([1.0, 2.0]), np.array([0.0, 0.0]), weights=np.array([0.0, 0.0]))
        assert value == pytest.approx(2.5)

    def test_cv_risk_with_zero_weight_fold(self, continuous_data):
        """A validation fold whose rows all weigh zero still yields finite risks."""
        weights = np.ones(len(continuous_data))
        weights[:60] = 0.0
        rows = np.arange(len(continuous_data))
        folds = [(np.setdiff1d(rows, block), block) for block in np.array_split(rows, 10)]
        task = Task.create(continuous_data, COVARIATES, "y", folds=folds, weights=weights)

        cv_fit = CrossValidatedLearner(
            Stack(SklearnLearner("glm"), MeanLearner()), full_fit=False
        ).train(task)
        table = cv_risk(cv_fit)

        assert np.isfinite(table[["risk", "se", "fold_sd"]].to_numpy()).all()
        assert np.isfinite(table[["fold_min_risk", "fold_max_risk"]].to_numpy()).all()

    def test_cv_risk_table(self, continuous_task):
        """cv_risk() reports one row per learner with the expected columns."""
        cv_fit = CrossValidatedLearner(
            Stack(SklearnLearner("glm"), MeanLearner()), full_fit=False
        ).train(continuous_task)
        table = cv_risk(cv_fit, coefficients={"glm": 0.9, "mean": 0.1})

        assert list(table.columns) == [
            "learner",
            "coefficient",
            "risk",
            "se",
            "fold_sd",
            "fold_min_risk",
            "fold_max_risk",
        ]
        assert table["learner"].tolist() == ["glm", "mean"]
        assert table["coefficient"].tolist() == [0.9, 0.1]

        glm, mean = table.iloc[0], table.iloc[1]
        assert glm["risk"] < mean["risk"]
        assert glm["fold_min_risk"] <= glm["risk"] <= glm["fold_max_risk"]
        assert glm["se"] > 0

    def test_cv_risk_matches_oof_predictions(self, small_task):
        """Risk equals the mean loss of the out-of-fold predictions."""
        cv_fit = CrossValidatedLearner(SklearnLearner("glm")).train(small_task)
        table = cv_risk(cv_fit)
        expected = risk(cv_fit.predict(small_task), small_task.y)
        assert table["risk"].iloc[0] == pytest.approx(expected)
