"""Tests for the Super Learner ensemble."""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from conftest import make_progress_callback
from superlearner import (
    CorrelationScreener,
    CrossValidatedLearner,
    FoldCoverageError,
    InvalidTaskError,
    MeanLearner,
    NNLSMetaLearner,
    Pipeline,
    SklearnLearner,
    StackedEnsemble,
    SuperLearner,
    SuperLearnerBuilder,
    SuperLearnerConfig,
    SuperLearnerFit,
    Task,
    TrainingStage,
)


class TestSuperLearnerBuilder:
    """Tests for SuperLearner.builder() interface."""

    def test_builder_type(self):
        """SuperLearner.builder() returns a builder."""
        assert isinstance(SuperLearner.builder(), SuperLearnerBuilder)

    def test_builder_requires_learners(self):
        """build() raises if no learners are set."""
        with pytest.raises(ValueError, match="learners are required"):
            SuperLearner.builder().build()

    def test_builder_returns_self(self):
        """Builder methods return self for chaining."""
        builder = SuperLearner.builder()

        assert builder.learners(["glm"]) is builder
        assert builder.meta_learner("nnls") is builder
        assert builder.config(SuperLearnerConfig()) is builder
        assert builder.on_progress(lambda u: None) is builder

    def test_learner_names_resolved(self):
        """Learner and meta-learner names are turned into learners."""
        sl = SuperLearner.builder().learners(["glm", "mean"]).meta_learner("nnls").build()
        assert [learner.name for learner in sl.learners] == ["glm", "mean"]
        assert isinstance(sl.meta_learner, NNLSMetaLearner)

    def test_meta_learner_from_config(self):
        """Without an explicit meta-learner the config's is used."""
        config = SuperLearnerConfig(meta_learner="selector")
        sl = SuperLearner(["glm"], config=config)
        assert sl.meta_learner.name == "selector"

    def test_alias(self):
        """StackedEnsemble is the same class."""
        assert StackedEnsemble is SuperLearner


@pytest.mark.integration
class TestSuperLearnerTraining:
    """Tests for training and predicting with a Super Learner."""

    def test_six_hundred_finite_predictions(self, continuous_task):
        """600 rows, 7 covariates, 10 folds, 2 learners give 600 finite predictions."""
        sl = SuperLearner([SklearnLearner("glm"), SklearnLearner("random_forest", n_estimators=30)])
        fit = sl.train(continuous_task)
        predictions = fit.predict(continuous_task)

        assert len(continuous_task.folds) == 10
        assert len(predictions) == 600
        assert np.isfinite(predictions).all()

    def test_fit_object_contents(self, continuous_task):
        """The fit records the stack, meta-learner, risk and coefficients."""
        fit = SuperLearner([SklearnLearner("glm"), MeanLearner()]).train(continuous_task)
        state = fit.fit_object

        assert isinstance(state, SuperLearnerFit)
        assert state.stack_fit.covariate_names == continuous_task.covariate_names
        assert state.meta_fit.covariate_names == ("glm", "mean")
        assert set(state.coefficients) == {"glm", "mean"}
        assert sum(state.coefficients.values()) == pytest.approx(1.0)
        assert state.coefficients["glm"] > state.coefficients["mean"]
        assert state.risk["learner"].tolist() == ["glm", "mean"]
        assert state.training_time_seconds > 0

    def test_prediction_is_meta_of_chained_stack(self, continuous_task):
        """predict(task) equals meta_fit.predict(stack_fit.chain(task))."""
        fit = SuperLearner([SklearnLearner("glm"), MeanLearner()]).train(continuous_task)
        state = fit.fit_object
        expected = state.meta_fit.predict(state.stack_fit.chain(continuous_task))
        np.testing.assert_allclose(fit.predict(continuous_task), expected)

    def test_predicts_new_rows(self, continuous_task, continuous_data):
        """A fit predicts rows without an outcome column."""
        fit = SuperLearner([SklearnLearner("glm"), MeanLearner()]).train(continuous_task)
        new = continuous_task.like(continuous_data.drop(columns=["y"]).head(20))
        predictions = fit.predict(new)
        assert len(predictions) == 20

    def test_binary_outcome(self, binary_task):
        """Binary Super Learner predictions are probabilities."""
        fit = SuperLearner([SklearnLearner("glm"), MeanLearner()]).train(binary_task)
        predictions = fit.predict(binary_task)
        assert ((predictions >= 0) & (predictions <= 1)).all()

    def test_pipelines_as_members(self, continuous_task):
        """Members can be pipelines with screening."""
        screened = Pipeline(CorrelationScreener(num_screen=3), SklearnLearner("glm"))
        fit = SuperLearner([screened, MeanLearner()]).train(continuous_task)
        assert fit.fit_object.meta_fit.covariate_names == ("screen_corr_glm", "mean")

    def test_selector_meta_learner(self, continuous_task):
        """The discrete Super Learner picks a single learner."""
        fit = SuperLearner([SklearnLearner("glm"), MeanLearner()], meta_learner="selector").train(
            continuous_task
        )
        assert fit.fit_object.coefficients == {"glm": 1.0, "mean": 0.0}

    def test_risk_can_be_disabled(self, small_task):
        """compute_risk=False skips the risk table."""
        config = SuperLearnerConfig(compute_risk=False)
        fit = SuperLearner([SklearnLearner("glm"), MeanLearner()], config=config).train(small_task)
        assert fit.fit_object.risk is None

    @pytest.mark.slow
    def test_nested_in_cross_validation(self, small_task):
        """A Super Learner can itself be cross-validated."""
        sl = SuperLearner([SklearnLearner("glm"), MeanLearner()])
        oof = CrossValidatedLearner(sl, full_fit=False).train(small_task).predict(small_task)
        assert len(oof) == small_task.n_rows
        assert np.isfinite(oof).all()


class TestSuperLearnerValidation:
    """Tests for task validation before training."""

    def test_categorical_outcome_rejected(self, categorical_task):
        """Meta-learners do not support categorical outcomes."""
        with pytest.raises(InvalidTaskError):
            SuperLearner([MeanLearner()]).train(categorical_task)

    def test_unsupported_member(self, binary_task):
        """Members that cannot handle the outcome type are named."""
        with pytest.raises(InvalidTaskError, match="ridge"):
            SuperLearner([SklearnLearner("ridge"), MeanLearner()]).train(binary_task)

    def test_bad_folds(self, small_data):
        """Folds that do not cover every row are rejected."""
        rows = list(range(len(small_data)))
        task = Task.create(small_data, ["x1", "x2"], "y", folds=[(rows[10:], rows[:10])])
        with pytest.raises(FoldCoverageError):
            SuperLearner([MeanLearner()]).train(task)

    def test_requires_learners(self):
        """A Super Learner needs at least one learner."""
        with pytest.raises(ValueError):
            SuperLearner([])


class TestSuperLearnerProgress:
    """Tests for progress callbacks."""

    def test_reports_stages(self, small_task, progress_tracker):
        """Every stage is reported, ending with COMPLETE at 1.0."""
        sl = (
            SuperLearner.builder()
            .learners([SklearnLearner("glm"), MeanLearner()])
            .on_progress(make_progress_callback(progress_tracker))
            .build()
        )
        sl.train(small_task)

        stages = progress_tracker["stages"]
        assert stages[0] == TrainingStage.INITIALIZING
        for stage in [
            TrainingStage.VALIDATING,
            TrainingStage.CROSS_VALIDATING,
            TrainingStage.META_TRAINING,
            TrainingStage.REFITTING,
            TrainingStage.RISK,
        ]:
            assert stage in stages
        assert stages[-1] == TrainingStage.COMPLETE
        assert progress_tracker["final_progress"] == 1.0

    def test_rejected_before_stages(self, categorical_task, progress_tracker):
        """An unsupported outcome is rejected before any stage reports progress."""
        sl = SuperLearner([MeanLearner()], progress_callback=make_progress_callback(progress_tracker))
        with pytest.raises(InvalidTaskError):
            sl.train(categorical_task)
        assert progress_tracker["stages"] == []


class TestSuperLearnerTrainingFailure:
    """Tests for failures inside the training stages."""

    def test_reports_failed_stage(self, small_data, progress_tracker):
        """Errors raised by a stage are reported as FAILED."""
        rows = list(range(len(small_data)))
        task = Task.create(small_data, ["x1", "x2"], "y", folds=[(rows[10:], rows[:10])])
        sl = SuperLearner([MeanLearner()], progress_callback=make_progress_callback(progress_tracker))
        with pytest.raises(FoldCoverageError):
            sl.train(task)
        assert progress_tracker["stages"][-1] == TrainingStage.FAILED
        assert isinstance(progress_tracker["updates"][-1].message, str)


def test_predictions_indexed_like_task(small_task):
    """Predictions share the task's row index."""
    fit = SuperLearner([SklearnLearner("glm"), MeanLearner()]).train(small_task)
    predictions = fit.predict(small_task)
    assert isinstance(predictions, pd.Series)
    assert predictions.index.equals(small_task.data.index)
