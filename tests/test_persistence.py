"""Tests for saving and loading fits."""

from __future__ import annotations

import pickle

import numpy as np
import pytest

from superlearner import (
    FitArtifact,
    FitNotFoundError,
    MeanLearner,
    SklearnLearner,
    SuperLearner,
    load_artifact,
    load_fit,
    save_fit,
)
from superlearner.persistence import ARTIFACT_VERSION


@pytest.fixture
def super_learner_fit(small_task):
    """Super Learner fit with a progress callback attached."""
    return (
        SuperLearner.builder()
        .learners([SklearnLearner("glm"), MeanLearner()])
        .on_progress(lambda update: None)
        .build()
        .train(small_task)
    )


class TestSaveLoad:
    """Tests for save_fit and load_fit."""

    def test_round_trip_predictions(self, tmp_path, super_learner_fit, small_task):
        """A reloaded fit predicts exactly like the original."""
        path = tmp_path / "fit.pkl"
        save_fit(super_learner_fit, path)
        loaded = load_fit(path)

        np.testing.assert_allclose(loaded.predict(small_task), super_learner_fit.predict(small_task))

    def test_creates_parent_directories(self, tmp_path, small_task):
        """Missing parent directories are created."""
        path = tmp_path / "nested" / "dir" / "fit.pkl"
        save_fit(MeanLearner().train(small_task), path)
        assert path.exists()

    def test_missing_file(self, tmp_path):
        """Loading a missing file raises FitNotFoundError."""
        with pytest.raises(FitNotFoundError):
            load_fit(tmp_path / "missing.pkl")

    def test_not_an_artifact(self, tmp_path):
        """Files holding other objects are rejected."""
        path = tmp_path / "other.pkl"
        with open(path, "wb") as f:
            pickle.dump({"not": "an artifact"}, f)
        with pytest.raises(TypeError):
            load_artifact(path)

    def test_loaded_fit_predicts_new_rows(self, tmp_path, super_learner_fit, small_data):
        """The training schema travels with the fit."""
        path = tmp_path / "fit.pkl"
        save_fit(super_learner_fit, path)
        loaded = load_fit(path)

        new = loaded.training_task.like(small_data[["x1", "x2"]].head(5))
        assert len(loaded.predict(new)) == 5


class TestFitArtifact:
    """Tests for artifact metadata."""

    def test_metadata(self, tmp_path, super_learner_fit):
        """save_fit records the fit's schema."""
        artifact = save_fit(super_learner_fit, tmp_path / "fit.pkl")

        assert isinstance(artifact, FitArtifact)
        assert artifact.version == ARTIFACT_VERSION
        assert artifact.learner_name == "super_learner"
        assert artifact.outcome_name == "y"
        assert artifact.covariate_names == ["x1", "x2"]
        assert artifact.training_time_seconds is not None

    def test_get_info(self, tmp_path, super_learner_fit):
        """get_info includes risk and coefficients for Super Learner fits."""
        save_fit(super_learner_fit, tmp_path / "fit.pkl")
        info = load_artifact(tmp_path / "fit.pkl").get_info()

        assert info["learner_type"] == "SuperLearner"
        assert info["outcome_type"] == "continuous"
        assert info["n_rows"] == 50
        assert set(info["coefficients"]) == {"glm", "mean"}
        assert [row["learner"] for row in info["risk"]] == ["glm", "mean"]

    def test_get_info_plain_fit(self, tmp_path, small_task):
        """Fits without risk or coefficients omit them."""
        artifact = save_fit(MeanLearner().train(small_task), tmp_path / "fit.pkl")
        info = artifact.get_info()

        assert "risk" not in info
        assert "coefficients" not in info
        assert info["training_time_seconds"] is None
