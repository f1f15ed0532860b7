"""Fit artifact serialization and deserialization."""

from __future__ import annotations

import pickle
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from ..config import OutcomeType
from ..core.learner import Fit
from ..errors import FitNotFoundError

# Current artifact version
ARTIFACT_VERSION = "1.0"


@dataclass
class FitArtifact:
    """A trained fit plus the metadata needed to use it later.

    The fit keeps its training task, so the covariates, outcome and outcome
    levels of the training data travel with it.
    """

    version: str
    fit: Fit
    learner_name: str
    outcome_name: str
    outcome_type: OutcomeType
    covariate_names: list[str]
    trained_at: str
    training_time_seconds: float | None = None

    def get_info(self) -> dict[str, Any]:
        """Summarize the artifact for display."""
        info: dict[str, Any] = {
            "version": self.version,
            "learner": self.learner_name,
            "learner_type": type(self.fit.learner).__name__,
            "outcome": self.outcome_name,
            "outcome_type": self.outcome_type.value,
            "covariates": list(self.covariate_names),
            "n_rows": self.fit.training_task.n_rows,
            "trained_at": self.trained_at,
            "training_time_seconds": self.training_time_seconds,
        }
        state = self.fit.fit_object
        if hasattr(state, "risk") and state.risk is not None:
            info["risk"] = state.risk.to_dict(orient="records")
        if getattr(state, "coefficients", None):
            info["coefficients"] = dict(state.coefficients)
        return info


def create_artifact(fit: Fit) -> FitArtifact:
    """Create a new artifact for a trained fit.

    Args:
        fit: Trained fit to persist.

    Returns:
        FitArtifact ready for serialization.
    """
    task = fit.training_task
    return FitArtifact(
        version=ARTIFACT_VERSION,
        fit=fit,
        learner_name=fit.name,
        outcome_name=task.outcome_name,
        outcome_type=task.outcome_type,
        covariate_names=list(task.covariate_names),
        trained_at=datetime.now().isoformat(),
        training_time_seconds=getattr(fit.fit_object, "training_time_seconds", None),
    )


def save_artifact(artifact: FitArtifact, path: str | Path) -> None:
    """Save an artifact to disk.

    Args:
        artifact: The artifact to save.
        path: Path to save the artifact (typically .pkl extension).
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "wb") as f:
        pickle.dump(artifact, f, protocol=pickle.HIGHEST_PROTOCOL)


def load_artifact(path: str | Path) -> FitArtifact:
    """Load an artifact from disk.

    Args:
        path: Path to the saved artifact.

    Returns:
        Loaded FitArtifact.

    Raises:
        FitNotFoundError: If the file does not exist.
    """
    path = Path(path)

    if not path.exists():
        raise FitNotFoundError(str(path))

    with open(path, "rb") as f:
        artifact = pickle.load(f)

    if not isinstance(artifact, FitArtifact):
        raise TypeError(f"{path} does not contain a fit artifact")
    return artifact


def save_fit(fit: Fit, path: str | Path) -> FitArtifact:
    """Wrap a fit in an artifact and save it.

    Returns:
        The saved artifact.
    """
    artifact = create_artifact(fit)
    save_artifact(artifact, path)
    return artifact


def load_fit(path: str | Path) -> Fit:
    """Load a fit saved with save_fit().

    Raises:
        FitNotFoundError: If the file does not exist.
    """
    return load_artifact(path).fit
