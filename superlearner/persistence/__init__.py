"""Saving and loading trained fits."""

from __future__ import annotations

from .artifact import (
    ARTIFACT_VERSION,
    FitArtifact,
    create_artifact,
    load_artifact,
    load_fit,
    save_artifact,
    save_fit,
)

__all__ = [
    "ARTIFACT_VERSION",
    "FitArtifact",
    "create_artifact",
    "save_artifact",
    "load_artifact",
    "save_fit",
    "load_fit",
]
