"""Loss functions and cross-validated risk.

Losses are pure functions returning one loss per row; risk is their
(optionally weighted) mean.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from ..config import OutcomeType
from ..errors import InvalidTaskError

if TYPE_CHECKING:
    from .learner import Fit

LossFunction = Callable[[NDArray[Any], NDArray[Any]], NDArray[np.float64]]

# Probabilities are clipped away from 0 and 1 before taking logs
_EPSILON = 1e-15


def squared_error(predictions: NDArray[Any], outcomes: NDArray[Any]) -> NDArray[np.float64]:
    """Squared error loss."""
    diff = np.asarray(predictions, dtype=np.float64) - np.asarray(outcomes, dtype=np.float64)
    return diff**2


def absolute_error(predictions: NDArray[Any], outcomes: NDArray[Any]) -> NDArray[np.float64]:
    """Absolute error loss."""
    diff = np.asarray(predictions, dtype=np.float64) - np.asarray(outcomes, dtype=np.float64)
    return np.abs(diff)


def binomial_log_likelihood(
    predictions: NDArray[Any], outcomes: NDArray[Any]
) -> NDArray[np.float64]:
    """Negative binomial log-likelihood of predicted probabilities."""
    p = np.clip(np.asarray(predictions, dtype=np.float64), _EPSILON, 1 - _EPSILON)
    y = np.asarray(outcomes, dtype=np.float64)
    return -(y * np.log(p) + (1 - y) * np.log(1 - p))


def default_loss(outcome_type: OutcomeType) -> LossFunction:
    """Loss used when none is configured."""
    if outcome_type == OutcomeType.CONTINUOUS:
        return squared_error
    if outcome_type == OutcomeType.BINARY:
        return binomial_log_likelihood
    raise InvalidTaskError("no default loss for categorical outcomes")


def risk(
    predictions: NDArray[Any] | pd.Series,
    outcomes: NDArray[Any] | pd.Series,
    loss: LossFunction = squared_error,
    weights: NDArray[Any] | None = None,
) -> float:
    """Mean loss of predictions against outcomes.

    Args:
        predictions: Predicted values.
        outcomes: Observed values, aligned with predictions.
        loss: Per-row loss function.
        weights: Optional per-row weights.

    Returns:
        The (weighted) mean loss.
    """
    losses = loss(np.asarray(predictions), np.asarray(outcomes))
    return _weighted_mean(losses, weights)


def cv_risk(
    cv_fit: Fit,
    loss: LossFunction | None = None,
    coefficients: Mapping[str, float] | None = None,
) -> pd.DataFrame:
    """Cross-validated risk of each out-of-fold prediction column.

    Args:
        cv_fit: Fit of a CrossValidatedLearner.
        loss: Loss function; defaults to one matching the outcome type.
        coefficients: Optional meta-learner coefficients to report per column.

    Returns:
        DataFrame with columns learner, coefficient, risk, se, fold_sd,
        fold_min_risk and fold_max_risk, one row per prediction column.
    """
    task = cv_fit.training_task
    loss = loss or default_loss(task.outcome_type)
    outcomes = task.numeric_outcome()
    weights = task.weights

    oof = cv_fit.fit_object.oof_predictions
    frame = oof.to_frame() if isinstance(oof, pd.Series) else oof

    rows: list[dict[str, Any]] = []
    for column in frame.columns:
        predictions = frame[column].to_numpy(dtype=np.float64)
        losses = loss(predictions, outcomes)
        mean_risk = _weighted_mean(losses, weights)
        se = float(np.std(losses, ddof=1) / np.sqrt(len(losses))) if len(losses) > 1 else 0.0

        fold_risks = np.array(
            [
                _weighted_mean(
                    losses[fold.validation],
                    weights[fold.validation] if weights is not None else None,
                )
                for fold in cv_fit.fit_object.folds
            ]
        )
        rows.append(
            {
                "learner": str(column),
                "coefficient": (coefficients or {}).get(str(column), np.nan),
                "risk": mean_risk,
                "se": se,
                "fold_sd": float(np.std(fold_risks, ddof=1)) if len(fold_risks) > 1 else 0.0,
                "fold_min_risk": float(fold_risks.min()),
                "fold_max_risk": float(fold_risks.max()),
            }
        )

    return pd.DataFrame(
        rows,
        columns=[
            "learner",
            "coefficient",
            "risk",
            "se",
            "fold_sd",
            "fold_min_risk",
            "fold_max_risk",
        ],
    )


def _weighted_mean(losses: NDArray[np.float64], weights: NDArray[Any] | None) -> float:
    """Weighted mean loss, unweighted when the weights sum to zero."""
    if weights is None or np.sum(weights) <= 0:
        return float(np.mean(losses))
    return float(np.average(losses, weights=weights))
