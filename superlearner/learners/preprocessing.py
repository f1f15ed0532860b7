"""Covariate encoding as a chainable learner.

Handles scaling of numeric covariates and one-hot encoding of categorical
covariates, so that downstream learners requiring numeric input can be
trained on mixed-type data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd
from scipy import sparse
from sklearn.compose import ColumnTransformer
from sklearn.impute import SimpleImputer
from sklearn.pipeline import Pipeline as SklearnPipeline
from sklearn.preprocessing import OneHotEncoder, StandardScaler

from ..core.learner import Fit, Learner
from ..core.task import Task
from ..errors import DataError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EncodingState:
    """Fitted transformer plus the column bookkeeping needed to apply it."""

    transformer: ColumnTransformer
    numeric_features: tuple[str, ...]
    categorical_features: tuple[str, ...]
    output_names: tuple[str, ...]


class EncodingLearner(Learner):
    """Scales numeric and one-hot encodes categorical covariates.

    Predictions are the encoded covariate matrix; chain() replaces the task's
    covariates with the encoded columns. Categories unseen during training
    encode to all zeros.

    Args:
        scale: Whether to standardize numeric covariates.
        impute: Whether to fill missing values (median for numeric, most
            frequent for categorical) before encoding.
        name: Learner name.
    """

    requires_numeric = False
    default_name = "encode"

    def __init__(self, scale: bool = True, impute: bool = False, name: str | None = None) -> None:
        super().__init__(name=name, scale=scale, impute=impute)
        self._scale = scale
        self._impute = impute

    def _train(self, task: Task) -> EncodingState:
        X = task.X
        if X.shape[1] == 0:
            raise DataError(f"learner '{self.name}' needs at least one covariate")

        numeric = tuple(str(c) for c in X.columns if pd.api.types.is_numeric_dtype(X[c]))
        categorical = tuple(str(c) for c in X.columns if str(c) not in numeric)
        transformer = self._build_transformer(numeric, categorical)
        transformer.fit(_prepare(X, categorical))
        output_names = tuple(str(c) for c in transformer.get_feature_names_out())

        logger.debug(
            f"{self.name}: {len(numeric)} numeric, {len(categorical)} categorical "
            f"-> {len(output_names)} encoded columns"
        )
        return EncodingState(
            transformer=transformer,
            numeric_features=numeric,
            categorical_features=categorical,
            output_names=output_names,
        )

    def _predict(self, fit: Fit, task: Task) -> pd.DataFrame:
        state: EncodingState = fit.fit_object
        X = task.data[list(fit.covariate_names)]
        result = state.transformer.transform(_prepare(X, state.categorical_features))
        # Ensure we have a dense numpy array
        if sparse.issparse(result):
            values = result.toarray()
        else:
            values = np.asarray(result, dtype=np.float64)
        return pd.DataFrame(values, index=task.data.index, columns=list(state.output_names))

    def _chain(self, fit: Fit, task: Task) -> Task:
        return task.next_in_chain(fit.predict(task), replace=True)

    def _build_transformer(
        self, numeric: tuple[str, ...], categorical: tuple[str, ...]
    ) -> ColumnTransformer:
        """Build the sklearn ColumnTransformer."""
        transformers: list[tuple[str, SklearnPipeline | str, list[str]]] = []

        if numeric:
            steps = []
            if self._impute:
                steps.append(("imputer", SimpleImputer(strategy="median")))
            if self._scale:
                steps.append(("scaler", StandardScaler()))
            transformers.append(
                ("numeric", SklearnPipeline(steps) if steps else "passthrough", list(numeric))
            )

        if categorical:
            steps = []
            if self._impute:
                steps.append(("imputer", SimpleImputer(strategy="most_frequent")))
            steps.append(("encoder", OneHotEncoder(handle_unknown="ignore", sparse_output=False)))
            transformers.append(("categorical", SklearnPipeline(steps), list(categorical)))

        return ColumnTransformer(
            transformers=transformers,
            remainder="drop",
            verbose_feature_names_out=False,
        )


def _prepare(X: pd.DataFrame, categorical: tuple[str, ...]) -> pd.DataFrame:
    """Cast categorical columns to strings so mixed-type columns encode consistently."""
    if not categorical:
        return X
    frame = X.copy()
    for column in categorical:
        missing = frame[column].isnull()
        frame[column] = frame[column].astype(str).where(~missing, np.nan)
    return frame
