"""Task: an immutable bundle of data, schema and folds.

A Task is created once per analysis and never mutated. Every derivation
(row subsets, chained covariates) returns a new Task, so tasks can be shared
freely between parallel workers.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from ..config import FoldKind, FoldScheme, OutcomeType
from ..errors import ChainError, InvalidTaskError
from .folds import Fold, folds_from_pairs, make_folds


@dataclass(frozen=True, eq=False)
class Task:
    """Data plus covariate/outcome schema and cross-validation folds.

    Use Task.create() rather than the constructor; it validates the schema
    and generates folds.
    """

    data: pd.DataFrame
    covariate_names: tuple[str, ...]
    outcome_name: str
    outcome_type: OutcomeType
    folds: tuple[Fold, ...]
    fold_scheme: FoldScheme | None = None
    weights: NDArray[np.float64] | None = None
    ids: NDArray[Any] | None = None
    outcome_levels: tuple[Any, ...] | None = None

    @classmethod
    def create(
        cls,
        data: pd.DataFrame,
        covariates: Sequence[str],
        outcome: str,
        outcome_type: OutcomeType | str | None = None,
        folds: FoldScheme | Sequence[tuple[Sequence[int], Sequence[int]]] | None = None,
        weights: str | Sequence[float] | NDArray[Any] | None = None,
        id_column: str | None = None,
    ) -> Task:
        """Create a validated task.

        Args:
            data: Table of rows by named columns.
            covariates: Covariate column names, in order.
            outcome: Outcome column name.
            outcome_type: Outcome type; inferred from the outcome when None.
            folds: A FoldScheme (default: 10-fold), or explicit (train, validation) pairs.
            weights: Per-row weights, or the name of a weights column.
            id_column: Column of cluster ids, used by cluster folds.

        Returns:
            A new Task.

        Raises:
            InvalidTaskError: If columns are missing or values are invalid.
        """
        columns = [str(c) for c in data.columns]
        covariate_names = tuple(str(c) for c in covariates)

        missing = [c for c in covariate_names if c not in columns]
        if missing:
            raise InvalidTaskError(f"covariates not found in data: {missing}")
        if len(set(covariate_names)) != len(covariate_names):
            raise InvalidTaskError("covariate names must be unique")
        if outcome not in columns:
            raise InvalidTaskError(f"outcome '{outcome}' not found. Available columns: {columns}")
        if outcome in covariate_names:
            raise InvalidTaskError(f"outcome '{outcome}' cannot also be a covariate")
        if len(data) == 0:
            raise InvalidTaskError("data has no rows")

        frame = data.reset_index(drop=True).copy()
        frame.columns = columns
        y = frame[outcome]
        if y.isnull().any():
            raise InvalidTaskError(f"outcome '{outcome}' contains missing values")

        if outcome_type is None:
            resolved_type = OutcomeType.infer(y)
        else:
            resolved_type = OutcomeType(outcome_type)

        levels: tuple[Any, ...] | None = None
        if resolved_type != OutcomeType.CONTINUOUS:
            levels = tuple(sorted(pd.unique(y).tolist()))
            if resolved_type == OutcomeType.BINARY and len(levels) != 2:
                raise InvalidTaskError(
                    f"binary outcome must have exactly 2 levels, found {len(levels)}"
                )
        elif not pd.api.types.is_numeric_dtype(y):
            raise InvalidTaskError(f"continuous outcome '{outcome}' must be numeric")

        weight_values = _resolve_weights(frame, weights)
        ids = None
        if id_column is not None:
            if id_column not in columns:
                raise InvalidTaskError(f"id column '{id_column}' not found")
            ids = frame[id_column].to_numpy()

        scheme: FoldScheme | None
        if folds is None or isinstance(folds, FoldScheme):
            scheme = folds or FoldScheme(
                kind=FoldKind.CLUSTER if ids is not None else FoldKind.VFOLD
            )
            fold_tuple = make_folds(len(frame), scheme, outcome=y.to_numpy(), ids=ids)
        else:
            scheme = None
            fold_tuple = folds_from_pairs(folds)

        return cls(
            data=frame,
            covariate_names=covariate_names,
            outcome_name=outcome,
            outcome_type=resolved_type,
            folds=fold_tuple,
            fold_scheme=scheme,
            weights=weight_values,
            ids=ids,
            outcome_levels=levels,
        )

    @property
    def n_rows(self) -> int:
        """Number of rows in the task."""
        return len(self.data)

    @property
    def X(self) -> pd.DataFrame:
        """Covariate columns, in covariate order."""
        return self.data[list(self.covariate_names)]

    @property
    def y(self) -> pd.Series:
        """Outcome column."""
        return self.data[self.outcome_name]

    def encoded_outcome(self) -> NDArray[np.int64]:
        """Outcome as integer codes into outcome_levels.

        Raises:
            InvalidTaskError: If the outcome is continuous.
        """
        if self.outcome_levels is None:
            raise InvalidTaskError("continuous outcomes have no levels to encode")
        lookup = {level: code for code, level in enumerate(self.outcome_levels)}
        return np.array([lookup[v] for v in self.y.tolist()], dtype=np.int64)

    def numeric_outcome(self) -> NDArray[np.float64]:
        """Outcome as floats; binary outcomes become 0/1 indicators of the second level."""
        if self.outcome_type == OutcomeType.CONTINUOUS:
            return self.y.to_numpy(dtype=np.float64)
        if self.outcome_type == OutcomeType.BINARY:
            return self.encoded_outcome().astype(np.float64)
        raise InvalidTaskError("categorical outcomes have no numeric form")

    def subset(self, rows: Sequence[int] | NDArray[np.intp]) -> Task:
        """Return a task over the given positional rows.

        Outcome levels are inherited so predictions stay aligned with the
        parent task. Folds are regenerated for the subset from the same
        scheme, or reduced to a plain V-fold split when the parent used
        explicit folds.
        """
        positions = np.asarray(rows, dtype=np.intp)
        frame = self.data.iloc[positions].reset_index(drop=True)
        weights = self.weights[positions] if self.weights is not None else None
        ids = self.ids[positions] if self.ids is not None else None
        scheme = self.fold_scheme or FoldScheme(n_folds=min(len(self.folds), 10))
        n_folds = scheme.n_folds
        if ids is not None and scheme.kind == FoldKind.CLUSTER:
            n_folds = min(n_folds, len(np.unique(ids)))
        n_folds = min(n_folds, len(frame))

        if n_folds >= 2:
            scheme = FoldScheme(
                kind=scheme.kind,
                n_folds=n_folds,
                shuffle=scheme.shuffle,
                random_seed=scheme.random_seed,
            )
            outcome = frame[self.outcome_name].to_numpy()
            _, level_counts = np.unique(outcome, return_counts=True)
            if scheme.kind == FoldKind.STRATIFIED and level_counts.min() < n_folds:
                # Too few rows of some level to stratify this subset
                scheme = FoldScheme(
                    kind=FoldKind.VFOLD,
                    n_folds=n_folds,
                    shuffle=scheme.shuffle,
                    random_seed=scheme.random_seed,
                )
            folds = make_folds(len(frame), scheme, outcome=outcome, ids=ids)
        else:
            folds = ()

        return Task(
            data=frame,
            covariate_names=self.covariate_names,
            outcome_name=self.outcome_name,
            outcome_type=self.outcome_type,
            folds=folds,
            fold_scheme=scheme,
            weights=weights,
            ids=ids,
            outcome_levels=self.outcome_levels,
        )

    def next_in_chain(
        self,
        columns: pd.DataFrame | None = None,
        covariates: Sequence[str] | None = None,
        replace: bool = True,
    ) -> Task:
        """Derive the task handed to the next learner in a chain.

        Args:
            columns: New columns to add to the data (row-aligned with this task).
            covariates: Explicit covariate list for the new task. Defaults to the
                new columns (replace) or the current covariates plus the new
                columns (append).
            replace: Whether new columns replace the current covariates.

        Returns:
            A new Task sharing rows, outcome and folds with this one.

        Raises:
            ChainError: If a new column would overwrite the outcome or rows misalign.
        """
        frame = self.data
        new_names: list[str] = []
        if columns is not None:
            if len(columns) != self.n_rows:
                raise ChainError(0, f"chained columns have {len(columns)} rows, task has {self.n_rows}")
            new_names = [str(c) for c in columns.columns]
            if self.outcome_name in new_names:
                raise ChainError(0, f"chained column would overwrite outcome '{self.outcome_name}'")
            frame = frame.copy()
            for name, column in zip(new_names, columns.columns):
                frame[name] = columns[column].to_numpy()

        if covariates is not None:
            names = tuple(str(c) for c in covariates)
        elif columns is None:
            names = self.covariate_names
        elif replace:
            names = tuple(new_names)
        else:
            names = self.covariate_names + tuple(c for c in new_names if c not in self.covariate_names)

        missing = [c for c in names if c not in frame.columns]
        if missing:
            raise ChainError(0, f"chained covariates not found in data: {missing}")

        return Task(
            data=frame,
            covariate_names=names,
            outcome_name=self.outcome_name,
            outcome_type=self.outcome_type,
            folds=self.folds,
            fold_scheme=self.fold_scheme,
            weights=self.weights,
            ids=self.ids,
            outcome_levels=self.outcome_levels,
        )

    def like(self, data: pd.DataFrame) -> Task:
        """Create a task over new rows with this task's schema, for prediction.

        The outcome column may be absent; it is then filled with a placeholder
        value. The new task has no folds.

        Raises:
            InvalidTaskError: If a covariate is missing from the data.
        """
        frame = data.reset_index(drop=True).copy()
        frame.columns = [str(c) for c in frame.columns]
        missing = [c for c in self.covariate_names if c not in frame.columns]
        if missing:
            raise InvalidTaskError(f"covariates not found in data: {missing}")
        if self.outcome_name not in frame.columns:
            frame[self.outcome_name] = self.outcome_levels[0] if self.outcome_levels else 0.0

        return Task(
            data=frame,
            covariate_names=self.covariate_names,
            outcome_name=self.outcome_name,
            outcome_type=self.outcome_type,
            folds=(),
            outcome_levels=self.outcome_levels,
        )

    def shares_rows_with(self, other: Task) -> bool:
        """Whether both tasks are views over the same data table."""
        return self is other or self.data is other.data

    def with_covariates(self, covariates: Sequence[str]) -> Task:
        """Return a task with a different covariate selection over the same data."""
        return self.next_in_chain(covariates=covariates)

    def __repr__(self) -> str:
        return (
            f"Task(n_rows={self.n_rows}, covariates={list(self.covariate_names)}, "
            f"outcome='{self.outcome_name}', outcome_type={self.outcome_type.value}, "
            f"n_folds={len(self.folds)})"
        )


def _resolve_weights(
    frame: pd.DataFrame,
    weights: str | Sequence[float] | NDArray[Any] | None,
) -> NDArray[np.float64] | None:
    """Turn a weights argument into a validated float array."""
    if weights is None:
        return None
    if isinstance(weights, str):
        if weights not in frame.columns:
            raise InvalidTaskError(f"weights column '{weights}' not found")
        values = frame[weights].to_numpy(dtype=np.float64)
    else:
        values = np.asarray(weights, dtype=np.float64)
    if values.shape != (len(frame),):
        raise InvalidTaskError(f"expected {len(frame)} weights, got shape {values.shape}")
    if np.isnan(values).any() or (values < 0).any():
        raise InvalidTaskError("weights must be non-negative numbers")
    return values
