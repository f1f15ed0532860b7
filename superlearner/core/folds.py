"""Cross-validation fold generation and validation."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray
from sklearn.model_selection import GroupKFold, KFold, StratifiedKFold

from ..config import FoldKind, FoldScheme
from ..errors import FoldCoverageError


@dataclass(frozen=True)
class Fold:
    """One train/validation split, as positional row indices."""

    index: int
    training: NDArray[np.intp]
    validation: NDArray[np.intp]


def make_folds(
    n_rows: int,
    scheme: FoldScheme,
    outcome: NDArray[Any] | None = None,
    ids: NDArray[Any] | None = None,
) -> tuple[Fold, ...]:
    """Generate folds for a task with `n_rows` rows.

    Args:
        n_rows: Number of rows in the task.
        scheme: Fold recipe.
        outcome: Outcome values, required for stratified folds.
        ids: Cluster ids, required for cluster folds.

    Returns:
        Tuple of folds whose validation sets partition the rows.

    Raises:
        FoldCoverageError: If there are fewer rows (or clusters) than folds.
    """
    n_folds = scheme.n_folds
    rows = np.arange(n_rows)

    if scheme.kind == FoldKind.CLUSTER:
        if ids is None:
            raise FoldCoverageError("cluster folds require id values")
        n_clusters = len(np.unique(ids))
        if n_clusters < n_folds:
            raise FoldCoverageError(f"{n_clusters} clusters cannot fill {n_folds} folds")
        groups = _shuffled_group_codes(ids, scheme)
        splits = GroupKFold(n_splits=n_folds).split(rows, groups=groups)
    elif scheme.kind == FoldKind.STRATIFIED:
        if outcome is None:
            raise FoldCoverageError("stratified folds require outcome values")
        if n_rows < n_folds:
            raise FoldCoverageError(f"{n_rows} rows cannot fill {n_folds} folds")
        splitter = StratifiedKFold(
            n_splits=n_folds,
            shuffle=scheme.shuffle,
            random_state=scheme.random_seed if scheme.shuffle else None,
        )
        splits = splitter.split(rows, outcome)
    else:
        if n_rows < n_folds:
            raise FoldCoverageError(f"{n_rows} rows cannot fill {n_folds} folds")
        splitter = KFold(
            n_splits=n_folds,
            shuffle=scheme.shuffle,
            random_state=scheme.random_seed if scheme.shuffle else None,
        )
        splits = splitter.split(rows)

    return tuple(
        Fold(index=i, training=np.sort(train), validation=np.sort(valid))
        for i, (train, valid) in enumerate(splits)
    )


def folds_from_pairs(
    pairs: Sequence[tuple[Sequence[int], Sequence[int]]],
) -> tuple[Fold, ...]:
    """Build folds from explicit (training, validation) index pairs."""
    return tuple(
        Fold(
            index=i,
            training=np.asarray(train, dtype=np.intp),
            validation=np.asarray(valid, dtype=np.intp),
        )
        for i, (train, valid) in enumerate(pairs)
    )


def validate_folds(folds: Sequence[Fold], n_rows: int) -> None:
    """Check that folds form a proper cross-validation partition.

    Every row must be validated exactly once, and no fold may train on
    one of its own validation rows.

    Raises:
        FoldCoverageError: If the folds do not partition the rows.
    """
    if not folds:
        raise FoldCoverageError("task has no folds")

    counts = np.zeros(n_rows, dtype=np.int64)
    for fold in folds:
        valid = fold.validation
        if len(valid) == 0:
            raise FoldCoverageError(f"fold {fold.index} has an empty validation set")
        if valid.min() < 0 or valid.max() >= n_rows:
            raise FoldCoverageError(f"fold {fold.index} references rows outside 0..{n_rows - 1}")
        if len(fold.training) == 0:
            raise FoldCoverageError(f"fold {fold.index} has an empty training set")
        if np.intersect1d(fold.training, valid).size > 0:
            raise FoldCoverageError(f"fold {fold.index} trains on its own validation rows")
        np.add.at(counts, valid, 1)

    omitted = np.flatnonzero(counts == 0)
    if omitted.size:
        raise FoldCoverageError(
            f"{omitted.size} rows are never validated (first: {omitted[:5].tolist()})"
        )
    repeated = np.flatnonzero(counts > 1)
    if repeated.size:
        raise FoldCoverageError(
            f"{repeated.size} rows are validated more than once (first: {repeated[:5].tolist()})"
        )


def _shuffled_group_codes(ids: NDArray[Any], scheme: FoldScheme) -> NDArray[np.intp]:
    """Map cluster ids to integer codes, randomly relabelled when shuffling.

    GroupKFold assigns clusters deterministically by size, so relabelling
    is what makes the seed matter for equally sized clusters.
    """
    _, codes = np.unique(ids, return_inverse=True)
    if not scheme.shuffle:
        return codes
    rng = np.random.default_rng(scheme.random_seed)
    permutation = rng.permutation(codes.max() + 1)
    return permutation[codes]
