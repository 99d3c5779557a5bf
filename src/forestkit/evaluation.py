"""Accuracy metrics and k-fold index generation."""

from __future__ import annotations

from collections.abc import Sequence
from typing import NamedTuple

import numpy as np
from pydantic import BaseModel, Field, computed_field

from forestkit.exceptions import EmptyDatasetError, InvalidFoldCountError
from forestkit.seeding import RandomSource, as_generator

# ---------------------------------------------------------------------------
# Public models
# ---------------------------------------------------------------------------


class AccuracyMetrics(BaseModel):
    """Binary confusion counts from one evaluation pass.

    Label `1` (by default) is the positive class and every other label is
    negative, so the counts are only meaningful for two-class problems.

    Attributes:
        true_positives (int): Correct predictions of the positive label.
        true_negatives (int): Correct predictions of any other label.
        false_positives (int): Wrong predictions of the positive label.
        false_negatives (int): Wrong predictions of any other label.

    Examples:
        >>> metrics = AccuracyMetrics(true_positives=3, true_negatives=5, false_positives=1, false_negatives=1)
        >>> metrics.accuracy
        80.0
    """

    true_positives: int = Field(default=0, ge=0, description="Correct predictions of the positive label.")
    true_negatives: int = Field(default=0, ge=0, description="Correct predictions of a non-positive label.")
    false_positives: int = Field(default=0, ge=0, description="Incorrect predictions of the positive label.")
    false_negatives: int = Field(default=0, ge=0, description="Incorrect predictions of a non-positive label.")

    @property
    def total(self) -> int:
        """Number of evaluated rows."""
        return self.true_positives + self.true_negatives + self.false_positives + self.false_negatives

    @computed_field  # type: ignore[prop-decorator]
    @property
    def accuracy(self) -> float:
        """Percentage of correct predictions, `0.0` when nothing was evaluated."""
        if self.total == 0:
            return 0.0
        return 100.0 * (self.true_positives + self.true_negatives) / self.total


class Fold(NamedTuple):
    """Row indices for one cross-validation run.

    Attributes:
        train_indices (np.ndarray): Rows used for training.
        test_indices (np.ndarray): Held-out rows used for scoring.
    """

    train_indices: np.ndarray
    test_indices: np.ndarray


# ---------------------------------------------------------------------------
# Public interface
# ---------------------------------------------------------------------------


def accuracy_score(true_labels: Sequence[int] | np.ndarray, predicted_labels: Sequence[int] | np.ndarray) -> float:
    """Return the fraction of predictions that match the true labels.

    Args:
        true_labels (Sequence[int] | np.ndarray): Expected labels.
        predicted_labels (Sequence[int] | np.ndarray): Predicted labels, same length.

    Returns:
        float: Accuracy in `[0, 1]`.

    Raises:
        EmptyDatasetError: If no labels are given.
        ValueError: If the two sequences differ in length.
    """
    expected, predicted = _as_label_arrays(true_labels, predicted_labels)
    if len(expected) == 0:
        raise EmptyDatasetError("accuracy_score")
    return float(np.count_nonzero(expected == predicted) / len(expected))


def compute_accuracy_metrics(
    true_labels: Sequence[int] | np.ndarray,
    predicted_labels: Sequence[int] | np.ndarray,
    positive_label: int = 1,
) -> AccuracyMetrics:
    """Count binary confusion outcomes.

    Args:
        true_labels (Sequence[int] | np.ndarray): Expected labels.
        predicted_labels (Sequence[int] | np.ndarray): Predicted labels, same length.
        positive_label (int): Label treated as positive. Defaults to `1`.

    Returns:
        AccuracyMetrics: The confusion counts and derived accuracy.

    Raises:
        ValueError: If the two sequences differ in length.
    """
    expected, predicted = _as_label_arrays(true_labels, predicted_labels)
    correct = expected == predicted
    predicted_positive = predicted == positive_label
    return AccuracyMetrics(
        true_positives=int(np.count_nonzero(correct & predicted_positive)),
        true_negatives=int(np.count_nonzero(correct & ~predicted_positive)),
        false_positives=int(np.count_nonzero(~correct & predicted_positive)),
        false_negatives=int(np.count_nonzero(~correct & ~predicted_positive)),
    )


def k_fold_indices(n_rows: int, k: int, rng: RandomSource = None) -> list[Fold]:
    """Shuffle row indices and cut them into `k` contiguous test folds.

    Each fold holds `n_rows // k` rows except the last, which absorbs the
    remainder, so every row is tested exactly once. With `k == 1` the single
    fold trains and tests on every row.

    Args:
        n_rows (int): Number of rows to split.
        k (int): Number of folds, `1 <= k <= n_rows`.
        rng (RandomSource): Seed or generator for the shuffle.

    Returns:
        list[Fold]: `k` folds in order.

    Raises:
        InvalidFoldCountError: If `k` is outside `[1, n_rows]`.
    """
    if not 1 <= k <= n_rows:
        raise InvalidFoldCountError(k=k, n_rows=n_rows)

    shuffled = as_generator(rng).permutation(n_rows)
    if k == 1:
        return [Fold(train_indices=shuffled, test_indices=shuffled)]

    fold_size = n_rows // k
    folds: list[Fold] = []
    for fold_number in range(k):
        start = fold_number * fold_size
        end = n_rows if fold_number == k - 1 else start + fold_size
        train_indices = np.concatenate((shuffled[:start], shuffled[end:]))
        folds.append(Fold(train_indices=train_indices, test_indices=shuffled[start:end]))
    return folds


def _as_label_arrays(
    true_labels: Sequence[int] | np.ndarray,
    predicted_labels: Sequence[int] | np.ndarray,
) -> tuple[np.ndarray, np.ndarray]:
    """Convert two label sequences to equal-length integer arrays.

    Args:
        true_labels (Sequence[int] | np.ndarray): Expected labels.
        predicted_labels (Sequence[int] | np.ndarray): Predicted labels.

    Returns:
        tuple[np.ndarray, np.ndarray]: `(expected, predicted)` int64 arrays.

    Raises:
        ValueError: If the lengths differ.
    """
    expected = np.asarray(true_labels, dtype=np.int64)
    predicted = np.asarray(predicted_labels, dtype=np.int64)
    if expected.shape != predicted.shape:
        raise ValueError(f"Label sequences differ in length: {len(expected)} != {len(predicted)}")
    return expected, predicted
