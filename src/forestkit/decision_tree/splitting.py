"""Gini split search and in-place range partitioning for tree induction."""

from __future__ import annotations

import math
from typing import NamedTuple

import numpy as np
from loguru import logger

# ---------------------------------------------------------------------------
# Public types
# ---------------------------------------------------------------------------


class SplitResult(NamedTuple):
    """Best split found for one feature over one row range.

    Attributes:
        impurity (float): Weighted Gini impurity of the split, or `math.inf`
            when the feature has no two distinct values in range.
        threshold (float): Midpoint between the two distinct values the split
            falls between; `nan` when no split exists.
    """

    impurity: float
    threshold: float

    @property
    def is_usable(self) -> bool:
        """Whether this result describes a real split.

        Returns:
            bool: `False` for the "no usable split" sentinel.
        """
        return math.isfinite(self.impurity)


NO_SPLIT = SplitResult(impurity=math.inf, threshold=math.nan)

# ---------------------------------------------------------------------------
# Public interface -- Impurity
# ---------------------------------------------------------------------------


def gini_impurity(class_counts: np.ndarray) -> float:
    """Compute `1 - sum(p_c^2)` for one group of class counts.

    Args:
        class_counts (np.ndarray): 1-D per-class counts.

    Returns:
        float: Impurity in `[0, 1)`. An empty group is defined as `0.0`.

    Examples:
        >>> gini_impurity(np.array([5, 5]))
        0.5
        >>> gini_impurity(np.array([4, 0]))
        0.0
    """
    total = class_counts.sum()
    if total == 0:
        return 0.0
    proportions = class_counts / total
    return float(1.0 - np.sum(proportions**2))


def weighted_gini(left_counts: np.ndarray, right_counts: np.ndarray) -> np.ndarray:
    """Compute the size-weighted Gini impurity of two-way splits.

    Rows of `left_counts` and `right_counts` describe candidate splits; each
    holds per-class counts for one side.

    Args:
        left_counts (np.ndarray): Shape `(n_candidates, n_classes)`.
        right_counts (np.ndarray): Shape `(n_candidates, n_classes)`.

    Returns:
        np.ndarray: Shape `(n_candidates,)` impurities,
            `(nL * giniL + nR * giniR) / (nL + nR)`.
    """
    left_sizes = left_counts.sum(axis=1)
    right_sizes = right_counts.sum(axis=1)
    left_gini = _side_gini(left_counts, left_sizes)
    right_gini = _side_gini(right_counts, right_sizes)
    total = left_sizes + right_sizes
    return np.divide(
        left_sizes * left_gini + right_sizes * right_gini,
        total,
        out=np.zeros(len(total), dtype=np.float64),
        where=total > 0,
    )


def majority_label(labels: np.ndarray) -> int:
    """Return the most frequent label, breaking ties by the smallest label.

    Args:
        labels (np.ndarray): 1-D non-empty integer labels.

    Returns:
        int: The winning label.

    Examples:
        >>> majority_label(np.array([1, 0, 1, 0]))
        0
    """
    values, counts = np.unique(labels, return_counts=True)
    # np.unique sorts values, and argmax returns the first maximum.
    return int(values[np.argmax(counts)])


# ---------------------------------------------------------------------------
# Public interface -- Split search and partitioning
# ---------------------------------------------------------------------------


def find_best_split(
    features: np.ndarray,
    labels: np.ndarray,
    start: int,
    end: int,
    feature_index: int,
) -> SplitResult:
    """Find the threshold on one feature that minimizes weighted Gini impurity.

    Rows in `[start, end)` are ordered by the feature with a stable argsort,
    then swept once: running left/right class counts are kept for every cut
    position and only cuts between two distinct consecutive values are
    scored. The first minimum in sweep order wins. The caller's arrays are
    not reordered.

    Args:
        features (np.ndarray): Feature matrix, shape `(n_rows, n_features)`.
        labels (np.ndarray): Parallel integer labels, shape `(n_rows,)`.
        start (int): First row of the range (inclusive).
        end (int): End of the range (exclusive).
        feature_index (int): Column to split on.

    Returns:
        SplitResult: The best split, or `NO_SPLIT` when every value in range
            is equal.

    Raises:
        ValueError: If the range is empty.
    """
    if end <= start:
        raise ValueError(f"find_best_split requires a non-empty range, got [{start}, {end})")

    values = features[start:end, feature_index]
    order = np.argsort(values, kind="stable")
    sorted_values = values[order]
    if sorted_values[0] == sorted_values[-1]:
        return NO_SPLIT

    _, codes = np.unique(labels[start:end][order], return_inverse=True)
    one_hot = np.eye(codes.max() + 1, dtype=np.int64)[codes]
    running = np.cumsum(one_hot, axis=0)

    # Cut after position i puts sorted rows [0, i] on the left.
    cut_positions = np.flatnonzero(sorted_values[:-1] != sorted_values[1:])
    left_counts = running[cut_positions]
    right_counts = running[-1] - left_counts
    impurities = weighted_gini(left_counts, right_counts)

    best = int(np.argmin(impurities))
    position = cut_positions[best]
    lower = float(sorted_values[position])
    upper = float(sorted_values[position + 1])
    threshold = (lower + upper) / 2.0
    if threshold <= lower:
        # Adjacent floats: the midpoint rounds down onto `lower`.
        threshold = upper
    return SplitResult(impurity=float(impurities[best]), threshold=threshold)


def partition(
    features: np.ndarray,
    labels: np.ndarray,
    start: int,
    end: int,
    feature_index: int,
    threshold: float,
) -> int:
    """Reorder `[start, end)` in place so rows below the threshold come first.

    Features and labels are permuted together, preserving relative order on
    each side. If every row lands on one side the split point is forced to
    the middle of the range so that both children receive rows.

    Args:
        features (np.ndarray): Feature matrix, reordered in place.
        labels (np.ndarray): Parallel labels, reordered in place.
        start (int): First row of the range (inclusive).
        end (int): End of the range (exclusive).
        feature_index (int): Column tested against `threshold`.
        threshold (float): Rows with `value < threshold` go to the prefix.

    Returns:
        int: Split index `mid`; `[start, mid)` is the left range.
    """
    below = features[start:end, feature_index] < threshold
    order = np.concatenate((np.flatnonzero(below), np.flatnonzero(~below))) + start
    features[start:end] = features[order]
    labels[start:end] = labels[order]

    mid = start + int(below.sum())
    if mid in (start, end):
        forced = start + (end - start) // 2
        logger.debug(
            "Degenerate partition; forcing midpoint",
            feature_index=feature_index,
            threshold=threshold,
            start=start,
            end=end,
            mid=forced,
        )
        mid = forced
    return mid


def _side_gini(counts: np.ndarray, sizes: np.ndarray) -> np.ndarray:
    """Row-wise Gini impurity with empty sides defined as zero.

    Args:
        counts (np.ndarray): Shape `(n_candidates, n_classes)` class counts.
        sizes (np.ndarray): Shape `(n_candidates,)` row sums of `counts`.

    Returns:
        np.ndarray: Shape `(n_candidates,)` impurities.
    """
    safe_sizes = np.where(sizes > 0, sizes, 1)
    proportions = counts / safe_sizes[:, None]
    return np.where(sizes > 0, 1.0 - np.sum(proportions**2, axis=1), 0.0)
