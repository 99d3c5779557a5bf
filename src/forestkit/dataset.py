"""Dataset validation, feature/label decomposition, and row splitting.

A dataset is a sequence of equal-length numeric rows whose last element is
the integer class label. Everything in forestkit funnels rows through
`as_row_matrix` so that malformed input fails fast with a typed error
instead of an index error deep inside the tree builder.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import polars as pl

from forestkit.exceptions import (
    ColumnsNotFoundError,
    EmptyDatasetError,
    InvalidDatasetError,
    RaggedRowsError,
)

type Row = Sequence[float]
type Dataset = Sequence[Row] | np.ndarray


# ---------------------------------------------------------------------------
# Public interface -- Validation and decomposition
# ---------------------------------------------------------------------------


def as_row_matrix(rows: Dataset, *, operation: str = "train") -> np.ndarray:
    """Validate rows and return them as a fresh 2-D float matrix.

    Args:
        rows (Dataset): Equal-length numeric rows, label last.
        operation (str): Name of the calling operation, used in error messages.

    Returns:
        np.ndarray: A new `float64` array of shape `(n_rows, row_length)`. The
            caller's rows are never aliased.

    Raises:
        EmptyDatasetError: If `rows` is empty.
        RaggedRowsError: If rows have unequal lengths.
        InvalidDatasetError: If an item is not a row sequence, or rows are
            zero-length or hold non-finite values.
    """
    if len(rows) == 0:
        raise EmptyDatasetError(operation)

    if isinstance(rows, np.ndarray):
        if rows.ndim != 2:
            raise InvalidDatasetError(f"{operation} expects a 2-D array of rows, got {rows.ndim} dimension(s)")
        matrix = np.array(rows, dtype=np.float64, copy=True)
    else:
        non_rows = [
            index
            for index, row in enumerate(rows)
            if isinstance(row, str | bytes) or not isinstance(row, Sequence | np.ndarray)
        ]
        if non_rows:
            raise InvalidDatasetError(
                f"{operation} expects a sequence of rows, got non-sequence items at positions {non_rows[:5]}"
            )
        expected_length = len(rows[0])
        mismatched = {index: len(row) for index, row in enumerate(rows) if len(row) != expected_length}
        if mismatched:
            raise RaggedRowsError(expected_length=expected_length, row_lengths=mismatched)
        matrix = np.array([list(row) for row in rows], dtype=np.float64)

    if matrix.shape[1] == 0:
        raise InvalidDatasetError(f"{operation} requires rows with at least a label column")
    if not np.isfinite(matrix).all():
        raise InvalidDatasetError(f"{operation} requires finite numeric values in every row")
    return matrix


def split_features_labels(row_matrix: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Decompose a validated row matrix into a feature matrix and label vector.

    Labels are truncated toward zero to integers. Both outputs are private
    copies, safe to reorder in place.

    Args:
        row_matrix (np.ndarray): Output of `as_row_matrix`.

    Returns:
        tuple[np.ndarray, np.ndarray]: A 2-tuple of `(features, labels)` with
            shapes `(n_rows, n_features)` and `(n_rows,)`.
    """
    features = np.ascontiguousarray(row_matrix[:, :-1], dtype=np.float64).copy()
    labels = row_matrix[:, -1].astype(np.int64)
    return features, labels


def holdout_split(
    row_matrix: np.ndarray,
    holdout_fraction: float,
    rng: np.random.Generator,
) -> tuple[np.ndarray, np.ndarray]:
    """Shuffle rows and split off a held-out partition.

    The training partition receives `int(n_rows * (1 - holdout_fraction))`
    rows, but never fewer than one.

    Args:
        row_matrix (np.ndarray): Validated rows.
        holdout_fraction (float): Fraction in `[0, 1)` to hold out.
        rng (np.random.Generator): Generator driving the shuffle.

    Returns:
        tuple[np.ndarray, np.ndarray]: A 2-tuple of `(train_rows, holdout_rows)`;
            `holdout_rows` may be empty.

    Raises:
        ValueError: If `holdout_fraction` is outside `[0, 1)`.
    """
    if not 0.0 <= holdout_fraction < 1.0:
        raise ValueError(f"holdout_fraction must be in [0, 1), got {holdout_fraction}")
    n_rows = len(row_matrix)
    order = rng.permutation(n_rows)
    split_index = max(1, int(n_rows * (1.0 - holdout_fraction)))
    return row_matrix[order[:split_index]], row_matrix[order[split_index:]]


# ---------------------------------------------------------------------------
# Public interface -- Polars ingestion
# ---------------------------------------------------------------------------


def rows_from_dataframe(
    df: pl.DataFrame,
    target: str,
    features: list[str] | None = None,
) -> np.ndarray:
    """Convert a numeric Polars DataFrame into rows with the target last.

    Args:
        df (pl.DataFrame): Source data. Feature and target columns must be
            numeric (or boolean) and contain no nulls.
        target (str): Name of the integer class label column.
        features (list[str] | None): Feature columns in the order they should
            appear in each row. Defaults to every column except `target`, in
            DataFrame order.

    Returns:
        np.ndarray: Validated row matrix of shape `(height, len(features) + 1)`.

    Raises:
        ColumnsNotFoundError: If `target` or any requested feature is missing.
        InvalidDatasetError: If a selected column is non-numeric or contains nulls.

    Examples:
        >>> df = pl.DataFrame({"x": [0.5, 2.0], "label": [0, 1]})
        >>> rows_from_dataframe(df, "label").tolist()
        [[0.5, 0.0], [2.0, 1.0]]
    """
    feature_columns = features if features is not None else [col for col in df.columns if col != target]
    selected = [*feature_columns, target]
    missing_columns = [col for col in selected if col not in df.columns]
    if missing_columns:
        raise ColumnsNotFoundError(missing_columns=missing_columns, available_columns=list(df.columns))

    frame = df.select(selected)
    non_numeric = [
        name for name, dtype in frame.schema.items() if not (dtype.is_numeric() or dtype == pl.Boolean)
    ]
    if non_numeric:
        raise InvalidDatasetError(f"Columns must be numeric, got non-numeric columns: {non_numeric}")
    null_columns = [name for name in frame.columns if frame[name].null_count() > 0]
    if null_columns:
        raise InvalidDatasetError(f"Columns must not contain nulls: {null_columns}")

    return as_row_matrix(frame.cast(pl.Float64).to_numpy(), operation="rows_from_dataframe")
