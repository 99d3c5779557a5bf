"""Tests for custom exceptions.

This module tests the exception classes raised for malformed datasets, bad
arguments, and unfitted models, ensuring proper inheritance, attribute
storage, and catchability patterns.
"""

from __future__ import annotations

import pytest
from pytest_check import check

from forestkit.exceptions import (
    ColumnsNotFoundError,
    EmptyDatasetError,
    FeatureLengthError,
    InvalidDatasetError,
    InvalidFoldCountError,
    NotFittedError,
    RaggedRowsError,
)


class TestInvalidDatasetErrorHierarchy:
    """Tests for the InvalidDatasetError family."""

    @pytest.mark.parametrize(
        "error",
        [
            EmptyDatasetError("train"),
            RaggedRowsError(expected_length=3, row_lengths={1: 2}),
            ColumnsNotFoundError(missing_columns=["y"], available_columns=["x"]),
        ],
        ids=["empty", "ragged", "columns-not-found"],
    )
    def test_subclasses_catchable_as_base_and_value_error(self, error: InvalidDatasetError) -> None:
        """Every dataset error should be catchable as InvalidDatasetError and ValueError.

        Args:
            error (InvalidDatasetError): A concrete dataset error instance.
        """
        with check:
            assert isinstance(error, InvalidDatasetError)
        with check:
            assert isinstance(error, ValueError)

        with pytest.raises(InvalidDatasetError):
            raise error

    def test_base_stores_reason(self) -> None:
        """The reason should be stored and used as the message."""
        error = InvalidDatasetError("rows must be finite")

        with check:
            assert error.reason == "rows must be finite"
        with check:
            assert str(error) == "rows must be finite"
        with check:
            assert repr(error) == "InvalidDatasetError(reason='rows must be finite')"

    def test_empty_dataset_message_names_operation(self) -> None:
        """EmptyDatasetError should name the operation that received no rows."""
        error = EmptyDatasetError("cross_validate")

        with check:
            assert error.operation == "cross_validate"
        with check:
            assert str(error) == "cross_validate requires at least one row"

    def test_ragged_rows_message_truncates_offenders(self) -> None:
        """Only the first five offenders are shown, but all are stored."""
        row_lengths = {index: 1 for index in range(1, 9)}

        error = RaggedRowsError(expected_length=2, row_lengths=row_lengths)

        with check:
            assert error.row_lengths == row_lengths
        with check:
            assert "6: 1" not in str(error)
        with check:
            assert "RaggedRowsError(expected_length=2" in repr(error)

    def test_columns_not_found_lists_missing(self) -> None:
        """ColumnsNotFoundError should store both column lists and sort the message."""
        error = ColumnsNotFoundError(missing_columns=["z", "a"], available_columns=["b"])

        with check:
            assert error.missing_columns == ["z", "a"]
        with check:
            assert error.available_columns == ["b"]
        with check:
            assert "['a', 'z']" in str(error)


class TestArgumentErrors:
    """Tests for InvalidFoldCountError and FeatureLengthError."""

    def test_invalid_fold_count_stores_values(self) -> None:
        """InvalidFoldCountError should keep k and n_rows and mention both."""
        error = InvalidFoldCountError(k=12, n_rows=10)

        with check:
            assert isinstance(error, ValueError)
        with check:
            assert (error.k, error.n_rows) == (12, 10)
        with check:
            assert "12" in str(error) and "10" in str(error)

    def test_feature_length_error_message(self) -> None:
        """FeatureLengthError should report expected and actual lengths."""
        error = FeatureLengthError(expected=4, actual=3)

        with check:
            assert isinstance(error, ValueError)
        with check:
            assert str(error) == "Expected 4 feature values, got 3"


def test_not_fitted_error_is_runtime_error() -> None:
    """NotFittedError signals invalid state, not a bad argument."""
    error = NotFittedError("DecisionTree has not been trained")

    with check:
        assert isinstance(error, RuntimeError)
    with check:
        assert not isinstance(error, ValueError)
