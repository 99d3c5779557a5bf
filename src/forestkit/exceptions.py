"""Custom exceptions for forestkit.

Dataset validation exceptions (subclass ValueError):
- InvalidDatasetError: Base class for malformed training or evaluation rows.
  Catch this to handle any dataset validation failure.
- EmptyDatasetError: Raised when an operation receives no rows.
- RaggedRowsError: Raised when rows do not all share the same length.
- ColumnsNotFoundError: Raised when requested DataFrame columns do not exist.

Argument exceptions (subclass ValueError):
- InvalidFoldCountError: Raised when a fold count lies outside ``[1, n_rows]``.
- FeatureLengthError: Raised when a query vector has the wrong length.

State exceptions (subclass RuntimeError):
- NotFittedError: Raised when predicting with a model that was never trained.
"""

from __future__ import annotations


class InvalidDatasetError(ValueError):
    """Base exception for malformed datasets.

    Attributes:
        reason (str): Human-readable explanation of what is wrong with the rows.
    """

    reason: str

    def __init__(self, reason: str) -> None:
        """Initialize InvalidDatasetError.

        Args:
            reason (str): Description of the validation failure.
        """
        super().__init__(reason)
        self.reason = reason

    def __repr__(self) -> str:
        """Return detailed representation for debugging.

        Returns:
            str: Representation including the reason.
        """
        return f"{self.__class__.__name__}(reason={self.reason!r})"


class EmptyDatasetError(InvalidDatasetError):
    """Raised when an operation receives an empty dataset.

    Attributes:
        operation (str): Name of the operation that received no rows.

    Examples:
        >>> err = EmptyDatasetError("evaluate")
        >>> str(err)
        'evaluate requires at least one row'
    """

    operation: str

    def __init__(self, operation: str) -> None:
        """Initialize EmptyDatasetError.

        Args:
            operation (str): Name of the operation that received no rows.
        """
        super().__init__(f"{operation} requires at least one row")
        self.operation = operation


class RaggedRowsError(InvalidDatasetError):
    """Raised when dataset rows have unequal lengths.

    Attributes:
        expected_length (int): Length of the first row, which every row must match.
        row_lengths (dict[int, int]): Mapping of offending row index to its length.

    Examples:
        >>> err = RaggedRowsError(expected_length=3, row_lengths={4: 2})
        >>> err.row_lengths
        {4: 2}
    """

    expected_length: int
    row_lengths: dict[int, int]

    def __init__(self, expected_length: int, row_lengths: dict[int, int]) -> None:
        """Initialize RaggedRowsError.

        Args:
            expected_length (int): Length every row must have.
            row_lengths (dict[int, int]): Offending row indices and their lengths.
        """
        shown = dict(list(row_lengths.items())[:5])
        super().__init__(f"All rows must have length {expected_length}; mismatched rows (index: length): {shown}")
        self.expected_length = expected_length
        self.row_lengths = row_lengths

    def __repr__(self) -> str:
        """Return detailed representation for debugging.

        Returns:
            str: Representation including expected length and offenders.
        """
        return (
            f"{self.__class__.__name__}("
            f"expected_length={self.expected_length!r}, row_lengths={self.row_lengths!r})"
        )


class ColumnsNotFoundError(InvalidDatasetError):
    """Raised when requested columns do not exist in a DataFrame.

    Attributes:
        missing_columns (list[str]): Column names that were not found.
        available_columns (list[str]): Column names present in the DataFrame.

    Examples:
        >>> err = ColumnsNotFoundError(
        ...     missing_columns=["label"],
        ...     available_columns=["a", "b", "c"],
        ... )
        >>> err.missing_columns
        ['label']
    """

    missing_columns: list[str]
    available_columns: list[str]

    def __init__(self, missing_columns: list[str], available_columns: list[str]) -> None:
        """Initialize ColumnsNotFoundError.

        Args:
            missing_columns (list[str]): Column names not found in the DataFrame.
            available_columns (list[str]): Column names present in the DataFrame.
        """
        super().__init__(f"Columns not found in DataFrame: {sorted(missing_columns)}")
        self.missing_columns = missing_columns
        self.available_columns = available_columns


class InvalidFoldCountError(ValueError):
    """Raised when a cross-validation fold count is outside ``[1, n_rows]``.

    Attributes:
        k (int): The requested number of folds.
        n_rows (int): Number of rows available for splitting.
    """

    k: int
    n_rows: int

    def __init__(self, k: int, n_rows: int) -> None:
        """Initialize InvalidFoldCountError.

        Args:
            k (int): The requested number of folds.
            n_rows (int): Number of rows available for splitting.
        """
        super().__init__(f"k must be between 1 and the number of rows ({n_rows}), got {k}")
        self.k = k
        self.n_rows = n_rows


class FeatureLengthError(ValueError):
    """Raised when a query feature vector does not match the trained feature count.

    Attributes:
        expected (int): Number of features the model was trained on.
        actual (int): Number of features supplied.
    """

    expected: int
    actual: int

    def __init__(self, expected: int, actual: int) -> None:
        """Initialize FeatureLengthError.

        Args:
            expected (int): Number of features the model was trained on.
            actual (int): Number of features supplied.
        """
        super().__init__(f"Expected {expected} feature values, got {actual}")
        self.expected = expected
        self.actual = actual


class NotFittedError(RuntimeError):
    """Raised when a tree or forest is used for prediction before training."""
