"""Bagged ensemble of decision trees with majority voting and cross-validation."""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np
from loguru import logger

from forestkit.config import ForestSettings, MaxFeatures, get_settings
from forestkit.dataset import Dataset, as_row_matrix, holdout_split, split_features_labels
from forestkit.decision_tree import DecisionTree, majority_label
from forestkit.evaluation import AccuracyMetrics, accuracy_score, compute_accuracy_metrics, k_fold_indices
from forestkit.exceptions import FeatureLengthError, NotFittedError
from forestkit.logging import PROGRESS_LEVEL
from forestkit.seeding import RandomSource, as_generator


class RandomForest:
    """A fixed-size collection of decision trees trained on bootstrap samples.

    Each tree sees `n` rows drawn with replacement from the `n` training
    rows. By default every tree considers every feature column; set
    `max_features` to give each tree its own random feature subspace.
    Prediction is a majority vote with ties going to the smallest label.

    Attributes:
        num_trees (int): Number of trees in the forest.
        max_features (MaxFeatures): Per-tree feature subspace size, or `None`
            for all features.
        holdout_fraction (float): Fraction of rows `train` keeps aside to
            compute `holdout_accuracy`. `0.0` trains on every row.
        trees (list[DecisionTree]): The member trees.
        n_features (int | None): Feature count seen by `train`; `None` before.
        holdout_accuracy (float | None): Accuracy on the internal holdout from
            the last `train`, or `None` when no rows were held out.

    Examples:
        >>> forest = RandomForest(5, rng=0)
        >>> forest.train([[0.0, 0], [1.0, 0], [5.0, 1], [6.0, 1]])
        >>> forest.predict([5.5])  # doctest: +SKIP
        1
    """

    def __init__(
        self,
        num_trees: int,
        *,
        max_features: MaxFeatures = None,
        holdout_fraction: float = 0.0,
        rng: RandomSource = None,
    ) -> None:
        """Initialize an untrained forest.

        Args:
            num_trees (int): Number of trees, at least 1.
            max_features (MaxFeatures): `None` for all features, `"sqrt"` for
                `isqrt(n_features)`, or a positive int.
            holdout_fraction (float): Fraction in `[0, 1)` of rows held out
                during `train` for a built-in accuracy estimate.
            rng (RandomSource): Seed or generator for every random draw the
                forest makes.

        Raises:
            ValueError: If `num_trees` is not positive, `max_features` is not
                `None`, `"sqrt"`, or a positive int, or `holdout_fraction` is
                outside `[0, 1)`.
        """
        if num_trees < 1:
            raise ValueError(f"num_trees must be a positive integer, got {num_trees}")
        _check_max_features(max_features)
        if not 0.0 <= holdout_fraction < 1.0:
            raise ValueError(f"holdout_fraction must be in [0, 1), got {holdout_fraction}")

        self.num_trees = num_trees
        self.max_features = max_features
        self.holdout_fraction = holdout_fraction
        self.trees = [DecisionTree() for _ in range(num_trees)]
        self.n_features: int | None = None
        self.holdout_accuracy: float | None = None
        self._rng = as_generator(rng)

    @classmethod
    def from_settings(cls, settings: ForestSettings | None = None) -> RandomForest:
        """Build a forest from `ForestSettings`.

        Args:
            settings (ForestSettings | None): Settings to use. Defaults to the
                environment-loaded settings from `get_settings()`.

        Returns:
            RandomForest: An untrained forest.
        """
        settings = settings if settings is not None else get_settings()
        return cls(
            settings.num_trees,
            max_features=settings.max_features,
            holdout_fraction=settings.holdout_fraction,
            rng=settings.random_seed,
        )

    # ------------------------------------------------------------------
    # Training
    # ------------------------------------------------------------------

    def train(self, data: Dataset) -> None:
        """Train every tree from scratch on its own bootstrap sample.

        Args:
            data (Dataset): Equal-length numeric rows with the label last.

        Raises:
            EmptyDatasetError: If `data` is empty.
            RaggedRowsError: If rows have unequal lengths.
        """
        row_matrix = as_row_matrix(data, operation="RandomForest.train")
        if self.holdout_fraction > 0.0:
            train_rows, holdout_rows = holdout_split(row_matrix, self.holdout_fraction, self._rng)
        else:
            train_rows, holdout_rows = row_matrix, row_matrix[:0]

        n_rows = len(train_rows)
        n_features = row_matrix.shape[1] - 1
        logger.info(
            "Training forest",
            num_trees=self.num_trees,
            train_rows=n_rows,
            holdout_rows=len(holdout_rows),
            n_features=n_features,
        )

        self.trees = []
        for tree_number in range(1, self.num_trees + 1):
            sample = train_rows[bootstrap_indices(n_rows, self._rng)]
            feature_indices = draw_feature_subset(n_features, self.max_features, self._rng)
            tree = DecisionTree()
            tree.train(sample, feature_indices=feature_indices)
            self.trees.append(tree)
            logger.log(
                PROGRESS_LEVEL,
                "Tree trained",
                tree=tree_number,
                num_trees=self.num_trees,
                depth=tree.depth,
                leaf_count=tree.leaf_count,
            )
        self.n_features = n_features

        self.holdout_accuracy = self.evaluate(holdout_rows) if len(holdout_rows) > 0 else None
        if self.holdout_accuracy is not None:
            logger.info("Holdout accuracy", accuracy=self.holdout_accuracy, holdout_rows=len(holdout_rows))

    # ------------------------------------------------------------------
    # Prediction and evaluation
    # ------------------------------------------------------------------

    def predict(self, features: Sequence[float]) -> int:
        """Predict a label by majority vote across trees.

        Args:
            features (Sequence[float]): One value per feature column.

        Returns:
            int: The label with the most votes; ties go to the smallest label.

        Raises:
            NotFittedError: If the forest has not been trained.
            FeatureLengthError: If `features` has the wrong length.
        """
        if self.n_features is None:
            raise NotFittedError("RandomForest.predict called before train")
        if len(features) != self.n_features:
            raise FeatureLengthError(expected=self.n_features, actual=len(features))
        votes = np.array([tree.predict(features) for tree in self.trees], dtype=np.int64)
        return majority_label(votes)

    def predict_many(self, feature_rows: Sequence[Sequence[float]] | np.ndarray) -> list[int]:
        """Predict labels for several feature vectors.

        Args:
            feature_rows (Sequence[Sequence[float]] | np.ndarray): Feature vectors.

        Returns:
            list[int]: One predicted label per vector.
        """
        return [self.predict(row) for row in feature_rows]

    def evaluate(self, test: Dataset) -> float:
        """Return the fraction of test rows whose label is predicted exactly.

        Args:
            test (Dataset): Labeled rows, label last.

        Returns:
            float: Accuracy in `[0, 1]`.

        Raises:
            EmptyDatasetError: If `test` is empty.
        """
        features, labels = split_features_labels(as_row_matrix(test, operation="RandomForest.evaluate"))
        return accuracy_score(labels, self.predict_many(features))

    def evaluate_accuracy(self, test: Dataset, positive_label: int = 1) -> AccuracyMetrics:
        """Count binary confusion outcomes on labeled test rows.

        Args:
            test (Dataset): Labeled rows, label last.
            positive_label (int): Label treated as positive; every other label
                is negative. Defaults to `1`.

        Returns:
            AccuracyMetrics: Confusion counts and accuracy percentage.

        Raises:
            EmptyDatasetError: If `test` is empty.
        """
        features, labels = split_features_labels(as_row_matrix(test, operation="RandomForest.evaluate_accuracy"))
        return compute_accuracy_metrics(labels, self.predict_many(features), positive_label=positive_label)

    def k_fold_cross_validation(self, data: Dataset, k: int | None = None) -> float:
        """Estimate accuracy with k-fold cross-validation using fresh forests.

        This forest's own trees are left untouched; each fold trains a new
        forest with the same configuration.

        Args:
            data (Dataset): Labeled rows, label last.
            k (int | None): Number of folds. Defaults to `ForestSettings.cv_folds`.

        Returns:
            float: Mean held-out accuracy across folds, in `[0, 1]`.
        """
        return cross_validate(
            data,
            k,
            num_trees=self.num_trees,
            max_features=self.max_features,
            rng=self._rng,
        )


# ---------------------------------------------------------------------------
# Public interface -- Cross-validation
# ---------------------------------------------------------------------------


def cross_validate(
    data: Dataset,
    k: int | None = None,
    *,
    num_trees: int | None = None,
    max_features: MaxFeatures = None,
    rng: RandomSource = None,
) -> float:
    """Train one forest per fold and average the held-out accuracies.

    Args:
        data (Dataset): Labeled rows, label last.
        k (int | None): Number of folds, `1 <= k <= len(data)`. Defaults to
            `ForestSettings.cv_folds`.
        num_trees (int | None): Trees per fold forest. Defaults to
            `ForestSettings.num_trees`.
        max_features (MaxFeatures): Per-tree feature subspace size.
        rng (RandomSource): Seed or generator; drives the fold shuffle and
            seeds an independent child generator for each fold.

    Returns:
        float: Arithmetic mean accuracy in `[0, 1]`.

    Raises:
        EmptyDatasetError: If `data` is empty.
        InvalidFoldCountError: If `k` is outside `[1, len(data)]`.
        ValueError: If `max_features` is not `None`, `"sqrt"`, or a positive int.
    """
    _check_max_features(max_features)
    if k is None or num_trees is None:
        settings = get_settings()
        k = k if k is not None else settings.cv_folds
        num_trees = num_trees if num_trees is not None else settings.num_trees

    row_matrix = as_row_matrix(data, operation="cross_validate")
    generator = as_generator(rng)
    folds = k_fold_indices(len(row_matrix), k, generator)

    scores: list[float] = []
    for fold_number, (fold, fold_rng) in enumerate(zip(folds, generator.spawn(len(folds)), strict=True), start=1):
        model = RandomForest(num_trees, max_features=max_features, rng=fold_rng)
        model.train(row_matrix[fold.train_indices])
        score = model.evaluate(row_matrix[fold.test_indices])
        scores.append(score)
        logger.log(PROGRESS_LEVEL, "Fold evaluated", fold=fold_number, k=k, accuracy=score)

    mean_score = float(np.mean(scores))
    logger.info("Cross-validation complete", k=k, mean_accuracy=mean_score)
    return mean_score


# ---------------------------------------------------------------------------
# Public interface -- Sampling helpers
# ---------------------------------------------------------------------------


def bootstrap_indices(n_rows: int, rng: np.random.Generator) -> np.ndarray:
    """Draw `n_rows` indices uniformly with replacement from `[0, n_rows)`.

    Args:
        n_rows (int): Size of the population and of the sample.
        rng (np.random.Generator): Generator to draw from.

    Returns:
        np.ndarray: Integer indices of shape `(n_rows,)`.
    """
    return rng.integers(0, n_rows, size=n_rows)


def draw_feature_subset(n_features: int, max_features: MaxFeatures, rng: np.random.Generator) -> list[int] | None:
    """Draw a sorted random feature subspace for one tree.

    Args:
        n_features (int): Number of feature columns.
        max_features (MaxFeatures): `None` for all features (no draw),
            `"sqrt"` for `max(1, isqrt(n_features))`, or an int clamped to
            `[1, n_features]`.
        rng (np.random.Generator): Generator to draw from.

    Returns:
        list[int] | None: Sorted column indices, or `None` meaning every column.
    """
    if max_features is None:
        return None
    if n_features == 0:
        return []
    size = max(1, math.isqrt(n_features)) if max_features == "sqrt" else min(max(1, max_features), n_features)
    return sorted(int(index) for index in rng.choice(n_features, size=size, replace=False))


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _check_max_features(max_features: MaxFeatures) -> None:
    """Reject subspace sizes other than `None`, `"sqrt"`, or a positive int.

    Args:
        max_features (MaxFeatures): Requested subspace size.

    Raises:
        ValueError: If `max_features` is a bool, a non-positive int, or any
            other value.
    """
    if max_features is None or max_features == "sqrt":
        return
    if isinstance(max_features, bool) or not isinstance(max_features, int) or max_features < 1:
        raise ValueError(f'max_features must be None, "sqrt", or a positive int, got {max_features!r}')
