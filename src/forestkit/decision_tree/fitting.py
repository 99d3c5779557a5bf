"""Decision tree induction, prediction, and rule extraction."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import NamedTuple

import numpy as np
from loguru import logger

from forestkit.dataset import Dataset, as_row_matrix, split_features_labels
from forestkit.decision_tree.models import (
    ClassificationRule,
    LeafNode,
    Node,
    Predicate,
    SplitNode,
    default_feature_names,
)
from forestkit.decision_tree.splitting import (
    find_best_split,
    majority_label,
    partition,
)
from forestkit.exceptions import FeatureLengthError, NotFittedError


class _BuildTask(NamedTuple):
    """A pending row range and where to attach the node built for it.

    Attributes:
        parent (SplitNode | None): Node that will own the result; `None` for the root.
        is_left (bool): Whether the result becomes `parent.left`.
        start (int): First row of the range (inclusive).
        end (int): End of the range (exclusive).
    """

    parent: SplitNode | None
    is_left: bool
    start: int
    end: int


class DecisionTree:
    """Binary classification tree grown with Gini splits until every leaf is pure.

    There is no depth limit, minimum leaf size, or pruning: training rows
    are memorized unless two rows share identical features with different
    labels.

    Examples:
        >>> tree = DecisionTree()
        >>> tree.train([[1.0, 0], [2.0, 0], [8.0, 1], [9.0, 1]])
        >>> tree.predict([7.5])
        1
    """

    def __init__(self) -> None:
        """Initialize an untrained tree holding a single unlabeled leaf."""
        self.root: Node = LeafNode()
        self.n_features: int | None = None

    # ------------------------------------------------------------------
    # Training
    # ------------------------------------------------------------------

    def train(self, rows: Dataset, feature_indices: Iterable[int] | None = None) -> None:
        """Grow the tree on labeled rows, replacing any previous state.

        Args:
            rows (Dataset): Equal-length numeric rows with the label last.
            feature_indices (Iterable[int] | None): Candidate feature columns
                for split search, tried in the given order. Defaults to every
                feature column.

        Raises:
            EmptyDatasetError: If `rows` is empty.
            RaggedRowsError: If rows have unequal lengths.
            ValueError: If a candidate feature index is out of range.
        """
        features, labels = split_features_labels(as_row_matrix(rows, operation="DecisionTree.train"))
        n_features = features.shape[1]
        candidates = _resolve_candidate_features(feature_indices, n_features)

        self.n_features = n_features
        self.root = _build_tree(features, labels, candidates)
        logger.debug(
            "Decision tree trained",
            rows=len(labels),
            candidate_features=len(candidates),
            depth=self.depth,
            leaf_count=self.leaf_count,
        )

    # ------------------------------------------------------------------
    # Prediction
    # ------------------------------------------------------------------

    def predict(self, features: Sequence[float]) -> int:
        """Predict the label for one feature vector.

        Args:
            features (Sequence[float]): Feature values, one per trained column.

        Returns:
            int: The label of the leaf the vector routes to.

        Raises:
            NotFittedError: If the tree has not been trained.
            FeatureLengthError: If `features` has the wrong length.
        """
        if self.n_features is None:
            raise NotFittedError("DecisionTree.predict called before train")
        if len(features) != self.n_features:
            raise FeatureLengthError(expected=self.n_features, actual=len(features))

        node = self.root
        while isinstance(node, SplitNode):
            node = node.left if features[node.feature_index] < node.threshold else node.right
        if node.label is None:
            raise NotFittedError("Reached an unlabeled leaf; the tree was not trained on this range")
        return node.label

    def predict_many(self, feature_rows: Iterable[Sequence[float]]) -> list[int]:
        """Predict labels for several feature vectors.

        Args:
            feature_rows (Iterable[Sequence[float]]): Feature vectors.

        Returns:
            list[int]: One predicted label per vector.
        """
        return [self.predict(row) for row in feature_rows]

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def is_fitted(self) -> bool:
        """Whether `train` has completed on this tree."""
        return self.n_features is not None

    @property
    def depth(self) -> int:
        """Number of split levels on the longest root-to-leaf path."""
        deepest = 0
        stack: list[tuple[Node, int]] = [(self.root, 0)]
        while stack:
            node, level = stack.pop()
            if isinstance(node, SplitNode):
                stack.append((node.left, level + 1))
                stack.append((node.right, level + 1))
            else:
                deepest = max(deepest, level)
        return deepest

    @property
    def leaf_count(self) -> int:
        """Number of leaf nodes."""
        return sum(1 for _ in _iter_leaves(self.root))

    def extract_rules(self, feature_names: list[str] | None = None) -> list[ClassificationRule]:
        """Describe every labeled leaf as a rule, left subtree first.

        Args:
            feature_names (list[str] | None): Names for the feature columns.
                Defaults to `x0, x1, ...`.

        Returns:
            list[ClassificationRule]: One rule per labeled leaf.

        Raises:
            NotFittedError: If the tree has not been trained.
            ValueError: If `feature_names` does not match the feature count.
        """
        if self.n_features is None:
            raise NotFittedError("DecisionTree.extract_rules called before train")
        names = feature_names if feature_names is not None else default_feature_names(self.n_features)
        if len(names) != self.n_features:
            raise ValueError(f"Expected {self.n_features} feature names, got {len(names)}")

        rules: list[ClassificationRule] = []
        stack: list[tuple[Node, list[Predicate]]] = [(self.root, [])]
        while stack:
            node, path = stack.pop()
            if isinstance(node, SplitNode):
                variable = names[node.feature_index]
                right_predicate = Predicate(variable=variable, operator=">=", value=node.threshold)
                left_predicate = Predicate(variable=variable, operator="<", value=node.threshold)
                stack.append((node.right, [*path, right_predicate]))
                stack.append((node.left, [*path, left_predicate]))
            elif node.label is not None:
                rules.append(ClassificationRule(predicates=path, prediction=node.label, samples=node.samples))
        return rules


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _resolve_candidate_features(feature_indices: Iterable[int] | None, n_features: int) -> list[int]:
    """Return the candidate feature list, defaulting to every column.

    Args:
        feature_indices (Iterable[int] | None): Requested columns, or `None`.
        n_features (int): Number of feature columns in the data.

    Returns:
        list[int]: Candidate columns in iteration order.

    Raises:
        ValueError: If any requested index lies outside `[0, n_features)`.
    """
    if feature_indices is None:
        return list(range(n_features))
    candidates = [int(index) for index in feature_indices]
    out_of_range = [index for index in candidates if not 0 <= index < n_features]
    if out_of_range:
        raise ValueError(f"Feature indices out of range [0, {n_features}): {out_of_range}")
    return candidates


def _build_tree(features: np.ndarray, labels: np.ndarray, candidates: list[int]) -> Node:
    """Grow a tree over all rows using an explicit work stack.

    `features` and `labels` are reordered in place as ranges are partitioned.

    Args:
        features (np.ndarray): Private feature matrix.
        labels (np.ndarray): Private parallel labels.
        candidates (list[int]): Candidate feature columns.

    Returns:
        Node: The root of the grown tree.
    """
    root: Node = LeafNode()
    stack = [_BuildTask(parent=None, is_left=True, start=0, end=len(labels))]
    while stack:
        task = stack.pop()
        node = _build_node(features, labels, candidates, task.start, task.end)
        if task.parent is None:
            root = node
        elif task.is_left:
            task.parent.left = node
        else:
            task.parent.right = node

        if isinstance(node, SplitNode):
            mid = partition(features, labels, task.start, task.end, node.feature_index, node.threshold)
            stack.append(_BuildTask(parent=node, is_left=False, start=mid, end=task.end))
            stack.append(_BuildTask(parent=node, is_left=True, start=task.start, end=mid))
    return root


def _build_node(
    features: np.ndarray,
    labels: np.ndarray,
    candidates: list[int],
    start: int,
    end: int,
) -> Node:
    """Decide the node for one range: pure leaf, fallback leaf, or split.

    A returned `SplitNode` carries placeholder children that the caller
    replaces once the range is partitioned.

    Args:
        features (np.ndarray): Private feature matrix.
        labels (np.ndarray): Private parallel labels.
        candidates (list[int]): Candidate feature columns.
        start (int): First row of the range (inclusive).
        end (int): End of the range (exclusive).

    Returns:
        Node: The node for `[start, end)`.
    """
    if start >= end:
        logger.debug("Empty range; leaving unlabeled leaf", start=start)
        return LeafNode()

    range_labels = labels[start:end]
    if np.all(range_labels == range_labels[0]):
        return LeafNode(label=int(range_labels[0]), samples=end - start)

    best_feature = -1
    best_impurity = np.inf
    best_threshold = np.nan
    for feature_index in candidates:
        result = find_best_split(features, labels, start, end, feature_index)
        if result.impurity < best_impurity:
            best_feature = feature_index
            best_impurity = result.impurity
            best_threshold = result.threshold

    if best_feature == -1:
        label = majority_label(range_labels)
        logger.debug("No usable split; majority leaf", start=start, end=end, label=label)
        return LeafNode(label=label, samples=end - start)

    return SplitNode(
        feature_index=best_feature,
        threshold=best_threshold,
        impurity=float(best_impurity),
        samples=end - start,
        left=LeafNode(),
        right=LeafNode(),
    )


def _iter_leaves(root: Node) -> Iterable[LeafNode]:
    """Yield every leaf under `root`.

    Args:
        root (Node): Subtree root.

    Yields:
        LeafNode: Each leaf, left subtree first.
    """
    stack: list[Node] = [root]
    while stack:
        node = stack.pop()
        if isinstance(node, SplitNode):
            stack.append(node.right)
            stack.append(node.left)
        else:
            yield node
