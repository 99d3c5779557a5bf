"""Decision tree sub-package: node models, split search, and fitting."""

from __future__ import annotations

from forestkit.decision_tree.fitting import DecisionTree
from forestkit.decision_tree.models import (
    ClassificationRule,
    LeafNode,
    Node,
    Predicate,
    PredicateOp,
    SplitNode,
)
from forestkit.decision_tree.splitting import (
    NO_SPLIT,
    SplitResult,
    find_best_split,
    gini_impurity,
    majority_label,
    partition,
    weighted_gini,
)

__all__ = [
    "NO_SPLIT",
    "ClassificationRule",
    "DecisionTree",
    "LeafNode",
    "Node",
    "Predicate",
    "PredicateOp",
    "SplitNode",
    "SplitResult",
    "find_best_split",
    "gini_impurity",
    "majority_label",
    "partition",
    "weighted_gini",
]
