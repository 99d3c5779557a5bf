"""Tree node variants and rule models for the decision tree module."""

from __future__ import annotations

import operator
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Tree nodes
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class LeafNode:
    """Terminal node carrying the predicted class label.

    Attributes:
        label (int | None): Predicted label. `None` only for the untouched leaf
            of an empty range, which prediction never reaches.
        samples (int): Number of training rows that reached this leaf.
    """

    label: int | None = None
    samples: int = 0


@dataclass(slots=True)
class SplitNode:
    """Internal node routing rows by `value < threshold` on one feature.

    Attributes:
        feature_index (int): Column index the rule tests.
        threshold (float): Rows with `features[feature_index] < threshold` go left.
        impurity (float): Weighted Gini impurity achieved by this split.
        samples (int): Number of training rows that reached this node.
        left (Node): Subtree for rows below the threshold.
        right (Node): Subtree for the remaining rows.
    """

    feature_index: int
    threshold: float
    impurity: float
    samples: int
    left: Node
    right: Node


type Node = LeafNode | SplitNode

# ---------------------------------------------------------------------------
# Rule models
# ---------------------------------------------------------------------------

type PredicateOp = Literal["<", ">="]

_SCALAR_OPS: dict[str, Callable[[Any, Any], bool]] = {
    "<": operator.lt,
    ">=": operator.ge,
}


class Predicate(BaseModel):
    """A single threshold condition on one feature.

    Each split node contributes a `<` predicate to its left branch and a
    `>=` predicate to its right branch.

    Attributes:
        variable (str): Feature name the condition applies to.
        operator (PredicateOp): `"<"` or `">="`.
        value (float): Split threshold.

    Examples:
        >>> p = Predicate(variable="petal_width", operator="<", value=0.8)
        >>> str(p)
        'petal_width < 0.8'
        >>> p.eval(0.2)
        True
    """

    variable: str = Field(description="Feature name the condition applies to, e.g. 'petal_width'.")
    operator: PredicateOp = Field(description="Comparison operator: '<' for left branches, '>=' for right branches.")
    value: float = Field(description="Split threshold the feature value is compared against.")

    def __str__(self) -> str:
        """Return a human-readable representation such as `x0 < 2.5`.

        Returns:
            str: The predicate rendered as `variable operator value`.
        """
        return f"{self.variable} {self.operator} {self.value}"

    def eval(self, x: float) -> bool:
        """Evaluate this predicate against a feature value.

        Args:
            x (float): The feature value to test.

        Returns:
            bool: `True` if the predicate holds for `x`.
        """
        return _SCALAR_OPS[self.operator](x, self.value)


class ClassificationRule(BaseModel):
    """A decision rule describing the path from the root to one leaf.

    Attributes:
        predicates (list[Predicate]): Conditions along the root-to-leaf path.
            Empty for a single-leaf tree.
        prediction (int): Label predicted at the leaf.
        samples (int): Number of training rows that reached the leaf.

    Examples:
        >>> rule = ClassificationRule(
        ...     predicates=[Predicate(variable="x0", operator="<", value=2.5)],
        ...     prediction=1,
        ...     samples=12,
        ... )
        >>> rule.matches([1.0])
        True
    """

    predicates: list[Predicate] = Field(
        description="Predicates along the path from root to this leaf. Empty list indicates a single-leaf tree.",
    )
    prediction: int = Field(description="Class label predicted for rows reaching this leaf.")
    samples: int = Field(ge=0, description="Number of training rows that reached this leaf.")

    def matches(self, features: list[float], feature_names: list[str] | None = None) -> bool:
        """Return whether a feature vector satisfies every predicate of this rule.

        Args:
            features (list[float]): Query feature values.
            feature_names (list[str] | None): Names used when the rule was
                extracted. Defaults to positional names `x0, x1, ...`.

        Returns:
            bool: `True` when all predicates hold.
        """
        names = feature_names if feature_names is not None else default_feature_names(len(features))
        lookup = dict(zip(names, features, strict=True))
        return all(predicate.eval(lookup[predicate.variable]) for predicate in self.predicates)


def default_feature_names(n_features: int) -> list[str]:
    """Return positional feature names `x0 .. x{n-1}`.

    Args:
        n_features (int): Number of feature columns.

    Returns:
        list[str]: The generated names.
    """
    return [f"x{index}" for index in range(n_features)]
