"""forestkit: Bagged decision-tree ensembles with no external ML dependency."""

from loguru import logger

from forestkit.config import ForestSettings, get_settings
from forestkit.decision_tree import DecisionTree
from forestkit.evaluation import AccuracyMetrics, k_fold_indices
from forestkit.forest import RandomForest, cross_validate
from forestkit.logging import PACKAGE_NAME, disable_logging, enable_logging, logging_enabled

logger.disable(PACKAGE_NAME)  # noqa: RUF067 - Disable logging for the forestkit package by default

__all__ = [
    "AccuracyMetrics",
    "DecisionTree",
    "ForestSettings",
    "RandomForest",
    "cross_validate",
    "disable_logging",
    "enable_logging",
    "get_settings",
    "k_fold_indices",
    "logging_enabled",
]
