"""Environment-driven defaults for forest training and evaluation."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

type MaxFeatures = int | Literal["sqrt"] | None


class ForestSettings(BaseSettings):
    """Default hyperparameters for `RandomForest` and cross-validation.

    Values are read from environment variables prefixed with `FORESTKIT_`
    (e.g. `FORESTKIT_NUM_TREES=50`) or from a `.env` file in the working
    directory. Explicit constructor arguments always win.

    Attributes:
        num_trees (int): Number of trees grown per forest.
        max_features (MaxFeatures): Size of the random feature subspace drawn
            per tree. `None` uses every feature column, `"sqrt"` uses
            `isqrt(n_features)`, an int uses that many columns.
        holdout_fraction (float): Fraction of the training rows a forest keeps
            aside for its own held-out accuracy estimate. `0.0` disables it.
        cv_folds (int): Default number of cross-validation folds.
        random_seed (int | None): Seed for the forest generator; `None` draws
            fresh OS entropy.
    """

    model_config = SettingsConfigDict(
        env_prefix="FORESTKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    num_trees: int = Field(default=100, ge=1, description="Number of trees grown per forest.")
    max_features: MaxFeatures = Field(
        default=None,
        description='Per-tree feature subspace size: None (all), "sqrt", or a positive int.',
    )
    holdout_fraction: float = Field(
        default=0.0,
        ge=0.0,
        lt=1.0,
        description="Fraction of training rows held out for a built-in accuracy estimate.",
    )
    cv_folds: int = Field(default=5, ge=1, description="Default number of cross-validation folds.")
    random_seed: int | None = Field(default=None, description="Seed for the forest random generator.")

    @field_validator("max_features", mode="after")
    @classmethod
    def _validate_max_features_positive(cls, value: MaxFeatures) -> MaxFeatures:
        """Reject non-positive integer subspace sizes.

        Args:
            value (MaxFeatures): The configured subspace size.

        Returns:
            MaxFeatures: The validated value, unchanged.

        Raises:
            ValueError: If `value` is an int smaller than 1.
        """
        if isinstance(value, int) and value < 1:
            raise ValueError(f"max_features must be a positive int, got {value}")
        return value


@lru_cache(maxsize=1)
def get_settings() -> ForestSettings:
    """Return the process-wide settings, loaded once from the environment.

    Returns:
        ForestSettings: The cached settings instance.
    """
    return ForestSettings()
