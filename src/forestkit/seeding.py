"""Random generator plumbing shared by sampling, shuffling, and fold assignment."""

from __future__ import annotations

import numpy as np

type RandomSource = int | np.random.Generator | None


def as_generator(rng: RandomSource) -> np.random.Generator:
    """Return a NumPy generator for a seed, an existing generator, or `None`.

    An existing generator is returned as-is so that successive draws share
    its state; an int seeds a new generator; `None` draws fresh OS entropy.

    Args:
        rng (RandomSource): Seed, generator, or `None`.

    Returns:
        np.random.Generator: The generator to draw from.

    Examples:
        >>> gen = np.random.default_rng(0)
        >>> as_generator(gen) is gen
        True
    """
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)
