"""Train a forest on a small churn table with forestkit logging switched on.

forestkit is silent by default. ``logging_enabled()`` turns it on for a
block; at the default ``PROGRESS`` level each trained tree and each
cross-validation fold gets one line, and ``"DEBUG"`` adds the tree
builder's leaf and partition decisions.
"""

import numpy as np
import polars as pl

from forestkit import RandomForest, cross_validate, logging_enabled
from forestkit.dataset import rows_from_dataframe

rng = np.random.default_rng(7)
n_customers = 120
tenure_months = rng.integers(1, 72, size=n_customers)
support_tickets = rng.poisson(3, size=n_customers)
df_customers = pl.DataFrame({
    "tenure_months": tenure_months,
    "support_tickets": support_tickets,
    "churned": ((tenure_months < 12) | (support_tickets > 5)).astype(int),
})
rows = rows_from_dataframe(df_customers, target="churned")

with logging_enabled(show_location=True):
    forest = RandomForest(10, max_features="sqrt", holdout_fraction=0.2, rng=0)
    forest.train(rows)
    print(f"\nHoldout accuracy: {forest.holdout_accuracy:.3f}\n")

    mean_accuracy = cross_validate(rows, k=5, num_trees=10, rng=0)
    print(f"\n5-fold mean accuracy: {mean_accuracy:.3f}\n")

with logging_enabled("DEBUG"):
    RandomForest(2, rng=1).train(rows[:20])
