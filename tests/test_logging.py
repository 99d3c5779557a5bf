"""Tests for the records forestkit emits while training and evaluating."""

from __future__ import annotations

import io
from collections.abc import Generator

import loguru
import numpy as np
import pytest
from loguru import logger
from pytest_check import check

from forestkit.decision_tree import DecisionTree, partition
from forestkit.forest import RandomForest, cross_validate
from forestkit.logging import (
    PACKAGE_NAME,
    PROGRESS_LEVEL,
    PROGRESS_LEVEL_NUMBER,
    disable_logging,
    enable_logging,
    logging_enabled,
)

_ROWS = [
    [0.0, 1.0, 0],
    [1.0, 1.5, 0],
    [1.5, 0.5, 0],
    [5.0, 6.0, 1],
    [6.0, 5.5, 1],
    [6.5, 7.0, 1],
]


@pytest.fixture
def records() -> Generator[list[loguru.Record]]:
    """Capture every forestkit record at any level.

    Yields:
        Generator[list[loguru.Record]]: Records in arrival order.
    """
    captured: list[loguru.Record] = []
    handler_id = enable_logging("TRACE", sink=lambda message: captured.append(message.record))
    yield captured
    disable_logging(handler_id)


def _messages(records: list[loguru.Record], message: str) -> list[loguru.Record]:
    return [r for r in records if r["message"] == message]


class TestTrainingRecords:
    """Records emitted by forest training and cross-validation."""

    def test_one_progress_record_per_tree(self, records: list[loguru.Record]) -> None:
        """Each trained tree should produce a numbered PROGRESS record.

        Args:
            records (list[loguru.Record]): Captured forestkit records.
        """
        # Act
        RandomForest(4, rng=0).train(_ROWS)

        # Assert
        tree_records = _messages(records, "Tree trained")
        with check:
            assert [r["extra"]["tree"] for r in tree_records] == [1, 2, 3, 4]
        with check:
            assert all(r["level"].name == PROGRESS_LEVEL for r in tree_records)
        with check:
            assert all(r["level"].no == PROGRESS_LEVEL_NUMBER for r in tree_records)

    def test_training_start_carries_forest_shape(self, records: list[loguru.Record]) -> None:
        """The INFO start record should describe the rows and features used.

        Args:
            records (list[loguru.Record]): Captured forestkit records.
        """
        RandomForest(2, rng=0).train(_ROWS)

        start_records = _messages(records, "Training forest")
        assert len(start_records) == 1
        with check:
            assert start_records[0]["extra"]["train_rows"] == len(_ROWS)
        with check:
            assert start_records[0]["extra"]["n_features"] == 2

    def test_holdout_accuracy_is_logged(self, records: list[loguru.Record]) -> None:
        """A forest with a holdout should log the accuracy it stores.

        Args:
            records (list[loguru.Record]): Captured forestkit records.
        """
        forest = RandomForest(3, holdout_fraction=0.5, rng=1)
        forest.train(_ROWS)

        holdout_records = _messages(records, "Holdout accuracy")
        assert len(holdout_records) == 1
        assert holdout_records[0]["extra"]["accuracy"] == forest.holdout_accuracy

    def test_one_progress_record_per_fold(self, records: list[loguru.Record]) -> None:
        """Each fold should log at PROGRESS, then one INFO summary with the mean.

        Args:
            records (list[loguru.Record]): Captured forestkit records.
        """
        mean_accuracy = cross_validate(_ROWS, k=3, num_trees=2, rng=7)

        fold_records = _messages(records, "Fold evaluated")
        summary_records = _messages(records, "Cross-validation complete")
        with check:
            assert [r["extra"]["fold"] for r in fold_records] == [1, 2, 3]
        with check:
            assert all(r["level"].name == PROGRESS_LEVEL for r in fold_records)
        with check:
            assert np.mean([r["extra"]["accuracy"] for r in fold_records]) == pytest.approx(mean_accuracy)
        with check:
            assert len(summary_records) == 1


class TestTreeBuilderRecords:
    """DEBUG records from the tree builder."""

    def test_forced_midpoint_is_logged(self, records: list[loguru.Record]) -> None:
        """A one-sided partition should log the forced split index.

        Args:
            records (list[loguru.Record]): Captured forestkit records.
        """
        # Arrange - every value is above the threshold
        features = np.array([[1.0], [2.0], [3.0], [4.0]])
        labels = np.array([0, 1, 0, 1])

        # Act
        mid = partition(features, labels, 0, 4, 0, threshold=0.5)

        # Assert
        forced = _messages(records, "Degenerate partition; forcing midpoint")
        with check:
            assert mid == 2
        with check:
            assert len(forced) == 1
        with check:
            assert forced[0]["level"].name == "DEBUG"
        with check:
            assert forced[0]["extra"]["mid"] == 2

    def test_majority_leaf_fallback_is_logged(self, records: list[loguru.Record]) -> None:
        """Identical features with mixed labels should log the majority-leaf fallback.

        Args:
            records (list[loguru.Record]): Captured forestkit records.
        """
        DecisionTree().train([[1.0, 0], [1.0, 1], [1.0, 1]])

        fallback = _messages(records, "No usable split; majority leaf")
        assert len(fallback) == 1
        assert fallback[0]["extra"]["label"] == 1

    def test_tree_summary_is_debug(self, records: list[loguru.Record]) -> None:
        """Per-tree build summaries should stay below the default PROGRESS level.

        Args:
            records (list[loguru.Record]): Captured forestkit records.
        """
        DecisionTree().train(_ROWS)

        summaries = _messages(records, "Decision tree trained")
        assert len(summaries) == 1
        with check:
            assert summaries[0]["level"].name == "DEBUG"
        with check:
            assert summaries[0]["extra"]["leaf_count"] == 2


class TestEnableLogging:
    """Switching forestkit output on and off."""

    def test_silent_by_default(self) -> None:
        """Without enable_logging no forestkit record reaches any sink."""
        # Arrange - a raw sink that does not enable the package
        disable_logging()
        captured: list[loguru.Record] = []
        handler_id = logger.add(lambda message: captured.append(message.record))

        # Act
        try:
            RandomForest(2, rng=0).train(_ROWS)
        finally:
            logger.remove(handler_id)

        # Assert
        assert not [r for r in captured if (r["name"] or "").startswith(PACKAGE_NAME)]

    @pytest.mark.parametrize(
        ("level", "present", "absent"),
        [
            ("PROGRESS", ["Tree trained"], ["Training forest", "Decision tree trained"]),
            ("INFO", ["Tree trained", "Training forest"], ["Decision tree trained"]),
            ("DEBUG", ["Tree trained", "Training forest", "Decision tree trained"], []),
        ],
        ids=["progress", "info", "debug"],
    )
    def test_level_threshold(self, level: str, present: list[str], absent: list[str]) -> None:
        """Only records at or above the level should be rendered.

        Args:
            level (str): Level passed to `logging_enabled`.
            present (list[str]): Messages that must be rendered.
            absent (list[str]): Messages that must not be rendered.
        """
        stream = io.StringIO()

        with logging_enabled(level, sink=stream):  # type: ignore[arg-type]
            RandomForest(2, rng=0).train(_ROWS)

        output = stream.getvalue()
        for message in present:
            with check:
                assert message in output
        for message in absent:
            with check:
                assert message not in output

    def test_show_location_renders_module_and_line(self) -> None:
        """`show_location=True` should prefix records with `module:function:line`."""
        plain, located = io.StringIO(), io.StringIO()

        with logging_enabled(sink=plain):
            RandomForest(1, rng=0).train(_ROWS)
        with logging_enabled(sink=located, show_location=True):
            RandomForest(1, rng=0).train(_ROWS)

        with check:
            assert "forestkit.forest:train:" not in plain.getvalue()
        with check:
            assert "forestkit.forest:train:" in located.getvalue()

    def test_context_exit_silences_package(self) -> None:
        """After the `with` block, records no longer flow, even when it raised."""
        stream = io.StringIO()

        with pytest.raises(RuntimeError, match="interrupted"), logging_enabled(sink=stream):
            raise RuntimeError("interrupted")
        RandomForest(1, rng=0).train(_ROWS)

        assert stream.getvalue() == ""

    def test_handler_ignores_other_modules(self) -> None:
        """The handler should only render forestkit records."""
        stream = io.StringIO()

        with logging_enabled("DEBUG", sink=stream):
            logger.info("unrelated application record")

        assert "unrelated application record" not in stream.getvalue()
