"""Unit tests for axis arithmetic."""

import pytest

from parlascope.services.axes import (
    AXES,
    AxisAccumulator,
    AxisScores,
    clamp_score,
    round_half_up,
)


class TestRounding:
    """Tests for round_half_up and clamp_score."""

    def test_halves_round_up(self):
        """0.5 should round to 1, unlike Python's banker's rounding."""
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3
        assert round_half_up(93.75) == 94

    def test_negative_halves_round_towards_positive(self):
        """-0.5 should round to 0 and -2.5 to -2."""
        assert round_half_up(-0.5) == 0
        assert round_half_up(-2.5) == -2
        assert round_half_up(-2.6) == -3

    @pytest.mark.parametrize("value,expected", [
        (150, 100),
        (-250, -100),
        (42, 42),
        (100, 100),
        (-100, -100),
    ])
    def test_clamp(self, value, expected):
        """Scores should be clamped to [-100, 100]."""
        assert clamp_score(value) == expected


class TestAxisScores:
    """Tests for the AxisScores vector."""

    def test_defaults_to_zero(self):
        """A new vector should be zero on every axis."""
        scores = AxisScores()
        assert all(scores[axis] == 0 for axis in AXES)

    def test_unknown_axis_raises(self):
        """Indexing an unknown axis should raise KeyError."""
        with pytest.raises(KeyError):
            AxisScores()["culture"]

    def test_from_mapping_ignores_unknown_keys(self):
        """Unknown keys should be dropped when building from a mapping."""
        scores = AxisScores.from_mapping({"economie": 40, "culture": 10})
        assert scores.economie == 40
        assert "culture" not in scores.to_dict()

    def test_to_dict_lists_eight_axes_in_order(self):
        """to_dict should expose exactly the eight axes."""
        assert tuple(AxisScores().to_dict()) == AXES


class TestAxisAccumulator:
    """Tests for per-axis running averages."""

    def test_average_per_axis(self):
        """Each axis should average over its own contributions."""
        acc = AxisAccumulator()
        acc.add("economie", 20)
        acc.add("economie", -40)
        acc.add("social", 40)

        result = acc.result()
        assert result.economie == -10
        assert result.social == 40
        assert result.ecologie == 0

    def test_unknown_axis_is_ignored(self):
        """Contributions on unknown axes should be rejected."""
        acc = AxisAccumulator()
        assert acc.add("culture", 50) is False
        assert acc.result() == AxisScores()

    def test_result_is_clamped(self):
        """Weighted contributions above 100 should be clamped."""
        acc = AxisAccumulator()
        acc.add("securite", 140)
        assert acc.result().securite == 100

    def test_counts(self):
        """count should report the number of contributions per axis."""
        acc = AxisAccumulator()
        acc.add("europe", 10)
        acc.add("europe", 30)
        assert acc.count("europe") == 2
        assert acc.count("social") == 0
