"""The eight political axes and the running-average arithmetic shared by scorers.

Every axis score lies in [-100, 100]. Negative values point to the
interventionist, redistributive or open end of an axis, positive values to
the liberal, authority or restrictive end (see ``AXIS_POLARITY``).
"""

import math
from dataclasses import asdict, dataclass, fields
from typing import Any, Mapping

AXES: tuple[str, ...] = (
    "economie",
    "social",
    "ecologie",
    "securite",
    "europe",
    "immigration",
    "institutions",
    "international",
)

AXIS_LABELS: dict[str, str] = {
    "economie": "Économie",
    "social": "Social",
    "ecologie": "Écologie",
    "securite": "Sécurité",
    "europe": "Europe",
    "immigration": "Immigration",
    "institutions": "Institutions",
    "international": "International",
}

# (negative end, positive end)
AXIS_POLARITY: dict[str, tuple[str, str]] = {
    "economie": ("interventionniste", "libéral"),
    "social": ("redistribution", "responsabilité"),
    "ecologie": ("transition forte", "pragmatisme"),
    "securite": ("libertés", "autorité"),
    "europe": ("souverainisme", "fédéralisme"),
    "immigration": ("ouverture", "restriction"),
    "institutions": ("réforme", "stabilité"),
    "international": ("multilatéralisme", "indépendance"),
}

SCORE_MIN = -100
SCORE_MAX = 100


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going towards +infinity."""
    return math.floor(value + 0.5)


def clamp_score(value: float) -> int:
    return max(SCORE_MIN, min(SCORE_MAX, int(value)))


@dataclass(frozen=True)
class AxisScores:
    """Score vector over the eight axes."""

    economie: int = 0
    social: int = 0
    ecologie: int = 0
    securite: int = 0
    europe: int = 0
    immigration: int = 0
    institutions: int = 0
    international: int = 0

    def __getitem__(self, axis: str) -> int:
        if axis not in AXES:
            raise KeyError(axis)
        return getattr(self, axis)

    def to_dict(self) -> dict[str, int]:
        return asdict(self)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "AxisScores":
        """Build a vector from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: int(v) for k, v in values.items() if k in known and v is not None})

    @classmethod
    def from_candidate(cls, candidate: Any) -> "AxisScores":
        """Read the ``score_<axis>`` columns of a candidate row."""
        return cls(**{axis: int(getattr(candidate, f"score_{axis}") or 0) for axis in AXES})


class AxisAccumulator:
    """Running sum and contribution count per axis.

    ``result()`` averages each axis over its own contributions, rounds and
    clamps. Axes that received no contribution stay at 0.
    """

    def __init__(self):
        self._sums: dict[str, float] = {axis: 0.0 for axis in AXES}
        self._counts: dict[str, int] = {axis: 0 for axis in AXES}

    def add(self, axis: str, value: float) -> bool:
        """Add one contribution; returns False for unknown axes."""
        if axis not in self._sums:
            return False
        self._sums[axis] += value
        self._counts[axis] += 1
        return True

    def count(self, axis: str) -> int:
        return self._counts.get(axis, 0)

    def result(self) -> AxisScores:
        values = {}
        for axis in AXES:
            if self._counts[axis] > 0:
                values[axis] = clamp_score(round_half_up(self._sums[axis] / self._counts[axis]))
            else:
                values[axis] = 0
        return AxisScores(**values)
