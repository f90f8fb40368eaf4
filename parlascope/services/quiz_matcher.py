"""Citizen quiz scoring and candidate matching.

Answers are turned into the same eight-axis vector used for candidates,
plus a priority weight per axis taken from ranking questions. A candidate's
match score is a priority-weighted mean distance turned into a similarity
percentage.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from parlascope.models import QuestionType
from parlascope.services.axes import AXES, AxisAccumulator, AxisScores, round_half_up

DEFAULT_PRIORITY = 3
MAX_PRIORITY = 5
DEFAULT_CITATION_SCORE = 100

SLIDER_MIN = 0
SLIDER_MAX = 100
DILEMMA_CHOICES = ("A", "B", "skip")
CITATION_CHOICES = ("yes", "no", "skip")
# Ranked axes get priorities 5 down to 1
MAX_RANKED_AXES = MAX_PRIORITY

# Largest possible distance between two scores on one axis
MAX_DISTANCE = 200

STRENGTH_THRESHOLD = 75
DIVERGENCE_THRESHOLD = 45

UNCLASSIFIABLE = "Inclassable"


@dataclass(frozen=True)
class AnsweredQuestion:
    """Answer value paired with the scoring parameters of its question."""

    type: str
    axis_weights: Mapping[str, float]
    value: Mapping[str, Any]
    citation_score: Optional[float] = None


@dataclass
class UserProfile:
    scores: AxisScores
    priorities: dict[str, int]


@dataclass
class CandidateMatch:
    candidate_id: int
    match_score: int
    axis_similarity: dict[str, int]
    strengths: list[str] = field(default_factory=list)
    divergences: list[str] = field(default_factory=list)


def answer_error(question_type: str, value: Mapping[str, Any]) -> Optional[str]:
    """Why ``value`` is not a valid answer to a question of this type, or None."""
    if question_type == QuestionType.SLIDER.value:
        slider = value.get("value")
        if isinstance(slider, bool) or not isinstance(slider, int):
            return "Slider answers need an integer value"
        if not SLIDER_MIN <= slider <= SLIDER_MAX:
            return f"Slider value must be between {SLIDER_MIN} and {SLIDER_MAX}"
        return None

    if question_type == QuestionType.DILEMMA.value:
        if value.get("choice") not in DILEMMA_CHOICES:
            return "Dilemma answers need a choice of A, B or skip"
        return None

    if question_type == QuestionType.CITATION.value:
        if value.get("agree") not in CITATION_CHOICES:
            return "Citation answers need agree set to yes, no or skip"
        return None

    if question_type == QuestionType.RANKING.value:
        order = value.get("order")
        if not isinstance(order, list) or not order:
            return "Ranking answers need a non-empty list of axes"
        unknown = [axis for axis in order if not isinstance(axis, str) or axis not in AXES]
        if unknown:
            return f"Unknown axes in ranking: {unknown}"
        if len(set(order)) != len(order):
            return "Each axis can only be ranked once"
        if len(order) > MAX_RANKED_AXES:
            return f"At most {MAX_RANKED_AXES} axes can be ranked"
        return None

    return f"Unknown question type '{question_type}'"


def answer_impact(answer: AnsweredQuestion) -> int:
    """Signed impact of a scoring answer, in [-100, 100] for default weights."""
    value = answer.value or {}

    if answer.type == QuestionType.DILEMMA.value:
        choice = value.get("choice")
        if choice == "A":
            return -100
        if choice == "B":
            return 100
        return 0

    if answer.type == QuestionType.SLIDER.value:
        slider = value.get("value")
        if slider is None:
            return 0
        return (int(slider) - 50) * 2

    if answer.type == QuestionType.CITATION.value:
        citation_score = answer.citation_score or DEFAULT_CITATION_SCORE
        agree = value.get("agree")
        if agree == "yes":
            return citation_score
        if agree == "no":
            return -citation_score
        return 0

    return 0


def ranking_priorities(order: Sequence[str]) -> dict[str, int]:
    """Priority per ranked axis: 5 for the first, 4 for the second, and so on."""
    return {
        axis: MAX_PRIORITY - index
        for index, axis in enumerate(order)
        if axis in AXES
    }


def calculate_user_scores(answers: Iterable[AnsweredQuestion]) -> UserProfile:
    """Derive the user's axis vector and priorities from quiz answers.

    Ranking answers only set priorities; every other answer adds
    ``impact * weight`` to each axis the question is weighted on.
    """
    accumulator = AxisAccumulator()
    priorities = {axis: DEFAULT_PRIORITY for axis in AXES}

    for answer in answers:
        if answer.type == QuestionType.RANKING.value:
            order = (answer.value or {}).get("order")
            if isinstance(order, list):
                priorities.update(ranking_priorities(order))
            continue

        impact = answer_impact(answer)
        for axis, weight in (answer.axis_weights or {}).items():
            accumulator.add(axis, impact * weight)

    return UserProfile(scores=accumulator.result(), priorities=priorities)


def axis_similarity(user_score: int, candidate_score: int) -> int:
    return round_half_up(100 - abs(user_score - candidate_score) / 2)


def calculate_match(
    user_scores: AxisScores,
    priorities: Mapping[str, int],
    candidate_scores: AxisScores,
    candidate_id: int = 0,
) -> CandidateMatch:
    """Match one candidate against the user's vector.

    The overall score uses raw distances, so it does not depend on how the
    per-axis similarities are rounded.
    """
    weighted_distance = 0.0
    total_weight = 0.0
    similarities: dict[str, int] = {}
    strengths: list[str] = []
    divergences: list[str] = []

    for axis in AXES:
        priority = priorities.get(axis) or DEFAULT_PRIORITY
        distance = abs(user_scores[axis] - candidate_scores[axis])
        similarity = axis_similarity(user_scores[axis], candidate_scores[axis])
        similarities[axis] = similarity

        weighted_distance += distance * priority
        total_weight += MAX_DISTANCE * priority

        if similarity >= STRENGTH_THRESHOLD:
            strengths.append(axis)
        elif similarity < DIVERGENCE_THRESHOLD:
            divergences.append(axis)

    match_score = round_half_up(100 - weighted_distance / total_weight * 100)
    return CandidateMatch(candidate_id, match_score, similarities, strengths, divergences)


def rank_candidates(
    user: UserProfile, candidates: Iterable[tuple[int, AxisScores]]
) -> list[CandidateMatch]:
    """Match every candidate and sort by descending match score."""
    matches = [
        calculate_match(user.scores, user.priorities, scores, candidate_id)
        for candidate_id, scores in candidates
    ]
    return sorted(matches, key=lambda m: m.match_score, reverse=True)


# Evaluated in order; the first matching predicate names the profile.
# Reordering changes the label of vectors matching several predicates.
PROFILE_RULES: tuple[tuple[str, Callable[[AxisScores], bool]], ...] = (
    ("Social-démocrate", lambda s: s.economie < 0 and s.social < 0 and s.ecologie < 30),
    ("Écolo-progressiste", lambda s: s.ecologie < -30 and s.social < 0),
    ("Libéral-progressiste", lambda s: s.economie > 30 and s.social > 0 and s.securite < 0),
    ("Conservateur-libéral", lambda s: s.economie > 30 and s.securite > 30),
    ("Souverainiste", lambda s: s.europe < -30 and s.immigration > 30),
    ("Centriste", lambda s: abs(s.economie) < 30 and abs(s.social) < 30),
    (
        "Réformiste social-écologique",
        lambda s: s.ecologie < 0 and s.social < 0 and s.institutions < 0,
    ),
    ("Républicain social", lambda s: s.securite > 0 and s.social < 0 and s.economie < 30),
)


def determine_profile(
    scores: AxisScores,
    rules: Sequence[tuple[str, Callable[[AxisScores], bool]]] = PROFILE_RULES,
) -> str:
    for label, predicate in rules:
        if predicate(scores):
            return label
    return UNCLASSIFIABLE
