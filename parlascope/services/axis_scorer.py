"""Project a legislator's votes, or a candidate's declared positions, onto the axes."""

from dataclasses import dataclass
from typing import Iterable, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from parlascope.config import get_settings
from parlascope.models import Ballot, ScoreType, Vote, VoteChoice
from parlascope.services.axes import AxisAccumulator, AxisScores
from parlascope.services.keyword_table import DEFAULT_KEYWORD_TABLE, KeywordAxisTable

settings = get_settings()


class ScorableVote(Protocol):
    title: str
    position: str


class ScorablePosition(Protocol):
    axis: str
    score: float


@dataclass(frozen=True)
class BallotVote:
    """Ballot title and the position taken on it."""

    title: str
    position: str


@dataclass(frozen=True)
class ScoringResult:
    scores: AxisScores
    votes_analyzed: int
    score_type: ScoreType


class AxisScorer:
    """Keyword-heuristic axis scorer.

    Each "for" or "against" vote whose ballot title contains one or more
    keywords of the table adds ``weight * multiplier`` to every axis those
    keywords touch (+1 for "for", -1 for "against"). Abstentions, absences
    and titles matching no keyword do not contribute.
    """

    def __init__(
        self,
        table: KeywordAxisTable = DEFAULT_KEYWORD_TABLE,
        verified_threshold: Optional[int] = None,
    ):
        self.table = table
        self.verified_threshold = (
            verified_threshold if verified_threshold is not None else settings.verified_threshold
        )

    def score_votes(self, votes: Iterable[ScorableVote]) -> ScoringResult:
        accumulator = AxisAccumulator()
        votes_analyzed = 0

        for vote in votes:
            if vote.position == VoteChoice.FOR.value:
                multiplier = 1
            elif vote.position == VoteChoice.AGAINST.value:
                multiplier = -1
            else:
                continue

            matches = self.table.match(vote.title)
            if not matches:
                continue

            votes_analyzed += 1
            for _keyword, weights in matches:
                for axis, weight in weights.items():
                    accumulator.add(axis, weight * multiplier)

        score_type = (
            ScoreType.VERIFIED if votes_analyzed >= self.verified_threshold else ScoreType.ESTIMATED
        )
        return ScoringResult(accumulator.result(), votes_analyzed, score_type)

    def score_positions(self, positions: Iterable[ScorablePosition]) -> AxisScores:
        """Average declared position scores per axis.

        The sign of a declared score already carries the stance, so no
        keyword lookup or multiplier applies. Positions on unknown axes are
        ignored.
        """
        accumulator = AxisAccumulator()
        for position in positions:
            accumulator.add(position.axis, position.score)
        return accumulator.result()


async def fetch_ballot_votes(
    db: AsyncSession, legislator_id: int, limit: Optional[int] = None
) -> list[BallotVote]:
    """Load a legislator's most recent "for"/"against" votes with ballot titles."""
    limit = limit or settings.scoring_vote_limit
    result = await db.execute(
        select(Ballot.title, Vote.position)
        .join(Ballot, Vote.ballot_id == Ballot.id)
        .where(
            Vote.legislator_id == legislator_id,
            Vote.position.in_([VoteChoice.FOR.value, VoteChoice.AGAINST.value]),
        )
        .order_by(Ballot.vote_date.desc(), Ballot.id.desc())
        .limit(limit)
    )
    return [BallotVote(title=title, position=position) for title, position in result.all()]
