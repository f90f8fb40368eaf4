"""Cross-check a candidate's declared positions against their voting record.

Matching a position's subject to ballot titles is a substring/word-overlap
heuristic: it has no accuracy guarantee and is meant as a hint for the
admin validation queue.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from parlascope.config import get_settings
from parlascope.models import Candidate, Position, PositionSource, VoteChoice
from parlascope.services.axes import round_half_up
from parlascope.services.axis_scorer import BallotVote, fetch_ballot_votes

logger = logging.getLogger(__name__)
settings = get_settings()

CHECKED_SOURCES = (PositionSource.PROGRAMME.value, PositionSource.DECLARATION.value)

# Subject words shorter than this are too generic to match on their own
MIN_WORD_LENGTH = 5

VOTE_SCORE = 50


@dataclass
class Contradiction:
    position: Position
    ballot_title: str


@dataclass
class CoherenceReport:
    coherent: int = 0
    incoherent: int = 0
    contradictions: list[Contradiction] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.coherent + self.incoherent

    @property
    def score(self) -> int:
        """Share of coherent pairs; 100 when nothing could be compared."""
        if self.total == 0:
            return 100
        return round_half_up(self.coherent / self.total * 100)

    def details(self) -> dict:
        return {"coherent": self.coherent, "incoherent": self.incoherent, "total": self.total}


def title_matches_subject(title: str, subject: str) -> bool:
    """True when the ballot title mentions the subject or one of its long words."""
    title = title.lower()
    subject = subject.lower()
    if subject in title:
        return True
    return any(len(word) >= MIN_WORD_LENGTH and word in title for word in subject.split(" "))


def vote_score(position: str) -> int:
    return VOTE_SCORE if position == VoteChoice.FOR.value else -VOTE_SCORE


def is_coherent(declared_score: float, position: str) -> bool:
    # A declared score of 0 is treated as positive
    return (declared_score >= 0) == (vote_score(position) >= 0)


def check_positions(
    positions: Iterable[Position], votes: Sequence[BallotVote]
) -> CoherenceReport:
    """Compare each programme/declaration position with the matching votes.

    Positions with no matching vote are skipped. Only "for"/"against" votes
    are expected in ``votes``.
    """
    report = CoherenceReport()
    for position in positions:
        if position.source_type not in CHECKED_SOURCES:
            continue

        related = [v for v in votes if title_matches_subject(v.title, position.subject)]
        for vote in related:
            if is_coherent(position.score, vote.position):
                report.coherent += 1
            else:
                report.incoherent += 1
                report.contradictions.append(Contradiction(position, vote.title))
    return report


async def fetch_positions(db: AsyncSession, candidate_id: int) -> list[Position]:
    result = await db.execute(
        select(Position)
        .where(Position.candidate_id == candidate_id)
        .order_by(Position.created_at.desc(), Position.id.desc())
    )
    return list(result.scalars().all())


async def calculate_coherence(db: AsyncSession, candidate: Candidate) -> CoherenceReport:
    """Check a candidate and flag contradicted positions.

    Every contradiction marks its position incoherent and records the
    contradicting ballot; a position contradicted several times keeps the
    last explanation. Flags are never reset here, only by admin validation.
    """
    if candidate.legislator_id is None:
        return CoherenceReport()

    votes = await fetch_ballot_votes(
        db, candidate.legislator_id, limit=settings.coherence_vote_limit
    )
    report = check_positions(await fetch_positions(db, candidate.id), votes)

    for contradiction in report.contradictions:
        contradiction.position.coherent = False
        contradiction.position.explanation = (
            f'Incohérence détectée avec le vote sur "{contradiction.ballot_title}"'
        )

    if report.contradictions:
        await db.flush()
        logger.info(
            "Candidate %s: %d contradiction(s) across %d comparable vote(s)",
            candidate.slug, report.incoherent, report.total,
        )

    return report
