"""Presence, party loyalty and activity statistics of a legislator.

The historical window of both rates starts at the date of the chamber's
oldest recorded ballot, so a legislator is not penalized for ballots held
before the data we hold. Both rates are computed with set-based SQL
aggregations: the vote history is never loaded into memory.
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy import and_, case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from parlascope.exceptions import NotFoundError
from parlascope.models import Amendment, Ballot, Intervention, Legislator, Vote, VoteChoice
from parlascope.services.axes import round_half_up
from parlascope.services.cache_config import CacheTTL
from parlascope.services.cache_service import (
    CacheSection,
    cache_get,
    cache_key,
    cache_set,
    get_or_compute,
)

logger = logging.getLogger(__name__)

ADOPTED_STATUS = "adopte"
QUESTION_TYPE = "question"


def percent(numerator: int, denominator: int) -> int:
    """Rounded percentage, 0 when the denominator is 0."""
    if denominator <= 0:
        return 0
    return round_half_up(numerator / denominator * 100)


async def get_oldest_ballot_date(db: AsyncSession, chamber: str) -> date:
    """Date of the chamber's first recorded ballot, today when there is none."""
    key = cache_key(CacheSection.OLDEST_BALLOT, chamber)
    cached = await cache_get(db, key, CacheTTL.OLDEST_BALLOT)
    if cached:
        return date.fromisoformat(cached)

    result = await db.execute(
        select(func.min(Ballot.vote_date)).where(Ballot.chamber == chamber)
    )
    oldest = result.scalar_one_or_none()
    if oldest is None:
        return date.today()

    await cache_set(db, key, oldest.isoformat())
    return oldest


async def calculate_presence(
    db: AsyncSession, legislator_id: int, chamber: str, since: date
) -> int:
    """Share of the chamber's ballots since ``since`` the legislator took part in."""
    total_ballots = (
        select(func.count(Ballot.id))
        .where(Ballot.chamber == chamber, Ballot.vote_date >= since)
        .scalar_subquery()
    )
    participations = (
        select(func.count(Vote.id))
        .join(Ballot, Vote.ballot_id == Ballot.id)
        .where(
            Vote.legislator_id == legislator_id,
            Vote.position != VoteChoice.ABSENT.value,
            Ballot.chamber == chamber,
            Ballot.vote_date >= since,
        )
        .scalar_subquery()
    )
    row = (await db.execute(select(total_ballots, participations))).one()
    total, attended = row
    return percent(attended or 0, total or 0)


def loyalty_statement(legislator_id: int, group_id: int, chamber: str, since: date):
    """Single query returning ``(loyal, total)`` for a legislator.

    The group's majority position on a ballot is the position with the most
    non-absent votes among the group's members. When two positions tie, the
    one ranked first by the database wins; there is no canonical tie-break.
    """
    legislator_votes = (
        select(Vote.ballot_id, Vote.position)
        .join(Ballot, Vote.ballot_id == Ballot.id)
        .where(
            Vote.legislator_id == legislator_id,
            Vote.position != VoteChoice.ABSENT.value,
            Ballot.chamber == chamber,
            Ballot.vote_date >= since,
        )
        .cte("legislator_votes")
    )

    group_majority = (
        select(
            Vote.ballot_id,
            Vote.position,
            func.row_number()
            .over(partition_by=Vote.ballot_id, order_by=func.count(Vote.id).desc())
            .label("position_rank"),
        )
        .join(Legislator, Vote.legislator_id == Legislator.id)
        .where(
            Legislator.group_id == group_id,
            Vote.position != VoteChoice.ABSENT.value,
            Vote.ballot_id.in_(select(legislator_votes.c.ballot_id)),
        )
        .group_by(Vote.ballot_id, Vote.position)
        .cte("group_majority")
    )

    return select(
        func.count(case((legislator_votes.c.position == group_majority.c.position, 1))).label("loyal"),
        func.count().label("total"),
    ).select_from(
        legislator_votes.outerjoin(
            group_majority,
            and_(
                group_majority.c.ballot_id == legislator_votes.c.ballot_id,
                group_majority.c.position_rank == 1,
            ),
        )
    )


async def calculate_loyalty(
    db: AsyncSession,
    legislator_id: int,
    group_id: Optional[int],
    chamber: str,
    since: date,
) -> int:
    """Share of the legislator's votes matching their group's majority."""
    if group_id is None:
        return 0

    row = (await db.execute(loyalty_statement(legislator_id, group_id, chamber, since))).one()
    loyal, total = row
    return percent(loyal or 0, total or 0)


async def _count(db: AsyncSession, statement) -> int:
    result = await db.execute(statement)
    return result.scalar_one() or 0


async def _compute_stats(db: AsyncSession, legislator: Legislator, chamber: str) -> dict:
    since = await get_oldest_ballot_date(db, chamber)

    presence = await calculate_presence(db, legislator.id, chamber, since)
    loyalty = await calculate_loyalty(db, legislator.id, legislator.group_id, chamber, since)

    participation = await _count(
        db,
        select(func.count(Vote.id)).where(
            Vote.legislator_id == legislator.id,
            Vote.position != VoteChoice.ABSENT.value,
        ),
    )
    interventions = await _count(
        db, select(func.count(Intervention.id)).where(Intervention.legislator_id == legislator.id)
    )
    questions = await _count(
        db,
        select(func.count(Intervention.id)).where(
            Intervention.legislator_id == legislator.id,
            Intervention.type == QUESTION_TYPE,
        ),
    )
    proposed = await _count(
        db, select(func.count(Amendment.id)).where(Amendment.legislator_id == legislator.id)
    )
    adopted = await _count(
        db,
        select(func.count(Amendment.id)).where(
            Amendment.legislator_id == legislator.id,
            Amendment.status == ADOPTED_STATUS,
        ),
    )

    return {
        "presence": presence,
        "loyalty": loyalty,
        "participation": participation,
        "interventions": interventions,
        "amendments": {"proposed": proposed, "adopted": adopted},
        "questions": questions,
    }


async def compute_stats(
    db: AsyncSession, legislator_id: int, chamber: Optional[str] = None
) -> dict:
    """Statistics shown on legislator detail and comparison pages.

    Args:
        db: Database session
        legislator_id: Legislator primary key
        chamber: Chamber whose ballots define the window, defaults to the
            legislator's own chamber

    Returns:
        Dict with presence, loyalty, participation, interventions,
        amendments (proposed/adopted) and questions

    Raises:
        NotFoundError: if the legislator does not exist
    """
    legislator = await db.get(Legislator, legislator_id)
    if legislator is None:
        raise NotFoundError(f"Legislator {legislator_id} not found")

    chamber = chamber or legislator.chamber
    return await get_or_compute(
        db,
        cache_key(CacheSection.STATS, legislator_id, chamber),
        CacheTTL.STATS,
        lambda: _compute_stats(db, legislator, chamber),
    )
