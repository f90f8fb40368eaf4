"""Vote analytics across legislators and groups.

A group's majority on a ballot is the position most of its members took,
absences excluded, which is also what the loyalty rate compares against.
Dissent and cohesion are both counted against that majority in one
aggregated query; vote rows are never loaded into memory.
"""

import calendar
import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

from sqlalchemy import and_, case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from parlascope.models import Ballot, Legislator, PoliticalGroup, Vote, VoteChoice
from parlascope.services.axes import round_half_up
from parlascope.services.legislator_stats import percent

logger = logging.getLogger(__name__)

# Legislators with fewer comparable votes are left out of the dissent ranking
MIN_DISSENT_VOTES = 10

MIN_CONTROVERSY_VOTERS = 100
MIN_CONTROVERSY = 70
CONTROVERSY_WINDOW = 200


class Period(str, Enum):
    MONTH = "1m"
    QUARTER = "3m"
    HALF_YEAR = "6m"
    YEAR = "1y"
    ALL = "all"


PERIOD_MONTHS = {
    Period.MONTH: 1,
    Period.QUARTER: 3,
    Period.HALF_YEAR: 6,
    Period.YEAR: 12,
}


@dataclass
class Dissent:
    legislator: Legislator
    dissents: int
    total_votes: int

    @property
    def rate(self) -> int:
        return percent(self.dissents, self.total_votes)


@dataclass
class GroupCohesion:
    group: PoliticalGroup
    members: int
    ballots: int
    votes: int
    aligned: int

    @property
    def cohesion(self) -> int:
        return percent(self.aligned, self.votes)


def period_start(period: Period, today: Optional[date] = None) -> Optional[date]:
    """First day of the window ending today, None for ``all``.

    Months are calendar months: one month before March 31st is
    February 28th (29th in leap years).
    """
    months = PERIOD_MONTHS.get(period)
    if months is None:
        return None

    today = today or date.today()
    year, month_index = divmod(today.year * 12 + today.month - 1 - months, 12)
    month = month_index + 1
    day = min(today.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def _vote_conditions(since: Optional[date], chamber: Optional[str]) -> list:
    conditions = [Vote.position != VoteChoice.ABSENT.value]
    if since is not None:
        conditions.append(Ballot.vote_date >= since)
    if chamber is not None:
        conditions.append(Ballot.chamber == chamber)
    return conditions


def group_majority_cte(since: Optional[date] = None, chamber: Optional[str] = None):
    """Each group's positions per ballot, ranked by number of votes.

    Rank 1 is the majority. Ties are broken by whatever order the database
    returns, as for the loyalty rate.
    """
    vote_count = func.count(Vote.id)
    return (
        select(
            Vote.ballot_id,
            Legislator.group_id,
            Vote.position,
            func.row_number()
            .over(
                partition_by=(Vote.ballot_id, Legislator.group_id),
                order_by=vote_count.desc(),
            )
            .label("position_rank"),
        )
        .join(Legislator, Vote.legislator_id == Legislator.id)
        .join(Ballot, Vote.ballot_id == Ballot.id)
        .where(Legislator.group_id.is_not(None), *_vote_conditions(since, chamber))
        .group_by(Vote.ballot_id, Legislator.group_id, Vote.position)
        .cte("group_majority")
    )


def _member_votes_with_majority(
    majority, since: Optional[date], chamber: Optional[str], *columns
):
    """Select ``columns`` over member votes joined to their group's majority."""
    return (
        select(*columns)
        .select_from(Vote)
        .join(Legislator, Vote.legislator_id == Legislator.id)
        .join(Ballot, Vote.ballot_id == Ballot.id)
        .join(
            majority,
            and_(
                majority.c.ballot_id == Vote.ballot_id,
                majority.c.group_id == Legislator.group_id,
                majority.c.position_rank == 1,
            ),
        )
        .where(*_vote_conditions(since, chamber))
    )


async def find_dissidents(
    db: AsyncSession,
    since: Optional[date] = None,
    chamber: Optional[str] = None,
    limit: int = 20,
    min_votes: int = MIN_DISSENT_VOTES,
) -> list[Dissent]:
    """Legislators who most often vote against their own group's majority.

    Sorted by descending dissent rate, then by last name.
    """
    majority = group_majority_cte(since, chamber)
    total = func.count(Vote.id)
    dissents = func.count(case((Vote.position != majority.c.position, 1)))

    statement = (
        _member_votes_with_majority(majority, since, chamber, Legislator, dissents, total)
        .group_by(Legislator.id)
        .having(total >= min_votes)
        .order_by((dissents * 1.0 / total).desc(), Legislator.last_name, Legislator.id)
        .limit(limit)
    )
    result = await db.execute(statement)
    return [Dissent(legislator, d, t) for legislator, d, t in result.all()]


async def group_cohesion(
    db: AsyncSession, since: Optional[date] = None, chamber: Optional[str] = None
) -> list[GroupCohesion]:
    """Share of each active group's member votes that followed the group majority.

    Groups without any vote in the window are listed with a cohesion of 0.
    """
    majority = group_majority_cte(since, chamber)
    aligned = func.count(case((Vote.position == majority.c.position, 1)))
    statement = _member_votes_with_majority(
        majority,
        since,
        chamber,
        Legislator.group_id,
        aligned,
        func.count(Vote.id),
        func.count(func.distinct(Vote.ballot_id)),
    ).group_by(Legislator.group_id)
    totals = {
        group_id: (aligned_votes, votes, ballots)
        for group_id, aligned_votes, votes, ballots in (await db.execute(statement)).all()
    }

    member_count = (
        select(func.count(Legislator.id))
        .where(Legislator.group_id == PoliticalGroup.id, Legislator.active == True)
        .scalar_subquery()
    )
    groups = select(PoliticalGroup, member_count).where(PoliticalGroup.active == True)
    if chamber is not None:
        groups = groups.where(PoliticalGroup.chamber == chamber)
    result = await db.execute(
        groups.order_by(PoliticalGroup.chamber, PoliticalGroup.order, PoliticalGroup.name)
    )

    cohesion = []
    for group, members in result.all():
        aligned_votes, votes, ballots = totals.get(group.id, (0, 0, 0))
        cohesion.append(GroupCohesion(group, members, ballots, votes, aligned_votes))
    return cohesion


async def most_active_legislators(
    db: AsyncSession,
    since: Optional[date] = None,
    group_slug: Optional[str] = None,
    limit: int = 15,
) -> list[tuple[Legislator, int]]:
    """Legislators with the most non-absent votes, busiest first."""
    votes = func.count(Vote.id)
    statement = (
        select(Legislator, votes)
        .join(Vote, Vote.legislator_id == Legislator.id)
        .join(Ballot, Vote.ballot_id == Ballot.id)
        .where(*_vote_conditions(since, None))
    )
    if group_slug:
        statement = statement.where(
            Legislator.group_id.in_(
                select(PoliticalGroup.id).where(PoliticalGroup.slug == group_slug)
            )
        )
    result = await db.execute(
        statement.group_by(Legislator.id)
        .order_by(votes.desc(), Legislator.last_name, Legislator.id)
        .limit(limit)
    )
    return [(legislator, count) for legislator, count in result.all()]


def controversy(for_count: int, against_count: int) -> int:
    """100 for an even split between for and against, 0 for a one-sided vote."""
    decided = for_count + against_count
    if decided == 0:
        return 0
    return round_half_up(100 - abs(for_count / decided - 0.5) * 200)


async def controversial_ballots(
    db: AsyncSession, since: Optional[date] = None, limit: int = 10
) -> list[tuple[Ballot, int]]:
    """Closest recent ballots, most evenly split first.

    Only the latest ballots with enough voters are considered, and only
    those at or above the controversy threshold are kept.
    """
    statement = select(Ballot).where(Ballot.total_count >= MIN_CONTROVERSY_VOTERS)
    if since is not None:
        statement = statement.where(Ballot.vote_date >= since)
    result = await db.execute(
        statement.order_by(Ballot.vote_date.desc(), Ballot.id.desc()).limit(CONTROVERSY_WINDOW)
    )

    scored = [
        (ballot, controversy(ballot.for_count, ballot.against_count))
        for ballot in result.scalars().all()
    ]
    close = [pair for pair in scored if pair[1] >= MIN_CONTROVERSY]
    close.sort(key=lambda pair: pair[1], reverse=True)
    logger.debug("%d of %d recent ballots are controversial", len(close), len(scored))
    return close[:limit]
