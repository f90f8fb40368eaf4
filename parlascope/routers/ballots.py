"""Routes for chamber ballots (scrutins)."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from parlascope.database import get_db
from parlascope.exceptions import NotFoundError
from parlascope.models import Ballot, Chamber, Legislator, PoliticalGroup, Vote
from parlascope.schemas import pagination_meta
from parlascope.serializers import ballot_to_dict

router = APIRouter(prefix="/ballots", tags=["ballots"])


@router.get("")
async def list_ballots(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    chamber: Optional[Chamber] = Query(default=None),
    tag: Optional[str] = Query(default=None),
    outcome: Optional[str] = Query(default=None, description="e.g. adopte, rejete"),
    db: AsyncSession = Depends(get_db),
):
    """Paginated ballots, most recent first."""
    conditions = []
    if chamber is not None:
        conditions.append(Ballot.chamber == chamber.value)
    if tag:
        conditions.append(Ballot.has_tag(tag))
    if outcome:
        conditions.append(Ballot.outcome == outcome)

    total = (await db.execute(select(func.count(Ballot.id)).where(*conditions))).scalar_one()
    result = await db.execute(
        select(Ballot)
        .where(*conditions)
        .order_by(Ballot.vote_date.desc(), Ballot.number.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )

    return {
        "data": [ballot_to_dict(b) for b in result.scalars().all()],
        "meta": pagination_meta(total, page, limit),
    }


@router.get("/{chamber}/{number}")
async def get_ballot(chamber: Chamber, number: int, db: AsyncSession = Depends(get_db)):
    """A ballot with its vote breakdown per political group."""
    result = await db.execute(
        select(Ballot).where(Ballot.chamber == chamber.value, Ballot.number == number)
    )
    ballot = result.scalar_one_or_none()
    if ballot is None:
        raise NotFoundError(f"Ballot {chamber.value}/{number} not found")

    rows = await db.execute(
        select(PoliticalGroup.slug, PoliticalGroup.name, Vote.position, func.count(Vote.id))
        .join(Legislator, Vote.legislator_id == Legislator.id)
        .join(PoliticalGroup, Legislator.group_id == PoliticalGroup.id)
        .where(Vote.ballot_id == ballot.id)
        .group_by(PoliticalGroup.slug, PoliticalGroup.name, Vote.position)
        .order_by(PoliticalGroup.name)
    )

    groups: dict[str, dict] = {}
    for slug, name, position, count in rows.all():
        entry = groups.setdefault(slug, {"slug": slug, "name": name, "positions": {}})
        entry["positions"][position] = count

    return {"data": {**ballot_to_dict(ballot), "groups": list(groups.values())}}
