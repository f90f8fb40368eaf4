"""Routes for legislator listings, profiles, statistics and votes."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from parlascope.database import get_db
from parlascope.exceptions import NotFoundError
from parlascope.models import (
    Ballot,
    Chamber,
    Constituency,
    Legislator,
    PoliticalGroup,
    Vote,
    VoteChoice,
)
from parlascope.schemas import pagination_meta, parse_slug_list
from parlascope.serializers import legislator_to_dict, vote_to_dict
from parlascope.services.cache_config import CacheTTL
from parlascope.services.cache_service import CacheSection, cache_key, get_or_compute
from parlascope.services.legislator_stats import compute_stats

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/legislators", tags=["legislators"])

RECENT_VOTES = 10
MIN_COMPARE = 2
MAX_COMPARE = 4


async def get_legislator_by_slug(db: AsyncSession, slug: str) -> Legislator:
    result = await db.execute(select(Legislator).where(Legislator.slug == slug))
    legislator = result.scalar_one_or_none()
    if legislator is None:
        raise NotFoundError(f"Legislator '{slug}' not found")
    return legislator


async def _list_legislators(
    db: AsyncSession,
    page: int,
    limit: int,
    chamber: Optional[Chamber],
    group: Optional[str],
    department: Optional[str],
    search: Optional[str],
    active: Optional[bool],
) -> dict:
    conditions = []
    if chamber is not None:
        conditions.append(Legislator.chamber == chamber.value)
    if group:
        conditions.append(
            Legislator.group_id.in_(select(PoliticalGroup.id).where(PoliticalGroup.slug == group))
        )
    if department:
        conditions.append(
            Legislator.constituency_id.in_(
                select(Constituency.id).where(Constituency.department == department)
            )
        )
    if search:
        pattern = f"%{search.strip()}%"
        conditions.append(
            or_(Legislator.last_name.ilike(pattern), Legislator.first_name.ilike(pattern))
        )
    if active is not None:
        conditions.append(Legislator.active == active)

    total = (
        await db.execute(select(func.count(Legislator.id)).where(*conditions))
    ).scalar_one()

    result = await db.execute(
        select(Legislator)
        .where(*conditions)
        .order_by(Legislator.last_name, Legislator.first_name)
        .offset((page - 1) * limit)
        .limit(limit)
    )
    legislators = result.scalars().all()

    return {
        "data": [legislator_to_dict(legislator) for legislator in legislators],
        "meta": pagination_meta(total, page, limit),
    }


@router.get("")
async def list_legislators(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    chamber: Optional[Chamber] = Query(default=None),
    group: Optional[str] = Query(default=None, description="Political group slug"),
    department: Optional[str] = Query(default=None, description="Department code, e.g. 75"),
    search: Optional[str] = Query(default=None, description="Name search"),
    active: Optional[bool] = Query(default=True),
    db: AsyncSession = Depends(get_db),
):
    """Paginated list of legislators, sorted by last name."""
    key = cache_key(
        CacheSection.LEGISLATOR_LIST,
        page,
        limit,
        chamber.value if chamber else "",
        group or "",
        department or "",
        search or "",
        active,
    )
    return await get_or_compute(
        db,
        key,
        CacheTTL.LISTS,
        lambda: _list_legislators(db, page, limit, chamber, group, department, search, active),
    )


@router.get("/compare")
async def compare_legislators(
    slugs: str = Query(..., description="Comma-separated slugs, 2 to 4"),
    db: AsyncSession = Depends(get_db),
):
    """Side-by-side profiles and statistics of several legislators."""
    requested = parse_slug_list(slugs, MIN_COMPARE, MAX_COMPARE)

    async def build() -> list[dict]:
        entries = []
        for slug in requested:
            legislator = await get_legislator_by_slug(db, slug)
            entries.append({
                **legislator_to_dict(legislator),
                "stats": await compute_stats(db, legislator.id),
            })
        return entries

    key = cache_key(CacheSection.COMPARE, ",".join(sorted(requested)))
    return {"data": await get_or_compute(db, key, CacheTTL.COMPARE, build)}


async def _recent_votes(db: AsyncSession, legislator_id: int, limit: int) -> list[dict]:
    result = await db.execute(
        select(Vote)
        .join(Ballot, Vote.ballot_id == Ballot.id)
        .where(Vote.legislator_id == legislator_id)
        .order_by(Ballot.vote_date.desc(), Ballot.id.desc())
        .limit(limit)
    )
    return [vote_to_dict(v) for v in result.scalars().all()]


@router.get("/{slug}")
async def get_legislator(
    slug: str,
    include: Optional[str] = Query(default=None, description="Comma-separated: stats,votes"),
    db: AsyncSession = Depends(get_db),
):
    """Legislator profile, optionally with statistics and recent votes."""
    legislator = await get_legislator_by_slug(db, slug)
    extras = sorted({part.strip() for part in (include or "").split(",") if part.strip()})

    async def build() -> dict:
        payload = legislator_to_dict(legislator)
        if "stats" in extras:
            payload["stats"] = await compute_stats(db, legislator.id)
        if "votes" in extras:
            payload["recent_votes"] = await _recent_votes(db, legislator.id, RECENT_VOTES)
        return payload

    key = cache_key(CacheSection.LEGISLATOR, slug, ",".join(extras))
    return {"data": await get_or_compute(db, key, CacheTTL.DETAIL, build)}


@router.get("/{slug}/stats")
async def get_legislator_stats(
    slug: str,
    chamber: Optional[Chamber] = Query(default=None),
    db: AsyncSession = Depends(get_db),
):
    """Presence, loyalty and activity counts."""
    legislator = await get_legislator_by_slug(db, slug)
    return {"data": await compute_stats(db, legislator.id, chamber.value if chamber else None)}


@router.get("/{slug}/votes")
async def get_legislator_votes(
    slug: str,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    position: Optional[VoteChoice] = Query(default=None),
    tag: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db),
):
    """Paginated vote history, most recent ballot first."""
    legislator = await get_legislator_by_slug(db, slug)

    conditions = [Vote.legislator_id == legislator.id]
    if position is not None:
        conditions.append(Vote.position == position.value)
    if tag:
        conditions.append(Ballot.has_tag(tag))

    total = (
        await db.execute(
            select(func.count(Vote.id))
            .join(Ballot, Vote.ballot_id == Ballot.id)
            .where(*conditions)
        )
    ).scalar_one()

    result = await db.execute(
        select(Vote)
        .join(Ballot, Vote.ballot_id == Ballot.id)
        .where(*conditions)
        .order_by(Ballot.vote_date.desc(), Ballot.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )

    return {
        "data": [vote_to_dict(v) for v in result.scalars().all()],
        "meta": pagination_meta(total, page, limit),
    }
