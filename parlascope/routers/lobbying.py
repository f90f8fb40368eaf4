"""Routes for registered interest representatives and their actions."""

from enum import Enum
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from parlascope.database import get_db
from parlascope.exceptions import NotFoundError
from parlascope.models import LobbyAction, Lobbyist, LobbyistType, LobbyTarget
from parlascope.schemas import pagination_meta
from parlascope.serializers import lobby_action_to_dict, lobbyist_to_dict

router = APIRouter(prefix="/lobbying", tags=["lobbying"])

DETAIL_ACTIONS = 50
TOP_SECTORS = 10


class LobbyistSort(str, Enum):
    NAME = "name"
    BUDGET = "budget"
    ACTIONS = "actions"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


def _action_count():
    return (
        select(func.count(LobbyAction.id))
        .where(LobbyAction.lobbyist_id == Lobbyist.id)
        .scalar_subquery()
    )


async def get_lobbyist_or_404(db: AsyncSession, lobbyist_id: int) -> Lobbyist:
    lobbyist = await db.get(Lobbyist, lobbyist_id)
    if lobbyist is None:
        raise NotFoundError(f"Lobbyist {lobbyist_id} not found")
    return lobbyist


@router.get("")
async def list_lobbyists(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    type: Optional[LobbyistType] = Query(default=None),
    sector: Optional[str] = Query(default=None, description="Sector, partial match"),
    search: Optional[str] = Query(default=None, description="Name search"),
    sort: LobbyistSort = Query(default=LobbyistSort.NAME),
    order: SortOrder = Query(default=SortOrder.ASC),
    db: AsyncSession = Depends(get_db),
):
    """Paginated register of interest representatives."""
    conditions = []
    if type is not None:
        conditions.append(Lobbyist.type == type.value)
    if sector:
        conditions.append(Lobbyist.sector.ilike(f"%{sector.strip()}%"))
    if search:
        conditions.append(Lobbyist.name.ilike(f"%{search.strip()}%"))

    action_count = _action_count()
    sort_column = {
        LobbyistSort.NAME: Lobbyist.name,
        LobbyistSort.BUDGET: Lobbyist.annual_budget,
        LobbyistSort.ACTIONS: action_count,
    }[sort]
    ordering = sort_column.desc() if order == SortOrder.DESC else sort_column.asc()

    total = (await db.execute(select(func.count(Lobbyist.id)).where(*conditions))).scalar_one()
    result = await db.execute(
        select(Lobbyist, action_count)
        .where(*conditions)
        .order_by(ordering, Lobbyist.id)
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return {
        "data": [
            {**lobbyist_to_dict(lobbyist), "actions_count": count}
            for lobbyist, count in result.all()
        ],
        "meta": pagination_meta(total, page, limit),
    }


@router.get("/sectors")
async def list_sectors(db: AsyncSession = Depends(get_db)):
    """Sectors with their number of registered organisations."""
    count = func.count(Lobbyist.id)
    result = await db.execute(
        select(Lobbyist.sector, count)
        .where(Lobbyist.sector.is_not(None))
        .group_by(Lobbyist.sector)
        .order_by(count.desc(), Lobbyist.sector)
    )
    return {"data": [{"name": sector, "count": n} for sector, n in result.all()]}


@router.get("/stats")
async def lobbying_stats(db: AsyncSession = Depends(get_db)):
    total_lobbyists = (await db.execute(select(func.count(Lobbyist.id)))).scalar_one()
    total_actions = (await db.execute(select(func.count(LobbyAction.id)))).scalar_one()
    total_budget = (
        await db.execute(select(func.coalesce(func.sum(Lobbyist.annual_budget), 0)))
    ).scalar_one()

    by_type = await db.execute(
        select(Lobbyist.type, func.count(Lobbyist.id)).group_by(Lobbyist.type)
    )
    count = func.count(Lobbyist.id)
    top_sectors = await db.execute(
        select(Lobbyist.sector, count)
        .where(Lobbyist.sector.is_not(None))
        .group_by(Lobbyist.sector)
        .order_by(count.desc(), Lobbyist.sector)
        .limit(TOP_SECTORS)
    )

    return {
        "data": {
            "total_lobbyists": total_lobbyists,
            "total_actions": total_actions,
            "total_budget": total_budget,
            "by_type": [{"type": t, "count": n} for t, n in by_type.all()],
            "top_sectors": [{"sector": s, "count": n} for s, n in top_sectors.all()],
        }
    }


@router.get("/actions/recent")
async def recent_actions(
    limit: int = Query(default=20, ge=1, le=50),
    sector: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db),
):
    """Latest declared actions, across all lobbyists."""
    statement = select(LobbyAction)
    if sector:
        statement = statement.join(Lobbyist, LobbyAction.lobbyist_id == Lobbyist.id).where(
            Lobbyist.sector.ilike(f"%{sector.strip()}%")
        )
    result = await db.execute(
        statement.order_by(LobbyAction.started_on.desc(), LobbyAction.id.desc()).limit(limit)
    )
    return {
        "data": [
            lobby_action_to_dict(action, with_lobbyist=True)
            for action in result.scalars().all()
        ]
    }


@router.get("/{lobbyist_id}")
async def get_lobbyist(lobbyist_id: int, db: AsyncSession = Depends(get_db)):
    """Lobbyist with their most recent actions."""
    lobbyist = await get_lobbyist_or_404(db, lobbyist_id)
    result = await db.execute(
        select(LobbyAction)
        .where(LobbyAction.lobbyist_id == lobbyist.id)
        .order_by(LobbyAction.started_on.desc(), LobbyAction.id.desc())
        .limit(DETAIL_ACTIONS)
    )
    return {
        "data": {
            **lobbyist_to_dict(lobbyist),
            "actions": [lobby_action_to_dict(action) for action in result.scalars().all()],
        }
    }


@router.get("/{lobbyist_id}/actions")
async def list_lobbyist_actions(
    lobbyist_id: int,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    target: Optional[LobbyTarget] = Query(default=None),
    db: AsyncSession = Depends(get_db),
):
    lobbyist = await get_lobbyist_or_404(db, lobbyist_id)

    conditions = [LobbyAction.lobbyist_id == lobbyist.id]
    if target is not None:
        conditions.append(LobbyAction.target == target.value)

    total = (await db.execute(select(func.count(LobbyAction.id)).where(*conditions))).scalar_one()
    result = await db.execute(
        select(LobbyAction)
        .where(*conditions)
        .order_by(LobbyAction.started_on.desc(), LobbyAction.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return {
        "data": [lobby_action_to_dict(action) for action in result.scalars().all()],
        "meta": pagination_meta(total, page, limit),
    }
