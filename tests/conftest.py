"""Shared fixtures: an in-memory database and row factories."""

from datetime import date

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from parlascope.database import Base
from parlascope.models import (
    Ballot,
    Candidate,
    IngestionStatus,
    Legislator,
    LobbyAction,
    Lobbyist,
    PoliticalGroup,
    Position,
    PositionSource,
    Question,
    Vote,
)

# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine = create_async_engine(TEST_DATABASE_URL, echo=False)
test_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session():
    """Create a fresh database session for each test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with test_session() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def make_group(db_session: AsyncSession):
    async def _make(slug="soc", chamber="assemblee", name="Socialistes", **kwargs):
        group = PoliticalGroup(slug=slug, chamber=chamber, name=name, **kwargs)
        db_session.add(group)
        await db_session.commit()
        return group

    return _make


@pytest_asyncio.fixture
async def make_legislator(db_session: AsyncSession):
    async def _make(slug, group=None, chamber="assemblee", first_name="Jean", last_name=None, **kwargs):
        legislator = Legislator(
            slug=slug,
            chamber=chamber,
            first_name=first_name,
            last_name=last_name or slug.capitalize(),
            group_id=group.id if group else None,
            **kwargs,
        )
        db_session.add(legislator)
        await db_session.commit()
        await db_session.refresh(legislator, ["group", "constituency"])
        return legislator

    return _make


@pytest_asyncio.fixture
async def make_ballot(db_session: AsyncSession):
    counter = {"number": 0}

    async def _make(title="Projet de loi", vote_date=date(2024, 1, 10), chamber="assemblee", **kwargs):
        counter["number"] += 1
        ballot = Ballot(
            chamber=chamber,
            number=kwargs.pop("number", counter["number"]),
            vote_date=vote_date,
            title=title,
            outcome=kwargs.pop("outcome", "adopte"),
            **kwargs,
        )
        db_session.add(ballot)
        await db_session.commit()
        return ballot

    return _make


@pytest_asyncio.fixture
async def make_vote(db_session: AsyncSession):
    async def _make(legislator, ballot, position):
        vote = Vote(legislator_id=legislator.id, ballot_id=ballot.id, position=position)
        db_session.add(vote)
        await db_session.commit()
        return vote

    return _make


@pytest_asyncio.fixture
async def make_candidate(db_session: AsyncSession):
    async def _make(slug, legislator=None, status=IngestionStatus.PUBLISHED.value, scores=None, **kwargs):
        candidate = Candidate(
            slug=slug,
            first_name=kwargs.pop("first_name", "Camille"),
            last_name=kwargs.pop("last_name", slug.capitalize()),
            party=kwargs.pop("party", "Divers"),
            legislator_id=legislator.id if legislator else None,
            ingestion_status=status,
            **kwargs,
        )
        for axis, value in (scores or {}).items():
            setattr(candidate, f"score_{axis}", value)
        db_session.add(candidate)
        await db_session.commit()
        await db_session.refresh(candidate, ["legislator"])
        return candidate

    return _make


@pytest_asyncio.fixture
async def make_position(db_session: AsyncSession):
    async def _make(candidate, axis, subject, score, source_type=PositionSource.PROGRAMME.value):
        position = Position(
            candidate_id=candidate.id,
            axis=axis,
            subject=subject,
            stance=f"Position sur {subject}",
            score=score,
            source_type=source_type,
        )
        db_session.add(position)
        await db_session.commit()
        return position

    return _make


@pytest_asyncio.fixture
async def make_question(db_session: AsyncSession):
    async def _make(order, type, axis_weights=None, **kwargs):
        question = Question(
            order=order,
            type=type,
            text=kwargs.pop("text", f"Question {order}"),
            axis_weights=axis_weights or {},
            **kwargs,
        )
        db_session.add(question)
        await db_session.commit()
        return question

    return _make


@pytest_asyncio.fixture
async def make_lobbyist(db_session: AsyncSession):
    async def _make(name, type="entreprise", sector=None, annual_budget=None, **kwargs):
        lobbyist = Lobbyist(
            name=name, type=type, sector=sector, annual_budget=annual_budget, **kwargs
        )
        db_session.add(lobbyist)
        await db_session.commit()
        return lobbyist

    return _make


@pytest_asyncio.fixture
async def make_lobby_action(db_session: AsyncSession):
    async def _make(lobbyist, description="Rendez-vous", started_on=None, legislator=None, **kwargs):
        action = LobbyAction(
            lobbyist_id=lobbyist.id,
            description=description,
            started_on=started_on,
            legislator_id=legislator.id if legislator else None,
            **kwargs,
        )
        db_session.add(action)
        await db_session.commit()
        await db_session.refresh(action, ["lobbyist", "legislator"])
        return action

    return _make
