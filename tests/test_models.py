"""Unit tests for model defaults and constraints."""

from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from parlascope.models import Answer, Candidate, QuizSession, Vote


@pytest.mark.asyncio
async def test_candidate_defaults(db_session: AsyncSession):
    """New candidates are pending, estimated and neutral on every axis."""
    candidate = Candidate(slug="martin", first_name="Léa", last_name="Martin", party="Divers")
    db_session.add(candidate)
    await db_session.commit()
    await db_session.refresh(candidate)

    assert candidate.ingestion_status == "pending"
    assert candidate.score_type == "estimated"
    assert candidate.score_economie == 0
    assert candidate.active is True
    assert candidate.full_name == "Léa Martin"


@pytest.mark.asyncio
async def test_legislator_full_name(make_legislator):
    legislator = await make_legislator("borne", first_name="Élisabeth", last_name="Borne")
    assert legislator.full_name == "Élisabeth Borne"


@pytest.mark.asyncio
async def test_one_vote_per_ballot(db_session: AsyncSession, make_legislator, make_ballot, make_vote):
    """A legislator cannot vote twice on the same ballot."""
    legislator = await make_legislator("dupont")
    ballot = await make_ballot("Scrutin", vote_date=date(2024, 5, 2))
    await make_vote(legislator, ballot, "pour")

    db_session.add(Vote(legislator_id=legislator.id, ballot_id=ballot.id, position="contre"))
    with pytest.raises(IntegrityError):
        await db_session.commit()
    await db_session.rollback()


@pytest.mark.asyncio
async def test_one_answer_per_question(db_session: AsyncSession, make_question):
    """Answers are unique per session and question."""
    question = await make_question(1, "slider")
    session = QuizSession(token="tok", status="in_progress")
    db_session.add(session)
    await db_session.commit()

    db_session.add_all([
        Answer(session_id=session.id, question_id=question.id, value={"value": 10}),
        Answer(session_id=session.id, question_id=question.id, value={"value": 90}),
    ])
    with pytest.raises(IntegrityError):
        await db_session.commit()
    await db_session.rollback()


@pytest.mark.asyncio
async def test_legislator_linked_once(db_session: AsyncSession, make_legislator, make_candidate):
    """Two candidates cannot share a legislator."""
    legislator = await make_legislator("dupont")
    await make_candidate("dupont", legislator=legislator)

    db_session.add(Candidate(
        slug="autre", first_name="A", last_name="Autre", party="X", legislator_id=legislator.id
    ))
    with pytest.raises(IntegrityError):
        await db_session.commit()
    await db_session.rollback()
