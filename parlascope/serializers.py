"""Convert ORM rows to JSON-ready dicts for API responses."""

from typing import Optional

from parlascope.models import (
    Ballot,
    Candidate,
    IngestionLog,
    Legislator,
    LobbyAction,
    Lobbyist,
    PoliticalGroup,
    Position,
    Question,
    Vote,
)
from parlascope.services.axes import AxisScores


def group_to_dict(group: Optional[PoliticalGroup]) -> Optional[dict]:
    if group is None:
        return None
    return {
        "id": group.id,
        "slug": group.slug,
        "chamber": group.chamber,
        "name": group.name,
        "full_name": group.full_name,
        "color": group.color,
        "position": group.position,
    }


def legislator_to_dict(legislator: Legislator) -> dict:
    constituency = legislator.constituency
    return {
        "id": legislator.id,
        "slug": legislator.slug,
        "chamber": legislator.chamber,
        "first_name": legislator.first_name,
        "last_name": legislator.last_name,
        "full_name": legislator.full_name,
        "photo_url": legislator.photo_url,
        "active": legislator.active,
        "group": group_to_dict(legislator.group),
        "constituency": {
            "department": constituency.department,
            "number": constituency.number,
            "name": constituency.name,
        } if constituency else None,
    }


def ballot_to_dict(ballot: Ballot) -> dict:
    return {
        "id": ballot.id,
        "chamber": ballot.chamber,
        "number": ballot.number,
        "date": ballot.vote_date.isoformat(),
        "title": ballot.title,
        "outcome": ballot.outcome,
        "vote_type": ballot.vote_type,
        "for_count": ballot.for_count,
        "against_count": ballot.against_count,
        "abstain_count": ballot.abstain_count,
        "total_count": ballot.total_count,
        "tags": ballot.tags or [],
        "importance": ballot.importance,
    }


def vote_to_dict(vote: Vote) -> dict:
    return {
        "position": vote.position,
        "delegated": vote.delegated,
        "ballot": ballot_to_dict(vote.ballot),
    }


def candidate_to_dict(candidate: Candidate) -> dict:
    legislator = candidate.legislator
    return {
        "id": candidate.id,
        "slug": candidate.slug,
        "first_name": candidate.first_name,
        "last_name": candidate.last_name,
        "party": candidate.party,
        "photo_url": candidate.photo_url,
        "programme_url": candidate.programme_url,
        "legislator": {
            "id": legislator.id,
            "slug": legislator.slug,
            "full_name": legislator.full_name,
        } if legislator else None,
        "scores": AxisScores.from_candidate(candidate).to_dict(),
        "score_type": candidate.score_type,
        "coherence_score": candidate.coherence_score,
        "ingestion_status": candidate.ingestion_status,
        "active": candidate.active,
        "published_at": candidate.published_at.isoformat() if candidate.published_at else None,
    }


def position_to_dict(position: Position) -> dict:
    return {
        "id": position.id,
        "candidate_id": position.candidate_id,
        "axis": position.axis,
        "subject": position.subject,
        "stance": position.stance,
        "score": position.score,
        "source_type": position.source_type,
        "source_url": position.source_url,
        "coherent": position.coherent,
        "explanation": position.explanation,
    }


def question_to_dict(question: Question) -> dict:
    return {
        "id": question.id,
        "order": question.order,
        "type": question.type,
        "text": question.text,
        "context": question.context,
        "option_a": question.option_a,
        "option_b": question.option_b,
        "label_left": question.label_left,
        "label_right": question.label_right,
        "options": question.options or [],
        "citation": question.citation,
        "citation_author": question.citation_author,
    }


def ingestion_log_to_dict(log: IngestionLog) -> dict:
    return {
        "id": log.id,
        "candidate_id": log.candidate_id,
        "type": log.type,
        "status": log.status,
        "details": log.details,
        "error": log.error,
        "started_at": log.started_at.isoformat() if log.started_at else None,
        "completed_at": log.completed_at.isoformat() if log.completed_at else None,
    }


def legislator_summary(legislator: Optional[Legislator]) -> Optional[dict]:
    if legislator is None:
        return None
    return {
        "id": legislator.id,
        "slug": legislator.slug,
        "first_name": legislator.first_name,
        "last_name": legislator.last_name,
        "photo_url": legislator.photo_url,
        "group": group_to_dict(legislator.group),
    }


def lobbyist_to_dict(lobbyist: Lobbyist) -> dict:
    return {
        "id": lobbyist.id,
        "siren": lobbyist.siren,
        "name": lobbyist.name,
        "type": lobbyist.type,
        "sector": lobbyist.sector,
        "annual_budget": lobbyist.annual_budget,
        "staff_count": lobbyist.staff_count,
        "address": lobbyist.address,
        "city": lobbyist.city,
        "website": lobbyist.website,
    }


def lobby_action_to_dict(action: LobbyAction, with_lobbyist: bool = False) -> dict:
    """Declared action with the targeted legislator, and its author on request."""
    payload = {
        "id": action.id,
        "description": action.description,
        "target": action.target,
        "target_name": action.target_name,
        "bill_reference": action.bill_reference,
        "bill_title": action.bill_title,
        "started_on": action.started_on.isoformat() if action.started_on else None,
        "ended_on": action.ended_on.isoformat() if action.ended_on else None,
        "legislator": legislator_summary(action.legislator),
    }
    if with_lobbyist:
        lobbyist = action.lobbyist
        payload["lobbyist"] = {
            "id": lobbyist.id,
            "name": lobbyist.name,
            "type": lobbyist.type,
            "sector": lobbyist.sector,
        }
    return payload
