"""Request bodies and shared response helpers."""

import math
from typing import Any, Optional

from pydantic import BaseModel, Field, HttpUrl

from parlascope.exceptions import BadRequestError
from parlascope.models import IngestionStatus


def pagination_meta(total: int, page: int, limit: int) -> dict:
    total_pages = math.ceil(total / limit) if limit else 0
    return {
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": total_pages,
        "has_next": page < total_pages,
        "has_prev": page > 1,
    }


def parse_slug_list(raw: str, minimum: int, maximum: int) -> list[str]:
    """Split a comma-separated slug list, dropping blanks and duplicates."""
    slugs = list(dict.fromkeys(s.strip() for s in raw.split(",") if s.strip()))
    if not minimum <= len(slugs) <= maximum:
        raise BadRequestError(f"Provide between {minimum} and {maximum} slugs")
    return slugs


class StartSessionRequest(BaseModel):
    age_bracket: Optional[str] = None
    situation: Optional[str] = None
    location: Optional[str] = None


class AnswerRequest(BaseModel):
    session_token: str
    question_id: int
    answer: dict[str, Any] = Field(
        ..., description='e.g. {"choice": "A"}, {"value": 80}, {"order": [...]}, {"agree": "yes"}'
    )
    response_time_ms: Optional[int] = Field(default=None, ge=0)


class CompleteRequest(BaseModel):
    session_token: str


class CandidateCreate(BaseModel):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    party: str = Field(..., min_length=1)
    photo_url: Optional[HttpUrl] = None
    programme_url: Optional[HttpUrl] = None
    legislator_slug: Optional[str] = None


class CandidateUpdate(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=1)
    last_name: Optional[str] = Field(default=None, min_length=1)
    party: Optional[str] = Field(default=None, min_length=1)
    photo_url: Optional[HttpUrl] = None
    programme_url: Optional[HttpUrl] = None
    active: Optional[bool] = None
    ingestion_status: Optional[IngestionStatus] = None


class LinkLegislatorRequest(BaseModel):
    legislator_id: int


class ValidatePositionRequest(BaseModel):
    coherent: bool
    explanation: Optional[str] = None
