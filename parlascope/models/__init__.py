"""Database models."""

from parlascope.models.group import PoliticalGroup, Constituency
from parlascope.models.legislator import Chamber, Legislator
from parlascope.models.ballot import Ballot, Vote, VoteChoice
from parlascope.models.activity import Amendment, Intervention
from parlascope.models.lobbying import LobbyAction, Lobbyist, LobbyistType, LobbyTarget
from parlascope.models.candidate import (
    Candidate,
    IngestionLog,
    IngestionStatus,
    Position,
    PositionSource,
    ScoreType,
)
from parlascope.models.quiz import (
    Answer,
    MatchResult,
    Question,
    QuestionType,
    QuizSession,
    SessionStatus,
)
from parlascope.models.cache_entry import CacheEntry

__all__ = [
    "PoliticalGroup",
    "Constituency",
    "Chamber",
    "Legislator",
    "Ballot",
    "Vote",
    "VoteChoice",
    "Amendment",
    "Intervention",
    "LobbyAction",
    "Lobbyist",
    "LobbyistType",
    "LobbyTarget",
    "Candidate",
    "IngestionLog",
    "IngestionStatus",
    "Position",
    "PositionSource",
    "ScoreType",
    "Answer",
    "MatchResult",
    "Question",
    "QuestionType",
    "QuizSession",
    "SessionStatus",
    "CacheEntry",
]
