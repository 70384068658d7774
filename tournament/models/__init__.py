"""Database models."""
from tournament.models.base import Base, init_db
from tournament.models.tournament import Tournament
from tournament.models.category import Category, CategoryType, TournamentFormat
from tournament.models.player import Player
from tournament.models.court import Court
from tournament.models.registration import Registration
from tournament.models.match import Match, MatchStatus
from tournament.models.user import User  # noqa: F401 - for metadata

__all__ = [
    "Base",
    "Tournament",
    "Category",
    "CategoryType",
    "TournamentFormat",
    "Player",
    "Court",
    "Registration",
    "Match",
    "MatchStatus",
    "User",
    "init_db",
]
