"""Database models."""

from flowgenie.models.agent import Agent
from flowgenie.models.user import User

__all__ = [
    "Agent",
    "User",
]
