"""Agent registry backed by SQLModel tables.

Ownership is not checked here; the API layer does that before calling in.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.engine import Engine
from sqlmodel import select

from flowgenie.database import store_session
from flowgenie.errors import NotFoundError
from flowgenie.models.agent import Agent
from flowgenie.schemas.agent import SettingsUpdate
from flowgenie.utils.ids import generate_id

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = ("name", "description", "prompt", "is_active")


def _apply_settings(agent: Agent, overrides: SettingsUpdate | dict | None):
    if overrides is None:
        return
    if isinstance(overrides, dict):
        overrides = SettingsUpdate.model_validate(overrides)
    data = overrides.model_dump(exclude_unset=True, mode="json")
    for key, value in data.items():
        if value is None and key != "schedule":
            continue
        setattr(agent, key, list(value) if key == "trading_pairs" else value)


class AgentRegistry:
    """Stores Agent records keyed by generated id."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def _session(self):
        return store_session(self.engine)

    def create(
        self,
        owner_id: str,
        name: str,
        description: str,
        prompt: str,
        settings_overrides: SettingsUpdate | dict | None = None,
    ) -> Agent:
        agent = Agent(
            id=generate_id("agent"),
            user_id=owner_id,
            name=name,
            description=description,
            prompt=prompt,
        )
        _apply_settings(agent, settings_overrides)

        with self._session() as session:
            session.add(agent)
            session.commit()
            session.refresh(agent)
        logger.info(f"Created agent {agent.id} for user {owner_id}")
        return agent

    def get(self, agent_id: str) -> Agent | None:
        with self._session() as session:
            return session.get(Agent, agent_id)

    def list_by_owner(self, owner_id: str) -> list[Agent]:
        with self._session() as session:
            return list(session.exec(select(Agent).where(Agent.user_id == owner_id)).all())

    def list_all(self) -> list[Agent]:
        with self._session() as session:
            return list(session.exec(select(Agent)).all())

    def list_public(self) -> list[Agent]:
        """Active agents, for the redacted marketplace listing."""
        with self._session() as session:
            return list(session.exec(select(Agent).where(Agent.is_active == True)).all())  # noqa: E712

    def update(self, agent_id: str, fields: dict[str, Any]) -> Agent:
        """Overwrite only the provided fields. ``settings`` merges over the current settings."""
        with self._session() as session:
            agent = session.get(Agent, agent_id)
            if agent is None:
                raise NotFoundError(f"Agent {agent_id} not found")

            for key, value in fields.items():
                if key == "settings":
                    _apply_settings(agent, value)
                elif key in _EDITABLE_FIELDS and value is not None:
                    setattr(agent, key, value)
            agent.updated_at = datetime.now(timezone.utc)

            session.add(agent)
            session.commit()
            session.refresh(agent)
            return agent

    def deactivate(self, agent_id: str) -> Agent:
        """Logical delete: the record stays readable with is_active=False."""
        with self._session() as session:
            agent = session.get(Agent, agent_id)
            if agent is None:
                raise NotFoundError(f"Agent {agent_id} not found")
            agent.is_active = False
            agent.updated_at = datetime.now(timezone.utc)
            session.add(agent)
            session.commit()
            session.refresh(agent)
        logger.info(f"Deactivated agent {agent_id}")
        return agent

    def apply_performance(self, agent_id: str, mutate: Callable[[Agent], None]) -> Agent | None:
        """Load, mutate and save an agent in one session. Returns None if it is gone."""
        with self._session() as session:
            agent = session.get(Agent, agent_id)
            if agent is None:
                return None
            mutate(agent)
            session.add(agent)
            session.commit()
            session.refresh(agent)
            return agent
