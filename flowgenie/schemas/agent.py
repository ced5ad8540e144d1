"""Pydantic schemas for Agent API.

The wire format is camelCase and nests settings/performance; the table
stores them flat.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from flowgenie.models.agent import Agent

RiskTolerance = Literal["low", "medium", "high"]

_camel = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ScheduleConfig(BaseModel):
    model_config = _camel

    enabled: bool = False
    interval: str = ""  # cron expression
    last_executed: datetime | None = None


class SettingsUpdate(BaseModel):
    """Partial settings; only provided keys are merged over the current ones."""

    model_config = _camel

    max_trade_amount: float | None = Field(default=None, gt=0)
    risk_tolerance: RiskTolerance | None = None
    trading_pairs: list[str] | None = None
    schedule: ScheduleConfig | None = None


def _require_text(value: str) -> str:
    text = value.strip()
    if not text:
        raise ValueError("must not be empty")
    return text


class AgentCreate(BaseModel):
    model_config = _camel

    name: str = Field(max_length=120)
    description: str
    prompt: str
    settings: SettingsUpdate | None = None

    @field_validator("name", "description", "prompt")
    @classmethod
    def _trim_required_text(cls, value: str) -> str:
        return _require_text(value)


class AgentUpdate(BaseModel):
    model_config = _camel

    name: str | None = Field(default=None, max_length=120)
    description: str | None = None
    prompt: str | None = None
    settings: SettingsUpdate | None = None
    is_active: bool | None = None

    @field_validator("name", "description", "prompt")
    @classmethod
    def _trim_optional_text(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return _require_text(value)


class SettingsRead(BaseModel):
    model_config = _camel

    max_trade_amount: float
    risk_tolerance: str
    trading_pairs: list[str]
    schedule: ScheduleConfig | None = None


class PerformanceRead(BaseModel):
    model_config = _camel

    total_trades: int
    successful_trades: int
    total_profit: float
    win_rate: float
    last_trade_at: datetime | None = None

    @classmethod
    def from_agent(cls, agent: Agent) -> "PerformanceRead":
        # Derived from the counters on every read; the stored win_rate is not trusted.
        win_rate = agent.successful_trades / agent.total_trades if agent.total_trades > 0 else 0.0
        return cls(
            total_trades=agent.total_trades,
            successful_trades=agent.successful_trades,
            total_profit=agent.total_profit,
            win_rate=min(max(win_rate, 0.0), 1.0),
            last_trade_at=agent.last_trade_at,
        )


class AgentRead(BaseModel):
    model_config = _camel

    id: str
    name: str
    description: str
    user_id: str
    prompt: str
    is_active: bool
    created_at: datetime
    updated_at: datetime
    settings: SettingsRead
    performance: PerformanceRead

    @classmethod
    def from_agent(cls, agent: Agent) -> "AgentRead":
        return cls(
            id=agent.id,
            name=agent.name,
            description=agent.description,
            user_id=agent.user_id,
            prompt=agent.prompt,
            is_active=agent.is_active,
            created_at=agent.created_at,
            updated_at=agent.updated_at,
            settings=SettingsRead(
                max_trade_amount=agent.max_trade_amount,
                risk_tolerance=agent.risk_tolerance,
                trading_pairs=list(agent.trading_pairs or []),
                schedule=agent.schedule,
            ),
            performance=PerformanceRead.from_agent(agent),
        )


class PublicAgentRead(BaseModel):
    """Marketplace view. prompt, user id and settings are NEVER exposed."""

    model_config = _camel

    id: str
    name: str
    description: str
    performance: PerformanceRead
    created_at: datetime

    @classmethod
    def from_agent(cls, agent: Agent) -> "PublicAgentRead":
        return cls(
            id=agent.id,
            name=agent.name,
            description=agent.description,
            performance=PerformanceRead.from_agent(agent),
            created_at=agent.created_at,
        )
