"""Agent model: a configured trading persona owned by a user.

Settings and performance are stored as flat columns; the API nests them.
"""

from datetime import datetime, timezone
from typing import Any

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import JSON


class Agent(SQLModel, table=True):
    __tablename__ = "agent"

    id: str = Field(primary_key=True)  # e.g. "agent_1718000000000_k3j9x0a2b"
    user_id: str = Field(index=True)
    name: str
    description: str
    prompt: str
    is_active: bool = True

    # Settings
    max_trade_amount: float = 100.0
    risk_tolerance: str = "medium"  # "low", "medium", "high"
    trading_pairs: list[str] = Field(default_factory=list, sa_column=Column(JSON))
    schedule: dict[str, Any] | None = Field(default=None, sa_column=Column(JSON))

    # Performance
    total_trades: int = 0
    successful_trades: int = 0
    total_profit: float = 0.0
    win_rate: float = 0.0
    last_trade_at: datetime | None = None

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
