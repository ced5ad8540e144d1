"""Pydantic schemas for agent commands.

Commands travel as an open ``parameters`` mapping; the executor narrows it
into one parameter model per command type.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from flowgenie.utils.constants import (
    DEFAULT_COLLECTION_ADDRESS,
    DEFAULT_CONFIDENCE,
    DEFAULT_REASONING,
)


class CommandType(str, Enum):
    BUY = "buy"
    SELL = "sell"
    ANALYZE = "analyze"
    SCHEDULE = "schedule"
    STOP = "stop"


class AgentCommand(BaseModel):
    """A proposed or executed instruction. Never persisted."""

    type: str
    parameters: dict[str, Any] = Field(default_factory=dict)
    confidence: float = DEFAULT_CONFIDENCE
    reasoning: str = DEFAULT_REASONING

    @field_validator("parameters", mode="before")
    @classmethod
    def _default_parameters(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("confidence", mode="before")
    @classmethod
    def _default_confidence(cls, value: Any) -> Any:
        return DEFAULT_CONFIDENCE if value is None else value

    @field_validator("confidence")
    @classmethod
    def _clamp_confidence(cls, value: float) -> float:
        return max(0.0, min(1.0, value))

    @field_validator("reasoning", mode="before")
    @classmethod
    def _default_reasoning(cls, value: Any) -> Any:
        return value or DEFAULT_REASONING


class _Parameters(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,  # NFT ids arrive as numbers or strings
    )


class TradeParameters(_Parameters):
    nft_id: str = Field(min_length=1)
    price: float = Field(gt=0)
    marketplace_address: str = Field(min_length=1)

    @field_validator("nft_id")
    @classmethod
    def _numeric_token_id(cls, value: str) -> str:
        # Flow NFT ids are UInt64
        token_id = value.strip()
        if not token_id.isdigit():
            raise ValueError("must be a numeric token id")
        return token_id


class BuyParameters(TradeParameters):
    pass


class SellParameters(TradeParameters):
    pass


class AnalyzeParameters(_Parameters):
    user_address: str = Field(min_length=1)
    collection_address: str = DEFAULT_COLLECTION_ADDRESS

    @field_validator("collection_address", mode="before")
    @classmethod
    def _default_collection(cls, value: Any) -> Any:
        return value or DEFAULT_COLLECTION_ADDRESS


class ScheduleParameters(_Parameters):
    model_config = ConfigDict(extra="allow")

    interval: str | None = None
    action: str | None = None
    amount: float | None = None


class StopParameters(_Parameters):
    model_config = ConfigDict(extra="allow")


class DefiParameters(_Parameters):
    strategy: str = Field(min_length=1)
    amount: float = Field(gt=0)
    token_address: str = Field(min_length=1)


PARAMETER_MODELS: dict[CommandType, type[_Parameters]] = {
    CommandType.BUY: BuyParameters,
    CommandType.SELL: SellParameters,
    CommandType.ANALYZE: AnalyzeParameters,
    CommandType.SCHEDULE: ScheduleParameters,
    CommandType.STOP: StopParameters,
}


class LastSale(BaseModel):
    price: float
    date: datetime


class MarketItem(BaseModel):
    """One priced listing passed to the interpreter as context."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, coerce_numbers_to_str=True)

    nft_id: str
    name: str
    price: float
    rarity: str = ""
    series: str = ""
    set_name: str = Field(default="", alias="set")
    marketplace: str = ""
    last_sale: LastSale | None = None


class CommandRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    command: str = Field(min_length=1)
    market_data: list[MarketItem] | None = None


class ExecuteRequest(BaseModel):
    type: str = Field(min_length=1)
    parameters: dict[str, Any]
    confidence: float | None = None
    reasoning: str | None = None

    def to_command(self) -> AgentCommand:
        return AgentCommand(
            type=self.type,
            parameters=self.parameters,
            confidence=self.confidence,
            reasoning=self.reasoning,
        )


class ActionExecuteRequest(BaseModel):
    parameters: dict[str, Any]
