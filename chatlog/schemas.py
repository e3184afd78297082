"""Pydantic records returned by the storage and query layers."""
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class Message(BaseModel):
    """A stored chat message. Serialized with the dashboard's field names."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    username: str
    body: str = Field(..., serialization_alias="message")
    timestamp: str
    source_address: Optional[str] = Field(None, serialization_alias="ip_address")


class UserStats(BaseModel):
    username: str
    message_count: int
    first_seen: str
    last_seen: str


class DayCount(BaseModel):
    date: str
    count: int


class TopUser(BaseModel):
    username: str
    count: int
    last_seen: str


class StatsSnapshot(BaseModel):
    """Aggregate dashboard view; sub-queries are not read in one transaction."""
    model_config = ConfigDict(populate_by_name=True)

    total_messages: int = Field(..., serialization_alias="totalMessages")
    total_users: int = Field(..., serialization_alias="totalUsers")
    messages_per_day: List[DayCount] = Field(..., serialization_alias="messagesPerDay")
    top_users: List[TopUser] = Field(..., serialization_alias="topUsers")


class IngestResult(BaseModel):
    message: Message
    stats_updated: bool = True
