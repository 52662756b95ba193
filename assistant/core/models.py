from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class QueryRecord(BaseModel):
    query: str
    timestamp: datetime
    intent: Optional[str] = None


class Location(BaseModel):
    city: Optional[str] = None
    radius: Optional[int] = Field(default=None, description="Search radius in km")


class PendingClarification(BaseModel):
    missing_fields: List[str]
    original_query: str


class ConversationContext(BaseModel):
    user_id: str
    user_name: Optional[str] = None
    location: Optional[Location] = None
    previous_queries: List[QueryRecord] = Field(default_factory=list)
    waiting_for_clarification: Optional[PendingClarification] = None
    created_at: datetime
    last_active_at: datetime


class IntentResult(BaseModel):
    intent: str
    missing_fields: List[str] = Field(default_factory=list)
    confidence: float = 0.0
    extracted_data: Dict[str, Any] = Field(default_factory=dict)


class ValidatedQuery(BaseModel):
    original_query: str
    intent: str
    confidence: float
    missing_fields: List[str] = Field(default_factory=list)
    extracted_data: Dict[str, Any] = Field(default_factory=dict)
    is_complete: bool


CommandResultType = Literal["output", "system", "error", "none"]


class CommandResult(BaseModel):
    type: CommandResultType
    lines: List[str] = Field(default_factory=list)
