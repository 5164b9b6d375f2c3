from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, TypedDict, Annotated
from pydantic import BaseModel, ConfigDict, Field
from langchain_core.messages import BaseMessage
from langgraph.graph.message import add_messages


class VoteType(str, Enum):
    UPVOTE = "upvote"
    DOWNVOTE = "downvote"


class Coordinates(BaseModel):
    model_config = ConfigDict(frozen=True)
    latitude: Optional[float] = None
    longitude: Optional[float] = None


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class Problem(BaseModel):
    model_config = ConfigDict(frozen=True)
    id: str
    title: str = "Untitled problem"
    description: str = ""
    category: str = "other"
    status: str = "reported"
    created_at: str = Field(default_factory=_utc_now_iso)
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    votes_count: int = 0
    comments_count: int = 0
    pincode: Optional[str] = None
    user_vote: Optional[VoteType] = None


class ContributionMetrics(BaseModel):
    reports_count: int = Field(default=0, ge=0)
    comments_count: int = Field(default=0, ge=0)
    votes_count: int = Field(default=0, ge=0)


class ImpactStats(ContributionMetrics):
    points: int = 0
    badges: List[str] = Field(default_factory=list)


class Profile(BaseModel):
    model_config = ConfigDict(extra="allow")
    id: str
    full_name: str = "Citizen"
    points: int = 0
    badges: List[str] = Field(default_factory=list)


class SessionContext(BaseModel):
    """Viewer identity for the lifetime of one signed-in session."""

    user_id: str
    email: Optional[str] = None
    access_token: Optional[str] = None
    profile: Optional[Profile] = None


class Correlation(BaseModel):
    model_config = ConfigDict(extra="allow")
    category_a: str
    category_b: str
    correlation_score: float
    city: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class CorrelationFilters(TypedDict, total=False):
    date_range: Dict[str, Optional[date]]
    categories: List[str]
    city: str


class ImpactState(TypedDict, total=False):
    user_id: str
    previous_badges: List[str]
    metrics: ContributionMetrics
    impact: ImpactStats


class ChatState(TypedDict):
    messages: Annotated[List[BaseMessage], add_messages]


RawRow = Dict[str, Any]
