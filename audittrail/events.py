from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ServerInfo(BaseModel):
    # filled in by the ingestion gateway only, never by the client
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    received_at: str = Field(..., alias="receivedAt", description="server clock, ISO-8601 UTC")
    ip_hash: str = Field(..., alias="ipHash", description="sha256 prefix of the client identifier")
    user_agent: str = Field("", alias="userAgent")
    referer: str = ""


class Event(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    event_type: Optional[str] = Field(None, alias="eventType", description="e.g. page_view/click/page_exit")
    visitor_id: Optional[str] = Field(None, alias="visitorId")
    session_id: Optional[str] = Field(None, alias="sessionId")
    timestamp: Optional[str] = Field(None, description="client reported, not trusted for ordering")
    payload: Dict[str, Any] = Field(default_factory=dict)
    server: Optional[ServerInfo] = None

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class Summary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_events: int = Field(..., alias="totalEvents")
    unique_visitors: int = Field(..., alias="uniqueVisitors")
    events_by_type: Dict[str, int] = Field(default_factory=dict, alias="eventsByType")


class PageCount(BaseModel):
    path: str
    count: int


class TimeRange(BaseModel):
    first: Optional[str] = None
    last: Optional[str] = None


class Stats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_events: int = Field(..., alias="totalEvents")
    page_views: int = Field(..., alias="pageViews")
    clicks: int
    form_submissions: int = Field(..., alias="formSubmissions")
    unique_sessions: int = Field(..., alias="uniqueSessions")
    unique_visitors: int = Field(..., alias="uniqueVisitors")
    devices: Dict[str, int]
    top_pages: List[PageCount] = Field(default_factory=list, alias="topPages")
    recent_events: List[Event] = Field(default_factory=list, alias="recentEvents")
    time_range: TimeRange = Field(default_factory=TimeRange, alias="timeRange")
    average_time_on_page: int = Field(0, alias="averageTimeOnPage")
