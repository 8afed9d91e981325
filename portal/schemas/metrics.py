from datetime import datetime

from pydantic import BaseModel


class StatusStats(BaseModel):
    total: int
    approved: int
    pending: int
    rejected: int
    approval_rate: int


class RecentListing(BaseModel):
    id: str
    kind: str  # "property" | "project"
    title: str
    agent: str
    agency: str | None
    status: str
    created_at: datetime


class PlatformStats(BaseModel):
    total_agencies: int
    active_agencies: int
    total_users: int
    total_agents: int
    total_agency_admins: int


class AgencyInfo(BaseModel):
    id: str
    name: str
    logo_url: str | None


class AgentStats(BaseModel):
    total_agents: int
    active_agents: int


class TopAgent(BaseModel):
    id: str
    name: str
    properties_count: int
    active: bool


class MetricsOut(BaseModel):
    role: str
    property_stats: StatusStats
    project_stats: StatusStats
    recent_listings: list[RecentListing]
    platform_stats: PlatformStats | None = None
    agency_info: AgencyInfo | None = None
    agent_stats: AgentStats | None = None
    top_agents: list[TopAgent] | None = None
