from pydantic import BaseModel

from app.schemas.ticket import TicketRead


class DashboardStats(BaseModel):
    total: int = 0
    open: int = 0
    in_progress: int = 0
    resolved: int = 0


class Dashboard(BaseModel):
    stats: DashboardStats
    recent_tickets: list[TicketRead]


class StatusDistribution(BaseModel):
    open: int = 0
    in_progress: int = 0
    resolved: int = 0
    closed: int = 0


class PriorityDistribution(BaseModel):
    urgent: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0


class AgeDistribution(BaseModel):
    less_than_day: int = 0
    less_than_week: int = 0
    less_than_month: int = 0
    over_month: int = 0


class PerformanceMetrics(BaseModel):
    total_tickets: int = 0
    avg_resolution_days: float = 0.0
    status_distribution: StatusDistribution = StatusDistribution()
    priority_distribution: PriorityDistribution = PriorityDistribution()
    age_distribution: AgeDistribution = AgeDistribution()
