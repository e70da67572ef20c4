"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import List, Optional

from lunch_ledger.domain.forecast import classify_guidance, classify_impact
from lunch_ledger.domain.models import (
    Achievement,
    AchievementState,
    GuidanceTier,
    ImpactForecast,
    ImpactTier,
    InvestmentSnapshot,
    Level,
    TransactionRecord,
)


class ExperienceSchema(BaseModel):
    """Single logged experience inside the current window"""

    id: str
    cost_cents: int
    timestamp: datetime
    category: str
    restaurant_name: Optional[str] = None

    @classmethod
    def from_record(cls, record: TransactionRecord) -> "ExperienceSchema":
        return cls(
            id=record.id,
            cost_cents=record.cost_cents,
            timestamp=record.timestamp,
            category=record.category,
            restaurant_name=record.restaurant_name,
        )


class SnapshotResponse(BaseModel):
    """Response for GET /v1/snapshot"""

    week_start: date
    week_end: date
    weekly_capacity_cents: int
    current_spent_cents: int
    remaining_capacity_cents: int
    experiences_logged: int
    target_experiences: int
    capacity_progress: Optional[float]  # null when spending against zero capacity
    experience_progress: float
    capacity_usage_level: ImpactTier
    investment_guidance_level: GuidanceTier
    window_transactions: List[ExperienceSchema]
    is_loading: bool
    error_message: Optional[str] = None

    @classmethod
    def from_snapshot(cls, snapshot: InvestmentSnapshot) -> "SnapshotResponse":
        progress = snapshot.capacity_progress
        return cls(
            week_start=snapshot.week_start,
            week_end=snapshot.week_end,
            weekly_capacity_cents=snapshot.weekly_capacity_cents,
            current_spent_cents=snapshot.current_spent_cents,
            remaining_capacity_cents=snapshot.remaining_capacity_cents,
            experiences_logged=snapshot.experiences_logged,
            target_experiences=snapshot.target_experiences,
            capacity_progress=progress if progress != float("inf") else None,
            experience_progress=snapshot.experience_progress,
            capacity_usage_level=classify_impact(progress),
            investment_guidance_level=classify_guidance(progress),
            window_transactions=[ExperienceSchema.from_record(r) for r in snapshot.window_transactions],
            is_loading=snapshot.is_loading,
            error_message=snapshot.error_message,
        )


class CapacityRequest(BaseModel):
    """Request body for PUT /v1/capacity"""

    weekly_capacity_cents: int = Field(..., ge=0, description="New weekly capacity in cents")


class SessionRequest(BaseModel):
    """Request body for PUT /v1/session"""

    user_id: str = Field(..., min_length=1, description="User identifier")


class ForecastRequest(BaseModel):
    """Request body for POST /v1/forecast"""

    cost_cents: int = Field(..., gt=0, description="Prospective experience cost in cents")


class ForecastResponse(BaseModel):
    """Response for POST /v1/forecast"""

    prospective_cost_cents: int
    projected_spent_cents: int
    projected_remaining_cents: int
    impact_tier: ImpactTier
    guidance_tier: GuidanceTier
    message: str
    exceeds_capacity: bool

    @classmethod
    def from_forecast(cls, impact: ImpactForecast) -> "ForecastResponse":
        return cls(
            prospective_cost_cents=impact.prospective_cost_cents,
            projected_spent_cents=impact.projected_spent_cents,
            projected_remaining_cents=impact.projected_remaining_cents,
            impact_tier=impact.impact_tier,
            guidance_tier=impact.guidance_tier,
            message=impact.message,
            exceeds_capacity=impact.exceeds_capacity,
        )


class AchievementSchema(BaseModel):
    """Single catalog entry with its unlock status"""

    id: str
    title: str
    description: str
    category: str
    points: int
    icon_ref: str
    is_unlocked: bool
    unlocked_at: Optional[datetime] = None

    @classmethod
    def from_achievement(cls, achievement: Achievement) -> "AchievementSchema":
        return cls(
            id=achievement.id,
            title=achievement.title,
            description=achievement.description,
            category=achievement.category,
            points=achievement.points,
            icon_ref=achievement.icon_ref,
            is_unlocked=achievement.is_unlocked,
            unlocked_at=achievement.unlocked_at,
        )


class AchievementStateResponse(BaseModel):
    """Response for GET /v1/achievements"""

    total_points: int
    current_level: Level
    latest_unlocked: Optional[AchievementSchema] = None
    unlocked: List[AchievementSchema]
    catalog: List[AchievementSchema]

    @classmethod
    def from_state(cls, state: AchievementState) -> "AchievementStateResponse":
        latest = state.latest_unlocked
        return cls(
            total_points=state.total_points,
            current_level=state.current_level,
            latest_unlocked=AchievementSchema.from_achievement(latest) if latest is not None else None,
            unlocked=[AchievementSchema.from_achievement(a) for a in state.unlocked.values()],
            catalog=[AchievementSchema.from_achievement(a) for a in state.achievements],
        )
