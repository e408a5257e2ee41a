"""Response models shared by several routers.

Field names are exposed in camelCase to match the front end.
"""

from datetime import date, datetime

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from impact_backend.models.badge import Badge
from impact_backend.services.lifecycle import AwardResult


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class UserResponse(CamelModel):
    id: int
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    profile_image_url: str | None = None
    role: str
    program: str | None = None
    coins: int = 0
    anonymize_leaderboard: bool = False
    created_at: datetime | None = None


class UserWithCountsResponse(UserResponse):
    applications: int = 0
    completed_applications: int = 0


class LeaderboardEntryResponse(CamelModel):
    id: int
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    profile_image_url: str | None = None
    program: str | None = None
    role: str
    coins: int
    anonymize_leaderboard: bool
    applications: int
    completed_applications: int
    rank: int


class UserStatsResponse(CamelModel):
    total_applications: int
    completed_applications: int
    total_hours: float
    total_coins: int


class OpportunityResponse(CamelModel):
    id: int
    title: str
    short_description: str
    full_description: str
    type: str
    duration: str
    custom_duration: str | None = None
    skills: list[str] | None = None
    location: str | None = None
    schedule: str | None = None
    capacity: int | None = None
    total_required_hours: int | None = None
    status: str
    coins_per_hour: int | None = None
    max_coins: int | None = None
    visibility: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None
    image_url: str | None = None
    created_by: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    application_count: int = 0


class OpportunityListResponse(CamelModel):
    opportunities: list[OpportunityResponse]
    total: int


class BadgeResponse(CamelModel):
    id: int
    name: str
    description: str | None = None
    icon: str | None = None
    coins_required: int
    type: str | None = None


class ApplicationResponse(CamelModel):
    id: int
    user_id: int
    opportunity_id: int
    status: str
    applied_at: datetime | None = None
    completed_at: datetime | None = None
    notes: str | None = None
    coins_awarded: int = 0
    hours_completed: float = 0
    submitted_hours: float = 0
    hour_submission_date: datetime | None = None
    admin_feedback: str | None = None


class ApplicationWithDetailsResponse(ApplicationResponse):
    user: UserResponse | None = None
    opportunity: OpportunityResponse | None = None


class AwardResponse(ApplicationResponse):
    coins_granted: int = 0
    new_badges: list[BadgeResponse] = []


class DailyCountResponse(CamelModel):
    date: date
    count: int


class TypeCountResponse(CamelModel):
    type: str
    count: int


class AnalyticsResponse(CamelModel):
    total_opportunities: int
    total_applications: int
    completed_applications: int
    average_apply_rate: float
    completion_rate: float
    applications_over_time: list[DailyCountResponse]
    applications_by_type: list[TypeCountResponse]


def build_opportunity_response(opportunity, application_count: int) -> OpportunityResponse:
    response = OpportunityResponse.model_validate(opportunity)
    return response.model_copy(update={'application_count': application_count, 'skills': opportunity.skills or []})


def build_badge_responses(badges: list[Badge]) -> list[BadgeResponse]:
    return [BadgeResponse.model_validate(badge) for badge in badges]


def build_award_response(result: AwardResult) -> AwardResponse:
    application = ApplicationResponse.model_validate(result.application)
    return AwardResponse(
        **application.model_dump(),
        coins_granted=result.coins_granted,
        new_badges=build_badge_responses(result.new_badges),
    )
