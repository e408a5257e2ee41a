from typing import Literal

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import Field, field_validator
from sqlalchemy.orm import Session

from impact_backend.auth.dependencies import get_current_admin
from impact_backend.core import config
from impact_backend.database import get_db
from impact_backend.models.user import User
from impact_backend.schemas import (
    CamelModel,
    OpportunityListResponse,
    OpportunityResponse,
    build_opportunity_response,
)
from impact_backend.services import opportunities as opportunity_service

router = APIRouter(tags=['opportunities'])
admin_router = APIRouter(tags=['admin'])

OpportunityType = Literal['teaching', 'donation', 'mentoring', 'community_service']
OpportunityDuration = Literal['instant', '1-3days', '1week', '2-4weeks', 'custom']
OpportunityStatus = Literal['open', 'closed', 'filled']
MAX_SHORT_DESCRIPTION_LENGTH = 160
NON_NULLABLE_FIELDS = {'title', 'short_description', 'full_description', 'type', 'duration', 'status'}


def _normalize_skills(value: list[str] | None) -> list[str] | None:
    if value is None:
        return None
    return [skill.strip() for skill in value if skill and skill.strip()]


class CreateOpportunityRequest(CamelModel):
    title: str = Field(min_length=1)
    short_description: str = Field(min_length=1, max_length=MAX_SHORT_DESCRIPTION_LENGTH)
    full_description: str = Field(min_length=1)
    type: OpportunityType
    duration: OpportunityDuration
    custom_duration: str | None = None
    skills: list[str] = []
    location: str | None = None
    schedule: str | None = None
    capacity: int | None = Field(default=None, ge=1)
    total_required_hours: int | None = Field(default=None, ge=1)
    status: OpportunityStatus = 'open'
    coins_per_hour: int = Field(default=config.DEFAULT_COINS_PER_HOUR, gt=0)
    max_coins: int = Field(default=config.DEFAULT_MAX_COINS, gt=0)
    visibility: Literal['public', 'private'] = 'public'
    contact_email: str | None = None
    contact_phone: str | None = None
    image_url: str | None = None

    @field_validator('skills')
    @classmethod
    def validate_skills(cls, value: list[str]) -> list[str]:
        return _normalize_skills(value) or []


class UpdateOpportunityRequest(CamelModel):
    title: str | None = Field(default=None, min_length=1)
    short_description: str | None = Field(default=None, min_length=1, max_length=MAX_SHORT_DESCRIPTION_LENGTH)
    full_description: str | None = Field(default=None, min_length=1)
    type: OpportunityType | None = None
    duration: OpportunityDuration | None = None
    custom_duration: str | None = None
    skills: list[str] | None = None
    location: str | None = None
    schedule: str | None = None
    capacity: int | None = Field(default=None, ge=1)
    total_required_hours: int | None = Field(default=None, ge=1)
    status: OpportunityStatus | None = None
    coins_per_hour: int | None = Field(default=None, gt=0)
    max_coins: int | None = Field(default=None, gt=0)
    visibility: Literal['public', 'private'] | None = None
    contact_email: str | None = None
    contact_phone: str | None = None
    image_url: str | None = None

    @field_validator('skills')
    @classmethod
    def validate_skills(cls, value: list[str] | None) -> list[str] | None:
        return _normalize_skills(value)


@router.get('', response_model=OpportunityListResponse)
def list_opportunities(
    search: str | None = Query(default=None),
    type: list[str] | None = Query(default=None),
    duration: list[str] | None = Query(default=None),
    skills: list[str] | None = Query(default=None),
    status: list[str] | None = Query(default=None),
    limit: int = Query(default=config.OPPORTUNITY_PAGE_SIZE, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
):
    page, total = opportunity_service.list_opportunities(
        db,
        search=search,
        types=type,
        durations=duration,
        skills=skills,
        statuses=status,
        limit=limit,
        offset=offset,
    )
    return OpportunityListResponse(
        opportunities=[build_opportunity_response(opportunity, count) for opportunity, count in page],
        total=total,
    )


@router.get('/{opportunity_id}', response_model=OpportunityResponse)
def get_opportunity(opportunity_id: int, db: Session = Depends(get_db)):
    opportunity, count = opportunity_service.get_opportunity_with_count(db, opportunity_id)
    return build_opportunity_response(opportunity, count)


@router.post('', response_model=OpportunityResponse, status_code=status.HTTP_201_CREATED)
def create_opportunity(
    data: CreateOpportunityRequest,
    current_user: User = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    opportunity = opportunity_service.create_opportunity(db, current_user.id, data.model_dump())
    return build_opportunity_response(opportunity, 0)


@router.put('/{opportunity_id}', response_model=OpportunityResponse)
def update_opportunity(
    opportunity_id: int,
    data: UpdateOpportunityRequest,
    current_user: User = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    changes = {
        field_name: value
        for field_name, value in data.model_dump(exclude_unset=True).items()
        if value is not None or field_name not in NON_NULLABLE_FIELDS
    }
    opportunity_service.update_opportunity(db, opportunity_id, changes)
    opportunity, count = opportunity_service.get_opportunity_with_count(db, opportunity_id)
    return build_opportunity_response(opportunity, count)


@router.delete('/{opportunity_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_opportunity(
    opportunity_id: int,
    current_user: User = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    opportunity_service.delete_opportunity(db, opportunity_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@admin_router.get('/opportunities', response_model=list[OpportunityResponse])
def list_my_opportunities(current_user: User = Depends(get_current_admin), db: Session = Depends(get_db)):
    return [
        build_opportunity_response(opportunity, count)
        for opportunity, count in opportunity_service.list_opportunities_by_creator(db, current_user.id)
    ]
