from typing import Literal

from fastapi import APIRouter, Depends, status
from pydantic import Field, field_validator
from sqlalchemy.orm import Session

from impact_backend.auth.dependencies import get_current_admin, get_current_user
from impact_backend.core.errors import ForbiddenError
from impact_backend.database import get_db
from impact_backend.models.user import User
from impact_backend.schemas import (
    ApplicationResponse,
    ApplicationWithDetailsResponse,
    AwardResponse,
    CamelModel,
    build_award_response,
)
from impact_backend.services import lifecycle
from impact_backend.services.opportunities import get_opportunity

router = APIRouter(tags=['applications'])

ApplicationStatus = Literal['pending', 'accepted', 'hours_submitted', 'hours_approved', 'completed', 'rejected']
MAX_FEEDBACK_LENGTH = 2000


def _strip_optional_text(value: str | None) -> str | None:
    if value is None:
        return None
    normalized = value.strip()
    if len(normalized) > MAX_FEEDBACK_LENGTH:
        raise ValueError(f'Text must be {MAX_FEEDBACK_LENGTH} characters or fewer.')
    return normalized or None


class CreateApplicationRequest(CamelModel):
    opportunity_id: int
    user_id: int | None = None


class UpdateStatusRequest(CamelModel):
    status: ApplicationStatus
    notes: str | None = None
    hours_completed: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    admin_feedback: str | None = None

    @field_validator('notes', 'admin_feedback')
    @classmethod
    def validate_text(cls, value: str | None) -> str | None:
        return _strip_optional_text(value)


class SubmitHoursRequest(CamelModel):
    # Non-positive values are rejected in lifecycle.submit_hours.
    hours: float = Field(allow_inf_nan=False)


class ApproveHoursRequest(CamelModel):
    coins_awarded: int | None = None
    feedback: str | None = None

    @field_validator('feedback')
    @classmethod
    def validate_feedback(cls, value: str | None) -> str | None:
        return _strip_optional_text(value)


class RejectHoursRequest(CamelModel):
    feedback: str | None = None


def ensure_owner_or_admin(current_user: User, user_id: int, detail: str = 'Access denied.') -> None:
    if current_user.id != user_id and current_user.role != 'admin':
        raise ForbiddenError(detail)


@router.post('', response_model=ApplicationResponse, status_code=status.HTTP_201_CREATED)
def create_application(
    data: CreateApplicationRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if data.user_id is not None and data.user_id != current_user.id:
        raise ForbiddenError('Applications can only be created for your own account.')
    return lifecycle.create_application(db, current_user, data.opportunity_id)


@router.get('/user/{user_id}', response_model=list[ApplicationWithDetailsResponse])
def list_user_applications(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_owner_or_admin(current_user, user_id)
    return lifecycle.list_applications_by_user(db, user_id)


@router.get('/opportunity/{opportunity_id}', response_model=list[ApplicationWithDetailsResponse])
def list_opportunity_applications(
    opportunity_id: int,
    current_user: User = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    get_opportunity(db, opportunity_id)
    return lifecycle.list_applications_by_opportunity(db, opportunity_id)


@router.put('/{application_id}/status', response_model=AwardResponse)
def update_application_status(
    application_id: int,
    data: UpdateStatusRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = lifecycle.transition_application(
        db,
        current_user,
        application_id,
        data.status,
        notes=data.notes,
        hours_completed=data.hours_completed,
        admin_feedback=data.admin_feedback,
    )
    return build_award_response(result)


@router.post('/{application_id}/submit-hours', response_model=ApplicationResponse)
def submit_application_hours(
    application_id: int,
    data: SubmitHoursRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return lifecycle.submit_hours(db, current_user, application_id, data.hours)


@router.post('/{application_id}/approve-hours', response_model=AwardResponse)
def approve_application_hours(
    application_id: int,
    data: ApproveHoursRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = lifecycle.approve_hours(
        db,
        current_user,
        application_id,
        coins_awarded=data.coins_awarded,
        feedback=data.feedback,
    )
    return build_award_response(result)


@router.post('/{application_id}/reject-hours', response_model=ApplicationResponse)
def reject_application_hours(
    application_id: int,
    data: RejectHoursRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return lifecycle.reject_hours(db, current_user, application_id, data.feedback)
