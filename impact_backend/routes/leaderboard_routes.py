from typing import Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from impact_backend.auth.dependencies import get_current_user, get_optional_user
from impact_backend.core import config
from impact_backend.core.errors import ForbiddenError
from impact_backend.database import get_db
from impact_backend.models.user import User
from impact_backend.schemas import (
    BadgeResponse,
    LeaderboardEntryResponse,
    UserStatsResponse,
    build_badge_responses,
)
from impact_backend.services import badges as badge_service
from impact_backend.services import users as user_service
from impact_backend.services.leaderboard import get_leaderboard

router = APIRouter(tags=['leaderboard'])


@router.get('/leaderboard', response_model=list[LeaderboardEntryResponse])
def leaderboard(
    limit: int = Query(default=config.LEADERBOARD_DEFAULT_LIMIT, ge=1, le=config.LEADERBOARD_MAX_LIMIT),
    timeframe: Literal['all', 'month', 'semester'] = Query(default='all'),
    opportunity_id: int | None = Query(default=None, alias='opportunityId'),
    current_user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    return get_leaderboard(
        db,
        limit=limit,
        timeframe=timeframe,
        opportunity_id=opportunity_id,
        viewer_id=current_user.id if current_user else None,
    )


@router.get('/badges', response_model=list[BadgeResponse])
def list_badges(db: Session = Depends(get_db)):
    return build_badge_responses(badge_service.list_badges(db))


@router.get('/badges/user/{user_id}', response_model=list[BadgeResponse])
def list_user_badges(user_id: int, db: Session = Depends(get_db)):
    return build_badge_responses(badge_service.list_user_badges(db, user_id))


@router.get('/users/{user_id}/stats', response_model=UserStatsResponse)
def user_stats(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if current_user.id != user_id and current_user.role != 'admin':
        raise ForbiddenError('Access denied.')
    return user_service.get_user_stats(db, user_id)
