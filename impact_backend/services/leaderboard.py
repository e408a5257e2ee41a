"""Student leaderboard ranked by coin balance."""

import calendar
from datetime import datetime
from typing import Any

from sqlalchemy import and_, case, func, select
from sqlalchemy.orm import Session

from impact_backend.core import config
from impact_backend.core.errors import InvalidInputError
from impact_backend.models.application import Application
from impact_backend.models.user import User

TIMEFRAME_MONTHS = {
    'all': None,
    'month': 1,
    'semester': 6,
}
ANONYMOUS_NAME = 'Anonymous Student'


def shift_months(moment: datetime, months: int) -> datetime:
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month_offset = divmod(month_index, 12)
    month = month_offset + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def timeframe_start(timeframe: str, now: datetime | None = None) -> datetime | None:
    if timeframe not in TIMEFRAME_MONTHS:
        raise InvalidInputError(f"Unknown leaderboard timeframe '{timeframe}'.")

    months = TIMEFRAME_MONTHS[timeframe]
    if months is None:
        return None
    return shift_months(now or datetime.now(), months)


def get_leaderboard(
    db: Session,
    limit: int | None = None,
    timeframe: str = 'all',
    opportunity_id: int | None = None,
    viewer_id: int | None = None,
    now: datetime | None = None,
) -> list[dict[str, Any]]:
    """Rank students by coins, breaking ties by completed applications.

    The timeframe only narrows which completions count toward the tie-break;
    the coin balance itself is always the all-time total.
    """
    limit = limit or config.LEADERBOARD_DEFAULT_LIMIT
    window_start = timeframe_start(timeframe, now)

    completed_condition = Application.status == 'completed'
    if window_start is not None:
        completed_condition = and_(completed_condition, Application.completed_at >= window_start)

    total_applications = func.count(Application.id).label('total_applications')
    completed_applications = func.coalesce(
        func.sum(case((completed_condition, 1), else_=0)),
        0,
    ).label('completed_applications')

    query = db.query(User, total_applications, completed_applications).outerjoin(
        Application,
        Application.user_id == User.id,
    ).filter(User.role == 'student')

    if opportunity_id is not None:
        applicants = select(Application.user_id).where(Application.opportunity_id == opportunity_id)
        query = query.filter(User.id.in_(applicants))

    rows = query.group_by(User.id).order_by(
        User.coins.desc(),
        completed_applications.desc(),
        User.id.asc(),
    ).limit(limit).all()

    leaderboard: list[dict[str, Any]] = []
    for position, (user, total_count, completed_count) in enumerate(rows, start=1):
        hidden = bool(user.anonymize_leaderboard) and user.id != viewer_id
        leaderboard.append({
            'id': user.id,
            'email': None if hidden else user.email,
            'first_name': ANONYMOUS_NAME if hidden else user.first_name,
            'last_name': None if hidden else user.last_name,
            'profile_image_url': None if hidden else user.profile_image_url,
            'program': user.program,
            'role': user.role,
            'coins': user.coins or 0,
            'anonymize_leaderboard': bool(user.anonymize_leaderboard),
            'applications': int(total_count or 0),
            'completed_applications': int(completed_count or 0),
            'rank': position,
        })
    return leaderboard
