"""Point-in-time platform analytics for administrators."""

from datetime import date, datetime, time, timedelta
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from impact_backend.core import config
from impact_backend.models.application import Application
from impact_backend.models.opportunity import Opportunity


def applications_over_time(db: Session, today: date, days: int) -> list[dict[str, Any]]:
    """Daily application counts for the last ``days`` days, including empty days."""
    first_day = today - timedelta(days=days - 1)
    applied_times = db.query(Application.applied_at).filter(
        Application.applied_at >= datetime.combine(first_day, time.min),
    ).all()

    counts = {first_day + timedelta(days=offset): 0 for offset in range(days)}
    for (applied_at,) in applied_times:
        applied_day = applied_at.date()
        if applied_day in counts:
            counts[applied_day] += 1

    return [{'date': day, 'count': count} for day, count in counts.items()]


def applications_by_type(db: Session) -> list[dict[str, Any]]:
    application_count = func.count(Application.id)
    rows = db.query(Opportunity.type, application_count).select_from(Application).outerjoin(
        Opportunity,
        Application.opportunity_id == Opportunity.id,
    ).group_by(Opportunity.type).order_by(application_count.desc()).all()

    return [{'type': opportunity_type or 'unknown', 'count': int(count)} for opportunity_type, count in rows]


def get_analytics(db: Session, today: date | None = None) -> dict[str, Any]:
    today = today or date.today()

    total_opportunities = db.query(func.count(Opportunity.id)).scalar() or 0
    total_applications = db.query(func.count(Application.id)).scalar() or 0
    completed_applications = db.query(func.count(Application.id)).filter(
        Application.status == 'completed',
    ).scalar() or 0

    return {
        'total_opportunities': total_opportunities,
        'total_applications': total_applications,
        'completed_applications': completed_applications,
        'average_apply_rate': total_applications / total_opportunities if total_opportunities else 0.0,
        'completion_rate': completed_applications / total_applications * 100 if total_applications else 0.0,
        'applications_over_time': applications_over_time(db, today, config.ANALYTICS_WINDOW_DAYS),
        'applications_by_type': applications_by_type(db),
    }
