"""Opportunity catalog queries and admin maintenance."""

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from impact_backend.core import config
from impact_backend.core.errors import NotFoundError
from impact_backend.models.application import Application
from impact_backend.models.opportunity import Opportunity

logger = logging.getLogger(__name__)

HOUR_COUNTING_STATUSES = ('hours_approved', 'completed')


def _application_counts(db: Session, opportunity_ids: list[int]) -> dict[int, int]:
    if not opportunity_ids:
        return {}

    rows = db.query(Application.opportunity_id, func.count(Application.id)).filter(
        Application.opportunity_id.in_(opportunity_ids),
    ).group_by(Application.opportunity_id).all()
    return {opportunity_id: count for opportunity_id, count in rows}


def _with_counts(db: Session, opportunities: list[Opportunity]) -> list[tuple[Opportunity, int]]:
    counts = _application_counts(db, [opportunity.id for opportunity in opportunities])
    return [(opportunity, counts.get(opportunity.id, 0)) for opportunity in opportunities]


def get_opportunity(db: Session, opportunity_id: int) -> Opportunity:
    opportunity = db.query(Opportunity).filter(Opportunity.id == opportunity_id).first()
    if opportunity is None:
        raise NotFoundError('Opportunity not found.')
    return opportunity


def get_opportunity_with_count(db: Session, opportunity_id: int) -> tuple[Opportunity, int]:
    opportunity = get_opportunity(db, opportunity_id)
    return _with_counts(db, [opportunity])[0]


def list_opportunities(
    db: Session,
    search: str | None = None,
    types: list[str] | None = None,
    durations: list[str] | None = None,
    skills: list[str] | None = None,
    statuses: list[str] | None = None,
    limit: int | None = None,
    offset: int = 0,
) -> tuple[list[tuple[Opportunity, int]], int]:
    """Filter the catalog. Only open opportunities are listed unless statuses are given."""
    limit = limit or config.OPPORTUNITY_PAGE_SIZE
    query = db.query(Opportunity)

    if search and search.strip():
        pattern = f'%{search.strip()}%'
        query = query.filter(or_(Opportunity.title.ilike(pattern), Opportunity.short_description.ilike(pattern)))
    if types:
        query = query.filter(Opportunity.type.in_(types))
    if durations:
        query = query.filter(Opportunity.duration.in_(durations))
    if statuses:
        query = query.filter(Opportunity.status.in_(statuses))
    else:
        query = query.filter(Opportunity.status == 'open')

    query = query.order_by(Opportunity.created_at.desc(), Opportunity.id.desc())

    if skills:
        # Skills are stored as a JSON list, so the any-of match runs here.
        wanted = {skill.strip().lower() for skill in skills if skill.strip()}
        matches = [
            opportunity
            for opportunity in query.all()
            if wanted & {skill.lower() for skill in (opportunity.skills or [])}
        ]
        return _with_counts(db, matches[offset:offset + limit]), len(matches)

    total = query.count()
    page = query.offset(offset).limit(limit).all()
    return _with_counts(db, page), total


def list_opportunities_by_creator(db: Session, creator_id: int) -> list[tuple[Opportunity, int]]:
    opportunities = db.query(Opportunity).filter(
        Opportunity.created_by == creator_id,
    ).order_by(Opportunity.created_at.desc(), Opportunity.id.desc()).all()
    return _with_counts(db, opportunities)


def create_opportunity(db: Session, creator_id: int, data: dict[str, Any]) -> Opportunity:
    opportunity = Opportunity(**data, created_by=creator_id)
    db.add(opportunity)
    db.commit()
    db.refresh(opportunity)

    logger.info('Opportunity %s created by user %s', opportunity.id, creator_id)
    return opportunity


def update_opportunity(db: Session, opportunity_id: int, data: dict[str, Any]) -> Opportunity:
    opportunity = get_opportunity(db, opportunity_id)
    for field_name, value in data.items():
        setattr(opportunity, field_name, value)
    opportunity.updated_at = datetime.now()
    db.commit()
    db.refresh(opportunity)
    return opportunity


def delete_opportunity(db: Session, opportunity_id: int) -> None:
    opportunity = get_opportunity(db, opportunity_id)
    db.query(Application).filter(Application.opportunity_id == opportunity_id).delete(synchronize_session=False)
    db.delete(opportunity)
    db.commit()

    logger.info('Opportunity %s deleted', opportunity_id)


def close_opportunity_if_hours_met(db: Session, opportunity_id: int) -> bool:
    """Mark the opportunity ``filled`` once approved hours reach its required total."""
    opportunity = db.query(Opportunity).filter(Opportunity.id == opportunity_id).first()
    if opportunity is None or not opportunity.total_required_hours or opportunity.status == 'filled':
        return False

    approved_hours = db.query(func.coalesce(func.sum(Application.hours_completed), 0)).filter(
        Application.opportunity_id == opportunity_id,
        Application.status.in_(HOUR_COUNTING_STATUSES),
    ).scalar()

    if float(approved_hours or 0) < opportunity.total_required_hours:
        return False

    opportunity.status = 'filled'
    opportunity.updated_at = datetime.now()
    db.commit()

    logger.info(
        'Opportunity %s filled after reaching %s of %s required hours',
        opportunity_id,
        approved_hours,
        opportunity.total_required_hours,
    )
    return True
