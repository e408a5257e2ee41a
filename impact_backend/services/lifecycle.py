"""Application status lifecycle and the coin awards tied to it.

Canonical lifecycle::

    pending         -> accepted | rejected
    accepted        -> hours_submitted | completed | rejected
    hours_submitted -> hours_submitted | hours_approved | accepted | completed | rejected
    hours_approved  -> hours_submitted | completed | rejected
    completed, rejected are terminal

``hours_approved`` is not terminal: a student may keep submitting hours and
every approval credits the coins earned since the previous one. Rejecting
submitted hours moves the application back to ``accepted`` without clearing
the reported hours. Rewards are cumulative per application, so the total ever
credited for one application never exceeds the opportunity's ``max_coins``.

Status change, coin credit and badge grants are committed together. Two admins
approving the same application at once can still both credit coins; nothing
here serializes concurrent requests.
"""

import logging
import math
from datetime import datetime
from typing import NamedTuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from impact_backend.core.errors import (
    DuplicateApplicationError,
    ForbiddenError,
    InvalidHoursError,
    InvalidInputError,
    InvalidStatusTransitionError,
    NotFoundError,
    OpportunityNotAcceptingApplicationsError,
)
from impact_backend.models.application import APPLICATION_STATUSES, Application
from impact_backend.models.badge import Badge
from impact_backend.models.opportunity import Opportunity
from impact_backend.models.user import User
from impact_backend.services.badges import check_and_award_badges
from impact_backend.services.opportunities import close_opportunity_if_hours_met
from impact_backend.services.rewards import calculate_reward, resolve_reward_rates
from impact_backend.services.users import credit_user_coins

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    'pending': frozenset({'accepted', 'rejected'}),
    'accepted': frozenset({'hours_submitted', 'completed', 'rejected'}),
    'hours_submitted': frozenset({'hours_submitted', 'hours_approved', 'accepted', 'completed', 'rejected'}),
    'hours_approved': frozenset({'hours_submitted', 'completed', 'rejected'}),
    'completed': frozenset(),
    'rejected': frozenset(),
}
HOUR_FLOW_STATUSES = frozenset({'hours_submitted', 'hours_approved'})


class AwardResult(NamedTuple):
    application: Application
    coins_granted: int
    new_badges: list[Badge]


def can_transition(current_status: str, new_status: str) -> bool:
    return new_status in ALLOWED_TRANSITIONS.get(current_status, frozenset())


def ensure_transition_allowed(current_status: str, new_status: str) -> None:
    if not can_transition(current_status, new_status):
        raise InvalidStatusTransitionError(
            f"Cannot move an application from '{current_status}' to '{new_status}'."
        )


def require_admin(user: User) -> None:
    if user is None or user.role != 'admin':
        raise ForbiddenError('Admin access required.')


def get_application(db: Session, application_id: int) -> Application:
    application = db.query(Application).filter(Application.id == application_id).first()
    if application is None:
        raise NotFoundError('Application not found.')
    return application


def find_existing_application(db: Session, user_id: int, opportunity_id: int) -> Application | None:
    return db.query(Application).filter(
        Application.user_id == user_id,
        Application.opportunity_id == opportunity_id,
    ).first()


def list_applications_by_user(db: Session, user_id: int) -> list[Application]:
    return db.query(Application).filter(
        Application.user_id == user_id,
    ).order_by(Application.applied_at.desc(), Application.id.desc()).all()


def list_applications_by_opportunity(db: Session, opportunity_id: int) -> list[Application]:
    return db.query(Application).filter(
        Application.opportunity_id == opportunity_id,
    ).order_by(Application.applied_at.desc(), Application.id.desc()).all()


def create_application(db: Session, user: User, opportunity_id: int) -> Application:
    if find_existing_application(db, user.id, opportunity_id):
        raise DuplicateApplicationError()

    opportunity = db.query(Opportunity).filter(Opportunity.id == opportunity_id).first()
    if opportunity is None:
        raise NotFoundError('Opportunity not found.')
    if opportunity.status != 'open':
        raise OpportunityNotAcceptingApplicationsError()

    application = Application(
        user_id=user.id,
        opportunity_id=opportunity_id,
        status='pending',
        applied_at=datetime.now(),
    )
    db.add(application)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateApplicationError() from exc
    db.refresh(application)

    logger.info('User %s applied to opportunity %s', user.id, opportunity_id)
    return application


def _credit_and_check_badges(db: Session, application: Application, coins: int) -> list[Badge]:
    # The badge check must read the balance after the increment.
    if coins > 0:
        credit_user_coins(db, application.user_id, coins)
    return check_and_award_badges(db, application.user_id)


def _finish_award(db: Session, application: Application, coins: int) -> AwardResult:
    new_badges = _credit_and_check_badges(db, application, coins)
    db.commit()
    close_opportunity_if_hours_met(db, application.opportunity_id)
    db.refresh(application)
    return AwardResult(application=application, coins_granted=coins, new_badges=new_badges)


def _reward_limits(application: Application) -> tuple[int, int]:
    opportunity = application.opportunity
    if opportunity is None:
        raise NotFoundError('Application or opportunity not found.')
    return resolve_reward_rates(opportunity.coins_per_hour, opportunity.max_coins)


def complete_application(
    db: Session,
    application: Application,
    hours_completed: float | None = None,
    admin_feedback: str | None = None,
    notes: str | None = None,
) -> AwardResult:
    """Mark the application completed and credit the coins not yet awarded for it.

    Without ``hours_completed`` the application keeps its approved hours plus
    any submission still awaiting review. An explicit figure may not drop
    below the hours already approved.
    """
    coins_per_hour, max_coins = _reward_limits(application)
    approved_hours = application.hours_completed or 0
    if hours_completed is None:
        hours = approved_hours
        if application.status == 'hours_submitted':
            hours += application.submitted_hours or 0
    elif hours_completed < approved_hours:
        raise InvalidInputError(
            f'Completed hours cannot be fewer than the {approved_hours:g} hours already approved.'
        )
    else:
        hours = hours_completed
    total_reward = calculate_reward(hours, coins_per_hour, max_coins)
    already_awarded = application.coins_awarded or 0
    coins_granted = max(total_reward - already_awarded, 0)

    application.status = 'completed'
    application.completed_at = datetime.now()
    application.hours_completed = max(hours, 0)
    application.coins_awarded = already_awarded + coins_granted
    if admin_feedback is not None:
        application.admin_feedback = admin_feedback
    if notes is not None:
        application.notes = notes

    logger.info(
        'Application %s completed with %s hours, granting %s coins',
        application.id,
        application.hours_completed,
        coins_granted,
    )
    return _finish_award(db, application, coins_granted)


def transition_application(
    db: Session,
    actor: User,
    application_id: int,
    new_status: str,
    notes: str | None = None,
    hours_completed: float | None = None,
    admin_feedback: str | None = None,
) -> AwardResult:
    require_admin(actor)
    if new_status not in APPLICATION_STATUSES:
        raise InvalidInputError(f"Unknown application status '{new_status}'.")

    application = get_application(db, application_id)
    if new_status in HOUR_FLOW_STATUSES:
        raise InvalidInputError('Use the submit-hours or approve-hours endpoint to record hours.')
    ensure_transition_allowed(application.status, new_status)

    if new_status == 'completed':
        return complete_application(db, application, hours_completed, admin_feedback, notes)

    application.status = new_status
    if notes is not None:
        application.notes = notes
    if admin_feedback is not None:
        application.admin_feedback = admin_feedback
    db.commit()
    db.refresh(application)

    logger.info('Application %s moved to %s by user %s', application_id, new_status, actor.id)
    return AwardResult(application=application, coins_granted=0, new_badges=[])


def submit_hours(db: Session, actor: User, application_id: int, hours: float | None) -> Application:
    application = get_application(db, application_id)
    if application.user_id != actor.id:
        raise ForbiddenError('Only the student who applied can submit hours.')
    if hours is None or not math.isfinite(hours) or hours <= 0:
        raise InvalidHoursError()
    ensure_transition_allowed(application.status, 'hours_submitted')

    application.status = 'hours_submitted'
    application.submitted_hours = hours
    application.hour_submission_date = datetime.now()
    db.commit()
    db.refresh(application)

    logger.info('User %s submitted %s hours for application %s', actor.id, hours, application_id)
    return application


def approve_hours(
    db: Session,
    actor: User,
    application_id: int,
    coins_awarded: int | None = None,
    feedback: str | None = None,
) -> AwardResult:
    """Approve the pending hour submission and credit its coins.

    Without ``coins_awarded`` the award is computed from the accumulated hours.
    An explicit ``coins_awarded`` is taken as the award for this submission,
    clamped so the application's total stays within ``max_coins``.
    """
    require_admin(actor)
    application = get_application(db, application_id)
    ensure_transition_allowed(application.status, 'hours_approved')

    coins_per_hour, max_coins = _reward_limits(application)
    already_awarded = application.coins_awarded or 0
    total_hours = (application.hours_completed or 0) + (application.submitted_hours or 0)
    if not math.isfinite(total_hours):
        raise InvalidHoursError('Hours must be a finite number.')

    if coins_awarded is None:
        coins_granted = max(calculate_reward(total_hours, coins_per_hour, max_coins) - already_awarded, 0)
    else:
        coins_granted = min(max(coins_awarded, 0), max(max_coins - already_awarded, 0))

    application.status = 'hours_approved'
    application.hours_completed = total_hours
    application.coins_awarded = already_awarded + coins_granted
    if feedback is not None:
        application.admin_feedback = feedback

    logger.info(
        'Approved %s hours on application %s, granting %s coins',
        application.submitted_hours,
        application_id,
        coins_granted,
    )
    return _finish_award(db, application, coins_granted)


def reject_hours(db: Session, actor: User, application_id: int, feedback: str | None) -> Application:
    require_admin(actor)
    if feedback is None or not feedback.strip():
        raise InvalidInputError('Feedback is required when rejecting hours.')

    application = get_application(db, application_id)
    if application.status != 'hours_submitted':
        raise InvalidStatusTransitionError('Only submitted hours can be rejected.')

    application.status = 'accepted'
    application.admin_feedback = feedback.strip()
    db.commit()
    db.refresh(application)

    logger.info('Rejected submitted hours on application %s', application_id)
    return application
