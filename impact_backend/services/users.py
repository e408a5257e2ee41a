"""User lookups, coin balance updates and account removal."""

import logging
from datetime import datetime

from sqlalchemy import case, func, update
from sqlalchemy.orm import Session

from impact_backend.core.errors import NotFoundError
from impact_backend.models.application import Application
from impact_backend.models.badge import UserBadge
from impact_backend.models.opportunity import Opportunity
from impact_backend.models.user import User

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise NotFoundError('User not found.')
    return user


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email.strip().lower()).first()


def credit_user_coins(db: Session, user_id: int, amount: int) -> int:
    """Add ``amount`` coins to the user's balance and return the new balance.

    The increment happens in a single ``UPDATE ... RETURNING`` statement so the
    balance is never read and written back from application code.
    """
    statement = (
        update(User)
        .where(User.id == user_id)
        .values(coins=func.coalesce(User.coins, 0) + amount, updated_at=datetime.now())
        .returning(User.coins)
        .execution_options(synchronize_session=False)
    )
    new_balance = db.execute(statement).scalar_one_or_none()
    if new_balance is None:
        raise NotFoundError('User not found.')

    logger.info('Credited %s coins to user %s (balance %s)', amount, user_id, new_balance)
    return new_balance


def get_application_counts(db: Session, user_id: int) -> dict[str, int]:
    total, completed = db.query(
        func.count(Application.id),
        func.coalesce(func.sum(case((Application.status == 'completed', 1), else_=0)), 0),
    ).filter(Application.user_id == user_id).one()

    return {'applications': int(total or 0), 'completed_applications': int(completed or 0)}


def get_user_stats(db: Session, user_id: int) -> dict[str, float]:
    get_user(db, user_id)
    total, completed, hours, coins = db.query(
        func.count(Application.id),
        func.coalesce(func.sum(case((Application.status == 'completed', 1), else_=0)), 0),
        func.coalesce(func.sum(Application.hours_completed), 0),
        func.coalesce(func.sum(Application.coins_awarded), 0),
    ).filter(Application.user_id == user_id).one()

    return {
        'total_applications': int(total or 0),
        'completed_applications': int(completed or 0),
        'total_hours': float(hours or 0),
        'total_coins': int(coins or 0),
    }


def delete_user(db: Session, user_id: int) -> None:
    user = get_user(db, user_id)

    db.query(Application).filter(Application.user_id == user_id).delete(synchronize_session=False)
    db.query(UserBadge).filter(UserBadge.user_id == user_id).delete(synchronize_session=False)
    db.query(Opportunity).filter(Opportunity.created_by == user_id).update(
        {Opportunity.created_by: None},
        synchronize_session=False,
    )
    db.delete(user)
    db.commit()

    logger.info('Deleted user %s and their applications and badges', user_id)
