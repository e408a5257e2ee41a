"""Badge catalog access and threshold-based badge grants."""

import logging

from sqlalchemy.orm import Session

from impact_backend.models.badge import Badge, UserBadge
from impact_backend.models.user import User

logger = logging.getLogger(__name__)

DEFAULT_BADGES = (
    ('First Steps', 'Earned your first 10 coins.', 'sprout', 10),
    ('Helping Hand', 'Reached 50 coins of community impact.', 'hand-heart', 50),
    ('Change Maker', 'Reached 100 coins of community impact.', 'sparkles', 100),
    ('Community Champion', 'Reached 250 coins of community impact.', 'trophy', 250),
    ('Impact Leader', 'Reached 500 coins of community impact.', 'crown', 500),
)


def list_badges(db: Session) -> list[Badge]:
    return db.query(Badge).order_by(Badge.coins_required.asc(), Badge.id.asc()).all()


def list_user_badges(db: Session, user_id: int) -> list[Badge]:
    return (
        db.query(Badge)
        .join(UserBadge, UserBadge.badge_id == Badge.id)
        .filter(UserBadge.user_id == user_id)
        .order_by(Badge.coins_required.asc())
        .all()
    )


def award_badge(db: Session, user_id: int, badge_id: int) -> bool:
    """Grant a badge unless the user already holds it. Returns whether a grant happened."""
    existing = db.query(UserBadge.id).filter(
        UserBadge.user_id == user_id,
        UserBadge.badge_id == badge_id,
    ).first()
    if existing:
        return False

    # uq_user_badges_user_badge rejects a concurrent duplicate at flush time.
    db.add(UserBadge(user_id=user_id, badge_id=badge_id))
    db.flush()
    return True


def check_and_award_badges(db: Session, user_id: int) -> list[Badge]:
    """Grant every badge whose threshold the user's current balance meets.

    Grants are append-only: badges are never revoked. The caller commits.
    """
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        return []

    db.refresh(user, attribute_names=['coins'])
    balance = user.coins or 0
    held_badge_ids = {badge.id for badge in list_user_badges(db, user_id)}

    new_badges: list[Badge] = []
    for badge in list_badges(db):
        if badge.id in held_badge_ids or badge.coins_required > balance:
            continue
        if award_badge(db, user_id, badge.id):
            new_badges.append(badge)

    if new_badges:
        logger.info(
            'Granted badges %s to user %s at %s coins',
            [badge.name for badge in new_badges],
            user_id,
            balance,
        )
    return new_badges


def seed_default_badges(db: Session) -> list[Badge]:
    """Insert the default milestone badges that are not in the catalog yet."""
    existing_names = {name for (name,) in db.query(Badge.name).all()}
    created: list[Badge] = []
    for name, description, icon, coins_required in DEFAULT_BADGES:
        if name in existing_names:
            continue
        badge = Badge(
            name=name,
            description=description,
            icon=icon,
            coins_required=coins_required,
            type='milestone',
        )
        db.add(badge)
        created.append(badge)

    if created:
        db.commit()
        logger.info('Seeded %d default badges', len(created))
    return created
