import os
from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from impact_backend.database import Base  # noqa: E402
from impact_backend.models.application import Application  # noqa: E402
from impact_backend.models.badge import Badge  # noqa: E402
from impact_backend.models.opportunity import Opportunity  # noqa: E402
from impact_backend.models.user import User  # noqa: E402


@pytest.fixture
def impact_db():
    engine = create_engine(
        'sqlite:///:memory:',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    db = testing_session_local()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def make_user(impact_db):
    counter = {'value': 0}

    def _make_user(role: str = 'student', coins: int = 0, **fields) -> User:
        counter['value'] += 1
        user = User(
            email=fields.pop('email', f'{role}{counter["value"]}@iimb.ac.in'),
            first_name=fields.pop('first_name', role.title()),
            last_name=fields.pop('last_name', str(counter['value'])),
            role=role,
            coins=coins,
            **fields,
        )
        impact_db.add(user)
        impact_db.commit()
        impact_db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_opportunity(impact_db):
    def _make_opportunity(created_by: int | None = None, **fields) -> Opportunity:
        opportunity = Opportunity(
            title=fields.pop('title', 'Weekend tutoring'),
            short_description=fields.pop('short_description', 'Teach maths to school children.'),
            full_description=fields.pop('full_description', 'Two-hour sessions every Saturday.'),
            type=fields.pop('type', 'teaching'),
            duration=fields.pop('duration', '2-4weeks'),
            status=fields.pop('status', 'open'),
            coins_per_hour=fields.pop('coins_per_hour', 10),
            max_coins=fields.pop('max_coins', 100),
            created_by=created_by,
            **fields,
        )
        impact_db.add(opportunity)
        impact_db.commit()
        impact_db.refresh(opportunity)
        return opportunity

    return _make_opportunity


@pytest.fixture
def make_application(impact_db):
    def _make_application(user: User, opportunity: Opportunity, **fields) -> Application:
        application = Application(
            user_id=user.id,
            opportunity_id=opportunity.id,
            status=fields.pop('status', 'pending'),
            applied_at=fields.pop('applied_at', datetime.now()),
            **fields,
        )
        impact_db.add(application)
        impact_db.commit()
        impact_db.refresh(application)
        return application

    return _make_application


@pytest.fixture
def make_badge(impact_db):
    def _make_badge(name: str, coins_required: int) -> Badge:
        badge = Badge(name=name, coins_required=coins_required, type='milestone')
        impact_db.add(badge)
        impact_db.commit()
        impact_db.refresh(badge)
        return badge

    return _make_badge

