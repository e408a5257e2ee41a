import logging
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from impact_backend.auth import jwt_handler
from impact_backend.auth.dependencies import get_current_user
from impact_backend.auth.passwords import hash_password, verify_password
from impact_backend.core import config
from impact_backend.core.errors import InvalidInputError
from impact_backend.database import get_db
from impact_backend.models.user import User
from impact_backend.schemas import CamelModel, UserResponse, UserWithCountsResponse
from impact_backend.services import users as user_service

router = APIRouter(tags=['auth'])

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


def is_allowed_email(email: str) -> bool:
    domain = email.rsplit('@', 1)[-1] if '@' in email else ''
    return domain in config.ALLOWED_EMAIL_DOMAINS


def determine_role_from_email(email: str) -> str:
    local_part = email.strip().lower().split('@', 1)[0]
    for prefix in config.ADMIN_EMAIL_PREFIXES:
        if local_part.startswith(prefix):
            return 'admin'
    return 'student'


def resolve_registration_role(email: str, requested_role: str | None) -> str:
    """Admin rights come only from the email address; a client may still opt down to student."""
    if requested_role == 'student':
        return 'student'
    role = determine_role_from_email(email)
    if requested_role == 'admin' and role != 'admin':
        logger.warning('Ignoring admin role requested at registration by %s', email)
    return role


class RegisterRequest(CamelModel):
    email: str
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)
    first_name: str | None = None
    last_name: str | None = None
    role: Literal['student', 'admin'] | None = None
    program: str | None = None

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        normalized = value.strip().lower()
        if not is_allowed_email(normalized):
            domains = ', '.join(f'@{domain}' for domain in config.ALLOWED_EMAIL_DOMAINS)
            raise ValueError(f'Only {domains} email addresses are allowed.')
        return normalized


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator('email')
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class PreferencesRequest(CamelModel):
    anonymize_leaderboard: bool


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = 'bearer'
    user: UserResponse


def build_user_with_counts(db: Session, user: User) -> UserWithCountsResponse:
    response = UserWithCountsResponse.model_validate(user)
    return response.model_copy(update=user_service.get_application_counts(db, user.id))


@router.post('/register', response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    if user_service.get_user_by_email(db, data.email):
        raise InvalidInputError('Account already exists with this email.')

    user = User(
        email=data.email,
        hashed_password=hash_password(data.password),
        first_name=data.first_name,
        last_name=data.last_name,
        role=resolve_registration_role(data.email, data.role),
        program=data.program or config.DEFAULT_PROGRAM,
        coins=0,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info('Registered user %s with role %s', user.id, user.role)
    return user


@router.post('/login', response_model=TokenResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    user = user_service.get_user_by_email(db, data.email)
    if user is None or not verify_password(data.password, user.hashed_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Invalid email or password.')

    token = jwt_handler.create_access_token(subject=str(user.id), role=user.role)
    return TokenResponse(access_token=token, user=UserResponse.model_validate(user))


@router.get('/me', response_model=UserWithCountsResponse)
def me(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return build_user_with_counts(db, current_user)


@router.put('/me/preferences', response_model=UserResponse)
def update_preferences(
    data: PreferencesRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    current_user.anonymize_leaderboard = data.anonymize_leaderboard
    db.commit()
    db.refresh(current_user)
    return current_user


@router.delete('/account')
def delete_account(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    user_service.delete_user(db, current_user.id)
    return {'message': 'Account deleted successfully'}
