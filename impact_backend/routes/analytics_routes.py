from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from impact_backend.auth.dependencies import get_current_admin
from impact_backend.database import get_db
from impact_backend.models.user import User
from impact_backend.schemas import AnalyticsResponse
from impact_backend.services.analytics import get_analytics

router = APIRouter(tags=['analytics'])


@router.get('', response_model=AnalyticsResponse)
def analytics(current_user: User = Depends(get_current_admin), db: Session = Depends(get_db)):
    return get_analytics(db)
