import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from impact_backend.core import config
from impact_backend.database import Base, SessionLocal, engine, ensure_impact_schema
from impact_backend.models import application, badge, opportunity, user  # noqa: F401
from impact_backend.routes import (
    analytics_routes,
    application_routes,
    auth_routes,
    leaderboard_routes,
    opportunity_routes,
)
from impact_backend.services.badges import seed_default_badges

logging.basicConfig(level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)

config.validate_runtime_config()

app = FastAPI(title='Social Impact Tracker API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error('Database error on %s %s: %s', request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={'detail': 'Database unavailable. Verify DATABASE_URL and database credentials.'},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception('Unhandled error on %s %s', request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={'detail': 'Internal server error'},
    )


@app.on_event('startup')
def initialize_database() -> None:
    try:
        Base.metadata.create_all(bind=engine)
        ensure_impact_schema()
        if config.SEED_DEFAULT_BADGES:
            db = SessionLocal()
            try:
                seed_default_badges(db)
            finally:
                db.close()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.get('/')
def root():
    return {'status': 'Social Impact Tracker API Running'}


app.include_router(auth_routes.router, prefix='/auth')
app.include_router(opportunity_routes.router, prefix='/opportunities')
app.include_router(opportunity_routes.admin_router, prefix='/admin')
app.include_router(application_routes.router, prefix='/applications')
app.include_router(leaderboard_routes.router)
app.include_router(analytics_routes.router, prefix='/analytics')
