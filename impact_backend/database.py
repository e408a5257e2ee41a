import os
from dotenv import load_dotenv
from threading import Lock

from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker


load_dotenv()
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./impact.db")

_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, connect_args=_connect_args)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_impact_schema_checked = False


@event.listens_for(engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    if engine.dialect.name != "sqlite":
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_db():
    db = SessionLocal()
    try:
        yield db
    except SQLAlchemyError:
        db.rollback()
        raise
    finally:
        db.close()


def ensure_impact_schema() -> None:
    """Backfill columns and indexes that older databases were created without."""
    global _impact_schema_checked

    if _impact_schema_checked:
        return

    with _schema_lock:
        if _impact_schema_checked:
            return

        inspector = inspect(engine)
        table_names = set(inspector.get_table_names())

        migration_steps: list[tuple[str, str, str]] = [
            ('applications', 'submitted_hours', 'ALTER TABLE applications ADD COLUMN submitted_hours FLOAT DEFAULT 0'),
            ('applications', 'hour_submission_date', 'ALTER TABLE applications ADD COLUMN hour_submission_date TIMESTAMP'),
            ('applications', 'admin_feedback', 'ALTER TABLE applications ADD COLUMN admin_feedback TEXT'),
            ('opportunities', 'total_required_hours', 'ALTER TABLE opportunities ADD COLUMN total_required_hours INTEGER'),
            ('users', 'anonymize_leaderboard', 'ALTER TABLE users ADD COLUMN anonymize_leaderboard BOOLEAN DEFAULT FALSE'),
        ]
        existing_columns = {
            table_name: {column['name'] for column in inspector.get_columns(table_name)}
            for table_name in {'applications', 'opportunities', 'users'} & table_names
        }

        with engine.begin() as connection:
            for table_name, column_name, statement in migration_steps:
                if table_name in existing_columns and column_name not in existing_columns[table_name]:
                    connection.execute(text(statement))
            if 'applications' in table_names:
                connection.execute(
                    text('CREATE INDEX IF NOT EXISTS idx_applications_status_completed ON applications(status, completed_at)')
                )
                connection.execute(
                    text('CREATE INDEX IF NOT EXISTS idx_applications_applied_at ON applications(applied_at)')
                )
            if 'users' in table_names:
                connection.execute(
                    text('CREATE INDEX IF NOT EXISTS idx_users_role_coins ON users(role, coins)')
                )

        _impact_schema_checked = True
