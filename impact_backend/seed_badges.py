"""Insert the default milestone badges into the catalog.

Usage:
    python -m impact_backend.seed_badges
"""
import sys

from impact_backend.database import Base, SessionLocal, engine
from impact_backend.models import badge
from impact_backend.services.badges import seed_default_badges


def main() -> None:
    Base.metadata.create_all(bind=engine, tables=[badge.Badge.__table__])
    db = SessionLocal()
    try:
        created = [(item.name, item.coins_required) for item in seed_default_badges(db)]
    finally:
        db.close()

    if not created:
        print("Badge catalog already contains the default badges.", file=sys.stderr)
        return
    for name, coins_required in created:
        print(f"{name}: {coins_required} coins")


if __name__ == '__main__':
    main()
