import os



def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if value is None:
        return default
    return [item.strip().lower() for item in value.split(",") if item.strip()]

APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

CORS_ALLOWED_ORIGINS = _get_list(os.getenv("CORS_ALLOWED_ORIGINS"), ["http://localhost:5173"])

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", "60"))

ALLOWED_EMAIL_DOMAINS = _get_list(
    os.getenv("ALLOWED_EMAIL_DOMAINS"),
    ["iimb.ac.in", "iimb.ernet.in"],
)
ADMIN_EMAIL_PREFIXES = _get_list(
    os.getenv("ADMIN_EMAIL_PREFIXES"),
    ["faculty.", "admin.", "director.", "dean.", "registrar.", "samarpan.", "social.impact."],
)
DEFAULT_PROGRAM = os.getenv("DEFAULT_PROGRAM", "PGP")

# Reward fallbacks for opportunities that leave their rate or cap unset.
DEFAULT_COINS_PER_HOUR = int(os.getenv("DEFAULT_COINS_PER_HOUR", "10"))
DEFAULT_MAX_COINS = int(os.getenv("DEFAULT_MAX_COINS", "100"))

LEADERBOARD_DEFAULT_LIMIT = int(os.getenv("LEADERBOARD_DEFAULT_LIMIT", "10"))
LEADERBOARD_MAX_LIMIT = int(os.getenv("LEADERBOARD_MAX_LIMIT", "100"))
ANALYTICS_WINDOW_DAYS = int(os.getenv("ANALYTICS_WINDOW_DAYS", "30"))
OPPORTUNITY_PAGE_SIZE = int(os.getenv("OPPORTUNITY_PAGE_SIZE", "12"))

SEED_DEFAULT_BADGES = _get_bool(os.getenv("SEED_DEFAULT_BADGES"), default=True)

def validate_runtime_config() -> None:
    if APP_ENV.lower() == "production" and JWT_SECRET_KEY == "change-me":
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")
    if DEFAULT_COINS_PER_HOUR <= 0 or DEFAULT_MAX_COINS <= 0:
        raise RuntimeError("DEFAULT_COINS_PER_HOUR and DEFAULT_MAX_COINS must be positive.")
