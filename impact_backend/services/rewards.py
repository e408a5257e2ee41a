"""Coin reward computation for approved volunteer hours."""

import math

from impact_backend.core import config
from impact_backend.core.errors import InvalidHoursError


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def resolve_reward_rates(coins_per_hour: int | None, max_coins: int | None) -> tuple[int, int]:
    """Return the opportunity's rate and cap, falling back to the configured defaults."""
    rate = coins_per_hour if coins_per_hour and coins_per_hour > 0 else config.DEFAULT_COINS_PER_HOUR
    cap = max_coins if max_coins and max_coins > 0 else config.DEFAULT_MAX_COINS
    return rate, cap


def calculate_reward(hours: float | None, coins_per_hour: int | None = None, max_coins: int | None = None) -> int:
    """Convert worked hours into coins, capped at the opportunity's maximum.

    Missing or negative hours count as zero, so the result is always an
    integer in ``[0, max_coins]``. Infinite or NaN hours raise
    ``InvalidHoursError``.
    """
    rate, cap = resolve_reward_rates(coins_per_hour, max_coins)
    worked_hours = hours or 0
    if not math.isfinite(worked_hours):
        raise InvalidHoursError('Hours must be a finite number.')

    # Products past the cap may overflow to inf, so clamp before rounding.
    earned = max(worked_hours, 0) * rate
    if earned >= cap:
        return cap
    return round_half_up(earned)
