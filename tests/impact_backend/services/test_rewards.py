import math

import pytest

from impact_backend.core import config
from impact_backend.core.errors import InvalidHoursError
from impact_backend.services.rewards import calculate_reward, resolve_reward_rates, round_half_up


def test_calculate_reward_multiplies_hours_by_rate() -> None:
    assert calculate_reward(8, 10, 100) == 80


def test_calculate_reward_caps_at_max_coins() -> None:
    assert calculate_reward(15, 10, 100) == 100


@pytest.mark.parametrize('hours', [None, 0, -3])
def test_calculate_reward_treats_missing_or_negative_hours_as_zero(hours) -> None:
    assert calculate_reward(hours, 10, 100) == 0


def test_calculate_reward_rounds_half_up() -> None:
    assert calculate_reward(0.25, 10, 100) == 3
    assert calculate_reward(2.5, 1, 100) == 3
    assert round_half_up(0.5) == 1


def test_calculate_reward_falls_back_to_configured_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, 'DEFAULT_COINS_PER_HOUR', 5)
    monkeypatch.setattr(config, 'DEFAULT_MAX_COINS', 40)

    assert resolve_reward_rates(None, None) == (5, 40)
    assert resolve_reward_rates(0, 0) == (5, 40)
    assert calculate_reward(3) == 15
    assert calculate_reward(20) == 40


@pytest.mark.parametrize(
    ('hours', 'coins_per_hour', 'max_coins'),
    [
        (1.5, 7, 50),
        (3.3, 15, 40),
        (12, 25, 250),
        (0.1, 3, 1),
        (100, 1, 99),
    ],
)
def test_calculate_reward_stays_within_cap(hours: float, coins_per_hour: int, max_coins: int) -> None:
    reward = calculate_reward(hours, coins_per_hour, max_coins)

    assert reward == min(math.floor(hours * coins_per_hour + 0.5), max_coins)
    assert 0 <= reward <= max_coins
    assert isinstance(reward, int)


@pytest.mark.parametrize('hours', [1e308, 1e20, 10.0])
def test_calculate_reward_caps_large_hours_without_overflow(hours: float) -> None:
    assert calculate_reward(hours, 10, 100) == 100


@pytest.mark.parametrize('hours', [float('inf'), float('-inf'), float('nan')])
def test_calculate_reward_rejects_non_finite_hours(hours: float) -> None:
    with pytest.raises(InvalidHoursError):
        calculate_reward(hours, 10, 100)
