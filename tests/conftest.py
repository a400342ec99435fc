"""Pytest fixtures for testing"""

import pytest
from datetime import datetime, timedelta, timezone
from typing import List, Sequence
from fastapi.testclient import TestClient
from receipt_rewards.api.main import create_app
from receipt_rewards.domain.account import RewardAccount, new_account
from receipt_rewards.domain.catalog import RewardConfig, default_coupons
from receipt_rewards.domain.engine import RewardEngine


# Wednesday; its week runs Mon 2026-03-09 .. Sun 2026-03-15
NOW = datetime(2026, 3, 11, 12, 0, tzinfo=timezone.utc)

# uniform() draws against the default mystery table (25 cash / 10 spin / 65 nothing)
CASH_ROLL = 0.0
SPIN_ROLL = 30.0
NOTHING_ROLL = 99.0


class StubRandom:
    """Random stand-in returning scripted values (falls back to the lowest option)"""

    def __init__(
        self,
        uniforms: Sequence[float] = (),
        randints: Sequence[int] = (),
        choices: Sequence[int] = (),
    ):
        self.uniforms: List[float] = list(uniforms)
        self.randints: List[int] = list(randints)
        self.choices: List[int] = list(choices)

    def uniform(self, a: float, b: float) -> float:
        return self.uniforms.pop(0) if self.uniforms else a

    def randint(self, a: int, b: int) -> int:
        return self.randints.pop(0) if self.randints else a

    def choice(self, seq):
        return seq[self.choices.pop(0) if self.choices else 0]


class Clock:
    """Settable clock for the engine"""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def config() -> RewardConfig:
    """Default economy with coupon expiries anchored to NOW"""
    return RewardConfig(coupons=default_coupons(NOW))


@pytest.fixture
def account(config: RewardConfig) -> RewardAccount:
    return new_account("user_1", config, month="2026-03")


@pytest.fixture
def clock() -> Clock:
    return Clock()


@pytest.fixture
def stub_rng() -> StubRandom:
    return StubRandom()


@pytest.fixture
def engine(config: RewardConfig, stub_rng: StubRandom, clock: Clock) -> RewardEngine:
    return RewardEngine(config=config, rng=stub_rng, clock=clock)


@pytest.fixture
def client(config: RewardConfig, stub_rng: StubRandom, clock: Clock) -> TestClient:
    """Create FastAPI test client with a scripted RNG and fixed clock"""
    app = create_app(config=config, rng=stub_rng, clock=clock)
    return TestClient(app)
