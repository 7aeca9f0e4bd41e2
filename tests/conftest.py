"""Shared pytest fixtures for ad beaconing tests."""

import pytest

from ad_beaconing.config import Settings
from tests.utils.fakes import FakeClock, FakePlayer


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def fake_player():
    return FakePlayer()


@pytest.fixture
def fake_clock():
    return FakeClock()
