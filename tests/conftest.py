from __future__ import annotations

import pytest

from fastcal.core.config import CalculationConfig, Location


@pytest.fixture
def mecca() -> CalculationConfig:
    return CalculationConfig(
        location=Location(latitude=21.4225, longitude=39.8262),
        timezone_offset_minutes=180,
        dawn_twilight_angle=18.5,
    )


@pytest.fixture
def london() -> CalculationConfig:
    return CalculationConfig(
        location=Location(latitude=51.5085, longitude=-0.1257),
        timezone_offset_minutes=0,
        dawn_twilight_angle=18.0,
    )


@pytest.fixture
def tromso() -> CalculationConfig:
    return CalculationConfig(
        location=Location(latitude=69.6492, longitude=18.9553),
        timezone_offset_minutes=120,
        dawn_twilight_angle=18.0,
    )
