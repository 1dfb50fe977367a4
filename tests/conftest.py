"""Shared test configuration and fixtures."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from loguru import logger

from id3tree.chisquare import ChiSquare
from id3tree.data import Dataset


# ============================================================================
# Dataset Fixtures
# ============================================================================


@pytest.fixture
def weather_dataset() -> Dataset:
    """Sunny days are always Play; rainy days are Stay except one."""
    data = Dataset()
    data.add_attribute("Weather", ["Sunny", "Rainy"])
    data.add_attribute("Class", ["Play", "Stay"])
    data.set_class_attribute("Class")
    data.extend([("Sunny", "Play")] * 8 + [("Rainy", "Stay")] * 8 + [("Rainy", "Play")])
    return data


@pytest.fixture
def noisy_dataset() -> Dataset:
    """
    One informative attribute (A) and one pure-noise attribute (N).

    Within every value of A, both values of N have exactly the same class
    distribution, so N carries no information at any node.
    """
    data = Dataset()
    data.add_attribute("A", ["a0", "a1"])
    data.add_attribute("N", ["n0", "n1"])
    data.add_attribute("Class", ["Yes", "No"])
    data.set_class_attribute("Class")
    for noise in ("n0", "n1"):
        data.extend([("a0", noise, "Yes")] * 9 + [("a0", noise, "No")])
        data.extend([("a1", noise, "No")] * 9 + [("a1", noise, "Yes")])
    return data


@pytest.fixture
def tennis_dataset() -> Dataset:
    """Quinlan's play-tennis data: deterministic, no contradictory duplicates."""
    rows = [
        ("sunny", "hot", "high", "weak", "no"),
        ("sunny", "hot", "high", "strong", "no"),
        ("overcast", "hot", "high", "weak", "yes"),
        ("rain", "mild", "high", "weak", "yes"),
        ("rain", "cool", "normal", "weak", "yes"),
        ("rain", "cool", "normal", "strong", "no"),
        ("overcast", "cool", "normal", "strong", "yes"),
        ("sunny", "mild", "high", "weak", "no"),
        ("sunny", "cool", "normal", "weak", "yes"),
        ("rain", "mild", "normal", "weak", "yes"),
        ("sunny", "mild", "normal", "strong", "yes"),
        ("overcast", "mild", "high", "strong", "yes"),
        ("overcast", "hot", "normal", "weak", "yes"),
        ("rain", "mild", "high", "strong", "no"),
    ]
    return Dataset.from_rows(["outlook", "temperature", "humidity", "wind", "Class"], rows, "Class")


@pytest.fixture
def tennis_arff() -> str:
    """Play-tennis data in ARFF, with comments, quoting and a missing value."""
    return """% Quinlan's weather data
@relation weather

@attribute outlook {sunny, overcast, rain}
@attribute 'wind speed' {weak,strong}
@attribute Class {yes, no}

@data
sunny,weak,no
sunny,strong,no
overcast,weak,yes
rain,?,yes
rain,strong,no
"""


# ============================================================================
# Engine & Logging Fixtures
# ============================================================================


@pytest.fixture
def chi_square() -> ChiSquare:
    """A chi-square engine with its own, empty cache."""
    return ChiSquare()


@pytest.fixture
def workspace_dir(tmp_path: Path) -> Path:
    """Create a temporary workspace directory for testing."""
    workspace = tmp_path / "workspace"
    workspace.mkdir()
    return workspace


@pytest.fixture(autouse=True)
def reset_logging():
    """Restore loguru's default stderr handler after tests that reconfigure it."""
    yield
    logger.remove()
    logger.add(sys.stderr, level="WARNING")
    logger.disable("id3tree")


@pytest.fixture
def log_messages():
    """Collect id3tree log records as ``(level name, message)`` pairs."""
    messages = []
    logger.enable("id3tree")
    handler_id = logger.add(lambda m: messages.append((m.record["level"].name, m.record["message"])), level="TRACE")
    yield messages
    logger.remove(handler_id)
    logger.disable("id3tree")
