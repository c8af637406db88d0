"""
Pytest configuration and shared fixtures for the outfit rating tests.
"""
import os
import sys
from typing import Callable

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(__file__)), "src"))

# Load environment variables
from dotenv import load_dotenv
load_dotenv(os.path.join(os.path.dirname(os.path.dirname(__file__)), ".env"))


# ============================================================================
# Fixtures: Logging
# ============================================================================

@pytest.fixture(scope="session", autouse=True)
def _structured_logging():
    """Route structlog through stdlib so caplog sees engine logs."""
    from core.logging import configure_logging
    configure_logging(json_logs=False, log_level="INFO")


# ============================================================================
# Fixtures: Compatibility Tables
# ============================================================================

@pytest.fixture(scope="session")
def tables():
    """The packaged compatibility tables."""
    from scoring.tables import load_compatibility_tables
    return load_compatibility_tables()


@pytest.fixture
def engine(tables):
    """Rating engine with default K and threshold."""
    from scoring.rating_engine import RatingEngine
    return RatingEngine(tables)


@pytest.fixture
def tiny_table_doc() -> dict:
    """Minimal table document, easy to reason about in assertions."""
    return {
        "version": "test-1",
        "neutral_score": 5,
        "colors": {
            "Black": {"Black": 4, "White": 10, "Red": 8},
            "White": {"White": 4, "Red": 6},
            "Red": {"Red": 3},
        },
        "types": {
            "T-shirt": {"T-shirt": 2, "Jeans": 10, "Sneakers": 10},
            "Jeans": {"Jeans": 2, "Sneakers": 10},
            "Sneakers": {"Sneakers": 2},
        },
        "patterns": {
            "Solid": {"Solid": 8, "Striped": 9},
            "Striped": {"Striped": 4},
        },
    }


# ============================================================================
# Fixtures: Test Data Factories
# ============================================================================

@pytest.fixture
def make_garment() -> Callable:
    """Factory for GarmentAttributes with sensible defaults."""
    from scoring.garments import GarmentAttributes

    counter = {"n": 0}

    def _make(
        category: str = "top",
        garment_type: str = "T-shirt",
        primary_color: str = "Black",
        **kwargs,
    ):
        counter["n"] += 1
        kwargs.setdefault("id", f"{category}-{counter['n']}")
        return GarmentAttributes(
            category=category,
            garment_type=garment_type,
            primary_color=primary_color,
            **kwargs,
        )

    return _make
