"""
Pytest configuration and shared fixtures.
"""

import pytest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient

from immorechner.main import app
from immorechner.calculations.metrics import (
    FinancingInputs,
    PropertyInputs,
    RentalInputs,
)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "integration: marks integration tests")


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def berlin_property():
    """Berlin apartment, 300k purchase price, broker included."""
    return PropertyInputs(
        purchase_price=300000,
        state_code="BE",
        state_tax_rate=6.0,
        notary_rate=1.5,
        land_registry_rate=0.5,
        broker_rate=3.57,
        include_broker=True,
    )


@pytest.fixture
def financing():
    """60k equity, 3.5% interest, 2% initial repayment."""
    return FinancingInputs(equity=60000, interest_rate=3.5, repayment_rate=2.0)


@pytest.fixture
def rental():
    """1,100/month rent with Hausgeld, reserve and 3% vacancy."""
    return RentalInputs(
        monthly_rent=1100,
        monthly_hausgeld=250,
        maintenance_reserve=50,
        vacancy_rate=3.0,
    )
