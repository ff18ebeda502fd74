"""
Pytest configuration and shared fixtures.
"""

import pytest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from assetplace.main import app
from assetplace.db.database import create_db_engine, get_db
# Import all models to ensure all tables are created
from assetplace.db.models import Base, Asset, AssetClass, AssetHoldingType, SystemSettings


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")


# Create a shared test database engine
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
test_engine = create_db_engine(SQLALCHEMY_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def override_get_db():
    """Override database dependency for testing."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


# Override the dependency globally for all tests
app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test and drop after."""
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def db_session():
    """Create database session for test setup."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def real_estate(db_session):
    """A real estate asset class with scenario growth rates."""
    asset_class = AssetClass(
        name="Real Estate",
        default_low_growth_rate=0.02,
        default_medium_growth_rate=0.04,
        default_high_growth_rate=0.06,
        default_income_yield=0.0,
    )
    db_session.add(asset_class)
    db_session.commit()
    db_session.refresh(asset_class)
    return asset_class


@pytest.fixture
def loans(db_session):
    """A liability asset class."""
    asset_class = AssetClass(name="Loans & Liabilities", is_liability=True)
    db_session.add(asset_class)
    db_session.commit()
    db_session.refresh(asset_class)
    return asset_class


@pytest.fixture
def personal(db_session):
    """The personal holding type."""
    holding_type = AssetHoldingType(name="Personal")
    db_session.add(holding_type)
    db_session.commit()
    db_session.refresh(holding_type)
    return holding_type
