"""
SQLAlchemy ORM models for the asset store.
"""

from datetime import datetime
from sqlalchemy import (
    Column,
    String,
    Float,
    Integer,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    JSON,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship
import uuid

Base = declarative_base()


def generate_uuid():
    return str(uuid.uuid4())


class AuditMixin:
    """Mixin for audit fields on all models."""

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )
    is_deleted = Column(Boolean, default=False, nullable=False)


class AssetClass(AuditMixin, Base):
    """Asset class (Real Estate, Shares, Cash, Loans...) with projection defaults."""

    __tablename__ = "asset_classes"

    id = Column(String, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    is_liability = Column(Boolean, default=False, nullable=False)
    color = Column(String(20))

    # Growth rates per scenario and income yield, as decimals
    default_low_growth_rate = Column(Float)
    default_medium_growth_rate = Column(Float)
    default_high_growth_rate = Column(Float)
    default_income_yield = Column(Float)

    # Expense categories offered for assets of this class (stored as JSON)
    expense_categories = Column(JSON, default=list)

    # Relationships
    assets = relationship("Asset", back_populates="asset_class", lazy="dynamic")


class AssetHoldingType(AuditMixin, Base):
    """Ownership structure (personal, super fund, trust...)."""

    __tablename__ = "asset_holding_types"

    id = Column(String, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    tax_settings = Column(JSON, default=dict)

    # Relationships
    assets = relationship("Asset", back_populates="holding_type", lazy="dynamic")


class Asset(AuditMixin, Base):
    """An asset or liability recorded by the user."""

    __tablename__ = "assets"

    id = Column(String, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    description = Column(Text)

    asset_class_id = Column(String, ForeignKey("asset_classes.id"), nullable=False)
    holding_type_id = Column(String, ForeignKey("asset_holding_types.id"), nullable=True)

    # Valuation
    value = Column(Float, nullable=False, default=0.0)
    purchase_date = Column(Date)
    purchase_price = Column(Float)
    start_date = Column(Date)  # enters projections from this date
    growth_rate = Column(Float)  # overrides the asset class default
    income_yield = Column(Float)  # overrides the asset class default

    is_hidden = Column(Boolean, default=False, nullable=False)
    is_liability = Column(Boolean, default=False, nullable=False)

    # Loan (when the asset itself is a liability)
    original_loan_amount = Column(Float)
    loan_interest_rate = Column(Float)
    loan_term_months = Column(Integer)
    loan_start_date = Column(Date)
    payoff_years = Column(Float)

    # Rental property
    is_rental = Column(Boolean, default=False)
    rental_income = Column(Float)
    rental_frequency = Column(String(20), default="monthly")
    vacancy_rate = Column(Float)

    # Mortgage attached to a property
    has_mortgage = Column(Boolean, default=False)
    mortgage_amount = Column(Float)
    mortgage_interest_rate = Column(Float)
    mortgage_term_months = Column(Integer)
    mortgage_start_date = Column(Date)

    # Employment income
    base_salary = Column(Float)
    salary_frequency = Column(String(20), default="annually")
    bonus_fixed_amount = Column(Float)
    bonus_percentage = Column(Float)
    bonus_likelihood = Column(Float)

    # Recurring expenses (stored as JSON list of expense dicts)
    expenses = Column(JSON, default=list)

    # Relationships
    asset_class = relationship("AssetClass", back_populates="assets")
    holding_type = relationship("AssetHoldingType", back_populates="assets")


class SystemSettings(AuditMixin, Base):
    """Single-row table of admin-editable defaults."""

    __tablename__ = "system_settings"

    id = Column(Integer, primary_key=True, default=1)
    default_currency = Column(String(10))
    default_basic_mode_years = Column(Integer)
    default_advanced_mode_years = Column(Integer)
    default_inflation_rate = Column(Float)
    max_projection_years = Column(Integer)
