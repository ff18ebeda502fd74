"""
Conversion from stored rows to projection inputs.

Keeps the ORM out of the calculation modules: the engines only ever see
frozen snapshot dataclasses.
"""

import logging
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from assetplace.calculations.amortization import LoanTerms
from assetplace.calculations.expenses import parse_expenses
from assetplace.calculations.income import (
    employment_annual_income,
    rental_annual_income,
)
from assetplace.calculations.projection import (
    AssetClassDefaults,
    AssetSnapshot,
    ProjectionConfig,
    ProjectionInput,
)
from assetplace.db.models import Asset, AssetClass, AssetHoldingType

logger = logging.getLogger(__name__)


def asset_class_defaults(asset_class: AssetClass) -> AssetClassDefaults:
    return AssetClassDefaults(
        id=asset_class.id,
        name=asset_class.name,
        low_growth_rate=asset_class.default_low_growth_rate,
        medium_growth_rate=asset_class.default_medium_growth_rate,
        high_growth_rate=asset_class.default_high_growth_rate,
        income_yield=asset_class.default_income_yield,
    )


def loan_terms(asset: Asset) -> Optional[LoanTerms]:
    """Loan terms of a liability row, or None if it does not describe a loan."""
    if not asset.loan_term_months or asset.loan_interest_rate is None:
        return None
    principal = asset.original_loan_amount or asset.value
    if not principal or principal <= 0:
        return None
    return LoanTerms.from_months(principal, asset.loan_interest_rate, asset.loan_term_months)


def mortgage_terms(asset: Asset) -> Optional[LoanTerms]:
    """Terms of the mortgage recorded on a property, if any."""
    if not asset.has_mortgage or not asset.mortgage_amount:
        return None
    if not asset.mortgage_term_months or asset.mortgage_interest_rate is None:
        return None
    return LoanTerms.from_months(
        asset.mortgage_amount, asset.mortgage_interest_rate, asset.mortgage_term_months
    )


def annual_income(asset: Asset) -> Optional[float]:
    """Explicit income for rentals and employment; None means use the yield."""
    if asset.is_liability:
        return None
    if asset.is_rental and asset.rental_income:
        return rental_annual_income(
            asset.rental_income, asset.rental_frequency or "monthly", asset.vacancy_rate
        )
    if asset.base_salary:
        return employment_annual_income(
            asset.base_salary,
            asset.salary_frequency or "annually",
            bonus_fixed=asset.bonus_fixed_amount,
            bonus_percent=asset.bonus_percentage,
            bonus_likelihood=asset.bonus_likelihood,
        )
    return None


def asset_snapshots(asset: Asset) -> List[AssetSnapshot]:
    """
    Snapshots for one stored asset.

    A property carrying a mortgage yields two snapshots: the property and a
    liability for the mortgage, booked to the same class and holding type.
    """
    snapshots = [
        AssetSnapshot(
            id=asset.id,
            name=asset.name,
            asset_class_id=asset.asset_class_id,
            holding_type_id=asset.holding_type_id,
            value=asset.value,
            growth_rate=asset.growth_rate,
            income_yield=asset.income_yield,
            annual_income=annual_income(asset),
            is_liability=bool(asset.is_liability),
            is_hidden=bool(asset.is_hidden),
            start_date=asset.start_date,
            loan=loan_terms(asset) if asset.is_liability else None,
            loan_start_date=asset.loan_start_date,
            payoff_years=asset.payoff_years,
            expenses=tuple(parse_expenses(asset.expenses)),
        )
    ]

    mortgage = None if asset.is_liability else mortgage_terms(asset)
    if mortgage is not None:
        snapshots.append(
            AssetSnapshot(
                id=f"{asset.id}:mortgage",
                name=f"{asset.name} mortgage",
                asset_class_id=asset.asset_class_id,
                holding_type_id=asset.holding_type_id,
                value=asset.mortgage_amount,
                is_liability=True,
                is_hidden=bool(asset.is_hidden),
                start_date=asset.start_date,
                loan=mortgage,
                loan_start_date=asset.mortgage_start_date,
            )
        )

    return snapshots


def build_projection_input(
    assets: Iterable[Asset],
    asset_classes: Iterable[AssetClass],
    holding_types: Iterable[AssetHoldingType],
    config: ProjectionConfig,
) -> ProjectionInput:
    snapshots = []
    for asset in assets:
        snapshots.extend(asset_snapshots(asset))

    return ProjectionInput(
        assets=tuple(snapshots),
        config=config,
        asset_classes=tuple(asset_class_defaults(c) for c in asset_classes),
        holding_types=tuple((h.id, h.name) for h in holding_types),
    )


def load_projection_input(db: Session, config: ProjectionConfig) -> ProjectionInput:
    """Read the stored snapshot and wrap it for the projection engine."""
    assets = db.query(Asset).filter(Asset.is_deleted == False).all()
    asset_classes = db.query(AssetClass).filter(AssetClass.is_deleted == False).all()
    holding_types = (
        db.query(AssetHoldingType).filter(AssetHoldingType.is_deleted == False).all()
    )

    logger.debug(f"Loaded {len(assets)} assets for projection")

    return build_projection_input(assets, asset_classes, holding_types, config)
