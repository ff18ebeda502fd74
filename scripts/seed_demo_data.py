"""
Seed the database with default asset classes, holding types and a demo
portfolio.

Usage:
    python scripts/seed_demo_data.py
"""
import sys
import os
from datetime import date

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from assetplace.db.database import get_db_context, init_db
from assetplace.db.models import Asset, AssetClass, AssetHoldingType
from assetplace.logging_config import configure_logging

ASSET_CLASSES = [
    {
        "name": "Cash & Bank Accounts",
        "color": "#4caf50",
        "default_low_growth_rate": 0.01,
        "default_medium_growth_rate": 0.02,
        "default_high_growth_rate": 0.03,
        "default_income_yield": 0.02,
        "expense_categories": [{"id": "fees", "name": "Account Fees"}],
    },
    {
        "name": "Loans & Liabilities",
        "color": "#f44336",
        "is_liability": True,
        "expense_categories": [{"id": "fees", "name": "Loan Fees"}],
    },
    {
        "name": "Real Estate",
        "color": "#2196f3",
        "default_low_growth_rate": 0.02,
        "default_medium_growth_rate": 0.04,
        "default_high_growth_rate": 0.06,
        "default_income_yield": 0.0,
        "expense_categories": [
            {"id": "council", "name": "Council Rates"},
            {"id": "insurance", "name": "Insurance"},
            {"id": "maintenance", "name": "Maintenance"},
            {"id": "strata", "name": "Strata"},
        ],
    },
    {
        "name": "Investments",
        "color": "#ff9800",
        "default_low_growth_rate": 0.03,
        "default_medium_growth_rate": 0.07,
        "default_high_growth_rate": 0.10,
        "default_income_yield": 0.02,
        "expense_categories": [{"id": "management", "name": "Management Fees"}],
    },
    {
        "name": "Retirement",
        "color": "#9c27b0",
        "default_low_growth_rate": 0.04,
        "default_medium_growth_rate": 0.065,
        "default_high_growth_rate": 0.08,
        "default_income_yield": 0.025,
        "expense_categories": [{"id": "admin", "name": "Admin Fees"}],
    },
]

HOLDING_TYPES = ["Personal", "Superannuation", "Family Trust", "Company"]


def demo_assets(classes, holding_types):
    """Demo portfolio keyed on the seeded class and holding type ids."""
    personal = holding_types["Personal"]
    return [
        Asset(
            name="Emergency Fund",
            description="Savings for unexpected expenses",
            asset_class_id=classes["Cash & Bank Accounts"],
            holding_type_id=personal,
            value=10000,
            growth_rate=0.015,
            income_yield=0.015,
        ),
        Asset(
            name="Tech Stock Portfolio",
            asset_class_id=classes["Investments"],
            holding_type_id=personal,
            value=25000,
            purchase_price=20000,
            growth_rate=0.075,
            income_yield=0.018,
        ),
        Asset(
            name="Retirement Fund",
            asset_class_id=classes["Retirement"],
            holding_type_id=holding_types["Superannuation"],
            value=150000,
            growth_rate=0.065,
            income_yield=0.025,
        ),
        Asset(
            name="Investment Property",
            description="Rental property investment",
            asset_class_id=classes["Real Estate"],
            holding_type_id=personal,
            value=380000,
            purchase_price=320000,
            purchase_date=date(2018, 9, 10),
            growth_rate=0.035,
            is_rental=True,
            rental_income=1900,
            rental_frequency="monthly",
            vacancy_rate=0.05,
            has_mortgage=True,
            mortgage_amount=250000,
            mortgage_interest_rate=0.0385,
            mortgage_term_months=360,
            mortgage_start_date=date(2018, 9, 15),
            expenses=[
                {"id": "council-rates", "category": "council", "name": "Council rates", "amount": 450, "frequency": "quarterly"},
                {"id": "landlord-insurance", "category": "insurance", "name": "Landlord insurance", "amount": 1200, "frequency": "annually"},
                {"id": "repairs", "category": "maintenance", "name": "Repairs", "amount": 150, "frequency": "monthly"},
            ],
        ),
        Asset(
            name="Car Loan",
            asset_class_id=classes["Loans & Liabilities"],
            holding_type_id=personal,
            value=15000,
            is_liability=True,
            original_loan_amount=18000,
            loan_interest_rate=0.055,
            loan_term_months=60,
            loan_start_date=date(2022, 1, 10),
        ),
        Asset(
            name="Small Business Investment",
            asset_class_id=classes["Investments"],
            holding_type_id=holding_types["Family Trust"],
            value=75000,
            purchase_price=50000,
            purchase_date=date(2019, 3, 1),
            growth_rate=0.08,
            income_yield=0.05,
        ),
    ]


def main():
    configure_logging()
    init_db()

    with get_db_context() as db:
        if db.query(AssetClass).filter(AssetClass.is_deleted == False).count() > 0:
            print("Asset classes already exist, skipping seed")
            return

        classes = {}
        for data in ASSET_CLASSES:
            asset_class = AssetClass(**data)
            db.add(asset_class)
            db.flush()
            classes[asset_class.name] = asset_class.id
            print(f"Created asset class: {asset_class.name} (ID: {asset_class.id})")

        holding_types = {}
        for name in HOLDING_TYPES:
            holding_type = AssetHoldingType(name=name)
            db.add(holding_type)
            db.flush()
            holding_types[name] = holding_type.id

        assets = demo_assets(classes, holding_types)
        db.add_all(assets)
        print(f"Created {len(assets)} demo assets")

    print("\nDemo data created successfully!")


if __name__ == "__main__":
    main()
