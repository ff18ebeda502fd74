"""
Financial Calculation Engine

Pure calculation modules for loan schedules, expenses, income and
multi-year net worth projections. No I/O; every function is safe to call
repeatedly with the same inputs.
"""

from assetplace.calculations import amortization, expenses, income, projection, timevalue

__all__ = ["amortization", "expenses", "income", "projection", "timevalue"]
