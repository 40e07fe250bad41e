"""
Financial Calculation Engine

Core calculation modules for real estate investment analysis:
derived investment metrics and the loan payment schedule.
"""

from immorechner.calculations import amortization, metrics

__all__ = ["amortization", "metrics"]
