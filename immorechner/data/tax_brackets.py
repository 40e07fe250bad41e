"""
German income tax brackets (2024).

Approximates the marginal tax rate from taxable income using the
progressive zones of the Einkommensteuergesetz. The zone formulas are
the derivatives of the statutory tax formula (§32a EStG) and are only
approximately continuous at the zone edges.
"""

from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class MarginalRatePreset:
    """Label/rate pair for quick selection of a marginal tax rate."""

    label: str
    rate: float


MARGINAL_RATE_PRESETS: List[MarginalRatePreset] = [
    MarginalRatePreset("0%", 0),
    MarginalRatePreset("14%", 14),
    MarginalRatePreset("24%", 24),
    MarginalRatePreset("33%", 33),
    MarginalRatePreset("42%", 42),
    MarginalRatePreset("45%", 45),
]

# Upper bounds (inclusive) of each zone in EUR
BASIC_ALLOWANCE = 11604  # Grundfreibetrag
FIRST_ZONE_END = 17005
SECOND_ZONE_END = 66760
PROPORTIONAL_ZONE_END = 277825

PROPORTIONAL_RATE = 42.0


def calculate_marginal_rate(taxable_income: float) -> float:
    """
    Calculate the marginal income tax rate for a taxable income.

    Args:
        taxable_income: Annual taxable income in EUR

    Returns:
        Marginal rate in percent (e.g., 42.0)
    """
    if taxable_income <= BASIC_ALLOWANCE:
        return 0.0
    elif taxable_income <= FIRST_ZONE_END:
        # First progression zone (14% - ~24%)
        y = (taxable_income - BASIC_ALLOWANCE) / 10000
        return (2 * 922.98 * y + 1400) / 100
    elif taxable_income <= SECOND_ZONE_END:
        # Second progression zone (~24% - 42%)
        z = (taxable_income - FIRST_ZONE_END) / 10000
        # Reaches ~42.0002 at the zone end; capped at the proportional rate
        return min((2 * 181.19 * z + 2397) / 100, PROPORTIONAL_RATE)
    elif taxable_income <= PROPORTIONAL_ZONE_END:
        return PROPORTIONAL_RATE
    else:
        # Reichensteuer
        return 45.0
