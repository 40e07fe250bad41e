"""
Static reference data: German states and income tax brackets.
"""

from immorechner.data.german_states import GERMAN_STATES, GermanState, get_state_by_code
from immorechner.data.tax_brackets import (
    MARGINAL_RATE_PRESETS,
    MarginalRatePreset,
    calculate_marginal_rate,
)

__all__ = [
    "GERMAN_STATES",
    "GermanState",
    "get_state_by_code",
    "MARGINAL_RATE_PRESETS",
    "MarginalRatePreset",
    "calculate_marginal_rate",
]
