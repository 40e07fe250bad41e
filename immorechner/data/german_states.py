"""
German states and their real-estate transfer tax (Grunderwerbsteuer) rates.
"""

from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class GermanState:
    """A federal state with its statutory transfer tax rate."""

    name: str
    code: str
    tax_rate: float  # Grunderwerbsteuer in percent


GERMAN_STATES: List[GermanState] = [
    GermanState("Baden-Württemberg", "BW", 5.0),
    GermanState("Bayern", "BY", 3.5),
    GermanState("Berlin", "BE", 6.0),
    GermanState("Brandenburg", "BB", 6.5),
    GermanState("Bremen", "HB", 5.0),
    GermanState("Hamburg", "HH", 5.5),
    GermanState("Hessen", "HE", 6.0),
    GermanState("Mecklenburg-Vorpommern", "MV", 6.0),
    GermanState("Niedersachsen", "NI", 5.0),
    GermanState("Nordrhein-Westfalen", "NW", 6.5),
    GermanState("Rheinland-Pfalz", "RP", 5.0),
    GermanState("Saarland", "SL", 6.5),
    GermanState("Sachsen", "SN", 5.5),
    GermanState("Sachsen-Anhalt", "ST", 5.0),
    GermanState("Schleswig-Holstein", "SH", 6.5),
    GermanState("Thüringen", "TH", 5.0),
]


def get_state_by_code(code: str) -> Optional[GermanState]:
    """Return the state with the given two-letter code, or None."""
    for state in GERMAN_STATES:
        if state.code == code:
            return state
    return None
