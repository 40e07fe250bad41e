"""
Reference data API endpoints.

Exposes the German state transfer tax table and income tax helpers.
"""

import logging
from typing import List

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from immorechner.calculations.metrics import SOLIDARITY_SURCHARGE_FACTOR
from immorechner.data.german_states import GERMAN_STATES, get_state_by_code
from immorechner.data.tax_brackets import MARGINAL_RATE_PRESETS, calculate_marginal_rate

logger = logging.getLogger(__name__)

router = APIRouter()


class StateResponse(BaseModel):
    """A German state with its transfer tax rate."""

    name: str
    code: str
    tax_rate: float


class MarginalRatePresetResponse(BaseModel):
    """Quick-select marginal tax rate."""

    label: str
    rate: float


class MarginalRateResponse(BaseModel):
    """Marginal tax rate derived from taxable income."""

    taxable_income: float
    joint_tax_declaration: bool
    include_soli: bool
    marginal_rate: float


@router.get("/states", response_model=List[StateResponse])
async def list_states():
    """List all German states with their transfer tax rates."""
    return [
        StateResponse(name=s.name, code=s.code, tax_rate=s.tax_rate)
        for s in GERMAN_STATES
    ]


@router.get("/states/{code}", response_model=StateResponse)
async def get_state(code: str):
    """Get a single state by its two-letter code."""
    state = get_state_by_code(code.upper())
    if state is None:
        logger.info("State code %r not found", code)
        raise HTTPException(status_code=404, detail="State not found")
    return StateResponse(name=state.name, code=state.code, tax_rate=state.tax_rate)


@router.get("/tax/presets", response_model=List[MarginalRatePresetResponse])
async def list_marginal_rate_presets():
    """List marginal tax rate presets."""
    return [
        MarginalRatePresetResponse(label=p.label, rate=p.rate)
        for p in MARGINAL_RATE_PRESETS
    ]


@router.get("/tax/marginal-rate", response_model=MarginalRateResponse)
async def get_marginal_rate(
    taxable_income: float,
    joint: bool = False,
    include_soli: bool = False,
):
    """
    Calculate the marginal tax rate for a taxable income.

    With a joint declaration the income is halved before the bracket
    lookup (Splittingverfahren).
    """
    income = taxable_income / 2 if joint else taxable_income
    rate = calculate_marginal_rate(income)
    if include_soli:
        rate = rate * SOLIDARITY_SURCHARGE_FACTOR

    return MarginalRateResponse(
        taxable_income=taxable_income,
        joint_tax_declaration=joint,
        include_soli=include_soli,
        marginal_rate=rate,
    )
