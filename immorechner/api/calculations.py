"""
Financial calculation API endpoints.

These endpoints accept inputs and return calculated results.
Used by the frontend for real-time updates whenever an input changes.
"""

import logging
from dataclasses import asdict
from datetime import date
from typing import List, Optional, Tuple, Union

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from immorechner.calculations import amortization, metrics
from immorechner.config import get_settings
from immorechner.data.german_states import get_state_by_code

logger = logging.getLogger(__name__)

router = APIRouter()


class PropertyInput(BaseModel):
    """Purchase price and purchase cost rates (percent)."""

    purchase_price: float
    state_code: str = Field(default_factory=lambda: get_settings().default_state_code)
    # Looked up from state_code when omitted
    state_tax_rate: Optional[float] = None
    notary_rate: float = Field(default_factory=lambda: get_settings().default_notary_rate)
    land_registry_rate: float = Field(
        default_factory=lambda: get_settings().default_land_registry_rate
    )
    broker_rate: float = Field(default_factory=lambda: get_settings().default_broker_rate)
    include_broker: bool = Field(
        default_factory=lambda: get_settings().default_include_broker
    )


class FinancingInput(BaseModel):
    """Equity and annual loan rates (percent)."""

    equity: float
    interest_rate: float
    repayment_rate: float


class RentalInput(BaseModel):
    """Monthly rent and non-recoverable costs."""

    monthly_rent: float
    monthly_hausgeld: float = 0.0
    maintenance_reserve: float = 0.0
    vacancy_rate: float = 0.0


class TaxInput(BaseModel):
    """Optional tax analysis inputs."""

    depreciation_rate: float = metrics.DEFAULT_TAX_INPUTS.depreciation_rate
    land_value_percent: float = metrics.DEFAULT_TAX_INPUTS.land_value_percent
    tax_input_mode: metrics.TaxInputMode = metrics.TaxInputMode.RATE
    marginal_tax_rate: float = metrics.DEFAULT_TAX_INPUTS.marginal_tax_rate
    taxable_income: float = 0.0
    include_soli: bool = False
    joint_tax_declaration: bool = False


class MetricsInput(BaseModel):
    """Input for the investment metrics calculation."""

    property: PropertyInput
    financing: FinancingInput
    rental: RentalInput
    tax: Optional[TaxInput] = None


class CostBasisResponse(BaseModel):
    """Depreciation basis and marginal rate from the default tax inputs."""

    total_acquisition_cost: float
    building_value: float
    land_value: float
    annual_depreciation: float
    effective_marginal_rate: float


class TaxAnalysisResponse(BaseModel):
    """Tax effect of the rental."""

    total_acquisition_cost: float
    building_value: float
    land_value: float
    annual_depreciation: float
    effective_marginal_rate: float
    annual_deductible_interest: float
    total_deductible_expenses: float
    taxable_rental_income: float
    annual_tax_savings: float
    monthly_tax_savings: float
    monthly_cash_flow_after_tax: float
    annual_cash_flow_after_tax: float


class MetricsResponse(BaseModel):
    """All derived investment metrics."""

    # Purchase costs
    transfer_tax: float
    notary_fees: float
    land_registry_fees: float
    broker_fees: float
    total_purchase_costs: float
    purchase_costs_rate: float
    total_investment: float

    # Financing
    loan_amount: float
    loan_to_value: float
    monthly_mortgage: float
    annual_mortgage: float
    monthly_interest: float

    # Rental
    effective_monthly_rent: float
    annual_rent: float
    effective_annual_rent: float
    monthly_expenses: float
    annual_expenses: float

    # Cash flow
    monthly_cash_flow: float
    annual_cash_flow: float
    monthly_noi: float
    annual_noi: float

    # Yields
    gross_yield: float
    net_yield: float
    cash_on_cash_return: float
    rent_multiplier: float

    # Full analysis with tax inputs, else the default cost basis
    tax: Union[TaxAnalysisResponse, CostBasisResponse] = Field(
        union_mode="left_to_right"
    )


class ScheduleEntryResponse(BaseModel):
    """One month of the payment schedule."""

    month: int
    date: date
    interest_payment: float
    principal_payment: float
    extra_repayment: float
    total_payment: float
    remaining_balance: float


class ScheduleSummaryResponse(BaseModel):
    """Totals over the payment schedule."""

    total_months: int
    total_interest_paid: float
    total_principal_paid: float
    total_extra_repayment_paid: float
    capped_at_max_months: bool


class ScheduleInput(BaseModel):
    """Input for the payment schedule."""

    loan_amount: float
    monthly_payment: float
    interest_rate: float
    monthly_extra_repayment: float = 0.0
    start_date: Optional[date] = None
    fixed_rate_years: Optional[int] = None


class ScheduleResponse(BaseModel):
    """Response with payment schedule and summary."""

    schedule: List[ScheduleEntryResponse]
    summary: ScheduleSummaryResponse
    remaining_balance_after_fixed_rate: Optional[float] = None


class AnalysisInput(MetricsInput):
    """Input for metrics plus the resulting payment schedule."""

    monthly_extra_repayment: float = 0.0
    start_date: Optional[date] = None


class AnalysisResponse(BaseModel):
    """Metrics together with the payment schedule of the resulting loan."""

    metrics: MetricsResponse
    schedule: List[ScheduleEntryResponse]
    summary: ScheduleSummaryResponse


def _resolve_state_tax_rate(prop: PropertyInput) -> float:
    """Use the explicit rate, else the statutory rate of the state."""
    if prop.state_tax_rate is not None:
        return prop.state_tax_rate

    state = get_state_by_code(prop.state_code.upper())
    if state is None:
        logger.info("Unknown state code %r without explicit tax rate", prop.state_code)
        raise HTTPException(
            status_code=422,
            detail=f"Unknown state code '{prop.state_code}' and no state_tax_rate given",
        )
    return state.tax_rate


def _run_metrics(inputs: MetricsInput) -> metrics.InvestmentMetrics:
    """Convert request models to calculation inputs and derive the metrics."""
    prop = metrics.PropertyInputs(
        purchase_price=inputs.property.purchase_price,
        state_code=inputs.property.state_code.upper(),
        state_tax_rate=_resolve_state_tax_rate(inputs.property),
        notary_rate=inputs.property.notary_rate,
        land_registry_rate=inputs.property.land_registry_rate,
        broker_rate=inputs.property.broker_rate,
        include_broker=inputs.property.include_broker,
    )
    financing = metrics.FinancingInputs(**inputs.financing.model_dump())
    rental = metrics.RentalInputs(**inputs.rental.model_dump())
    tax = metrics.TaxInputs(**inputs.tax.model_dump()) if inputs.tax else None

    return metrics.calculate_metrics(prop, financing, rental, tax)


def _schedule_response(
    schedule: List[amortization.PaymentScheduleEntry],
) -> Tuple[List[ScheduleEntryResponse], ScheduleSummaryResponse]:
    summary = amortization.summarize_payment_schedule(schedule)
    return (
        [ScheduleEntryResponse(**asdict(row)) for row in schedule],
        ScheduleSummaryResponse(**asdict(summary)),
    )


@router.post("/metrics", response_model=MetricsResponse)
async def calculate_metrics_endpoint(inputs: MetricsInput):
    """Calculate purchase costs, financing, cash flow, yields and tax effect."""
    result = _run_metrics(inputs)
    return MetricsResponse(**asdict(result))


@router.post("/schedule", response_model=ScheduleResponse)
async def calculate_schedule(inputs: ScheduleInput):
    """Generate the monthly payment schedule for a loan."""
    schedule = amortization.generate_payment_schedule(
        loan_amount=inputs.loan_amount,
        monthly_payment=inputs.monthly_payment,
        annual_interest_rate=inputs.interest_rate,
        monthly_extra_repayment=inputs.monthly_extra_repayment,
        start_date=inputs.start_date,
    )
    rows, summary = _schedule_response(schedule)

    remaining = None
    if inputs.fixed_rate_years is not None:
        remaining = amortization.remaining_balance_after(
            schedule, inputs.loan_amount, inputs.fixed_rate_years * 12
        )

    return ScheduleResponse(
        schedule=rows,
        summary=summary,
        remaining_balance_after_fixed_rate=remaining,
    )


@router.post("/analysis", response_model=AnalysisResponse)
async def calculate_analysis(inputs: AnalysisInput):
    """Calculate metrics and the payment schedule of the resulting loan."""
    result = _run_metrics(inputs)

    schedule = amortization.generate_payment_schedule(
        loan_amount=result.loan_amount,
        monthly_payment=result.monthly_mortgage,
        annual_interest_rate=inputs.financing.interest_rate,
        monthly_extra_repayment=inputs.monthly_extra_repayment,
        start_date=inputs.start_date,
    )
    rows, summary = _schedule_response(schedule)

    return AnalysisResponse(
        metrics=MetricsResponse(**asdict(result)),
        schedule=rows,
        summary=summary,
    )
