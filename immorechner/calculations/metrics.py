"""
Investment Metrics

Derives purchase costs, financing, rental cash flow, yields and the
rental tax effect from property, financing, rental and tax inputs.

All percentages are whole numbers (e.g., 3.5 for 3.5%) and are divided
by 100 at use. Every ratio guards its denominator and yields 0 instead
of a non-finite value.
"""

import enum
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Union

from immorechner.data.tax_brackets import calculate_marginal_rate

SOLIDARITY_SURCHARGE_FACTOR = 1.055


class TaxInputMode(str, enum.Enum):
    """How the marginal tax rate is determined."""

    RATE = "rate"  # use marginal_tax_rate directly
    INCOME = "income"  # derive from taxable_income via the bracket formula


@dataclass(frozen=True)
class PropertyInputs:
    """Purchase price and purchase cost rates."""

    purchase_price: float
    state_code: str
    state_tax_rate: float
    notary_rate: float
    land_registry_rate: float
    broker_rate: float
    include_broker: bool = True


@dataclass(frozen=True)
class FinancingInputs:
    """Equity and annual loan rates."""

    equity: float
    interest_rate: float
    repayment_rate: float


@dataclass(frozen=True)
class RentalInputs:
    """Monthly rent and non-recoverable costs."""

    monthly_rent: float
    monthly_hausgeld: float = 0.0
    maintenance_reserve: float = 0.0
    vacancy_rate: float = 0.0


@dataclass(frozen=True)
class TaxInputs:
    """Inputs for the rental income tax analysis."""

    depreciation_rate: float = 2.0
    land_value_percent: float = 20.0
    tax_input_mode: TaxInputMode = TaxInputMode.RATE
    marginal_tax_rate: float = 42.0
    taxable_income: float = 0.0
    include_soli: bool = False
    joint_tax_declaration: bool = False


DEFAULT_TAX_INPUTS = TaxInputs()


@dataclass(frozen=True)
class PurchaseCosts:
    """Purchase cost breakdown (Kaufnebenkosten)."""

    transfer_tax: float
    notary_fees: float
    land_registry_fees: float
    broker_fees: float
    total_purchase_costs: float
    purchase_costs_rate: float
    total_investment: float


@dataclass(frozen=True)
class CostBasis:
    """Depreciation basis and marginal rate without a tax analysis.

    Derived from DEFAULT_TAX_INPUTS when no tax inputs were given.
    """

    total_acquisition_cost: float
    building_value: float
    land_value: float
    annual_depreciation: float
    effective_marginal_rate: float


@dataclass(frozen=True)
class TaxAnalysis:
    """Tax effect of the rental (Einkünfte aus Vermietung und Verpachtung)."""

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


@dataclass(frozen=True)
class InvestmentMetrics:
    """All derived values for one set of inputs."""

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

    # TaxAnalysis with tax inputs, else CostBasis from DEFAULT_TAX_INPUTS
    tax: Union[TaxAnalysis, CostBasis]


def _percent_of(numerator: float, denominator: float) -> float:
    """numerator / denominator * 100, or 0 when the denominator is not positive."""
    if denominator <= 0:
        return 0.0
    return numerator / denominator * 100


def calculate_purchase_costs(prop: PropertyInputs) -> PurchaseCosts:
    """Calculate transfer tax, notary, land registry and broker fees."""
    price = prop.purchase_price

    transfer_tax = price * (prop.state_tax_rate / 100)
    notary_fees = price * (prop.notary_rate / 100)
    land_registry_fees = price * (prop.land_registry_rate / 100)
    broker_fees = price * (prop.broker_rate / 100) if prop.include_broker else 0.0

    total = transfer_tax + notary_fees + land_registry_fees + broker_fees

    return PurchaseCosts(
        transfer_tax=transfer_tax,
        notary_fees=notary_fees,
        land_registry_fees=land_registry_fees,
        broker_fees=broker_fees,
        total_purchase_costs=total,
        purchase_costs_rate=_percent_of(total, price),
        total_investment=price + total,
    )


def calculate_loan_amount(total_investment: float, equity: float) -> float:
    """Loan needed to cover the total investment after equity."""
    return max(0.0, total_investment - equity)


def calculate_monthly_mortgage(
    loan_amount: float, interest_rate: float, repayment_rate: float
) -> float:
    """
    Calculate the monthly annuity (Annuitätendarlehen).

    Uses the German convention of an initial interest rate plus an initial
    repayment rate, both applied to the original loan amount:

        monthly = loan * (interest + repayment) / 12

    Args:
        loan_amount: Loan principal
        interest_rate: Annual interest rate in percent
        repayment_rate: Initial annual repayment rate in percent

    Returns:
        Monthly payment, 0 when there is no loan
    """
    if loan_amount <= 0:
        return 0.0
    annual_rate = (interest_rate + repayment_rate) / 100
    return loan_amount * annual_rate / 12


def calculate_monthly_interest(loan_amount: float, interest_rate: float) -> float:
    """Interest portion of the first monthly payment (used for tax deduction)."""
    if loan_amount <= 0:
        return 0.0
    return loan_amount * (interest_rate / 100) / 12


def calculate_effective_marginal_rate(tax: TaxInputs) -> float:
    """
    Determine the marginal tax rate applied to rental income.

    In income mode the rate comes from the bracket formula; a joint
    declaration (Splittingverfahren) halves the income first. The
    solidarity surcharge is applied as a factor on the rate.
    """
    if tax.tax_input_mode == TaxInputMode.INCOME:
        income = tax.taxable_income
        if tax.joint_tax_declaration:
            income = income / 2
        rate = calculate_marginal_rate(income)
    else:
        rate = tax.marginal_tax_rate

    if tax.include_soli:
        rate = rate * SOLIDARITY_SURCHARGE_FACTOR

    return rate


def calculate_tax_savings(taxable_rental_income: float, marginal_rate: float) -> float:
    """
    Annual tax effect of the rental income.

    A loss (negative taxable income) offsets other income and yields a
    positive saving; a profit yields a negative value (additional tax).
    """
    return -taxable_rental_income * (marginal_rate / 100)


def calculate_cost_basis(
    costs: PurchaseCosts, prop: PropertyInputs, tax: TaxInputs
) -> CostBasis:
    """Split the acquisition cost into building and land and depreciate the building."""
    total_acquisition_cost = prop.purchase_price + costs.total_purchase_costs
    land_share = tax.land_value_percent / 100
    building_value = total_acquisition_cost * (1 - land_share)

    return CostBasis(
        total_acquisition_cost=total_acquisition_cost,
        building_value=building_value,
        land_value=total_acquisition_cost * land_share,
        annual_depreciation=building_value * (tax.depreciation_rate / 100),
        effective_marginal_rate=calculate_effective_marginal_rate(tax),
    )


def calculate_tax_analysis(
    costs: PurchaseCosts,
    prop: PropertyInputs,
    tax: TaxInputs,
    monthly_interest: float,
    annual_expenses: float,
    effective_annual_rent: float,
    monthly_cash_flow: float,
) -> TaxAnalysis:
    """Calculate depreciation (AfA), deductible expenses and tax savings."""
    basis = calculate_cost_basis(costs, prop, tax)
    annual_depreciation = basis.annual_depreciation
    marginal_rate = basis.effective_marginal_rate

    annual_deductible_interest = monthly_interest * 12
    total_deductible = annual_depreciation + annual_deductible_interest + annual_expenses
    taxable_rental_income = effective_annual_rent - total_deductible

    annual_tax_savings = calculate_tax_savings(taxable_rental_income, marginal_rate)
    monthly_tax_savings = annual_tax_savings / 12
    monthly_after_tax = monthly_cash_flow + monthly_tax_savings

    return TaxAnalysis(
        total_acquisition_cost=basis.total_acquisition_cost,
        building_value=basis.building_value,
        land_value=basis.land_value,
        annual_depreciation=annual_depreciation,
        effective_marginal_rate=marginal_rate,
        annual_deductible_interest=annual_deductible_interest,
        total_deductible_expenses=total_deductible,
        taxable_rental_income=taxable_rental_income,
        annual_tax_savings=annual_tax_savings,
        monthly_tax_savings=monthly_tax_savings,
        monthly_cash_flow_after_tax=monthly_after_tax,
        annual_cash_flow_after_tax=monthly_after_tax * 12,
    )


@lru_cache(maxsize=256)
def calculate_metrics(
    prop: PropertyInputs,
    financing: FinancingInputs,
    rental: RentalInputs,
    tax: Optional[TaxInputs] = None,
) -> InvestmentMetrics:
    """
    Derive all investment metrics from the input groups.

    Results are cached per input set; the inputs are frozen so equal
    inputs always map to the same result.

    Args:
        prop: Property and purchase cost inputs
        financing: Equity and loan rates
        rental: Rent and operating costs
        tax: Tax inputs, or None to skip the tax analysis

    Returns:
        InvestmentMetrics whose `tax` is a TaxAnalysis when tax inputs were
        given, else a CostBasis derived from DEFAULT_TAX_INPUTS
    """
    price = prop.purchase_price
    costs = calculate_purchase_costs(prop)

    # Financing
    loan_amount = calculate_loan_amount(costs.total_investment, financing.equity)
    monthly_mortgage = calculate_monthly_mortgage(
        loan_amount, financing.interest_rate, financing.repayment_rate
    )
    monthly_interest = calculate_monthly_interest(loan_amount, financing.interest_rate)

    # Rental income
    effective_monthly_rent = rental.monthly_rent * (1 - rental.vacancy_rate / 100)
    annual_rent = rental.monthly_rent * 12
    effective_annual_rent = effective_monthly_rent * 12

    # Non-recoverable expenses
    monthly_expenses = rental.monthly_hausgeld + rental.maintenance_reserve
    annual_expenses = monthly_expenses * 12

    # Cash flow and net operating income (before financing)
    monthly_noi = effective_monthly_rent - monthly_expenses
    monthly_cash_flow = monthly_noi - monthly_mortgage
    annual_cash_flow = monthly_cash_flow * 12
    annual_noi = monthly_noi * 12

    if tax is not None:
        tax_analysis = calculate_tax_analysis(
            costs,
            prop,
            tax,
            monthly_interest=monthly_interest,
            annual_expenses=annual_expenses,
            effective_annual_rent=effective_annual_rent,
            monthly_cash_flow=monthly_cash_flow,
        )
        equity_cash_flow = tax_analysis.annual_cash_flow_after_tax
    else:
        tax_analysis = calculate_cost_basis(costs, prop, DEFAULT_TAX_INPUTS)
        equity_cash_flow = annual_cash_flow

    return InvestmentMetrics(
        transfer_tax=costs.transfer_tax,
        notary_fees=costs.notary_fees,
        land_registry_fees=costs.land_registry_fees,
        broker_fees=costs.broker_fees,
        total_purchase_costs=costs.total_purchase_costs,
        purchase_costs_rate=costs.purchase_costs_rate,
        total_investment=costs.total_investment,
        loan_amount=loan_amount,
        loan_to_value=_percent_of(loan_amount, price),
        monthly_mortgage=monthly_mortgage,
        annual_mortgage=monthly_mortgage * 12,
        monthly_interest=monthly_interest,
        effective_monthly_rent=effective_monthly_rent,
        annual_rent=annual_rent,
        effective_annual_rent=effective_annual_rent,
        monthly_expenses=monthly_expenses,
        annual_expenses=annual_expenses,
        monthly_cash_flow=monthly_cash_flow,
        annual_cash_flow=annual_cash_flow,
        monthly_noi=monthly_noi,
        annual_noi=annual_noi,
        gross_yield=_percent_of(annual_rent, price),
        net_yield=_percent_of(annual_noi, costs.total_investment),
        cash_on_cash_return=_percent_of(equity_cash_flow, financing.equity),
        rent_multiplier=price / annual_rent if annual_rent > 0 else 0.0,
        tax=tax_analysis,
    )
