"""
Loan Amortization Calculations

Simulates the monthly payoff of an annuity loan with a fixed payment and
an optional constant extra repayment (Sondertilgung).
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from dateutil.relativedelta import relativedelta

logger = logging.getLogger(__name__)

MAX_MONTHS = 600  # 50 years cap
PAYOFF_THRESHOLD = 0.01


@dataclass(frozen=True)
class PaymentScheduleEntry:
    """One month of the payment schedule."""

    month: int
    date: date
    interest_payment: float
    principal_payment: float
    extra_repayment: float
    total_payment: float
    remaining_balance: float


@dataclass(frozen=True)
class PaymentScheduleSummary:
    """Totals over a payment schedule."""

    total_months: int
    total_interest_paid: float
    total_principal_paid: float
    total_extra_repayment_paid: float
    capped_at_max_months: bool


def generate_payment_schedule(
    loan_amount: float,
    monthly_payment: float,
    annual_interest_rate: float,
    monthly_extra_repayment: float = 0.0,
    start_date: Optional[date] = None,
) -> List[PaymentScheduleEntry]:
    """
    Generate the month-by-month payoff schedule.

    Interest is charged on the declining balance. The simulation stops when
    the balance is paid off, when the payment no longer covers the interest
    (the loan would never amortize), or after MAX_MONTHS months.

    Args:
        loan_amount: Loan principal
        monthly_payment: Fixed monthly payment (interest + principal)
        annual_interest_rate: Annual interest rate in percent (e.g., 3.5)
        monthly_extra_repayment: Extra principal paid each month
        start_date: Any date in the first payment month (defaults to today)

    Returns:
        List of schedule entries, empty when there is nothing to amortize
    """
    if loan_amount <= 0 or monthly_payment <= 0:
        return []

    if start_date is None:
        start_date = date.today()
    first_month = start_date.replace(day=1)

    balance = loan_amount
    monthly_rate = annual_interest_rate / 100 / 12
    schedule: List[PaymentScheduleEntry] = []

    while balance > PAYOFF_THRESHOLD and len(schedule) < MAX_MONTHS:
        interest = balance * monthly_rate
        principal = monthly_payment - interest

        if principal <= 0:
            logger.debug(
                "Payment %.2f does not cover interest %.2f, stopping after %d months",
                monthly_payment,
                interest,
                len(schedule),
            )
            break

        extra = monthly_extra_repayment

        # Don't overpay: scale principal and extra so the balance hits zero
        potential_reduction = principal + extra
        actual_reduction = min(potential_reduction, balance)
        if potential_reduction > balance:
            ratio = balance / potential_reduction
            principal = principal * ratio
            extra = extra * ratio

        balance -= actual_reduction

        schedule.append(
            PaymentScheduleEntry(
                month=len(schedule) + 1,
                date=first_month + relativedelta(months=len(schedule)),
                interest_payment=interest,
                principal_payment=principal,
                extra_repayment=extra,
                total_payment=interest + actual_reduction,
                remaining_balance=max(0.0, balance),
            )
        )

    if len(schedule) >= MAX_MONTHS and balance > PAYOFF_THRESHOLD:
        logger.info(
            "Schedule capped at %d months with %.2f outstanding", MAX_MONTHS, balance
        )

    return schedule


def summarize_payment_schedule(
    schedule: List[PaymentScheduleEntry],
) -> PaymentScheduleSummary:
    """Aggregate interest, principal and extra repayments over the schedule."""
    if not schedule:
        return PaymentScheduleSummary(
            total_months=0,
            total_interest_paid=0.0,
            total_principal_paid=0.0,
            total_extra_repayment_paid=0.0,
            capped_at_max_months=False,
        )

    last = schedule[-1]
    return PaymentScheduleSummary(
        total_months=len(schedule),
        total_interest_paid=sum(row.interest_payment for row in schedule),
        total_principal_paid=sum(row.principal_payment for row in schedule),
        total_extra_repayment_paid=sum(row.extra_repayment for row in schedule),
        capped_at_max_months=(
            len(schedule) >= MAX_MONTHS and last.remaining_balance > PAYOFF_THRESHOLD
        ),
    )


def remaining_balance_after(
    schedule: List[PaymentScheduleEntry], loan_amount: float, months: int
) -> float:
    """
    Outstanding balance after a number of months (e.g., end of Zinsbindung).

    Returns the loan amount for months <= 0 and the last balance when the
    schedule ends earlier.
    """
    if months <= 0 or not schedule:
        return max(0.0, loan_amount)
    index = min(months, len(schedule)) - 1
    return schedule[index].remaining_balance
