"""Amortization schedule computation for a single loan leg.

Pure functions: Decimal in, dataclass out. No I/O. Never raises on bad
numbers; inputs are normalized first and a zero leg yields zero results.
"""

import logging
from decimal import Decimal

from mortgage_calc.engine.numeric import (
    ZERO,
    clamp_balance,
    to_money,
    to_months,
    to_rate,
    to_term_months,
    total,
)
from mortgage_calc.models.loan import LoanLeg, RepaymentConvention
from mortgage_calc.models.results import AmortizationResult, PaymentScheduleEntry

logger = logging.getLogger(__name__)


def normalize_leg(leg: LoanLeg) -> LoanLeg:
    """Return a copy of ``leg`` with every field coerced into range."""
    try:
        convention = RepaymentConvention(leg.repayment_convention)
    except ValueError:
        logger.debug("Unknown repayment convention %r, using equal installment",
                     leg.repayment_convention)
        convention = RepaymentConvention.EQUAL_INSTALLMENT
    return LoanLeg(
        principal=to_money(leg.principal),
        annual_rate_percent=to_rate(leg.annual_rate_percent),
        term_months=to_term_months(leg.term_months),
        repayment_convention=convention,
    )


def annuity_payment(principal: Decimal, monthly_rate: Decimal, months: int) -> Decimal:
    """Fixed monthly payment that retires ``principal`` in ``months`` payments."""
    if principal <= 0 or months <= 0:
        return ZERO
    # M = P * [r(1+r)^n] / [(1+r)^n - 1]
    factor = (1 + monthly_rate) ** months
    # A rate too small to move 1 + r at working precision behaves as zero
    if monthly_rate == 0 or factor == 1:
        return principal / months
    return principal * (monthly_rate * factor) / (factor - 1)


def annuity_balance(
    principal: Decimal, monthly_rate: Decimal, payment: Decimal, months_paid: int,
) -> Decimal:
    """Outstanding annuity balance after ``months_paid`` payments.

    B_k = P(1+r)^k - M[(1+r)^k - 1] / r
    """
    if months_paid <= 0:
        return principal
    factor = (1 + monthly_rate) ** months_paid
    if monthly_rate == 0 or factor == 1:
        return clamp_balance(principal - payment * months_paid)
    return clamp_balance(principal * factor - payment * (factor - 1) / monthly_rate)


def fixed_payment_schedule(
    principal: Decimal,
    monthly_rate: Decimal,
    payment: Decimal,
    months: int,
    start_month_offset: int = 0,
) -> list[PaymentScheduleEntry]:
    """Schedule paying a fixed amount each month until ``principal`` is retired.

    Stops early once the balance reaches zero; the final payment is trimmed to
    what is actually owed.
    """
    schedule: list[PaymentScheduleEntry] = []
    balance = principal
    for i in range(1, months + 1):
        if balance <= 0:
            break
        interest = balance * monthly_rate
        principal_paid = payment - interest

        # Final payment adjustment
        if principal_paid > balance:
            principal_paid = balance
            actual_payment = interest + principal_paid
        else:
            actual_payment = payment

        balance = clamp_balance(balance - principal_paid)
        schedule.append(PaymentScheduleEntry(
            month=start_month_offset + i,
            payment=actual_payment,
            principal_portion=principal_paid,
            interest_portion=interest,
            remaining_balance=balance,
        ))
    return schedule


def fixed_principal_schedule(
    principal: Decimal,
    monthly_rate: Decimal,
    principal_portion: Decimal,
    months: int,
    start_month_offset: int = 0,
) -> list[PaymentScheduleEntry]:
    """Schedule repaying a fixed principal amount each month plus interest."""
    schedule: list[PaymentScheduleEntry] = []
    balance = principal
    for i in range(1, months + 1):
        if balance <= 0:
            break
        interest = balance * monthly_rate
        principal_paid = min(principal_portion, balance)
        balance = clamp_balance(balance - principal_paid)
        schedule.append(PaymentScheduleEntry(
            month=start_month_offset + i,
            payment=principal_paid + interest,
            principal_portion=principal_paid,
            interest_portion=interest,
            remaining_balance=balance,
        ))
    return schedule


def _equal_installment(leg: LoanLeg, offset: int) -> AmortizationResult:
    r = leg.monthly_rate
    n = leg.term_months
    pmt = annuity_payment(leg.principal, r, n)

    schedule: list[PaymentScheduleEntry] = []
    balance = leg.principal
    for month in range(1, n + 1):
        interest = balance * r
        principal_paid = pmt - interest
        balance = clamp_balance(balance - principal_paid)
        schedule.append(PaymentScheduleEntry(
            month=offset + month,
            payment=pmt,
            principal_portion=principal_paid,
            interest_portion=interest,
            remaining_balance=balance,
        ))

    total_payment = pmt * n
    return AmortizationResult(
        schedule=schedule,
        principal=leg.principal,
        monthly_payment=pmt,
        total_payment=total_payment,
        total_interest=total_payment - leg.principal,
    )


def _equal_principal(leg: LoanLeg, offset: int) -> AmortizationResult:
    r = leg.monthly_rate
    n = leg.term_months
    monthly_principal = leg.principal / n

    schedule: list[PaymentScheduleEntry] = []
    balance = leg.principal
    for month in range(1, n + 1):
        interest = balance * r
        balance = clamp_balance(balance - monthly_principal)
        schedule.append(PaymentScheduleEntry(
            month=offset + month,
            payment=monthly_principal + interest,
            principal_portion=monthly_principal,
            interest_portion=interest,
            remaining_balance=balance,
        ))

    # Interest varies month to month, so totals come from the schedule itself
    return AmortizationResult(
        schedule=schedule,
        principal=leg.principal,
        monthly_payment=schedule[0].payment,
        total_payment=total(e.payment for e in schedule),
        total_interest=total(e.interest_portion for e in schedule),
    )


def amortization_schedule(leg: LoanLeg, start_month_offset: int = 0) -> AmortizationResult:
    """Generate the full month-by-month schedule for one leg.

    Args:
        leg: Loan leg; out-of-range fields are normalized, never rejected
        start_month_offset: Added to every month number, used when stitching
            a recomputed tail after an earlier month
    """
    leg = normalize_leg(leg)
    offset = to_months(start_month_offset)

    if leg.term_months == 0:
        logger.debug("Leg with zero term, returning empty schedule")
        return AmortizationResult(schedule=[], principal=leg.principal)

    if leg.repayment_convention == RepaymentConvention.EQUAL_PRINCIPAL:
        return _equal_principal(leg, offset)
    return _equal_installment(leg, offset)
