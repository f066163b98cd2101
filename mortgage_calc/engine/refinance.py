"""Refinance analysis: replace part of the mortgage with a third-party loan.

The refinanced amount pays down the original loan, whose remaining principal
is re-amortized over its remaining term at the blended rate. The third-party
loan is costed under its own accrual method, and the two are compared with
the original remaining payments.

Pure computation. Degenerate inputs come back flagged, never raised.
"""

import logging
from decimal import Decimal

from mortgage_calc.config import settings
from mortgage_calc.engine.amortization import annuity_balance, annuity_payment
from mortgage_calc.engine.numeric import ZERO, to_money, to_months, to_rate, to_term_months, total
from mortgage_calc.models.loan import (
    AccrualMethod,
    LoanConfiguration,
    RefinanceProposal,
)
from mortgage_calc.models.results import LoanSchedules, RefinanceResult, RefinanceStatus

logger = logging.getLogger(__name__)


def _accrual(value) -> AccrualMethod:
    try:
        return AccrualMethod(value)
    except ValueError:
        logger.debug("Unknown accrual method %r, using equal installment", value)
        return AccrualMethod.EQUAL_INSTALLMENT


def blended_rate(balances: dict[str, Decimal], rates: dict[str, Decimal]) -> Decimal:
    """Annual rate (percent) of the legs weighted by their balances."""
    outstanding = total(balances.values())
    if outstanding <= 0:
        return ZERO
    return total(balances[name] * rates[name] for name in balances) / outstanding


def equal_installment_cost(
    amount: Decimal,
    annual_rate_percent: Decimal,
    term_months: int,
    target_payoff_month: int | None = None,
) -> tuple[Decimal, Decimal, int, str]:
    """Monthly payment, total cost, payoff month and description of an annuity loan.

    An early payoff month settles the annuity balance at that month as a lump sum.
    """
    r = annual_rate_percent / 100 / 12
    pmt = annuity_payment(amount, r, term_months)
    rate_pct = f"{float(annual_rate_percent):.2f}%"

    if target_payoff_month and 0 < target_payoff_month < term_months:
        lump_sum = annuity_balance(amount, r, pmt, target_payoff_month)
        cost = pmt * target_payoff_month + lump_sum
        description = (
            f"Equal installment at {rate_pct}: {float(pmt):,.2f} per month,"
            f" remaining {float(lump_sum):,.2f} repaid in month {target_payoff_month}"
            f" of a {term_months}-month term"
        )
        return pmt, cost, target_payoff_month, description

    description = (
        f"Equal installment at {rate_pct}: {float(pmt):,.2f} per month"
        f" for {term_months} months"
    )
    return pmt, pmt * term_months, term_months, description


def interest_first_cost(
    amount: Decimal,
    annual_rate_percent: Decimal,
    term_months: int,
    target_payoff_month: int | None = None,
    average_daily_balance: Decimal | None = None,
) -> tuple[Decimal, Decimal, int, str]:
    """Monthly interest, total cost, payoff month and description of an interest-first loan.

    Interest accrues daily on the billing base (average daily balance when
    known, else the full amount) and is billed every 30 days; the principal
    is repaid in one go at the payoff month.
    """
    principal_base = average_daily_balance if average_daily_balance is not None else amount
    daily_rate = annual_rate_percent / 100 / settings.days_per_year
    monthly_interest = principal_base * daily_rate * settings.interest_first_billing_days

    payoff_month = term_months
    if target_payoff_month and 0 < target_payoff_month < term_months:
        payoff_month = target_payoff_month

    cost = monthly_interest * payoff_month + amount
    description = (
        f"Interest first at {float(annual_rate_percent):.2f}%:"
        f" {float(monthly_interest):,.2f} interest per month on a"
        f" {float(principal_base):,.2f} balance, principal {float(amount):,.2f}"
        f" repaid in month {payoff_month}"
    )
    return monthly_interest, cost, payoff_month, description


def analyze_refinance(
    schedules: LoanSchedules,
    config: LoanConfiguration,
    proposal: RefinanceProposal,
) -> RefinanceResult:
    """Compare keeping the loan as is with partially refinancing it.

    The comparison starts after ``proposal.at_month`` scheduled payments
    (0 = at origination). Callers must check ``status`` before reading
    savings: a zero-amount or not-applicable result carries no comparison.
    """
    method = _accrual(proposal.accrual_method)
    base = schedules.combined
    total_months = len(base)
    at_month = to_months(proposal.at_month)
    requested = to_money(proposal.amount)

    legs = {name: leg for name, leg in config.active_legs() if name in schedules.legs}
    balances = {name: schedules.leg_balance_at(name, at_month) for name in legs}
    rates = {name: to_rate(leg.annual_rate_percent) for name, leg in legs.items()}
    outstanding = total(balances.values())

    # A zero request is flagged as such even when there is nothing to refinance
    if requested > 0 and at_month >= total_months:
        logger.debug("Refinance at month %d outside schedule of %d months",
                     at_month, total_months)
        return RefinanceResult(status=RefinanceStatus.NOT_APPLICABLE, accrual_method=method)

    refinance_amount = min(requested, outstanding)
    if refinance_amount <= 0:
        logger.debug("Refinance amount is zero (outstanding %s)", outstanding)
        return RefinanceResult(
            status=RefinanceStatus.ZERO_AMOUNT,
            accrual_method=method,
            outstanding_principal=outstanding,
        )

    remaining_months = total_months - at_month
    original_monthly = base[at_month].payment
    original_remaining = total(e.payment for e in base[at_month:])

    # Original loan keeps running on what is left
    rate_pct = blended_rate(balances, rates)
    new_original_monthly = annuity_payment(
        outstanding - refinance_amount, rate_pct / 100 / 12, remaining_months,
    )

    new_rate = to_rate(proposal.new_annual_rate_percent)
    # A stale zero term degrades to repaying within a single month
    new_term = max(to_term_months(proposal.new_term_months), 1)
    target = to_months(proposal.target_payoff_month) if proposal.target_payoff_month is not None else None

    if method == AccrualMethod.INTEREST_FIRST:
        average_balance = (
            to_money(proposal.average_daily_balance)
            if proposal.average_daily_balance is not None else None
        )
        third_monthly, third_total, payoff_month, description = interest_first_cost(
            refinance_amount, new_rate, new_term, target, average_balance,
        )
    else:
        third_monthly, third_total, payoff_month, description = equal_installment_cost(
            refinance_amount, new_rate, new_term, target,
        )

    fee = to_money(proposal.fee)
    monthly_savings = original_monthly - (new_original_monthly + third_monthly)
    total_savings = (
        original_remaining
        - (new_original_monthly * remaining_months + third_total)
        - fee
    )

    break_even = None
    if fee > 0 and monthly_savings > 0:
        break_even = fee / monthly_savings

    return RefinanceResult(
        status=RefinanceStatus.EVALUATED,
        accrual_method=method,
        refinance_amount=refinance_amount,
        outstanding_principal=outstanding,
        blended_rate_percent=rate_pct,
        remaining_months=remaining_months,
        original_monthly_payment=original_monthly,
        original_remaining_payment=original_remaining,
        new_original_monthly_payment=new_original_monthly,
        third_party_monthly_payment=third_monthly,
        third_party_total_cost=third_total,
        third_party_payoff_month=payoff_month,
        monthly_savings=monthly_savings,
        total_savings=total_savings,
        break_even_months=break_even,
        worth_it=total_savings > 0,
        description=description,
    )
