"""Prepayment simulation: recompute the schedule tail after a lump-sum payment.

Two strategies:
    reduce payment: keep the remaining term, re-amortize the reduced
        principal into a lower monthly payment.
    shorten term: keep the monthly payment, solve for how many months it
        now takes to retire the reduced principal.

Pure computation over a snapshot of the baseline schedules; the baseline is
never modified. Out-of-range events come back flagged, never raised.
"""

import logging
from dataclasses import replace
from decimal import Decimal

from mortgage_calc.config import settings
from mortgage_calc.engine.aggregation import combine_schedules
from mortgage_calc.engine.amortization import (
    amortization_schedule,
    fixed_payment_schedule,
    fixed_principal_schedule,
    normalize_leg,
)
from mortgage_calc.engine.numeric import (
    ZERO,
    ceil_months,
    clamp_balance,
    to_money,
    to_months,
    total,
)
from mortgage_calc.models.loan import (
    LoanConfiguration,
    LoanLeg,
    PrepaymentEvent,
    PrepaymentStrategy,
    RepaymentConvention,
)
from mortgage_calc.models.results import (
    LoanSchedules,
    PaymentScheduleEntry,
    PrepaymentResult,
    PrepaymentStatus,
)

logger = logging.getLogger(__name__)


def shortened_term(principal: Decimal, payment: Decimal, monthly_rate: Decimal) -> int | None:
    """Months for a fixed annuity ``payment`` to retire ``principal``.

    m = ceil( ln(M / (M - rP)) / ln(1 + r) )

    Returns None when the payment never catches up with the interest
    (M <= rP) or the answer exceeds the longest supported term.
    """
    if principal <= 0:
        return 0
    if payment <= 0:
        return None
    growth = (1 + monthly_rate).ln()
    if growth == 0:
        months = ceil_months(principal / payment)
    else:
        interest = principal * monthly_rate
        if payment <= interest:
            return None
        months = ceil_months((payment / (payment - interest)).ln() / growth)
    if months > settings.max_term_months:
        return None
    return months


def shortened_term_equal_principal(principal: Decimal, monthly_principal: Decimal) -> int | None:
    """Months to retire ``principal`` at a fixed principal portion per month."""
    if principal <= 0:
        return 0
    if monthly_principal <= 0:
        return None
    return ceil_months(principal / monthly_principal)


def _strategy(value) -> PrepaymentStrategy:
    try:
        return PrepaymentStrategy(value)
    except ValueError:
        logger.debug("Unknown prepayment strategy %r, using reduce payment", value)
        return PrepaymentStrategy.REDUCE_PAYMENT


def _allocate(
    amount: Decimal, balances: dict[str, Decimal], outstanding: Decimal,
) -> dict[str, Decimal]:
    """Split the prepayment across legs in proportion to their balances."""
    if outstanding <= 0:
        return {name: ZERO for name in balances}
    return {name: amount * balance / outstanding for name, balance in balances.items()}


def _merge(tails: list[list[PaymentScheduleEntry]]) -> list[PaymentScheduleEntry]:
    merged: list[PaymentScheduleEntry] = []
    for tail in tails:
        merged = combine_schedules(merged, tail)
    return merged


def _reduce_payment_tail(
    legs: dict[str, LoanLeg],
    new_principals: dict[str, Decimal],
    at_month: int,
) -> list[PaymentScheduleEntry]:
    """Each leg re-amortized as an annuity over its own remaining months.

    Equal-principal legs switch to a constant payment for the tail as well.
    """
    tails = []
    for name, leg in legs.items():
        leg_remaining = leg.term_months - at_month
        if leg_remaining <= 0:
            continue
        tail_leg = LoanLeg(
            principal=new_principals[name],
            annual_rate_percent=leg.annual_rate_percent,
            term_months=leg_remaining,
            repayment_convention=RepaymentConvention.EQUAL_INSTALLMENT,
        )
        tails.append(amortization_schedule(tail_leg, start_month_offset=at_month).schedule)
    return _merge(tails)


def _shorten_term_tail(
    schedules: LoanSchedules,
    legs: dict[str, LoanLeg],
    new_principals: dict[str, Decimal],
    at_month: int,
) -> list[PaymentScheduleEntry] | None:
    """Per-leg shortened tails, aggregated. None if any leg is unbounded.

    Each leg runs only until its own balance is retired, so a leg finishing
    early contributes nothing to the combined tail afterwards.
    """
    tails = []
    for name, leg in legs.items():
        principal = new_principals[name]
        if principal <= 0:
            continue
        leg_schedule = schedules.legs[name].schedule
        r = leg.monthly_rate

        if leg.repayment_convention == RepaymentConvention.EQUAL_PRINCIPAL:
            monthly_principal = leg_schedule[0].principal_portion if leg_schedule else ZERO
            months = shortened_term_equal_principal(principal, monthly_principal)
            if months is None:
                return None
            tails.append(fixed_principal_schedule(principal, r, monthly_principal, months, at_month))
        else:
            payment = leg_schedule[at_month].payment if at_month < len(leg_schedule) else ZERO
            months = shortened_term(principal, payment, r)
            if months is None:
                logger.debug("Leg %s: payment %s cannot retire %s at monthly rate %s",
                             name, payment, principal, r)
                return None
            tails.append(fixed_payment_schedule(principal, r, payment, months, at_month))
    return _merge(tails)


def simulate_prepayment(
    schedules: LoanSchedules,
    config: LoanConfiguration,
    event: PrepaymentEvent,
) -> PrepaymentResult:
    """Recompute the schedule after a prepayment made at ``event.at_month``.

    Months 1..at_month are paid as scheduled; the prepayment lands right
    after month ``at_month``'s payment and the tail starts at at_month + 1.
    """
    strategy = _strategy(event.strategy)
    at_month = to_months(event.at_month)
    amount = to_money(event.amount)
    base = schedules.combined
    total_months = len(base)

    if not 1 <= at_month < total_months:
        logger.debug("Prepayment at month %d outside schedule of %d months",
                     at_month, total_months)
        return PrepaymentResult(
            status=PrepaymentStatus.NOT_APPLICABLE, strategy=strategy, at_month=at_month,
        )

    before, after = base[:at_month], base[at_month:]
    original_total = total(e.payment for e in base)
    payments_before = total(e.payment for e in before)
    remaining_months = total_months - at_month
    outstanding = base[at_month - 1].remaining_balance

    common = dict(
        strategy=strategy,
        at_month=at_month,
        original_total_payment=original_total,
        original_remaining_payment=total(e.payment for e in after),
        original_monthly_payment=base[at_month].payment,
        remaining_months=remaining_months,
    )

    legs = {name: normalize_leg(leg) for name, leg in config.active_legs() if name in schedules.legs}
    balances = {name: schedules.leg_balance_at(name, at_month) for name in legs}

    if amount >= outstanding:
        logger.debug("Prepayment %s clears outstanding balance %s at month %d",
                     amount, outstanding, at_month)
        return PrepaymentResult(
            status=PrepaymentStatus.FULL_PAYOFF,
            tail_schedule=[],
            prepayment_applied=outstanding,
            leg_allocations=balances,
            new_total_payment=payments_before + outstanding,
            total_interest_saved=total(e.interest_portion for e in after),
            new_monthly_payment=ZERO,
            new_term_months=0,
            months_saved=remaining_months,
            **common,
        )

    allocations = _allocate(amount, balances, outstanding)
    new_principals = {name: clamp_balance(balances[name] - allocations[name]) for name in legs}

    if strategy == PrepaymentStrategy.REDUCE_PAYMENT:
        tail = _reduce_payment_tail(legs, new_principals, at_month)
        new_term = remaining_months
    else:
        tail = _shorten_term_tail(schedules, legs, new_principals, at_month)
        if tail is None:
            return PrepaymentResult(
                status=PrepaymentStatus.UNBOUNDED,
                prepayment_applied=amount,
                leg_allocations=allocations,
                new_term_months=None,
                **common,
            )
        new_term = len(tail)

    new_total = payments_before + amount + total(e.payment for e in tail)
    return PrepaymentResult(
        status=PrepaymentStatus.APPLIED,
        tail_schedule=tail,
        prepayment_applied=amount,
        leg_allocations=allocations,
        new_total_payment=new_total,
        total_interest_saved=original_total - new_total,
        new_monthly_payment=tail[0].payment if tail else ZERO,
        new_term_months=new_term,
        months_saved=remaining_months - new_term,
        **common,
    )


def projected_schedule(
    schedules: LoanSchedules, result: PrepaymentResult,
) -> list[PaymentScheduleEntry]:
    """Baseline months up to the prepayment followed by the recomputed tail.

    The prepayment is folded into month ``at_month`` as extra principal, so
    balances run continuously into the tail. Falls back to the unchanged
    baseline when the prepayment did not apply.
    """
    if not result.is_applicable:
        return list(schedules.combined)
    before = schedules.combined[:result.at_month]
    last = before[-1]
    before[-1] = replace(
        last,
        payment=last.payment + result.prepayment_applied,
        principal_portion=last.principal_portion + result.prepayment_applied,
        remaining_balance=clamp_balance(last.remaining_balance - result.prepayment_applied),
    )
    return before + result.tail_schedule
