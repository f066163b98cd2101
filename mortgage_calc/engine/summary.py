"""Totals and yearly roll-ups over any payment schedule."""

from decimal import Decimal

from mortgage_calc.engine.numeric import ZERO, total
from mortgage_calc.models.results import PaymentScheduleEntry, ScheduleSummary, YearlySummary


def summarize_schedule(
    schedule: list[PaymentScheduleEntry],
    total_loan: Decimal = ZERO,
) -> ScheduleSummary:
    """Reduce a schedule to its totals.

    ``monthly_payment`` is the first month's payment. For equal-principal
    loans that is the highest payment, not a constant one.
    """
    return ScheduleSummary(
        total_payment=total(e.payment for e in schedule),
        total_interest=total(e.interest_portion for e in schedule),
        total_principal=total(e.principal_portion for e in schedule),
        monthly_payment=schedule[0].payment if schedule else ZERO,
        months=len(schedule),
        total_loan=total_loan,
    )


def yearly_summary(schedule: list[PaymentScheduleEntry]) -> list[YearlySummary]:
    """Aggregate a schedule into 12-month buckets.

    Buckets follow position in the schedule, so a tail starting mid-year is
    still grouped by its own first twelve entries.
    """
    yearly: list[YearlySummary] = []
    year_payment = ZERO
    year_principal = ZERO
    year_interest = ZERO

    for i, e in enumerate(schedule, start=1):
        year_payment += e.payment
        year_principal += e.principal_portion
        year_interest += e.interest_portion

        if i % 12 == 0 or i == len(schedule):
            yearly.append(YearlySummary(
                year=(i - 1) // 12 + 1,
                payment=year_payment,
                principal=year_principal,
                interest=year_interest,
                ending_balance=e.remaining_balance,
            ))
            year_payment = ZERO
            year_principal = ZERO
            year_interest = ZERO

    return yearly
