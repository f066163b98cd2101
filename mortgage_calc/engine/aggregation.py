"""Combine commercial and fund leg schedules into one monthly schedule."""

from itertools import zip_longest

from mortgage_calc.engine.amortization import amortization_schedule
from mortgage_calc.engine.numeric import ZERO
from mortgage_calc.models.loan import LoanConfiguration
from mortgage_calc.models.results import LoanSchedules, PaymentScheduleEntry


def combine_schedules(
    a: list[PaymentScheduleEntry] | None,
    b: list[PaymentScheduleEntry] | None,
) -> list[PaymentScheduleEntry]:
    """Element-wise sum of two schedules by month index.

    A missing or shorter schedule contributes zeros. Length is the longer of
    the two.
    """
    combined: list[PaymentScheduleEntry] = []
    for x, y in zip_longest(a or [], b or []):
        entries = [e for e in (x, y) if e is not None]
        combined.append(PaymentScheduleEntry(
            month=entries[0].month,
            payment=sum((e.payment for e in entries), ZERO),
            principal_portion=sum((e.principal_portion for e in entries), ZERO),
            interest_portion=sum((e.interest_portion for e in entries), ZERO),
            remaining_balance=sum((e.remaining_balance for e in entries), ZERO),
        ))
    return combined


def build_loan_schedules(config: LoanConfiguration) -> LoanSchedules:
    """Compute every active leg and the combined baseline schedule."""
    legs = {name: amortization_schedule(leg) for name, leg in config.active_legs()}

    combined: list[PaymentScheduleEntry] = []
    for result in legs.values():
        combined = combine_schedules(combined, result.schedule)

    return LoanSchedules(legs=legs, combined=combined)
