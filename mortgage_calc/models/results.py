from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from mortgage_calc.models.loan import PrepaymentStrategy, AccrualMethod


@dataclass(frozen=True)
class PaymentScheduleEntry:
    month: int
    payment: Decimal
    principal_portion: Decimal
    interest_portion: Decimal
    remaining_balance: Decimal


@dataclass(frozen=True)
class AmortizationResult:
    """One leg's schedule and totals."""
    schedule: list[PaymentScheduleEntry]
    principal: Decimal = Decimal("0")
    monthly_payment: Decimal = Decimal("0")  # First month's payment
    total_payment: Decimal = Decimal("0")
    total_interest: Decimal = Decimal("0")


@dataclass(frozen=True)
class ScheduleSummary:
    total_payment: Decimal = Decimal("0")
    total_interest: Decimal = Decimal("0")
    total_principal: Decimal = Decimal("0")
    monthly_payment: Decimal = Decimal("0")  # schedule[0].payment; not constant for equal principal
    months: int = 0
    total_loan: Decimal = Decimal("0")


@dataclass(frozen=True)
class YearlySummary:
    year: int
    payment: Decimal
    principal: Decimal
    interest: Decimal
    ending_balance: Decimal


@dataclass(frozen=True)
class LoanSchedules:
    """Per-leg results plus the combined baseline schedule."""
    legs: dict[str, AmortizationResult]
    combined: list[PaymentScheduleEntry]

    @property
    def total_months(self) -> int:
        return len(self.combined)

    def leg_balance_at(self, name: str, month: int) -> Decimal:
        """Outstanding balance of a leg after ``month`` payments (0 = origination)."""
        result = self.legs.get(name)
        if result is None:
            return Decimal("0")
        if month <= 0:
            return result.principal
        if month > len(result.schedule):
            return Decimal("0")
        return result.schedule[month - 1].remaining_balance


class PrepaymentStatus(str, Enum):
    APPLIED = "applied"
    FULL_PAYOFF = "full_payoff"
    NOT_APPLICABLE = "not_applicable"  # at_month outside the schedule
    UNBOUNDED = "unbounded"  # Fixed payment cannot retire the reduced principal


@dataclass(frozen=True)
class PrepaymentResult:
    status: PrepaymentStatus
    strategy: PrepaymentStrategy
    at_month: int
    tail_schedule: list[PaymentScheduleEntry] = field(default_factory=list)
    prepayment_applied: Decimal = Decimal("0")
    leg_allocations: dict[str, Decimal] = field(default_factory=dict)

    original_total_payment: Decimal = Decimal("0")
    original_remaining_payment: Decimal = Decimal("0")
    new_total_payment: Decimal = Decimal("0")
    total_interest_saved: Decimal = Decimal("0")

    original_monthly_payment: Decimal = Decimal("0")
    new_monthly_payment: Decimal = Decimal("0")

    remaining_months: int = 0
    new_term_months: int | None = None  # None when unbounded
    months_saved: int = 0

    @property
    def is_applicable(self) -> bool:
        return self.status in (PrepaymentStatus.APPLIED, PrepaymentStatus.FULL_PAYOFF)


class RefinanceStatus(str, Enum):
    EVALUATED = "evaluated"
    ZERO_AMOUNT = "zero_amount"
    NOT_APPLICABLE = "not_applicable"


@dataclass(frozen=True)
class RefinanceResult:
    status: RefinanceStatus
    accrual_method: AccrualMethod
    refinance_amount: Decimal = Decimal("0")
    outstanding_principal: Decimal = Decimal("0")
    blended_rate_percent: Decimal = Decimal("0")
    remaining_months: int = 0

    original_monthly_payment: Decimal = Decimal("0")
    original_remaining_payment: Decimal = Decimal("0")
    new_original_monthly_payment: Decimal = Decimal("0")
    third_party_monthly_payment: Decimal = Decimal("0")
    third_party_total_cost: Decimal = Decimal("0")
    third_party_payoff_month: int = 0

    monthly_savings: Decimal = Decimal("0")
    total_savings: Decimal = Decimal("0")
    break_even_months: Decimal | None = None
    worth_it: bool = False
    description: str = ""

    @property
    def is_evaluated(self) -> bool:
        return self.status == RefinanceStatus.EVALUATED


@dataclass(frozen=True)
class MortgageAnalysis:
    schedules: LoanSchedules
    summary: ScheduleSummary
    yearly: list[YearlySummary] = field(default_factory=list)
    prepayment: PrepaymentResult | None = None
    projected_schedule: list[PaymentScheduleEntry] = field(default_factory=list)
    refinance: RefinanceResult | None = None
