"""Pydantic schemas for API request/response models.

Request bodies usually come from a restored browser session, so numeric
fields are lenient: negative, NaN, blank or garbage values become 0 and
unknown enum strings fall back to the default instead of failing validation.
"""

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, Field

from mortgage_calc.engine.numeric import to_money, to_months
from mortgage_calc.models.loan import (
    AccrualMethod,
    LoanConfiguration,
    LoanKind,
    LoanLeg,
    PrepaymentEvent,
    PrepaymentStrategy,
    RefinanceProposal,
    RepaymentConvention,
)


def _money_or_none(value):
    return None if value is None else to_money(value)


def _months_or_none(value):
    return None if value is None else to_months(value)


def _enum_or_default(enum_cls, default):
    def coerce(value):
        try:
            return enum_cls(value)
        except ValueError:
            return default
    return BeforeValidator(coerce)


Money = Annotated[Decimal, BeforeValidator(to_money)]
Months = Annotated[int, BeforeValidator(to_months)]
OptionalMoney = Annotated[Decimal | None, BeforeValidator(_money_or_none)]
OptionalMonths = Annotated[int | None, BeforeValidator(_months_or_none)]


# ---- Request schemas ----

class LoanLegRequest(BaseModel):
    principal: Money = Decimal("0")
    annual_rate_percent: Money = Decimal("0")
    term_months: OptionalMonths = None
    term_years: OptionalMonths = Field(None, description="Used when term_months is not given")
    repayment_convention: Annotated[
        RepaymentConvention,
        _enum_or_default(RepaymentConvention, RepaymentConvention.EQUAL_INSTALLMENT),
    ] = RepaymentConvention.EQUAL_INSTALLMENT

    def to_leg(self) -> LoanLeg:
        if self.term_months is not None:
            months = self.term_months
        else:
            months = (self.term_years or 0) * 12
        return LoanLeg(
            principal=self.principal,
            annual_rate_percent=self.annual_rate_percent,
            term_months=months,
            repayment_convention=self.repayment_convention,
        )


class LoanConfigurationRequest(BaseModel):
    kind: Annotated[LoanKind, _enum_or_default(LoanKind, LoanKind.COMBINED)] = LoanKind.COMBINED
    commercial: LoanLegRequest | None = None
    fund: LoanLegRequest | None = None

    def to_config(self) -> LoanConfiguration:
        return LoanConfiguration(
            kind=self.kind,
            commercial_leg=self.commercial.to_leg() if self.commercial else None,
            fund_leg=self.fund.to_leg() if self.fund else None,
        )


class PrepaymentRequest(BaseModel):
    amount: Money = Decimal("0")
    at_month: Months = 0
    strategy: Annotated[
        PrepaymentStrategy,
        _enum_or_default(PrepaymentStrategy, PrepaymentStrategy.REDUCE_PAYMENT),
    ] = PrepaymentStrategy.REDUCE_PAYMENT

    def to_event(self) -> PrepaymentEvent:
        return PrepaymentEvent(amount=self.amount, at_month=self.at_month, strategy=self.strategy)


class RefinanceRequest(BaseModel):
    amount: Money = Decimal("0")
    new_annual_rate_percent: Money = Decimal("0")
    new_term_months: Months = 0
    accrual_method: Annotated[
        AccrualMethod,
        _enum_or_default(AccrualMethod, AccrualMethod.EQUAL_INSTALLMENT),
    ] = AccrualMethod.EQUAL_INSTALLMENT
    average_daily_balance: OptionalMoney = None
    target_payoff_month: OptionalMonths = None
    fee: Money = Decimal("0")
    at_month: Months = 0

    def to_proposal(self) -> RefinanceProposal:
        return RefinanceProposal(
            amount=self.amount,
            new_annual_rate_percent=self.new_annual_rate_percent,
            new_term_months=self.new_term_months,
            accrual_method=self.accrual_method,
            average_daily_balance=self.average_daily_balance,
            target_payoff_month=self.target_payoff_month,
            fee=self.fee,
            at_month=self.at_month,
        )


class ScheduleRequest(BaseModel):
    loan: LoanConfigurationRequest


class PrepaymentCalcRequest(BaseModel):
    loan: LoanConfigurationRequest
    prepayment: PrepaymentRequest


class RefinanceCalcRequest(BaseModel):
    loan: LoanConfigurationRequest
    refinance: RefinanceRequest


class AnalyzeRequest(BaseModel):
    loan: LoanConfigurationRequest
    prepayment: PrepaymentRequest | None = None
    refinance: RefinanceRequest | None = None


# ---- Response schemas ----

class ScheduleEntryResponse(BaseModel):
    month: int
    payment: Decimal
    principal_portion: Decimal
    interest_portion: Decimal
    remaining_balance: Decimal


class SummaryResponse(BaseModel):
    total_loan: Decimal
    total_payment: Decimal
    total_interest: Decimal
    total_principal: Decimal
    monthly_payment: Decimal
    months: int


class YearlySummaryResponse(BaseModel):
    year: int
    payment: Decimal
    principal: Decimal
    interest: Decimal
    ending_balance: Decimal


class ScheduleResponse(BaseModel):
    summary: SummaryResponse
    schedule: list[ScheduleEntryResponse]
    yearly: list[YearlySummaryResponse] = []


class PrepaymentResponse(BaseModel):
    status: str
    strategy: str
    at_month: int
    prepayment_applied: Decimal
    leg_allocations: dict[str, Decimal] = {}
    original_total_payment: Decimal
    original_remaining_payment: Decimal
    new_total_payment: Decimal
    total_interest_saved: Decimal
    original_monthly_payment: Decimal
    new_monthly_payment: Decimal
    remaining_months: int
    new_term_months: int | None = None
    months_saved: int
    tail_schedule: list[ScheduleEntryResponse] = []


class RefinanceResponse(BaseModel):
    status: str
    accrual_method: str
    refinance_amount: Decimal
    outstanding_principal: Decimal
    blended_rate_percent: Decimal
    remaining_months: int
    original_monthly_payment: Decimal
    new_original_monthly_payment: Decimal
    third_party_monthly_payment: Decimal
    third_party_total_cost: Decimal
    third_party_payoff_month: int
    monthly_savings: Decimal
    total_savings: Decimal
    break_even_months: Decimal | None = None
    worth_it: bool
    description: str


class AnalysisResponse(BaseModel):
    summary: SummaryResponse
    schedule: list[ScheduleEntryResponse]
    yearly: list[YearlySummaryResponse] = []
    prepayment: PrepaymentResponse | None = None
    projected_schedule: list[ScheduleEntryResponse] = []
    refinance: RefinanceResponse | None = None
