"""Mortgage routes: baseline schedule, prepayment, refinance, full analysis."""

from fastapi import APIRouter

from mortgage_calc.api.schemas import (
    AnalyzeRequest,
    AnalysisResponse,
    PrepaymentCalcRequest,
    PrepaymentResponse,
    RefinanceCalcRequest,
    RefinanceResponse,
    ScheduleEntryResponse,
    ScheduleRequest,
    ScheduleResponse,
    SummaryResponse,
    YearlySummaryResponse,
)
from mortgage_calc.engine.aggregation import build_loan_schedules
from mortgage_calc.engine.calculator import analyze_mortgage
from mortgage_calc.engine.prepayment import simulate_prepayment
from mortgage_calc.engine.refinance import analyze_refinance
from mortgage_calc.models.results import (
    PaymentScheduleEntry,
    PrepaymentResult,
    RefinanceResult,
    ScheduleSummary,
    YearlySummary,
)

router = APIRouter(prefix="/api/v1/mortgage", tags=["mortgage"])


def _entries(schedule: list[PaymentScheduleEntry]) -> list[ScheduleEntryResponse]:
    return [
        ScheduleEntryResponse(
            month=e.month,
            payment=e.payment,
            principal_portion=e.principal_portion,
            interest_portion=e.interest_portion,
            remaining_balance=e.remaining_balance,
        )
        for e in schedule
    ]


def _summary(s: ScheduleSummary) -> SummaryResponse:
    return SummaryResponse(
        total_loan=s.total_loan,
        total_payment=s.total_payment,
        total_interest=s.total_interest,
        total_principal=s.total_principal,
        monthly_payment=s.monthly_payment,
        months=s.months,
    )


def _yearly(yearly: list[YearlySummary]) -> list[YearlySummaryResponse]:
    return [
        YearlySummaryResponse(
            year=y.year,
            payment=y.payment,
            principal=y.principal,
            interest=y.interest,
            ending_balance=y.ending_balance,
        )
        for y in yearly
    ]


def _prepayment(p: PrepaymentResult) -> PrepaymentResponse:
    return PrepaymentResponse(
        status=p.status.value,
        strategy=p.strategy.value,
        at_month=p.at_month,
        prepayment_applied=p.prepayment_applied,
        leg_allocations=p.leg_allocations,
        original_total_payment=p.original_total_payment,
        original_remaining_payment=p.original_remaining_payment,
        new_total_payment=p.new_total_payment,
        total_interest_saved=p.total_interest_saved,
        original_monthly_payment=p.original_monthly_payment,
        new_monthly_payment=p.new_monthly_payment,
        remaining_months=p.remaining_months,
        new_term_months=p.new_term_months,
        months_saved=p.months_saved,
        tail_schedule=_entries(p.tail_schedule),
    )


def _refinance(r: RefinanceResult) -> RefinanceResponse:
    return RefinanceResponse(
        status=r.status.value,
        accrual_method=r.accrual_method.value,
        refinance_amount=r.refinance_amount,
        outstanding_principal=r.outstanding_principal,
        blended_rate_percent=r.blended_rate_percent,
        remaining_months=r.remaining_months,
        original_monthly_payment=r.original_monthly_payment,
        new_original_monthly_payment=r.new_original_monthly_payment,
        third_party_monthly_payment=r.third_party_monthly_payment,
        third_party_total_cost=r.third_party_total_cost,
        third_party_payoff_month=r.third_party_payoff_month,
        monthly_savings=r.monthly_savings,
        total_savings=r.total_savings,
        break_even_months=r.break_even_months,
        worth_it=r.worth_it,
        description=r.description,
    )


@router.post("/schedule", response_model=ScheduleResponse)
async def schedule(req: ScheduleRequest):
    """Baseline combined schedule with totals and yearly roll-up."""
    analysis = analyze_mortgage(req.loan.to_config())
    return ScheduleResponse(
        summary=_summary(analysis.summary),
        schedule=_entries(analysis.schedules.combined),
        yearly=_yearly(analysis.yearly),
    )


@router.post("/prepayment", response_model=PrepaymentResponse)
async def prepayment(req: PrepaymentCalcRequest):
    """Prepayment projection. Check ``status`` before reading savings."""
    config = req.loan.to_config()
    result = simulate_prepayment(build_loan_schedules(config), config, req.prepayment.to_event())
    return _prepayment(result)


@router.post("/refinance", response_model=RefinanceResponse)
async def refinance(req: RefinanceCalcRequest):
    """Refinance comparison. Check ``status`` before reading savings."""
    config = req.loan.to_config()
    result = analyze_refinance(build_loan_schedules(config), config, req.refinance.to_proposal())
    return _refinance(result)


@router.post("/analyze", response_model=AnalysisResponse)
async def analyze(req: AnalyzeRequest):
    """Baseline plus any requested prepayment and refinance projections."""
    analysis = analyze_mortgage(
        req.loan.to_config(),
        prepayment=req.prepayment.to_event() if req.prepayment else None,
        refinance=req.refinance.to_proposal() if req.refinance else None,
    )
    return AnalysisResponse(
        summary=_summary(analysis.summary),
        schedule=_entries(analysis.schedules.combined),
        yearly=_yearly(analysis.yearly),
        prepayment=_prepayment(analysis.prepayment) if analysis.prepayment is not None else None,
        projected_schedule=_entries(analysis.projected_schedule),
        refinance=_refinance(analysis.refinance) if analysis.refinance is not None else None,
    )
