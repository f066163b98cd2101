"""Mortgage calculator orchestrator: composes the engine into one analysis.

Pure computation. No I/O. Dataclasses in, MortgageAnalysis out.
"""

from mortgage_calc.engine.aggregation import build_loan_schedules
from mortgage_calc.engine.amortization import normalize_leg
from mortgage_calc.engine.numeric import total
from mortgage_calc.engine.prepayment import projected_schedule, simulate_prepayment
from mortgage_calc.engine.refinance import analyze_refinance
from mortgage_calc.engine.summary import summarize_schedule, yearly_summary
from mortgage_calc.models.loan import LoanConfiguration, PrepaymentEvent, RefinanceProposal
from mortgage_calc.models.results import MortgageAnalysis


def analyze_mortgage(
    config: LoanConfiguration,
    prepayment: PrepaymentEvent | None = None,
    refinance: RefinanceProposal | None = None,
) -> MortgageAnalysis:
    """Run the baseline schedule and any requested projections.

    The prepayment and refinance projections are independent of each other;
    both are evaluated against the same baseline.
    """
    schedules = build_loan_schedules(config)
    total_loan = total(normalize_leg(leg).principal for _, leg in config.active_legs())
    summary = summarize_schedule(schedules.combined, total_loan=total_loan)

    prepayment_result = None
    display = list(schedules.combined)
    if prepayment is not None:
        prepayment_result = simulate_prepayment(schedules, config, prepayment)
        display = projected_schedule(schedules, prepayment_result)

    refinance_result = None
    if refinance is not None:
        refinance_result = analyze_refinance(schedules, config, refinance)

    return MortgageAnalysis(
        schedules=schedules,
        summary=summary,
        yearly=yearly_summary(schedules.combined),
        prepayment=prepayment_result,
        projected_schedule=display,
        refinance=refinance_result,
    )
