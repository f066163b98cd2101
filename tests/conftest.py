"""Canonical test fixtures used across engine and API tests.

Fixture: 1,000,000 commercial loan at 3.5% over 30 years, equal installment.
Combined fixture adds a 500,000 housing-fund leg at 3.1% (the calculator's
default combined loan uses 1,000,000 at 3.6% + 500,000 at 3.1%).
"""

import pytest
from decimal import Decimal

from mortgage_calc.engine.aggregation import build_loan_schedules
from mortgage_calc.models.loan import (
    LoanConfiguration,
    LoanKind,
    LoanLeg,
    RepaymentConvention,
)


@pytest.fixture
def commercial_leg() -> LoanLeg:
    return LoanLeg(
        principal=Decimal("1000000"),
        annual_rate_percent=Decimal("3.5"),
        term_months=360,
    )


@pytest.fixture
def fund_leg() -> LoanLeg:
    return LoanLeg(
        principal=Decimal("500000"),
        annual_rate_percent=Decimal("3.1"),
        term_months=360,
    )


@pytest.fixture
def equal_principal_leg() -> LoanLeg:
    """360,000 at 6%: 1,000 principal per month, 0.5% monthly interest."""
    return LoanLeg(
        principal=Decimal("360000"),
        annual_rate_percent=Decimal("6"),
        term_months=360,
        repayment_convention=RepaymentConvention.EQUAL_PRINCIPAL,
    )


@pytest.fixture
def commercial_config(commercial_leg) -> LoanConfiguration:
    return LoanConfiguration(kind=LoanKind.COMMERCIAL, commercial_leg=commercial_leg)


@pytest.fixture
def combined_config(fund_leg) -> LoanConfiguration:
    return LoanConfiguration(
        kind=LoanKind.COMBINED,
        commercial_leg=LoanLeg(
            principal=Decimal("1000000"),
            annual_rate_percent=Decimal("3.6"),
            term_months=360,
        ),
        fund_leg=fund_leg,
    )


@pytest.fixture
def equal_principal_config(equal_principal_leg) -> LoanConfiguration:
    return LoanConfiguration(kind=LoanKind.COMMERCIAL, commercial_leg=equal_principal_leg)


@pytest.fixture
def commercial_schedules(commercial_config):
    return build_loan_schedules(commercial_config)


@pytest.fixture
def combined_schedules(combined_config):
    return build_loan_schedules(combined_config)


@pytest.fixture
def equal_principal_schedules(equal_principal_config):
    return build_loan_schedules(equal_principal_config)
