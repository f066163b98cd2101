"""Loan inputs: legs, configurations, prepayment events and refinance proposals.

Plain frozen values. The UI layer builds (or restores) them and hands them to
the engine; nothing here is mutated during a calculation pass.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class RepaymentConvention(str, Enum):
    EQUAL_INSTALLMENT = "equal_installment"  # Fixed total payment (annuity)
    EQUAL_PRINCIPAL = "equal_principal"  # Fixed principal, declining payment


class LoanKind(str, Enum):
    COMMERCIAL = "commercial"
    FUND = "fund"  # Housing provident fund
    COMBINED = "combined"


class PrepaymentStrategy(str, Enum):
    REDUCE_PAYMENT = "reduce_payment"
    SHORTEN_TERM = "shorten_term"


class AccrualMethod(str, Enum):
    EQUAL_INSTALLMENT = "equal_installment"
    INTEREST_FIRST = "interest_first"


@dataclass(frozen=True)
class LoanLeg:
    principal: Decimal
    annual_rate_percent: Decimal  # e.g. 3.5 for 3.5%
    term_months: int
    repayment_convention: RepaymentConvention = RepaymentConvention.EQUAL_INSTALLMENT

    @classmethod
    def from_years(
        cls,
        principal: Decimal,
        annual_rate_percent: Decimal,
        term_years: int,
        repayment_convention: RepaymentConvention = RepaymentConvention.EQUAL_INSTALLMENT,
    ) -> "LoanLeg":
        return cls(
            principal=principal,
            annual_rate_percent=annual_rate_percent,
            term_months=term_years * 12,
            repayment_convention=repayment_convention,
        )

    @property
    def monthly_rate(self) -> Decimal:
        return Decimal(self.annual_rate_percent) / 100 / 12


@dataclass(frozen=True)
class LoanConfiguration:
    kind: LoanKind
    commercial_leg: LoanLeg | None = None
    fund_leg: LoanLeg | None = None

    def active_legs(self) -> list[tuple[str, LoanLeg]]:
        """Legs that take part in this configuration, in (name, leg) pairs.

        A leg populated for a kind that does not use it (e.g. a fund leg left
        over from a restored session on a commercial-only loan) is ignored.
        """
        legs: list[tuple[str, LoanLeg]] = []
        if self.kind in (LoanKind.COMMERCIAL, LoanKind.COMBINED) and self.commercial_leg is not None:
            legs.append(("commercial", self.commercial_leg))
        if self.kind in (LoanKind.FUND, LoanKind.COMBINED) and self.fund_leg is not None:
            legs.append(("fund", self.fund_leg))
        return legs


@dataclass(frozen=True)
class PrepaymentEvent:
    amount: Decimal
    at_month: int  # Prepayment made after this month's scheduled payment
    strategy: PrepaymentStrategy = PrepaymentStrategy.REDUCE_PAYMENT


@dataclass(frozen=True)
class RefinanceProposal:
    amount: Decimal
    new_annual_rate_percent: Decimal
    new_term_months: int
    accrual_method: AccrualMethod = AccrualMethod.EQUAL_INSTALLMENT
    average_daily_balance: Decimal | None = None  # Interest-first billing base
    target_payoff_month: int | None = None
    fee: Decimal = Decimal("0")  # One-off switching cost
    at_month: int = 0  # 0 = evaluate at origination
