from decimal import Decimal, ROUND_HALF_UP

from mortgage_calc.engine.amortization import (
    amortization_schedule,
    annuity_balance,
    annuity_payment,
    fixed_payment_schedule,
    fixed_principal_schedule,
    normalize_leg,
)
from mortgage_calc.models.loan import LoanLeg, RepaymentConvention

TWO_PLACES = Decimal("0.01")


def cents(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, ROUND_HALF_UP)


class TestAnnuityPayment:
    def test_standard_mortgage(self):
        """$400K loan at 7% for 30 years."""
        pmt = annuity_payment(Decimal("400000"), Decimal("7") / 100 / 12, 360)
        assert cents(pmt) == Decimal("2661.21")

    def test_canonical_loan(self):
        """1,000,000 at 3.5% over 360 months."""
        pmt = annuity_payment(Decimal("1000000"), Decimal("3.5") / 100 / 12, 360)
        assert cents(pmt) == Decimal("4490.45")

    def test_zero_rate(self):
        pmt = annuity_payment(Decimal("360000"), Decimal("0"), 360)
        assert pmt == Decimal("1000")

    def test_zero_principal(self):
        assert annuity_payment(Decimal("0"), Decimal("0.005"), 360) == Decimal("0")

    def test_zero_months(self):
        assert annuity_payment(Decimal("1000"), Decimal("0.005"), 0) == Decimal("0")


class TestAnnuityBalance:
    def test_matches_schedule(self, commercial_leg):
        result = amortization_schedule(commercial_leg)
        r = commercial_leg.monthly_rate
        closed_form = annuity_balance(commercial_leg.principal, r, result.monthly_payment, 60)
        assert abs(closed_form - result.schedule[59].remaining_balance) < TWO_PLACES

    def test_zero_rate(self):
        assert annuity_balance(Decimal("1200"), Decimal("0"), Decimal("100"), 5) == Decimal("700")

    def test_no_payments_made(self):
        assert annuity_balance(Decimal("1200"), Decimal("0.01"), Decimal("100"), 0) == Decimal("1200")

    def test_fully_paid(self, commercial_leg):
        result = amortization_schedule(commercial_leg)
        balance = annuity_balance(
            commercial_leg.principal, commercial_leg.monthly_rate, result.monthly_payment, 360,
        )
        assert balance == Decimal("0")


class TestEqualInstallmentSchedule:
    def test_payment_count(self, commercial_leg):
        result = amortization_schedule(commercial_leg)
        assert len(result.schedule) == 360
        assert [e.month for e in result.schedule] == list(range(1, 361))

    def test_payment_constant(self, commercial_leg):
        result = amortization_schedule(commercial_leg)
        assert len({e.payment for e in result.schedule}) == 1
        assert cents(result.monthly_payment) == Decimal("4490.45")

    def test_first_payment_mostly_interest(self):
        result = amortization_schedule(
            LoanLeg(principal=Decimal("400000"), annual_rate_percent=Decimal("7"), term_months=360)
        )
        first = result.schedule[0]
        # At 7%, first month interest = 400000 * 0.07/12 = $2,333.33
        assert cents(first.interest_portion) == Decimal("2333.33")
        assert cents(first.principal_portion) == Decimal("327.88")

    def test_payment_splits_into_principal_and_interest(self, commercial_leg):
        result = amortization_schedule(commercial_leg)
        for e in result.schedule:
            assert abs(e.payment - (e.principal_portion + e.interest_portion)) < Decimal("0.000001")

    def test_principal_sums_to_loan(self, commercial_leg):
        result = amortization_schedule(commercial_leg)
        paid = sum(e.principal_portion for e in result.schedule)
        assert abs(paid - commercial_leg.principal) < Decimal("1")

    def test_balance_decreases_to_zero(self, commercial_leg):
        result = amortization_schedule(commercial_leg)
        for i in range(1, len(result.schedule)):
            assert result.schedule[i].remaining_balance < result.schedule[i - 1].remaining_balance
        assert result.schedule[-1].remaining_balance == Decimal("0")

    def test_totals(self, commercial_leg):
        result = amortization_schedule(commercial_leg)
        assert result.total_payment == result.monthly_payment * 360
        assert result.total_interest == result.total_payment - Decimal("1000000")
        # 4,490.45 * 360 - 1,000,000
        assert Decimal("616500") < result.total_interest < Decimal("616600")

    def test_zero_rate(self):
        result = amortization_schedule(
            LoanLeg(principal=Decimal("360000"), annual_rate_percent=Decimal("0"), term_months=360)
        )
        assert all(e.payment == Decimal("1000") for e in result.schedule)
        assert result.total_interest == Decimal("0")
        assert result.schedule[-1].remaining_balance == Decimal("0")

    def test_start_month_offset(self, commercial_leg):
        result = amortization_schedule(commercial_leg, start_month_offset=60)
        assert result.schedule[0].month == 61
        assert result.schedule[-1].month == 420


class TestEqualPrincipalSchedule:
    def test_principal_constant(self, equal_principal_leg):
        result = amortization_schedule(equal_principal_leg)
        assert all(e.principal_portion == Decimal("1000") for e in result.schedule)

    def test_first_and_last_payment(self, equal_principal_leg):
        result = amortization_schedule(equal_principal_leg)
        # 1,000 principal + 360,000 * 0.5%
        assert result.schedule[0].payment == Decimal("2800")
        # 1,000 principal + 1,000 * 0.5%
        assert result.schedule[-1].payment == Decimal("1005")
        assert result.monthly_payment == Decimal("2800")

    def test_payment_and_interest_decline(self, equal_principal_leg):
        result = amortization_schedule(equal_principal_leg)
        for i in range(1, len(result.schedule)):
            assert result.schedule[i].interest_portion < result.schedule[i - 1].interest_portion
            assert result.schedule[i].payment < result.schedule[i - 1].payment

    def test_totals_accumulate(self, equal_principal_leg):
        result = amortization_schedule(equal_principal_leg)
        # 0.5% * 1,000 * (360 + 359 + ... + 1)
        assert result.total_interest == Decimal("324900")
        assert result.total_payment == Decimal("684900")
        assert result.schedule[-1].remaining_balance == Decimal("0")


class TestDegenerateLegs:
    def test_zero_principal_gives_zero_schedule(self):
        result = amortization_schedule(
            LoanLeg(principal=Decimal("0"), annual_rate_percent=Decimal("4"), term_months=120)
        )
        assert len(result.schedule) == 120
        assert all(e.payment == 0 and e.remaining_balance == 0 for e in result.schedule)
        assert result.total_payment == Decimal("0")
        assert result.total_interest == Decimal("0")

    def test_zero_principal_equal_principal(self):
        result = amortization_schedule(
            LoanLeg(
                principal=Decimal("0"),
                annual_rate_percent=Decimal("4"),
                term_months=12,
                repayment_convention=RepaymentConvention.EQUAL_PRINCIPAL,
            )
        )
        assert len(result.schedule) == 12
        assert result.total_payment == Decimal("0")

    def test_negative_and_nan_inputs_become_zero(self):
        result = amortization_schedule(
            LoanLeg(principal=Decimal("-100000"), annual_rate_percent=Decimal("NaN"), term_months=120)
        )
        assert len(result.schedule) == 120
        assert result.total_payment == Decimal("0")

    def test_nan_float_principal(self):
        result = amortization_schedule(
            LoanLeg(principal=float("nan"), annual_rate_percent=3.5, term_months=12)
        )
        assert result.principal == Decimal("0")
        assert result.total_payment == Decimal("0")

    def test_garbage_term_gives_empty_schedule(self):
        result = amortization_schedule(
            LoanLeg(principal=Decimal("100000"), annual_rate_percent=Decimal("3"), term_months="abc")
        )
        assert result.schedule == []
        assert result.total_payment == Decimal("0")

    def test_term_capped(self):
        result = amortization_schedule(
            LoanLeg(principal=Decimal("100000"), annual_rate_percent=Decimal("3"), term_months=100000)
        )
        assert len(result.schedule) == 600

    def test_unknown_convention_falls_back(self):
        leg = normalize_leg(
            LoanLeg(principal=Decimal("1"), annual_rate_percent=Decimal("1"), term_months=1,
                    repayment_convention="balloon")
        )
        assert leg.repayment_convention == RepaymentConvention.EQUAL_INSTALLMENT


class TestFixedSchedules:
    def test_fixed_payment_trims_final_month(self):
        schedule = fixed_payment_schedule(Decimal("1000"), Decimal("0"), Decimal("300"), 10)
        assert len(schedule) == 4
        assert [e.payment for e in schedule] == [Decimal("300")] * 3 + [Decimal("100")]
        assert schedule[-1].remaining_balance == Decimal("0")

    def test_fixed_principal_trims_final_month(self):
        schedule = fixed_principal_schedule(
            Decimal("2500"), Decimal("0.01"), Decimal("1000"), 3, start_month_offset=12,
        )
        assert [e.month for e in schedule] == [13, 14, 15]
        assert schedule[0].payment == Decimal("1025")
        assert schedule[-1].principal_portion == Decimal("500")
        assert schedule[-1].remaining_balance == Decimal("0")


class TestLoanLeg:
    def test_from_years(self):
        leg = LoanLeg.from_years(Decimal("500000"), Decimal("3.1"), 30)
        assert leg.term_months == 360

    def test_monthly_rate(self, commercial_leg):
        assert commercial_leg.monthly_rate == Decimal("3.5") / 100 / 12


class TestExtremeRates:
    def test_rate_too_small_to_register(self):
        """1e-30 % a year leaves 1 + r == 1 at working precision."""
        result = amortization_schedule(LoanLeg(Decimal("100000"), Decimal("1E-30"), 360))
        assert result.monthly_payment == Decimal("100000") / 360
        assert len(result.schedule) == 360
        assert result.schedule[-1].remaining_balance == Decimal("0")

    def test_tiny_rate_balance(self):
        pmt = Decimal("100000") / 360
        balance = annuity_balance(Decimal("100000"), Decimal("1E-35"), pmt, 180)
        assert cents(balance) == Decimal("50000.00")

    def test_huge_rate_capped(self):
        result = amortization_schedule(LoanLeg(Decimal("100000"), Decimal("1E+5000"), 360))
        assert result.monthly_payment == annuity_payment(
            Decimal("100000"), Decimal("100") / 100 / 12, 360,
        )
        assert len(result.schedule) == 360

    def test_huge_principal_capped(self):
        leg = normalize_leg(LoanLeg(Decimal("1E+5000"), Decimal("5"), 360))
        assert leg.principal == Decimal("1000000000000")
        assert amortization_schedule(leg).monthly_payment > 0
