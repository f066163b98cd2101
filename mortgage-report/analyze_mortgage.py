"""CLI client for the Mortgage Calculator API: posts a loan and prints a terminal report.

Usage:
    python mortgage-report/analyze_mortgage.py --commercial 1000000 --commercial-rate 3.5
    python mortgage-report/analyze_mortgage.py --kind combined --commercial 1000000 --commercial-rate 3.6 \
        --fund 500000 --fund-rate 3.1 --prepay 100000 --prepay-month 60 --strategy shorten_term
    python mortgage-report/analyze_mortgage.py --commercial 1000000 --commercial-rate 3.5 \
        --refi-amount 300000 --refi-rate 3.65 --refi-months 36 --accrual interest_first
"""

import argparse
import asyncio
import sys
from decimal import Decimal

import httpx


# ── Helpers ──────────────────────────────────────────────────────────────────

def _money(v) -> str:
    return f"{float(v):,.2f}"


def _header(title: str) -> None:
    print(f"\n{'=' * 64}")
    print(f"  {title}")
    print(f"{'=' * 64}")


def _leg(principal, rate, years, convention) -> dict:
    return {
        "principal": str(principal),
        "annual_rate_percent": str(rate),
        "term_years": years,
        "repayment_convention": convention,
    }


def build_payload(args: argparse.Namespace) -> dict:
    """Request body for /api/v1/mortgage/analyze; optional sections only when asked for."""
    loan: dict = {"kind": args.kind}
    if args.commercial is not None:
        loan["commercial"] = _leg(args.commercial, args.commercial_rate, args.commercial_years, args.convention)
    if args.fund is not None:
        loan["fund"] = _leg(args.fund, args.fund_rate, args.fund_years, args.convention)

    payload: dict = {"loan": loan}
    if args.prepay is not None:
        payload["prepayment"] = {
            "amount": str(args.prepay),
            "at_month": args.prepay_month,
            "strategy": args.strategy,
        }
    if args.refi_amount is not None:
        refinance = {
            "amount": str(args.refi_amount),
            "new_annual_rate_percent": str(args.refi_rate),
            "new_term_months": args.refi_months,
            "accrual_method": args.accrual,
            "fee": str(args.fee),
            "at_month": args.refi_month,
        }
        if args.payoff_month is not None:
            refinance["target_payoff_month"] = args.payoff_month
        payload["refinance"] = refinance
    return payload


# ── Report sections ──────────────────────────────────────────────────────────

def print_summary(data: dict) -> None:
    s = data["summary"]
    _header("Loan Summary")
    print(f"  Total Loan:        {_money(s['total_loan'])}")
    print(f"  Monthly Payment:   {_money(s['monthly_payment'])}")
    print(f"  Term:              {s['months']} months")
    print(f"  Total Payment:     {_money(s['total_payment'])}")
    print(f"  Total Interest:    {_money(s['total_interest'])}")


def print_yearly_table(data: dict) -> None:
    yearly = data.get("yearly", [])
    if not yearly:
        return
    _header("Yearly Breakdown")
    print(f"  {'Yr':>3}  {'Payment':>13}  {'Principal':>13}  {'Interest':>13}  {'Balance':>14}")
    print(f"  {'---':>3}  {'-' * 13}  {'-' * 13}  {'-' * 13}  {'-' * 14}")
    for yr in yearly:
        print(
            f"  {yr['year']:>3}  {_money(yr['payment']):>13}  {_money(yr['principal']):>13}  "
            f"{_money(yr['interest']):>13}  {_money(yr['ending_balance']):>14}"
        )


def print_prepayment(data: dict) -> None:
    p = data.get("prepayment")
    if not p:
        return
    _header("Prepayment")
    if p["status"] == "not_applicable":
        print(f"  Month {p['at_month']} is outside the schedule; nothing to project.")
        return
    if p["status"] == "unbounded":
        print("  The current payment cannot retire the reduced balance.")
        return
    print(f"  Strategy:          {p['strategy']}")
    print(f"  Applied:           {_money(p['prepayment_applied'])} after month {p['at_month']}")
    print(f"  Monthly Payment:   {_money(p['original_monthly_payment'])} -> {_money(p['new_monthly_payment'])}")
    print(f"  Remaining Term:    {p['remaining_months']} -> {p['new_term_months']} months")
    print(f"  Interest Saved:    {_money(p['total_interest_saved'])}")


def print_refinance(data: dict) -> None:
    r = data.get("refinance")
    if not r:
        return
    _header("Refinance")
    if r["status"] == "not_applicable":
        print("  The loan is already repaid at that month.")
        return
    if r["status"] == "zero_amount":
        print(f"  Nothing to refinance (outstanding {_money(r['outstanding_principal'])}).")
        return
    print(f"  {r['description']}")
    print(f"  Refinanced:        {_money(r['refinance_amount'])} of {_money(r['outstanding_principal'])}")
    print(f"  Blended Rate:      {float(r['blended_rate_percent']):.3f}%")
    print(f"  Monthly Savings:   {_money(r['monthly_savings'])}")
    print(f"  Total Savings:     {_money(r['total_savings'])}")
    if r.get("break_even_months") is not None:
        print(f"  Fee Break-even:    {float(r['break_even_months']):.1f} months")
    print(f"  Worth It:          {'yes' if r['worth_it'] else 'no'}")


# ── Main ─────────────────────────────────────────────────────────────────────

def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Analyze a mortgage via the Mortgage Calculator API"
    )
    parser.add_argument("--kind", choices=["commercial", "fund", "combined"], default="commercial")
    parser.add_argument("--commercial", type=Decimal, help="Commercial loan principal")
    parser.add_argument("--commercial-rate", type=Decimal, default=Decimal("0"), help="Annual rate, percent")
    parser.add_argument("--commercial-years", type=int, default=30)
    parser.add_argument("--fund", type=Decimal, help="Housing fund loan principal")
    parser.add_argument("--fund-rate", type=Decimal, default=Decimal("0"), help="Annual rate, percent")
    parser.add_argument("--fund-years", type=int, default=30)
    parser.add_argument(
        "--convention",
        choices=["equal_installment", "equal_principal"],
        default="equal_installment",
    )
    parser.add_argument("--prepay", type=Decimal, help="Lump-sum prepayment amount")
    parser.add_argument("--prepay-month", type=int, default=12, help="Month after which it is paid")
    parser.add_argument("--strategy", choices=["reduce_payment", "shorten_term"], default="reduce_payment")
    parser.add_argument("--refi-amount", type=Decimal, help="Amount moved to a third-party loan")
    parser.add_argument("--refi-rate", type=Decimal, default=Decimal("0"), help="Annual rate, percent")
    parser.add_argument("--refi-months", type=int, default=360)
    parser.add_argument("--refi-month", type=int, default=0, help="Month the refinance happens")
    parser.add_argument("--accrual", choices=["equal_installment", "interest_first"], default="equal_installment")
    parser.add_argument("--payoff-month", type=int, help="Repay the third-party loan early")
    parser.add_argument("--fee", type=Decimal, default=Decimal("0"), help="One-off refinance fee")
    parser.add_argument("--yearly", action="store_true", help="Print the yearly breakdown")
    parser.add_argument(
        "--api-url",
        default="http://localhost:8000",
        help="API base URL (default: http://localhost:8000)",
    )
    return parser.parse_args(argv)


async def main() -> None:
    args = parse_args()
    url = f"{args.api_url}/api/v1/mortgage/analyze"

    async with httpx.AsyncClient(timeout=30) as client:
        try:
            resp = await client.post(url, json=build_payload(args))
        except httpx.ConnectError:
            print(f"Error: Could not connect to API at {args.api_url}", file=sys.stderr)
            print("Is the server running? Start with: uvicorn mortgage_calc.api.app:app --reload", file=sys.stderr)
            print("(uvicorn ships with the server extra: pip install -e .[server])", file=sys.stderr)
            sys.exit(1)
        except httpx.TimeoutException:
            print("Error: Request timed out", file=sys.stderr)
            sys.exit(1)

        if resp.status_code != 200:
            print(f"Error: API returned {resp.status_code}", file=sys.stderr)
            try:
                detail = resp.json().get("detail", resp.text)
            except ValueError:
                detail = resp.text
            print(f"  {detail}", file=sys.stderr)
            sys.exit(1)

        data = resp.json()

    print_summary(data)
    if args.yearly:
        print_yearly_table(data)
    print_prepayment(data)
    print_refinance(data)
    print()


if __name__ == "__main__":
    asyncio.run(main())
