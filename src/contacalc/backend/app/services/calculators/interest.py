"""Closed-form time-value-of-money calculators."""

from __future__ import annotations

import math
from typing import Any

from contacalc.backend.app.localization import Translator
from contacalc.backend.app.models import (
    CompoundInterestParameters,
    InvestmentReturnParameters,
    LoanPaymentParameters,
    SimpleInterestParameters,
)

from .utils import breakdown_item, ensure_finite

SIMPLE_INTEREST_FORMULA = "I = P × r × t"
COMPOUND_INTEREST_FORMULA = "A = P(1 + r/n)^(nt)"
LOAN_PAYMENT_FORMULA = "PMT = P × [r(1+r)^n] / [(1+r)^n - 1]"
INVESTMENT_RETURN_FORMULA = "Return = (Final - Initial) / Initial × 100"


def calculate_simple_interest(
    params: SimpleInterestParameters, translator: Translator
) -> dict[str, Any]:
    """Return simple interest accrued on ``principal`` over ``time`` years."""

    interest = params.principal * params.rate * params.time / 100
    total = params.principal + interest

    return {
        "total": ensure_finite(total, "total"),
        "breakdown": [
            breakdown_item("principal", params.principal, translator),
            breakdown_item("interest", interest, translator),
        ],
        "recommendations": [],
        "formula": SIMPLE_INTEREST_FORMULA,
    }


def calculate_compound_interest(
    params: CompoundInterestParameters, translator: Translator
) -> dict[str, Any]:
    """Return the compounded amount using ``compound`` periods per year."""

    periods = params.compound
    growth = 1 + params.rate / (100 * periods)
    amount = params.principal * math.pow(growth, periods * params.time)
    interest = amount - params.principal

    return {
        "total": ensure_finite(amount, "total"),
        "breakdown": [
            breakdown_item("principal", params.principal, translator),
            breakdown_item("interest", interest, translator),
        ],
        "recommendations": [],
        "formula": COMPOUND_INTEREST_FORMULA,
    }


def calculate_loan_payment(
    params: LoanPaymentParameters, translator: Translator
) -> dict[str, Any]:
    """Return the amortised monthly payment for an annual percentage rate.

    A zero rate is not special-cased: the annuity factor divides by zero and
    the caller reports it as a calculation failure.
    """

    monthly_rate = params.rate / (100 * 12)
    payments = params.time * 12
    factor = math.pow(1 + monthly_rate, payments)
    monthly_payment = params.principal * monthly_rate * factor / (factor - 1)
    total_payment = monthly_payment * payments
    total_interest = total_payment - params.principal

    return {
        "total": ensure_finite(total_payment, "total"),
        "breakdown": [
            breakdown_item("monthly_payment", monthly_payment, translator),
            breakdown_item("number_of_payments", payments, translator),
            breakdown_item("principal", params.principal, translator),
            breakdown_item("total_interest", total_interest, translator),
        ],
        "recommendations": [],
        "formula": LOAN_PAYMENT_FORMULA,
    }


def calculate_investment_return(
    params: InvestmentReturnParameters, translator: Translator
) -> dict[str, Any]:
    """Return absolute, percentage and annualised investment growth."""

    initial = params.initial_value
    final = params.final_value
    total_return = final - initial
    return_percentage = total_return / initial * 100
    annualized_return = (math.pow(final / initial, 1 / params.time) - 1) * 100

    return {
        "total": ensure_finite(total_return, "total"),
        "breakdown": [
            breakdown_item("initial_value", initial, translator),
            breakdown_item("final_value", final, translator),
            breakdown_item("return_percentage", return_percentage, translator),
            breakdown_item("annualized_return", annualized_return, translator),
        ],
        "recommendations": [],
        "formula": INVESTMENT_RETURN_FORMULA,
    }


__all__ = [
    "COMPOUND_INTEREST_FORMULA",
    "INVESTMENT_RETURN_FORMULA",
    "LOAN_PAYMENT_FORMULA",
    "SIMPLE_INTEREST_FORMULA",
    "calculate_compound_interest",
    "calculate_investment_return",
    "calculate_loan_payment",
    "calculate_simple_interest",
]
