"""Domain-specific calculation helpers."""

from .depreciation import calculate_depreciation
from .interest import (
    calculate_compound_interest,
    calculate_investment_return,
    calculate_loan_payment,
    calculate_simple_interest,
)
from .payroll import INSS_STRATEGIES, calculate_folha_pagamento, calculate_inss, calculate_irrf
from .tax import calculate_income_tax, calculate_lucro_presumido, calculate_simples_nacional
from .utils import (
    ensure_finite,
    format_currency,
    format_percentage,
    share_percentage,
)

__all__ = [
    "INSS_STRATEGIES",
    "calculate_compound_interest",
    "calculate_depreciation",
    "calculate_folha_pagamento",
    "calculate_income_tax",
    "calculate_inss",
    "calculate_investment_return",
    "calculate_irrf",
    "calculate_loan_payment",
    "calculate_lucro_presumido",
    "calculate_simple_interest",
    "calculate_simples_nacional",
    "ensure_finite",
    "format_currency",
    "format_percentage",
    "share_percentage",
]
