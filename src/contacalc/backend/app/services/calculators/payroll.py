"""Employee payroll withholding (INSS, IRRF and vouchers)."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Callable, Mapping

from contacalc.backend.app.localization import Translator
from contacalc.backend.app.models import FolhaPagamentoParameters
from contacalc.backend.config.tables import InssConfig, InssPolicy, IrrfConfig, PayrollTables

from .utils import breakdown_item, ensure_finite, share_percentage


def _bracket_inss(salary: float, config: InssConfig) -> float:
    return salary * config.bracket_for(salary).rate


def _flat_capped_inss(salary: float, config: InssConfig) -> float:
    return min(salary * config.flat_rate, config.flat_cap)


INSS_STRATEGIES: Mapping[str, Callable[[float, InssConfig], float]] = MappingProxyType(
    {
        "bracket": _bracket_inss,
        "flat_capped": _flat_capped_inss,
    }
)


def calculate_inss(salary: float, config: InssConfig, policy: InssPolicy) -> float:
    """Return the INSS contribution for ``salary`` under ``policy``.

    ``bracket`` applies the rate of the bracket containing the salary to the
    whole amount; ``flat_capped`` applies the flat rate up to the ceiling.
    """

    return INSS_STRATEGIES[policy](salary, config)


def calculate_irrf(
    salary: float, inss: float, dependants: int, config: IrrfConfig
) -> float:
    """Return income tax withheld after INSS and dependant deductions."""

    base = salary - inss - dependants * config.dependant_deduction
    bracket = config.bracket_for(base)
    if bracket.rate == 0:
        return 0.0
    return base * bracket.rate - bracket.deduction


def calculate_folha_pagamento(
    params: FolhaPagamentoParameters,
    config: PayrollTables,
    policy: InssPolicy,
    translator: Translator,
) -> dict[str, Any]:
    """Return the employee-side deductions for one monthly payroll."""

    inss = calculate_inss(params.salario, config.inss, policy)
    irrf = calculate_irrf(params.salario, inss, params.dependentes, config.irrf)
    transport = (
        params.salario * config.transport_voucher_rate if params.vale_transporte else 0.0
    )
    amounts = {
        "inss": inss,
        "irrf": irrf,
        "vale_transporte": transport,
        "vale_refeicao": params.vale_refeicao,
    }
    total = sum(amounts.values())

    return {
        "total": ensure_finite(total, "total"),
        "breakdown": [
            breakdown_item(key, value, translator, percentage=share_percentage(value, total))
            for key, value in amounts.items()
        ],
        "recommendations": [
            translator("recommendations.folha.tax_benefits"),
            translator("recommendations.folha.private_pension"),
            translator("recommendations.folha.dependants"),
        ],
    }


__all__ = [
    "INSS_STRATEGIES",
    "calculate_folha_pagamento",
    "calculate_inss",
    "calculate_irrf",
]
