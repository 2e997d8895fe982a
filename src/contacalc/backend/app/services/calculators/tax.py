"""Income tax, Simples Nacional and Lucro Presumido calculators."""

from __future__ import annotations

from typing import Any

from contacalc.backend.app.localization import Translator
from contacalc.backend.app.models import (
    InvalidParametersError,
    LucroPresumidoParameters,
    SimplesNacionalParameters,
    TaxCalculationParameters,
)
from contacalc.backend.config.tables import LucroPresumidoTables, SimplesNacionalTables

from .utils import breakdown_item, ensure_finite, format_percentage, share_percentage

TAX_CALCULATION_FORMULA = "Tax = (Income - Deductions) × Tax Rate"


def calculate_income_tax(
    params: TaxCalculationParameters, translator: Translator
) -> dict[str, Any]:
    """Return tax due on income net of deductions at a flat percentage."""

    taxable_income = max(0.0, params.income - params.deductions)
    tax_amount = taxable_income * params.tax_rate / 100
    net_income = params.income - tax_amount

    return {
        "total": ensure_finite(tax_amount, "total"),
        "breakdown": [
            breakdown_item("income", params.income, translator),
            breakdown_item("deductions", params.deductions, translator),
            breakdown_item("taxable_income", taxable_income, translator),
            breakdown_item("tax_amount", tax_amount, translator),
            breakdown_item("net_income", net_income, translator),
        ],
        "recommendations": [],
        "formula": TAX_CALCULATION_FORMULA,
    }


def calculate_simples_nacional(
    params: SimplesNacionalParameters,
    config: SimplesNacionalTables,
    translator: Translator,
) -> dict[str, Any]:
    """Return the unified Simples Nacional tax split across its components."""

    anexo = config.anexos.get(params.anexo)
    if anexo is None:
        allowed = ", ".join(config.anexos)
        raise InvalidParametersError(
            f"Unknown anexo '{params.anexo}' (expected one of {allowed})"
        )

    total = params.revenue * anexo.rate
    breakdown = [
        {
            "key": share.key,
            "label": share.label,
            "value": ensure_finite(total * share.share, share.key),
            "percentage": share.share * 100,
        }
        for share in config.shares
    ]

    return {
        "total": ensure_finite(total, "total"),
        "breakdown": breakdown,
        "recommendations": [
            translator.format("recommendations.simples.regime", label=translator(anexo.label_key)),
            translator.format("recommendations.simples.rate", rate=format_percentage(anexo.rate)),
            translator("recommendations.simples.revenue_limits"),
            translator("recommendations.simples.profit_distribution"),
        ],
    }


def calculate_lucro_presumido(
    params: LucroPresumidoParameters,
    config: LucroPresumidoTables,
    translator: Translator,
) -> dict[str, Any]:
    """Return the combined federal tax under the presumed-profit regime.

    Requests without ``atividade`` use the activity configured as the default.
    """

    activity = params.atividade or config.default_activity
    presumption = config.presumption_rates.get(activity)
    if presumption is None:
        allowed = ", ".join(config.presumption_rates)
        raise InvalidParametersError(
            f"Unknown atividade '{activity}' (expected one of {allowed})"
        )

    presumed_profit = params.revenue * presumption
    amounts = {
        "irpj": presumed_profit * config.irpj_rate,
        "csll": presumed_profit * config.csll_rate,
        "pis": params.revenue * config.pis_rate,
        "cofins": params.revenue * config.cofins_rate,
    }
    total = sum(amounts.values())

    breakdown = [
        breakdown_item(key, value, translator, percentage=share_percentage(value, total))
        for key, value in amounts.items()
    ]

    recommendations = [
        translator.format(
            "recommendations.lucro.activity",
            activity=translator(f"lucro.atividade.{activity}"),
        ),
        translator.format(
            "recommendations.lucro.presumption", rate=format_percentage(presumption)
        ),
        translator("recommendations.lucro.revenue_control"),
        translator("recommendations.lucro.consider_real"),
        translator("recommendations.lucro.periodic_review"),
    ]

    if params.despesas > 0 and params.revenue - params.despesas < presumed_profit:
        recommendations.append(translator("recommendations.lucro.actual_below_presumed"))

    return {
        "total": ensure_finite(total, "total"),
        "breakdown": breakdown,
        "recommendations": recommendations,
    }


__all__ = [
    "TAX_CALCULATION_FORMULA",
    "calculate_income_tax",
    "calculate_lucro_presumido",
    "calculate_simples_nacional",
]
