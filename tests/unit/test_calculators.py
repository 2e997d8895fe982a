"""Unit coverage for the individual calculator modules."""

from __future__ import annotations

import pytest

from contacalc.backend.app.localization import get_translator
from contacalc.backend.app.models import (
    CompoundInterestParameters,
    DepreciationParameters,
    FolhaPagamentoParameters,
    InvalidParametersError,
    InvestmentReturnParameters,
    LoanPaymentParameters,
    LucroPresumidoParameters,
    SimpleInterestParameters,
    SimplesNacionalParameters,
    TaxCalculationParameters,
)
from contacalc.backend.app.services.calculators import (
    calculate_compound_interest,
    calculate_depreciation,
    calculate_folha_pagamento,
    calculate_income_tax,
    calculate_inss,
    calculate_investment_return,
    calculate_irrf,
    calculate_loan_payment,
    calculate_lucro_presumido,
    calculate_simple_interest,
    calculate_simples_nacional,
    format_currency,
    format_percentage,
    share_percentage,
)
from contacalc.backend.config.tables import load_tax_tables

TRANSLATOR = get_translator("pt")
TABLES = load_tax_tables()


def _values(result: dict) -> dict[str, float]:
    return {item["key"]: item["value"] for item in result["breakdown"]}


def test_simple_interest_matches_reference_values() -> None:
    params = SimpleInterestParameters(principal=1000, rate=5, time=2)

    result = calculate_simple_interest(params, TRANSLATOR)

    assert result["total"] == pytest.approx(1100)
    assert _values(result) == {"principal": 1000, "interest": pytest.approx(100)}
    assert result["formula"] == "I = P × r × t"
    assert result["recommendations"] == []


def test_compound_interest_defaults_to_annual_compounding() -> None:
    params = CompoundInterestParameters(principal=1000, rate=10, time=1)

    result = calculate_compound_interest(params, TRANSLATOR)

    assert params.compound == 1
    assert result["total"] == pytest.approx(1100)
    assert _values(result)["interest"] == pytest.approx(100)


def test_compound_interest_with_monthly_periods() -> None:
    params = CompoundInterestParameters(principal=1000, rate=12, time=1, compound=12)

    result = calculate_compound_interest(params, TRANSLATOR)

    assert result["total"] == pytest.approx(1000 * 1.01**12)


def test_loan_payment_amortises_principal() -> None:
    params = LoanPaymentParameters(principal=10_000, rate=12, time=1)

    result = calculate_loan_payment(params, TRANSLATOR)
    values = _values(result)

    assert [item["key"] for item in result["breakdown"]] == [
        "monthly_payment",
        "number_of_payments",
        "principal",
        "total_interest",
    ]
    assert values["monthly_payment"] == pytest.approx(888.49, abs=0.01)
    assert values["number_of_payments"] == 12
    assert result["total"] == pytest.approx(values["monthly_payment"] * 12)
    assert values["total_interest"] == pytest.approx(result["total"] - 10_000)


def test_loan_payment_with_zero_rate_divides_by_zero() -> None:
    params = LoanPaymentParameters(principal=10_000, rate=0, time=1)

    with pytest.raises(ZeroDivisionError):
        calculate_loan_payment(params, TRANSLATOR)


def test_investment_return_reports_annualised_growth() -> None:
    params = InvestmentReturnParameters(initialValue=1000, finalValue=1210, time=2)

    result = calculate_investment_return(params, TRANSLATOR)
    values = _values(result)

    assert result["total"] == pytest.approx(210)
    assert values["return_percentage"] == pytest.approx(21)
    assert values["annualized_return"] == pytest.approx(10)


def test_income_tax_never_taxes_negative_income() -> None:
    params = TaxCalculationParameters(income=1000, taxRate=15, deductions=2000)

    result = calculate_income_tax(params, TRANSLATOR)
    values = _values(result)

    assert values["taxable_income"] == 0
    assert result["total"] == 0
    assert values["net_income"] == 1000


def test_income_tax_applies_rate_after_deductions() -> None:
    params = TaxCalculationParameters(income=10_000, taxRate=10, deductions=2000)

    result = calculate_income_tax(params, TRANSLATOR)

    assert result["total"] == pytest.approx(800)
    assert _values(result)["net_income"] == pytest.approx(9200)


def test_straight_line_depreciation_ends_at_salvage_value() -> None:
    params = DepreciationParameters(cost=10_000, salvageValue=1000, usefulLife=5)

    result = calculate_depreciation(params, TRANSLATOR)
    values = _values(result)

    assert values["annual_depreciation"] == pytest.approx(1800)
    assert result["total"] == pytest.approx(9000)
    assert values["book_value"] == pytest.approx(1000)
    assert result["recommendations"] == []


def test_double_declining_depreciation_flags_approximation() -> None:
    params = DepreciationParameters(cost=10_000, usefulLife=5, method="double_declining")

    result = calculate_depreciation(params, TRANSLATOR)

    assert params.method == "DOUBLE_DECLINING"
    assert _values(result)["annual_depreciation"] == pytest.approx(4000)
    assert result["total"] == pytest.approx(20_000)
    assert result["recommendations"] == [
        TRANSLATOR("recommendations.depreciation.approximation")
    ]


@pytest.mark.parametrize(
    ("anexo", "expected"),
    [("anexo1", 4000), ("anexo2", 4500), ("anexo3", 6000), ("anexo4", 4500), ("anexo5", 15_500)],
)
def test_simples_nacional_rates(anexo: str, expected: float) -> None:
    params = SimplesNacionalParameters(revenue=100_000, anexo=anexo)

    result = calculate_simples_nacional(params, TABLES.simples_nacional, TRANSLATOR)

    assert result["total"] == pytest.approx(expected)
    assert sum(item["value"] for item in result["breakdown"]) == pytest.approx(expected)


def test_simples_nacional_breakdown_shares() -> None:
    params = SimplesNacionalParameters(revenue=100_000, anexo="ANEXO1")

    result = calculate_simples_nacional(params, TABLES.simples_nacional, TRANSLATOR)

    assert [(item["label"], item["percentage"]) for item in result["breakdown"]] == [
        ("IRPJ", pytest.approx(25)),
        ("CSLL", pytest.approx(15)),
        ("PIS", pytest.approx(10)),
        ("COFINS", pytest.approx(30)),
        ("ICMS/ISS", pytest.approx(20)),
    ]
    assert result["recommendations"][:2] == [
        "Regime: Anexo I - Comércio",
        "Alíquota aplicada: 4%",
    ]


def test_simples_nacional_rejects_unknown_anexo() -> None:
    params = SimplesNacionalParameters(revenue=100_000, anexo="anexo9")

    with pytest.raises(InvalidParametersError):
        calculate_simples_nacional(params, TABLES.simples_nacional, TRANSLATOR)


@pytest.mark.parametrize(
    ("salary", "rate"),
    [
        (1320.00, 0.075),
        (1320.01, 0.09),
        (2571.29, 0.09),
        (2571.30, 0.12),
        (3856.94, 0.12),
        (3856.95, 0.14),
    ],
)
def test_bracket_inss_applies_rate_to_whole_salary(salary: float, rate: float) -> None:
    assert calculate_inss(salary, TABLES.payroll.inss, "bracket") == pytest.approx(salary * rate)


@pytest.mark.parametrize(
    ("salary", "expected"),
    [(5000, 550.0), (6836.27, 751.9897), (8000, 751.99), (20_000, 751.99)],
)
def test_flat_capped_inss_never_exceeds_ceiling(salary: float, expected: float) -> None:
    assert calculate_inss(salary, TABLES.payroll.inss, "flat_capped") == pytest.approx(expected)


@pytest.mark.parametrize(
    ("base", "rate", "deduction"),
    [
        (1903.98, 0.0, 0.0),
        (2826.65, 0.075, 142.80),
        (2826.66, 0.15, 354.80),
        (3751.05, 0.15, 354.80),
        (3751.06, 0.225, 636.13),
        (4664.68, 0.225, 636.13),
        (4664.69, 0.275, 869.36),
    ],
)
def test_irrf_brackets_are_inclusive(base: float, rate: float, deduction: float) -> None:
    expected = base * rate - deduction if rate else 0.0

    assert calculate_irrf(base, 0.0, 0, TABLES.payroll.irrf) == pytest.approx(expected)


def test_irrf_is_not_clamped_just_above_exemption() -> None:
    irrf = calculate_irrf(1903.99, 0.0, 0, TABLES.payroll.irrf)

    assert irrf == pytest.approx(1903.99 * 0.075 - 142.80)
    assert irrf < 0


def test_irrf_deducts_inss_and_dependants() -> None:
    irrf = calculate_irrf(3000, 360, 2, TABLES.payroll.irrf)

    base = 3000 - 360 - 2 * 189.59
    assert irrf == pytest.approx(base * 0.075 - 142.80)


def test_irrf_is_zero_below_exemption_after_dependants() -> None:
    assert calculate_irrf(2000, 150, 3, TABLES.payroll.irrf) == 0.0


def test_folha_pagamento_total_sums_employee_deductions() -> None:
    params = FolhaPagamentoParameters(
        salario=3000, valeTransporte=True, valeRefeicao=200
    )

    result = calculate_folha_pagamento(params, TABLES.payroll, "bracket", TRANSLATOR)
    values = _values(result)

    assert values["inss"] == pytest.approx(360)
    assert values["irrf"] == pytest.approx(55.20)
    assert values["vale_transporte"] == pytest.approx(180)
    assert values["vale_refeicao"] == pytest.approx(200)
    assert result["total"] == pytest.approx(795.20)
    assert sum(item["percentage"] for item in result["breakdown"]) == pytest.approx(100)


def test_folha_pagamento_flat_capped_policy() -> None:
    params = FolhaPagamentoParameters(salario=3000)

    result = calculate_folha_pagamento(params, TABLES.payroll, "flat_capped", TRANSLATOR)
    values = _values(result)

    assert values["inss"] == pytest.approx(330)
    assert values["irrf"] == pytest.approx(2670 * 0.075 - 142.80)
    assert values["vale_transporte"] == 0


def test_folha_pagamento_omits_percentages_for_zero_total() -> None:
    params = FolhaPagamentoParameters(salario=0)

    result = calculate_folha_pagamento(params, TABLES.payroll, "bracket", TRANSLATOR)

    assert result["total"] == 0
    assert all("percentage" not in item for item in result["breakdown"])


def test_lucro_presumido_services_activity() -> None:
    params = LucroPresumidoParameters(revenue=100_000)

    result = calculate_lucro_presumido(params, TABLES.lucro_presumido, TRANSLATOR)
    values = _values(result)

    assert params.atividade is None
    assert values == {
        "irpj": pytest.approx(4800),
        "csll": pytest.approx(2880),
        "pis": pytest.approx(650),
        "cofins": pytest.approx(3000),
    }
    assert result["total"] == pytest.approx(11_330)
    assert result["recommendations"][:2] == [
        "Atividade: Serviços",
        "Taxa de presunção: 32%",
    ]
    assert len(result["recommendations"]) == 5


def test_lucro_presumido_commerce_uses_lower_presumption() -> None:
    params = LucroPresumidoParameters(revenue=100_000, atividade="comercio")

    result = calculate_lucro_presumido(params, TABLES.lucro_presumido, TRANSLATOR)

    assert result["total"] == pytest.approx(5570)


def test_lucro_presumido_uses_configured_default_activity() -> None:
    config = TABLES.lucro_presumido.model_copy(update={"default_activity": "comercio"})

    result = calculate_lucro_presumido(
        LucroPresumidoParameters(revenue=100_000, atividade="  "), config, TRANSLATOR
    )

    assert result["total"] == pytest.approx(5570)
    assert result["recommendations"][0] == "Atividade: Comércio"


def test_lucro_presumido_suggests_lucro_real_when_expenses_are_high() -> None:
    params = LucroPresumidoParameters(revenue=100_000, despesas=80_000)

    result = calculate_lucro_presumido(params, TABLES.lucro_presumido, TRANSLATOR)

    assert result["recommendations"][-1] == TRANSLATOR(
        "recommendations.lucro.actual_below_presumed"
    )


def test_lucro_presumido_rejects_unknown_activity() -> None:
    params = LucroPresumidoParameters(revenue=100_000, atividade="mineracao")

    with pytest.raises(InvalidParametersError):
        calculate_lucro_presumido(params, TABLES.lucro_presumido, TRANSLATOR)


def test_breakdown_labels_follow_locale() -> None:
    params = SimpleInterestParameters(principal=1000, rate=5, time=2)

    result = calculate_simple_interest(params, get_translator("en"))

    assert [item["label"] for item in result["breakdown"]] == ["Principal", "Interest"]


def test_formatting_helpers() -> None:
    assert format_percentage(0.045) == "4.5"
    assert format_percentage(0.32) == "32"
    assert format_percentage(0.0065) == "0.65"
    assert format_currency(1234567.891) == "R$ 1.234.567,89"
    assert share_percentage(25, 100) == pytest.approx(25)
    assert share_percentage(25, 0) is None
