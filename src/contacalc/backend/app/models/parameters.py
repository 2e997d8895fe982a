"""Typed parameter models, one per supported calculation type.

The public API still accepts a free-form ``parameters`` mapping. The
calculation type acts as the tag that selects one of the models below, so by
the time a calculator runs every required value is present and typed.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CalculationType(str, Enum):
    """Calculation types exposed by the API, in display order."""

    SIMPLE_INTEREST = "SIMPLE_INTEREST"
    COMPOUND_INTEREST = "COMPOUND_INTEREST"
    LOAN_PAYMENT = "LOAN_PAYMENT"
    INVESTMENT_RETURN = "INVESTMENT_RETURN"
    TAX_CALCULATION = "TAX_CALCULATION"
    DEPRECIATION = "DEPRECIATION"
    SIMPLES_NACIONAL = "SIMPLES_NACIONAL"
    FOLHA_PAGAMENTO = "FOLHA_PAGAMENTO"
    LUCRO_PRESUMIDO = "LUCRO_PRESUMIDO"


STRAIGHT_LINE = "STRAIGHT_LINE"
DEPRECIATION_METHODS: tuple[str, ...] = (STRAIGHT_LINE, "DOUBLE_DECLINING")


class CalculationParameters(BaseModel):
    """Base class for per-type parameters.

    Unknown keys are ignored so clients may send a shared form payload, and
    non-finite numbers are rejected up front.
    """

    model_config = ConfigDict(
        extra="ignore",
        frozen=True,
        populate_by_name=True,
        allow_inf_nan=False,
    )


class SimpleInterestParameters(CalculationParameters):
    principal: float
    rate: float
    time: float


class CompoundInterestParameters(CalculationParameters):
    principal: float
    rate: float
    time: float
    compound: float = 1.0


class LoanPaymentParameters(CalculationParameters):
    principal: float
    rate: float
    time: float


class InvestmentReturnParameters(CalculationParameters):
    initial_value: float = Field(alias="initialValue")
    final_value: float = Field(alias="finalValue")
    time: float


class TaxCalculationParameters(CalculationParameters):
    income: float
    tax_rate: float = Field(alias="taxRate")
    deductions: float = 0.0


class DepreciationParameters(CalculationParameters):
    cost: float
    salvage_value: float = Field(default=0.0, alias="salvageValue")
    useful_life: float = Field(alias="usefulLife")
    method: str = STRAIGHT_LINE

    @field_validator("method", mode="before")
    @classmethod
    def _normalise_method(cls, value: Any) -> str:
        if value is None:
            return STRAIGHT_LINE
        text = str(value).strip().upper()
        return text or STRAIGHT_LINE

    @property
    def is_straight_line(self) -> bool:
        return self.method == STRAIGHT_LINE


class SimplesNacionalParameters(CalculationParameters):
    revenue: float
    anexo: str

    @field_validator("anexo", mode="before")
    @classmethod
    def _normalise_anexo(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class FolhaPagamentoParameters(CalculationParameters):
    salario: float
    dependentes: int = Field(default=0, ge=0)
    vale_transporte: bool = Field(default=False, alias="valeTransporte")
    vale_refeicao: float = Field(default=0.0, alias="valeRefeicao")


class LucroPresumidoParameters(CalculationParameters):
    revenue: float
    atividade: str | None = None
    despesas: float = 0.0

    @field_validator("atividade", mode="before")
    @classmethod
    def _normalise_atividade(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower() or None
        return value


PARAMETER_MODELS: Mapping[CalculationType, type[CalculationParameters]] = MappingProxyType(
    {
        CalculationType.SIMPLE_INTEREST: SimpleInterestParameters,
        CalculationType.COMPOUND_INTEREST: CompoundInterestParameters,
        CalculationType.LOAN_PAYMENT: LoanPaymentParameters,
        CalculationType.INVESTMENT_RETURN: InvestmentReturnParameters,
        CalculationType.TAX_CALCULATION: TaxCalculationParameters,
        CalculationType.DEPRECIATION: DepreciationParameters,
        CalculationType.SIMPLES_NACIONAL: SimplesNacionalParameters,
        CalculationType.FOLHA_PAGAMENTO: FolhaPagamentoParameters,
        CalculationType.LUCRO_PRESUMIDO: LucroPresumidoParameters,
    }
)


__all__ = [
    "CalculationParameters",
    "CalculationType",
    "CompoundInterestParameters",
    "DEPRECIATION_METHODS",
    "DepreciationParameters",
    "FolhaPagamentoParameters",
    "InvestmentReturnParameters",
    "LoanPaymentParameters",
    "LucroPresumidoParameters",
    "PARAMETER_MODELS",
    "STRAIGHT_LINE",
    "SimpleInterestParameters",
    "SimplesNacionalParameters",
    "TaxCalculationParameters",
]
