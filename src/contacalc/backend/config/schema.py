"""Pydantic models describing the tax tables schema."""

from __future__ import annotations

from typing import Any, Literal, Mapping, Sequence

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from typing_extensions import Self

InssPolicy = Literal["bracket", "flat_capped"]
INSS_POLICIES: tuple[str, ...] = ("bracket", "flat_capped")


class ConfigurationError(ValueError):
    """Raised when configuration values violate schema expectations."""


class ImmutableModel(BaseModel):
    """Base class that freezes instances and rejects unknown fields."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


class RateBracket(ImmutableModel):
    """Bracket applying a single rate up to an inclusive upper bound."""

    upper_bound: float | None = Field(default=None, alias="upper")
    rate: float

    @model_validator(mode="after")
    def _validate_values(self) -> Self:
        if self.rate < 0:
            raise ConfigurationError("Bracket rates must be non-negative")
        if self.upper_bound is not None and self.upper_bound <= 0:
            raise ConfigurationError("Upper bounds must be positive values")
        return self

    def contains(self, amount: float) -> bool:
        return self.upper_bound is None or amount <= self.upper_bound


class DeductionBracket(RateBracket):
    """Withholding bracket with a fixed amount deducted after the rate."""

    deduction: float = 0.0

    @model_validator(mode="after")
    def _validate_deduction(self) -> Self:
        if self.deduction < 0:
            raise ConfigurationError("Bracket deductions must be non-negative")
        return self


def _validate_bracket_sequence(brackets: Sequence[RateBracket]) -> None:
    if not brackets:
        raise ConfigurationError("At least one bracket must be defined")
    last_upper: float | None = None
    for bracket in brackets[:-1]:
        upper = bracket.upper_bound
        if upper is None:
            raise ConfigurationError("Only the final bracket may have an open upper bound")
        if last_upper is not None and upper <= last_upper:
            raise ConfigurationError("Brackets must be in ascending order")
        last_upper = upper
    if brackets[-1].upper_bound is not None:
        raise ConfigurationError("Final bracket must have an open upper bound")


class InssConfig(ImmutableModel):
    """Employee social security (INSS) withholding settings."""

    default_policy: InssPolicy = "bracket"
    brackets: Sequence[RateBracket]
    flat_rate: float
    flat_cap: float

    @model_validator(mode="after")
    def _validate_inss(self) -> Self:
        _validate_bracket_sequence(self.brackets)
        if self.flat_rate < 0:
            raise ConfigurationError("INSS flat rate must be non-negative")
        if self.flat_cap <= 0:
            raise ConfigurationError("INSS flat cap must be positive")
        return self

    def bracket_for(self, salary: float) -> RateBracket:
        for bracket in self.brackets:
            if bracket.contains(salary):
                return bracket
        return self.brackets[-1]


class IrrfConfig(ImmutableModel):
    """Income tax withholding (IRRF) table."""

    dependant_deduction: float
    brackets: Sequence[DeductionBracket]

    @model_validator(mode="after")
    def _validate_irrf(self) -> Self:
        _validate_bracket_sequence(self.brackets)
        if self.dependant_deduction < 0:
            raise ConfigurationError("IRRF dependant deduction must be non-negative")
        return self

    def bracket_for(self, base: float) -> DeductionBracket:
        for bracket in self.brackets:
            if bracket.contains(base):
                return bracket
        return self.brackets[-1]


class PayrollTables(ImmutableModel):
    """Payroll withholding tables."""

    inss: InssConfig
    irrf: IrrfConfig
    transport_voucher_rate: float


class AnexoConfig(ImmutableModel):
    """Simples Nacional category with its combined rate."""

    rate: float
    label_key: str


class TaxShare(ImmutableModel):
    """Share of a combined tax amount attributed to one component."""

    key: str
    label: str
    share: float


class SimplesNacionalTables(ImmutableModel):
    """Simples Nacional category rates and the component split."""

    anexos: Mapping[str, AnexoConfig]
    shares: Sequence[TaxShare]

    @field_validator("anexos", mode="before")
    @classmethod
    def _coerce_anexo_keys(cls, value: Any) -> Mapping[str, Any]:
        if isinstance(value, Mapping):
            return {str(key): item for key, item in value.items()}
        raise ConfigurationError("Simples Nacional 'anexos' must be a mapping")

    @model_validator(mode="after")
    def _validate_simples(self) -> Self:
        if not self.anexos:
            raise ConfigurationError("At least one Simples Nacional anexo must be defined")
        if not self.shares:
            raise ConfigurationError("Simples Nacional shares must not be empty")
        return self


class LucroPresumidoTables(ImmutableModel):
    """Presumption rates by activity and the taxes levied on them."""

    default_activity: str
    presumption_rates: Mapping[str, float]
    irpj_rate: float
    csll_rate: float
    pis_rate: float
    cofins_rate: float

    @model_validator(mode="after")
    def _validate_activity(self) -> Self:
        if self.default_activity not in self.presumption_rates:
            raise ConfigurationError(
                "Default activity must be listed in the presumption rates"
            )
        return self


class TaxTables(ImmutableModel):
    """Structured representation of every table used by the calculators."""

    year: int
    payroll: PayrollTables
    simples_nacional: SimplesNacionalTables
    lucro_presumido: LucroPresumidoTables

    @model_validator(mode="before")
    @classmethod
    def _require_mapping(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            raise ConfigurationError("Tax tables must define a mapping at the top level")
        return data


__all__ = [
    "AnexoConfig",
    "ConfigurationError",
    "DeductionBracket",
    "ImmutableModel",
    "INSS_POLICIES",
    "InssConfig",
    "InssPolicy",
    "IrrfConfig",
    "LucroPresumidoTables",
    "PayrollTables",
    "RateBracket",
    "SimplesNacionalTables",
    "TaxShare",
    "TaxTables",
    "ValidationError",
]
