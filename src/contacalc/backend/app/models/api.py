"""Pydantic models describing the public API surface."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

__all__ = [
    "BreakdownItem",
    "CalculationData",
    "CalculationRequest",
    "CalculationResponse",
    "CalculationResult",
    "CalculationTypeDescriptor",
    "ParameterDescriptor",
    "format_validation_error",
]

_SCALAR_TYPES = (str, int, float, bool)


class CalculationRequest(BaseModel):
    """Complete payload accepted by the calculation endpoint."""

    model_config = ConfigDict(extra="ignore")

    type: str = Field(..., min_length=1)
    parameters: dict[str, Any] = Field(default_factory=dict)
    description: str | None = None
    locale: str = Field(default="pt")

    @field_validator("type", mode="before")
    @classmethod
    def _normalise_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("locale", mode="before")
    @classmethod
    def _normalise_locale(cls, value: Any) -> str:
        if value is None:
            return "pt"
        text = str(value).strip()
        return text or "pt"

    @field_validator("parameters", mode="before")
    @classmethod
    def _normalise_parameters(cls, value: Any) -> Mapping[str, Any]:
        if value is None:
            return {}
        if isinstance(value, Mapping):
            return value
        raise ValueError("Parameters must be an object mapping names to values")

    @field_validator("parameters", mode="after")
    @classmethod
    def _validate_parameter_values(cls, value: Mapping[str, Any]) -> dict[str, Any]:
        parameters: dict[str, Any] = {}
        for key, raw in value.items():
            if raw is not None and not isinstance(raw, _SCALAR_TYPES):
                raise ValueError(
                    f"Parameter '{key}' must be a number, string or boolean"
                )
            parameters[str(key)] = raw
        return parameters

    def provided_parameters(self) -> dict[str, Any]:
        """Return parameters without null or blank entries."""

        return {
            key: value
            for key, value in self.parameters.items()
            if value is not None and not (isinstance(value, str) and not value.strip())
        }


class BreakdownItem(BaseModel):
    """Line item contributing to or explaining a calculation total."""

    model_config = ConfigDict(extra="forbid")

    key: str
    label: str
    value: float
    percentage: float | None = None


class CalculationResult(BaseModel):
    """Headline total, itemised breakdown and advisory text."""

    model_config = ConfigDict(extra="forbid")

    total: float
    breakdown: list[BreakdownItem] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    formula: str | None = None


class CalculationData(BaseModel):
    """Calculation echo returned inside the success envelope."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    type: str
    parameters: dict[str, Any]
    result: CalculationResult
    description: str | None = None
    locale: str
    history_id: str | None = Field(default=None, alias="historyId")


class CalculationResponse(BaseModel):
    """Full response payload produced by the calculation service."""

    model_config = ConfigDict(extra="forbid")

    success: bool = True
    data: CalculationData


class ParameterDescriptor(BaseModel):
    """Describes one accepted parameter of a calculation type."""

    model_config = ConfigDict(extra="forbid")

    name: str
    type: str
    required: bool
    description: str
    default: Any = None
    options: list[str] | None = None


class CalculationTypeDescriptor(BaseModel):
    """Static description of a calculation type for form builders."""

    model_config = ConfigDict(extra="forbid")

    type: str
    name: str
    description: str
    parameters: list[ParameterDescriptor]


def format_validation_error(error: ValidationError, *, prefix: str = "Invalid calculation payload") -> str:
    """Return a concise human-readable description of validation issues."""

    messages: list[str] = []
    for issue in error.errors():
        location = ".".join(str(part) for part in issue.get("loc", ()))
        message = issue.get("msg", "Invalid value")
        if location:
            messages.append(f"{location}: {message}")
        else:
            messages.append(message)

    details = "; ".join(messages) if messages else str(error)
    return f"{prefix}: {details}"
