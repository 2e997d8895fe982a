"""Domain errors raised while resolving and running calculations."""

from __future__ import annotations

from typing import Any, Sequence


class CalculatorError(ValueError):
    """Base class for recoverable calculation errors reported to clients."""

    code = "CALCULATION_ERROR"
    status = 400

    def extra(self) -> dict[str, Any]:
        """Additional fields merged into the error payload."""

        return {}


class UnsupportedCalculationError(CalculatorError):
    """Raised when the requested calculation type is not supported."""

    code = "INVALID_CALCULATION_TYPE"

    def __init__(self, calculation_type: str, supported: Sequence[str]) -> None:
        self.calculation_type = calculation_type
        self.supported = tuple(supported)
        super().__init__(f"Unsupported calculation type '{calculation_type}'")

    def extra(self) -> dict[str, Any]:
        return {"supported_types": list(self.supported)}


class MissingParametersError(CalculatorError):
    """Raised when required parameters are absent for a calculation type."""

    code = "MISSING_PARAMETERS"

    def __init__(self, fields: Sequence[str]) -> None:
        self.fields = tuple(fields)
        super().__init__(f"Missing required parameters: {', '.join(self.fields)}")

    def extra(self) -> dict[str, Any]:
        return {"fields": list(self.fields)}


class InvalidParametersError(CalculatorError):
    """Raised when parameters are present but cannot be used."""

    code = "INVALID_PARAMETERS"


class CalculationError(CalculatorError):
    """Raised when a formula cannot produce a finite result."""


__all__ = [
    "CalculationError",
    "CalculatorError",
    "InvalidParametersError",
    "MissingParametersError",
    "UnsupportedCalculationError",
]
