"""Typed request/response models shared across the calculation services.

Requests arrive as a calculation type plus a loose parameter mapping. The type
selects one of the parameter models in :mod:`.parameters`, and every calculator
returns data that is validated against :class:`CalculationResult` before it
leaves the service, so routes and history exports see a single shape.
"""

from __future__ import annotations

from .api import (
    BreakdownItem,
    CalculationData,
    CalculationRequest,
    CalculationResponse,
    CalculationResult,
    CalculationTypeDescriptor,
    ParameterDescriptor,
    format_validation_error,
)
from .errors import (
    CalculationError,
    CalculatorError,
    InvalidParametersError,
    MissingParametersError,
    UnsupportedCalculationError,
)
from .parameters import (
    DEPRECIATION_METHODS,
    PARAMETER_MODELS,
    STRAIGHT_LINE,
    CalculationParameters,
    CalculationType,
    CompoundInterestParameters,
    DepreciationParameters,
    FolhaPagamentoParameters,
    InvestmentReturnParameters,
    LoanPaymentParameters,
    LucroPresumidoParameters,
    SimpleInterestParameters,
    SimplesNacionalParameters,
    TaxCalculationParameters,
)

__all__ = [
    "BreakdownItem",
    "CalculationData",
    "CalculationError",
    "CalculationParameters",
    "CalculationRequest",
    "CalculationResponse",
    "CalculationResult",
    "CalculationType",
    "CalculationTypeDescriptor",
    "CalculatorError",
    "CompoundInterestParameters",
    "DEPRECIATION_METHODS",
    "DepreciationParameters",
    "FolhaPagamentoParameters",
    "InvalidParametersError",
    "InvestmentReturnParameters",
    "LoanPaymentParameters",
    "LucroPresumidoParameters",
    "MissingParametersError",
    "PARAMETER_MODELS",
    "ParameterDescriptor",
    "STRAIGHT_LINE",
    "SimpleInterestParameters",
    "SimplesNacionalParameters",
    "TaxCalculationParameters",
    "UnsupportedCalculationError",
    "format_validation_error",
]
