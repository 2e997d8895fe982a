"""Service-layer helpers for the ContaCalc backend."""

from contacalc.backend.app.services.calculation_service import (
    calculate,
    describe_calculation_types,
)

from .request_parser import parse_calculation_payload, resolve_request_locale
from .response_builder import build_calculation_response, build_success_response

__all__ = [
    "build_calculation_response",
    "build_success_response",
    "calculate",
    "describe_calculation_types",
    "parse_calculation_payload",
    "resolve_request_locale",
]
