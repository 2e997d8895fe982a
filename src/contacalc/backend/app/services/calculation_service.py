"""Orchestrate request validation, parameter resolution and calculations.

The calculation service ties the typed parameter models, the translation
catalogues and the YAML tax tables together so that every calculator module
only deals with arithmetic. A request names its calculation type, the type
selects a parameter model, and the validated parameters are handed to the
matching calculator. Arithmetic failures surface as ``CalculationError`` so the
HTTP layer never sees a bare ``ZeroDivisionError``.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from time import perf_counter
from types import MappingProxyType
from typing import Any, Callable

from pydantic import ValidationError

from contacalc.backend.app.localization import Translator, get_translator
from contacalc.backend.app.models import (
    DEPRECIATION_METHODS,
    PARAMETER_MODELS,
    CalculationError,
    CalculationParameters,
    CalculationRequest,
    CalculationResponse,
    CalculationType,
    CalculationTypeDescriptor,
    CalculatorError,
    InvalidParametersError,
    MissingParametersError,
    ParameterDescriptor,
    UnsupportedCalculationError,
    format_validation_error,
)
from contacalc.backend.config.tables import (
    InssPolicy,
    TaxTables,
    load_tax_tables,
    resolve_inss_policy,
)

from .calculators import (
    calculate_compound_interest,
    calculate_depreciation,
    calculate_folha_pagamento,
    calculate_income_tax,
    calculate_investment_return,
    calculate_loan_payment,
    calculate_lucro_presumido,
    calculate_simple_interest,
    calculate_simples_nacional,
)

_LOGGER = logging.getLogger(__name__)

_PARAMETER_TYPES: Mapping[type, str] = MappingProxyType(
    {float: "number", int: "integer", bool: "boolean", str: "string"}
)


@dataclass(frozen=True)
class CalculationContext:
    """Immutable inputs shared by every calculator for one request."""

    tables: TaxTables
    translator: Translator
    inss_policy: InssPolicy


Handler = Callable[[Any, CalculationContext], Mapping[str, Any]]

_HANDLERS: Mapping[CalculationType, Handler] = MappingProxyType(
    {
        CalculationType.SIMPLE_INTEREST: lambda params, ctx: calculate_simple_interest(
            params, ctx.translator
        ),
        CalculationType.COMPOUND_INTEREST: lambda params, ctx: calculate_compound_interest(
            params, ctx.translator
        ),
        CalculationType.LOAN_PAYMENT: lambda params, ctx: calculate_loan_payment(
            params, ctx.translator
        ),
        CalculationType.INVESTMENT_RETURN: lambda params, ctx: calculate_investment_return(
            params, ctx.translator
        ),
        CalculationType.TAX_CALCULATION: lambda params, ctx: calculate_income_tax(
            params, ctx.translator
        ),
        CalculationType.DEPRECIATION: lambda params, ctx: calculate_depreciation(
            params, ctx.translator
        ),
        CalculationType.SIMPLES_NACIONAL: lambda params, ctx: calculate_simples_nacional(
            params, ctx.tables.simples_nacional, ctx.translator
        ),
        CalculationType.FOLHA_PAGAMENTO: lambda params, ctx: calculate_folha_pagamento(
            params, ctx.tables.payroll, ctx.inss_policy, ctx.translator
        ),
        CalculationType.LUCRO_PRESUMIDO: lambda params, ctx: calculate_lucro_presumido(
            params, ctx.tables.lucro_presumido, ctx.translator
        ),
    }
)


def _profiling_enabled() -> bool:
    """Return ``True`` when calculation profiling should be captured."""

    flag = os.getenv("CONTACALC_PROFILE_CALCULATIONS", "")
    return flag.strip().lower() in {"1", "true", "yes", "on"}


@contextmanager
def _profile_section(name: str, store: dict[str, float] | None):
    """Capture the duration of a named section when profiling is enabled."""

    if store is None:
        yield
        return

    start = perf_counter()
    try:
        yield
    finally:
        store[name] = perf_counter() - start


def supported_calculation_types() -> tuple[str, ...]:
    """Return calculation type identifiers in display order."""

    return tuple(member.value for member in CalculationType)


def _resolve_type(value: str) -> CalculationType:
    try:
        return CalculationType(value)
    except ValueError as error:
        raise UnsupportedCalculationError(value, supported_calculation_types()) from error


def _parse_request(payload: Mapping[str, Any] | CalculationRequest) -> CalculationRequest:
    if isinstance(payload, CalculationRequest):
        return payload

    if not isinstance(payload, Mapping):
        raise ValueError("Calculation payload must be a JSON object")

    raw_type = payload.get("type")
    if raw_type is None or (isinstance(raw_type, str) and not raw_type.strip()):
        raise MissingParametersError(["type"])
    if not isinstance(raw_type, str):
        raise UnsupportedCalculationError(str(raw_type), supported_calculation_types())

    try:
        return CalculationRequest.model_validate(payload)
    except ValidationError as error:
        raise ValueError(format_validation_error(error)) from error


def _validate_parameters(
    model: type[CalculationParameters], provided: Mapping[str, Any]
) -> CalculationParameters:
    try:
        return model.model_validate(provided)
    except ValidationError as error:
        missing = [
            str(issue["loc"][0])
            for issue in error.errors()
            if issue.get("type") == "missing" and issue.get("loc")
        ]
        if missing:
            raise MissingParametersError(missing) from error
        raise InvalidParametersError(
            format_validation_error(error, prefix="Invalid parameters")
        ) from error


def calculate(
    payload: Mapping[str, Any] | CalculationRequest,
    *,
    inss_policy: str | None = None,
) -> dict[str, Any]:
    """Run the calculation described by ``payload`` and return the response body.

    Raises:
        MissingParametersError: when the type or required parameters are absent.
        UnsupportedCalculationError: when the type is not recognised.
        InvalidParametersError: when parameters cannot be coerced or are unknown codes.
        CalculationError: when the formula fails or produces a non-finite value.
    """

    timings: dict[str, float] | None = {} if _profiling_enabled() else None
    overall_start = perf_counter() if timings is not None else None

    with _profile_section("validation", timings):
        request = _parse_request(payload)
        calculation_type = _resolve_type(request.type)
        model = PARAMETER_MODELS[calculation_type]
        params = _validate_parameters(model, request.provided_parameters())

    tables = load_tax_tables()
    context = CalculationContext(
        tables=tables,
        translator=get_translator(request.locale),
        inss_policy=resolve_inss_policy(inss_policy, tables),
    )

    try:
        with _profile_section(calculation_type.value.lower(), timings):
            result = _HANDLERS[calculation_type](params, context)
    except CalculatorError:
        raise
    except (ArithmeticError, ValueError) as error:
        raise CalculationError(f"Calculation failed: {error}") from error

    if timings is not None and overall_start is not None:
        timings["total"] = perf_counter() - overall_start
        _LOGGER.debug(
            "calculate timings (ms): %s",
            {name: round(duration * 1000, 3) for name, duration in timings.items()},
        )

    response_model = CalculationResponse.model_validate(
        {
            "data": {
                "type": calculation_type.value,
                "parameters": request.parameters,
                "result": result,
                "description": request.description,
                "locale": context.translator.locale,
            }
        }
    )

    return response_model.model_dump(mode="json", exclude_none=True, by_alias=True)


def _parameter_options(
    calculation_type: CalculationType, name: str, tables: TaxTables
) -> list[str] | None:
    if calculation_type is CalculationType.SIMPLES_NACIONAL and name == "anexo":
        return list(tables.simples_nacional.anexos)
    if calculation_type is CalculationType.LUCRO_PRESUMIDO and name == "atividade":
        return list(tables.lucro_presumido.presumption_rates)
    if calculation_type is CalculationType.DEPRECIATION and name == "method":
        return list(DEPRECIATION_METHODS)
    return None


def _parameter_default(
    calculation_type: CalculationType, name: str, default: Any, tables: TaxTables
) -> Any:
    if calculation_type is CalculationType.LUCRO_PRESUMIDO and name == "atividade":
        return tables.lucro_presumido.default_activity
    return default


def describe_calculation_types(locale: str | None = None) -> list[dict[str, Any]]:
    """Return form descriptors for every calculation type in display order."""

    translator = get_translator(locale)
    tables = load_tax_tables()
    descriptors: list[dict[str, Any]] = []

    for calculation_type in CalculationType:
        model = PARAMETER_MODELS[calculation_type]
        prefix = f"types.{calculation_type.value}"
        parameters: list[ParameterDescriptor] = []

        for field_name, field in model.model_fields.items():
            name = field.alias or field_name
            required = field.is_required()
            parameters.append(
                ParameterDescriptor(
                    name=name,
                    type=_PARAMETER_TYPES.get(field.annotation, "string"),
                    required=required,
                    description=translator(f"{prefix}.parameters.{name}"),
                    default=(
                        None
                        if required
                        else _parameter_default(
                            calculation_type, field_name, field.default, tables
                        )
                    ),
                    options=_parameter_options(calculation_type, field_name, tables),
                )
            )

        descriptor = CalculationTypeDescriptor(
            type=calculation_type.value,
            name=translator(f"{prefix}.name"),
            description=translator(f"{prefix}.description"),
            parameters=parameters,
        )
        descriptors.append(descriptor.model_dump(mode="json", exclude_none=True))

    return descriptors


__all__ = [
    "CalculationContext",
    "calculate",
    "describe_calculation_types",
    "supported_calculation_types",
]
