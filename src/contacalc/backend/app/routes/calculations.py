"""REST endpoints for financial calculations."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, current_app, request

from contacalc.backend.app.services.history_service import record_calculation
from contacalc.backend.services import (
    build_calculation_response,
    build_success_response,
    calculate,
    describe_calculation_types,
    parse_calculation_payload,
    resolve_request_locale,
)

from . import history

blueprint = Blueprint("calculations", __name__, url_prefix="/api/v1/calculator")


@blueprint.post("/calculate")
def create_calculation() -> tuple[Any, int]:
    """Run a calculation using the submitted JSON payload."""

    payload = parse_calculation_payload(request)
    result = calculate(payload, inss_policy=current_app.config.get("INSS_POLICY"))

    data = result["data"]
    record = record_calculation(history.get_repository(), data)
    if record is not None:
        data["historyId"] = record.id

    return build_calculation_response(result)


@blueprint.get("/types")
def list_calculation_types() -> tuple[Any, int]:
    """Describe every supported calculation type and its parameters."""

    locale = resolve_request_locale(request)
    return build_success_response(describe_calculation_types(locale))


__all__ = ["blueprint"]
