"""Utilities for serialising calculation responses."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Tuple

from flask import jsonify

ResponseTuple = Tuple[Any, int]


def build_calculation_response(payload: Mapping[str, Any]) -> ResponseTuple:
    """Return a Flask JSON response for the calculation ``payload``."""

    return jsonify(payload), 200


def build_success_response(data: Any, *, status: int = 200) -> ResponseTuple:
    """Wrap ``data`` in the ``{"success": true, "data": ...}`` envelope."""

    return jsonify({"success": True, "data": data}), status
