"""Unit tests for response formatting helpers."""

from __future__ import annotations

from flask import Flask

from contacalc.backend.services.response_builder import (
    build_calculation_response,
    build_success_response,
)


def test_build_calculation_response_returns_json(app: Flask) -> None:
    """The calculation envelope is serialised unchanged with a 200 status."""

    envelope = {"success": True, "data": {"type": "SIMPLE_INTEREST"}}
    with app.app_context():
        response, status = build_calculation_response(envelope)

    assert status == 200
    assert response.get_json() == envelope


def test_build_success_response_wraps_data(app: Flask) -> None:
    with app.app_context():
        response, status = build_success_response([1, 2], status=201)

    assert status == 201
    assert response.get_json() == {"success": True, "data": [1, 2]}
