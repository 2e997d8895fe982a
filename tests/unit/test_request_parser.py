"""Unit tests for calculation request parsing helpers."""

from __future__ import annotations

import pytest
from flask import Flask, request
from werkzeug.exceptions import BadRequest

from contacalc.backend.services.request_parser import (
    parse_calculation_payload,
    resolve_request_locale,
)

_PAYLOAD = {"type": "SIMPLE_INTEREST", "parameters": {"principal": 1000, "rate": 5, "time": 2}}


def test_parse_payload_uses_accept_language(app: Flask) -> None:
    """Accept-Language header should supply the locale when absent."""

    with app.test_request_context(
        "/api/v1/calculator/calculate",
        method="POST",
        json=_PAYLOAD,
        headers={"Accept-Language": "en-US,en;q=0.9,pt;q=0.8"},
    ):
        payload = parse_calculation_payload(request)

    assert payload["locale"] == "en"
    assert payload["type"] == "SIMPLE_INTEREST"


def test_parse_payload_preserves_explicit_locale(app: Flask) -> None:
    """Explicit locale fields win over the request headers."""

    with app.test_request_context(
        "/api/v1/calculator/calculate",
        method="POST",
        json={**_PAYLOAD, "locale": "EN"},
        headers={"Accept-Language": "pt-BR"},
    ):
        payload = parse_calculation_payload(request)

    assert payload["locale"] == "en"


def test_parse_payload_defaults_to_portuguese(app: Flask) -> None:
    with app.test_request_context(
        "/api/v1/calculator/calculate",
        method="POST",
        json={**_PAYLOAD, "locale": "fr"},
    ):
        payload = parse_calculation_payload(request)

    assert payload["locale"] == "pt"


def test_parse_payload_rejects_non_object(app: Flask) -> None:
    """Non-object JSON payloads should trigger BadRequest responses."""

    with app.test_request_context(
        "/api/v1/calculator/calculate",
        method="POST",
        json=["not", "an", "object"],
    ):
        with pytest.raises(BadRequest):
            parse_calculation_payload(request)


def test_parse_payload_rejects_invalid_json(app: Flask) -> None:
    with app.test_request_context(
        "/api/v1/calculator/calculate",
        method="POST",
        data="{not json",
        content_type="application/json",
    ):
        with pytest.raises(BadRequest):
            parse_calculation_payload(request)


def test_resolve_request_locale_reads_query_string(app: Flask) -> None:
    with app.test_request_context(
        "/api/v1/calculator/types?locale=en",
        headers={"Accept-Language": "pt"},
    ):
        assert resolve_request_locale(request) == "en"


def test_accept_language_skips_unsupported_languages(app: Flask) -> None:
    with app.test_request_context(
        "/api/v1/calculator/types",
        headers={"Accept-Language": "fr-FR,fr;q=0.9,en;q=0.5"},
    ):
        assert resolve_request_locale(request) == "en"
