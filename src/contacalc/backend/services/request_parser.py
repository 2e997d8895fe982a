"""Helpers for normalising incoming calculation requests."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from flask import Request
from werkzeug.exceptions import BadRequest

from contacalc.backend.app.localization import available_locales, normalise_locale


def _accept_language_locale(req: Request) -> str | None:
    """Return the highest-quality ``Accept-Language`` entry with a catalogue."""

    supported = available_locales()
    for language, _quality in req.accept_languages:
        primary = language.replace("_", "-").split("-")[0].lower()
        if primary in supported:
            return primary
    return None


def resolve_request_locale(req: Request, payload: Mapping[str, Any] | None = None) -> str:
    """Return the locale hinted by the body, ``?locale=`` or ``Accept-Language``.

    Hints are checked in that order; the first non-empty one wins even when it
    names an unsupported locale, which then falls back to Portuguese.
    """

    hinted = payload.get("locale") if payload else None
    if isinstance(hinted, str) and hinted.strip():
        return normalise_locale(hinted)

    query = req.args.get("locale", "").strip()
    if query:
        return normalise_locale(query)

    return normalise_locale(_accept_language_locale(req))


def parse_calculation_payload(req: Request) -> dict[str, Any]:
    """Return the JSON object body of ``req`` with ``locale`` resolved."""

    data = req.get_json(silent=True)
    if data is None:
        raise BadRequest("Request body must be valid JSON")
    if not isinstance(data, Mapping):
        raise BadRequest("Request JSON must be an object")

    return {**data, "locale": resolve_request_locale(req, data)}
