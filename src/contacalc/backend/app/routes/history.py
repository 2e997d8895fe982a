"""Endpoints for browsing, exporting and deleting saved calculations."""

from __future__ import annotations

import logging
import os
from http import HTTPStatus
from pathlib import Path
from typing import Any

from flask import Blueprint, Response, jsonify, request

from contacalc.backend.app.http import problem_response
from contacalc.backend.app.services.history_service import (
    SORT_ORDERS,
    HistoryRepository,
    InMemoryHistoryRepository,
    SQLiteHistoryRepository,
    render_csv,
    render_pdf,
)

blueprint = Blueprint("history", __name__, url_prefix="/api/v1/calculator/history")

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 50
DEFAULT_PAGE_SIZE = 10


def _parse_positive_int(value: str | None, *, env: str) -> int | None:
    if value is None or not value.strip():
        return None
    try:
        parsed = int(value)
    except ValueError:
        logger.warning("Ignoring invalid value for %s: %s", env, value)
        return None
    if parsed <= 0:
        logger.warning("Ignoring non-positive value for %s: %s", env, value)
        return None
    return parsed


def _history_enabled() -> bool:
    flag = os.getenv("CONTACALC_HISTORY_ENABLED", "1")
    return flag.strip().lower() not in {"0", "false", "no", "off"}


def _build_repository() -> HistoryRepository | None:
    if not _history_enabled():
        return None

    ttl = _parse_positive_int(os.getenv("CONTACALC_HISTORY_TTL"), env="CONTACALC_HISTORY_TTL")
    capacity = _parse_positive_int(
        os.getenv("CONTACALC_HISTORY_CAPACITY"), env="CONTACALC_HISTORY_CAPACITY"
    )

    kwargs: dict[str, Any] = {}
    if ttl is not None:
        kwargs["ttl_seconds"] = ttl
    if capacity is not None:
        kwargs["max_items"] = capacity

    db_path = os.getenv("CONTACALC_HISTORY_DB")
    if db_path:
        return SQLiteHistoryRepository(Path(db_path).expanduser(), **kwargs)

    return InMemoryHistoryRepository(**kwargs)


_REPOSITORY = _build_repository()


def get_repository() -> HistoryRepository | None:
    """Return the repository backing the history endpoints, if enabled."""

    return _REPOSITORY


def _not_found(record_id: str) -> tuple[Any, int]:
    return problem_response(
        "CALCULATION_NOT_FOUND",
        status=HTTPStatus.NOT_FOUND,
        message=f"Calculation '{record_id}' not found",
    ).to_response()


def _history_disabled() -> tuple[Any, int]:
    return problem_response(
        "CALCULATION_NOT_FOUND",
        status=HTTPStatus.NOT_FOUND,
        message="Calculation history is disabled",
    ).to_response()


def _query_int(name: str, default: int) -> int:
    raw = request.args.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as error:
        raise ValueError(f"Query parameter '{name}' must be an integer") from error


@blueprint.get("")
def list_history() -> tuple[Any, int]:
    repository = get_repository()

    page = max(_query_int("page", 1), 1)
    limit = min(max(_query_int("limit", DEFAULT_PAGE_SIZE), 1), MAX_PAGE_SIZE)
    sort_order = (request.args.get("sortOrder") or "desc").strip().lower()
    if sort_order not in SORT_ORDERS:
        raise ValueError("Query parameter 'sortOrder' must be 'asc' or 'desc'")
    calculation_type = (request.args.get("type") or "").strip().upper() or None

    if repository is None:
        records, total = [], 0
    else:
        records, total = repository.list(
            page=page,
            limit=limit,
            calculation_type=calculation_type,
            sort_order=sort_order,
        )

    payload = {
        "success": True,
        "data": {
            "history": [record.to_dict() for record in records],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": (total + limit - 1) // limit,
            },
        },
    }
    return jsonify(payload), HTTPStatus.OK


@blueprint.get("/statistics")
def history_statistics() -> tuple[Any, int]:
    repository = get_repository()
    if repository is None:
        statistics = {"totalCalculations": 0, "recentCalculations": 0, "byType": {}}
    else:
        statistics = repository.statistics()
    return jsonify({"success": True, "data": statistics}), HTTPStatus.OK


@blueprint.get("/<string:record_id>")
def get_history_entry(record_id: str) -> tuple[Any, int]:
    repository = get_repository()
    if repository is None:
        return _history_disabled()
    try:
        record = repository.get(record_id)
    except KeyError:
        return _not_found(record_id)

    return jsonify({"success": True, "data": record.to_dict()}), HTTPStatus.OK


@blueprint.delete("/<string:record_id>")
def delete_history_entry(record_id: str) -> tuple[Any, int]:
    repository = get_repository()
    if repository is None:
        return _history_disabled()
    try:
        repository.delete(record_id)
    except KeyError:
        return _not_found(record_id)

    return (
        jsonify({"success": True, "message": "Calculation deleted", "data": {"id": record_id}}),
        HTTPStatus.OK,
    )


@blueprint.get("/<string:record_id>/csv")
def download_history_csv(record_id: str) -> Response | tuple[Any, int]:
    repository = get_repository()
    if repository is None:
        return _history_disabled()
    try:
        record = repository.get(record_id)
    except KeyError:
        return _not_found(record_id)

    response = Response(render_csv(record), mimetype="text/csv; charset=utf-8")
    response.headers["Content-Disposition"] = f"attachment; filename=contacalc-{record_id}.csv"
    return response


@blueprint.get("/<string:record_id>/pdf")
def download_history_pdf(record_id: str) -> Response | tuple[Any, int]:
    repository = get_repository()
    if repository is None:
        return _history_disabled()
    try:
        record = repository.get(record_id)
    except KeyError:
        return _not_found(record_id)

    response = Response(render_pdf(record), mimetype="application/pdf")
    response.headers["Content-Disposition"] = f"attachment; filename=contacalc-{record_id}.pdf"
    return response


__all__ = ["blueprint", "get_repository"]
