"""Application factory for ContaCalc backend services."""

import logging
import os
from warnings import warn

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import BadRequest

from contacalc.backend.app.models import CalculatorError
from contacalc.backend.config.tables import TaxTables, load_tax_tables, resolve_inss_policy
from contacalc.backend.version import get_project_version

from .http import ProblemResponse, problem_response
from .routes import register_routes

logger = logging.getLogger(__name__)

HEALTH_ROUTES = {"health": "/health", "api_health": "/api/v1/calculator/health"}


def _parse_allowed_origins(raw: str | None) -> list[str]:
    """Split the comma separated allow-list into unique, sorted origins."""

    if not raw:
        return []
    return sorted({origin.strip() for origin in raw.split(",") if origin.strip()})


def _configure_cors(app: Flask, allowed_origins: list[str]) -> None:
    if not allowed_origins:
        warn(
            "CONTACALC_ALLOWED_ORIGINS is empty; cross-origin requests will be rejected.",
            stacklevel=2,
        )

    CORS(
        app,
        resources={r"/api/*": {"origins": allowed_origins}},
        supports_credentials=False,
        methods=["GET", "OPTIONS", "POST", "DELETE"],
        allow_headers=["Content-Type", "Accept-Language"],
    )


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(CalculatorError)
    def handle_calculator_error(error: CalculatorError):
        """Report calculation failures with their machine-readable code."""

        return ProblemResponse.from_error(error).to_response()

    @app.errorhandler(BadRequest)
    def handle_bad_request(error: BadRequest):
        """Return consistent JSON responses for malformed payloads."""

        message = error.description or "Invalid request"
        return problem_response("BAD_REQUEST", status=400, message=message).to_response()

    @app.errorhandler(ValueError)
    def handle_value_error(error: ValueError):
        """Gracefully surface request validation errors to clients."""

        return problem_response(
            "VALIDATION_ERROR", status=400, message=str(error)
        ).to_response()


def _register_health_check(app: Flask, tables: TaxTables) -> None:
    def health_check():
        """Simple health check endpoint for infrastructure monitoring."""

        return jsonify(
            {
                "status": "ok",
                "version": get_project_version(),
                "tables_year": tables.year,
                "inss_policy": app.config["INSS_POLICY"],
            }
        )

    for endpoint, path in HEALTH_ROUTES.items():
        app.add_url_rule(path, endpoint=endpoint, view_func=health_check, methods=["GET"])


def create_app() -> Flask:
    """Create and configure the Flask application instance.

    The tax tables are loaded eagerly so a broken ``tables.yaml`` or an unknown
    ``CONTACALC_INSS_POLICY`` fails at start-up rather than on the first request.
    """

    app = Flask(__name__)

    tables = load_tax_tables()
    app.config["INSS_POLICY"] = resolve_inss_policy(
        os.getenv("CONTACALC_INSS_POLICY"), tables
    )
    logger.debug(
        "Loaded %s tax tables with INSS policy '%s'", tables.year, app.config["INSS_POLICY"]
    )

    _configure_cors(app, _parse_allowed_origins(os.getenv("CONTACALC_ALLOWED_ORIGINS")))
    register_routes(app)
    _register_health_check(app, tables)
    _register_error_handlers(app)

    return app
