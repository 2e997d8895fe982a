"""Error envelope shared by every Flask blueprint."""

from __future__ import annotations

from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Mapping

from flask import jsonify

from contacalc.backend.app.models import CalculatorError


@dataclass(frozen=True)
class ProblemResponse:
    """Failure payload: ``{"success": false, "code": ..., "message": ...}``.

    ``extra`` carries code-specific fields such as the missing parameter names
    and is merged into the top level of the payload.
    """

    code: str
    status: int = HTTPStatus.BAD_REQUEST
    message: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_error(cls, error: CalculatorError) -> ProblemResponse:
        return cls(code=error.code, status=error.status, message=str(error), extra=error.extra())

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": False, "code": self.code}
        if self.message:
            payload["message"] = self.message
        payload.update(self.extra)
        return payload

    def to_response(self) -> tuple[Any, int]:
        return jsonify(self.as_dict()), int(self.status)


def problem_response(
    code: str,
    *,
    status: int,
    message: str | None = None,
    **extra: Any,
) -> ProblemResponse:
    """Build a :class:`ProblemResponse` with keyword extras."""

    return ProblemResponse(code=code, status=status, message=message, extra=extra)


__all__ = ["ProblemResponse", "problem_response"]
