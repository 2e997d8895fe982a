"""Utility helpers for calculator modules."""

from __future__ import annotations

import math
from typing import Any

from contacalc.backend.app.localization import Translator


def format_percentage(value: float) -> str:
    """Return a human-readable percentage label for the ``value`` ratio."""

    percentage = value * 100
    if float(int(percentage)) == percentage:
        return f"{int(percentage)}"
    return f"{percentage:.2f}".rstrip("0").rstrip(".")


def format_currency(value: float) -> str:
    """Return ``value`` as a Brazilian real amount with two decimals."""

    formatted = f"{value:,.2f}"
    return "R$ " + formatted.replace(",", "_").replace(".", ",").replace("_", ".")


def share_percentage(value: float, total: float) -> float | None:
    """Return ``value`` as a percentage of ``total`` or ``None`` for a zero total."""

    if total == 0:
        return None
    return value / total * 100


def ensure_finite(value: float, label: str) -> float:
    """Raise ``ArithmeticError`` when ``value`` is NaN or infinite."""

    if not math.isfinite(value):
        raise ArithmeticError(f"{label} is not a finite number")
    return value


def breakdown_item(
    key: str,
    value: float,
    translator: Translator,
    *,
    percentage: float | None = None,
) -> dict[str, Any]:
    """Build a breakdown entry labelled through the translation catalogue."""

    item: dict[str, Any] = {
        "key": key,
        "label": translator(f"breakdown.{key}"),
        "value": ensure_finite(value, key),
    }
    if percentage is not None:
        item["percentage"] = percentage
    return item


__all__ = [
    "breakdown_item",
    "ensure_finite",
    "format_currency",
    "format_percentage",
    "share_percentage",
]
