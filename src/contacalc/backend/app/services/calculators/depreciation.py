"""Asset depreciation calculator."""

from __future__ import annotations

from typing import Any

from contacalc.backend.app.localization import Translator
from contacalc.backend.app.models import DepreciationParameters

from .utils import breakdown_item, ensure_finite


def calculate_depreciation(
    params: DepreciationParameters, translator: Translator
) -> dict[str, Any]:
    """Return annual and accumulated depreciation over the useful life.

    Methods other than straight line use a single-year double-declining
    figure extended over the whole life, which is only an approximation.
    """

    if params.is_straight_line:
        annual = (params.cost - params.salvage_value) / params.useful_life
        formula = "D = (Cost - Salvage) / Life"
    else:
        annual = params.cost * 2 / params.useful_life
        formula = "D = Cost × 2 / Life"

    total_depreciation = annual * params.useful_life
    book_value = params.cost - total_depreciation

    recommendations: list[str] = []
    if not params.is_straight_line:
        recommendations.append(translator("recommendations.depreciation.approximation"))

    return {
        "total": ensure_finite(total_depreciation, "total"),
        "breakdown": [
            breakdown_item("annual_depreciation", annual, translator),
            breakdown_item("total_depreciation", total_depreciation, translator),
            breakdown_item("book_value", book_value, translator),
        ],
        "recommendations": recommendations,
        "formula": formula,
    }


__all__ = ["calculate_depreciation"]
