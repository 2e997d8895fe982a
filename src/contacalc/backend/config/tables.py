"""Configuration loader wrapping the shared schema models."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .schema import (
    INSS_POLICIES,
    AnexoConfig,
    ConfigurationError,
    DeductionBracket,
    InssConfig,
    InssPolicy,
    IrrfConfig,
    LucroPresumidoTables,
    PayrollTables,
    RateBracket,
    SimplesNacionalTables,
    TaxShare,
    TaxTables,
)

CONFIG_DIRECTORY = Path(__file__).resolve().parent / "data"
TABLES_FILE = CONFIG_DIRECTORY / "tables.yaml"


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration file must define a mapping at the top level")
    return data


@lru_cache(maxsize=1)
def load_tax_tables() -> TaxTables:
    """Load and cache the tax tables used by the Brazilian calculators."""

    if not TABLES_FILE.exists():
        raise FileNotFoundError(f"Tax tables missing: {TABLES_FILE.name}")

    raw_tables = _load_yaml(TABLES_FILE)

    try:
        return TaxTables.model_validate(raw_tables)
    except ValidationError as error:
        raise ConfigurationError(f"Tax tables validation failed: {error}") from error


def resolve_inss_policy(value: str | None, tables: TaxTables | None = None) -> InssPolicy:
    """Return the INSS policy named by ``value`` or the configured default."""

    if value is None or not value.strip():
        return (tables or load_tax_tables()).payroll.inss.default_policy

    normalised = value.strip().lower()
    if normalised not in INSS_POLICIES:
        allowed = ", ".join(INSS_POLICIES)
        raise ConfigurationError(f"Unknown INSS policy '{value}' (expected one of {allowed})")
    return normalised  # type: ignore[return-value]


__all__ = [
    "AnexoConfig",
    "CONFIG_DIRECTORY",
    "ConfigurationError",
    "DeductionBracket",
    "INSS_POLICIES",
    "InssConfig",
    "InssPolicy",
    "IrrfConfig",
    "LucroPresumidoTables",
    "PayrollTables",
    "RateBracket",
    "SimplesNacionalTables",
    "TABLES_FILE",
    "TaxShare",
    "TaxTables",
    "load_tax_tables",
    "resolve_inss_policy",
]
