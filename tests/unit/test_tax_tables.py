"""Tests for loading and validating the tax tables."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from contacalc.backend.config import tables as tables_module
from contacalc.backend.config.tables import (
    ConfigurationError,
    InssConfig,
    load_tax_tables,
    resolve_inss_policy,
)


@pytest.fixture()
def isolated_tables(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Point the loader at a temporary file and reset the cache around the test."""

    path = tmp_path / "tables.yaml"
    monkeypatch.setattr(tables_module, "TABLES_FILE", path)
    load_tax_tables.cache_clear()
    yield path
    load_tax_tables.cache_clear()


def test_bundled_tables_load() -> None:
    tables = load_tax_tables()

    assert tables.year == 2023
    assert set(tables.simples_nacional.anexos) == {f"anexo{index}" for index in range(1, 6)}
    assert tables.lucro_presumido.default_activity == "servicos"
    assert load_tax_tables() is tables


@pytest.mark.parametrize(
    ("salary", "rate"),
    [(1320.00, 0.075), (1320.01, 0.09), (3856.94, 0.12), (3856.95, 0.14)],
)
def test_inss_bracket_upper_bounds_are_inclusive(salary: float, rate: float) -> None:
    assert load_tax_tables().payroll.inss.bracket_for(salary).rate == rate


def test_irrf_bracket_lookup_uses_open_final_bracket() -> None:
    bracket = load_tax_tables().payroll.irrf.bracket_for(1_000_000)

    assert bracket.upper_bound is None
    assert bracket.rate == 0.275


@pytest.mark.parametrize(
    ("value", "expected"),
    [(None, "bracket"), ("", "bracket"), (" FLAT_CAPPED ", "flat_capped"), ("bracket", "bracket")],
)
def test_resolve_inss_policy(value: str | None, expected: str) -> None:
    assert resolve_inss_policy(value) == expected


def test_resolve_inss_policy_rejects_unknown_values() -> None:
    with pytest.raises(ConfigurationError, match="progressive"):
        resolve_inss_policy("progressive")


def test_brackets_must_be_ascending() -> None:
    with pytest.raises(ValidationError, match="ascending"):
        InssConfig.model_validate(
            {
                "brackets": [
                    {"upper": 2000, "rate": 0.09},
                    {"upper": 1000, "rate": 0.075},
                    {"rate": 0.14},
                ],
                "flat_rate": 0.11,
                "flat_cap": 700,
            }
        )


def test_final_bracket_must_be_open() -> None:
    with pytest.raises(ValidationError, match="open upper bound"):
        InssConfig.model_validate(
            {"brackets": [{"upper": 1000, "rate": 0.075}], "flat_rate": 0.11, "flat_cap": 700}
        )


def test_invalid_yaml_content_raises_configuration_error(isolated_tables: Path) -> None:
    isolated_tables.write_text("year: 2023\npayroll: {}\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="validation failed"):
        load_tax_tables()


def test_non_mapping_yaml_raises_configuration_error(isolated_tables: Path) -> None:
    isolated_tables.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_tax_tables()


def test_missing_tables_file_is_reported(isolated_tables: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_tax_tables()
