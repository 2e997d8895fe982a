"""Utilities for validating the tax tables and surfacing issues."""

from __future__ import annotations

import argparse
from collections import Counter
from typing import Mapping, Sequence

from .tables import (
    ConfigurationError,
    LucroPresumidoTables,
    PayrollTables,
    RateBracket,
    SimplesNacionalTables,
    TaxTables,
    load_tax_tables,
)

_SHARE_TOLERANCE = 1e-9


def _format_scope(scope: str, message: str) -> str:
    return f"{scope}: {message}"


def _validate_rate(scope: str, label: str, value: float) -> list[str]:
    if value < 0 or value > 1:
        return [_format_scope(scope, f"{label} rate {value} must be between 0 and 1")]
    return []


def _validate_brackets(scope: str, brackets: Sequence[RateBracket]) -> list[str]:
    errors: list[str] = []
    previous_rate: float | None = None

    for index, bracket in enumerate(brackets):
        errors.extend(_validate_rate(scope, f"bracket {index + 1}", bracket.rate))
        if previous_rate is not None and bracket.rate < previous_rate:
            errors.append(
                _format_scope(scope, f"bracket {index + 1} rate decreases from the previous one")
            )
        previous_rate = bracket.rate

    return errors


def _validate_payroll(payroll: PayrollTables) -> list[str]:
    errors: list[str] = []

    errors.extend(_validate_brackets("payroll.inss.brackets", payroll.inss.brackets))
    errors.extend(_validate_rate("payroll.inss", "flat", payroll.inss.flat_rate))
    errors.extend(_validate_brackets("payroll.irrf.brackets", payroll.irrf.brackets))
    errors.extend(
        _validate_rate("payroll", "transport voucher", payroll.transport_voucher_rate)
    )

    previous_deduction = -1.0
    for index, bracket in enumerate(payroll.irrf.brackets):
        if bracket.deduction < previous_deduction:
            errors.append(
                _format_scope(
                    "payroll.irrf.brackets",
                    f"bracket {index + 1} deduction decreases from the previous one",
                )
            )
        previous_deduction = bracket.deduction

    return errors


def _validate_simples(simples: SimplesNacionalTables) -> list[str]:
    errors: list[str] = []

    for code, anexo in simples.anexos.items():
        errors.extend(_validate_rate(f"simples_nacional.anexos.{code}", "combined", anexo.rate))

    duplicates = [
        key for key, count in Counter(share.key for share in simples.shares).items() if count > 1
    ]
    if duplicates:
        errors.append(
            _format_scope(
                "simples_nacional.shares",
                f"duplicate share keys detected: {sorted(duplicates)}",
            )
        )

    for share in simples.shares:
        errors.extend(_validate_rate("simples_nacional.shares", share.key, share.share))

    total_share = sum(share.share for share in simples.shares)
    if abs(total_share - 1.0) > _SHARE_TOLERANCE:
        errors.append(
            _format_scope(
                "simples_nacional.shares",
                f"shares must add up to 1 (found {total_share:.4f})",
            )
        )

    return errors


def _validate_rates(scope: str, rates: Mapping[str, float]) -> list[str]:
    errors: list[str] = []
    for key, rate in rates.items():
        errors.extend(_validate_rate(scope, f"'{key}'", rate))
    return errors


def _validate_lucro_presumido(lucro: LucroPresumidoTables) -> list[str]:
    errors: list[str] = []

    errors.extend(
        _validate_rates("lucro_presumido.presumption_rates", lucro.presumption_rates)
    )
    errors.extend(
        _validate_rates(
            "lucro_presumido",
            {
                "irpj": lucro.irpj_rate,
                "csll": lucro.csll_rate,
                "pis": lucro.pis_rate,
                "cofins": lucro.cofins_rate,
            },
        )
    )

    return errors


def validate_tax_tables(tables: TaxTables) -> list[str]:
    """Return a list of validation issues for the provided tables."""

    errors: list[str] = []

    errors.extend(_validate_payroll(tables.payroll))
    errors.extend(_validate_simples(tables.simples_nacional))
    errors.extend(_validate_lucro_presumido(tables.lucro_presumido))

    return errors


def _build_argument_parser() -> argparse.ArgumentParser:
    return argparse.ArgumentParser(
        description="Validate the configured tax tables and report issues helpful to contributors."
    )


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for running validations from the command line."""

    parser = _build_argument_parser()
    parser.parse_args(argv)

    try:
        tables = load_tax_tables()
    except (FileNotFoundError, ConfigurationError) as error:
        print(f"failed to load tax tables: {error}")
        return 1

    issues = validate_tax_tables(tables)
    if issues:
        print(f"[{tables.year}] {len(issues)} issue(s) detected:")
        for issue in issues:
            print(f"  - {issue}")
        return 1

    print(f"[{tables.year}] OK")
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    raise SystemExit(main())
