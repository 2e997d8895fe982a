#!/usr/bin/env python3
"""Collect baseline timings for every ContaCalc calculation type."""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from time import perf_counter

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from contacalc.backend.app.services.calculation_service import calculate  # noqa: E402

SAMPLE_PAYLOADS = {
    "SIMPLE_INTEREST": {"principal": 1000, "rate": 5, "time": 2},
    "COMPOUND_INTEREST": {"principal": 1000, "rate": 10, "time": 5, "compound": 12},
    "LOAN_PAYMENT": {"principal": 50000, "rate": 12, "time": 5},
    "INVESTMENT_RETURN": {"initialValue": 10000, "finalValue": 16000, "time": 4},
    "TAX_CALCULATION": {"income": 85000, "taxRate": 27.5, "deductions": 12000},
    "DEPRECIATION": {"cost": 120000, "salvageValue": 20000, "usefulLife": 10},
    "SIMPLES_NACIONAL": {"revenue": 80000, "anexo": "anexo3"},
    "FOLHA_PAGAMENTO": {"salario": 5500, "dependentes": 2, "valeTransporte": True},
    "LUCRO_PRESUMIDO": {"revenue": 250000, "atividade": "servicos", "despesas": 200000},
}


def measure(calculation_type: str, parameters: dict, iterations: int) -> dict[str, float]:
    """Return timing statistics for repeated calculations of one type."""

    payload = {"type": calculation_type, "parameters": parameters}
    calculate(payload)  # Warm cache
    start = perf_counter()
    for _ in range(iterations):
        calculate(payload)
    elapsed = perf_counter() - start
    return {
        "iterations": iterations,
        "total_ms": elapsed * 1000,
        "average_ms": (elapsed / iterations) * 1000,
    }


def main() -> None:
    iterations = int(os.getenv("CONTACALC_PROFILE_ITERATIONS", "200"))
    report = {
        calculation_type: measure(calculation_type, parameters, iterations)
        for calculation_type, parameters in SAMPLE_PAYLOADS.items()
    }
    print(json.dumps(report, indent=2, sort_keys=True))


if __name__ == "__main__":
    main()
