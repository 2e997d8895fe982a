#!/usr/bin/env python3
"""Validate translation catalogues against each other and the calculation types."""

from __future__ import annotations

import argparse
import json
import re
import sys
from collections import defaultdict
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = REPO_ROOT / "src"
TRANSLATIONS_DIR = SRC_DIR / "contacalc" / "translations"
BASE_LOCALE = "pt"

if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from contacalc.backend.app.models import PARAMETER_MODELS  # noqa: E402

PLACEHOLDER_PATTERN = re.compile(r"{\s*([a-zA-Z0-9_]+)\s*}")


class ValidationError(Exception):
    """Raised when validation detects unrecoverable issues."""


def _load_catalogues() -> dict[str, dict[str, str]]:
    if not TRANSLATIONS_DIR.is_dir():
        raise ValidationError(f"Missing translations directory: {TRANSLATIONS_DIR}")

    catalogues: dict[str, dict[str, str]] = {}
    for path in sorted(TRANSLATIONS_DIR.glob("*.json")):
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)

        messages = payload.get("messages") if isinstance(payload, dict) else None
        if not isinstance(messages, dict):
            raise ValidationError(f"Translation payload must define a 'messages' mapping: {path}")

        catalogues[path.stem] = {str(key): str(value) for key, value in messages.items()}

    if not catalogues:
        raise ValidationError("No translation catalogues discovered")

    return catalogues


def _placeholder_inconsistencies(catalogues: dict[str, dict[str, str]]) -> list[str]:
    placeholders: dict[str, dict[str, frozenset[str]]] = defaultdict(dict)
    for locale, messages in catalogues.items():
        for key, message in messages.items():
            placeholders[key][locale] = frozenset(PLACEHOLDER_PATTERN.findall(message))

    issues: list[str] = []
    for key, locale_map in sorted(placeholders.items()):
        if len(set(locale_map.values())) <= 1:
            continue
        details = ", ".join(
            f"{locale}={{{', '.join(sorted(values))}}}" for locale, values in sorted(locale_map.items())
        )
        issues.append(f"{key} placeholders differ: {details}")
    return issues


def _missing_keys(catalogues: dict[str, dict[str, str]]) -> list[str]:
    expected = set(catalogues.get(BASE_LOCALE, {}))
    issues: list[str] = []
    for locale, messages in sorted(catalogues.items()):
        missing = expected - set(messages)
        if missing:
            issues.append(
                f"Locale '{locale}' missing {len(missing)} keys: {', '.join(sorted(missing))}"
            )
    return issues


def _descriptor_keys() -> set[str]:
    keys: set[str] = set()
    for calculation_type, model in PARAMETER_MODELS.items():
        prefix = f"types.{calculation_type.value}"
        keys.update({f"{prefix}.name", f"{prefix}.description"})
        for field_name, field in model.model_fields.items():
            keys.add(f"{prefix}.parameters.{field.alias or field_name}")
    return keys


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.parse_args(argv)

    catalogues = _load_catalogues()
    base = catalogues.get(BASE_LOCALE, {})

    inconsistencies = _placeholder_inconsistencies(catalogues)
    missing = _missing_keys(catalogues)
    undocumented = sorted(_descriptor_keys() - set(base))

    for issue in inconsistencies:
        print(f"[placeholder] {issue}")
    for issue in missing:
        print(f"[missing] {issue}")
    for key in undocumented:
        print(f"[descriptor] '{BASE_LOCALE}' has no message for {key}")

    if inconsistencies or missing or undocumented:
        return 1

    print(f"{len(catalogues)} catalogue(s) OK")
    return 0


if __name__ == "__main__":
    sys.exit(main())
