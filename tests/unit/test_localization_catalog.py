"""Tests for the localisation catalogue helpers."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from contacalc.backend.app.localization import (
    available_locales,
    get_translator,
    normalise_locale,
)

_ROOT = Path(__file__).resolve().parents[2] / "src" / "contacalc" / "translations"


def _read_message(locale: str, key: str) -> str:
    payload = json.loads(_ROOT.joinpath(f"{locale}.json").read_text(encoding="utf-8"))
    return str(payload["messages"][key])


def test_available_locales_lists_catalogues() -> None:
    assert available_locales() == ("en", "pt")


def test_get_translator_loads_shared_catalogue() -> None:
    """The translator should pull labels from the shared JSON catalogue."""

    translator = get_translator("en")

    assert translator.locale == "en"
    assert translator("breakdown.principal") == _read_message("en", "breakdown.principal")


def test_get_translator_falls_back_to_default_locale() -> None:
    """Unknown locales should fall back to the Portuguese catalogue."""

    translator = get_translator("fr")

    assert translator.locale == "pt"
    assert translator("breakdown.principal") == _read_message("pt", "breakdown.principal")


def test_unknown_keys_are_returned_verbatim() -> None:
    assert get_translator("en")("breakdown.unknown") == "breakdown.unknown"


def test_format_interpolates_values() -> None:
    translator = get_translator("en")

    message = translator.format("recommendations.simples.rate", rate="6")

    assert "6" in message
    assert "{rate}" not in message


@pytest.mark.parametrize(
    ("requested", "expected"),
    [("en-US", "en"), ("EN_gb", "en"), ("pt-BR", "pt"), ("", "pt"), (None, "pt"), ("de", "pt")],
)
def test_normalise_locale(requested: str | None, expected: str) -> None:
    assert normalise_locale(requested) == expected


def test_catalogues_share_the_same_keys() -> None:
    pt = json.loads(_ROOT.joinpath("pt.json").read_text(encoding="utf-8"))["messages"]
    en = json.loads(_ROOT.joinpath("en.json").read_text(encoding="utf-8"))["messages"]

    assert set(pt) == set(en)
