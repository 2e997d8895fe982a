"""Shared translation helpers bridging backend services and static catalogues."""

from .catalog import Translator, available_locales, get_translator, normalise_locale

__all__ = ["Translator", "available_locales", "get_translator", "normalise_locale"]
