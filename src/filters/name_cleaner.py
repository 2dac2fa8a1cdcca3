# src/filters/name_cleaner.py

"""Presentation cleanup for provider names and descriptions."""

import logging
import re

from bs4 import BeautifulSoup

from src.config.settings import Settings
from src.models.product import ProductRecord

logger = logging.getLogger("product_lookup.filters")

_PARENTHETICAL = re.compile(r"\([^)]*\)")
_HTML_TAG = re.compile(r"</?[a-zA-Z][^<>]*>")


def clean_name(name: str | None) -> str:
    """Shorten a listing title to the bare product name.

    Keeps the text before the first ``" - "`` or ``" | "``, drops every
    parenthetical group and cuts at a ``" size "`` marker.
    """
    cleaned = name or Settings.DEFAULT_NAME
    cleaned = cleaned.split(" - ")[0]
    cleaned = cleaned.split(" | ")[0]
    cleaned = _PARENTHETICAL.sub("", cleaned).strip()

    size_index = cleaned.lower().find(" size ")
    if size_index > 0:
        cleaned = cleaned[:size_index].strip()
    return cleaned or Settings.DEFAULT_NAME


def _strip_markup(text: str) -> str:
    """Flatten HTML some providers embed in descriptions."""
    if not _HTML_TAG.search(text):
        return text
    return BeautifulSoup(text, "lxml").get_text(" ", strip=True)


def clean_description(
    description: str | None, name: str | None,
) -> str:
    """Use the description (or the name) truncated for display."""
    text = _strip_markup(description or name or "")
    return text[: Settings.DESCRIPTION_MAX_LENGTH]


def finalize(record: ProductRecord) -> ProductRecord:
    """Apply name/description cleanup and placeholder defaults in place."""
    raw_name = record.name
    record.description = clean_description(record.description, raw_name)
    record.name = clean_name(raw_name)
    record.brand = record.brand or Settings.UNKNOWN_BRAND
    record.category = record.category or Settings.DEFAULT_CATEGORY

    if record.name != raw_name:
        logger.debug("Cleaned name '%s' -> '%s'", raw_name, record.name)
    return record
