# src/filters/product_validator.py

"""Product validation: drop model answers without an identifiable product."""

import logging
from typing import Any

logger = logging.getLogger("product_lookup.filters")


class ProductValidator:
    """Decide whether a guessed product payload is usable."""

    @staticmethod
    def accept_guess(payload: Any) -> bool:
        """Accept only a mapping carrying a non-empty ``name``."""
        if not isinstance(payload, dict):
            logger.debug(
                "Dropped guess with non-object payload (%s)",
                type(payload).__name__,
            )
            return False

        name = payload.get("name")
        if not isinstance(name, str) or not name.strip():
            logger.debug(
                "Dropped guess without a name (keys=%s)",
                sorted(payload),
            )
            return False
        return True
