# src/services/lookup_orchestrator.py

"""Orchestrates the sequential barcode provider cascade."""

import asyncio
import importlib
import logging
from dataclasses import dataclass, field
from typing import Any

from src.config.settings import Settings
from src.filters.barcode_variants import barcode_variants
from src.filters.name_cleaner import finalize
from src.filters.product_validator import ProductValidator
from src.models.product import ProductRecord
from src.services.image_service import ImageService
from src.services.vision_client import VisionClient

logger = logging.getLogger("product_lookup.orchestrator")


@dataclass
class LookupResult:
    """Outcome of resolving one barcode."""

    barcode: str
    record: ProductRecord | None = None
    attempts: list[str] = field(
        default_factory=lambda: list[str]()
    )
    used_ai_fallback: bool = False

    @property
    def found(self) -> bool:
        """True when any provider (or the model) produced a record."""
        return self.record is not None


def _load_provider_class(dotted_path: str) -> type[Any]:
    """Dynamically import a provider class from its dotted module path."""
    module_path, class_name = dotted_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    cls: type[Any] = getattr(module, class_name)
    return cls


class LookupOrchestrator:
    """Coordinates provider attempts, AI fallback and post-processing."""

    def __init__(
        self,
        vision: VisionClient | None = None,
        images: ImageService | None = None,
    ) -> None:
        self.settings = Settings()
        self.vision = vision or VisionClient()
        self.images = images or ImageService()

    # ── Private helpers ──────────────────────────────────

    @staticmethod
    def _build_providers(
        sources: list[dict[str, str]],
    ) -> list[tuple[str, Any]]:
        """Instantiate the providers of *sources* in registry order."""
        return [
            (src["id"], _load_provider_class(src["provider"])())
            for src in sources
        ]

    async def _run_cascade(
        self,
        barcode: str,
        sources: list[dict[str, str]],
        result: LookupResult,
    ) -> ProductRecord | None:
        """Try every variant against every provider, stopping at the first hit."""
        providers = self._build_providers(sources)
        try:
            for code in barcode_variants(barcode):
                for provider_id, provider in providers:
                    if provider.ORIGINAL_CODE_ONLY and code != barcode:
                        continue
                    result.attempts.append(f"{provider_id}:{code}")
                    record: ProductRecord | None = await asyncio.to_thread(
                        provider.attempt, code
                    )
                    if record is not None:
                        logger.info(
                            "Resolved %s via %s (code %s) after %d attempts",
                            barcode,
                            provider_id,
                            code,
                            len(result.attempts),
                        )
                        return record
            return None
        finally:
            for provider_id, provider in providers:
                try:
                    provider.close()
                except Exception as exc:
                    logger.debug(
                        "Closing %s session failed: %s", provider_id, exc
                    )

    async def _ai_fallback(self, barcode: str) -> ProductRecord | None:
        """Ask the vision model to guess the product from the digits."""
        guess = await asyncio.to_thread(
            self.vision.guess_from_barcode, barcode
        )
        if guess is None or not ProductValidator.accept_guess(guess):
            return None
        return ProductRecord(
            name=str(guess["name"]),
            brand=str(guess.get("brand") or ""),
            description=str(guess.get("description") or ""),
            category=str(guess.get("category") or ""),
            image=None,
            source="ai_guess",
        )

    # ── Entry point ──────────────────────────────────────

    async def lookup(
        self,
        barcode: str,
        sources: list[dict[str, str]] | None = None,
    ) -> LookupResult:
        """Resolve *barcode* to a cleaned product record.

        Providers run strictly one after another. The model is consulted
        only when every provider has missed on every variant, and the
        image check plus name cleanup run on whichever record wins.
        """
        if sources is None:
            sources = self.settings.AVAILABLE_PROVIDERS
        result = LookupResult(barcode=barcode)

        record = await self._run_cascade(barcode, sources, result)
        if record is None:
            logger.info(
                "All providers missed %s (%d attempts), asking the model",
                barcode,
                len(result.attempts),
            )
            result.used_ai_fallback = True
            record = await self._ai_fallback(barcode)

        if record is None:
            logger.warning("Product not found for barcode %s", barcode)
            return result

        record = await asyncio.to_thread(self.images.repair, record)
        result.record = finalize(record)
        return result
