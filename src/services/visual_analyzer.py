# src/services/visual_analyzer.py

"""Photo-based product identification with a fresh image re-search."""

import asyncio
import logging
from typing import Any

from src.config.settings import Settings
from src.filters.name_cleaner import clean_name
from src.models.product import VisualProduct
from src.services.image_service import ImageService
from src.services.vision_client import VisionClient

logger = logging.getLogger("product_lookup.visual")


def _text(analysis: dict[str, Any], key: str) -> str:
    """Read a string field from the model answer."""
    value = analysis.get(key)
    return str(value).strip() if value else ""


class VisualAnalyzer:
    """Turns an uploaded photo into a product with a searched image."""

    def __init__(
        self,
        vision: VisionClient | None = None,
        images: ImageService | None = None,
    ) -> None:
        self.vision = vision or VisionClient()
        self.images = images or ImageService()

    @staticmethod
    def precision_query(product: VisualProduct) -> str | None:
        """``"<reference_code> <brand or name>"`` when a code was read."""
        if not product.reference_code:
            return None
        anchor = product.brand or product.name
        return f"{product.reference_code} {anchor}".strip()

    @staticmethod
    def fallback_query(product: VisualProduct) -> str:
        """Name, brand, color and gender, truncated for the search API."""
        parts = [
            product.name,
            product.brand,
            product.color,
            product.gender,
        ]
        query = " ".join(p for p in parts if p)
        return query[: Settings.VISUAL_QUERY_MAX_LENGTH]

    def _find_image(self, product: VisualProduct) -> str | None:
        """Two-stage search: reference code first, descriptive fallback second."""
        precision = self.precision_query(product)
        if precision:
            image = self.images.search(precision)
            if image:
                logger.info("Precision image hit for '%s'", precision)
                return image

        fallback = self.fallback_query(product)
        if not fallback:
            return None
        image = self.images.search(fallback)
        if image:
            logger.info("Fallback image hit for '%s'", fallback)
        return image

    async def analyze(self, data_url: str) -> VisualProduct:
        """Identify the photographed product; raises ``VisionError``."""
        analysis = await asyncio.to_thread(
            self.vision.analyze_image, data_url
        )

        product = VisualProduct(
            name=_text(analysis, "name"),
            brand=_text(analysis, "brand"),
            description=_text(analysis, "description"),
            category=_text(analysis, "category"),
            image=None,
            source="vision_analysis",
            color=_text(analysis, "color"),
            material=_text(analysis, "material"),
            gender=_text(analysis, "gender"),
            season=_text(analysis, "season"),
            reference_code=_text(analysis, "reference_code"),
        )

        # The model's own image reference is never trusted
        product.image = await asyncio.to_thread(self._find_image, product)

        product.name = clean_name(product.name)
        product.brand = product.brand or Settings.UNKNOWN_BRAND
        product.category = product.category or Settings.DEFAULT_CATEGORY
        product.description = (
            product.description or product.name
        )[: Settings.DESCRIPTION_MAX_LENGTH]
        return product
