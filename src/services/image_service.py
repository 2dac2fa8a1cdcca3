# src/services/image_service.py

"""Best-effort product image validation and keyword re-search."""

import logging

from src.config.settings import Settings
from src.models.product import ProductRecord
from src.providers.google_images_provider import GoogleImagesProvider

logger = logging.getLogger("product_lookup.images")


class ImageService:
    """Checks provider image URLs and replaces dead ones."""

    def __init__(
        self, searcher: GoogleImagesProvider | None = None,
    ) -> None:
        self.searcher = searcher or GoogleImagesProvider()

    @property
    def configured(self) -> bool:
        """True when keyword image search is available."""
        return self.searcher.configured

    def validate(self, url: str | None) -> bool:
        """HEAD the URL; only a 2xx answer counts as a usable image."""
        if not url:
            return False
        try:
            resp = self.searcher.session.head(
                url,
                timeout=Settings.REQUEST_TIMEOUT,
                allow_redirects=True,
            )
        except Exception as exc:
            logger.info("Image check failed for %s: %s", url, exc)
            return False
        return 200 <= resp.status_code < 300

    @staticmethod
    def build_query(name: str, brand: str | None = None) -> str:
        """Compose ``"<brand> <name>"`` for an image search."""
        query = name
        if brand and brand not in (
            Settings.UNKNOWN_BRAND,
            Settings.SEARCH_BRAND,
        ):
            query = f"{brand} {name}"
        return query.split(" - ")[0][: Settings.IMAGE_QUERY_MAX_LENGTH]

    def search(self, query: str) -> str | None:
        """Return the first image link for *query*."""
        return self.searcher.search_image(query)

    def repair(self, record: ProductRecord) -> ProductRecord:
        """Keep a valid image, otherwise re-search or clear it."""
        if self.validate(record.image):
            return record

        logger.info(
            "Image invalid for '%s', trying fallback search",
            record.name,
        )
        query = self.build_query(record.name or "", record.brand)
        fallback = self.search(query) if query else None
        if fallback and fallback != record.image:
            record.image = fallback
            record.source = (
                f"{record.source} + {Settings.IMAGE_FALLBACK_TAG}"
            )
        else:
            record.image = None
        return record
