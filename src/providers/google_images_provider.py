# src/providers/google_images_provider.py

"""Provider backed by the Google Custom Search JSON API (image mode)."""

from typing import Any

from src.models.product import ProductRecord
from src.providers.base_provider import BaseProvider


class GoogleImagesProvider(BaseProvider):
    """Keyword image search; matches codes that appear in image alt text."""

    ORIGINAL_CODE_ONLY = True
    ENDPOINT = "https://www.googleapis.com/customsearch/v1"

    def __init__(self) -> None:
        super().__init__("google_image_search")

    @property
    def configured(self) -> bool:
        """True when both the API key and engine id are set."""
        return bool(
            self.settings.GOOGLE_API_KEY
            and self.settings.GOOGLE_SEARCH_ENGINE_ID
        )

    def _first_item(self, query: str) -> dict[str, Any] | None:
        """Run a one-result image search and return the first item."""
        if not self.configured:
            self.logger.debug(
                "[%s] Not configured, skipping '%s'",
                self.source_name,
                query,
            )
            return None

        data = self._fetch_json(
            self.ENDPOINT,
            params={
                "key": self.settings.GOOGLE_API_KEY or "",
                "cx": self.settings.GOOGLE_SEARCH_ENGINE_ID or "",
                "q": query,
                "searchType": "image",
                "num": "1",
            },
        )
        if not data or not data.get("items"):
            return None
        item: dict[str, Any] = data["items"][0]
        return item

    def search_image(self, query: str) -> str | None:
        """Return the first image link for a keyword query."""
        item = self._first_item(query)
        if item is None:
            return None
        return item.get("link") or None

    def lookup(self, code: str) -> ProductRecord | None:
        """Search the bare code and treat the top image as the product."""
        item = self._first_item(code)
        if item is None:
            return None

        context = item.get("image") or {}
        return ProductRecord(
            name=item.get("title") or "",
            brand=self.settings.SEARCH_BRAND,
            description=self.first_of(
                item.get("snippet"), context.get("contextLink")
            ) or "",
            category=self.settings.DEFAULT_CATEGORY,
            image=item.get("link") or None,
            source="google_image_search",
        )
