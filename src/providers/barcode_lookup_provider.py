# src/providers/barcode_lookup_provider.py

"""Provider for the paid barcodelookup.com v3 API (last resort)."""

from src.models.product import ProductRecord
from src.providers.base_provider import BaseProvider


class BarcodeLookupProvider(BaseProvider):
    """Provider for the paid barcodelookup.com v3 API."""

    ENDPOINT = "https://api.barcodelookup.com/v3/products"

    def __init__(self) -> None:
        super().__init__("barcodelookup")

    @property
    def configured(self) -> bool:
        """True when ``BARCODELOOKUP_KEY`` is set."""
        return bool(self.settings.BARCODELOOKUP_KEY)

    def lookup(self, code: str) -> ProductRecord | None:
        """Query by barcode; requires ``BARCODELOOKUP_KEY``."""
        api_key = self.settings.BARCODELOOKUP_KEY
        if not api_key:
            self.logger.debug(
                "[%s] No API key, skipping %s",
                self.source_name,
                code,
            )
            return None

        data = self._fetch_json(
            self.ENDPOINT,
            params={
                "barcode": code,
                "formatted": "y",
                "key": api_key,
            },
        )
        if not data or not data.get("products"):
            return None

        product = data["products"][0]
        images = product.get("images") or []
        return ProductRecord(
            name=product.get("title") or "",
            brand=product.get("brand") or "",
            description=product.get("description") or "",
            category=product.get("category") or "",
            image=images[0] if images else None,
            source="barcodelookup",
        )
