# src/providers/open_facts_provider.py

"""Providers for the Open Products Facts and Open Food Facts databases."""

from typing import Any

from src.models.product import ProductRecord
from src.providers.base_provider import BaseProvider


class OpenFactsProvider(BaseProvider):
    """Shared v0 product API client for the Open*Facts family."""

    HOST = ""
    NAME_KEYS: tuple[str, ...] = ("product_name",)
    DESCRIPTION_KEYS: tuple[str, ...] = ("generic_name",)

    def _map_product(self, product: dict[str, Any]) -> ProductRecord:
        """Map an Open*Facts product object to a record."""
        return ProductRecord(
            name=self.first_of(
                *(product.get(k) for k in self.NAME_KEYS)
            ) or "",
            brand=product.get("brands") or "",
            description=self.first_of(
                *(product.get(k) for k in self.DESCRIPTION_KEYS)
            ) or "",
            category=product.get("categories") or "",
            image=self.first_of(
                product.get("image_url"),
                product.get("image_front_url"),
            ),
            source=self.source_name,
        )

    def lookup(self, code: str) -> ProductRecord | None:
        """Fetch ``/api/v0/product/<code>.json``; ``status == 1`` is a hit."""
        data = self._fetch_json(
            f"https://{self.HOST}/api/v0/product/{code}.json"
        )
        if not data or data.get("status") != 1:
            return None

        product = data.get("product")
        if not isinstance(product, dict):
            return None
        return self._map_product(product)


class OpenProductsFactsProvider(OpenFactsProvider):
    """Open Products Facts (non-food goods, unlimited)."""

    HOST = "world.openproductsfacts.org"
    NAME_KEYS = ("product_name", "product_name_en", "product_name_fr")

    def __init__(self) -> None:
        super().__init__("openproductsfacts")


class OpenFoodFactsProvider(OpenFactsProvider):
    """Open Food Facts (groceries, unlimited)."""

    HOST = "world.openfoodfacts.org"
    NAME_KEYS = ("product_name", "product_name_fr", "product_name_en")
    DESCRIPTION_KEYS = ("generic_name", "ingredients_text")

    def __init__(self) -> None:
        super().__init__("openfoodfacts")
