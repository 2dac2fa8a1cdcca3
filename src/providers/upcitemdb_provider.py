# src/providers/upcitemdb_provider.py

"""Provider for the UPCitemdb trial lookup API (free, 100 requests/day)."""

from src.models.product import ProductRecord
from src.providers.base_provider import BaseProvider


class UpcItemDbProvider(BaseProvider):
    """Provider for the UPCitemdb trial lookup API."""

    BASE_URL = "https://api.upcitemdb.com/prod/trial"

    def __init__(self) -> None:
        super().__init__("upcitemdb")

    def lookup(self, code: str) -> ProductRecord | None:
        """Look up a UPC/EAN and map the first item."""
        data = self._fetch_json(
            f"{self.BASE_URL}/lookup", params={"upc": code}
        )
        if not data or not data.get("items"):
            return None

        item = data["items"][0]
        images = item.get("images") or []
        return ProductRecord(
            name=item.get("title") or "",
            brand=item.get("brand") or "",
            description=item.get("description") or "",
            category=item.get("category") or "",
            image=images[0] if images else None,
            source="upcitemdb",
        )
