# src/models/product.py

"""Product record data models for inter-module data flow."""

from dataclasses import asdict, dataclass


@dataclass
class ProductRecord:
    """A displayable product resolved from a barcode or photo."""

    name: str
    brand: str = ""
    description: str = ""
    category: str = ""
    image: str | None = None
    source: str = ""

    def to_dict(self) -> dict[str, object]:
        """Serialise to the JSON response shape."""
        return asdict(self)


@dataclass
class VisualProduct(ProductRecord):
    """A product identified from a photo by the vision model."""

    color: str = ""
    material: str = ""
    gender: str = ""
    season: str = ""
    reference_code: str = ""
