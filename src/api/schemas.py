# src/api/schemas.py

"""Request body model for the lookup endpoint."""

from pydantic import BaseModel, ConfigDict, Field


class LookupRequest(BaseModel):
    """JSON body accepted by ``POST /barcode-lookup``.

    Field names follow the web client (``productName`` in camelCase);
    unknown keys are ignored and numeric barcodes are read as strings.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    barcode: str | None = None
    action: str | None = None
    product_name: str | None = Field(default=None, alias="productName")
    brand: str | None = None
    image: str | None = None
