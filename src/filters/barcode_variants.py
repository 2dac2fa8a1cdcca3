# src/filters/barcode_variants.py

"""UPC-A / EAN-13 variant expansion for scanned codes."""

import logging

logger = logging.getLogger("product_lookup.filters")


def barcode_variants(code: str) -> list[str]:
    """Return the candidate codes to try, original first.

    A 13-digit EAN with a leading zero is also tried as its 12-digit UPC-A
    form, and a 12-digit UPC-A as its zero-padded EAN-13 form.
    """
    variants = [code]
    if len(code) == 13 and code.isdigit() and code.startswith("0"):
        variants.append(code[1:])
    elif len(code) == 12 and code.isdigit():
        variants.append("0" + code)

    logger.debug("Variants for %s: %s", code, variants)
    return variants
