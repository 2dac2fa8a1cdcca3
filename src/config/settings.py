# src/config/settings.py

"""Central configuration for the product_lookup service."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the product_lookup service."""

    # --- HTTP ---
    REQUEST_TIMEOUT: int = 15           # Seconds before a provider call times out
    HEALTH_TIMEOUT: int = 10            # Seconds per provider health check
    HEALTH_SLOW_MS: float = 5000.0      # Checks slower than this are "slow"
    # Known-good product used to exercise each provider end to end
    HEALTH_BARCODE: str = os.getenv("HEALTH_BARCODE", "3017620422003")
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": "application/json, text/plain, */*",
        "Accept-Language": "en-US,en;q=0.9",
    }

    # --- API keys (all optional; a missing key disables its provider) ---
    GOOGLE_API_KEY: str | None = os.getenv("GOOGLE_API_KEY")
    GOOGLE_SEARCH_ENGINE_ID: str | None = os.getenv(
        "GOOGLE_SEARCH_ENGINE_ID"
    )
    BARCODELOOKUP_KEY: str | None = os.getenv("BARCODELOOKUP_KEY")

    # --- Vision model (OpenAI-compatible chat completions) ---
    LLM_API_KEY: str | None = os.getenv("LLM_API_KEY")
    LLM_BASE_URL: str = os.getenv(
        "LLM_BASE_URL", "https://openrouter.ai/api/v1"
    )
    LLM_MODEL: str = os.getenv(
        "LLM_MODEL", "google/gemini-2.0-flash-001"
    )
    LLM_TIMEOUT: float = float(os.getenv("LLM_TIMEOUT", "60"))

    # --- Post-processing ---
    DESCRIPTION_MAX_LENGTH: int = 200
    IMAGE_QUERY_MAX_LENGTH: int = 50
    VISUAL_QUERY_MAX_LENGTH: int = 100
    DEFAULT_NAME: str = "Unnamed product"
    UNKNOWN_BRAND: str = "Unknown"
    SEARCH_BRAND: str = "Unknown (Google)"
    DEFAULT_CATEGORY: str = "General"
    IMAGE_FALLBACK_TAG: str = "google_image_fallback"

    # --- Server ---
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))
    CORS_ORIGINS: list[str] = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "*").split(",")
        if origin.strip()
    ]

    # --- Logging ---
    CONSOLE_LOG_LEVEL: str = os.getenv("CONSOLE_LOG_LEVEL", "WARNING")

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    LOGS_DIR: Path = BASE_DIR / "logs"

    # --- Providers (registry order is cascade order) ---
    AVAILABLE_PROVIDERS: list[dict[str, str]] = [
        {
            "id": "upcitemdb",
            "label": "UPCitemdb",
            "provider": "src.providers.upcitemdb_provider.UpcItemDbProvider",
        },
        {
            "id": "openproductsfacts",
            "label": "Open Products Facts",
            "provider": "src.providers.open_facts_provider.OpenProductsFactsProvider",
        },
        {
            "id": "openfoodfacts",
            "label": "Open Food Facts",
            "provider": "src.providers.open_facts_provider.OpenFoodFactsProvider",
        },
        {
            "id": "google_image_search",
            "label": "Google Images",
            "provider": "src.providers.google_images_provider.GoogleImagesProvider",
        },
        {
            "id": "barcodelookup",
            "label": "Barcode Lookup",
            "provider": "src.providers.barcode_lookup_provider.BarcodeLookupProvider",
        },
    ]
