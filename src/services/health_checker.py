# src/services/health_checker.py

"""End-to-end provider health checks against a known-good barcode."""

import asyncio
import importlib
import logging
import time
from dataclasses import dataclass

from src.config.settings import Settings
from src.providers.base_provider import BaseProvider

logger = logging.getLogger("product_lookup.health")


@dataclass
class HealthResult:
    """Result of a single provider health check."""

    provider_id: str
    status: str  # "ok", "slow", "miss", "unconfigured", "down"
    latency_ms: float
    message: str


def _load_provider(dotted_path: str) -> BaseProvider:
    """Instantiate a provider from its registry path."""
    module_path, class_name = dotted_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    provider: BaseProvider = getattr(module, class_name)()
    return provider


def _classify(
    provider: BaseProvider, code: str, elapsed_ms: float, record_name: str | None,
) -> tuple[str, str]:
    """Map the outcome of one lookup to ``(status, message)``."""
    status_code = provider.last_status
    if status_code is None:
        return "down", (provider.last_error or "No response")[:80]
    # Barcode Lookup answers 404 for unknown codes
    if not 200 <= status_code < 300 and status_code != 404:
        return "down", f"HTTP {status_code}"
    if provider.last_error:
        return "down", provider.last_error[:80]
    if record_name is None:
        return "miss", f"Reachable, no record for {code}"
    if not record_name:
        return "down", "Record has no product name"
    if elapsed_ms > Settings.HEALTH_SLOW_MS:
        return "slow", f"High latency ({record_name[:40]})"
    return "ok", record_name[:80]


def check_provider(
    source: dict[str, str], code: str | None = None,
) -> HealthResult:
    """Resolve a known barcode through one provider and grade the answer."""
    provider_id = source["id"]
    code = code or Settings.HEALTH_BARCODE

    try:
        provider = _load_provider(source["provider"])
    except Exception as exc:
        return HealthResult(
            provider_id=provider_id,
            status="down",
            latency_ms=0.0,
            message=f"Failed to load provider: {exc}",
        )

    try:
        if not provider.configured:
            return HealthResult(
                provider_id=provider_id,
                status="unconfigured",
                latency_ms=0.0,
                message="Missing API key",
            )

        provider._request_timeout = Settings.HEALTH_TIMEOUT
        start = time.monotonic()
        try:
            record = provider.lookup(code)
        except Exception as exc:
            # The request went through but the payload did not map
            return HealthResult(
                provider_id=provider_id,
                status="down",
                latency_ms=(time.monotonic() - start) * 1000,
                message=f"Unexpected payload: {exc}"[:80],
            )
        elapsed_ms = (time.monotonic() - start) * 1000

        status, message = _classify(
            provider,
            code,
            elapsed_ms,
            None if record is None else record.name,
        )
        return HealthResult(
            provider_id=provider_id,
            status=status,
            latency_ms=elapsed_ms,
            message=message,
        )
    finally:
        provider.close()


class HealthChecker:
    """Runs the provider checks concurrently."""

    def __init__(self, code: str | None = None) -> None:
        self.sources = Settings.AVAILABLE_PROVIDERS
        self.code = code or Settings.HEALTH_BARCODE

    async def check_all(self) -> list[HealthResult]:
        """Check every registered provider in its own worker thread."""
        tasks = [
            asyncio.to_thread(check_provider, src, self.code)
            for src in self.sources
        ]
        results: list[HealthResult] = list(
            await asyncio.gather(*tasks)
        )
        for r in results:
            logger.info(
                "Health check %s (%s): %s (%.0fms) %s",
                r.provider_id,
                self.code,
                r.status,
                r.latency_ms,
                r.message,
            )
        return results
