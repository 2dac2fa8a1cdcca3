# src/providers/base_provider.py

"""Abstract base class for all barcode data providers."""

import logging
from abc import ABC, abstractmethod
from typing import Any

from curl_cffi import requests as curl_requests

from src.config.settings import Settings
from src.models.product import ProductRecord


class BaseProvider(ABC):
    """Abstract base class for all barcode data providers.

    A provider issues a single request per attempt and never retries;
    every failure is reported as "no match" so the cascade can move on.
    """

    # Web-search providers only make sense for the code as scanned
    ORIGINAL_CODE_ONLY: bool = False

    def __init__(self, source_name: str) -> None:
        self.source_name = source_name
        self.logger = logging.getLogger(
            f"product_lookup.{source_name}"
        )
        self.settings = Settings()
        self.session = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )
        self._request_timeout: int = (
            self.settings.REQUEST_TIMEOUT
        )
        # HTTP status of the most recent request; None after a transport error
        self.last_status: int | None = None
        self.last_error: str = ""

    @property
    def configured(self) -> bool:
        """True when every credential the provider needs is set."""
        return True

    def close(self) -> None:
        """Release the underlying HTTP session."""
        self.session.close()

    def _fetch_json(
        self,
        url: str,
        params: dict[str, str] | None = None,
    ) -> dict[str, Any] | None:
        """GET a JSON document; ``None`` on any network, status or parse error."""
        self.last_status = None
        self.last_error = ""
        try:
            resp = self.session.get(
                url,
                params=params,
                headers=self.settings.DEFAULT_HEADERS,
                timeout=self._request_timeout,
            )
        except Exception as exc:
            self.last_error = str(exc)
            self.logger.warning(
                "[%s] Request error: %s",
                self.source_name,
                exc,
                exc_info=True,
            )
            return None

        self.last_status = resp.status_code
        if not 200 <= resp.status_code < 300:
            self.logger.info(
                "[%s] HTTP %d for %s",
                self.source_name,
                resp.status_code,
                url,
            )
            return None

        try:
            data = resp.json()
        except Exception as exc:
            self.last_error = f"Malformed JSON: {exc}"
            self.logger.warning(
                "[%s] Malformed JSON: %s",
                self.source_name,
                exc,
            )
            return None

        if not isinstance(data, dict):
            self.last_error = f"Unexpected payload type {type(data).__name__}"
            self.logger.warning(
                "[%s] Unexpected JSON payload type %s",
                self.source_name,
                type(data).__name__,
            )
            return None
        return data

    @staticmethod
    def first_of(*values: Any) -> Any:
        """Return the first truthy value, or ``None``."""
        for value in values:
            if value:
                return value
        return None

    def attempt(self, code: str) -> ProductRecord | None:
        """Look up *code*, swallowing any failure as "no match"."""
        try:
            record = self.lookup(code)
        except Exception as exc:
            self.logger.warning(
                "[%s] Lookup failed for %s: %s",
                self.source_name,
                code,
                exc,
                exc_info=True,
            )
            return None

        if record is None:
            self.logger.debug(
                "[%s] No match for %s", self.source_name, code
            )
        else:
            self.logger.info(
                "[%s] Match for %s: %s",
                self.source_name,
                code,
                record.name,
            )
        return record

    @abstractmethod
    def lookup(self, code: str) -> ProductRecord | None:
        """Query the provider for *code* and map its first result."""
        ...
