# src/services/vision_client.py

"""Vision/text language model client (OpenAI-compatible chat completions)."""

import json
import logging
import re
from typing import Any

from openai import APIConnectionError, APIStatusError, APITimeoutError, OpenAI

from src.config.settings import Settings

logger = logging.getLogger("product_lookup.vision")

_FENCE = re.compile(r"^\s*```(?:json)?\s*(.*?)\s*```\s*$", re.DOTALL)

BARCODE_PROMPT = (
    "Identify the retail product sold under barcode {barcode}. "
    "Answer with ONLY a JSON object with the keys "
    '"name", "brand", "description" and "category". '
    "If you do not know the product, answer {{}}."
)

IMAGE_PROMPT = (
    "Identify the product in this photo. Answer with ONLY a JSON object "
    "with the keys: name, brand, category, description, color, material, "
    "gender, season, reference_code. Use an empty string for anything "
    "you cannot read or infer. reference_code is any style, model or "
    "article number printed on the product or its label."
)

SYSTEM_PROMPT = (
    "You are a strict JSON generator. Output ONLY a single JSON object. "
    "No prose, no trailing text."
)


class VisionError(RuntimeError):
    """The vision model could not produce a usable answer."""


def strip_code_fences(text: str) -> str:
    """Unwrap a reply wrapped in ``` or ```json fences."""
    match = _FENCE.match(text)
    if match:
        return match.group(1).strip()
    return text.strip()


class VisionClient:
    """Thin wrapper over the chat-completions API for product questions."""

    def __init__(self, client: OpenAI | None = None) -> None:
        self.settings = Settings()
        self._client = client

    @property
    def configured(self) -> bool:
        """True when a client was injected or an API key is set."""
        return self._client is not None or bool(self.settings.LLM_API_KEY)

    @property
    def client(self) -> OpenAI:
        """Lazily build the SDK client from settings."""
        if self._client is None:
            self._client = OpenAI(
                base_url=self.settings.LLM_BASE_URL,
                api_key=self.settings.LLM_API_KEY,
                timeout=self.settings.LLM_TIMEOUT,
            )
        return self._client

    def _complete(self, content: str | list[dict[str, Any]]) -> str:
        """Send one user turn and return the reply text."""
        completion = self.client.chat.completions.create(
            model=self.settings.LLM_MODEL,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": content},
            ],
            temperature=0,
        )
        choice = completion.choices[0] if completion.choices else None
        text = choice.message.content if choice else None
        if not text:
            raise VisionError("Empty response from vision model")
        return text

    @staticmethod
    def _parse(text: str) -> dict[str, Any]:
        """Parse a (possibly fenced) JSON object reply."""
        try:
            parsed = json.loads(strip_code_fences(text))
        except json.JSONDecodeError as exc:
            raise VisionError(
                f"Vision model returned invalid JSON: {exc}"
            ) from exc
        if not isinstance(parsed, dict):
            raise VisionError("Vision model did not return a JSON object")
        return parsed

    def guess_from_barcode(self, barcode: str) -> dict[str, Any] | None:
        """Ask the model to name the product behind bare barcode digits."""
        if not self.configured:
            logger.debug("Vision model not configured, no guess for %s", barcode)
            return None
        try:
            text = self._complete(BARCODE_PROMPT.format(barcode=barcode))
            guess = self._parse(text)
        except (APIConnectionError, APITimeoutError) as exc:
            logger.warning("Network/timeout while guessing %s: %s", barcode, exc)
            return None
        except APIStatusError as exc:
            logger.warning(
                "Vision API returned %s while guessing %s",
                exc.status_code,
                barcode,
            )
            return None
        except Exception as exc:
            logger.warning(
                "Barcode guess failed for %s: %s", barcode, exc, exc_info=True
            )
            return None

        logger.info("Vision guess for %s: %s", barcode, guess.get("name"))
        return guess

    def analyze_image(self, data_url: str) -> dict[str, Any]:
        """Describe the product in a photo; raises :class:`VisionError`."""
        if not self.configured:
            raise VisionError("Vision model not configured")
        try:
            text = self._complete([
                {"type": "text", "text": IMAGE_PROMPT},
                {"type": "image_url", "image_url": {"url": data_url}},
            ])
        except (APIConnectionError, APITimeoutError) as exc:
            raise VisionError(f"Vision model unreachable: {exc}") from exc
        except APIStatusError as exc:
            raise VisionError(
                f"Vision model returned HTTP {exc.status_code}"
            ) from exc

        analysis = self._parse(text)
        logger.info("Vision analysis identified '%s'", analysis.get("name"))
        return analysis
