# tests/test_lookup_orchestrator.py

"""Tests for LookupOrchestrator cascade semantics."""

import unittest
from typing import Any
from unittest.mock import MagicMock, patch

from src.models.product import ProductRecord
from src.services.image_service import ImageService
from src.services.lookup_orchestrator import LookupOrchestrator, LookupResult

LOAD_PATH = (
    "src.services.lookup_orchestrator._load_provider_class"
)

CALLS: list[str] = []
CLOSED: list[str] = []


def _make_provider_cls(
    source: str,
    hits: dict[str, ProductRecord] | None = None,
    original_only: bool = False,
) -> type[object]:
    """Build a stub provider class recording every attempt in CALLS."""
    table = hits or {}

    class StubProvider:
        """Stub provider answering from a canned table."""

        ORIGINAL_CODE_ONLY = original_only

        def attempt(self, code: str) -> ProductRecord | None:
            CALLS.append(f"{source}:{code}")
            record = table.get(code)
            return None if record is None else ProductRecord(**vars(record))

        def close(self) -> None:
            CLOSED.append(source)

    return StubProvider


def _sources(*ids: str) -> list[dict[str, str]]:
    """Registry entries whose dotted path is the provider id."""
    return [{"id": i, "label": i, "provider": i} for i in ids]


def _loader(classes: dict[str, type[object]]) -> Any:
    """Side effect for the patched class loader."""
    return lambda dotted: classes[dotted]


def _orchestrator(
    guess: Any = None, image_ok: bool = True,
) -> LookupOrchestrator:
    """Orchestrator with mocked vision client and image service."""
    vision = MagicMock()
    vision.guess_from_barcode.return_value = guess
    images = MagicMock()
    images.repair.side_effect = lambda record: record
    return LookupOrchestrator(vision=vision, images=images)


class TestCascade(unittest.IsolatedAsyncioTestCase):
    """Provider ordering and early exit."""

    def setUp(self) -> None:
        CALLS.clear()
        CLOSED.clear()

    async def test_sessions_closed_after_hit(self) -> None:
        """Every built provider is closed, including unqueried ones."""
        hit = ProductRecord(name="Nutella", source="a")
        classes = {
            "a": _make_provider_cls("a", {"123": hit}),
            "b": _make_provider_cls("b"),
        }
        with patch(LOAD_PATH, side_effect=_loader(classes)):
            await _orchestrator().lookup("123", _sources("a", "b"))
        self.assertEqual(CALLS, ["a:123"])
        self.assertEqual(sorted(CLOSED), ["a", "b"])

    async def test_sessions_closed_after_miss(self) -> None:
        """Providers are closed when the cascade is exhausted too."""
        classes = {"a": _make_provider_cls("a"), "b": _make_provider_cls("b")}
        with patch(LOAD_PATH, side_effect=_loader(classes)):
            await _orchestrator().lookup("123", _sources("a", "b"))
        self.assertEqual(sorted(CLOSED), ["a", "b"])

    async def test_returns_first_hit_and_stops(self) -> None:
        """Providers after the first hit are never queried."""
        hit = ProductRecord(name="Nutella", brand="Ferrero", source="c")
        classes = {
            "a": _make_provider_cls("a"),
            "b": _make_provider_cls("b"),
            "c": _make_provider_cls("c", {"3017620422003": hit}),
            "d": _make_provider_cls("d", {"3017620422003": hit}),
        }
        with patch(LOAD_PATH, side_effect=_loader(classes)):
            result = await _orchestrator().lookup(
                "3017620422003", _sources("a", "b", "c", "d")
            )

        self.assertIsInstance(result, LookupResult)
        self.assertTrue(result.found)
        assert result.record is not None
        self.assertEqual(result.record.source, "c")
        self.assertEqual(result.record.name, "Nutella")
        self.assertEqual(
            CALLS,
            ["a:3017620422003", "b:3017620422003", "c:3017620422003"],
        )
        self.assertEqual(result.attempts, CALLS)
        self.assertFalse(result.used_ai_fallback)

    async def test_variants_tried_after_all_providers(self) -> None:
        """Each variant runs the whole provider list before the next."""
        hit = ProductRecord(name="Shoe", source="b")
        classes = {
            "a": _make_provider_cls("a"),
            "b": _make_provider_cls("b", {"197600410619": hit}),
        }
        with patch(LOAD_PATH, side_effect=_loader(classes)):
            result = await _orchestrator().lookup(
                "0197600410619", _sources("a", "b")
            )

        self.assertTrue(result.found)
        self.assertEqual(
            CALLS,
            [
                "a:0197600410619",
                "b:0197600410619",
                "a:197600410619",
                "b:197600410619",
            ],
        )

    async def test_original_only_provider_skips_variants(self) -> None:
        """The web search provider only sees the scanned code."""
        classes = {
            "a": _make_provider_cls("a"),
            "web": _make_provider_cls("web", original_only=True),
        }
        with patch(LOAD_PATH, side_effect=_loader(classes)):
            await _orchestrator().lookup(
                "197600410619", _sources("a", "web")
            )

        self.assertEqual(
            CALLS,
            ["a:197600410619", "web:197600410619", "a:0197600410619"],
        )

    async def test_no_input_queried_twice(self) -> None:
        """A provider never sees the same code twice in one lookup."""
        classes = {"a": _make_provider_cls("a"), "b": _make_provider_cls("b")}
        with patch(LOAD_PATH, side_effect=_loader(classes)):
            await _orchestrator().lookup("012345678905", _sources("a", "b"))
        self.assertEqual(len(CALLS), len(set(CALLS)))

    async def test_empty_sources_falls_to_ai(self) -> None:
        """With no providers selected only the model is consulted."""
        orch = _orchestrator(guess=None)
        result = await orch.lookup("123", [])
        self.assertFalse(result.found)
        self.assertTrue(result.used_ai_fallback)
        orch.vision.guess_from_barcode.assert_called_once_with("123")


class TestAiFallback(unittest.IsolatedAsyncioTestCase):
    """Model guess acceptance."""

    def setUp(self) -> None:
        CALLS.clear()

    async def test_named_guess_accepted(self) -> None:
        """A guess with a name becomes an ai_guess record."""
        classes = {"a": _make_provider_cls("a")}
        orch = _orchestrator(
            guess={"name": "Nutella 400g", "brand": "Ferrero"}
        )
        with patch(LOAD_PATH, side_effect=_loader(classes)):
            result = await orch.lookup("3017620422003", _sources("a"))

        self.assertTrue(result.used_ai_fallback)
        assert result.record is not None
        self.assertEqual(result.record.source, "ai_guess")
        self.assertEqual(result.record.brand, "Ferrero")

    async def test_unnamed_guess_is_not_found(self) -> None:
        """A guess without a name means not found."""
        classes = {"a": _make_provider_cls("a")}
        orch = _orchestrator(guess={"brand": "Ferrero"})
        with patch(LOAD_PATH, side_effect=_loader(classes)):
            result = await orch.lookup("3017620422003", _sources("a"))

        self.assertFalse(result.found)
        self.assertIsNone(result.record)
        orch.images.repair.assert_not_called()

    async def test_ai_not_called_on_provider_hit(self) -> None:
        """The model is only a last resort."""
        hit = ProductRecord(name="X", source="a")
        classes = {"a": _make_provider_cls("a", {"123": hit})}
        orch = _orchestrator(guess={"name": "Y"})
        with patch(LOAD_PATH, side_effect=_loader(classes)):
            await orch.lookup("123", _sources("a"))
        orch.vision.guess_from_barcode.assert_not_called()


class TestPostProcessing(unittest.IsolatedAsyncioTestCase):
    """Image repair and name cleanup run on the winning record."""

    def setUp(self) -> None:
        CALLS.clear()

    async def test_name_cleaned_and_defaults(self) -> None:
        """The returned record is cleaned and has placeholders."""
        hit = ProductRecord(
            name="Nike Air Max - Men's Running Shoe (2023)", source="a"
        )
        classes = {"a": _make_provider_cls("a", {"123": hit})}
        with patch(LOAD_PATH, side_effect=_loader(classes)):
            result = await _orchestrator().lookup("123", _sources("a"))

        assert result.record is not None
        self.assertEqual(result.record.name, "Nike Air Max")
        self.assertEqual(result.record.brand, "Unknown")
        self.assertEqual(result.record.category, "General")
        self.assertEqual(
            result.record.description,
            "Nike Air Max - Men's Running Shoe (2023)",
        )

    async def test_dead_image_never_returned(self) -> None:
        """A non-2xx image URL is replaced through the image service."""
        dead = "https://img.example/dead.jpg"
        hit = ProductRecord(name="Shoe", image=dead, source="a")
        classes = {"a": _make_provider_cls("a", {"123": hit})}

        searcher = MagicMock()
        searcher.configured = True
        searcher.session.head.return_value = MagicMock(status_code=404)
        searcher.search_image.return_value = None

        vision = MagicMock()
        orch = LookupOrchestrator(
            vision=vision, images=ImageService(searcher=searcher)
        )
        with patch(LOAD_PATH, side_effect=_loader(classes)):
            result = await orch.lookup("123", _sources("a"))

        assert result.record is not None
        self.assertNotEqual(result.record.image, dead)
        self.assertIsNone(result.record.image)


if __name__ == "__main__":
    unittest.main()
