# tests/test_settings.py

"""Tests for the Settings configuration class."""

import importlib
import unittest
from pathlib import Path

from src.config.settings import Settings


class TestSettings(unittest.TestCase):
    """Verify Settings constants and provider registry."""

    def test_request_timeout_is_positive_int(self) -> None:
        """REQUEST_TIMEOUT must be a positive integer."""
        self.assertIsInstance(Settings.REQUEST_TIMEOUT, int)
        self.assertGreater(Settings.REQUEST_TIMEOUT, 0)

    def test_truncation_limits(self) -> None:
        """Post-processing limits match the client contract."""
        self.assertEqual(Settings.DESCRIPTION_MAX_LENGTH, 200)
        self.assertEqual(Settings.IMAGE_QUERY_MAX_LENGTH, 50)
        self.assertEqual(Settings.VISUAL_QUERY_MAX_LENGTH, 100)

    def test_available_providers_has_five(self) -> None:
        """Registry must contain exactly 5 providers."""
        self.assertEqual(len(Settings.AVAILABLE_PROVIDERS), 5)

    def test_cascade_order(self) -> None:
        """Free sources come first, the paid source last."""
        ids = [p["id"] for p in Settings.AVAILABLE_PROVIDERS]
        self.assertEqual(
            ids,
            [
                "upcitemdb",
                "openproductsfacts",
                "openfoodfacts",
                "google_image_search",
                "barcodelookup",
            ],
        )

    def test_each_provider_has_required_keys(self) -> None:
        """Every provider must have id, label, and provider keys."""
        for src in Settings.AVAILABLE_PROVIDERS:
            with self.subTest(src=src.get("id", "?")):
                self.assertIn("id", src)
                self.assertIn("label", src)
                self.assertIn("provider", src)

    def test_provider_ids_are_unique(self) -> None:
        """No duplicate provider ids."""
        ids = [s["id"] for s in Settings.AVAILABLE_PROVIDERS]
        self.assertEqual(len(ids), len(set(ids)))

    def test_provider_paths_are_importable(self) -> None:
        """Every dotted path resolves to a class."""
        for src in Settings.AVAILABLE_PROVIDERS:
            with self.subTest(src=src["id"]):
                module_path, class_name = src["provider"].rsplit(".", 1)
                module = importlib.import_module(module_path)
                self.assertTrue(hasattr(module, class_name))

    def test_path_constants_are_paths(self) -> None:
        """Path-typed settings are Path instances."""
        self.assertIsInstance(Settings.BASE_DIR, Path)
        self.assertIsInstance(Settings.LOGS_DIR, Path)

    def test_impersonate_browser_is_string(self) -> None:
        """IMPERSONATE_BROWSER must be a non-empty string."""
        self.assertIsInstance(Settings.IMPERSONATE_BROWSER, str)
        self.assertTrue(len(Settings.IMPERSONATE_BROWSER) > 0)

    def test_default_headers_has_accept_language(self) -> None:
        """DEFAULT_HEADERS must include Accept-Language."""
        self.assertIn("Accept-Language", Settings.DEFAULT_HEADERS)


if __name__ == "__main__":
    unittest.main()
