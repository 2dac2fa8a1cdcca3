# src/cli/runner.py

"""Headless CLI runner that reuses the async lookup services."""

import base64
import json
import logging
import mimetypes
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from src.config.settings import Settings
from src.models.product import ProductRecord
from src.services.lookup_orchestrator import LookupOrchestrator
from src.services.vision_client import VisionError
from src.services.visual_analyzer import VisualAnalyzer

logger = logging.getLogger("product_lookup.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


def resolve_providers(
    provider_csv: str | None,
) -> list[dict[str, str]]:
    """Map a comma-separated list of provider IDs to their config dicts.

    Returns all providers when *provider_csv* is ``None``. The cascade
    order is always the registry order, whatever order the IDs are given in.
    Raises ``SystemExit`` on unknown IDs.
    """
    if provider_csv is None:
        return Settings.AVAILABLE_PROVIDERS

    available = {p["id"] for p in Settings.AVAILABLE_PROVIDERS}
    requested = {
        p.strip() for p in provider_csv.split(",") if p.strip()
    }
    unknown = sorted(requested - available)
    if unknown:
        valid = ", ".join(sorted(available))
        _err.print(
            f"[red]Unknown provider(s): {', '.join(unknown)}[/red]"
        )
        _err.print(f"[dim]Available: {valid}[/dim]")
        raise SystemExit(1)

    return [
        p for p in Settings.AVAILABLE_PROVIDERS if p["id"] in requested
    ]


def encode_image(path: Path) -> str:
    """Read an image file into a base64 ``data:`` URL."""
    mime, _ = mimetypes.guess_type(path.name)
    data = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime or 'image/jpeg'};base64,{data}"


def _print_table(record: ProductRecord) -> None:
    """Render a Rich table of the record fields to stdout."""
    table = Table(
        title="Product",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Field", style="bold")
    table.add_column("Value", overflow="fold")

    for key, value in record.to_dict().items():
        if value in ("", None) and key != "image":
            continue
        table.add_row(key, str(value) if value is not None else "—")

    Console().print(table)


def _emit(record: ProductRecord, output_format: str) -> None:
    """Write the record to stdout in the requested format."""
    if output_format == "table":
        _print_table(record)
        return
    json.dump(
        record.to_dict(),
        sys.stdout,
        ensure_ascii=False,
        indent=2,
    )
    sys.stdout.write("\n")


async def cli_lookup(
    barcode: str,
    provider_csv: str | None,
    output_format: str,
) -> int:
    """Resolve a barcode and return an exit code (0=found, 1=not found)."""
    providers = resolve_providers(provider_csv)
    labels = ", ".join(p["label"] for p in providers)
    _err.print(
        f"[bold]Looking up:[/bold] {barcode}  [dim]providers={labels}[/dim]"
    )

    orchestrator = LookupOrchestrator()
    result = await orchestrator.lookup(barcode, providers)

    _err.print(f"[dim]{len(result.attempts)} provider attempts[/dim]")
    if result.record is None:
        _err.print("[yellow]Product not found.[/yellow]")
        return 1

    via = "model guess" if result.used_ai_fallback else result.record.source
    _err.print(f"[green]✓ Found via {via}[/green]")
    _emit(result.record, output_format)
    return 0


async def cli_analyze(image_path: str, output_format: str) -> int:
    """Identify the product in a photo file."""
    path = Path(image_path)
    if not path.is_file():
        _err.print(f"[red]Image not found: {path}[/red]")
        return 1

    _err.print(f"[bold]Analyzing photo:[/bold] {path.name}")
    analyzer = VisualAnalyzer()
    try:
        product = await analyzer.analyze(encode_image(path))
    except VisionError as exc:
        logger.error("Photo analysis failed: %s", exc, exc_info=True)
        _err.print(f"[red]Analysis failed: {exc}[/red]")
        return 1

    _emit(product, output_format)
    return 0


_STATUS_LABELS = {
    "ok": "[green]✅ OK[/green]",
    "slow": "[yellow]⚠️  SLOW[/yellow]",
    "miss": "[yellow]∅ MISS[/yellow]",
    "unconfigured": "[dim]🔑 NO KEY[/dim]",
    "down": "[red]❌ DOWN[/red]",
}


async def run_health_check(code: str | None = None) -> int:
    """Resolve a known barcode through every provider and report each."""
    from src.services.health_checker import HealthChecker

    checker = HealthChecker(code)
    _err.print(
        f"[bold]Running provider health check with {checker.code}...[/bold]"
    )
    results = await checker.check_all()

    table = Table(
        title="Provider Health Check",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Provider", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Latency", justify="right")
    table.add_column("Notes", style="dim")

    any_down = False
    for r in results:
        status = _STATUS_LABELS.get(r.status, _STATUS_LABELS["down"])
        if r.status not in ("ok", "slow", "miss", "unconfigured"):
            any_down = True

        latency = (
            f"{r.latency_ms:.0f}ms"
            if r.latency_ms > 0
            else "—"
        )
        table.add_row(
            r.provider_id, status, latency, r.message,
        )

    Console().print(table)
    return 1 if any_down else 0
