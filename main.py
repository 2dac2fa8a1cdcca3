# main.py

"""Entry point for product_lookup (HTTP server or headless CLI)."""

import argparse
import asyncio
import logging
import sys

from src.config.logging_config import setup_logging
from src.config.settings import Settings

logger = logging.getLogger("product_lookup.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    valid_ids = ", ".join(p["id"] for p in Settings.AVAILABLE_PROVIDERS)

    parser = argparse.ArgumentParser(
        prog="product_lookup",
        description="Resolve barcodes and product photos to product records.",
        epilog=f"Available providers (cascade order): {valid_ids}",
    )
    parser.add_argument(
        "barcode",
        nargs="?",
        default=None,
        help="Barcode to resolve. Omit to start the HTTP server.",
    )
    parser.add_argument(
        "-i",
        "--image",
        default=None,
        dest="image_path",
        help="Identify the product in a photo file instead.",
    )
    parser.add_argument(
        "-p",
        "--providers",
        default=None,
        help="Comma-separated provider IDs (default: all).",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    parser.add_argument(
        "--health",
        action="store_true",
        default=False,
        help=(
            "Resolve a known barcode through every provider "
            "(the positional barcode overrides HEALTH_BARCODE)."
        ),
    )
    parser.add_argument(
        "--host",
        default=Settings.HOST,
        help=f"Server bind address (default: {Settings.HOST}).",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=Settings.PORT,
        help=f"Server port (default: {Settings.PORT}).",
    )
    return parser


def _run_server(args: argparse.Namespace) -> None:
    """Serve the lookup endpoint with uvicorn."""
    import uvicorn

    try:
        uvicorn.run(
            "src.api.app:create_app",
            factory=True,
            host=args.host,
            port=args.port,
            log_level="info",
        )
    except Exception:
        logger.critical("Fatal error while serving", exc_info=True)
        raise
    finally:
        logger.info("product_lookup server shutting down")


def _run_lookup(args: argparse.Namespace) -> None:
    """Resolve a single barcode and exit."""
    from src.cli.runner import cli_lookup

    exit_code = asyncio.run(
        cli_lookup(
            barcode=args.barcode.strip(),
            provider_csv=args.providers,
            output_format=args.output_format,
        )
    )
    sys.exit(exit_code)


def _run_analyze(args: argparse.Namespace) -> None:
    """Identify a photographed product and exit."""
    from src.cli.runner import cli_analyze

    exit_code = asyncio.run(
        cli_analyze(args.image_path, args.output_format)
    )
    sys.exit(exit_code)


def _run_health_check(args: argparse.Namespace) -> None:
    """Resolve a known barcode through every provider."""
    from src.cli.runner import run_health_check

    code = args.barcode.strip() if args.barcode else None
    exit_code = asyncio.run(run_health_check(code))
    sys.exit(exit_code)


def main() -> None:
    """Route to the server (no args) or a headless CLI command."""
    log_file = setup_logging()
    logger.info("product_lookup starting, log file: %s", log_file)

    parser = _build_parser()
    args = parser.parse_args()

    if args.health:
        _run_health_check(args)
    elif args.image_path is not None:
        _run_analyze(args)
    elif args.barcode is None:
        _run_server(args)
    else:
        _run_lookup(args)


if __name__ == "__main__":
    main()
