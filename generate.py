"""CLI entrypoint for the linesheet generator."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from config import Settings, load_settings
from config.settings import parse_formats
from linesheet.client import client_from_settings
from linesheet.pipeline import PipelineResult, PipelineSettings, run_pipeline


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Render a wholesale linesheet from Shopify product data",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--env-file", default=".env", help="Path to .env file for configuration overrides")
    parser.add_argument("--products", help="Path to a products JSON export (list or Shopify GraphQL payload)")
    parser.add_argument("--config", help="Path to the linesheet config JSON")
    parser.add_argument("--price-list", help="Path to a price list JSON (used with priceSource=price_list)")
    parser.add_argument("--price-list-id", help="Shopify price list GID to fetch when no price list file is given")
    parser.add_argument("--output-root", help="Base directory for generated linesheets")
    parser.add_argument("--logs-root", help="Directory to store run logs")
    parser.add_argument("--formats", help="Comma-separated output formats (pdf, xlsx, json)")
    parser.add_argument("--currency", help="Currency used when the config does not name one")
    parser.add_argument("--no-images", action="store_true", help="Do not download product images into the PDF")
    parser.add_argument("--run-id", help="Optional run identifier; defaults to timestamp if not provided")
    return parser.parse_args(argv)


def resolve_settings(args: argparse.Namespace) -> Settings:
    """Load settings and apply CLI overrides."""

    settings = load_settings(args.env_file)

    overrides = {}
    if args.products:
        overrides["products_path"] = Path(args.products)
    if args.config:
        overrides["config_path"] = Path(args.config)
    if args.price_list:
        overrides["price_list_path"] = Path(args.price_list)
    if args.price_list_id:
        overrides["shopify_price_list_id"] = args.price_list_id
    if args.output_root:
        overrides["output_root"] = Path(args.output_root)
    if args.logs_root:
        overrides["logs_root"] = Path(args.logs_root)
    if args.formats:
        overrides["output_formats"] = parse_formats(args.formats)
    if args.currency:
        overrides["default_currency"] = args.currency.upper()
    if args.no_images:
        overrides["embed_images"] = False

    if overrides:
        settings = replace(settings, **overrides)

    _validate_settings(settings)
    return settings


def _validate_settings(settings: Settings) -> None:
    for path in (settings.products_path, settings.config_path, settings.price_list_path):
        if path is not None and not path.exists():
            raise FileNotFoundError(f"Input file does not exist: {path}")
    if settings.products_path is None and not settings.shopify_enabled:
        raise ValueError("Provide --products or set SHOPIFY_STORE and SHOPIFY_ACCESS_TOKEN")
    settings.output_root.mkdir(parents=True, exist_ok=True)
    settings.logs_root.mkdir(parents=True, exist_ok=True)


def run_once(settings: Settings, run_id: Optional[str] = None) -> PipelineResult:
    """Execute a single linesheet run and return its result."""

    run_identifier = run_id or datetime.now().strftime("%Y%m%d-%H%M%S")
    run_output_dir = settings.output_root / run_identifier
    run_output_dir.mkdir(parents=True, exist_ok=True)

    configure_logging(settings, run_identifier)
    logging.info("Starting linesheet run", extra={"run_id": run_identifier})
    logging.info("Output directory: %s", run_output_dir)

    pipeline_settings = PipelineSettings(
        output_dir=run_output_dir,
        config_path=settings.config_path,
        products_path=settings.products_path,
        price_list_path=settings.price_list_path,
        price_list_id=settings.shopify_price_list_id,
        formats=settings.output_formats,
        default_currency=settings.default_currency,
        default_price_source=settings.default_price_source,
        image_cache_dir=settings.cache_root / "images" if settings.embed_images else None,
        image_timeout=settings.image_timeout,
    )

    result = run_pipeline(pipeline_settings, client=client_from_settings(settings))
    logging.info(
        "Pipeline complete: %s items, %s missing products",
        len(result.items),
        len(result.missing_products),
    )
    for fmt, path in result.outputs.items():
        logging.info("%s written to: %s", fmt.upper(), path)
    logging.info("Summary written to: %s", result.summary_path)
    return result


def configure_logging(settings: Settings, run_id: str) -> None:
    log_file = settings.logs_root / f"linesheet-{run_id}.log"
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
        force=True,
    )


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    settings = resolve_settings(args)
    run_once(settings, run_id=args.run_id)


if __name__ == "__main__":
    main()
