"""Linesheet generation pipeline: load, order, map, compose, render."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .client import ShopifyClient
from .images import ImageManager
from .ingest import InputLoader, load_optional_config
from .layout import compose_layout
from .models import CatalogItem, DocumentLayout, LinesheetConfig, PriceList, PriceSource, RawProduct
from .render import excel_filename, pdf_filename, render_excel, render_json, render_pdf
from .transform import map_products, order_selection

SUPPORTED_FORMATS = ("pdf", "xlsx", "json")


@dataclass
class PipelineSettings:
    output_dir: Path
    config_path: Optional[Path] = None
    products_path: Optional[Path] = None
    price_list_path: Optional[Path] = None
    price_list_id: Optional[str] = None
    formats: Sequence[str] = ("pdf", "xlsx")
    default_currency: str = "USD"
    default_price_source: str = "variant_price"
    image_cache_dir: Optional[Path] = None
    image_timeout: int = 30


@dataclass
class PipelineResult:
    config: LinesheetConfig
    items: List[CatalogItem]
    layout: DocumentLayout
    missing_products: List[str]
    summary_path: Path
    outputs: Dict[str, Path] = field(default_factory=dict)


def run_pipeline(settings: PipelineSettings, client: Optional[ShopifyClient] = None) -> PipelineResult:
    config = load_optional_config(settings.config_path, settings.default_currency, settings.default_price_source)
    products = _load_products(settings, config, client)
    price_list = _load_price_list(settings, config, client)

    ordered, missing = order_selection(products, config)
    if not ordered:
        raise ValueError("No products selected for the linesheet")

    logging.info("Mapping %s products (price source: %s)", len(ordered), config.price_source.value)
    items = map_products(ordered, price_list, config)
    layout = compose_layout(items, config)

    settings.output_dir.mkdir(parents=True, exist_ok=True)
    outputs = render_outputs(layout, config, settings)

    summary_path = settings.output_dir / "run_summary.json"
    _write_summary(summary_path, items, missing, outputs)

    return PipelineResult(
        config=config,
        items=items,
        layout=layout,
        missing_products=missing,
        summary_path=summary_path,
        outputs=outputs,
    )


def render_outputs(layout: DocumentLayout, config: LinesheetConfig, settings: PipelineSettings) -> Dict[str, Path]:
    today = date.today()
    outputs: Dict[str, Path] = {}
    for fmt in settings.formats:
        if fmt not in SUPPORTED_FORMATS:
            logging.warning("Unsupported output format skipped", extra={"format": fmt})
            continue
        if fmt == "pdf":
            loader = None
            if settings.image_cache_dir is not None:
                loader = ImageManager(settings.image_cache_dir, timeout=settings.image_timeout)
            outputs[fmt] = render_pdf(layout, config, settings.output_dir / pdf_filename(config, today), loader, today)
        elif fmt == "xlsx":
            outputs[fmt] = render_excel(layout.items, config, settings.output_dir / excel_filename(config, today))
        else:
            outputs[fmt] = render_json(layout, config, settings.output_dir / "linesheet.json")
    return outputs


def _load_products(
    settings: PipelineSettings,
    config: LinesheetConfig,
    client: Optional[ShopifyClient],
) -> List[RawProduct]:
    if settings.products_path is not None:
        products = InputLoader(settings.products_path).load_products()
        logging.info("Loaded %s products from %s", len(products), settings.products_path)
        return products
    if client is None:
        raise ValueError("Either a products file or Shopify credentials are required")
    if not config.products:
        raise ValueError("Fetching from Shopify requires a product selection in the config")
    return client.fetch_products([selection.product_id for selection in config.products])


def _load_price_list(
    settings: PipelineSettings,
    config: LinesheetConfig,
    client: Optional[ShopifyClient],
) -> Optional[PriceList]:
    if config.price_source != PriceSource.PRICE_LIST:
        return None
    if settings.price_list_path is not None:
        return InputLoader(settings.price_list_path).load_price_list()
    if client is not None and settings.price_list_id:
        return client.fetch_price_list(settings.price_list_id)
    logging.warning("Price source is price_list but no price list was supplied; wholesale prices will be blank")
    return None


def _write_summary(
    path: Path,
    items: List[CatalogItem],
    missing: List[str],
    outputs: Dict[str, Path],
) -> None:
    summary = {
        "item_count": len(items),
        "missing_count": len(missing),
        "missing_products": missing,
        "outputs": {fmt: str(output) for fmt, output in outputs.items()},
    }
    path.write_text(json.dumps(summary, indent=2), encoding="utf-8")
    logging.info("Run summary saved to %s", path)
