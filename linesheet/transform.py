"""Transformation utilities converting raw Shopify products to linesheet items."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .extract import extract_color, extract_season, extract_sizes, extract_style_number
from .formatting import ColorNormalizer, SizeRangeFormatter
from .models import CatalogItem, ItemImage, LinesheetConfig, PriceList, ProductSelection, RawProduct
from .pricing import resolve_prices


def map_product_to_item(
    product: RawProduct,
    price_list: Optional[PriceList] = None,
    config: Optional[LinesheetConfig] = None,
    *,
    color_normalizer: Optional[ColorNormalizer] = None,
    size_formatter: Optional[SizeRangeFormatter] = None,
) -> CatalogItem:
    config = config or LinesheetConfig()
    prices = resolve_prices(product, price_list, config.price_source, config.currency)

    image = None
    if product.images:
        first = product.images[0]
        image = ItemImage(url=first.url, alt=first.alt_text or product.title)

    return CatalogItem(
        product_id=product.id,
        title=product.title.upper(),
        style_number=extract_style_number(product),
        season=extract_season(product, default=config.season),
        wholesale=prices.wholesale,
        msrp=prices.msrp,
        sizes=extract_sizes(product, size_formatter),
        color=extract_color(product, color_normalizer),
        image=image,
    )


def map_products(
    products: Iterable[RawProduct],
    price_list: Optional[PriceList] = None,
    config: Optional[LinesheetConfig] = None,
    *,
    color_normalizer: Optional[ColorNormalizer] = None,
    size_formatter: Optional[SizeRangeFormatter] = None,
) -> List[CatalogItem]:
    return [
        map_product_to_item(
            product,
            price_list,
            config,
            color_normalizer=color_normalizer,
            size_formatter=size_formatter,
        )
        for product in products
    ]


def order_selection(
    products: Sequence[RawProduct],
    config: LinesheetConfig,
) -> Tuple[List[RawProduct], List[str]]:
    """Apply the configured selection to the supplied products.

    Returns the products in render order (variant subsets applied) and the ids
    of selections that matched no supplied product.
    """

    if not config.products:
        return list(products), []

    by_id: Dict[str, RawProduct] = {}
    for product in products:
        by_id.setdefault(product.id, product)

    ordered: List[RawProduct] = []
    missing: List[str] = []
    for selection in sort_selections(config.products):
        product = by_id.get(selection.product_id)
        if product is None:
            logging.warning("Selected product not found; skipping", extra={"product_id": selection.product_id})
            missing.append(selection.product_id)
            continue
        ordered.append(_restrict_variants(product, selection))
    return ordered, missing


def sort_selections(selections: Sequence[ProductSelection]) -> List[ProductSelection]:
    ranked = [s for s in selections if s.order is not None]
    unranked = [s for s in selections if s.order is None]
    return sorted(ranked, key=lambda s: s.order) + unranked


def _restrict_variants(product: RawProduct, selection: ProductSelection) -> RawProduct:
    if not selection.variant_ids:
        return product
    wanted = set(selection.variant_ids)
    return replace(product, variants=[v for v in product.variants if v.id in wanted])
