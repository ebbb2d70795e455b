"""Wholesale / MSRP resolution for a single product."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .extract import metafield_value
from .formatting import format_price
from .models import PriceList, PriceSource, RawProduct


@dataclass(frozen=True)
class PriceResolution:
    wholesale: Optional[str] = None
    msrp: Optional[str] = None


def resolve_prices(
    product: RawProduct,
    price_list: Optional[PriceList] = None,
    price_source: PriceSource | str | None = PriceSource.VARIANT_PRICE,
    currency: str = "USD",
) -> PriceResolution:
    source = PriceSource.parse(price_source)
    msrp = _raw_msrp(product)
    wholesale = _raw_wholesale(product, price_list, source)
    return PriceResolution(
        wholesale=format_price(wholesale, currency) if wholesale else None,
        msrp=format_price(msrp, currency) if msrp else None,
    )


def _raw_msrp(product: RawProduct) -> Optional[str]:
    value = metafield_value(product, "msrp", "compare_price")
    if value:
        return value
    for variant in product.variants:
        if variant.compare_at_price:
            return variant.compare_at_price
    return None


def _raw_wholesale(product: RawProduct, price_list: Optional[PriceList], source: PriceSource) -> Optional[str]:
    if source == PriceSource.PRICE_LIST:
        if price_list is None:
            return None
        variant_ids = {variant.id for variant in product.variants}
        for entry in price_list.prices:
            if entry.variant_id in variant_ids:
                return entry.price or None
        return None

    if source == PriceSource.METAFIELD:
        return metafield_value(product, "wholesale", "wholesale_price")

    if product.variants:
        return product.variants[0].price or None
    return None
