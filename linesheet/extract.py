"""Field extractors pulling one display value out of a raw Shopify product."""

from __future__ import annotations

from typing import Callable, List, Optional, Sequence

from .formatting import ColorNormalizer, SizeRangeFormatter, format_colors
from .models import RawProduct
from .utils import first_present, split_tokens

Provider = Callable[[RawProduct], Optional[str]]


def metafield_value(product: RawProduct, *keys: str) -> Optional[str]:
    """Value of the first metafield whose key matches; namespaces are not considered."""

    for metafield in product.metafields:
        if metafield.key in keys:
            return metafield.value or None
    return None


def metafield(*keys: str) -> Provider:
    def provider(product: RawProduct) -> Optional[str]:
        return metafield_value(product, *keys)

    provider.__name__ = f"metafield_{'_'.join(keys)}"
    return provider


def option_values(product: RawProduct, option_name: str) -> List[str]:
    """Unique upper-cased values of a selected option across all variants."""

    wanted = option_name.lower()
    values: List[str] = []
    for variant in product.variants:
        for option in variant.selected_options:
            if option.name.lower() == wanted:
                value = option.value.upper()
                if value not in values:
                    values.append(value)
    return values


def first_sku(product: RawProduct) -> Optional[str]:
    for variant in product.variants:
        if variant.sku:
            return variant.sku
    return None


STYLE_NUMBER_SOURCES: Sequence[Provider] = (first_sku, metafield("style_number", "style"))
SEASON_SOURCES: Sequence[Provider] = (metafield("season", "collection"),)


def extract_style_number(product: RawProduct) -> Optional[str]:
    return first_present(product, STYLE_NUMBER_SOURCES)


def extract_season(product: RawProduct, default: Optional[str] = None) -> Optional[str]:
    return first_present(product, SEASON_SOURCES) or default or None


def extract_color(product: RawProduct, normalizer: Optional[ColorNormalizer] = None) -> Optional[str]:
    normalize = normalizer or ColorNormalizer()

    def from_options(item: RawProduct) -> Optional[str]:
        return format_colors(option_values(item, "color")) or None

    def from_metafield(item: RawProduct) -> Optional[str]:
        raw = metafield_value(item, "color", "colors")
        tokens = [normalize(token) for token in split_tokens(raw)]
        return format_colors(token for token in tokens if token) or None

    return first_present(product, (from_options, from_metafield))


def extract_sizes(product: RawProduct, formatter: Optional[SizeRangeFormatter] = None) -> Optional[str]:
    format_sizes = formatter or SizeRangeFormatter()

    def from_options(item: RawProduct) -> Optional[str]:
        return format_sizes(option_values(item, "size")) or None

    return first_present(product, (from_options, metafield("sizes", "size")))
