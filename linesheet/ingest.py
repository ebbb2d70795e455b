"""Input loading for product exports, price lists, and linesheet configs."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Optional

from .models import LinesheetConfig, PriceList, RawProduct
from .utils import nodes


class InputLoader:
    """Loads catalog data and render configuration from JSON files."""

    SUPPORTED_EXTENSIONS = {".json"}

    def __init__(self, path: Path) -> None:
        self.path = path
        self._validate_extension()

    def load_products(self) -> List[RawProduct]:
        data = self._read()
        if isinstance(data, dict):
            # Shopify GraphQL payloads: {"data": {"products": {...}}} or {"products": [...]}
            data = (data.get("data") or data).get("products")
        entries = nodes(data) if isinstance(data, dict) else data
        if not isinstance(entries, list):
            raise ValueError("Products input must be a list of products or a Shopify products payload")
        return [RawProduct.from_dict(entry) for entry in entries]

    def load_price_list(self) -> PriceList:
        data = self._read()
        if isinstance(data, dict) and "data" in data:
            data = (data.get("data") or {}).get("priceList")
        return PriceList.from_dict(data)

    def load_config(self, default_currency: str = "USD", default_price_source: str = "variant_price") -> LinesheetConfig:
        return LinesheetConfig.from_dict(
            self._read(),
            default_currency=default_currency,
            default_price_source=default_price_source,
        )

    def _read(self) -> Any:
        if not self.path.exists():
            raise FileNotFoundError(f"Input file does not exist: {self.path}")
        with self.path.open(encoding="utf-8") as handle:
            try:
                return json.load(handle)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Invalid JSON in {self.path}: {exc}") from exc

    def _validate_extension(self) -> None:
        if self.path.suffix.lower() not in self.SUPPORTED_EXTENSIONS:
            raise ValueError(f"Unsupported input format: {self.path.suffix}")


def load_optional_config(
    path: Optional[Path],
    default_currency: str = "USD",
    default_price_source: str = "variant_price",
) -> LinesheetConfig:
    if path is None:
        return LinesheetConfig.from_dict(
            {},
            default_currency=default_currency,
            default_price_source=default_price_source,
        )
    return InputLoader(path).load_config(default_currency, default_price_source)
