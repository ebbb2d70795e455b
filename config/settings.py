"""Application settings loading for the linesheet generator."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv


@dataclass
class Settings:
    """Runtime configuration values."""

    products_path: Optional[Path] = None
    config_path: Optional[Path] = None
    price_list_path: Optional[Path] = None
    output_root: Path = Path("output")
    logs_root: Path = Path("logs")
    cache_root: Path = Path("cache")
    output_formats: List[str] = field(default_factory=lambda: ["pdf", "xlsx"])
    default_currency: str = "USD"
    default_price_source: str = "variant_price"
    embed_images: bool = True
    image_timeout: int = 30
    shopify_store: Optional[str] = None
    shopify_access_token: Optional[str] = None
    shopify_api_version: str = "2024-10"
    shopify_price_list_id: Optional[str] = None

    @property
    def shopify_enabled(self) -> bool:
        return bool(self.shopify_store and self.shopify_access_token)


def load_settings(env_file: str | Path = ".env") -> Settings:
    """Load settings from environment variables with optional .env file."""

    load_dotenv(env_file)

    return Settings(
        products_path=_optional_path(_get_env("LINESHEET_PRODUCTS")),
        config_path=_optional_path(_get_env("LINESHEET_CONFIG")),
        price_list_path=_optional_path(_get_env("LINESHEET_PRICE_LIST")),
        output_root=Path(_get_env("LINESHEET_OUTPUT_ROOT", "output")),
        logs_root=Path(_get_env("LINESHEET_LOGS_ROOT", "logs")),
        cache_root=Path(_get_env("LINESHEET_CACHE_ROOT", "cache")),
        output_formats=parse_formats(_get_env("LINESHEET_OUTPUT_FORMATS", "pdf,xlsx")),
        default_currency=_get_env("LINESHEET_CURRENCY", "USD").upper(),
        default_price_source=_get_env("LINESHEET_PRICE_SOURCE", "variant_price"),
        embed_images=_get_env("LINESHEET_EMBED_IMAGES", "true").lower() == "true",
        image_timeout=int(_get_env("LINESHEET_IMAGE_TIMEOUT", "30")),
        shopify_store=_get_env("SHOPIFY_STORE"),
        shopify_access_token=_get_env("SHOPIFY_ACCESS_TOKEN"),
        shopify_api_version=_get_env("SHOPIFY_API_VERSION", "2024-10"),
        shopify_price_list_id=_get_env("SHOPIFY_PRICE_LIST_ID"),
    )


def parse_formats(value: Optional[str]) -> List[str]:
    formats = [part.strip().lower() for part in (value or "").split(",")]
    return [fmt for fmt in formats if fmt]


def _optional_path(value: Optional[str]) -> Optional[Path]:
    if value and value.strip():
        return Path(value)
    return None


def _get_env(key: str, default: Optional[str] = None) -> Optional[str]:
    from os import getenv

    value = getenv(key)
    if value is None:
        return default
    return value
