"""Data models for Shopify catalog input and linesheet output."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .utils import nodes


class PriceSource(str, Enum):
    """Origin of the wholesale price shown per item."""

    PRICE_LIST = "price_list"
    METAFIELD = "metafield"
    VARIANT_PRICE = "variant_price"

    @classmethod
    def parse(cls, value: Any) -> "PriceSource":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return cls.VARIANT_PRICE


class LayoutStyle(str, Enum):
    TWO_COLUMN_COMPACT = "two-column-compact"
    GRID = "grid"
    SINGLE_COLUMN = "single-column"

    @classmethod
    def parse(cls, value: Any) -> "LayoutStyle":
        if isinstance(value, cls):
            return value
        if value is None or str(value).strip() == "":
            return cls.TWO_COLUMN_COMPACT
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.SINGLE_COLUMN


@dataclass
class ProductImage:
    url: str
    alt_text: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProductImage":
        return cls(
            url=_get(data, "url", "src") or "",
            alt_text=_get(data, "altText", "alt_text", "alt"),
        )


@dataclass
class SelectedOption:
    name: str
    value: str


@dataclass
class Variant:
    id: str
    price: str = ""
    sku: Optional[str] = None
    compare_at_price: Optional[str] = None
    selected_options: List[SelectedOption] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Variant":
        options = [
            SelectedOption(name=str(opt.get("name") or ""), value=str(opt.get("value") or ""))
            for opt in _get(data, "selectedOptions", "selected_options") or []
        ]
        return cls(
            id=str(data.get("id") or ""),
            price=_money(data.get("price")) or "",
            sku=data.get("sku"),
            compare_at_price=_money(_get(data, "compareAtPrice", "compare_at_price")),
            selected_options=options,
        )


@dataclass
class Metafield:
    namespace: str
    key: str
    value: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Metafield":
        value = data.get("value")
        return cls(
            namespace=str(data.get("namespace") or ""),
            key=str(data.get("key") or ""),
            value="" if value is None else str(value),
        )


@dataclass
class RawProduct:
    """Read-only product record as supplied by the catalog."""

    id: str
    title: str
    handle: str = ""
    images: List[ProductImage] = field(default_factory=list)
    variants: List[Variant] = field(default_factory=list)
    metafields: List[Metafield] = field(default_factory=list)
    product_type: Optional[str] = None
    tags: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RawProduct":
        if not isinstance(data, dict):
            raise ValueError("Product entries must be objects")
        product_id = data.get("id")
        if not product_id:
            raise ValueError("Product entry is missing 'id'")
        return cls(
            id=str(product_id),
            title=str(data.get("title") or ""),
            handle=str(data.get("handle") or ""),
            images=[ProductImage.from_dict(img) for img in nodes(data.get("images"))],
            variants=[Variant.from_dict(v) for v in nodes(data.get("variants"))],
            metafields=[Metafield.from_dict(m) for m in nodes(data.get("metafields"))],
            product_type=_get(data, "productType", "product_type"),
            tags=list(data.get("tags") or []),
        )


@dataclass
class PriceListEntry:
    variant_id: str
    price: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PriceListEntry":
        variant_id = _get(data, "variantId", "variant_id")
        if variant_id is None and isinstance(data.get("variant"), dict):
            variant_id = data["variant"].get("id")
        return cls(variant_id=str(variant_id or ""), price=_money(data.get("price")) or "")


@dataclass
class PriceList:
    id: str = ""
    name: str = ""
    currency: str = ""
    prices: List[PriceListEntry] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PriceList":
        if not isinstance(data, dict):
            raise ValueError("Price list must be an object")
        entries = data.get("prices")
        if entries is None:
            entries = _get(data, "fixedPrices", "fixed_prices")
        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or ""),
            currency=str(data.get("currency") or ""),
            prices=[PriceListEntry.from_dict(entry) for entry in nodes(entries)],
        )


@dataclass
class FieldToggles:
    style_number: bool = True
    season: bool = True
    wholesale: bool = True
    msrp: bool = True
    sizes: bool = True
    color: bool = True
    images: bool = True
    product_name: bool = True

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "FieldToggles":
        data = data or {}
        if not isinstance(data, dict):
            raise ValueError("fieldToggles must be an object")
        return cls(
            style_number=_flag(data, True, "styleNumber", "style_number"),
            season=_flag(data, True, "season"),
            wholesale=_flag(data, True, "wholesale", "wholesalePrice"),
            msrp=_flag(data, True, "msrp", "msrpPrice"),
            sizes=_flag(data, True, "sizes"),
            color=_flag(data, True, "color", "colors"),
            images=_flag(data, True, "images"),
            product_name=_flag(data, True, "productName", "product_name"),
        )


@dataclass
class ProductSelection:
    product_id: str
    variant_ids: Optional[List[str]] = None
    order: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Any) -> "ProductSelection":
        if isinstance(data, str):
            return cls(product_id=data)
        if not isinstance(data, dict):
            raise ValueError("Product selections must be product ids or objects")
        product_id = _get(data, "productId", "product_id", "id")
        if not product_id:
            raise ValueError("Product selection is missing 'productId'")
        variant_ids = _get(data, "variantIds", "variant_ids")
        if variant_ids is not None and not isinstance(variant_ids, list):
            raise ValueError(f"variantIds for {product_id} must be a list")
        order = data.get("order")
        try:
            order = int(order) if order is not None else None
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid order for {product_id}: {order!r}") from exc
        return cls(
            product_id=str(product_id),
            variant_ids=[str(v) for v in variant_ids] if variant_ids is not None else None,
            order=order,
        )


@dataclass
class LinesheetConfig:
    """User-supplied, render-scoped configuration."""

    header_title: str = "Linesheet"
    subheader: Optional[str] = None
    season: Optional[str] = None
    currency: str = "USD"
    price_source: PriceSource = PriceSource.VARIANT_PRICE
    field_toggles: FieldToggles = field(default_factory=FieldToggles)
    layout_style: LayoutStyle = LayoutStyle.TWO_COLUMN_COMPACT
    products_per_row: int = 3
    products: List[ProductSelection] = field(default_factory=list)
    logo_url: Optional[str] = None

    @classmethod
    def from_dict(
        cls,
        data: Optional[Dict[str, Any]],
        *,
        default_currency: str = "USD",
        default_price_source: str = "variant_price",
    ) -> "LinesheetConfig":
        data = data or {}
        if not isinstance(data, dict):
            raise ValueError("Linesheet config must be an object")
        selections = data.get("products") or []
        if not isinstance(selections, list):
            raise ValueError("products must be a list of selections")
        per_row = _get(data, "productsPerRow", "products_per_row")
        try:
            products_per_row = int(per_row) if per_row is not None else 3
        except (TypeError, ValueError):
            products_per_row = 3
        return cls(
            header_title=str(_get(data, "headerTitle", "header_title") or "Linesheet"),
            subheader=data.get("subheader") or None,
            season=data.get("season") or None,
            currency=str(data.get("currency") or default_currency).upper(),
            price_source=PriceSource.parse(_get(data, "priceSource", "price_source") or default_price_source),
            field_toggles=FieldToggles.from_dict(_get(data, "fieldToggles", "field_toggles")),
            layout_style=LayoutStyle.parse(_get(data, "layoutStyle", "layout_style")),
            products_per_row=products_per_row,
            products=[ProductSelection.from_dict(p) for p in selections],
            logo_url=_get(data, "logoUrl", "logo_url"),
        )


@dataclass
class ItemImage:
    url: str
    alt: Optional[str] = None


@dataclass
class CatalogItem:
    """Normalized, render-ready linesheet row."""

    product_id: str
    title: str
    style_number: Optional[str] = None
    season: Optional[str] = None
    wholesale: Optional[str] = None
    msrp: Optional[str] = None
    sizes: Optional[str] = None
    color: Optional[str] = None
    image: Optional[ItemImage] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"productId": self.product_id, "title": self.title}
        optional = {
            "styleNumber": self.style_number,
            "season": self.season,
            "wholesale": self.wholesale,
            "msrp": self.msrp,
            "sizes": self.sizes,
            "color": self.color,
        }
        data.update({key: value for key, value in optional.items() if value is not None})
        if self.image:
            image: Dict[str, Any] = {"url": self.image.url}
            if self.image.alt is not None:
                image["alt"] = self.image.alt
            data["image"] = image
        return data


@dataclass
class DocumentLayout:
    """Structural partition of catalog items for a rendering sink."""

    style: LayoutStyle
    items: List[CatalogItem] = field(default_factory=list)
    left: List[CatalogItem] = field(default_factory=list)
    right: List[CatalogItem] = field(default_factory=list)
    rows: List[List[CatalogItem]] = field(default_factory=list)
    products_per_row: int = 1
    card_width: float = 0.0

    @property
    def is_empty(self) -> bool:
        return not self.items

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "layoutStyle": self.style.value,
            "productsPerRow": self.products_per_row,
            "cardWidth": round(self.card_width, 2),
        }
        if self.style == LayoutStyle.TWO_COLUMN_COMPACT:
            data["left"] = [item.to_dict() for item in self.left]
            data["right"] = [item.to_dict() for item in self.right]
        else:
            data["rows"] = [[item.to_dict() for item in row] for row in self.rows]
        return data


def _get(data: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return None


def _flag(data: Dict[str, Any], default: bool, *keys: str) -> bool:
    value = _get(data, *keys)
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _money(value: Any) -> Optional[str]:
    """Accept a decimal string, a number, or a MoneyV2 ``{"amount": ...}`` object."""

    if value is None:
        return None
    if isinstance(value, dict):
        value = value.get("amount")
        if value is None:
            return None
    return str(value)
