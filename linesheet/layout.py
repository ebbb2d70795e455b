"""Document composition: partition catalog items into columns or grid rows."""

from __future__ import annotations

from typing import List, Sequence, Tuple

from .models import CatalogItem, DocumentLayout, FieldToggles, LayoutStyle, LinesheetConfig

# A4 landscape, in points.
PAGE_WIDTH = 842.0
PAGE_MARGINS = 40.0
CARD_MARGIN = 10.0
# Wider grids leave cards too narrow for a thumbnail and a wrapped title.
MAX_PRODUCTS_PER_ROW = 6

FIELD_LABELS: Sequence[Tuple[str, str]] = (
    ("style_number", "Style"),
    ("season", "Season"),
    ("wholesale", "Wholesale"),
    ("msrp", "MSRP"),
    ("sizes", "Sizes"),
    ("color", "Color"),
)


def compose_layout(items: Sequence[CatalogItem], config: LinesheetConfig) -> DocumentLayout:
    items = list(items)
    style = config.layout_style

    if style == LayoutStyle.TWO_COLUMN_COMPACT:
        return DocumentLayout(
            style=style,
            items=items,
            left=items[0::2],
            right=items[1::2],
            rows=[items[i:i + 2] for i in range(0, len(items), 2)],
            products_per_row=2,
            card_width=card_width(2),
        )

    per_row = clamp_per_row(config.products_per_row) if style == LayoutStyle.GRID else 1
    return DocumentLayout(
        style=style,
        items=items,
        rows=[items[i:i + per_row] for i in range(0, len(items), per_row)],
        products_per_row=per_row,
        card_width=card_width(per_row),
    )


def clamp_per_row(products_per_row: int) -> int:
    return min(max(1, products_per_row), MAX_PRODUCTS_PER_ROW)


def card_width(
    products_per_row: int,
    page_width: float = PAGE_WIDTH,
    page_margins: float = PAGE_MARGINS,
    card_margin: float = CARD_MARGIN,
) -> float:
    per_row = clamp_per_row(products_per_row)
    return (page_width - page_margins - (per_row - 1) * card_margin) / per_row


def visible_fields(item: CatalogItem, toggles: FieldToggles) -> List[Tuple[str, str]]:
    """Label/value pairs to print for an item: toggled on and actually present."""

    fields: List[Tuple[str, str]] = []
    for attr, label in FIELD_LABELS:
        value = getattr(item, attr)
        if getattr(toggles, attr) and value is not None:
            fields.append((label, value))
    return fields
