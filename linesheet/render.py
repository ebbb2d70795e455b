"""Rendering sinks turning a composed layout into PDF, Excel, or JSON files."""

from __future__ import annotations

import io
import json
import logging
from datetime import date
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple
from xml.sax.saxutils import escape

import pandas as pd
from openpyxl.utils import get_column_letter
from PIL import Image as PILImage
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.pdfgen import canvas
from reportlab.platypus import Flowable, Image, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from reportlab.platypus.flowables import HRFlowable

from .formatting import parse_price
from .layout import CARD_MARGIN, PAGE_MARGINS, visible_fields
from .models import CatalogItem, DocumentLayout, LinesheetConfig
from .utils import safe_filename

ImageLoader = Callable[[str, Tuple[int, int]], Optional[PILImage.Image]]

# Platypus frames pad their content by 6pt on each side, inside the page margin.
FRAME_PADDING = 6.0
ROW_GAP = 15.0
CARD_PADDING = 8.0
CARD_IMAGE_HEIGHT = 90.0
LOGO_SIZE = (80.0, 40.0)
THUMBNAIL_SCALE = 2  # pixels requested per point

COLORS = {
    "text": colors.black,
    "muted": colors.HexColor("#666666"),
    "border": colors.HexColor("#E5E5E5"),
}
EXCEL_SHEET = "Linesheet"


class NumberedCanvas(canvas.Canvas):
    """Canvas that stamps the run footer with "Page x of y" once the page count is known."""

    def __init__(self, *args, footer: str = "", **kwargs):
        canvas.Canvas.__init__(self, *args, **kwargs)
        self._saved_page_states = []
        self._footer = footer

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        num_pages = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self.draw_page_footer(num_pages)
            canvas.Canvas.showPage(self)
        canvas.Canvas.save(self)

    def draw_page_footer(self, page_count: int) -> None:
        self.saveState()
        self.setFont("Helvetica", 8)
        self.setFillColor(COLORS["muted"])
        text = f"{self._footer} | Page {self._pageNumber} of {page_count}"
        self.drawCentredString(self._pagesize[0] / 2.0, PAGE_MARGINS / 2.0, text)
        self.restoreState()


def pdf_filename(config: LinesheetConfig, today: Optional[date] = None) -> str:
    stamp = (today or date.today()).isoformat()
    return f"Linesheet_{safe_filename(config.header_title)}_{stamp}.pdf"


def excel_filename(config: LinesheetConfig, today: Optional[date] = None) -> str:
    stamp = (today or date.today()).isoformat()
    return f"linesheet-{config.season or 'export'}-{stamp}.xlsx"


def render_pdf(
    layout: DocumentLayout,
    config: LinesheetConfig,
    destination: Path,
    image_loader: Optional[ImageLoader] = None,
    today: Optional[date] = None,
) -> Path:
    """Write the layout as a landscape A4 PDF with a header, card rows, and a numbered footer."""

    today = today or date.today()
    destination.parent.mkdir(parents=True, exist_ok=True)
    margin = PAGE_MARGINS / 2.0 - FRAME_PADDING
    doc = SimpleDocTemplate(
        str(destination),
        pagesize=landscape(A4),
        leftMargin=margin,
        rightMargin=margin,
        topMargin=PAGE_MARGINS / 2.0,
        bottomMargin=PAGE_MARGINS,
        title=config.header_title,
    )
    story = _PdfStory(layout, config, image_loader).build()
    footer = f"Generated on {today.isoformat()} | {len(layout.items)} products"

    def make_canvas(*args, **kwargs):
        return NumberedCanvas(*args, footer=footer, **kwargs)

    doc.build(story, canvasmaker=make_canvas)
    logging.info("Wrote linesheet PDF with %s items to %s", len(layout.items), destination)
    return destination


def excel_rows(items: Sequence[CatalogItem], config: LinesheetConfig) -> Tuple[List[str], List[Dict[str, object]]]:
    toggles = config.field_toggles
    currency = config.currency
    columns: List[Tuple[str, Callable[[CatalogItem], object]]] = []
    if toggles.product_name:
        columns.append(("Name", lambda item: item.title))
    if toggles.style_number:
        columns.append(("Style Number", lambda item: item.style_number or ""))
    if toggles.season:
        columns.append(("Season", lambda item: item.season or ""))
    if toggles.color:
        columns.append(("Color", lambda item: item.color or ""))
    if toggles.sizes:
        columns.append(("Sizes", lambda item: item.sizes or ""))
    if toggles.wholesale:
        columns.append((f"Wholesale ({currency})", lambda item: _price_cell(item.wholesale)))
    if toggles.msrp:
        columns.append((f"M.S.R.P. ({currency})", lambda item: _price_cell(item.msrp)))
    if toggles.images:
        columns.append(("Image", lambda item: item.image.url if item.image else ""))

    headers = [name for name, _ in columns]
    rows = [{name: getter(item) for name, getter in columns} for item in items]
    return headers, rows


def render_excel(items: Sequence[CatalogItem], config: LinesheetConfig, destination: Path) -> Path:
    headers, rows = excel_rows(items, config)
    if not rows:
        logging.warning("No items to export; writing empty workbook to %s", destination)
    df = pd.DataFrame(rows, columns=headers)

    destination.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(destination, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=EXCEL_SHEET, index=False)
        worksheet = writer.sheets[EXCEL_SHEET]
        for idx, header in enumerate(headers, start=1):
            longest = max([len(header)] + [len(str(row[header])) for row in rows])
            worksheet.column_dimensions[get_column_letter(idx)].width = min(max(longest + 2, 8), 60)
    logging.info("Wrote linesheet workbook with %s rows", len(df))
    return destination


def render_json(layout: DocumentLayout, config: LinesheetConfig, destination: Path) -> Path:
    payload = {
        "headerTitle": config.header_title,
        "subheader": config.subheader,
        "season": config.season,
        "currency": config.currency,
        "itemCount": len(layout.items),
        "layout": layout.to_dict(),
    }
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    return destination


def _price_cell(value: Optional[str]) -> object:
    if value is None:
        return ""
    amount = parse_price(value)
    return value if amount is None else amount


def create_styles() -> Dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    return {
        "title": ParagraphStyle(
            "LinesheetTitle", parent=base["Heading1"], fontName="Helvetica-Bold",
            fontSize=24, leading=29, alignment=TA_CENTER, spaceAfter=5,
        ),
        "subheader": ParagraphStyle(
            "LinesheetSubheader", parent=base["BodyText"], fontSize=16, leading=21,
            alignment=TA_CENTER, spaceAfter=5,
        ),
        "season": ParagraphStyle(
            "LinesheetSeason", parent=base["BodyText"], fontSize=12, leading=17,
            alignment=TA_CENTER, spaceAfter=5,
        ),
        "card_title": ParagraphStyle(
            "CardTitle", parent=base["BodyText"], fontName="Helvetica-Bold", fontSize=12, leading=14,
        ),
        "field": ParagraphStyle("CardField", parent=base["BodyText"], fontSize=9, leading=11),
    }


class _PdfStory:
    """Builds the platypus flowables for a layout: header, then one table per card row."""

    def __init__(
        self,
        layout: DocumentLayout,
        config: LinesheetConfig,
        image_loader: Optional[ImageLoader],
    ) -> None:
        self.layout = layout
        self.config = config
        self.toggles = config.field_toggles
        self.image_loader = image_loader
        self.styles = create_styles()

    def build(self) -> List[Flowable]:
        story = self._header()
        for row in self.layout.rows:
            story.append(self._row(row))
            story.append(Spacer(1, ROW_GAP))
        return story

    def _header(self) -> List[Flowable]:
        story: List[Flowable] = []
        if self.config.logo_url:
            logo = self._image(self.config.logo_url, *LOGO_SIZE)
            if logo is not None:
                story.append(logo)
                story.append(Spacer(1, 10))
        story.append(Paragraph(escape(self.config.header_title), self.styles["title"]))
        if self.config.subheader:
            story.append(Paragraph(escape(self.config.subheader), self.styles["subheader"]))
        if self.config.season:
            story.append(Paragraph(escape(self.config.season), self.styles["season"]))
        story.append(HRFlowable(width="100%", thickness=1, color=COLORS["text"], spaceBefore=5, spaceAfter=10))
        return story

    def _row(self, row: Sequence[CatalogItem]) -> Table:
        cells: List[object] = []
        widths: List[float] = []
        for idx, item in enumerate(row):
            if idx:
                cells.append("")
                widths.append(CARD_MARGIN)
            cells.append(self._card(item))
            widths.append(self.layout.card_width)
        table = Table([cells], colWidths=widths, hAlign="LEFT")
        table.setStyle(TableStyle([
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("LEFTPADDING", (0, 0), (-1, -1), 0),
            ("RIGHTPADDING", (0, 0), (-1, -1), 0),
            ("TOPPADDING", (0, 0), (-1, -1), 0),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 0),
        ]))
        return table

    def _card(self, item: CatalogItem) -> Table:
        inner_width = self.layout.card_width - CARD_PADDING * 2
        content: List[List[object]] = []
        if self.toggles.images:
            thumb = None
            if item.image:
                thumb = self._image(item.image.url, inner_width, CARD_IMAGE_HEIGHT)
            content.append([thumb or Spacer(1, CARD_IMAGE_HEIGHT)])
        if self.toggles.product_name:
            content.append([Paragraph(escape(item.title), self.styles["card_title"])])
        for label, value in visible_fields(item, self.toggles):
            content.append([Paragraph(f"{escape(label)}: {escape(value)}", self.styles["field"])])
        if not content:
            content.append([""])

        card = Table(content, colWidths=[self.layout.card_width])
        card.setStyle(TableStyle([
            ("BOX", (0, 0), (-1, -1), 1, COLORS["border"]),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("LEFTPADDING", (0, 0), (-1, -1), CARD_PADDING),
            ("RIGHTPADDING", (0, 0), (-1, -1), CARD_PADDING),
            ("TOPPADDING", (0, 0), (-1, -1), 1),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 1),
            ("TOPPADDING", (0, 0), (-1, 0), CARD_PADDING),
            ("BOTTOMPADDING", (0, -1), (-1, -1), CARD_PADDING),
        ]))
        return card

    def _image(self, url: str, width: float, height: float) -> Optional[Image]:
        """Thumbnail ``url`` through the loader and wrap it as a flowable no larger than the box."""

        if self.image_loader is None or width <= 0:
            return None
        size = (max(1, int(width * THUMBNAIL_SCALE)), max(1, int(height * THUMBNAIL_SCALE)))
        thumb = self.image_loader(url, size)
        if thumb is None:
            return None
        buffer = io.BytesIO()
        thumb.save(buffer, format="PNG")
        buffer.seek(0)
        return Image(buffer, width=thumb.width / THUMBNAIL_SCALE, height=thumb.height / THUMBNAIL_SCALE)
