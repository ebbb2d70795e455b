"""FastAPI application exposing linesheet rendering and preview routes."""

from __future__ import annotations

import tempfile
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests
from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import HTMLResponse, JSONResponse, Response
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel, ConfigDict, Field

from config import Settings, load_settings
from linesheet.client import ShopifyClient, client_from_settings
from linesheet.images import ImageManager
from linesheet.layout import compose_layout, visible_fields
from linesheet.models import CatalogItem, LinesheetConfig, PriceList, PriceSource, RawProduct
from linesheet.render import excel_filename, pdf_filename, render_excel, render_pdf
from linesheet.transform import map_products, order_selection

TEMPLATE_DIR = Path(__file__).parent / "templates"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class RenderRequest(BaseModel):
    """Products (or a selection to fetch from Shopify), optional price list, and config."""

    model_config = ConfigDict(populate_by_name=True)

    products: Optional[List[Dict[str, Any]]] = None
    price_list: Optional[Dict[str, Any]] = Field(None, alias="priceList")
    price_list_id: Optional[str] = Field(None, alias="priceListId")
    config: Dict[str, Any] = Field(default_factory=dict)


def create_app(
    settings: Optional[Settings] = None,
    client_factory: Optional[Callable[[Settings], Optional[ShopifyClient]]] = None,
) -> FastAPI:
    settings = settings or load_settings()
    templates = Jinja2Templates(directory=str(TEMPLATE_DIR))
    client_factory = client_factory or client_from_settings

    app = FastAPI(title="Linesheet Generator", version="0.1.0")
    app.state.settings = settings
    app.state.templates = templates

    def get_settings() -> Settings:
        return settings

    def prepare(body: RenderRequest, settings: Settings) -> Tuple[LinesheetConfig, List[CatalogItem]]:
        try:
            config = LinesheetConfig.from_dict(
                body.config,
                default_currency=settings.default_currency,
                default_price_source=settings.default_price_source,
            )
            products, price_list = _resolve_catalog(body, config, settings, client_factory)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
        except requests.HTTPError as exc:
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Shopify request failed: {exc}") from exc

        ordered, _ = order_selection(products, config)
        if not ordered:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No products selected")
        return config, map_products(ordered, price_list, config)

    @app.get("/healthz", response_class=JSONResponse)
    async def healthcheck() -> dict:
        return {"status": "ok"}

    @app.post("/linesheets/items", response_class=JSONResponse)
    def linesheet_items(body: RenderRequest, settings: Settings = Depends(get_settings)) -> dict:
        _, items = prepare(body, settings)
        return {"items": [item.to_dict() for item in items], "total": len(items)}

    @app.post("/linesheets/layout", response_class=JSONResponse)
    def linesheet_layout(body: RenderRequest, settings: Settings = Depends(get_settings)) -> dict:
        config, items = prepare(body, settings)
        return compose_layout(items, config).to_dict()

    @app.post("/linesheets/preview", response_class=HTMLResponse)
    def linesheet_preview(
        request: Request,
        body: RenderRequest,
        settings: Settings = Depends(get_settings),
    ) -> HTMLResponse:
        config, items = prepare(body, settings)
        layout = compose_layout(items, config)

        def card(item: CatalogItem) -> dict:
            return {"item": item, "fields": visible_fields(item, config.field_toggles)}

        return templates.TemplateResponse(
            request,
            "preview.html",
            {
                "config": config,
                "two_column": layout.style.value == "two-column-compact",
                "left": [card(item) for item in layout.left],
                "right": [card(item) for item in layout.right],
                "rows": [[card(item) for item in row] for row in layout.rows],
                "card_width": layout.card_width,
                "total": len(items),
                "generated_on": date.today().isoformat(),
            },
        )

    @app.post("/linesheets/pdf")
    def linesheet_pdf(body: RenderRequest, settings: Settings = Depends(get_settings)) -> Response:
        config, items = prepare(body, settings)
        layout = compose_layout(items, config)
        loader = None
        if settings.embed_images:
            loader = ImageManager(settings.cache_root / "images", timeout=settings.image_timeout)
        filename = pdf_filename(config)
        with tempfile.TemporaryDirectory() as tmp:
            path = render_pdf(layout, config, Path(tmp) / filename, loader)
            content = path.read_bytes()
        return Response(
            content=content,
            media_type="application/pdf",
            headers={
                "Content-Disposition": f'attachment; filename="{filename}"',
                "Cache-Control": "no-cache",
            },
        )

    @app.post("/linesheets/excel")
    def linesheet_excel(body: RenderRequest, settings: Settings = Depends(get_settings)) -> Response:
        config, items = prepare(body, settings)
        filename = excel_filename(config)
        with tempfile.TemporaryDirectory() as tmp:
            path = render_excel(items, config, Path(tmp) / filename)
            content = path.read_bytes()
        return Response(
            content=content,
            media_type=XLSX_MEDIA_TYPE,
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    return app


def _resolve_catalog(
    body: RenderRequest,
    config: LinesheetConfig,
    settings: Settings,
    client_factory: Callable[[Settings], Optional[ShopifyClient]],
) -> Tuple[List[RawProduct], Optional[PriceList]]:
    client: Optional[ShopifyClient] = None
    if body.products is not None:
        products = [RawProduct.from_dict(entry) for entry in body.products]
    else:
        if not config.products:
            raise ValueError("Request must include products or a product selection")
        client = client_factory(settings)
        if client is None:
            raise ValueError("Shopify is not configured; include products in the request")
        products = client.fetch_products([selection.product_id for selection in config.products])

    price_list: Optional[PriceList] = None
    if config.price_source == PriceSource.PRICE_LIST:
        if body.price_list is not None:
            price_list = PriceList.from_dict(body.price_list)
        else:
            price_list_id = body.price_list_id or settings.shopify_price_list_id
            if price_list_id:
                client = client or client_factory(settings)
                if client is not None:
                    price_list = client.fetch_price_list(price_list_id)
    return products, price_list


app = create_app()
