import io
from pathlib import Path
from unittest.mock import MagicMock

import pandas as pd
import pytest
import requests
from fastapi.testclient import TestClient

from api.app import create_app
from config import Settings
from linesheet.ingest import InputLoader

FIXTURES = Path(__file__).parent / "fixtures"


def _product_payload():
    return [
        {
            "id": "gid://shopify/Product/1",
            "title": "essential cotton t-shirt",
            "images": [{"url": "https://cdn.example.com/tee.jpg"}],
            "variants": [
                {
                    "id": "gid://shopify/ProductVariant/11",
                    "sku": "ECT001",
                    "price": "25.00",
                    "compareAtPrice": "30.00",
                    "selectedOptions": [{"name": "Size", "value": "S"}, {"name": "Color", "value": "Black"}],
                }
            ],
            "metafields": [{"key": "season", "value": "SS26"}],
        },
        {"id": "gid://shopify/Product/2", "title": "Cap", "variants": [{"id": "v2", "price": "15"}]},
    ]


@pytest.fixture
def client(tmp_path: Path) -> TestClient:
    settings = Settings(embed_images=False, cache_root=tmp_path / "cache")
    return TestClient(create_app(settings, client_factory=lambda _: None))


def test_healthcheck(client: TestClient):
    assert client.get("/healthz").json() == {"status": "ok"}


def test_items_route_maps_products(client: TestClient):
    response = client.post("/linesheets/items", json={"products": _product_payload(), "config": {"currency": "USD"}})

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 2
    assert body["items"][0]["title"] == "ESSENTIAL COTTON T-SHIRT"
    assert body["items"][0]["wholesale"] == "$25.00"
    assert "msrp" not in body["items"][1]


def test_layout_route(client: TestClient):
    response = client.post(
        "/linesheets/layout",
        json={"products": _product_payload(), "config": {"layoutStyle": "grid", "productsPerRow": 1}},
    )

    assert response.status_code == 200
    assert [[entry["productId"] for entry in row] for row in response.json()["rows"]] == [
        ["gid://shopify/Product/1"],
        ["gid://shopify/Product/2"],
    ]


def test_price_list_in_request_body(client: TestClient):
    response = client.post(
        "/linesheets/items",
        json={
            "products": _product_payload(),
            "priceList": {"prices": [{"variantId": "v2", "price": "9"}]},
            "config": {"priceSource": "price_list"},
        },
    )

    assert [item.get("wholesale") for item in response.json()["items"]] == [None, "$9.00"]


def test_preview_renders_html(client: TestClient):
    response = client.post(
        "/linesheets/preview",
        json={"products": _product_payload(), "config": {"headerTitle": "SS26 Wholesale", "fieldToggles": {"msrp": False}}},
    )

    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "SS26 Wholesale" in response.text
    assert "Style: ECT001" in response.text
    assert "MSRP" not in response.text


def test_pdf_route(client: TestClient):
    response = client.post("/linesheets/pdf", json={"products": _product_payload(), "config": {"headerTitle": "Core"}})

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert 'filename="Linesheet_core_' in response.headers["content-disposition"]
    assert response.content.startswith(b"%PDF")


def test_excel_route(client: TestClient):
    response = client.post("/linesheets/excel", json={"products": _product_payload(), "config": {"season": "SS26"}})

    assert response.status_code == 200
    assert "linesheet-SS26-" in response.headers["content-disposition"]
    df = pd.read_excel(io.BytesIO(response.content), sheet_name="Linesheet")
    assert list(df["Name"]) == ["ESSENTIAL COTTON T-SHIRT", "CAP"]


def test_empty_selection_is_rejected(client: TestClient):
    response = client.post(
        "/linesheets/items",
        json={"products": _product_payload(), "config": {"products": ["gid://shopify/Product/404"]}},
    )

    assert response.status_code == 400


def test_selection_without_shopify_is_rejected(client: TestClient):
    response = client.post("/linesheets/items", json={"config": {"products": ["gid://shopify/Product/1"]}})

    assert response.status_code == 400
    assert "Shopify is not configured" in response.json()["detail"]


def test_invalid_product_is_rejected(client: TestClient):
    response = client.post("/linesheets/items", json={"products": [{"title": "no id"}]})

    assert response.status_code == 400


def test_selection_is_fetched_from_shopify(tmp_path: Path):
    shopify = MagicMock()
    shopify.fetch_products.return_value = InputLoader(FIXTURES / "products.json").load_products()
    app = create_app(Settings(embed_images=False), client_factory=lambda _: shopify)

    response = TestClient(app).post(
        "/linesheets/items",
        json={"config": {"products": [{"productId": "gid://shopify/Product/2"}]}},
    )

    assert response.status_code == 200
    assert [item["productId"] for item in response.json()["items"]] == ["gid://shopify/Product/2"]
    shopify.fetch_products.assert_called_once_with(["gid://shopify/Product/2"])


def test_shopify_failure_maps_to_bad_gateway():
    shopify = MagicMock()
    shopify.fetch_products.side_effect = requests.HTTPError("GraphQL error")
    app = create_app(Settings(), client_factory=lambda _: shopify)

    response = TestClient(app).post("/linesheets/items", json={"config": {"products": ["gid://shopify/Product/1"]}})

    assert response.status_code == 502


def test_preview_uses_image_alt_text(client: TestClient):
    products = _product_payload()
    products[0]["images"] = [{"url": "https://cdn.example.com/tee.jpg", "altText": "Front view"}]
    products[1]["images"] = [{"url": "https://cdn.example.com/cap.jpg"}]

    response = client.post("/linesheets/preview", json={"products": products})

    assert 'alt="Front view"' in response.text
    assert 'alt="Cap"' in response.text


def test_pdf_route_with_wide_grid(client: TestClient):
    response = client.post(
        "/linesheets/pdf",
        json={"products": _product_payload(), "config": {"layoutStyle": "grid", "productsPerRow": 100}},
    )

    assert response.status_code == 200
    assert response.content.startswith(b"%PDF")


@pytest.mark.parametrize(
    "selection",
    [
        [5],
        [{"productId": "gid://shopify/Product/1", "order": "first"}],
        [{"productId": "gid://shopify/Product/1", "order": [1]}],
        [{"productId": "gid://shopify/Product/1", "variantIds": 7}],
    ],
)
def test_malformed_selection_is_rejected(client: TestClient, selection):
    response = client.post("/linesheets/items", json={"products": _product_payload(), "config": {"products": selection}})

    assert response.status_code == 400
