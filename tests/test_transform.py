import logging
from pathlib import Path

from linesheet.ingest import InputLoader
from linesheet.models import LinesheetConfig, RawProduct
from linesheet.transform import map_product_to_item, map_products, order_selection

FIXTURES = Path(__file__).parent / "fixtures"


def _essential_tee() -> RawProduct:
    return RawProduct.from_dict(
        {
            "id": "gid://shopify/Product/1",
            "title": "essential cotton t-shirt",
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
        }
    )


def test_map_product_to_item_end_to_end():
    config = LinesheetConfig.from_dict({"priceSource": "variant_price", "currency": "USD"})

    item = map_product_to_item(_essential_tee(), None, config)

    assert item.to_dict() == {
        "productId": "gid://shopify/Product/1",
        "title": "ESSENTIAL COTTON T-SHIRT",
        "styleNumber": "ECT001",
        "season": "SS26",
        "wholesale": "$25.00",
        "msrp": "$30.00",
        "sizes": "S",
        "color": "BLACK",
    }


def test_map_product_image_alt_falls_back_to_title():
    products = InputLoader(FIXTURES / "products.json").load_products()

    item = map_product_to_item(products[0])

    assert item.image is not None
    assert item.image.url == "https://cdn.example.com/tee.jpg"
    assert item.image.alt == "essential cotton t-shirt"


def test_map_product_config_season_is_fallback():
    hoodie = InputLoader(FIXTURES / "products.json").load_products()[1]
    config = LinesheetConfig.from_dict({"season": "FW26"})

    item = map_product_to_item(hoodie, None, config)

    assert item.season == "FW26"
    assert item.style_number == "RH100-S"
    assert item.sizes == "L - S"
    assert item.color == "GREY+NAVY"
    assert item.msrp == "$120.00"
    assert item.image is None


def test_map_products_preserves_order():
    products = InputLoader(FIXTURES / "products.json").load_products()

    items = map_products(list(reversed(products)))

    assert [item.product_id for item in items] == ["gid://shopify/Product/2", "gid://shopify/Product/1"]


def test_order_selection_without_selection_keeps_input():
    products = InputLoader(FIXTURES / "products.json").load_products()

    ordered, missing = order_selection(products, LinesheetConfig())

    assert ordered == products
    assert missing == []


def test_order_selection_orders_and_reports_missing(caplog):
    products = InputLoader(FIXTURES / "products.json").load_products()
    config = InputLoader(FIXTURES / "config.json").load_config()

    with caplog.at_level(logging.WARNING):
        ordered, missing = order_selection(products, config)

    assert [p.id for p in ordered] == ["gid://shopify/Product/2", "gid://shopify/Product/1"]
    assert missing == ["gid://shopify/Product/404"]
    assert "Selected product not found" in caplog.text


def test_order_selection_unordered_entries_follow_ordered_ones():
    products = InputLoader(FIXTURES / "products.json").load_products()
    config = LinesheetConfig.from_dict(
        {"products": ["gid://shopify/Product/1", {"productId": "gid://shopify/Product/2", "order": 5}]}
    )

    ordered, _ = order_selection(products, config)

    assert [p.id for p in ordered] == ["gid://shopify/Product/2", "gid://shopify/Product/1"]


def test_order_selection_restricts_variants():
    products = InputLoader(FIXTURES / "products.json").load_products()
    config = LinesheetConfig.from_dict(
        {
            "priceSource": "price_list",
            "products": [
                {
                    "productId": "gid://shopify/Product/2",
                    "variantIds": ["gid://shopify/ProductVariant/22", "gid://shopify/ProductVariant/23"],
                }
            ],
        }
    )

    ordered, _ = order_selection(products, config)
    item = map_product_to_item(ordered[0], None, config)

    assert [v.id for v in ordered[0].variants] == ["gid://shopify/ProductVariant/22", "gid://shopify/ProductVariant/23"]
    assert len(products[1].variants) == 3
    assert item.style_number == "RH100-M"
    assert item.sizes == "L - M"
    assert item.wholesale is None
