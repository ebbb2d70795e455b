from linesheet.models import PriceList, PriceSource, RawProduct
from linesheet.pricing import resolve_prices


def _product(metafields=None, compare_at=None):
    return RawProduct.from_dict(
        {
            "id": "gid://shopify/Product/1",
            "title": "Sample",
            "variants": [
                {"id": "gid://shopify/ProductVariant/1", "price": "12.50", "compareAtPrice": None},
                {"id": "gid://shopify/ProductVariant/2", "price": "14.00", "compareAtPrice": compare_at},
            ],
            "metafields": metafields or [],
        }
    )


def test_variant_price_is_default():
    prices = resolve_prices(_product())

    assert prices.wholesale == "$12.50"
    assert prices.msrp is None


def test_price_list_without_match_leaves_wholesale_absent():
    price_list = PriceList.from_dict({"prices": [{"variantId": "gid://shopify/ProductVariant/99", "price": "8.00"}]})

    prices = resolve_prices(_product(), price_list, PriceSource.PRICE_LIST)

    assert prices.wholesale is None


def test_price_list_without_list_leaves_wholesale_absent():
    assert resolve_prices(_product(), None, "price_list").wholesale is None


def test_price_list_match_uses_any_variant():
    price_list = PriceList.from_dict(
        {"prices": [{"variant": {"id": "gid://shopify/ProductVariant/2"}, "price": {"amount": "9.5", "currencyCode": "EUR"}}]}
    )

    prices = resolve_prices(_product(), price_list, "price_list", currency="EUR")

    assert prices.wholesale == "€9.50"


def test_metafield_wholesale_and_msrp():
    product = _product(
        metafields=[
            {"namespace": "custom", "key": "wholesale_price", "value": "6"},
            {"namespace": "custom", "key": "msrp", "value": "20"},
        ]
    )

    prices = resolve_prices(product, price_source=PriceSource.METAFIELD)

    assert prices.wholesale == "$6.00"
    assert prices.msrp == "$20.00"


def test_msrp_falls_back_to_compare_at_price():
    assert resolve_prices(_product(compare_at="30")).msrp == "$30.00"


def test_unknown_price_source_uses_variant_price():
    assert resolve_prices(_product(), price_source="bogus").wholesale == "$12.50"


def test_unparseable_price_passes_through():
    product = RawProduct.from_dict({"id": "1", "title": "x", "variants": [{"id": "v", "price": "TBD"}]})

    assert resolve_prices(product).wholesale == "TBD"
