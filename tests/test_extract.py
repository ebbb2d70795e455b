from linesheet.extract import (
    extract_color,
    extract_season,
    extract_sizes,
    extract_style_number,
    metafield_value,
    option_values,
)
from linesheet.formatting import ColorNormalizer
from linesheet.models import RawProduct


def _product(variants=None, metafields=None):
    return RawProduct.from_dict(
        {
            "id": "gid://shopify/Product/1",
            "title": "Sample",
            "variants": variants or [],
            "metafields": metafields or [],
        }
    )


def _variant(sku=None, **options):
    return {
        "id": f"gid://shopify/ProductVariant/{sku or 'x'}",
        "sku": sku,
        "price": "10.00",
        "selectedOptions": [{"name": name, "value": value} for name, value in options.items()],
    }


def test_style_number_prefers_first_sku():
    product = _product(
        variants=[_variant(None), _variant("ABC-1")],
        metafields=[{"namespace": "custom", "key": "style_number", "value": "MF-1"}],
    )
    assert extract_style_number(product) == "ABC-1"


def test_style_number_falls_back_to_metafield():
    product = _product(
        variants=[_variant(None)],
        metafields=[{"namespace": "custom", "key": "style", "value": "MF-2"}],
    )
    assert extract_style_number(product) == "MF-2"


def test_style_number_absent():
    assert extract_style_number(_product()) is None


def test_metafield_lookup_ignores_namespace_and_empty_values():
    product = _product(
        metafields=[
            {"namespace": "other", "key": "season", "value": "FW25"},
            {"namespace": "custom", "key": "season", "value": "SS26"},
            {"namespace": "custom", "key": "collection", "value": ""},
        ]
    )
    assert metafield_value(product, "season") == "FW25"
    assert metafield_value(product, "collection") is None


def test_season_uses_collection_then_default():
    product = _product(metafields=[{"namespace": "custom", "key": "collection", "value": "Resort"}])

    assert extract_season(product) == "Resort"
    assert extract_season(_product(), default="SS26") == "SS26"
    assert extract_season(_product()) is None


def test_option_values_are_upper_cased_and_unique():
    product = _product(variants=[_variant("A", Color="Black"), _variant("B", color="black"), _variant("C", Color="Red")])

    assert option_values(product, "Color") == ["BLACK", "RED"]


def test_color_from_options():
    product = _product(variants=[_variant("A", Color="White"), _variant("B", Color="Black")])

    assert extract_color(product) == "BLACK+WHITE"


def test_color_from_metafield_is_normalized():
    product = _product(metafields=[{"namespace": "custom", "key": "colors", "value": "navy, grey"}])

    assert extract_color(product) == "DARK NAVY+GRAY"


def test_color_with_injected_normalizer():
    product = _product(metafields=[{"namespace": "custom", "key": "color", "value": "navy"}])

    assert extract_color(product, ColorNormalizer({"NAVY": "INK"})) == "INK"


def test_color_absent():
    assert extract_color(_product(variants=[_variant("A", Size="M")])) is None


def test_sizes_from_options():
    product = _product(variants=[_variant("A", Size="M"), _variant("B", Size="S"), _variant("C", Size="L")])

    assert extract_sizes(product) == "L - S"


def test_sizes_from_metafield_used_verbatim():
    product = _product(metafields=[{"namespace": "custom", "key": "sizes", "value": "S-XL"}])

    assert extract_sizes(product) == "S-XL"
    assert extract_sizes(_product()) is None
