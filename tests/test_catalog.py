"""Catalog client tests against httpx.MockTransport."""

import httpx
import pytest

from lookstudio.core.config import Settings
from lookstudio.services.catalog import CatalogClient, parse_product

MEDIA = "https://media.example.com"


def product_doc(**overrides):
    doc = {
        "entityId": 4021,
        "sku": "218542963",
        "name": "Ribbed Cotton Tank Top",
        "slug": "ribbed-cotton-tank-top",
        "initialPrice": 450,
        "minPriceInAED": 315,
        "media": [{"src": "/a/b/front.jpg"}, {"src": "/a/b/back.jpg"}, {"alt": "no src"}],
        "sizesInHomeDeliveryStock": ["S", "M"],
        "sizeAndFit": [{"label": "Size & Fit", "values": ["Fits true to size", "Model wears S"]}],
        "productClass": "Clothing",
        "analytics": {
            "division": "Women",
            "class": "Tops",
            "subClass": "Tank Tops",
            "brand": "Toteme",
            "color": "Ivory",
        },
    }
    doc.update(overrides)
    return doc


def make_client(handler) -> CatalogClient:
    settings = Settings(CATALOG_BASE_URL="https://catalog.example.com/findbysku",
                        CATALOG_MEDIA_BASE_URL=MEDIA)
    return CatalogClient(settings, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


class TestParseProduct:

    def test_maps_fields(self):
        product = parse_product(product_doc(), MEDIA)

        assert product.sku == "218542963"
        assert product.entity_id == 4021
        assert product.url_key == "ribbed-cotton-tank-top"
        assert product.min_price_in_aed == 315
        assert [m.src for m in product.media] == [f"{MEDIA}/a/b/front.jpg", f"{MEDIA}/a/b/back.jpg"]
        assert product.primary_image == f"{MEDIA}/a/b/front.jpg"
        assert product.size_and_fit == ["Fits true to size", "Model wears S"]
        assert product.class_ == "Tops"
        assert product.brand == "Toteme"
        assert product.season == "N/A"

    def test_html_size_and_fit(self):
        doc = product_doc(sizeAndFit="<p>• Width: 36cm</p>\n<p>• Height: 28cm</p>")
        assert parse_product(doc, MEDIA).size_and_fit == ["Width: 36cm", "Height: 28cm"]

    def test_requires_entity_id_and_sku(self):
        assert parse_product(product_doc(entityId=None), MEDIA) is None
        assert parse_product(product_doc(sku=""), MEDIA) is None
        assert parse_product(["not", "a", "dict"], MEDIA) is None

    def test_top_level_fields_win_over_analytics(self):
        doc = product_doc(color="Black")
        assert parse_product(doc, MEDIA).color == "Black"


class TestFetchProduct:

    @pytest.mark.asyncio
    async def test_found(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.params["sku"])
            return httpx.Response(200, json=product_doc())

        catalog = make_client(handler)
        product = await catalog.fetch_product("218542963")
        await catalog.close()

        assert seen == ["218542963"]
        assert product.name == "Ribbed Cotton Tank Top"

    @pytest.mark.asyncio
    async def test_http_error_is_not_found(self):
        catalog = make_client(lambda request: httpx.Response(404, json={"message": "nope"}))
        assert await catalog.fetch_product("0") is None
        await catalog.close()

    @pytest.mark.asyncio
    async def test_non_json_is_not_found(self):
        catalog = make_client(lambda request: httpx.Response(200, text="<html>oops</html>"))
        assert await catalog.fetch_product("0") is None
        await catalog.close()

    @pytest.mark.asyncio
    async def test_malformed_doc_is_not_found(self):
        catalog = make_client(lambda request: httpx.Response(200, json={"sku": "0"}))
        assert await catalog.fetch_product("0") is None
        await catalog.close()

    @pytest.mark.asyncio
    async def test_network_error_is_not_found(self):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        catalog = make_client(handler)
        assert await catalog.fetch_product("0") is None
        await catalog.close()
