import inspect
from collections.abc import Callable

import httpx
import pytest

from offapi import OpenFoodFactsApi

PRODUCT_PAYLOAD = {
    "code": "3017620422003",
    "status": 1,
    "status_verbose": "product found",
    "product": {
        "code": "3017620422003",
        "product_name": "Nutella",
        "brands": "Ferrero",
        "brands_tags": ["ferrero"],
        "categories_tags": ["en:spreads", "en:sweet-spreads"],
        "nutriscore_grade": "e",
        "nova_group": 4,
        "ecoscore_grade": "d",
    },
}

NOT_FOUND_PAYLOAD = {"code": "0000000000000", "status": 0, "status_verbose": "product not found"}

PRODUCTS_PAYLOAD = {
    "count": 2,
    "page": 1,
    "page_size": 24,
    "skip": 0,
    "products": [
        {"code": "3017620422003", "product_name": "Nutella"},
        {"code": "8000500310427", "product_name": "Nutella Biscuits"},
    ],
}

TAGS_PAYLOAD = {
    "count": 2,
    "tags": [
        {"id": "en:milk", "name": "Milk", "products": 120000, "known": 1, "url": "https://world.openfoodfacts.org/allergen/milk"},
        {"id": "en:gluten", "name": "Gluten", "products": 90000, "known": 1, "sameAs": ["https://www.wikidata.org/wiki/Q188251"]},
    ],
}


def _route(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/api/v0/product/0000000000000.json":
        return httpx.Response(200, json=NOT_FOUND_PAYLOAD)
    if path.startswith("/api/v0/product/"):
        return httpx.Response(200, json=PRODUCT_PAYLOAD)
    if path.startswith(("/cgi/search.pl", "/brand/", "/category/")):
        return httpx.Response(200, json=PRODUCTS_PAYLOAD)
    if path == "/missing.json":
        return httpx.Response(404, json={"status": 0})
    return httpx.Response(200, json=TAGS_PAYLOAD)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def requests_seen() -> list[httpx.Request]:
    """Requests received by the mock Open Food Facts service."""
    return []


@pytest.fixture
def make_http_client(requests_seen: list[httpx.Request]) -> Callable[..., httpx.AsyncClient]:
    """Build an AsyncClient backed by the mock service (or a custom handler)."""

    def factory(handler=None) -> httpx.AsyncClient:
        target = handler or _route

        async def recording(request: httpx.Request) -> httpx.Response:
            requests_seen.append(request)
            response = target(request)
            if inspect.isawaitable(response):
                response = await response
            return response

        return httpx.AsyncClient(transport=httpx.MockTransport(recording))

    return factory


@pytest.fixture
async def http_client(make_http_client):
    async with make_http_client() as client:
        yield client


@pytest.fixture
def api(http_client: httpx.AsyncClient) -> OpenFoodFactsApi:
    return OpenFoodFactsApi(http_client=http_client)
