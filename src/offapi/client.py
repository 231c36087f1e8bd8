"""Async client for the Open Food Facts REST API."""

import logging
from typing import TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from offapi.abort import AbortController
from offapi.models import ClientOptions, Product, ProductResponse, ProductsResponse, TagsResponse
from offapi.services.fetch import fetchify

logger = logging.getLogger(__name__)

SERVICE_DOMAIN = "openfoodfacts.org"

# Characters left alone by JavaScript's encodeURIComponent.
_URI_COMPONENT_SAFE = "-_.!~*'()"

ModelT = TypeVar("ModelT", bound=BaseModel)


class OpenFoodFactsApi:
    """Typed wrapper around the Open Food Facts endpoints.

    Every method issues exactly one GET request to
    ``https://{country}.openfoodfacts.org/{path}.json`` and returns the
    parsed body.  Errors from the transport are not caught.

    Example::

        api = OpenFoodFactsApi(country="fr").set_user_agent("my-app/1.0")
        product = await api.find_product_by_barcode("3017620422003")
    """

    def __init__(
        self,
        options: ClientOptions | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        **overrides,
    ) -> None:
        base = dict(options) if options is not None else {}
        merged = ClientOptions(**{**base, **overrides})

        self._country = merged.country
        self._user_agent = merged.user_agent
        self._abort_controller = merged.abort_controller
        self._http_client = http_client
        self._base_url = f"https://{self._country}.{SERVICE_DOMAIN}"
        logger.debug("OpenFoodFactsApi configured for %s", self._base_url)

    @property
    def country(self) -> str:
        return self._country

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def user_agent(self) -> str | None:
        return self._user_agent

    @property
    def abort_controller(self) -> AbortController | None:
        return self._abort_controller

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    async def find_product_by_barcode(self, barcode: str) -> Product | None:
        """Look up a product by EAN/barcode; ``None`` when the service has no product."""
        response = await self._request(f"/api/v0/product/{barcode}", ProductResponse)
        return response.product

    async def find_products_by_search_term(self, search_term: str, page: int = 1) -> ProductsResponse:
        """Full-text product search."""
        term = quote(search_term, safe=_URI_COMPONENT_SAFE)
        return await self._request(
            "/cgi/search.pl",
            ProductsResponse,
            query=f"search_terms={term}&page={page}&search_simple=1&action=process&json=1",
        )

    async def find_products_by_brand(self, brand_name: str, page: int = 1) -> ProductsResponse:
        """Products of one brand, one page at a time."""
        return await self._request(f"/brand/{brand_name}/{page}", ProductsResponse)

    async def find_products_by_category(self, category: str, page: int = 1) -> ProductsResponse:
        """Products in one category, one page at a time."""
        return await self._request(f"/category/{category}/{page}", ProductsResponse)

    # ------------------------------------------------------------------
    # Taxonomy tag lists
    # ------------------------------------------------------------------

    async def find_categories(self) -> TagsResponse:
        """All product categories."""
        return await self._request("/categories", TagsResponse)

    async def find_countries(self) -> TagsResponse:
        """Countries where products are sold."""
        return await self._request("/countries", TagsResponse)

    async def find_ingredients(self) -> TagsResponse:
        """All known ingredients."""
        return await self._request("/ingredients", TagsResponse)

    async def find_packagings(self) -> TagsResponse:
        """Packaging types and materials."""
        return await self._request("/packaging", TagsResponse)

    async def find_packaging_codes(self) -> TagsResponse:
        """Packager (EMB) codes."""
        return await self._request("/packager-codes", TagsResponse)

    async def find_purchase_places(self) -> TagsResponse:
        """Places where products were bought."""
        return await self._request("/purchase-places", TagsResponse)

    async def find_states(self) -> TagsResponse:
        """Data-completion states of product records."""
        return await self._request("/states", TagsResponse)

    async def find_traces(self) -> TagsResponse:
        """Allergen traces declared on labels."""
        return await self._request("/traces", TagsResponse)

    async def find_entry_dates(self) -> TagsResponse:
        """Dates products were added to the database."""
        return await self._request("/entry-dates", TagsResponse)

    async def find_allergens(self) -> TagsResponse:
        """Allergens."""
        return await self._request("/allergens", TagsResponse)

    async def find_additives(self) -> TagsResponse:
        """Food additives (E-numbers)."""
        return await self._request("/additives", TagsResponse)

    async def find_languages(self) -> TagsResponse:
        """Languages used on product labels."""
        return await self._request("/languages", TagsResponse)

    async def find_brands(self) -> TagsResponse:
        """All brands."""
        return await self._request("/brands", TagsResponse)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_controller(self, abort_controller: AbortController | None = None) -> "OpenFoodFactsApi":
        """Replace the abort controller used by subsequent requests.

        Requests already in flight keep the controller they started with.
        """
        self._abort_controller = abort_controller
        return self

    def set_user_agent(self, user_agent: str | None = None) -> "OpenFoodFactsApi":
        """Replace the ``User-Agent`` header; ``None`` or ``""`` removes it."""
        self._user_agent = user_agent
        return self

    def _build_url(self, api_path: str, query: str | None = None) -> str:
        """Return the absolute URL for *api_path*, with ``.json`` ahead of *query*."""
        url = f"{self._base_url}{api_path}.json"
        return f"{url}?{query}" if query else url

    async def _request(self, api_path: str, model: type[ModelT], query: str | None = None) -> ModelT:
        headers = {"User-Agent": self._user_agent} if self._user_agent else None
        data = await fetchify(
            self._build_url(api_path, query),
            headers,
            self._abort_controller,
            http_client=self._http_client,
        )
        if not isinstance(data, dict):
            logger.warning("Expected a JSON object from %s, got %s", api_path, type(data).__name__)
            data = {}
        return model.model_validate(data)
