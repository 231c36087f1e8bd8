"""offapi - async client for the Open Food Facts REST API."""

from offapi.abort import AbortController, AbortError
from offapi.client import OpenFoodFactsApi
from offapi.models import (
    ClientOptions,
    Product,
    ProductResponse,
    ProductsResponse,
    Tag,
    TagsResponse,
)

__version__ = "0.1.0"

__all__ = [
    "AbortController",
    "AbortError",
    "ClientOptions",
    "OpenFoodFactsApi",
    "Product",
    "ProductResponse",
    "ProductsResponse",
    "Tag",
    "TagsResponse",
    "__version__",
]
