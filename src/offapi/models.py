"""Pydantic models for client options and Open Food Facts API responses."""

import functools
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, model_validator

from offapi.abort import AbortController

logger = logging.getLogger(__name__)

DEFAULT_COUNTRY = "world"

# Upstream sends numeric codes and quantities for some products
_ADAPTER_CONFIG = ConfigDict(coerce_numbers_to_str=True)
_PAYLOAD_CONFIG = ConfigDict(extra="allow", populate_by_name=True, coerce_numbers_to_str=True)


class ClientOptions(BaseModel):
    """Configuration for :class:`offapi.client.OpenFoodFactsApi`."""

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="forbid")

    #: Country subdomain, see https://world.openfoodfacts.org/countries.
    country: str = DEFAULT_COUNTRY
    user_agent: str | None = None
    abort_controller: AbortController | None = None


@functools.cache
def _adapter(annotation: Any) -> TypeAdapter:
    return TypeAdapter(annotation, config=_ADAPTER_CONFIG)


class _Payload(BaseModel):
    """Base for upstream payloads: unknown fields are kept, nothing is required.

    Declared fields are a convenience view.  A value that does not fit its
    declared type (``null`` lists, ``[]`` for an object, ...) is dropped so
    the field keeps its default, instead of failing the whole response.
    """

    model_config = _PAYLOAD_CONFIG

    @model_validator(mode="before")
    @classmethod
    def _drop_unfit_values(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        cleaned = dict(data)
        for name, field in cls.model_fields.items():
            for key in {name, field.alias or name}:
                if key not in cleaned:
                    continue
                try:
                    _adapter(field.annotation).validate_python(cleaned[key])
                except ValidationError:
                    logger.debug(
                        "Ignoring unexpected %s value for %s.%s", type(cleaned[key]).__name__, cls.__name__, key
                    )
                    del cleaned[key]
        return cleaned


class Product(_Payload):
    """A product record as returned by Open Food Facts."""

    code: str | None = None
    product_name: str | None = None
    generic_name: str | None = None
    brands: str | None = None
    brands_tags: list[str] = []
    categories: str | None = None
    categories_tags: list[str] = []
    quantity: str | None = None
    image_url: str | None = None
    ingredients_text: str | None = None
    allergens_tags: list[str] = []
    additives_tags: list[str] = []
    nutriments: dict[str, Any] = {}
    nutriscore_grade: str | None = None
    nova_group: int | str | None = None


class ProductResponse(_Payload):
    """Barcode lookup result.  ``product`` is absent when nothing matched."""

    code: str | None = None
    status: int | None = None
    status_verbose: str | None = None
    product: Product | None = None


class ProductsResponse(_Payload):
    """A page of products from search, brand or category listings."""

    count: int | str | None = None
    page: int | str | None = None
    page_size: int | str | None = None
    page_count: int | str | None = None
    skip: int | str | None = None
    products: list[Product] = []


class Tag(_Payload):
    """A single entry of a taxonomy tag list."""

    id: str | None = None
    name: str | None = None
    url: str | None = None
    products: int | None = None
    known: int | None = None
    same_as: list[str] = Field(default=[], alias="sameAs")


class TagsResponse(_Payload):
    """A taxonomy tag list (brands, allergens, additives, ...)."""

    count: int | None = None
    tags: list[Tag] = []
