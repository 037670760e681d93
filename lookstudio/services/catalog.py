"""
Product catalog lookup (SKU → ProductReference).

The catalog answers GET {base_url}?sku=<code> with a product JSON document.
A document is usable when it carries both `entityId` and `sku`. Anything else —
including network errors, HTTP errors and non-JSON bodies — counts as not found.
"""

import logging
from typing import Any, Optional

import httpx

from ..core.config import Settings
from ..schemas import ProductMedia, ProductReference

logger = logging.getLogger(__name__)

_NA = "N/A"


def _parse_size_and_fit(raw: Any) -> list[str]:
    """
    Size & fit arrives in two shapes:
      [{"label": "...", "values": ["...", "..."]}]
      "<p>• Width: 36cm</p>\\n<p>• Height: 28cm</p>"
    """
    if isinstance(raw, list) and raw and isinstance(raw[0], dict):
        values = raw[0].get("values")
        if isinstance(values, list):
            return [str(v) for v in values]
        return []
    if isinstance(raw, str):
        text = raw.replace("<p>", "\n").replace("</p>", "")
        lines = (line.replace("•", "").strip() for line in text.split("\n"))
        return [line for line in lines if line]
    return []


def parse_product(data: Any, media_base_url: str) -> Optional[ProductReference]:
    """Map a raw catalog document to a ProductReference. None if malformed."""
    if not isinstance(data, dict) or not data.get("entityId") or not data.get("sku"):
        return None

    analytics = data.get("analytics") or {}
    media = [
        ProductMedia(src=f"{media_base_url}{m['src']}")
        for m in data.get("media") or []
        if isinstance(m, dict) and m.get("src")
    ]

    return ProductReference(
        entity_id=data["entityId"],
        sku=data["sku"],
        name=data.get("name") or data["sku"],
        url_key=data.get("slug") or "",
        initial_price=data.get("initialPrice"),
        min_price_in_aed=data.get("minPriceInAED"),
        media=media,
        sizes_in_home_delivery_stock=data.get("sizesInHomeDeliveryStock") or [],
        size_and_fit=_parse_size_and_fit(data.get("sizeAndFit")),
        # Top-level fields first, the nested analytics object as fallback
        division=analytics.get("division") or _NA,
        product_class=data.get("productClass") or analytics.get("productClass") or _NA,
        color=data.get("color") or analytics.get("color") or _NA,
        sub_class=analytics.get("subClass") or _NA,
        season=data.get("season") or analytics.get("season") or _NA,
        designer=data.get("designer") or analytics.get("designer") or _NA,
        department=data.get("department") or analytics.get("department") or _NA,
        class_=analytics.get("class") or _NA,
        group=analytics.get("group") or _NA,
        brand=analytics.get("brand") or _NA,
    )


class CatalogClient:
    """Async catalog client. Safe to call concurrently for distinct SKUs."""

    def __init__(self, settings: Settings, client: Optional[httpx.AsyncClient] = None):
        self.base_url = settings.catalog_base_url
        self.media_base_url = settings.catalog_media_base_url
        self.timeout = settings.catalog_timeout
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def fetch_product(self, sku: str) -> Optional[ProductReference]:
        try:
            response = await self.client.get(self.base_url, params={"sku": sku})
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            logger.error("Catalog request failed for SKU %s: %s", sku, e)
            return None
        except ValueError as e:
            # Proxies sometimes answer with an HTML error page
            logger.error("Catalog returned non-JSON content for SKU %s: %s", sku, e)
            return None

        product = parse_product(data, self.media_base_url)
        if product is None:
            logger.warning("SKU %s not found in catalog response or data is malformed", sku)
        return product

    async def close(self) -> None:
        """Close the shared HTTP client. Call on app shutdown."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
