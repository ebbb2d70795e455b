"""Client for fetching catalog data from the Shopify Admin GraphQL API."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

import requests

from .models import PriceList, RawProduct

PRODUCT_FIELDS = """
  id
  title
  handle
  productType
  tags
  images(first: 1) { edges { node { url altText } } }
  variants(first: 100) {
    edges { node { id sku price compareAtPrice selectedOptions { name value } } }
  }
  metafields(first: 50) { edges { node { namespace key value } } }
"""

PRODUCTS_BY_ID_QUERY = (
    "query getProductsById($ids: [ID!]!) {"
    " nodes(ids: $ids) { ... on Product {" + PRODUCT_FIELDS + "} }"
    "}"
)

PRICE_LIST_QUERY = """
query getPriceList($id: ID!, $first: Int!, $after: String) {
  priceList(id: $id) {
    id
    name
    currency
    prices(first: $first, after: $after) {
      edges { node { variant { id } price { amount currencyCode } } }
      pageInfo { hasNextPage endCursor }
    }
  }
}
"""


@dataclass
class ShopifyConfig:
    store: str
    token: str
    api_version: str = "2024-10"
    timeout: int = 30
    max_backoff: float = 10.0
    max_retries: int = 5
    batch_size: int = 50

    @property
    def graphql_url(self) -> str:
        return f"https://{self.store}/admin/api/{self.api_version}/graphql.json"


def build_session(config: ShopifyConfig) -> requests.Session:
    session = requests.Session()
    session.headers.update(
        {
            "X-Shopify-Access-Token": config.token,
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": "linesheet-generator/0.1",
        }
    )
    return session


class ShopifyClient:
    """GraphQL client with 429 back-off for product and price list lookups."""

    def __init__(
        self,
        config: ShopifyConfig,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config
        self.session = session or build_session(config)
        self._sleep = sleep

    def graphql(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        payload = json.dumps({"query": query, "variables": variables})
        backoff = 1.0
        attempts = 0
        while True:
            response = self.session.post(self.config.graphql_url, data=payload, timeout=self.config.timeout)
            if response.status_code == 429 and attempts < self.config.max_retries:
                attempts += 1
                retry_after = min(_retry_after(response, backoff), self.config.max_backoff)
                logging.info("Shopify rate limited; retrying in %.1fs", retry_after, extra={"attempt": attempts})
                self._sleep(retry_after)
                backoff = min(backoff * 2, self.config.max_backoff)
                continue
            response.raise_for_status()
            data = response.json()
            if data.get("errors"):
                raise requests.HTTPError(f"GraphQL error: {data['errors']}", response=response)
            return data.get("data") or {}

    def fetch_products(self, product_ids: Sequence[str]) -> List[RawProduct]:
        products: List[RawProduct] = []
        ids = list(dict.fromkeys(product_ids))
        for start in range(0, len(ids), self.config.batch_size):
            batch = ids[start:start + self.config.batch_size]
            data = self.graphql(PRODUCTS_BY_ID_QUERY, {"ids": batch})
            for node in data.get("nodes") or []:
                if not node or not node.get("id"):
                    continue
                products.append(RawProduct.from_dict(node))
        logging.info("Fetched %s of %s requested products from Shopify", len(products), len(ids))
        return products

    def fetch_price_list(self, price_list_id: str, first: int = 250) -> Optional[PriceList]:
        """Fetch a price list, following the prices connection until the last page."""

        price_list: Optional[PriceList] = None
        after: Optional[str] = None
        while True:
            data = self.graphql(PRICE_LIST_QUERY, {"id": price_list_id, "first": first, "after": after})
            node = data.get("priceList")
            if not node:
                if price_list is None:
                    logging.warning("Price list not found", extra={"price_list_id": price_list_id})
                return price_list
            page = PriceList.from_dict(node)
            if price_list is None:
                price_list = page
            else:
                price_list.prices.extend(page.prices)
            page_info = (node.get("prices") or {}).get("pageInfo") or {}
            after = page_info.get("endCursor")
            if not page_info.get("hasNextPage") or not after:
                break
        logging.info("Fetched %s price list entries", len(price_list.prices), extra={"price_list_id": price_list_id})
        return price_list


def client_from_settings(settings: Any) -> Optional[ShopifyClient]:
    """Build a client from application settings, or None when Shopify is not configured."""

    if not settings.shopify_enabled:
        return None
    return ShopifyClient(
        ShopifyConfig(
            store=settings.shopify_store,
            token=settings.shopify_access_token,
            api_version=settings.shopify_api_version,
        )
    )


def _retry_after(response: requests.Response, default: float) -> float:
    try:
        return float(response.headers.get("Retry-After", default))
    except (TypeError, ValueError):
        return default
