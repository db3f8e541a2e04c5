"""
eBay Commerce Taxonomy API client.

Read-only calls authenticated with an application token:
    GET /commerce/taxonomy/v1/get_default_category_tree_id
    GET /commerce/taxonomy/v1/category_tree/{tree}/get_category_suggestions
    GET /commerce/taxonomy/v1/category_tree/{tree}/get_item_aspects_for_category

Non-2xx responses raise ClassificationError so the classifier can decide
how to degrade; transport errors propagate as httpx exceptions.
"""

import logging
import re
from typing import Any

import httpx

from listora.config import Settings, get_settings
from listora.core.exceptions import ClassificationError

logger = logging.getLogger(__name__)

MAX_QUERY_LENGTH = 100

# EBAY_US tree, used when no tree id is given
DEFAULT_TREE_ID = "0"


def required_aspect_names(aspects: list[dict[str, Any]]) -> list[str]:
    return [
        a["localizedAspectName"]
        for a in aspects
        if (a.get("aspectConstraint") or {}).get("aspectRequired") and a.get("localizedAspectName")
    ]


def clean_query(text: str) -> str:
    """Non-word characters to spaces, whitespace collapsed, at most 100 chars."""
    query = re.sub(r"[^\w\s]", " ", text or "")
    query = re.sub(r"\s+", " ", query).strip()
    return query[:MAX_QUERY_LENGTH].strip()


class TaxonomyClient:
    """
    Thin async wrapper over the Taxonomy API.

    Usage:
        client = TaxonomyClient(access_token)
        tree_id = await client.get_default_category_tree_id()
        suggestions = await client.get_category_suggestions("air fryer")
    """

    def __init__(
        self,
        access_token: str,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = settings or get_settings()
        self._access_token = access_token
        self._base_url = f"{settings.ebay_base_url}/commerce/taxonomy/v1"
        self._marketplace_id = settings.ebay_marketplace_id
        self._timeout = settings.transport_timeout_seconds
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._access_token}",
            "X-EBAY-C-MARKETPLACE-ID": self._marketplace_id,
            "Content-Type": "application/json",
        }

    async def _get(self, path: str, params: dict[str, str]) -> dict[str, Any]:
        async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
            response = await client.get(f"{self._base_url}{path}", params=params, headers=self._headers())

        if not response.is_success:
            raise ClassificationError(
                f"Taxonomy API {path} returned {response.status_code}",
                details={"status_code": response.status_code, "path": path},
            )
        return response.json()

    async def get_default_category_tree_id(self) -> str:
        """Reachability probe; returns the marketplace's category tree id."""
        marketplace = self._marketplace_id.replace("-", "_")
        data = await self._get("/get_default_category_tree_id", {"marketplace_id": marketplace})
        return str(data.get("categoryTreeId", DEFAULT_TREE_ID))

    async def get_category_suggestions(self, query: str, tree_id: str = DEFAULT_TREE_ID) -> list[dict[str, Any]]:
        """
        Ranked category suggestions for a free-text query.

        Returns:
            List of ``{"category_id", "category_name"}`` dicts, best first.
            Empty when eBay has no suggestion or the query is blank.
        """
        q = clean_query(query)
        if not q:
            return []
        data = await self._get(f"/category_tree/{tree_id}/get_category_suggestions", {"q": q})
        suggestions = []
        for item in data.get("categorySuggestions") or []:
            category = item.get("category") or {}
            if category.get("categoryId"):
                suggestions.append({
                    "category_id": str(category["categoryId"]),
                    "category_name": category.get("categoryName", ""),
                })
        return suggestions

    async def get_item_aspects(self, category_id: str, tree_id: str = DEFAULT_TREE_ID) -> list[dict[str, Any]]:
        """All aspects eBay declares for a leaf category."""
        data = await self._get(
            f"/category_tree/{tree_id}/get_item_aspects_for_category",
            {"category_id": category_id},
        )
        return list(data.get("aspects") or [])
