"""
Read-only browsing of a remote aggregator catalog
"""
import math
from typing import Any, Dict, Optional

from .client import build_api_url, build_query_url
from .schemas import parse_list_response
from ..logging_config import setup_logging

logger = setup_logging(__name__)


class RemoteCatalogBrowser:
    """Lists categories and videos of an aggregator without touching the catalog"""

    def __init__(self, client):
        self.client = client

    async def categories(self, api_url: str) -> Dict[str, Any]:
        body = await self.client.fetch_text(build_api_url(api_url, "list"))
        response = parse_list_response(body)
        return {"categories": [c.model_dump() for c in response.categories]}

    async def videos(
        self,
        api_url: str,
        page: Optional[int] = None,
        type_id: Optional[str] = None,
        wd: Optional[str] = None,
        limit: int = 20
    ) -> Dict[str, Any]:
        """One page of remote videos; total_pages is computed against `limit`"""
        url = build_query_url(api_url, page=page, type_id=type_id, wd=wd)
        response = parse_list_response(await self.client.fetch_text(url))
        limit = limit if limit > 0 else 20
        logger.debug(f"Browsed {len(response.items)} remote videos from {url}")
        return {
            "videos": response.items,
            "total": response.total,
            "total_pages": math.ceil(response.total / limit),
        }
