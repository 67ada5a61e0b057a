"""
DataForSEO API Client

Async HTTP client with:
- Connection pooling
- Automatic retry with exponential backoff
- Graceful error handling
- Helpers for the endpoints the gap engine uses (domain intersection,
  ranked keywords)
"""

import asyncio
import base64
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

TASK_OK_CODES = (20000, 20100)


def safe_get_result(response: Dict, get_items: bool = True) -> Any:
    """
    Safely extract result data from a DataForSEO API response.

    Args:
        response: Raw API response dict
        get_items: If True, returns the items list. If False, returns the first result object.

    Returns:
        List of items, result dict, or empty list/dict when missing
    """
    empty: Any = [] if get_items else {}

    tasks = response.get("tasks") if isinstance(response, dict) else None
    if not tasks or not isinstance(tasks, list):
        return empty

    result = (tasks[0] or {}).get("result")
    if not result or not isinstance(result, list):
        return empty

    first_result = result[0]
    if not first_result or not isinstance(first_result, dict):
        return empty

    if not get_items:
        return first_result

    items = first_result.get("items")
    return items if isinstance(items, list) else []


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""
    max_retries: int = 3
    initial_delay: float = 1.0
    max_delay: float = 10.0
    exponential_base: float = 2.0
    retryable_status_codes: tuple = (429, 500, 502, 503, 504)


class DataForSEOError(Exception):
    """Custom exception for DataForSEO API errors."""
    def __init__(self, message: str, status_code: int = None, response: dict = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class DataForSEOClient:
    """
    Async client for DataForSEO API.

    Usage:
        async with DataForSEOClient(login="your_login", password="your_password") as client:
            items = await client.fetch_domain_intersection(
                "rival.com", "example.com", location_code=2840
            )
    """

    BASE_URL = "https://api.dataforseo.com/v3"

    def __init__(
        self,
        login: str,
        password: str,
        retry_config: Optional[RetryConfig] = None,
        max_connections: int = 10,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize DataForSEO client.

        Args:
            login: DataForSEO login email
            password: DataForSEO API password
            retry_config: Retry configuration (optional)
            max_connections: Maximum concurrent connections
            timeout: Request timeout in seconds
            transport: Custom httpx transport (tests)
        """
        self.retry_config = retry_config or RetryConfig()

        credentials = f"{login}:{password}"
        auth_token = base64.b64encode(credentials.encode()).decode()

        self._client = httpx.AsyncClient(
            base_url=self.BASE_URL,
            headers={
                "Authorization": f"Basic {auth_token}",
                "Content-Type": "application/json",
            },
            limits=httpx.Limits(
                max_connections=max_connections,
                max_keepalive_connections=max(1, max_connections // 2),
            ),
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )
        self._closed = False

    async def post(
        self,
        endpoint: str,
        data: List[Dict[str, Any]],
        retry: bool = True,
    ) -> Dict[str, Any]:
        """
        Make POST request to DataForSEO API.

        Args:
            endpoint: API endpoint path (e.g., "dataforseo_labs/google/domain_intersection/live")
            data: Request payload (list of task objects)
            retry: Whether to retry on failure

        Returns:
            API response as dictionary

        Raises:
            DataForSEOError: On API error
        """
        if self._closed:
            raise DataForSEOError("Client is closed")

        url = f"/{endpoint}"
        if retry:
            return await self._request_with_retry(url, data)
        return await self._make_request(url, data)

    async def _make_request(self, url: str, data: List[Dict]) -> Dict[str, Any]:
        """Make a single HTTP request."""
        logger.debug(f"POST {url}")

        response = await self._client.post(url, json=data)

        if response.status_code != 200:
            raise DataForSEOError(
                f"API request failed: {response.status_code}",
                status_code=response.status_code,
                response=response.json() if response.content else None,
            )

        result = response.json()

        if result.get("status_code") != 20000:
            raise DataForSEOError(
                f"API error: {result.get('status_message', 'Unknown error')}",
                status_code=result.get("status_code"),
                response=result,
            )

        for task in result.get("tasks") or []:
            if task.get("status_code") not in TASK_OK_CODES:
                raise DataForSEOError(
                    f"Task error in {url}: {task.get('status_message', 'Task error')}",
                    status_code=task.get("status_code"),
                    response=result,
                )

        return result

    def _is_retryable(self, error: DataForSEOError) -> bool:
        # Client errors (4xx except 429) and task errors are final
        if error.status_code is None:
            return True
        return error.status_code in self.retry_config.retryable_status_codes

    async def _request_with_retry(self, url: str, data: List[Dict]) -> Dict[str, Any]:
        """Make request with automatic retry on failure."""
        delay = self.retry_config.initial_delay
        attempts = self.retry_config.max_retries + 1

        for attempt in range(attempts):
            try:
                return await self._make_request(url, data)
            except DataForSEOError as e:
                error = e
                if not self._is_retryable(e):
                    raise
            except httpx.TimeoutException as e:
                error = DataForSEOError(f"Request timed out: {e}")
            except httpx.HTTPError as e:
                error = DataForSEOError(f"HTTP error: {e}")

            if attempt == attempts - 1:
                raise error

            logger.warning(
                f"Request to {url} failed (attempt {attempt + 1}/{attempts}): {error}. "
                f"Retrying in {delay}s..."
            )
            await asyncio.sleep(delay)
            delay = min(delay * self.retry_config.exponential_base, self.retry_config.max_delay)

    async def close(self):
        """Close the HTTP client."""
        if not self._closed:
            await self._client.aclose()
            self._closed = True

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # ========================================================================
    # KEYWORD GAP ENDPOINTS
    # ========================================================================

    async def fetch_domain_intersection(
        self,
        target1: str,
        target2: str,
        location_code: int = 2840,
        language_code: str = "en",
        limit: int = 100,
    ) -> List[Dict[str, Any]]:
        """
        Keywords both domains appear for, with each domain's SERP element.

        For gap analysis target1 is the competitor and target2 the primary domain.

        Returns:
            Raw intersection items (may be empty)
        """
        logger.info(f"Domain intersection: {target1} vs {target2} (location {location_code})")
        result = await self.post(
            "dataforseo_labs/google/domain_intersection/live",
            [{
                "target1": target1,
                "target2": target2,
                "location_code": location_code,
                "language_code": language_code,
                "include_serp_info": True,
                "intersections": True,
                "item_types": ["organic", "paid", "featured_snippet"],
                "limit": limit,
            }],
        )
        return safe_get_result(result)

    async def get_ranked_keywords(
        self,
        domain: str,
        location_code: int = 2840,
        language_code: str = "en",
        limit: int = 200,
    ) -> List[Dict[str, Any]]:
        """
        Keywords a domain ranks for, shaped as merge-step input.

        Returns:
            [{"keyword", "monthly_search_volume", "competition_index",
              "cpc", "position", "rankingUrl"}, ...]
        """
        result = await self.post(
            "dataforseo_labs/google/ranked_keywords/live",
            [{
                "target": domain,
                "location_code": location_code,
                "language_code": language_code,
                "limit": limit,
                "order_by": ["keyword_data.keyword_info.search_volume,desc"],
            }],
        )

        keywords = []
        for item in safe_get_result(result):
            keyword_data = item.get("keyword_data") or {}
            keyword_info = keyword_data.get("keyword_info") or {}
            keyword_properties = keyword_data.get("keyword_properties") or {}
            serp_item = (item.get("ranked_serp_element") or {}).get("serp_item") or {}

            if not keyword_data.get("keyword"):
                continue

            keywords.append({
                "keyword": keyword_data["keyword"],
                "monthly_search_volume": keyword_info.get("search_volume") or 0,
                "competition_index": keyword_properties.get("keyword_difficulty")
                    or round((keyword_info.get("competition") or 0) * 100),
                "cpc": keyword_info.get("cpc") or 0.0,
                "position": serp_item.get("rank_absolute") or serp_item.get("rank_group"),
                "rankingUrl": serp_item.get("ranking_url") or serp_item.get("url"),
            })

        logger.info(f"Ranked keywords for {domain}: {len(keywords)}")
        return keywords
