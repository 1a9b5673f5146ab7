"""
News Ingestion - Jinse Live Updates Collector.

============================================================
RESPONSIBILITY
============================================================
Collects recent crypto news from the Jinse live feed.

- Fetches live items via REST API
- Handles retries on transient failures
- Drops items older than max_age_minutes
- Formats publication time in local time

============================================================
DATA FLOW
============================================================
1. GET {base_url}?limit=..&reading=false&source=web&flag=up
2. Extract list[0].lives from the response
3. Parse each live item to CryptoNews
4. Return items in an IngestionResult

============================================================
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import httpx

from core.clock import ClockProtocol
from news_ingestion.collectors.base import BaseCollector
from news_ingestion.types import (
    CryptoNews,
    IngestionSource,
    IngestionStatus,
    JinseConfig,
    FetchError,
    ParseError,
)


DISPLAY_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class JinseLivesCollector(BaseCollector[CryptoNews]):
    """
    Collector for the Jinse live news feed.

    ============================================================
    WIRING
    ============================================================
    Source: api.jinse.cn/noah/v2/lives (REST)
    Output: CryptoNews items, newest first, at most `limit`

    ============================================================
    """

    def __init__(
        self,
        config: Optional[JinseConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
        clock: Optional[ClockProtocol] = None,
    ) -> None:
        """
        Initialize the Jinse collector.

        Args:
            config: Jinse configuration
            client: Shared HTTP client (a short-lived one is used per call otherwise)
            clock: Clock used for the recency cut-off
        """
        config = config or JinseConfig()
        super().__init__(
            config=config,
            source=IngestionSource.JINSE_LIVES,
            clock=clock,
        )
        self._jinse_config = config
        self._client = client
        self._logger = logging.getLogger("collector.jinse_lives")

    # =========================================================
    # FETCH - External API Call
    # =========================================================

    def _build_params(self, limit: int) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "limit": limit,
            "reading": "false",
            "source": "web",
            "flag": "up",
            "category": self._jinse_config.category,
        }
        if self._jinse_config.anchor_id is not None:
            params["id"] = self._jinse_config.anchor_id
        return params

    def _build_headers(self) -> Dict[str, str]:
        return {
            "User-Agent": self._jinse_config.user_agent,
            "Accept-Language": self._jinse_config.accept_language,
        }

    async def fetch_data(self, limit: int) -> List[Dict[str, Any]]:
        """
        Fetch live items from the Jinse API.

        Returns:
            List of raw live item dictionaries, newest first

        Raises:
            FetchError: On network or API errors
            ParseError: On an unexpected response shape
        """
        try:
            if self._client is not None:
                response = await self._client.get(
                    self._jinse_config.base_url,
                    params=self._build_params(limit),
                    headers=self._build_headers(),
                )
                response.raise_for_status()
                data = response.json()
            else:
                async with httpx.AsyncClient(timeout=self._config.timeout_seconds) as client:
                    response = await client.get(
                        self._jinse_config.base_url,
                        params=self._build_params(limit),
                        headers=self._build_headers(),
                    )
                    response.raise_for_status()
                    data = response.json()

        except httpx.HTTPStatusError as e:
            raise FetchError(
                message=f"HTTP {e.response.status_code}: {e.response.text[:200]}",
                source=self.source_name,
                recoverable=e.response.status_code >= 500,
                details={"status_code": e.response.status_code},
            )
        except httpx.TimeoutException as e:
            raise FetchError(
                message=f"Request timeout: {e}",
                source=self.source_name,
                recoverable=True,
            )
        except httpx.RequestError as e:
            raise FetchError(
                message=f"Request error: {e}",
                source=self.source_name,
                recoverable=True,
            )
        except ValueError as e:
            raise ParseError(
                message=f"Invalid JSON response: {e}",
                source=self.source_name,
                recoverable=False,
            )

        return self._extract_lives(data)

    def _extract_lives(self, data: Any) -> List[Dict[str, Any]]:
        """Pull list[0].lives out of the response body."""
        if not isinstance(data, dict) or not isinstance(data.get("list"), list):
            raise ParseError(
                message="Response has no 'list' array",
                source=self.source_name,
                recoverable=False,
            )

        groups = data["list"]
        if not groups:
            return []

        first = groups[0]
        lives = first.get("lives") if isinstance(first, dict) else None
        if not isinstance(lives, list):
            raise ParseError(
                message="Response group has no 'lives' array",
                source=self.source_name,
                recoverable=False,
            )
        return lives

    # =========================================================
    # PARSE - Normalize to CryptoNews
    # =========================================================

    def parse_item(self, raw_data: Dict[str, Any], index: int) -> Optional[CryptoNews]:
        """
        Parse a live item to CryptoNews.

        Args:
            raw_data: Raw live item from the API
            index: Position of the item in the result

        Returns:
            CryptoNews, or None if the item is older than max_age_minutes

        Raises:
            ParseError: On missing or malformed fields
        """
        if not isinstance(raw_data, dict):
            raise ParseError(
                message=f"Live item is not an object: {type(raw_data).__name__}",
                source=self.source_name,
            )

        created_at = raw_data.get("created_at")
        if isinstance(created_at, bool) or not isinstance(created_at, (int, float)):
            raise ParseError(
                message=f"Invalid created_at: {created_at!r}",
                source=self.source_name,
                details={"id": raw_data.get("id")},
            )

        try:
            published_at = datetime.fromtimestamp(created_at, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise ParseError(
                message=f"Invalid created_at: {e}",
                source=self.source_name,
                details={"id": raw_data.get("id")},
            )

        max_age = timedelta(minutes=self._jinse_config.max_age_minutes)
        if self._clock.now() - published_at > max_age:
            return None

        news_id = raw_data.get("id")
        if news_id is None:
            raise ParseError(
                message="Live item has no id",
                source=self.source_name,
            )

        return CryptoNews(
            index=index,
            news_id=str(news_id),
            content=str(raw_data.get("content") or ""),
            content_prefix=str(raw_data.get("content_prefix") or ""),
            link=str(raw_data.get("link") or ""),
            poster=self._jinse_config.poster,
            time=published_at.astimezone().strftime(DISPLAY_TIME_FORMAT),
            published_at=published_at,
        )

    # =========================================================
    # CONVENIENCE
    # =========================================================

    async def get_news(self, limit: int = 0) -> List[CryptoNews]:
        """
        Fetch recent news items.

        Args:
            limit: Maximum items (non-positive -> configured default)

        Returns:
            Recent CryptoNews items, newest first

        Raises:
            FetchError: If the feed could not be fetched
            ParseError: If the response body was malformed
        """
        result = await self.collect(limit)
        if result.status == IngestionStatus.FAILED and result.exception is not None:
            raise result.exception
        return list(result.items)
