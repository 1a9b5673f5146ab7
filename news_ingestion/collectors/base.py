"""
News Ingestion - Base Collector.

============================================================
PURPOSE
============================================================
Abstract base class for news collectors.

============================================================
DESIGN PRINCIPLES
============================================================
- No business logic - collection only
- Nothing is persisted; items are returned to the caller
- Standardized error handling
- Full observability

============================================================
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Optional, TypeVar
from uuid import uuid4

from core.clock import ClockFactory, ClockProtocol
from news_ingestion.types import (
    CollectorConfig,
    IngestionResult,
    IngestionSource,
    IngestionStatus,
    FetchError,
    ParseError,
)


T = TypeVar("T")  # Type for parsed items


class BaseCollector(ABC, Generic[T]):
    """
    Abstract base class for news collectors.

    ============================================================
    RESPONSIBILITIES
    ============================================================
    - Fetch data from external sources
    - Parse raw items, skipping expired ones
    - Cap the number of returned items
    - Track ingestion metrics
    - Handle errors gracefully

    ============================================================
    LIFECYCLE
    ============================================================
    1. Initialize with config
    2. Call collect() to run a collection cycle
    3. Items and metrics come back in an IngestionResult

    ============================================================
    """

    def __init__(
        self,
        config: CollectorConfig,
        source: IngestionSource,
        clock: Optional[ClockProtocol] = None,
    ) -> None:
        """
        Initialize the collector.

        Args:
            config: Collector configuration
            source: Ingestion source identifier
            clock: Clock used for recency checks and timing
        """
        self._config = config
        self._source = source
        self._clock = clock or ClockFactory.get_clock()
        self._logger = logging.getLogger(f"collector.{source.value}")
        self._collector_instance = f"{source.value}_{uuid4().hex[:8]}"

    @property
    def source_name(self) -> str:
        """Get the source name."""
        return self._source.value

    @property
    def is_enabled(self) -> bool:
        """Check if collector is enabled."""
        return self._config.enabled

    @property
    def version(self) -> str:
        """Get collector version."""
        return self._config.version

    # =========================================================
    # ABSTRACT METHODS - Must be implemented by subclasses
    # =========================================================

    @abstractmethod
    async def fetch_data(self, limit: int) -> List[Dict[str, Any]]:
        """
        Fetch raw data from the external source.

        Args:
            limit: Number of items requested from the source

        Returns:
            List of raw data dictionaries

        Raises:
            FetchError: On network or API errors
            ParseError: On a malformed response body
        """
        pass

    @abstractmethod
    def parse_item(self, raw_data: Dict[str, Any], index: int) -> Optional[T]:
        """
        Parse a raw data dictionary into a typed item.

        Args:
            raw_data: Raw data from external source
            index: Position the item would take in the result

        Returns:
            Parsed item, or None if the item is expired

        Raises:
            ParseError: On parsing errors
        """
        pass

    # =========================================================
    # COLLECTION WORKFLOW
    # =========================================================

    async def collect(self, limit: Optional[int] = None) -> IngestionResult:
        """
        Run a complete collection cycle.

        This method:
        1. Fetches data from external source
        2. Parses each item, skipping expired ones
        3. Stops once `limit` items are collected
        4. Returns items and metrics

        Args:
            limit: Maximum items to return (non-positive -> default)

        Returns:
            IngestionResult with items, metrics and status
        """
        if limit is None or limit <= 0:
            limit = self._config.default_limit

        result = IngestionResult(
            source=self.source_name,
            started_at=self._clock.now(),
        )

        if not self.is_enabled:
            result.status = IngestionStatus.SKIPPED
            result.mark_complete(self._clock.now())
            self._logger.info(f"Collector {self.source_name} is disabled, skipping")
            return result

        self._logger.info(f"Starting collection for {self.source_name}")

        try:
            raw_data_list = await self._fetch_with_retry(limit)
            result.records_fetched = len(raw_data_list)
            self._logger.info(f"Fetched {result.records_fetched} records from {self.source_name}")

            for raw_data in raw_data_list:
                if len(result.items) >= limit:
                    break
                try:
                    item = self.parse_item(raw_data, index=len(result.items))
                except ParseError as e:
                    result.records_failed += 1
                    result.add_error(f"Parse error: {e}")
                    self._logger.warning(f"Parse error for {self.source_name}: {e}")
                    continue

                if item is None:
                    result.records_skipped += 1
                    continue
                result.items.append(item)

            # Determine final status
            if result.records_failed == 0:
                result.status = IngestionStatus.SUCCESS
            elif result.items:
                result.status = IngestionStatus.PARTIAL
            else:
                result.status = IngestionStatus.FAILED

        except (FetchError, ParseError) as e:
            result.mark_failed(f"{type(e).__name__}: {e}", exception=e)
            self._logger.error(f"Collection failed for {self.source_name}: {e}")

        except Exception as e:
            result.mark_failed(
                f"Unexpected error: {e}",
                exception=FetchError(
                    message=f"Unexpected error: {e}",
                    source=self.source_name,
                    recoverable=False,
                ),
            )
            self._logger.exception(f"Unexpected error in {self.source_name}")

        result.mark_complete(self._clock.now())
        self._log_result(result)
        return result

    async def _fetch_with_retry(self, limit: int) -> List[Dict[str, Any]]:
        """
        Fetch data with retry logic.

        Returns:
            List of raw data dictionaries

        Raises:
            FetchError: After all retries exhausted
        """
        last_error: Optional[Exception] = None

        for attempt in range(self._config.max_retries):
            try:
                return await self.fetch_data(limit)
            except FetchError as e:
                last_error = e
                if not e.recoverable:
                    raise

                if attempt + 1 >= self._config.max_retries:
                    break

                wait_time = 2 ** attempt  # Exponential backoff
                self._logger.warning(
                    f"Fetch attempt {attempt + 1} failed for {self.source_name}, "
                    f"retrying in {wait_time}s: {e}"
                )
                await asyncio.sleep(wait_time)

        raise FetchError(
            message=f"All {self._config.max_retries} fetch attempts failed",
            source=self.source_name,
            recoverable=False,
            details={"last_error": str(last_error)},
        )

    def _log_result(self, result: IngestionResult) -> None:
        """Log the ingestion result."""
        log_data = result.to_dict()

        if result.status in (IngestionStatus.SUCCESS, IngestionStatus.SKIPPED):
            self._logger.info(f"Collection complete: {log_data}")
        elif result.status == IngestionStatus.PARTIAL:
            self._logger.warning(f"Collection partial: {log_data}")
        else:
            self._logger.error(f"Collection failed: {log_data}")

    def get_health_status(self) -> Dict[str, Any]:
        """
        Get collector health status.

        Returns:
            Health status dictionary
        """
        return {
            "source": self.source_name,
            "enabled": self.is_enabled,
            "version": self.version,
            "collector_instance": self._collector_instance,
        }
