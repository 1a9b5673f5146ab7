"""
News Ingestion - Type Definitions.

============================================================
PURPOSE
============================================================
Shared types for the news ingestion feed.

- Configuration dataclasses
- News item type
- Ingestion result type
- Error types

============================================================
DESIGN PRINCIPLES
============================================================
- Immutable data structures where possible
- Clear typing for all fields
- No dependency on the decision log engine
- Serializable for monitoring

============================================================
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4


# =============================================================
# ENUMS
# =============================================================

class IngestionSource(str, Enum):
    """Identifiers for news sources."""
    JINSE_LIVES = "jinse_lives"


class IngestionStatus(str, Enum):
    """Status of an ingestion operation."""
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"
    SKIPPED = "skipped"


# =============================================================
# CONFIGURATION TYPES
# =============================================================

@dataclass(frozen=True)
class CollectorConfig:
    """Base configuration for all collectors."""
    source_name: str
    enabled: bool = True
    default_limit: int = 20
    max_retries: int = 3
    timeout_seconds: int = 30
    version: str = "1.0.0"


@dataclass(frozen=True)
class JinseConfig(CollectorConfig):
    """Configuration for the Jinse live-updates collector."""
    source_name: str = IngestionSource.JINSE_LIVES.value
    base_url: str = "https://api.jinse.cn/noah/v2/lives"
    poster: str = "金色财经"
    max_age_minutes: int = 30
    category: int = 0
    anchor_id: Optional[int] = None  # Sent as "id" together with flag=up
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/88.0.4324.96 Safari/537.36"
    )
    accept_language: str = "en-US,en;q=0.9"


# =============================================================
# NEWS ITEM
# =============================================================

@dataclass(frozen=True)
class CryptoNews:
    """One live news item, ready for display."""
    index: int
    news_id: str
    content: str
    content_prefix: str
    link: str
    poster: str
    time: str  # Local time, "%Y-%m-%d %H:%M:%S"
    published_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "newid": self.news_id,
            "content": self.content,
            "content_prefix": self.content_prefix,
            "link": self.link,
            "poster": self.poster,
            "time": self.time,
        }


# =============================================================
# INGESTION RESULT TYPES
# =============================================================

@dataclass
class IngestionResult:
    """Result of a single collection run."""
    batch_id: UUID = field(default_factory=uuid4)
    source: str = ""
    status: IngestionStatus = IngestionStatus.SUCCESS

    # Collected items
    items: List[Any] = field(default_factory=list)

    # Counts
    records_fetched: int = 0
    records_skipped: int = 0  # Expired items
    records_failed: int = 0

    # Timing
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    duration_seconds: float = 0.0

    # Errors
    errors: List[str] = field(default_factory=list)
    exception: Optional["IngestionError"] = None

    def mark_complete(self, completed_at: datetime) -> None:
        """Mark the ingestion as complete and calculate duration."""
        self.completed_at = completed_at
        if self.started_at:
            delta = completed_at - self.started_at
            self.duration_seconds = delta.total_seconds()

    def add_error(self, error: str) -> None:
        """Add an error message."""
        self.errors.append(error)
        if self.status == IngestionStatus.SUCCESS:
            self.status = IngestionStatus.PARTIAL

    def mark_failed(self, error: str, exception: Optional["IngestionError"] = None) -> None:
        """Mark the ingestion as failed."""
        self.status = IngestionStatus.FAILED
        self.exception = exception
        self.add_error(error)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/monitoring."""
        return {
            "batch_id": str(self.batch_id),
            "source": self.source,
            "status": self.status.value,
            "records_fetched": self.records_fetched,
            "records_returned": len(self.items),
            "records_skipped": self.records_skipped,
            "records_failed": self.records_failed,
            "duration_seconds": self.duration_seconds,
            "error_count": len(self.errors),
            "errors": self.errors[:5],  # Limit for logging
        }


# =============================================================
# ERROR TYPES
# =============================================================

class IngestionError(Exception):
    """Base exception for ingestion errors."""

    def __init__(
        self,
        message: str,
        source: str,
        recoverable: bool = True,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.source = source
        self.recoverable = recoverable
        self.details = details or {}


class FetchError(IngestionError):
    """Error fetching data from external source."""
    pass


class ParseError(IngestionError):
    """Error parsing data from external source."""
    pass
