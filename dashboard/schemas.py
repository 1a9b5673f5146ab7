"""
Pydantic schemas for Dashboard API requests and responses.
"""
from datetime import datetime, timezone
from typing import List, Optional, Dict, Any

from pydantic import BaseModel, Field

from decision_log import DecisionLogPage, DecisionRecord
from news_ingestion import CryptoNews


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =======================
# COMMON
# =======================

class BaseResponse(BaseModel):
    success: bool
    message: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utcnow)


# =======================
# 1. DECISION LOG
# =======================

class ActionSchema(BaseModel):
    symbol: str
    action: str
    leverage: float
    price: float
    success: bool
    error: Optional[str] = None
    is_opening: bool


class AccountStateSchema(BaseModel):
    total_balance: float
    available_balance: float
    margin_used_pct: float
    position_count: int


class DecisionRecordSchema(BaseModel):
    cycle_number: int
    timestamp: str
    success: bool
    input_prompt: Optional[str] = None
    cot_trace: Optional[str] = None
    decisions: List[ActionSchema]
    account_state: Optional[AccountStateSchema] = None
    execution_log: List[str]
    error_message: Optional[str] = None

    @classmethod
    def from_record(cls, record: DecisionRecord) -> "DecisionRecordSchema":
        return cls(
            cycle_number=record.cycle_number,
            timestamp=record.timestamp,
            success=record.success,
            input_prompt=record.input_prompt,
            cot_trace=record.reasoning_trace,
            decisions=[
                ActionSchema(**action.to_dict(), is_opening=action.is_opening)
                for action in record.actions
            ],
            account_state=(
                AccountStateSchema(**record.account_state.to_dict())
                if record.account_state
                else None
            ),
            execution_log=list(record.execution_log),
            error_message=record.error_message,
        )


class DecisionPageData(BaseModel):
    trader_id: Optional[str] = None
    status: str  # pending, ready, failed
    error: Optional[Dict[str, Any]] = None
    total_count: int
    filtered_count: int
    current_page: int
    total_pages: int
    page_size: int
    search_term: str
    status_filter: str  # all, success, failed
    has_previous: bool
    has_next: bool
    showing_start: int
    showing_end: int
    empty_reason: Optional[str] = None  # no_decisions, no_matches
    fetched_at: Optional[datetime] = None
    records: List[DecisionRecordSchema]

    @classmethod
    def from_page(cls, page: DecisionLogPage) -> "DecisionPageData":
        return cls(
            trader_id=page.subject_id,
            status=page.status.value,
            error=page.error.to_dict() if page.error else None,
            total_count=page.total_count,
            filtered_count=page.filtered_count,
            current_page=page.current_page,
            total_pages=page.total_pages,
            page_size=page.page_size,
            search_term=page.search_term,
            status_filter=page.status_filter.value,
            has_previous=page.has_previous,
            has_next=page.has_next,
            showing_start=page.showing_start,
            showing_end=page.showing_end,
            empty_reason=page.empty_reason.value if page.empty_reason else None,
            fetched_at=page.fetched_at,
            records=[DecisionRecordSchema.from_record(r) for r in page.records],
        )


class DecisionPageResponse(BaseResponse):
    data: DecisionPageData

    @classmethod
    def from_page(cls, page: DecisionLogPage) -> "DecisionPageResponse":
        return cls(
            success=not page.is_failed,
            message=page.error.message if page.error else None,
            data=DecisionPageData.from_page(page),
        )


class SubjectRequest(BaseModel):
    trader_id: Optional[str] = None


class FiltersRequest(BaseModel):
    search_term: Optional[str] = None
    status_filter: Optional[str] = None


# =======================
# 2. NEWS
# =======================

class NewsItem(BaseModel):
    index: int
    newid: str
    content: str
    content_prefix: str
    link: str
    poster: str
    time: str

    @classmethod
    def from_news(cls, news: CryptoNews) -> "NewsItem":
        return cls(**news.to_dict())


class NewsResponse(BaseResponse):
    data: List[NewsItem]
