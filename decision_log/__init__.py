"""
Decision Log Module.

============================================================
CLIENT-SIDE DECISION RECORD ENGINE
============================================================

Browsable, near-real-time log of automated-trading decision
cycles. Each cycle records the inputs considered, the
reasoning trace, the actions taken and the resulting
account state.

The engine:
- keeps a periodically refreshed cache of a subject's full
  record set (Record Store + Refresh Scheduler)
- derives a filtered, newest-first view from a search term
  and a status filter (Filter Predicate + View Builder)
- exposes a stable page window over that view (Paginator)

It is read-only: there is no write path and nothing is
persisted beyond the lifetime of the in-memory cache.

============================================================
USAGE
============================================================

```python
from decision_log import DecisionLogViewer, HttpDecisionSource

async with DecisionLogViewer(HttpDecisionSource()) as viewer:
    await viewer.set_subject("trader-1")
    viewer.set_search_term("BTC")
    page = viewer.page()
    for record in page.records:
        print(record.cycle_number, record.timestamp, record.success)
```

============================================================
"""

from .models import (
    Action,
    AccountState,
    DecisionRecord,
    EmptyReason,
    LoadStatus,
    StatusFilter,
)
from .config import (
    DecisionLogConfig,
    get_config,
    set_config,
)
from .exceptions import (
    DecisionLogError,
    FetchError,
    ParseError,
    ConfigurationError,
)
from .filters import matches, normalize_search_term
from .view import build_view
from .paginator import total_pages, page_slice
from .state import (
    ViewerState,
    DecisionLogPage,
    initial_state,
    to_page,
)
from .sources import DecisionSource, HttpDecisionSource, parse_decisions
from .dedup import RequestDeduplicator, DedupResult
from .store import RecordStore, StoreState
from .scheduler import RefreshScheduler
from .viewer import DecisionLogViewer


__all__ = [
    # Models
    "Action",
    "AccountState",
    "DecisionRecord",
    "EmptyReason",
    "LoadStatus",
    "StatusFilter",
    # Config
    "DecisionLogConfig",
    "get_config",
    "set_config",
    # Exceptions
    "DecisionLogError",
    "FetchError",
    "ParseError",
    "ConfigurationError",
    # Filtering, view, pagination
    "matches",
    "normalize_search_term",
    "build_view",
    "total_pages",
    "page_slice",
    # State
    "ViewerState",
    "DecisionLogPage",
    "initial_state",
    "to_page",
    # Sources
    "DecisionSource",
    "HttpDecisionSource",
    "parse_decisions",
    # Store & refresh
    "RequestDeduplicator",
    "DedupResult",
    "RecordStore",
    "StoreState",
    "RefreshScheduler",
    # Entry point
    "DecisionLogViewer",
]
