"""
News Ingestion Module.

============================================================
PURPOSE
============================================================
Recent crypto news headlines for display next to the
decision log. Independent of the decision log engine.

============================================================
USAGE
============================================================

```python
from news_ingestion import JinseLivesCollector

collector = JinseLivesCollector()
items = await collector.get_news(limit=10)
```

============================================================
"""

from news_ingestion.types import (
    CollectorConfig,
    CryptoNews,
    IngestionError,
    IngestionResult,
    IngestionSource,
    IngestionStatus,
    JinseConfig,
    FetchError,
    ParseError,
)
from news_ingestion.collectors import BaseCollector, JinseLivesCollector


__all__ = [
    # Types
    "CollectorConfig",
    "CryptoNews",
    "IngestionResult",
    "IngestionSource",
    "IngestionStatus",
    "JinseConfig",
    # Errors
    "IngestionError",
    "FetchError",
    "ParseError",
    # Collectors
    "BaseCollector",
    "JinseLivesCollector",
]
