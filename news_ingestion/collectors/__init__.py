"""
News Ingestion - Collectors.

Each collector fetches from one external feed and returns
parsed items; nothing is stored.
"""

from news_ingestion.collectors.base import BaseCollector
from news_ingestion.collectors.jinse import JinseLivesCollector


__all__ = [
    "BaseCollector",
    "JinseLivesCollector",
]
