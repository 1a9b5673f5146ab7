"""
Dashboard API Routers.
"""
from . import decisions, news

__all__ = ["decisions", "news"]
