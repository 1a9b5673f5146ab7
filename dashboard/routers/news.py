import logging

from fastapi import APIRouter, HTTPException, Request

from news_ingestion import IngestionError
from dashboard.schemas import NewsItem, NewsResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/news", tags=["News"])


@router.get("", response_model=NewsResponse)
async def get_news(request: Request, limit: int = 20):
    """
    Get recent crypto news (last 30 minutes, newest first).
    """
    collector = request.app.state.news_collector
    if collector is None:
        raise HTTPException(status_code=503, detail="News feed is not configured")

    try:
        items = await collector.get_news(limit)
    except IngestionError as e:
        logger.error(f"Error getting news: {e}")
        return NewsResponse(success=False, message=str(e), data=[])

    return NewsResponse(
        success=True,
        data=[NewsItem.from_news(item) for item in items],
    )
