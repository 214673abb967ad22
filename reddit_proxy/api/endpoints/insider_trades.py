"""Insider trades endpoint."""

import logging
from typing import List

from fastapi import APIRouter, Depends

from reddit_proxy.api.dependencies import get_sec_client
from reddit_proxy.api.errors import ProxyError
from reddit_proxy.integrations.sec_edgar import SecEdgarClient, SecFeedError
from reddit_proxy.models.dtos import InsiderTrade

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/insider-trades", response_model=List[InsiderTrade], response_model_by_alias=True)
async def insider_trades(
    sec_client: SecEdgarClient = Depends(get_sec_client),
) -> List[InsiderTrade]:
    """Return recent insider trades (sample data or live EDGAR filings)."""
    try:
        return await sec_client.get_insider_trades()
    except SecFeedError as e:
        logger.error(f"Failed to fetch insider trades: {e}")
        raise ProxyError(500, "Failed to fetch insider trades") from e
