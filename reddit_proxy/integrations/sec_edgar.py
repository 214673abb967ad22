"""
Insider trade data: fixed sample records or the live SEC EDGAR Atom feed.

The live feed lists recent filings. Entries are filtered on their form-type
category and projected to title, link and updated timestamp, which are then
mapped onto the insider trade record shape.
"""

import logging
import re
from typing import List, Optional

import feedparser
import httpx

from reddit_proxy.models.dtos import FeedEntry, InsiderTrade

logger = logging.getLogger(__name__)

# "4 - Musk Elon (0001494730) (Reporting)"
_TITLE_RE = re.compile(
    r"^\s*(?P<form>[^\s]+)\s+-\s+(?P<name>.+?)\s*\((?P<cik>\d+)\)(?:\s*\((?P<role>[^)]*)\))?"
)

REPORTING_ROLE = "Reporting"

MOCK_MODE = "mock"
LIVE_MODE = "live"


def title_role(title: str) -> Optional[str]:
    """Return the trailing filer role of an EDGAR entry title, if any."""
    match = _TITLE_RE.match(title or "")
    return match.group("role") if match else None


MOCK_TRADES: List[InsiderTrade] = [
    InsiderTrade(
        symbol="TSLA",
        insider_name="Elon Musk",
        transaction_type="Buy",
        shares=10000,
        share_price=720.50,
        filing_date="2025-04-24",
        link="https://www.sec.gov/Archives/edgar/data/0001318605/000089924325034567/xslF345X03/primary_doc.xml",
    ),
    InsiderTrade(
        symbol="AAPL",
        insider_name="Tim Cook",
        transaction_type="Sell",
        shares=5000,
        share_price=165.20,
        filing_date="2025-04-23",
        link="https://www.sec.gov/Archives/edgar/data/0000320193/000119312525034567/xslF345X03/primary_doc.xml",
    ),
    InsiderTrade(
        symbol="NVDA",
        insider_name="Jensen Huang",
        transaction_type="Buy",
        shares=3000,
        share_price=650.75,
        filing_date="2025-04-22",
        link="https://www.sec.gov/Archives/edgar/data/0001045810/000089924325034567/xslF345X03/primary_doc.xml",
    ),
]


class SecFeedError(Exception):
    """Raised when the EDGAR feed cannot be retrieved or parsed."""


def parse_feed(content: bytes, category: str) -> List[FeedEntry]:
    """
    Parse an EDGAR Atom document and keep reporting-owner entries of one
    form category.

    Args:
        content: Raw XML bytes
        category: Category term to keep (form type, e.g. ``"4"``)

    Returns:
        Projected entries in feed order

    Raises:
        SecFeedError: If the document is not a parseable feed
    """
    feed = feedparser.parse(content)
    if feed.bozo and not feed.entries:
        raise SecFeedError(f"Unparseable EDGAR feed: {feed.get('bozo_exception')}")

    entries = []
    for entry in feed.entries:
        terms = {tag.get("term") for tag in entry.get("tags", [])}
        if category not in terms:
            continue
        title = entry.get("title", "")
        # each filing is listed once per filer; the Issuer row names the company
        role = title_role(title)
        if role is not None and role != REPORTING_ROLE:
            continue
        entries.append(
            FeedEntry(
                title=title,
                link=entry.get("link"),
                updated=entry.get("updated"),
            )
        )
    return entries


def entry_to_trade(entry: FeedEntry) -> InsiderTrade:
    """Map a projected feed entry onto an insider trade record."""
    insider_name: Optional[str] = None
    form_type: Optional[str] = None
    match = _TITLE_RE.match(entry.title)
    if match:
        insider_name = match.group("name")
        form_type = match.group("form")
    else:
        insider_name = entry.title or None

    return InsiderTrade(
        insider_name=insider_name,
        transaction_type=form_type,
        filing_date=entry.updated[:10] if entry.updated else None,
        link=entry.link,
    )


class SecEdgarClient:
    """Provides insider trade records in ``mock`` or ``live`` mode."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        mode: str = MOCK_MODE,
        feed_url: str = "",
        user_agent: str = "",
        category: str = "4",
    ):
        """
        Initialize the EDGAR client.

        Args:
            http_client: Shared async HTTP client
            mode: ``mock`` for the fixed sample records, ``live`` for the feed
            feed_url: EDGAR Atom feed URL
            user_agent: Contact User-Agent; SEC rejects anonymous clients
            category: Form-type category to keep
        """
        if mode not in (MOCK_MODE, LIVE_MODE):
            raise ValueError(f"Unknown insider trades mode: {mode}")
        self.http_client = http_client
        self.mode = mode
        self.feed_url = feed_url
        self.user_agent = user_agent
        self.category = category

    async def fetch_feed(self) -> List[FeedEntry]:
        headers = {
            "User-Agent": self.user_agent,
            "Accept": "application/atom+xml,application/xml,text/xml;q=0.9,*/*;q=0.8",
        }
        try:
            response = await self.http_client.get(self.feed_url, headers=headers)
        except httpx.HTTPError as e:
            raise SecFeedError(f"EDGAR feed request failed: {e}") from e

        if not response.is_success:
            raise SecFeedError(f"EDGAR feed returned HTTP {response.status_code}")

        entries = parse_feed(response.content, self.category)
        logger.info(f"Parsed {len(entries)} form {self.category} entries from EDGAR feed")
        return entries

    async def get_insider_trades(self) -> List[InsiderTrade]:
        """
        Return insider trade records for the configured mode.

        Raises:
            SecFeedError: In live mode, if the feed cannot be fetched or parsed
        """
        if self.mode == LIVE_MODE:
            return [entry_to_trade(entry) for entry in await self.fetch_feed()]
        return [trade.model_copy() for trade in MOCK_TRADES]
