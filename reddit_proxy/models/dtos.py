"""
Pydantic Data Transfer Objects (DTOs) for the Reddit proxy service.

These models describe the JSON contract exposed to browser clients. Reddit
payloads themselves are passed through as opaque dictionaries.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    """Body of every error response."""
    error: str


class ListingData(BaseModel):
    children: List[Dict[str, Any]] = Field(default_factory=list)


class AggregatedListing(BaseModel):
    """
    Concatenated ``children`` of several subreddit listings.

    Mirrors the shape of a single Reddit listing so clients can treat both
    the same way.
    """
    data: ListingData = Field(default_factory=ListingData)


class InsiderTrade(BaseModel):
    """
    One insider trade record.

    Serialised with camelCase keys. Fields the live EDGAR feed does not carry
    are left as ``None``.
    """
    symbol: Optional[str] = None
    insider_name: Optional[str] = Field(default=None, alias="insiderName")
    transaction_type: Optional[str] = Field(default=None, alias="transactionType")
    shares: Optional[int] = None
    share_price: Optional[float] = Field(default=None, alias="sharePrice")
    filing_date: Optional[str] = Field(default=None, alias="filingDate")
    link: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class FeedEntry(BaseModel):
    """The three fields projected from an EDGAR Atom feed entry."""
    title: str
    link: Optional[str] = None
    updated: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    timestamp: str
    insider_trades_mode: str
    fanout_strategy: str
    rate_limit_enabled: bool
