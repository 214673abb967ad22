from .dtos import (
    AggregatedListing,
    ErrorResponse,
    FeedEntry,
    HealthResponse,
    InsiderTrade,
    ListingData,
)

__all__ = [
    "AggregatedListing",
    "ErrorResponse",
    "FeedEntry",
    "HealthResponse",
    "InsiderTrade",
    "ListingData",
]
