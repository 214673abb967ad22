"""Reddit proxy service.

Forwards browser requests to the Reddit OAuth API and the SEC EDGAR feed,
reshaping responses into a simplified JSON contract and keeping API
credentials on the server side.
"""

__version__ = "0.1.0"
