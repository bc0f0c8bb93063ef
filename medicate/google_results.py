from typing import List, Optional
import os
import requests

from .logger import get_logger
from .models import RawCandidate
from .retry import exponential_backoff, should_retry_http_status

GOOGLE_CUSTOM_SEARCH_ENDPOINT = "https://www.googleapis.com/customsearch/v1"
MAX_RESULTS = 10

logger = get_logger()


class SearchError(Exception):
    """Raised when the search provider answers with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TransientSearchError(SearchError):
    """Rate limiting or a 5xx from the provider; worth another attempt."""


def build_query(code: str) -> str:
    # "thuốc" (medicine) steers results towards pharmacy listings
    return f"{code} thuốc"


def _log_retry(attempt: int, error: Exception, delay: float) -> None:
    logger.warning("Search request failed, retrying", attempt=attempt, error=str(error), delay=delay)


@exponential_backoff(
    max_retries=2,
    base_delay=0.5,
    exceptions=(requests.exceptions.Timeout, requests.exceptions.ConnectionError, TransientSearchError),
    on_retry=_log_retry,
)
def _get_with_retry(params: dict, timeout: float) -> requests.Response:
    r = requests.get(GOOGLE_CUSTOM_SEARCH_ENDPOINT, params=params, timeout=timeout)
    if should_retry_http_status(r.status_code):
        raise TransientSearchError(f"Search API returned {r.status_code}", status_code=r.status_code)
    return r


def fetch_search_items(
    query: str,
    api_key: Optional[str] = None,
    cse_id: Optional[str] = None,
    num: int = MAX_RESULTS,
    timeout: float = 20,
) -> List[RawCandidate]:
    """
    Fetch search results via the Google Custom Search JSON API.

    Args:
        query: Search query string
        api_key: Google API key (or read from GOOGLE_API_KEY env var)
        cse_id: Custom Search Engine ID (or read from GOOGLE_CSE_ID env var)
        num: Number of results (max 10 per request; default 10)
        timeout: Per-request timeout in seconds

    Returns:
        Up to 10 candidates in provider order; missing fields become ""

    Raises:
        ValueError: Missing credentials
        SearchError: Non-retryable error response or unreadable body
        RetryError: Network failures, 429s or 5xx persisted through every retry
    """
    key = api_key or os.getenv("GOOGLE_API_KEY")
    cx = cse_id or os.getenv("GOOGLE_CSE_ID")

    if not key:
        raise ValueError("Missing GOOGLE_API_KEY. Set env var or pass api_key.")
    if not cx:
        raise ValueError("Missing GOOGLE_CSE_ID. Set env var or pass cse_id.")

    params = {
        "key": key,
        "cx": cx,
        "q": query,
        "num": max(1, min(num, MAX_RESULTS)),
    }

    logger.record_search_call()
    r = _get_with_retry(params, timeout)
    if not r.ok:
        logger.error("Search API failed", status=r.status_code, query=query)
        raise SearchError(f"Search API failed ({r.status_code})", status_code=r.status_code)

    try:
        data = r.json()
    except ValueError as e:
        raise SearchError(f"Search API returned invalid JSON: {e}", status_code=r.status_code)

    items = (data.get("items") if isinstance(data, dict) else None) or []
    return [RawCandidate.from_item(item) for item in items[:MAX_RESULTS] if isinstance(item, dict)]
