"""
Barcode resolve orchestration.

Validates the scanned code, queries the search provider, runs the
normalize -> score -> aggregate engine and shapes the response payload.
Every outcome, including failures, is returned as a ResolveOutcome so the
HTTP layer and the CLI only have to render it.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .barcode import is_plausible_barcode, normalize_barcode
from .env import Settings
from .google_results import SearchError, build_query, fetch_search_items
from .logger import get_logger
from .models import RawCandidate
from .resolver import pick_best
from .retry import CircuitBreaker, CircuitOpenError, RetryError, is_transient_error

PROVIDER = "google"
MAX_CANDIDATES = 10

SearchFn = Callable[[str], List[RawCandidate]]

logger = get_logger()


@dataclass(frozen=True)
class ResolveOutcome:
    status_code: int
    body: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status_code == 200


def _error(status_code: int, message: str) -> ResolveOutcome:
    return ResolveOutcome(status_code, {"error": message})


def google_search(settings: Settings) -> SearchFn:
    """Search function bound to the configured Google credentials."""
    def search(query: str) -> List[RawCandidate]:
        return fetch_search_items(
            query,
            api_key=settings.google_api_key,
            cse_id=settings.google_cse_id,
            timeout=settings.search_timeout,
        )
    return search


def new_search_breaker() -> CircuitBreaker:
    return CircuitBreaker(
        failure_threshold=5,
        recovery_timeout=60,
        expected_exception=(SearchError, RetryError),
    )


def _resolve(code: str, search: Optional[SearchFn], settings: Settings, breaker: Optional[CircuitBreaker]) -> ResolveOutcome:
    code = str(code or "").strip()
    if not code:
        return _error(400, "Missing code")

    code = normalize_barcode(code)
    if not is_plausible_barcode(code):
        return _error(400, "Invalid barcode format")

    if search is None:
        if not settings.has_search_credentials:
            logger.error("Search credentials are not configured")
            return _error(500, "Missing GOOGLE_API_KEY/GOOGLE_CSE_ID")
        search = google_search(settings)

    query = build_query(code)
    try:
        if breaker is not None:
            items = breaker.call(search, query)
        else:
            items = search(query)
    except CircuitOpenError as e:
        logger.warning("Search provider circuit open", code=code, retry_after=round(e.retry_after))
        logger.record_resolve_failure("CircuitOpen")
        return _error(502, "Search API failed")
    except (SearchError, RetryError) as e:
        logger.error("Search request failed", code=code, error=str(e), transient=is_transient_error(e))
        logger.record_resolve_failure(type(e).__name__)
        return _error(502, "Search API failed")

    items = list(items or [])[:MAX_CANDIDATES]
    if not items:
        logger.info("No search results", code=code)
        logger.record_resolve_failure("NoResults")
        return _error(404, "No search result for this code")

    best = pick_best(items)
    if best is None:
        logger.info("No usable candidate names", code=code, items=len(items))
        logger.record_resolve_failure("NoCandidate")
        return _error(404, "Cannot infer product name")

    logger.info("Resolved barcode", code=code, name=best.name, confidence=best.confidence)
    logger.record_resolve_success(best.confidence)
    result = best.to_dict()
    return ResolveOutcome(200, {
        "ok": True,
        "provider": PROVIDER,
        "code": code,
        "best": {
            "name": result["name"],
            "alias": "",
            "confidence": result["confidence"],
            "url": result["sampleUrl"],
        },
        "candidates": result["candidates"],
    })


def resolve_barcode(
    code: str,
    search: Optional[SearchFn] = None,
    settings: Optional[Settings] = None,
    breaker: Optional[CircuitBreaker] = None,
) -> ResolveOutcome:
    """
    Resolve a scanned barcode to a product name.

    Args:
        code: Raw scanned code; non-digits are stripped
        search: Callable mapping a query to candidates (default: Google CSE
            with the credentials from ``settings``)
        settings: Runtime settings (default: read from the environment)
        breaker: Optional circuit breaker guarding the search call

    Returns:
        ResolveOutcome with an HTTP-style status code and JSON body
    """
    settings = settings or Settings.from_env()
    logger.record_resolve_attempt()
    try:
        return _resolve(code, search, settings, breaker)
    except Exception as e:
        logger.exception("Resolve failed", code=str(code), error=str(e))
        logger.record_resolve_failure(type(e).__name__)
        return _error(500, "Resolve failed")
