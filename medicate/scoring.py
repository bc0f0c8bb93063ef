"""
Plausibility scoring for a single search candidate.

Responsibilities:
- Extract the candidate's hostname.
- Score how likely the cleaned title names a real pharmaceutical product.

Non-Responsibilities:
- No grouping across candidates.
- No confidence decisions.

Invariant:
Given the same candidate and cleaned name, the score is always the same.
"""

import re
from typing import Dict, Optional
from urllib.parse import urlparse

from .models import RawCandidate, ScoredCandidate
from .normalize import normalize_text

# Ordered: only the first matching host counts
DOMAIN_WEIGHTS = (
    ("nhathuoclongchau", 40),
    ("nhathuocankhang", 35),
    ("pharmacity", 35),
    ("medigo", 30),
    ("centralpharmacy", 28),
    ("tiki.vn", 25),
    ("shopee.vn", 20),
    ("lazada.vn", 20),
)

FORM_WORDS = (
    "viên",
    "ống",
    "siro",
    "gói",
    "chai",
    "kem",
    "thuốc nhỏ mắt",
    "thuốc nhỏ mũi",
    "viên nang",
    "viên nén",
    "hỗn dịch",
    "dung dịch",
    "xịt",
)

COMBO_WORDS = ("combo", "set", "bộ", "tặng", "quà tặng", "kèm", "pack")

MEDICAL_SNIPPET_WORDS = ("thuốc", "dược")

DOSAGE_UNITS = ("mg", "mcg", "µg", "g", "kg", "ml", "iu")
DOSAGE_RE = re.compile(
    r"\b\d+(?:[.,]\d+)?\s*(?:" + "|".join(DOSAGE_UNITS) + r")\b",
    re.IGNORECASE | re.ASCII,
)

DOMAIN_BONUS_NONE = 0
DOSAGE_BONUS = 30
FORM_BONUS = 20
COMBO_PENALTY = -15
NON_COMBO_BONUS = 8
MEDICAL_SNIPPET_BONUS = 5
LENGTH_BONUS = 8
LENGTH_RANGE = (20, 80)
IDEAL_LENGTH = 50


def extract_hostname(link: str) -> str:
    """Lowercase host of ``link``; the raw lowercase link when it isn't a URL.

    A URL without a host (``file:///...``, ``mailto:...``) yields "".
    """
    link = link or ""
    try:
        parsed = urlparse(link)
        host = parsed.hostname
    except ValueError:
        return link.lower()
    if not parsed.scheme:
        return link.lower()
    return (host or "").lower()


def domain_weight(hostname: str) -> int:
    for host, weight in DOMAIN_WEIGHTS:
        if host in hostname:
            return weight
    return DOMAIN_BONUS_NONE


def has_dosage(text: str) -> bool:
    return DOSAGE_RE.search(text) is not None


def length_score(name: str) -> float:
    n = len(name)
    low, high = LENGTH_RANGE
    if low <= n <= high:
        return LENGTH_BONUS
    return -abs(n - IDEAL_LENGTH) / 10


def score_breakdown(candidate: RawCandidate, cleaned: str, hostname: Optional[str] = None) -> Dict[str, float]:
    """Per-rule contributions to a candidate's score."""
    if hostname is None:
        hostname = extract_hostname(candidate.link)
    title = normalize_text(candidate.title).lower()
    snippet = normalize_text(candidate.snippet).lower()

    is_combo = any(w in title for w in COMBO_WORDS)
    return {
        "domain": domain_weight(hostname),
        "dosage": DOSAGE_BONUS if has_dosage(title) or has_dosage(snippet) else 0,
        "form": FORM_BONUS if any(w in title for w in FORM_WORDS) else 0,
        "combo": COMBO_PENALTY if is_combo else NON_COMBO_BONUS,
        "snippet": MEDICAL_SNIPPET_BONUS if any(w in snippet for w in MEDICAL_SNIPPET_WORDS) else 0,
        "length": length_score(cleaned),
    }


def score_candidate(candidate: RawCandidate, cleaned: str) -> Optional[ScoredCandidate]:
    """Score one candidate; None when its cleaned name is empty."""
    if not cleaned:
        return None
    hostname = extract_hostname(candidate.link)
    breakdown = score_breakdown(candidate, cleaned, hostname)
    return ScoredCandidate(
        title=candidate.title,
        link=candidate.link,
        snippet=candidate.snippet,
        cleaned=cleaned,
        hostname=hostname,
        score=sum(breakdown.values()),
    )
