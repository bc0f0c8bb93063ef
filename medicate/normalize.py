import re
import unicodedata

# Storefront / marketplace markers that identify a trailing title segment as the shop name
STORE_WORDS = (
    "nhà thuốc",
    "nhathuoc",
    "long châu",
    "an khang",
    "pharmacity",
    "medigo",
    "tiki",
    "shopee",
    "lazada",
    "central pharmacy",
)

# Box / blister / sachet / bottle / jar / tube
PACKAGING_WORDS = ("hộp", "hop", "vỉ", "gói", "chai", "lọ", "tuýp", "tuyp")

PIPE_TAIL_RE = re.compile(r"\s*\|\s*[^|]+$")
DASH_TAIL_RE = re.compile(r"\s*-\s*[^-]+$")
SKU_RE = re.compile(r"\b(?:SKU|MÃ|Mã)\s*[:#]?\s*[A-Za-z0-9_-]+$", re.IGNORECASE)
PACKAGING_RE = re.compile(
    r"\b(?:" + "|".join(PACKAGING_WORDS) + r")\s+\d+.*$", re.IGNORECASE
)
MULTI_SPACE_RE = re.compile(r"\s{2,}")
TRAILING_PUNCT_RE = re.compile(r"[\s\-–—|.,:;]+$")


def normalize_text(s: str) -> str:
    return unicodedata.normalize("NFC", s or "")


def is_store_tail(tail: str) -> bool:
    tail = normalize_text(tail).lower()
    return any(w in tail for w in STORE_WORDS)


def _drop_store_tail(pattern: re.Pattern, separator: str, s: str) -> str:
    def repl(m: re.Match) -> str:
        tail = m.group(0).strip().lstrip(separator)
        return "" if is_store_tail(tail) else m.group(0)

    return pattern.sub(repl, s, count=1)


def _clean_once(s: str) -> str:
    s = _drop_store_tail(PIPE_TAIL_RE, "|", s)
    s = _drop_store_tail(DASH_TAIL_RE, "-", s)
    s = SKU_RE.sub("", s)
    s = PACKAGING_RE.sub("", s)
    s = s.replace("|", " ")
    s = MULTI_SPACE_RE.sub(" ", s).strip()
    s = TRAILING_PUNCT_RE.sub("", s).strip()
    return s


def clean_product_name(raw: str) -> str:
    """Reduce a search-result title to the product name it advertises.

    Store suffixes, SKU markers and packaging counts are stripped. A single
    pass can expose a new trailing marker (e.g. a SKU hidden behind a
    packaging phrase), so passes repeat until the name stops changing.
    Returns "" when nothing usable is left.
    """
    s = normalize_text(raw).strip()
    while s:
        cleaned = _clean_once(s)
        if cleaned == s:
            break
        s = cleaned
    return s
