import re

NON_DIGIT_RE = re.compile(r"\D")
PLAUSIBLE_BARCODE_RE = re.compile(r"[0-9]{8,14}")


def normalize_barcode(raw) -> str:
    """Keep only the digits of a scanned code."""
    return NON_DIGIT_RE.sub("", str(raw or ""))


def is_plausible_barcode(code: str) -> bool:
    # EAN-8 through GTIN-14
    return bool(PLAUSIBLE_BARCODE_RE.fullmatch(code or ""))
