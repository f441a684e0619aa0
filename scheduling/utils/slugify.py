"""
URL slug helpers.
"""

import re
import unicodedata

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    """
    Lowercase ASCII slug with single dashes, e.g. "Sales Team!" -> "sales-team".
    """
    normalized = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    return _NON_SLUG_CHARS.sub("-", normalized.lower()).strip("-")
