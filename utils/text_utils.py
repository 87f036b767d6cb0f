from __future__ import annotations

import re
import unicodedata
from typing import Optional

from bs4 import BeautifulSoup  # type: ignore


def clean_html_to_text(html: Optional[str]) -> str:
    """
    Convert owner-provided or imported rich text into plain text.

    - Strips <script> and <style> blocks.
    - Uses the built-in html.parser (no lxml dependency).
    - Normalizes whitespace.
    """
    if not html:
        return ""

    # Plain text needs no parsing (and BeautifulSoup warns on URL-like input).
    if "<" not in html:
        return " ".join(html.split())

    soup = BeautifulSoup(html, "html.parser")

    for tag in soup(["script", "style"]):
        tag.decompose()

    text = soup.get_text(separator=" ", strip=True)
    return " ".join(text.split())


def truncate_text(text: Optional[str], max_length: int) -> Optional[str]:
    """
    Behavior:
    - If text is None: return None.
    - If max_length <= 0: return "".
    - If len(text) <= max_length: return text unchanged.
    - Else: return the first max_length characters (no ellipsis).
    """
    if text is None:
        return None

    if max_length <= 0:
        return ""

    if len(text) <= max_length:
        return text

    return text[:max_length]


def strip_diacritics(text: str) -> str:
    """NFD-decompose and drop combining marks: "Guaçuí" -> "Guacui"."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def slugify(text: str, max_length: int) -> str:
    """Lowercase ASCII slug: non-alphanumerics dropped, whitespace runs become one hyphen."""
    normalized = strip_diacritics(text.lower())
    normalized = re.sub(r"[^a-z0-9\s]", "", normalized)
    slug = re.sub(r"\s+", "-", normalized.strip())
    return slug[:max_length].strip("-")


def format_price_brl(price_in_cents: Optional[int]) -> str:
    """1234567 -> "R$ 12.345,67". Zero or missing prices render as ""."""
    if not price_in_cents:
        return ""
    reais = f"{price_in_cents / 100:,.2f}"
    return "R$ " + reais.replace(",", "_").replace(".", ",").replace("_", ".")
