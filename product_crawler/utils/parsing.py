from __future__ import annotations

from typing import List

from bs4 import BeautifulSoup


def extract_hrefs(html: str) -> List[str]:
    """
    Extract raw ``href`` values from every anchor, in document order.
    Values are left as found (possibly relative); the engine resolves them.
    """
    soup = BeautifulSoup(html, "html.parser")
    out: List[str] = []
    for a in soup.select("a[href]"):
        href = (a.get("href") or "").strip()
        if href:
            out.append(href)
    return out
