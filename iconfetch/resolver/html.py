"""Icon link discovery in HTML documents."""

from __future__ import annotations

from bs4 import BeautifulSoup

# Checked in order; the first group with a matching <link> wins.
_REL_PRIORITY: tuple[frozenset[str], ...] = (
    frozenset({"icon", "shortcut icon"}),
    frozenset({"apple-touch-icon"}),
)


def _rel_value(tag) -> str:
    rel = tag.get("rel")
    if rel is None:
        return ""
    if isinstance(rel, (list, tuple)):
        rel = " ".join(rel)
    return " ".join(str(rel).lower().split())


def extract_icon_href(html: str | bytes) -> str | None:
    """Return the href of the page's declared icon, if any.

    ``rel="icon"`` and ``rel="shortcut icon"`` take precedence over
    ``rel="apple-touch-icon"``; attribute order within the tag is irrelevant.
    """
    soup = BeautifulSoup(html, "html.parser")
    links = [
        (_rel_value(tag), tag["href"].strip())
        for tag in soup.find_all("link", href=True)
        if tag["href"].strip()
    ]

    for accepted in _REL_PRIORITY:
        for rel, href in links:
            if rel in accepted:
                return href
    return None
