"""
Link collection operations.

Every function takes the current list of entries and returns a new list;
the input list and its entries are left untouched.
"""

import time
from typing import Iterable, List, Optional

from pydantic import ValidationError

from .constants import DEFAULT_CATEGORY, DEFAULT_ICON
from .errors import LinkNotFound, LinkValidationError
from .models import LinkEntry

DIRECTIONS = ("up", "down")


def sorted_links(links: Iterable[LinkEntry]) -> List[LinkEntry]:
    # sorted() is stable, so equal orders keep their storage position
    return sorted(links, key=lambda l: l.order)


def categories(links: Iterable[LinkEntry]) -> List[str]:
    seen = []
    for link in sorted_links(links):
        if link.category not in seen:
            seen.append(link.category)
    return seen


def filter_links(
    links: Iterable[LinkEntry], query: str = "", category: Optional[str] = None
) -> List[LinkEntry]:
    needle = query.lower()
    res = []
    for l in sorted_links(links):
        if needle not in l.title.lower() and needle not in l.category.lower():
            continue
        if category and l.category != category:
            continue
        res.append(l)
    return res


def new_link_id(links: Iterable[LinkEntry], now_ms: Optional[int] = None) -> str:
    existing = {l.id for l in links}
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    while f"id-{stamp}" in existing:
        stamp += 1
    return f"id-{stamp}"


def _require_fields(title: Optional[str], url: Optional[str]):
    if not (title or "").strip() or not (url or "").strip():
        raise LinkValidationError("Title and URL are required")


def add_link(
    links: List[LinkEntry],
    title: str,
    url: str,
    description: str = "",
    category: str = "",
    icon: str = "",
) -> List[LinkEntry]:
    _require_fields(title, url)
    link = LinkEntry(
        id=new_link_id(links),
        title=title,
        url=url,
        description=description or "",
        category=category or DEFAULT_CATEGORY,
        icon=icon or DEFAULT_ICON,
        order=len(links),
    )
    return [*links, link]


def _find(links: List[LinkEntry], link_id: str) -> LinkEntry:
    link = next((l for l in links if l.id == str(link_id)), None)
    if not link:
        raise LinkNotFound(f"No link with id {link_id}")
    return link


def edit_link(links: List[LinkEntry], link_id: str, **changes) -> List[LinkEntry]:
    current = _find(links, link_id)
    merged = {**current.model_dump(), **changes}
    _require_fields(merged.get("title"), merged.get("url"))
    try:
        updated = LinkEntry.model_validate(merged)
    except ValidationError as exc:
        raise LinkValidationError(str(exc)) from exc
    return [updated if l is current else l for l in links]


def delete_link(links: List[LinkEntry], link_id: str) -> List[LinkEntry]:
    _find(links, link_id)
    return [l for l in links if l.id != str(link_id)]


def move_link(links: List[LinkEntry], link_id: str, direction: str) -> List[LinkEntry]:
    """
    Swap an entry with its neighbour in the order-ascending view and
    renumber every entry densely from 0. Moving past either end is a no-op.
    """
    if direction not in DIRECTIONS:
        raise LinkValidationError(f"Unknown direction {direction!r}")
    ordered = sorted_links(links)
    target = _find(ordered, link_id)
    index = ordered.index(target)
    new_index = index - 1 if direction == "up" else index + 1
    if new_index < 0 or new_index >= len(ordered):
        return links

    ordered[index], ordered[new_index] = ordered[new_index], ordered[index]
    return [
        l if l.order == i else l.model_copy(update={"order": i})
        for i, l in enumerate(ordered)
    ]
