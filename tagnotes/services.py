from __future__ import annotations
from typing import Iterable, Optional, Sequence

from .models import Note


def parse_tags(raw: Optional[str]) -> list[str]:
    """Split comma separated input into stripped, non-empty, unique tags.

    Order of first occurrence is kept and case is preserved:
    "a, b, a, c" -> ["a", "b", "c"].
    """
    if not raw:
        return []
    parts = (t.strip() for t in raw.split(","))
    return list(dict.fromkeys(t for t in parts if t))


def format_tags(tags: Iterable[str]) -> str:
    return ", ".join(tags)


def tag_universe(notes: Sequence[Note]) -> list[str]:
    seen: dict[str, None] = {}
    for n in notes:
        for t in n.tags:
            seen.setdefault(t, None)
    return list(seen)


def matches_search(note: Note, query: str) -> bool:
    if not query:
        return True
    q = query.lower()
    return (
        q in note.title.lower()
        or q in note.content.lower()
        or any(q in t.lower() for t in note.tags)
    )


def filtered_view(
    notes: Sequence[Note],
    search_query: str = "",
    filter_tag: str = "",
) -> list[Note]:
    """
    Notes matching both the search and the tag filter, in collection order.
    - search_query: case-insensitive substring of title, content or any tag
    - filter_tag: exact, case-sensitive tag membership
    """
    return [
        n for n in notes
        if matches_search(n, search_query)
        and (not filter_tag or filter_tag in n.tags)
    ]


def find_note(notes: Sequence[Note], note_id: int) -> Optional[Note]:
    return next((n for n in notes if n.id == note_id), None)
