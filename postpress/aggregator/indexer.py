import datetime as dt
from typing import Iterable, List, NamedTuple, Optional, Tuple

from postpress.sources.base import Post

class IndexEntry(NamedTuple):
    title: str
    slug: str
    date: dt.date

def build_index(posts: Iterable[Post]) -> List[IndexEntry]:
    # newest first; same-day posts by slug so reruns list them identically
    by_slug = sorted(posts, key=lambda p: p.slug)
    ordered = sorted(by_slug, key=lambda p: p.date, reverse=True)
    return [IndexEntry(p.title, p.slug, p.date) for p in ordered]

def neighbours(index: List[IndexEntry], slug: str) -> Tuple[Optional[IndexEntry], Optional[IndexEntry]]:
    """(newer, older) entries around ``slug``; either side is None at the ends."""
    for i, entry in enumerate(index):
        if entry.slug == slug:
            newer = index[i - 1] if i > 0 else None
            older = index[i + 1] if i + 1 < len(index) else None
            return newer, older
    raise KeyError(slug)
