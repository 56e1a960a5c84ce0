import datetime as dt
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

@dataclass(frozen=True)
class Post:
    title: str
    date: dt.date
    body: str             # raw Markdown after the front-matter block
    slug: str
    source: Optional[Path] = None
    tags: Tuple[str, ...] = ()
    summary: str = ""
    draft: bool = False
