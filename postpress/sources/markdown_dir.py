from __future__ import annotations

import datetime as dt
import logging
import re
from pathlib import Path
from typing import List, Tuple

import yaml
from dateutil import parser as dateparse

from postpress.errors import NotFoundError, ParseError
from postpress.util.config import as_bool
from .base import Post

logger = logging.getLogger(__name__)

POST_SUFFIXES = (".md", ".markdown")
RESERVED_SLUGS = {"index"}  # would overwrite the generated index page

_FENCE = "---"
_DATE_PREFIX_RE = re.compile(r"^\d{4}-\d{2}-\d{2}-")
_NON_SLUG_RE = re.compile(r"[^a-z0-9]+")
# missing parts of a partial date ("2017", "March 2017") come from here, not from today
_MISSING_DATE_PARTS = dt.datetime(2000, 1, 1)


def slugify(text: str) -> str:
    return _NON_SLUG_RE.sub("-", text.lower()).strip("-")


def is_post_file(path: Path) -> bool:
    name = path.name
    if name.startswith(("_", ".")):
        return False
    return path.suffix.lower() in POST_SUFFIXES and path.is_file()


def parse_front_matter(text: str) -> Tuple[dict, str]:
    """Split a post into its YAML front-matter mapping and Markdown body.

    The block must open on the first line with ``---`` and close with another
    ``---`` line. Raises ParseError (without a path) when it is missing,
    unterminated, not valid YAML, or not a mapping.
    """
    lines = text.lstrip("\ufeff").splitlines()
    if not lines or lines[0].strip() != _FENCE:
        raise ParseError("missing front-matter block (first line must be '---')")

    end = None
    for i in range(1, len(lines)):
        if lines[i].strip() == _FENCE:
            end = i
            break
    if end is None:
        raise ParseError("unterminated front-matter block (no closing '---')")

    try:
        meta = yaml.safe_load("\n".join(lines[1:end]))
    except (yaml.YAMLError, ValueError) as exc:
        # out-of-range timestamps such as 2017-13-45 surface as ValueError
        raise ParseError(f"front-matter is not valid YAML: {exc}") from exc
    if meta is None:
        meta = {}
    if not isinstance(meta, dict):
        raise ParseError("front-matter must be a mapping of fields")

    body = "\n".join(lines[end + 1:]).lstrip("\n")
    return meta, body


def _coerce_date(value) -> dt.date:
    # yaml already turns 2017-01-31 into a date; datetimes keep only their date part
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return dateparse.parse(value.strip(), default=_MISSING_DATE_PARTS).date()
        except (ValueError, OverflowError) as exc:
            raise ParseError(f"unparseable date {value!r}") from exc
    raise ParseError(f"unparseable date {value!r}")


def _coerce_tags(value) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = value
    else:
        raise ParseError("tags must be a list or a comma-separated string")
    return tuple(str(t).strip() for t in items if str(t).strip())


def _slug_for(path: Path, meta: dict) -> str:
    explicit = meta.get("slug")
    if explicit is not None and str(explicit).strip():
        return slugify(str(explicit))
    return slugify(_DATE_PREFIX_RE.sub("", path.stem))


def parse_post(path) -> Post:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ParseError(f"could not read post: {exc}", path) from exc

    try:
        meta, body = parse_front_matter(text)

        title = meta.get("title")
        title = str(title).strip() if title is not None else ""
        if not title:
            raise ParseError("missing required front-matter field 'title'")

        if meta.get("date") in (None, ""):
            raise ParseError("missing required front-matter field 'date'")
        date = _coerce_date(meta["date"])

        slug = _slug_for(path, meta)
        if not slug:
            raise ParseError("cannot derive a slug from the file name")
        if slug in RESERVED_SLUGS:
            raise ParseError(f"slug {slug!r} is reserved")

        summary = meta.get("summary")
        return Post(
            title=title,
            date=date,
            body=body,
            slug=slug,
            source=path,
            tags=_coerce_tags(meta.get("tags")),
            summary=str(summary).strip() if summary is not None else "",
            draft=as_bool(meta.get("draft", False)),
        )
    except ParseError as exc:
        if exc.path is None:
            raise ParseError(exc.message, path) from exc
        raise


def load_posts(input_dir, *, include_drafts: bool = False) -> List[Post]:
    """Load every post file directly inside ``input_dir``, in filename order."""
    root = Path(input_dir)
    if not root.exists():
        raise NotFoundError("input directory does not exist", root)
    if not root.is_dir():
        raise NotFoundError("input path is not a directory", root)

    posts: List[Post] = []
    seen = {}
    for path in sorted(root.iterdir()):
        if not is_post_file(path):
            logger.debug("skipping %s (not a post file)", path)
            continue
        post = parse_post(path)
        if post.draft and not include_drafts:
            logger.info("skipping draft %s", path)
            continue
        if post.slug in seen:
            raise ParseError(f"duplicate slug {post.slug!r} (also used by {seen[post.slug]})", path)
        seen[post.slug] = path
        posts.append(post)

    logger.debug("loaded %d post(s) from %s", len(posts), root)
    return posts
