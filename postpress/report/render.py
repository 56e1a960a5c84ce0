from __future__ import annotations

import datetime as dt
from email.utils import format_datetime
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence

import markdown
from bs4 import BeautifulSoup
from jinja2 import Template, TemplateError

from postpress.aggregator.indexer import IndexEntry, neighbours
from postpress.errors import RenderError
from postpress.sources.base import Post

DEFAULT_EXTENSIONS = ("fenced_code", "tables", "sane_lists")
TEMPLATES_DIR = Path(__file__).parent / "templates"


def render_body(text: str, extensions: Sequence[str] = DEFAULT_EXTENSIONS) -> str:
    """Convert a post's Markdown body to an HTML fragment.

    A fresh converter per call keeps the output independent of earlier posts.
    """
    try:
        md = markdown.Markdown(extensions=list(extensions), output_format="html")
    except (ImportError, AttributeError, TypeError) as exc:
        raise RenderError(f"cannot load Markdown extensions {list(extensions)}: {exc}") from exc
    return md.convert(text)


def strip_tags(html: str) -> str:
    text = BeautifulSoup(html, "html.parser").get_text(" ")
    return " ".join(text.split())


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    cut = text[:limit]
    if " " in cut:
        cut = cut.rsplit(" ", 1)[0]
    return cut.rstrip(" ,.;:") + "..."


def excerpt(post: Post, html: str, limit: int = 280) -> str:
    if post.summary:
        return _truncate(" ".join(post.summary.split()), limit)
    first = BeautifulSoup(html, "html.parser").find("p")
    text = " ".join(first.get_text(" ").split()) if first is not None else strip_tags(html)
    return _truncate(text, limit)


def join_url(base: str, path: str) -> str:
    base = (base or "").rstrip("/")
    if not base:
        return path
    return f"{base}/{path.lstrip('/')}"


def rfc822_date(value: dt.date) -> str:
    midnight = dt.datetime.combine(value, dt.time(0, 0), tzinfo=dt.timezone.utc)
    return format_datetime(midnight)


def _render(name: str, **context) -> str:
    tpl_path = TEMPLATES_DIR / name
    try:
        tpl = Template(
            tpl_path.read_text(encoding="utf-8"),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        return tpl.render(**context)
    except (OSError, TemplateError) as exc:
        raise RenderError(f"template failed: {exc}", tpl_path) from exc


def render_post_page(
    post: Post,
    body_html: str,
    *,
    index: Sequence[IndexEntry],
    site: Mapping,
    date_format: str = "%Y-%m-%d",
    feed_href: Optional[str] = None,
) -> str:
    newer, older = neighbours(list(index), post.slug)
    return _render(
        "post.html.j2",
        site=site,
        post=post,
        date=post.date.strftime(date_format),
        body=body_html,
        newer=newer,
        older=older,
        feed_href=feed_href,
    )


def render_index_page(
    index: Sequence[IndexEntry],
    *,
    site: Mapping,
    excerpts: Optional[Mapping[str, str]] = None,
    date_format: str = "%Y-%m-%d",
    feed_href: Optional[str] = None,
) -> str:
    """Render the listing page.

    Parameters
    ----------
    index : sequence of IndexEntry
        Entries in display order (newest first).
    site : mapping
        ``title``, ``url`` and ``description`` of the site.
    excerpts : mapping or None
        Optional slug -> excerpt text shown under each entry.
    date_format : str
        strftime pattern for the listed dates.
    feed_href : str or None
        Feed file to advertise in the page head; None when no feed is written.
    """
    excerpts = excerpts or {}
    entries = [
        {
            "title": e.title,
            "href": f"{e.slug}.html",
            "date": e.date.strftime(date_format),
            "iso_date": e.date.isoformat(),
            "excerpt": excerpts.get(e.slug, ""),
        }
        for e in index
    ]
    return _render("index.html.j2", site=site, entries=entries, feed_href=feed_href)


def render_feed(
    posts: Sequence[Post],
    *,
    site: Mapping,
    excerpts: Optional[Mapping[str, str]] = None,
) -> str:
    """RSS 2.0 feed for ``posts``, which are expected newest first.

    ``lastBuildDate`` is the newest post's date, never the wall clock.
    """
    excerpts = excerpts or {}
    base = site.get("url", "")
    items: list[Dict] = []
    for p in posts:
        link = join_url(base, f"{p.slug}.html")
        items.append({
            "title": p.title,
            "link": link,
            "pub_date": rfc822_date(p.date),
            "description": excerpts.get(p.slug, ""),
            "tags": p.tags,
        })
    return _render(
        "feed.xml.j2",
        site=site,
        site_link=join_url(base, "") if base else "index.html",
        last_build=rfc822_date(posts[0].date) if posts else None,
        items=items,
    )
