#!/usr/bin/env python3
import argparse
import logging
import sys
from pathlib import Path

from postpress.aggregator.indexer import build_index
from postpress.errors import PostpressError, RenderError
from postpress.report.publish import publish
from postpress.report.render import (
    excerpt,
    render_body,
    render_feed,
    render_index_page,
    render_post_page,
)
from postpress.sources.markdown_dir import load_posts
from postpress.util.config import DEFAULT_CONFIG_PATH, as_bool, load_config
from postpress.util.paths import resolve_path

logger = logging.getLogger(__name__)


def build_site(cfg: dict):
    """Load, render, index and publish; returns the written paths."""
    posts = load_posts(resolve_path(cfg["input_dir"]), include_drafts=as_bool(cfg["include_drafts"]))
    index = build_index(posts)
    by_slug = {p.slug: p for p in posts}
    site = cfg["site"]
    date_format = cfg["date_format"]

    bodies = {}
    for post in posts:
        try:
            bodies[post.slug] = render_body(post.body, cfg["markdown"]["extensions"])
        except RenderError as exc:
            raise RenderError(exc.message, post.source) from exc
    excerpts = {slug: excerpt(by_slug[slug], html, cfg["excerpt_length"]) for slug, html in bodies.items()}

    feed_cfg = cfg["feed"]
    feed_href = feed_cfg["filename"] if as_bool(feed_cfg.get("enabled")) else None

    pages = {
        e.slug: render_post_page(
            by_slug[e.slug], bodies[e.slug], index=index, site=site, date_format=date_format, feed_href=feed_href
        )
        for e in index
    }
    index_html = render_index_page(index, site=site, excerpts=excerpts, date_format=date_format, feed_href=feed_href)

    extra = {}
    if feed_href:
        newest = [by_slug[e.slug] for e in index][: max(0, feed_cfg["limit"])]
        extra[feed_href] = render_feed(newest, site=site, excerpts=excerpts)

    logger.info("publishing %d post(s) to %s", len(pages), cfg["output_dir"])
    return publish(pages, index_html, resolve_path(cfg["output_dir"]), extra=extra)


def main(argv=None):
    ap = argparse.ArgumentParser(description="Render a directory of Markdown posts into a static site")
    ap.add_argument("--input", dest="input_dir", default=None, help="directory of Markdown posts")
    ap.add_argument("--output", dest="output_dir", default=None, help="directory to write the site into")
    ap.add_argument("--config", default=None, help=f"YAML config file (default: {DEFAULT_CONFIG_PATH} if present)")
    ap.add_argument("--drafts", dest="drafts", action=argparse.BooleanOptionalAction, default=None,
                    help="include/exclude posts marked draft: true")
    ap.add_argument("--feed", dest="feed", action=argparse.BooleanOptionalAction, default=None,
                    help="enable/disable the RSS feed")
    ap.add_argument("--site-title", default=None)
    ap.add_argument("--site-url", default=None, help="absolute base URL used for feed links")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        # defaults <- config <- CLI
        cfg = load_config(Path(args.config or DEFAULT_CONFIG_PATH), explicit=args.config is not None)
        if args.input_dir is not None:
            cfg["input_dir"] = args.input_dir
        if args.output_dir is not None:
            cfg["output_dir"] = args.output_dir
        if args.drafts is not None:
            cfg["include_drafts"] = bool(args.drafts)
        if args.feed is not None:
            cfg["feed"]["enabled"] = bool(args.feed)
        if args.site_title is not None:
            cfg["site"]["title"] = args.site_title
        if args.site_url is not None:
            cfg["site"]["url"] = args.site_url

        written = build_site(cfg)
    except PostpressError as e:
        print(f"[postpress] error: {e}", file=sys.stderr)
        return 1

    print(f"[postpress] Wrote {len(written)} file(s):")
    for path in written:
        print(f"  - {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
