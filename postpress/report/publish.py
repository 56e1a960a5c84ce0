from __future__ import annotations

import contextlib
import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from postpress.errors import WriteError
from postpress.util.manifest import MANIFEST_NAME, load_manifest, save_manifest
from postpress.util.paths import ensure_dir

logger = logging.getLogger(__name__)

INDEX_NAME = "index.html"


def _write_file(path: Path, content: str):
    tmp = path.with_name(path.name + ".tmp")
    try:
        tmp.write_bytes(content.encode("utf-8"))
        tmp.replace(path)
    except OSError as exc:
        with contextlib.suppress(OSError):
            tmp.unlink()
        raise WriteError(f"cannot write file: {exc.strerror or exc}", path) from exc


def _output_files(pages: Mapping[str, str], index_html: str, extra: Optional[Mapping[str, str]]) -> Dict[str, str]:
    files: Dict[str, str] = {INDEX_NAME: index_html}
    for name, content in [(f"{slug}.html", html) for slug, html in pages.items()] + list((extra or {}).items()):
        if name in files or name == MANIFEST_NAME:
            raise WriteError(f"two outputs would be written to {name!r}")
        files[name] = content
    return files


def publish(
    pages: Mapping[str, str],
    index_html: str,
    output_dir,
    *,
    extra: Optional[Mapping[str, str]] = None,
) -> List[Path]:
    """Write every post page, the index and any extra files into ``output_dir``.

    Parameters
    ----------
    pages : mapping
        slug -> rendered HTML page; each lands in ``<slug>.html``.
    index_html : str
        Rendered index page, written to ``index.html``.
    output_dir : str or Path
        Created if missing.
    extra : mapping or None
        filename -> content for additional files such as the feed.

    Returns
    -------
    list[Path]
        Written files in name order.

    Any OS-level failure raises WriteError and aborts the run. Files recorded
    by the previous run's manifest that this run no longer produces are
    deleted; files the tool never wrote are left alone.
    """
    out = Path(output_dir)
    files = _output_files(pages, index_html, extra)

    # validated before anything touches the disk
    manifest_path = out / MANIFEST_NAME
    previous = load_manifest(manifest_path)

    try:
        ensure_dir(out)
    except OSError as exc:
        raise WriteError(f"cannot create output directory: {exc.strerror or exc}", out) from exc

    written: List[Path] = []
    for name in sorted(files):
        path = out / name
        _write_file(path, files[name])
        logger.debug("wrote %s", path)
        written.append(path)

    for name in sorted(previous - set(files)):
        # manifest entries are bare file names; anything else was not written by us
        if Path(name).name != name or name in ("", ".", ".."):
            logger.warning("ignoring suspicious manifest entry %r", name)
            continue
        stale = out / name
        try:
            stale.unlink()
            logger.info("removed stale output %s", stale)
        except FileNotFoundError:
            pass
        except OSError as exc:
            raise WriteError(f"cannot remove stale output: {exc.strerror or exc}", stale) from exc

    try:
        save_manifest(manifest_path, files)
    except OSError as exc:
        raise WriteError(f"cannot write output manifest: {exc.strerror or exc}", manifest_path) from exc

    return written
