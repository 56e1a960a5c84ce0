import json
from pathlib import Path

from postpress.errors import ParseError

MANIFEST_NAME = ".postpress-manifest.json"

def load_manifest(manifest_path: Path) -> set:
    """Names of the files the previous run wrote, or an empty set on a first run."""
    if not manifest_path.exists():
        return set()
    try:
        data = json.loads(manifest_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ParseError(f"unreadable output manifest ({exc})", manifest_path) from exc
    files = data.get("files") if isinstance(data, dict) else None
    if not isinstance(files, list) or not all(isinstance(f, str) for f in files):
        raise ParseError("output manifest has no 'files' list", manifest_path)
    return set(files)

def save_manifest(manifest_path: Path, files):
    tmp = manifest_path.with_name(manifest_path.name + ".tmp")
    payload = json.dumps({"files": sorted(set(files))}, indent=2, ensure_ascii=False) + "\n"
    tmp.write_bytes(payload.encode("utf-8"))
    tmp.replace(manifest_path)
