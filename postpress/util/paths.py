from pathlib import Path
import os

def resolve_path(p) -> Path:
    # ~ expansion; relative paths stay relative to the working directory
    return Path(os.path.expanduser(str(p)))

def ensure_dir(p: Path):
    p.mkdir(parents=True, exist_ok=True)
