import copy
import logging
from pathlib import Path

import yaml

from postpress.errors import NotFoundError, ParseError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.yml"

_TRUE_STRINGS = {"1", "true", "yes", "y", "on"}

DEFAULTS = {
    "input_dir": "posts",
    "output_dir": "site",
    "site": {
        "title": "Blog",
        "url": "",              # absolute base URL, used for feed links
        "description": "",
    },
    "include_drafts": False,
    "date_format": "%Y-%m-%d",
    "excerpt_length": 280,
    "markdown": {
        "extensions": ["fenced_code", "tables", "sane_lists"],
    },
    "feed": {
        "enabled": True,
        "limit": 20,
        "filename": "feed.xml",
    },
}


def as_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def _merge(base: dict, override: dict) -> dict:
    out = dict(base)
    for key, value in override.items():
        if key not in base:
            logger.debug("ignoring unknown config key %r", key)
            continue
        if isinstance(base[key], dict):
            if not isinstance(value, dict):
                raise ParseError(f"config key {key!r} must be a mapping")
            out[key] = _merge(base[key], value)
        else:
            out[key] = value
    return out


def _as_int(cfg: dict, path: Path, *keys) -> None:
    node = cfg
    for k in keys[:-1]:
        node = node[k]
    try:
        node[keys[-1]] = int(node[keys[-1]])
    except (TypeError, ValueError) as exc:
        raise ParseError(f"config key {'.'.join(keys)!r} must be an integer", path) from exc


def load_config(config_path, *, explicit: bool = False) -> dict:
    """Defaults overlaid with ``config_path``.

    A missing file is fine unless the user named it (``explicit``), in which
    case it raises NotFoundError.
    """
    cfg = copy.deepcopy(DEFAULTS)
    path = Path(config_path)
    if not path.exists():
        if explicit:
            raise NotFoundError("config file does not exist", path)
        logger.debug("no config file at %s; using defaults", path)
        return cfg

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise NotFoundError(f"cannot read config file: {exc}", path) from exc
    except (yaml.YAMLError, ValueError) as exc:
        raise ParseError(f"config is not valid YAML: {exc}", path) from exc
    if data is None:
        return cfg
    if not isinstance(data, dict):
        raise ParseError("config must be a YAML mapping", path)

    try:
        cfg = _merge(cfg, data)
    except ParseError as exc:
        raise ParseError(exc.message, path) from exc
    _as_int(cfg, path, "excerpt_length")
    _as_int(cfg, path, "feed", "limit")
    cfg["include_drafts"] = as_bool(cfg["include_drafts"])
    cfg["feed"]["enabled"] = as_bool(cfg["feed"]["enabled"])
    if not isinstance(cfg["markdown"]["extensions"], list):
        raise ParseError("config key 'markdown.extensions' must be a list", path)
    return cfg
