from __future__ import annotations

from pathlib import Path
from typing import Optional

import pytest

ASYNC_BODY = """Async code is easier to follow when every await point is explicit.

## Patterns

- fan-out with a bounded pool
- cancel on first failure

```python
await asyncio.gather(*tasks)
```

See [the docs](https://docs.python.org/3/library/asyncio.html) for *details*.
"""

LOGGING_BODY = """Attach a correlation id to every request and log it everywhere.

It makes tracing a single call across services possible.
"""


def make_post(directory: Path, name: str, body: str = "Hello.\n", **meta) -> Path:
    lines = ["---"]
    for key, value in meta.items():
        lines.append(f"{key}: {value}")
    lines.append("---")
    path = directory / name
    path.write_text("\n".join(lines) + "\n" + body, encoding="utf-8")
    return path


@pytest.fixture
def write_post():
    return make_post


@pytest.fixture
def posts_dir(tmp_path: Path) -> Path:
    d = tmp_path / "posts"
    d.mkdir()
    make_post(d, "2016-10-13-async-patterns.md", ASYNC_BODY,
              title='"Async patterns in practice"', date="2016-10-13", tags="[python, async]")
    make_post(d, "2017-01-31-correlation-ids.md", LOGGING_BODY,
              title='"Correlation IDs & distributed logging"', date="2017-01-31",
              summary='"Why every log line needs a request id."')
    (d / "README.txt").write_text("not a post", encoding="utf-8")
    (d / "_template.md").write_text("---\ntitle: t\n---\n", encoding="utf-8")
    return d


@pytest.fixture
def out_dir(tmp_path: Path) -> Path:
    return tmp_path / "site"


def read_tree(root: Path) -> dict:
    return {p.relative_to(root).as_posix(): p.read_bytes() for p in sorted(root.rglob("*")) if p.is_file()}


@pytest.fixture
def snapshot():
    return read_tree
