from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class PostpressError(Exception):
    """Base error; carries the file the failure is about when one is known."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        super().__init__(message)
        self.message = message
        self.path = Path(path) if path is not None else None

    def __str__(self) -> str:
        if self.path is not None:
            return f"{self.path}: {self.message}"
        return self.message


class NotFoundError(PostpressError):
    pass


class ParseError(PostpressError):
    pass


class RenderError(PostpressError):
    pass


class WriteError(PostpressError, OSError):
    """Write failure in the output directory. Always fatal."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        PostpressError.__init__(self, message, path)

    def __str__(self) -> str:
        return PostpressError.__str__(self)
