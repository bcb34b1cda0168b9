# src/batch/loader.py - v1
"""Content loaders: turn an item identifier into the text to review."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from codereview.core.errors import InputReadError

logger = logging.getLogger(__name__)


@runtime_checkable
class ContentLoader(Protocol):
    """Load an item's text or raise InputReadError."""

    def load(self, item_id: str) -> str: ...


class FileContentLoader:
    """Read items as text files.

    Args:
        root: Base directory for relative item ids (None = cwd).
        encoding: Text encoding used to decode file bytes.
    """

    def __init__(self, root: Path | None = None, encoding: str = "utf-8") -> None:
        self._root = root
        self._encoding = encoding

    def resolve(self, item_id: str) -> Path:
        path = Path(item_id)
        if self._root is not None and not path.is_absolute():
            path = self._root / path
        return path

    def load(self, item_id: str) -> str:
        path = self.resolve(item_id)
        try:
            text = path.read_text(encoding=self._encoding)
        except UnicodeDecodeError as exc:
            raise InputReadError(item_id, f"not valid {self._encoding} text") from exc
        except OSError as exc:
            raise InputReadError(item_id, exc.strerror or str(exc)) from exc
        logger.debug("Loaded %s (%d chars)", path, len(text))
        return text


class MappingContentLoader:
    """Serve items from an in-memory mapping (stdin, tests, API callers)."""

    def __init__(self, contents: dict[str, str]) -> None:
        self._contents = dict(contents)

    def load(self, item_id: str) -> str:
        try:
            return self._contents[item_id]
        except KeyError:
            raise InputReadError(item_id, "no such item") from None
