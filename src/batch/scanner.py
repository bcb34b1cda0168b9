# src/batch/scanner.py - v2
"""Source scanner: discover files to review under a repository root."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from codereview.batch.models import ScanEntry

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDED_DIRS: tuple[str, ...] = ("bin", "obj")


class SourceScanner:
    """Glob a directory tree for files matching a pattern.

    A file is skipped when any directory between the root and the file is
    named in ``excluded_dirs`` (build output such as bin/ and obj/).
    """

    def __init__(
        self,
        pattern: str = "*.cs",
        excluded_dirs: Iterable[str] = DEFAULT_EXCLUDED_DIRS,
        recursive: bool = True,
    ) -> None:
        self._pattern = pattern
        self._excluded = frozenset(excluded_dirs)
        self._recursive = recursive

    def scan(self, root: Path, limit: int | None = None) -> list[ScanEntry]:
        """Discover matching files, sorted by path.

        Args:
            root: Repository root directory.
            limit: Keep only the first ``limit`` files (None = all).

        Raises:
            ValueError: If root is not a directory.
        """
        if not root.is_dir():
            msg = f"Repository path is not a directory: {root}"
            raise ValueError(msg)

        pattern_fn = root.rglob if self._recursive else root.glob
        entries: list[ScanEntry] = []
        for path in sorted(pattern_fn(self._pattern)):
            if not path.is_file():
                continue
            relative = path.relative_to(root)
            if self._excluded.intersection(relative.parent.parts):
                continue
            entries.append(
                ScanEntry(
                    file_path=str(path.resolve()),
                    filename=path.name,
                    relative_path=relative.as_posix(),
                    size_bytes=path.stat().st_size,
                )
            )

        logger.info(
            "Found %d files matching pattern %s under %s",
            len(entries), self._pattern, root,
        )
        if limit is not None and len(entries) > limit:
            logger.info("Reviewing the first %d of %d files", limit, len(entries))
            entries = entries[:limit]
        return entries
