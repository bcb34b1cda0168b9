# tests/unit/batch/test_scanner.py - v1
"""Tests for batch/scanner.py: source file discovery."""

from __future__ import annotations

from pathlib import Path

import pytest

from codereview.batch.scanner import SourceScanner


def _touch(root: Path, relative: str, content: str = "x") -> None:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    _touch(tmp_path, "Program.cs", "class Program {}")
    _touch(tmp_path, "src/Service.cs")
    _touch(tmp_path, "src/Models/User.cs")
    _touch(tmp_path, "bin/Debug/Generated.cs")
    _touch(tmp_path, "src/obj/Temp.cs")
    _touch(tmp_path, "README.md")
    _touch(tmp_path, "robin/Keep.cs")
    return tmp_path


class TestSourceScanner:
    def test_recursive_scan(self, repo):
        entries = SourceScanner().scan(repo)
        assert [e.relative_path for e in entries] == [
            "Program.cs",
            "robin/Keep.cs",
            "src/Models/User.cs",
            "src/Service.cs",
        ]

    def test_excluded_dirs_match_whole_components(self, repo):
        paths = [e.relative_path for e in SourceScanner().scan(repo)]
        assert "robin/Keep.cs" in paths
        assert "bin/Debug/Generated.cs" not in paths
        assert "src/obj/Temp.cs" not in paths

    def test_custom_exclusions(self, repo):
        scanner = SourceScanner(excluded_dirs=["src"])
        paths = [e.relative_path for e in scanner.scan(repo)]
        assert "bin/Debug/Generated.cs" in paths
        assert "src/Service.cs" not in paths

    def test_non_recursive(self, repo):
        entries = SourceScanner(recursive=False).scan(repo)
        assert [e.filename for e in entries] == ["Program.cs"]

    def test_pattern(self, repo):
        entries = SourceScanner(pattern="*.md").scan(repo)
        assert [e.filename for e in entries] == ["README.md"]

    def test_limit(self, repo):
        entries = SourceScanner().scan(repo, limit=2)
        assert [e.relative_path for e in entries] == ["Program.cs", "robin/Keep.cs"]

    def test_entry_fields(self, repo):
        [entry] = SourceScanner(recursive=False).scan(repo)
        assert entry.size_bytes == len("class Program {}")
        assert Path(entry.file_path).is_absolute()

    def test_no_matches(self, tmp_path):
        assert SourceScanner().scan(tmp_path) == []

    def test_not_a_directory(self, tmp_path):
        with pytest.raises(ValueError, match="not a directory"):
            SourceScanner().scan(tmp_path / "missing")
