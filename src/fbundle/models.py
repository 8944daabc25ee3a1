# ============================================================================
# SOURCEFILE: models.py
# RELPATH: file_bundle/src/fbundle/models.py
# PROJECT: FileBundle v1.0
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Core data models for patterns, walked entries and bundle records
# ============================================================================

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterator, Optional, Tuple

EXCLUDE_MARKER = "!"


@dataclass(frozen=True)
class Pattern:
    """
    One parsed glob pattern.

    Attributes:
        raw: Pattern text exactly as the user supplied it
        is_exclude: True when the pattern starts with '!'
        body: Glob text with the exclusion marker stripped
        regex: Compiled, case-insensitive expression for ``body``
    """
    raw: str
    is_exclude: bool
    body: str
    regex: re.Pattern = field(repr=False, compare=False)

    def matches(self, relative_path: str) -> bool:
        return self.regex.fullmatch(relative_path) is not None


@dataclass(frozen=True)
class PatternList:
    """
    Ordered, immutable sequence of patterns.

    Order is significant: it is the order the user gave and is never re-sorted.
    ``skipped`` holds (raw, reason) pairs for malformed patterns dropped when
    compiling leniently.
    """
    patterns: Tuple[Pattern, ...] = ()
    skipped: Tuple[Tuple[str, str], ...] = ()

    def __iter__(self) -> Iterator[Pattern]:
        return iter(self.patterns)

    def __len__(self) -> int:
        return len(self.patterns)

    @property
    def has_includes(self) -> bool:
        return any(not p.is_exclude for p in self.patterns)

    @property
    def has_excludes(self) -> bool:
        return any(p.is_exclude for p in self.patterns)

    def raw_patterns(self) -> list:
        return [p.raw for p in self.patterns]


class FileKind(Enum):
    """File type of a walked entry, as seen without following symlinks."""
    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    OTHER = "other"


@dataclass(frozen=True)
class FileEntry:
    """A filesystem path produced by the walker."""
    path: Path
    kind: FileKind = FileKind.FILE

    @property
    def is_file(self) -> bool:
        return self.kind is FileKind.FILE


@dataclass(frozen=True)
class SelectedFile:
    """
    A walked file that passed selection.

    Attributes:
        absolute_path: Where to read the file from
        relative_path: POSIX path relative to the source root, or the absolute
            path string when the root prefix could not be stripped
    """
    absolute_path: Path
    relative_path: str


@dataclass(frozen=True)
class BundleRecord:
    """
    One file's unit in the bundle: separator line, path and content.

    ``content`` is the file's UTF-8 text, or an empty string when the bytes
    were not valid UTF-8.
    """
    separator: str
    relative_path: str
    content: str = ""

    def render(self) -> str:
        return f"{self.separator} {self.relative_path}\n{self.content}\n"

    def encode(self) -> bytes:
        # Undecodable file names arrive surrogate-escaped; write their raw bytes back
        return self.render().encode("utf-8", "surrogateescape")


@dataclass
class BundleResult:
    """
    Outcome of one bundling run.

    Attributes:
        output_path: Bundle file that was written
        selected: Files that passed selection
        written: Records appended to the bundle
        non_utf8: Records written with an empty body because of invalid UTF-8
        unreadable: Selected files that could not be read and were left out
        elapsed_ms: Wall-clock duration of the run
    """
    output_path: Path
    selected: int = 0
    written: int = 0
    non_utf8: int = 0
    unreadable: int = 0
    elapsed_ms: Optional[int] = None

    @property
    def skipped(self) -> int:
        return self.selected - self.written


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: None (core data structures)
# TESTS: tests/unit/test_models.py
# ============================================================================
