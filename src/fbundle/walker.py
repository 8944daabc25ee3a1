# ============================================================================
# FILE: walker.py
# RELPATH: file_bundle/src/fbundle/walker.py
# PROJECT: FileBundle v1.0
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Recursive source-tree enumeration yielding regular files only
# ============================================================================

"""
Directory Walker Module.

Enumerates every regular file below a source root. Traversal is raw by
default: hidden entries and repository ignore files are not consulted.
Ignore-file handling (.gitignore / .ignore, gitignore semantics through
pathspec) is an explicit toggle.
"""

import logging
import os
from pathlib import Path
from typing import Dict, Iterator, List, Tuple

from pathspec import GitIgnoreSpec

from fbundle.exceptions import SourceDirError
from fbundle.models import FileEntry, FileKind

logger = logging.getLogger(__name__)

IGNORE_FILENAMES = (".gitignore", ".ignore")
VCS_DIRNAME = ".git"


class IgnoreRules:
    """
    Ignore rules collected from the directories visited so far.

    Each rule file applies to the directory holding it and everything below.
    Deeper files are consulted after shallower ones, so they can re-include
    ('!pattern') what a parent ignored.
    """

    def __init__(self):
        self._specs: Dict[str, GitIgnoreSpec] = {}

    def load(self, directory: Path, rel_dir: str) -> List[Tuple[str, str]]:
        """
        Read the ignore files in ``directory``.

        Returns:
            (path, reason) for every ignore file that could not be read
        """
        lines: List[str] = []
        failures: List[Tuple[str, str]] = []
        for name in IGNORE_FILENAMES:
            rule_file = directory / name
            if not rule_file.is_file():
                continue
            try:
                lines.extend(rule_file.read_text(encoding="utf-8").splitlines())
            except (OSError, UnicodeDecodeError) as e:
                failures.append((str(rule_file), str(e)))
        if lines:
            self._specs[rel_dir] = GitIgnoreSpec.from_lines(lines)
        return failures

    def is_ignored(self, rel_path: str, is_dir: bool = False) -> bool:
        """Check a root-relative POSIX path against every applicable rule file."""
        parts = rel_path.split("/")
        ignored = False
        for depth in range(len(parts)):
            base = "/".join(parts[:depth])
            spec = self._specs.get(base)
            if spec is None:
                continue
            candidate = "/".join(parts[depth:])
            if is_dir:
                candidate += "/"
            result = spec.check_file(candidate)
            if result.include is not None:
                ignored = result.include
        return ignored


class DirectoryWalker:
    """
    Lazily walks a source tree and yields FileEntry objects for regular files.

    Directories are visited depth first; within a directory entries are taken
    in name order and a directory's files come before its subdirectories.
    Per-entry errors are logged, recorded in ``errors`` and skipped.
    """

    def __init__(self,
                 root: Path,
                 respect_ignore_files: bool = False,
                 include_hidden: bool = True,
                 follow_links: bool = False):
        """
        Initialize walker.

        Args:
            root: Directory to walk
            respect_ignore_files: Honour .gitignore/.ignore files and skip .git/
            include_hidden: Yield dot-files and descend into dot-directories
            follow_links: Descend into symlinked directories and yield
                symlinked files as regular files
        """
        self.root = Path(root)
        self.respect_ignore_files = respect_ignore_files
        self.include_hidden = include_hidden
        self.follow_links = follow_links
        self.errors: List[Tuple[str, str]] = []

    def check_root(self) -> Path:
        """
        Ensure the root can be walked.

        Returns:
            Absolute root path

        Raises:
            SourceDirError: If the root is missing or not a directory
        """
        if not self.root.exists():
            raise SourceDirError(str(self.root), "does not exist")
        if not self.root.is_dir():
            raise SourceDirError(str(self.root), "not a directory")
        return self.root.absolute()

    def walk(self) -> Iterator[FileEntry]:
        """
        Yield every regular file below the root.

        A fresh generator is returned on each call; a consumed one cannot be
        rewound.

        Raises:
            SourceDirError: If the root is missing or not a directory
        """
        root = self.check_root()
        rules = IgnoreRules() if self.respect_ignore_files else None
        visited = set()
        stack: List[Tuple[Path, str]] = [(root, "")]

        while stack:
            directory, rel_dir = stack.pop()

            if self.follow_links:
                real = os.path.realpath(directory)
                if real in visited:
                    logger.debug("Skipping already visited directory %s", directory)
                    continue
                visited.add(real)

            if rules is not None:
                for path, reason in rules.load(directory, rel_dir):
                    self._record_error(path, reason)

            try:
                with os.scandir(directory) as it:
                    entries = sorted(it, key=lambda e: e.name)
            except OSError as e:
                self._record_error(str(directory), e.strerror or str(e))
                continue

            subdirs: List[Tuple[Path, str]] = []
            for entry in entries:
                if not self.include_hidden and entry.name.startswith("."):
                    continue

                rel_path = f"{rel_dir}/{entry.name}" if rel_dir else entry.name
                try:
                    kind = self._classify(entry)
                except OSError as e:
                    self._record_error(entry.path, e.strerror or str(e))
                    continue

                if kind is FileKind.DIRECTORY:
                    if rules is not None and (entry.name == VCS_DIRNAME
                                              or rules.is_ignored(rel_path, is_dir=True)):
                        continue
                    subdirs.append((Path(entry.path), rel_path))
                    continue

                if kind is not FileKind.FILE:
                    continue
                if rules is not None and rules.is_ignored(rel_path):
                    continue
                yield FileEntry(path=Path(entry.path), kind=FileKind.FILE)

            # Reversed so the stack pops subdirectories in name order
            stack.extend(reversed(subdirs))

    def _classify(self, entry: os.DirEntry) -> FileKind:
        if entry.is_symlink():
            if not self.follow_links:
                return FileKind.SYMLINK
            if entry.is_dir(follow_symlinks=True):
                return FileKind.DIRECTORY
            if entry.is_file(follow_symlinks=True):
                return FileKind.FILE
            if not os.path.exists(entry.path):
                raise OSError(f"broken symlink -> {os.readlink(entry.path)}")
            return FileKind.OTHER
        if entry.is_dir(follow_symlinks=False):
            return FileKind.DIRECTORY
        if entry.is_file(follow_symlinks=False):
            return FileKind.FILE
        return FileKind.OTHER

    def _record_error(self, path: str, reason: str) -> None:
        logger.warning("Skipping %s: %s", path, reason)
        self.errors.append((path, str(reason)))


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: exceptions.py, models.py, pathspec
# TESTS: tests/unit/test_walker.py
# ============================================================================
