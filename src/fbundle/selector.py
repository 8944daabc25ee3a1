# ============================================================================
# FILE: selector.py
# RELPATH: file_bundle/src/fbundle/selector.py
# PROJECT: FileBundle v1.0
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Filters walked entries through the pattern matcher
# ============================================================================

import logging
from pathlib import Path
from typing import Iterable, Iterator, Set

from fbundle.models import FileEntry, SelectedFile
from fbundle.patterns import Decision, PatternMatcher

logger = logging.getLogger(__name__)


def relative_path_for(path: Path, root: Path) -> str:
    """
    Path of ``path`` relative to ``root`` with '/' separators.

    Falls back to the absolute path string when ``path`` is not below
    ``root``; never raises.
    """
    try:
        return Path(path).relative_to(root).as_posix()
    except ValueError:
        return str(path).replace("\\", "/")


class Selector:
    """
    Composes walker output with a PatternMatcher.

    Entries are yielded in the order the walker produced them. Paths in
    ``exclude_paths`` (typically the bundle being written) are never selected.
    """

    def __init__(self,
                 matcher: PatternMatcher,
                 root: Path,
                 exclude_paths: Iterable[Path] = ()):
        self.matcher = matcher
        self.root = Path(root)
        self._exclude: Set[Path] = {Path(p).resolve() for p in exclude_paths}

    def select(self, entries: Iterable[FileEntry]) -> Iterator[SelectedFile]:
        for entry in entries:
            if not entry.is_file:
                continue

            relative_path = relative_path_for(entry.path, self.root)
            if self._exclude and entry.path.resolve() in self._exclude:
                logger.debug("Not bundling the output file itself: %s", relative_path)
                continue

            if self.matcher.decide(relative_path) is Decision.INCLUDE:
                yield SelectedFile(absolute_path=entry.path, relative_path=relative_path)
            else:
                logger.debug("Excluded by patterns: %s", relative_path)


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: models.py, patterns.py
# TESTS: tests/unit/test_selector.py
# ============================================================================
