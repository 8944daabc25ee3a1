# ============================================================================
# FILE: patterns.py
# RELPATH: file_bundle/src/fbundle/patterns.py
# PROJECT: FileBundle v1.0
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Glob compilation and ordered include/exclude matching
# ============================================================================

"""
Pattern Matching Module.

Compiles user-supplied globs into case-insensitive regular expressions and
decides, for a path relative to the source root, whether it is included.

Precedence is override-list style: patterns are read in the order given and
the LAST one that matches decides. A '!'-prefixed pattern excludes, any other
pattern includes. A path that no pattern matches is excluded, unless the
list holds no include pattern at all; then it is included.

Dialect (matching is lexical, against POSIX relative paths):
  *        any run of characters, including '/'
  **       any run of characters, including '/'
  **/      zero or more leading directories ('**/*.rs' matches 'a.rs')
  /**      the directory itself or anything below it
  ?        one character other than '/'
  [abc]    character class; '[!abc]' or '[^abc]' negates
  {a,b}    alternation, nestable
  \\x      literal x
Hidden entries need no literal leading dot.
"""

import logging
import re
from enum import Enum
from typing import Iterable, List, Optional

from fbundle.exceptions import PatternSyntaxError
from fbundle.models import EXCLUDE_MARKER, Pattern, PatternList

logger = logging.getLogger(__name__)


class Decision(Enum):
    INCLUDE = "include"
    EXCLUDE = "exclude"


# ============================================================================
# Glob Translation
# ============================================================================

def _class_end(glob: str, start: int) -> int:
    """Return the index of the ']' closing the class opened at ``start``."""
    i = start + 1
    if i < len(glob) and glob[i] in "!^":
        i += 1
    # A ']' right after the opening bracket is a literal member
    if i < len(glob) and glob[i] == "]":
        i += 1
    while i < len(glob) and glob[i] != "]":
        i += 1
    if i >= len(glob):
        raise ValueError("unmatched '['")
    return i


def _find_brace_group(glob: str):
    """
    Locate the first top-level '{...}' group.

    Returns (open_index, close_index, [comma indices]) or None when the glob
    has no braces. Raises ValueError on unbalanced braces.
    """
    i = 0
    depth = 0
    open_index = -1
    commas: List[int] = []
    while i < len(glob):
        c = glob[i]
        if c == "\\":
            i += 2
            continue
        if c == "[":
            i = _class_end(glob, i) + 1
            continue
        if c == "{":
            if depth == 0:
                open_index = i
            depth += 1
        elif c == "}":
            if depth == 0:
                raise ValueError("unmatched '}'")
            depth -= 1
            if depth == 0:
                return open_index, i, commas
        elif c == "," and depth == 1:
            commas.append(i)
        i += 1
    if depth:
        raise ValueError("unmatched '{'")
    return None


def expand_braces(glob: str) -> List[str]:
    """
    Expand brace alternation into plain globs.

    'src/*.{js,ts}' becomes ['src/*.js', 'src/*.ts']; groups nest and
    multiply. Order follows the pattern text; duplicates are dropped.
    """
    group = _find_brace_group(glob)
    if group is None:
        return [glob]

    open_index, close_index, commas = group
    prefix = glob[:open_index]
    suffix = glob[close_index + 1:]
    bounds = [open_index] + commas + [close_index]

    expanded: List[str] = []
    for left, right in zip(bounds, bounds[1:]):
        alternative = glob[left + 1:right]
        for candidate in expand_braces(prefix + alternative + suffix):
            if candidate not in expanded:
                expanded.append(candidate)
    return expanded


def _translate_plain(glob: str) -> str:
    """Translate a brace-free glob into a regular expression fragment."""
    out: List[str] = []
    i = 0
    n = len(glob)
    while i < n:
        c = glob[i]
        if c == "\\":
            if i + 1 >= n:
                raise ValueError("pattern ends with an escape character")
            out.append(re.escape(glob[i + 1]))
            i += 2
            continue
        if c == "*":
            j = i
            while j < n and glob[j] == "*":
                j += 1
            if j - i >= 2:
                at_segment_start = i == 0 or glob[i - 1] == "/"
                if at_segment_start and j < n and glob[j] == "/":
                    # '**/' also matches zero directories
                    out.append("(?:.*/)?")
                    i = j + 1
                    continue
                if at_segment_start and j == n and i > 0 and out and out[-1] == "/":
                    # trailing '/**' also matches the directory itself
                    out[-1] = "(?:/.*)?"
                    i = j
                    continue
            out.append(".*")
            i = j
            continue
        if c == "?":
            out.append("[^/]")
        elif c == "[":
            end = _class_end(glob, i)
            members = glob[i + 1:end]
            negate = members[:1] in ("!", "^")
            if negate:
                members = members[1:]
            members = members.replace("\\", "\\\\").replace("[", "\\[").replace("]", "\\]")
            # Classes never match '/', same as '?'
            out.append(f"[^/{members}]" if negate else f"(?!/)[{members}]")
            i = end + 1
            continue
        elif c == "/":
            out.append("/")
        else:
            out.append(re.escape(c))
        i += 1
    return "".join(out)


def normalize_body(body: str) -> str:
    """Make a glob body root-relative."""
    while body.startswith("./"):
        body = body[2:]
    return body.lstrip("/")


def translate_glob(body: str) -> str:
    """
    Translate a glob body into a regular expression source string.

    Raises:
        ValueError: If the glob is malformed
    """
    alternatives = [_translate_plain(alt) for alt in expand_braces(body)]
    if len(alternatives) == 1:
        return alternatives[0]
    return "(?:" + "|".join(alternatives) + ")"


# ============================================================================
# Pattern Compilation
# ============================================================================

def compile_pattern(raw: str) -> Pattern:
    """
    Parse and compile one user pattern.

    Args:
        raw: Pattern text; a leading '!' marks an exclusion

    Returns:
        Compiled Pattern

    Raises:
        PatternSyntaxError: If the pattern is empty or malformed
    """
    if not isinstance(raw, str) or not raw.strip():
        raise PatternSyntaxError(str(raw), "Empty glob pattern")

    is_exclude = raw.startswith(EXCLUDE_MARKER)
    body = normalize_body(raw[1:] if is_exclude else raw)
    if not body:
        raise PatternSyntaxError(raw, "Pattern has no glob after the exclusion marker"
                                 if is_exclude else "Pattern does not name any path")

    try:
        source = translate_glob(body)
        regex = re.compile(source, re.IGNORECASE | re.DOTALL)
    except (ValueError, re.error) as e:
        raise PatternSyntaxError(raw, str(e))

    return Pattern(raw=raw, is_exclude=is_exclude, body=body, regex=regex)


def compile_patterns(raw_patterns: Iterable[str], strict: bool = True) -> PatternList:
    """
    Compile an ordered list of user patterns.

    Args:
        raw_patterns: Patterns in user order
        strict: If True, the first malformed pattern raises. If False, it is
            reported, recorded in ``PatternList.skipped`` and contributes no
            match.

    Raises:
        PatternSyntaxError: In strict mode, for the first malformed pattern
    """
    compiled: List[Pattern] = []
    skipped = []
    for raw in raw_patterns:
        try:
            compiled.append(compile_pattern(raw))
        except PatternSyntaxError as e:
            if strict:
                raise
            logger.warning("Skipping glob pattern: %s", e)
            skipped.append((e.pattern, e.reason))
    return PatternList(patterns=tuple(compiled), skipped=tuple(skipped))


# ============================================================================
# Matching
# ============================================================================

class PatternMatcher:
    """
    Decides inclusion of relative paths against an ordered PatternList.

    The last matching pattern wins. A path no pattern matches is excluded
    when the list has at least one include pattern, and included otherwise.
    """

    def __init__(self, patterns: PatternList):
        self.patterns = patterns
        self._reversed = tuple(reversed(patterns.patterns))
        self._unmatched = Decision.EXCLUDE if patterns.has_includes else Decision.INCLUDE

    @classmethod
    def from_strings(cls, raw_patterns: Iterable[str], strict: bool = True) -> "PatternMatcher":
        return cls(compile_patterns(raw_patterns, strict=strict))

    def matching_pattern(self, relative_path: str) -> Optional[Pattern]:
        """Return the pattern that decides ``relative_path``, if any."""
        path = relative_path.replace("\\", "/")
        for pattern in self._reversed:
            if pattern.matches(path):
                return pattern
        return None

    def decide(self, relative_path: str) -> Decision:
        pattern = self.matching_pattern(relative_path)
        if pattern is None:
            return self._unmatched
        return Decision.EXCLUDE if pattern.is_exclude else Decision.INCLUDE

    def matches(self, relative_path: str) -> bool:
        return self.decide(relative_path) is Decision.INCLUDE


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: exceptions.py, models.py
# TESTS: tests/unit/test_patterns.py
# ============================================================================
