# ============================================================================
# SOURCEFILE: logging.py
# RELPATH: file_bundle/src/fbundle/logging.py
# PROJECT: FileBundle v1.0
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Console diagnostics and structured JSON session logs
# ============================================================================

"""
Logging Module.

Console diagnostics go through the standard ``logging`` package to stderr,
keeping them apart from the bundle and from the confirmation line on stdout.
A run can additionally keep a JSON-lines audit log (one object per event)
through StructuredLogger.
"""

from __future__ import annotations

import io
import json
import logging
import sys
import threading
import uuid
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

CONSOLE_FORMAT = "%(levelname)s: %(message)s"


def _ensure_stream_utf8(stream: Optional[io.TextIOBase]) -> Optional[io.TextIOBase]:
    """Ensure a text stream writes UTF-8, wrapping if necessary."""
    if stream is None:
        return None

    encoding = getattr(stream, "encoding", None)
    if isinstance(encoding, str) and encoding.lower() == "utf-8":
        return stream

    reconfigure = getattr(stream, "reconfigure", None)
    if callable(reconfigure):
        try:
            reconfigure(encoding="utf-8", errors="backslashreplace")
            return stream
        except (AttributeError, ValueError, io.UnsupportedOperation):
            pass

    buffer = getattr(stream, "buffer", None)
    if buffer is None:
        return stream

    stream.flush()
    wrapped = io.TextIOWrapper(buffer, encoding="utf-8", errors="backslashreplace")
    # Mark wrapper so we don't wrap repeatedly
    setattr(wrapped, "_fbundle_utf8_wrapper", True)
    return wrapped


def configure_utf8_logging(force: bool = False) -> None:
    """Configure stdout/stderr and root logger handlers for UTF-8 output.

    Bundled paths may contain any character; consoles defaulting to a legacy
    code page would otherwise fail while printing them. Safe to call multiple
    times.
    """
    streams: Iterable[str] = ("stdout", "stderr")
    for name in streams:
        stream = getattr(sys, name, None)
        if stream is None:
            continue
        new_stream = _ensure_stream_utf8(stream)
        if new_stream is not None and new_stream is not stream:
            setattr(sys, name, new_stream)

    root = logging.getLogger()
    if force and not root.handlers:
        root.addHandler(logging.StreamHandler(sys.stderr))

    for handler in root.handlers:
        stream = getattr(handler, "stream", None)
        if stream is None:
            continue
        new_stream = _ensure_stream_utf8(stream)
        if new_stream is not None and new_stream is not stream:
            handler.setStream(new_stream)


def configure_console_logging(verbose: bool = False) -> logging.Handler:
    """
    Route fbundle diagnostics to stderr.

    Args:
        verbose: Show DEBUG messages instead of warnings only

    Returns:
        The installed handler (replaced on repeated calls)
    """
    package_logger = logging.getLogger("fbundle")
    for handler in list(package_logger.handlers):
        if getattr(handler, "_fbundle_console", False):
            package_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    setattr(handler, "_fbundle_console", True)

    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    return handler


class LogEvent(Enum):
    """Enumeration of loggable events."""
    RUN_START = "run_start"
    RUN_COMPLETE = "run_complete"
    FILE_BUNDLED = "file_bundled"
    WARNING = "warning"
    ERROR = "error"


class StructuredLogger:
    """
    JSON-structured session log for bundling runs.

    Each event is appended to ``bundle_session_<timestamp>_<id>.json`` as one
    JSON object per line and kept in an in-memory buffer. Safe to use from
    worker threads. Failing to write the file never interrupts a run.
    """

    def __init__(self, log_dir: str = "logs", session_id: Optional[str] = None):
        """
        Initialize structured logger.

        Args:
            log_dir: Directory for log files
            session_id: Optional session ID (generated if not provided)
        """
        self.log_dir = Path(log_dir)
        self.session_id = session_id or str(uuid.uuid4())
        self.start_time = datetime.now(timezone.utc)
        self._lock = threading.Lock()

        timestamp = self.start_time.strftime("%Y%m%d_%H%M%S")
        self.log_file = self.log_dir / f"bundle_session_{timestamp}_{self.session_id[:8]}.json"
        self._ensure_log_file_exists()

        # In-memory log buffer (for testing/inspection)
        self.log_buffer: List[Dict] = []

    def _ensure_log_file_exists(self) -> None:
        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            self.log_file.touch(exist_ok=True)
        except OSError as e:
            print(f"Warning: Cannot create log file {self.log_file}: {e}", file=sys.stderr)

    def log_run_start(self,
                      source: str,
                      destination: str,
                      patterns: List[str],
                      jobs: int) -> None:
        """
        Log the start of a bundling run.

        Args:
            source: Source directory
            destination: Bundle file path
            patterns: Glob patterns in user order
            jobs: Worker count used for per-file work
        """
        self._write_log_entry(self._create_log_entry(
            LogEvent.RUN_START,
            {
                "source": source,
                "destination": destination,
                "patterns": patterns,
                "jobs": jobs,
            },
        ))

    def log_run_complete(self,
                         source: str,
                         destination: str,
                         selected: int,
                         written: int,
                         non_utf8: int,
                         unreadable: int,
                         elapsed_ms: int) -> None:
        """Log successful completion of a run with its counts."""
        self._write_log_entry(self._create_log_entry(
            LogEvent.RUN_COMPLETE,
            {
                "source": source,
                "destination": destination,
                "counts": {
                    "selected": selected,
                    "written": written,
                    "nonUtf8": non_utf8,
                    "unreadable": unreadable,
                },
                "elapsedMs": elapsed_ms,
            },
        ))

    def log_file_bundled(self, file_path: str, size_bytes: int, is_utf8: bool) -> None:
        self._write_log_entry(self._create_log_entry(
            LogEvent.FILE_BUNDLED,
            {"filePath": file_path, "sizeBytes": size_bytes, "isUtf8": is_utf8},
        ))

    def log_warning(self, message: str, context: Optional[Dict] = None) -> None:
        self._write_log_entry(self._create_log_entry(
            LogEvent.WARNING,
            {"message": message, "context": context or {}},
        ))

    def log_error(self, source: str, error_message: str, error_type: str) -> None:
        """
        Log a fatal error that ended a run.

        Args:
            source: Source directory
            error_message: Human-readable error message
            error_type: Exception class name
        """
        self._write_log_entry(self._create_log_entry(
            LogEvent.ERROR,
            {"source": source, "errorMessage": error_message, "errorType": error_type},
        ))

    def _create_log_entry(self, event: LogEvent, details: Dict[str, Any]) -> Dict:
        return {
            "sessionId": self.session_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event": event.value,
            "details": details,
        }

    def _write_log_entry(self, entry: Dict) -> None:
        line = json.dumps(entry, ensure_ascii=False) + "\n"
        with self._lock:
            self.log_buffer.append(entry)
            try:
                with open(self.log_file, "a", encoding="utf-8", errors="backslashreplace") as f:
                    f.write(line)
            except OSError as e:
                # Log write failure shouldn't crash the run
                print(f"Warning: Failed to write log entry: {e}", file=sys.stderr)

    def get_session_logs(self) -> List[Dict]:
        with self._lock:
            return list(self.log_buffer)

    def export_session_summary(self) -> Dict:
        """
        Export session summary statistics.

        Returns:
            Summary dictionary with event counts
        """
        logs = self.get_session_logs()
        summary = {
            "sessionId": self.session_id,
            "startTime": self.start_time.isoformat(),
            "endTime": datetime.now(timezone.utc).isoformat(),
            "totalEvents": len(logs),
            "eventCounts": {},
        }
        for entry in logs:
            event_type = entry["event"]
            summary["eventCounts"][event_type] = summary["eventCounts"].get(event_type, 0) + 1
        return summary


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: None (standalone logging)
# TESTS: tests/unit/test_logging.py
# ============================================================================
