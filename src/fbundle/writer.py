# ============================================================================
# SOURCEFILE: writer.py
# RELPATH: file_bundle/src/fbundle/writer.py
# PROJECT: FileBundle v1.0
# VERSION: 1.0.0
# STATUS: In Development
# DESCRIPTION:
#   Reads selected files and appends their records to the single bundle
#   output. One lock guards the output stream so concurrent workers never
#   interleave records.
# ============================================================================

"""
Bundle Writer Module.

A record is ``"<separator> <relative_path>\\n<content>\\n"``. Content that is
not valid UTF-8 is replaced by an empty body and reported; the record itself
is still written.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import BinaryIO, Optional, Tuple

from fbundle.exceptions import BundleWriteError, EncodingError, OutputCreateError
from fbundle.logging import StructuredLogger
from fbundle.models import BundleRecord, SelectedFile

logger = logging.getLogger(__name__)

ESCAPED_NEWLINE = "\\n"


def normalize_separator(separator: str) -> str:
    """Turn each literal backslash-n in ``separator`` into a real newline."""
    return separator.replace(ESCAPED_NEWLINE, "\n")


def format_record(separator: str, relative_path: str, content: str) -> bytes:
    """Encode one bundle record."""
    return BundleRecord(separator, relative_path, content).encode()


def decode_content(data: bytes, relative_path: str) -> Tuple[str, Optional[EncodingError]]:
    """
    Decode file bytes as strict UTF-8.

    Returns:
        (text, None) on success, ("", EncodingError) when the bytes are not
        valid UTF-8
    """
    try:
        return data.decode("utf-8"), None
    except UnicodeDecodeError as e:
        return "", EncodingError(
            relative_path, "utf-8",
            f"invalid byte at offset {e.start}; content omitted from bundle"
        )


class BundleWriter:
    """
    Owns the bundle output stream.

    ``write_record`` may be called from many threads at once: the file read
    and decode happen outside the lock, the append happens inside it as a
    single write. ``close`` flushes once and is safe to call repeatedly.
    """

    def __init__(self,
                 output_path: Path,
                 separator: str,
                 structured_logger: Optional[StructuredLogger] = None):
        """
        Initialize BundleWriter.

        Args:
            output_path: Bundle file to create (truncated if it exists)
            separator: Separator placed before each record's path, already
                normalized with normalize_separator()
            structured_logger: Optional JSON-lines audit log
        """
        self.output_path = Path(output_path)
        self.separator = separator
        self.structured_logger = structured_logger

        self._stream: Optional[BinaryIO] = None
        self._lock = threading.Lock()
        self._closed = False

        self.written = 0
        self.non_utf8 = 0
        self.unreadable = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self) -> "BundleWriter":
        """
        Create the output file.

        Raises:
            OutputCreateError: If the file cannot be created
        """
        try:
            self._stream = open(self.output_path, "wb")
        except OSError as e:
            raise OutputCreateError(str(self.output_path), e.strerror or str(e))
        self._closed = False
        return self

    def close(self) -> None:
        """Flush and close the output. Raises BundleWriteError if the flush fails."""
        with self._lock:
            if self._stream is None or self._closed:
                return
            self._closed = True
            stream = self._stream
            self._stream = None
            try:
                stream.flush()
            except OSError as e:
                raise BundleWriteError(str(self.output_path), f"flush failed: {e}")
            finally:
                stream.close()

    def __enter__(self) -> "BundleWriter":
        if self._stream is None:
            self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self._stream is not None

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def write_record(self, selected: SelectedFile) -> bool:
        """
        Read one selected file and append its record.

        Args:
            selected: File to bundle

        Returns:
            True if a record was written, False if the file could not be read

        Raises:
            BundleWriteError: If the writer is not open or the append fails
        """
        logger.debug("Processing file: %s", selected.absolute_path)
        try:
            data = Path(selected.absolute_path).read_bytes()
        except OSError as e:
            logger.warning("Skipping unreadable file %s: %s",
                           selected.relative_path, e.strerror or e)
            self._log_event_warning(f"Unreadable file: {selected.relative_path}",
                                    {"filePath": selected.relative_path, "reason": str(e)})
            with self._lock:
                self.unreadable += 1
            return False

        content, encoding_error = decode_content(data, selected.relative_path)
        if encoding_error is not None:
            logger.warning("%s", encoding_error)
            self._log_event_warning(str(encoding_error), {"filePath": selected.relative_path})

        payload = format_record(self.separator, selected.relative_path, content)

        with self._lock:
            if self._stream is None:
                raise BundleWriteError(str(self.output_path), "bundle is not open")
            try:
                self._stream.write(payload)
            except OSError as e:
                raise BundleWriteError(str(self.output_path), e.strerror or str(e))
            self.written += 1
            if encoding_error is not None:
                self.non_utf8 += 1

        logger.debug("Bundled %s (%d bytes)", selected.relative_path, len(data))
        if self.structured_logger is not None:
            self.structured_logger.log_file_bundled(
                selected.relative_path, len(data), encoding_error is None
            )
        return True

    def _log_event_warning(self, message: str, context: dict) -> None:
        if self.structured_logger is not None:
            self.structured_logger.log_warning(message, context)


# ============================================================================
# STATUS: In Development
# DEPENDENCIES: exceptions.py, logging.py, models.py
# TESTS: tests/unit/test_writer.py
# ============================================================================
