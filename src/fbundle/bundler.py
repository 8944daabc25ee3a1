# ============================================================================
# SOURCEFILE: bundler.py
# RELPATH: file_bundle/src/fbundle/bundler.py
# PROJECT: FileBundle v1.0
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Drives a bundling run from configuration to finished output
# ============================================================================

"""
Bundling Orchestrator.

Setup happens first and fails fast: configuration, pattern compilation,
source directory and output creation all raise before any file is read.
Per-file work then runs sequentially (jobs=1, walker order preserved) or on
a thread pool (no ordering guarantee across records).
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from fbundle.config import BundleConfig
from fbundle.exceptions import FileBundleError, OutputCreateError
from fbundle.logging import StructuredLogger
from fbundle.models import BundleResult, PatternList, SelectedFile
from fbundle.patterns import PatternMatcher, compile_patterns
from fbundle.selector import Selector
from fbundle.walker import DirectoryWalker
from fbundle.writer import BundleWriter

logger = logging.getLogger(__name__)


class FileBundler:
    """Wires a BundleConfig into walker, selector and writer, and runs them."""

    def __init__(self,
                 config: BundleConfig,
                 structured_logger: Optional[StructuredLogger] = None):
        self.config = config
        self.structured_logger = structured_logger
        self.patterns: Optional[PatternList] = None
        self.walker: Optional[DirectoryWalker] = None

    def prepare(self) -> PatternList:
        """
        Validate settings and compile patterns.

        Raises:
            ConfigValidationError: For unusable settings
            PatternSyntaxError: For a malformed pattern in strict mode
            SourceDirError: If the source directory cannot be walked
        """
        self.config.validate()
        self.patterns = compile_patterns(self.config.src_globs,
                                         strict=not self.config.skip_invalid_patterns)
        if not self.patterns.has_includes:
            logger.info("No include pattern given; files not excluded by a "
                        "pattern are bundled (patterns: %s)", ", ".join(self.config.src_globs))

        self.walker = DirectoryWalker(
            self.config.src_dir,
            respect_ignore_files=self.config.respect_ignore_files,
            include_hidden=self.config.include_hidden,
            follow_links=self.config.follow_links,
        )
        self.walker.check_root()
        return self.patterns

    def select_files(self) -> List[SelectedFile]:
        """Walk the source tree and return the files that pass the patterns."""
        if self.patterns is None or self.walker is None:
            self.prepare()
        exclude_paths = [self.config.output_path]
        if self.structured_logger is not None:
            exclude_paths.append(self.structured_logger.log_file)
        selector = Selector(
            PatternMatcher(self.patterns),
            self.walker.check_root(),
            exclude_paths=exclude_paths,
        )
        return list(selector.select(self.walker.walk()))

    def run(self) -> BundleResult:
        """
        Execute the run.

        Returns:
            BundleResult with counts and the output path

        Raises:
            FileBundleError: For any fatal setup or output failure
        """
        started = time.monotonic()
        try:
            return self._run(started)
        except FileBundleError as e:
            if self.structured_logger is not None:
                self.structured_logger.log_error(str(self.config.src_dir), str(e), type(e).__name__)
            raise

    def _run(self, started: float) -> BundleResult:
        config = self.config
        self.prepare()

        output_path = config.output_path
        workers = config.worker_count
        logger.debug("Glob patterns: %s", list(config.src_globs))
        if self.structured_logger is not None:
            self.structured_logger.log_run_start(
                str(config.src_dir), str(output_path), list(config.src_globs), workers
            )

        try:
            config.out_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputCreateError(str(output_path), e.strerror or str(e))
        writer = BundleWriter(output_path, config.file_sep, self.structured_logger)
        writer.open()
        try:
            files = self.select_files()
            logger.info("Total files to process: %d", len(files))
            self._write_all(writer, files, workers)
        finally:
            writer.close()

        result = BundleResult(
            output_path=output_path,
            selected=len(files),
            written=writer.written,
            non_utf8=writer.non_utf8,
            unreadable=writer.unreadable,
            elapsed_ms=int((time.monotonic() - started) * 1000),
        )
        if self.structured_logger is not None:
            self.structured_logger.log_run_complete(
                str(config.src_dir), str(output_path), result.selected, result.written,
                result.non_utf8, result.unreadable, result.elapsed_ms,
            )
        return result

    @staticmethod
    def _write_all(writer: BundleWriter, files: List[SelectedFile], workers: int) -> None:
        if workers <= 1 or len(files) <= 1:
            for selected in files:
                writer.write_record(selected)
            return

        with ThreadPoolExecutor(max_workers=min(workers, len(files))) as pool:
            futures = [pool.submit(writer.write_record, selected) for selected in files]
            for future in futures:
                # Re-raises BundleWriteError from a worker
                future.result()


def create_bundle(config: BundleConfig,
                  structured_logger: Optional[StructuredLogger] = None) -> BundleResult:
    """Convenience function: run one bundle with ``config``."""
    return FileBundler(config, structured_logger).run()


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: config.py, logging.py, patterns.py, selector.py, walker.py, writer.py
# TESTS: tests/unit/test_bundler.py, tests/integration/test_cli.py
# ============================================================================
