# ============================================================================
# SOURCEFILE: test_cli.py
# RELPATH: file_bundle/tests/integration/test_cli.py
# PROJECT: FileBundle v1.0
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Integration tests for the fbundle command line
# ============================================================================

"""
CLI Integration Test Suite.

Drives ``fbundle.cli.main`` in-process for option handling and exit codes,
and once through a real interpreter to check the module entry point.
"""

import json
import subprocess
import sys
from pathlib import Path

import pytest

# Add src to path
SRC_DIR = Path(__file__).parent.parent.parent / "src"
sys.path.insert(0, str(SRC_DIR))

from fbundle.cli import __version__, build_parser, main


def run_cli(argv):
    """Run main() and return its exit code."""
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


class TestCLIBundle:
    """Tests for successful runs."""

    def test_basic_run(self, source_tree, out_dir, capsys):
        code = run_cli(["-f", "---", "-s", str(source_tree), "-o", str(out_dir), "-j", "1",
                        "-g", "*.md"])

        captured = capsys.readouterr()
        bundle = out_dir / "file_bundle.txt"
        assert code == 0
        assert captured.out.strip().splitlines()[-1] == f"Bundle created at: {bundle}"
        assert bundle.read_text(encoding="utf-8") == (
            "--- README.md\n# Project\n\n--- docs/guide.md\nGuide\n\n"
        )

    def test_name_and_extension(self, source_tree, out_dir, capsys):
        code = run_cli(["-n", "docs", "-e", ".md", "-f", "#",
                        "-s", str(source_tree), "-o", str(out_dir), "-g", "docs/**"])

        assert code == 0
        assert (out_dir / "docs.md").read_text(encoding="utf-8") == "# docs/guide.md\nGuide\n\n"

    def test_patterns_keep_command_line_order(self, source_tree, out_dir, records_of):
        code = run_cli(["-f", "//", "-s", str(source_tree), "-o", str(out_dir), "-j", "1",
                        "-g", "**/*.py", "-g", "!**/*_test.py"])

        records = records_of((out_dir / "file_bundle.txt").read_text(encoding="utf-8"), "//")
        assert code == 0
        assert list(records) == ["src/main.py", "src/util.py", "src/pkg/deep.py"]

    def test_escaped_newline_separator(self, source_tree, out_dir):
        run_cli(["-f", "==\\n>>", "-s", str(source_tree), "-o", str(out_dir), "-g", "README.md"])

        text = (out_dir / "file_bundle.txt").read_text(encoding="utf-8")
        assert text == "==\n>> README.md\n# Project\n\n"

    def test_verbose_output(self, source_tree, out_dir, capsys):
        code = run_cli(["-v", "-f", "---", "-s", str(source_tree), "-o", str(out_dir),
                        "-g", "assets/**", "-g", "*.md"])

        captured = capsys.readouterr()
        assert code == 0
        assert "Glob patterns: ['assets/**', '*.md']" in captured.out
        assert "Total files processed: 3" in captured.out
        assert "Non-UTF-8 (empty body): 1" in captured.out
        assert "Processing file:" in captured.err
        assert "assets/logo.png" in captured.err

    def test_quiet_run_reports_only_warnings(self, source_tree, out_dir, capsys):
        run_cli(["-f", "---", "-s", str(source_tree), "-o", str(out_dir), "-g", "assets/**"])

        captured = capsys.readouterr()
        assert "Processing file:" not in captured.err
        assert "WARNING:" in captured.err
        assert "Glob patterns" not in captured.out

    def test_config_file_supplies_defaults(self, source_tree, out_dir, tmp_path):
        config = tmp_path / "fbundle.json"
        config.write_text(json.dumps({
            "bundle": {"file_sep": "%%", "src_globs": ["docs/**"], "bundle_name": "cfg"},
        }), encoding="utf-8")

        code = run_cli(["--config", str(config), "-s", str(source_tree), "-o", str(out_dir)])

        assert code == 0
        assert (out_dir / "cfg.txt").read_text(encoding="utf-8") == "%% docs/guide.md\nGuide\n\n"

    def test_log_dir_writes_session_log(self, source_tree, out_dir, tmp_path):
        log_dir = tmp_path / "logs"

        run_cli(["-f", "---", "-s", str(source_tree), "-o", str(out_dir),
                 "-g", "*.md", "--log-dir", str(log_dir)])

        logs = list(log_dir.glob("bundle_session_*.json"))
        assert len(logs) == 1
        events = [json.loads(line)["event"] for line in logs[0].read_text(encoding="utf-8").splitlines()]
        assert events[0] == "run_start"
        assert events[-1] == "run_complete"

    def test_exclude_only_glob_bundles_other_files(self, source_tree, out_dir, records_of):
        code = run_cli(["-f", "---", "-s", str(source_tree), "-o", str(out_dir),
                        "-g", "!**/*.py"])

        records = records_of((out_dir / "file_bundle.txt").read_text(encoding="utf-8"), "---")
        assert code == 0
        assert "README.md" in records
        assert not any(path.endswith(".py") for path in records)

    def test_no_hidden_flag(self, source_tree, out_dir, records_of):
        run_cli(["-f", "---", "-s", str(source_tree), "-o", str(out_dir), "--no-hidden"])

        records = records_of((out_dir / "file_bundle.txt").read_text(encoding="utf-8"), "---")
        assert ".env" not in records
        assert "README.md" in records

    def test_version(self, capsys):
        assert run_cli(["--version"]) == 0
        assert __version__ in capsys.readouterr().out


class TestCLIErrors:
    """Tests for fatal errors and exit codes."""

    def test_missing_separator(self, source_tree, out_dir, capsys):
        code = run_cli(["-s", str(source_tree), "-o", str(out_dir), "-g", "*.md"])

        assert code == 1
        assert capsys.readouterr().err.startswith("ERROR:")
        assert not (out_dir / "file_bundle.txt").exists()

    def test_malformed_glob(self, source_tree, out_dir, capsys):
        code = run_cli(["-f", "---", "-s", str(source_tree), "-o", str(out_dir), "-g", "src/{a"])

        err = capsys.readouterr().err
        assert code == 1
        assert "ERROR: Invalid glob pattern 'src/{a'" in err

    def test_malformed_glob_skipped_on_request(self, source_tree, out_dir, capsys):
        code = run_cli(["-f", "---", "-s", str(source_tree), "-o", str(out_dir),
                        "-g", "src/{a", "-g", "*.md", "--skip-bad-globs"])

        assert code == 0
        assert "Skipping glob pattern" in capsys.readouterr().err

    def test_missing_source_directory(self, tmp_path, out_dir, capsys):
        code = run_cli(["-f", "---", "-s", str(tmp_path / "absent"), "-o", str(out_dir)])

        assert code == 1
        assert "Cannot scan source directory" in capsys.readouterr().err

    def test_unusable_output_directory(self, source_tree, tmp_path, capsys):
        blocker = tmp_path / "blocker"
        blocker.write_text("file, not a directory", encoding="utf-8")

        code = run_cli(["-f", "---", "-s", str(source_tree), "-o", str(blocker / "out")])

        assert code == 1
        assert "Cannot create bundle" in capsys.readouterr().err

    def test_extension_cannot_leave_out_dir(self, source_tree, out_dir, capsys):
        code = run_cli(["-f", "---", "-s", str(source_tree), "-o", str(out_dir),
                        "-e", "/../escaped"])

        assert code == 1
        assert "dst_ext" in capsys.readouterr().err
        assert not (out_dir.parent / "escaped").exists()
        assert list(out_dir.iterdir()) == []

    def test_bad_config_file(self, source_tree, out_dir, tmp_path, capsys):
        config = tmp_path / "broken.json"
        config.write_text("{oops", encoding="utf-8")

        code = run_cli(["--config", str(config), "-f", "---", "-s", str(source_tree)])

        assert code == 1
        assert "Invalid JSON" in capsys.readouterr().err

    def test_unknown_option_is_usage_error(self, capsys):
        assert run_cli(["--bogus"]) == 2
        assert "usage:" in capsys.readouterr().err


class TestParser:
    """Tests for argument parsing defaults."""

    def test_unset_options_are_none(self):
        args = build_parser().parse_args([])

        assert args.file_sep is None
        assert args.src_globs is None
        assert args.include_hidden is None
        assert args.jobs is None
        assert args.verbose is False

    def test_repeated_globs_collected_in_order(self):
        args = build_parser().parse_args(["-g", "b", "-g", "!a", "-g", "c"])

        assert args.src_globs == ["b", "!a", "c"]


class TestModuleEntryPoint:
    """Run the CLI through a real interpreter."""

    def test_python_m(self, source_tree, out_dir):
        result = subprocess.run([
            sys.executable, "-m", "fbundle.cli",
            "-f", "---", "-s", str(source_tree), "-o", str(out_dir), "-g", "docs/*.md",
        ], capture_output=True, text=True, cwd=str(SRC_DIR))

        assert result.returncode == 0, result.stderr
        assert "Bundle created at:" in result.stdout
        assert (out_dir / "file_bundle.txt").read_text(encoding="utf-8") == (
            "--- docs/guide.md\nGuide\n\n"
        )

    def test_python_m_error_exit(self, tmp_path):
        result = subprocess.run([
            sys.executable, "-m", "fbundle.cli", "-f", "---", "-s", str(tmp_path / "absent"),
        ], capture_output=True, text=True, cwd=str(SRC_DIR))

        assert result.returncode == 1
        assert result.stderr.startswith("ERROR:")


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: fbundle/cli.py
# ============================================================================
