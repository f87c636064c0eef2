"""
Unit tests for SystemReporter.
"""

import logging

from shared.reporter import SystemReporter


class TestSystemReporter:
    """Unit tests for SystemReporter."""

    def test_stdout_only_by_default(self):
        """Test no log file is created without log_dir."""
        reporter = SystemReporter(name="test-stdout")

        assert reporter.log_file is None
        assert len(reporter.logger.handlers) == 1
        assert reporter.logger.propagate is False

    def test_file_logging(self, tmp_path):
        """Test messages are written to <log_dir>/<name>.log."""
        reporter = SystemReporter(name="test-file", log_dir=str(tmp_path))

        reporter.info("hello", context="Test")
        reporter.flush()

        content = (tmp_path / "test-file.log").read_text()
        assert "[Test] hello" in content

    def test_verbose_filtering(self, tmp_path):
        """Test messages above the verbosity level are dropped."""
        reporter = SystemReporter(name="test-verbose", log_dir=str(tmp_path), verbose=1)

        reporter.info("shown", context="Test", verbose_level=1)
        reporter.info("hidden", context="Test", verbose_level=2)
        reporter.flush()

        content = (tmp_path / "test-verbose.log").read_text()
        assert "shown" in content
        assert "hidden" not in content

    def test_verbose_clamped(self):
        """Test verbosity is clamped to 0..3."""
        assert SystemReporter(name="test-clamp-hi", verbose=9).verbose == 3
        assert SystemReporter(name="test-clamp-lo", verbose=-2).verbose == 0

    def test_error_with_traceback(self, tmp_path):
        """Test exc_info attaches the traceback."""
        reporter = SystemReporter(
            name="test-exc", log_dir=str(tmp_path), level=logging.DEBUG
        )

        try:
            raise RuntimeError("kaboom")
        except RuntimeError as e:
            reporter.error("failed", context="Test", exc_info=e)
        reporter.flush()

        content = (tmp_path / "test-exc.log").read_text()
        assert "[Test] failed" in content
        assert "RuntimeError: kaboom" in content

    def test_context_attached_to_record(self):
        """Test the context tag travels on the record for formatters."""
        reporter = SystemReporter(name="test-context")
        records = []

        class Collect(logging.Handler):
            def emit(self, record):
                records.append(record)

        reporter.logger.addHandler(Collect())
        reporter.warning("slow start", context="Bootstrap")

        assert records[0].context == "Bootstrap"
        assert records[0].getMessage() == "[Bootstrap] slow start"
