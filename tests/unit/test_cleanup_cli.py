# tests/unit/test_cleanup_cli.py
"""Unit tests for the cleanup CLI."""

from contextlib import contextmanager
from unittest.mock import MagicMock, patch

import pytest

from formstore.config import CleanupRule, Settings


def _settings():
    return Settings(
        DATABASE_URL="sqlite://",
        LOG_JSON=False,
        CLEANUP={"newsletter": CleanupRule(interval="P30D")},
    )


@contextmanager
def _fake_session_scope():
    yield MagicMock()


class TestCleanupAllBuckets:
    """Tests for the cleanup-all-buckets command."""

    @pytest.mark.parametrize("argv", [["cleanup-all-buckets"], ["cleanup-all-buckets", "--interval", "30 days"]])
    def test_invalid_interval_exits_before_cleanup(self, argv, capsys):
        from formstore.cli.cleanup import main

        with patch("formstore.services.retention.run_all_buckets_cleanup") as mock_cleanup:
            with pytest.raises(SystemExit) as exc_info:
                main(argv)

        assert exc_info.value.code == 1
        mock_cleanup.assert_not_called()
        assert "--interval P30D" in capsys.readouterr().out

    def test_passes_options(self, capsys):
        from formstore.cli.cleanup import main
        from formstore.services.retention import CleanupResult

        results = {"contact": CleanupResult(bucket="contact", message="removed 1 of 2 entries older than 30 days")}

        with (
            patch("formstore.cli.cleanup._setup_logging", return_value=_settings()),
            patch("formstore.database.session_scope", _fake_session_scope),
            patch("formstore.services.retention.run_all_buckets_cleanup", return_value=results) as mock_cleanup,
        ):
            main(["cleanup-all-buckets", "--interval", "P30D", "--remove-files"])

        kwargs = mock_cleanup.call_args.kwargs
        assert kwargs["remove_attached_resources"] is True
        assert kwargs["include_configured_buckets"] is False
        assert list(kwargs["configured"]) == ["newsletter"]
        assert mock_cleanup.call_args.args[1].days == 30

        out = capsys.readouterr().out
        assert "contact" in out
        assert "removed 1 of 2 entries older than 30 days" in out


class TestCleanupConfiguredBuckets:
    """Tests for the cleanup-configured-buckets command."""

    def test_runs_configured_rules(self, capsys):
        from formstore.cli.cleanup import main
        from formstore.services.retention import CleanupResult

        results = {"newsletter": CleanupResult(bucket="newsletter", message="No entries found.")}
        settings = _settings()

        with (
            patch("formstore.cli.cleanup._setup_logging", return_value=settings),
            patch("formstore.database.session_scope", _fake_session_scope),
            patch("formstore.services.retention.run_configured_cleanup", return_value=results) as mock_cleanup,
        ):
            main(["cleanup-configured-buckets"])

        assert mock_cleanup.call_args.args[1] == settings.CLEANUP
        assert "newsletter | No entries found." in capsys.readouterr().out


class TestListBuckets:
    """Tests for the list-buckets command."""

    def test_prints_counts(self, capsys):
        from formstore.cli.cleanup import main

        with (
            patch("formstore.cli.cleanup._setup_logging", return_value=_settings()),
            patch("formstore.database.session_scope", _fake_session_scope),
            patch("formstore.services.entries.bucket_counts", return_value={"contact": 3}),
        ):
            main(["list-buckets"])

        assert "contact: 3" in capsys.readouterr().out

    def test_no_buckets(self, capsys):
        from formstore.cli.cleanup import main

        with (
            patch("formstore.cli.cleanup._setup_logging", return_value=_settings()),
            patch("formstore.database.session_scope", _fake_session_scope),
            patch("formstore.services.entries.bucket_counts", return_value={}),
        ):
            main(["list-buckets"])

        assert "No buckets found." in capsys.readouterr().out


class TestPrintResults:
    """Tests for print_results()."""

    def test_empty(self, capsys):
        from formstore.cli.cleanup import print_results

        print_results({})

        assert "No buckets to clean up." in capsys.readouterr().out
