"""Tests for CLI interface"""

from __future__ import annotations

import json
import logging
from unittest.mock import MagicMock, patch

import click
import pytest
from click.testing import CliRunner

from wegli.cli import _die, _error_message, cli, main, setup_logging
from wegli.domain.config import ApiConfig, RetryConfig
from wegli.domain.errors import ExportNotFoundError, RateLimitedError, UnexpectedStatusError
from wegli.domain.models import Charge, District
from wegli.infrastructure.config.config_manager import ConfigurationError

from payloads import CHARGE, DISTRICT


def _config(token="secret", **retry):
    mock_config = MagicMock()
    mock_config.get_api_config.return_value = ApiConfig(token=token)
    mock_config.get_retry_config.return_value = RetryConfig(**retry)
    return mock_config


class TestSetupLogging:
    """Tests for setup_logging function"""

    def test_setup_logging_info_level(self):
        """Test that logging is set to INFO level by default"""
        setup_logging(verbose=False)
        assert logging.getLogger().level == logging.INFO

    def test_setup_logging_debug_level(self):
        """Test that logging is set to DEBUG level when verbose"""
        setup_logging(verbose=True)
        assert logging.getLogger().level == logging.DEBUG


class TestDie:
    """Tests for _die function"""

    def test_die_without_exception(self):
        """Test _die without exception"""
        with pytest.raises(click.ClickException, match="Test error"):
            _die("Test error", verbose=False)

    def test_die_with_exception_verbose(self):
        """Test _die with exception in verbose mode"""
        exc = ValueError("Test exception")
        with pytest.raises(click.ClickException, match="Test error"):
            _die("Test error", verbose=True, exc=exc)


class TestErrorMessage:
    """Tests for user-facing error messages"""

    def test_rate_limit_with_delay(self):
        assert "retry in 120 seconds" in _error_message(RateLimitedError(retry_after=120))

    def test_rate_limit_without_delay(self):
        assert "retry later" in _error_message(RateLimitedError(status_code=503))

    def test_other_errors(self):
        message = _error_message(UnexpectedStatusError(404))
        assert message == "weg.li API error: received unexpected response code 404"


@patch("wegli.cli.WegliClient")
@patch("wegli.cli.ConfigManager")
class TestCommands:
    """Tests for the resource commands"""

    def test_charge_command(self, mock_config_manager, mock_client_class):
        mock_config_manager.return_value = _config()
        mock_client = mock_client_class.return_value
        mock_client.get_charge.return_value = Charge.from_json(CHARGE)

        result = CliRunner().invoke(cli, ["charge", "101000"], catch_exceptions=False)

        assert result.exit_code == 0
        mock_client.get_charge.assert_called_once_with("101000")
        assert '"tbnr": "101000"' in result.output
        assert '"fine": "35.0"' in result.output

    def test_districts_command_prints_json_list(self, mock_config_manager, mock_client_class):
        mock_config_manager.return_value = _config()
        mock_client_class.return_value.get_districts.return_value = [District.from_json(DISTRICT)]

        result = CliRunner().invoke(cli, ["districts"], catch_exceptions=False)

        assert result.exit_code == 0
        start = result.output.index("[")
        districts = json.loads(result.output[start:])
        assert districts[0]["name"] == "Scheinfeld"

    def test_client_built_from_config_and_overrides(self, mock_config_manager, mock_client_class):
        mock_config_manager.return_value = _config(max_retries=4, rate_limit="retry")
        mock_client_class.return_value.get_notices.return_value = []

        result = CliRunner().invoke(
            cli,
            ["--api-url", "https://staging.example/api", "--max-retries", "0", "notices"],
            catch_exceptions=False,
        )

        assert result.exit_code == 0
        kwargs = mock_client_class.call_args.kwargs
        assert kwargs["api_url"] == "https://staging.example/api"
        assert kwargs["api_token"] == "secret"
        assert kwargs["retry_policy"].max_retries == 0
        assert kwargs["rate_limit"].value == "retry"

    def test_exports_public_flag(self, mock_config_manager, mock_client_class):
        mock_config_manager.return_value = _config()
        mock_client = mock_client_class.return_value
        mock_client.get_exports.return_value = []

        result = CliRunner().invoke(cli, ["exports", "--public"], catch_exceptions=False)

        assert result.exit_code == 0
        mock_client.get_exports.assert_called_once_with(public=True)

    def test_rate_limited(self, mock_config_manager, mock_client_class):
        mock_config_manager.return_value = _config()
        mock_client_class.return_value.get_notice.side_effect = RateLimitedError(retry_after=30)

        result = CliRunner().invoke(cli, ["notice", "abc123"], catch_exceptions=False)

        assert result.exit_code != 0
        assert "retry in 30 seconds" in result.output

    def test_missing_token(self, mock_config_manager, mock_client_class):
        mock_config_manager.return_value = _config(token=None)
        mock_client_class.side_effect = ValueError("weg.li API token is required.")

        result = CliRunner().invoke(cli, ["charges"], catch_exceptions=False)

        assert result.exit_code != 0
        assert "API token is required" in result.output

    def test_invalid_config(self, mock_config_manager, mock_client_class):
        mock_config_manager.side_effect = ConfigurationError("Configuration validation failed")

        result = CliRunner().invoke(cli, ["charges"], catch_exceptions=False)

        assert result.exit_code != 0
        assert "Configuration validation failed" in result.output
        mock_client_class.assert_not_called()


@patch("wegli.cli.WegliClient")
@patch("wegli.cli.ConfigManager")
class TestDownloadExportCommand:
    """Tests for the download-export command"""

    def test_download_and_unzip(self, mock_config_manager, mock_client_class, tmp_path):
        mock_config_manager.return_value = _config()
        mock_client = mock_client_class.return_value
        mock_client.download_latest_export.return_value = tmp_path / "notices.csv"

        result = CliRunner().invoke(cli, ["download-export", str(tmp_path)], catch_exceptions=False)

        assert result.exit_code == 0
        mock_client.download_latest_export.assert_called_once_with(tmp_path, public=False, unzip=True)
        assert str(tmp_path / "notices.csv") in result.output

    def test_no_unzip_public(self, mock_config_manager, mock_client_class, tmp_path):
        mock_config_manager.return_value = _config()
        mock_client = mock_client_class.return_value
        mock_client.download_latest_export.return_value = tmp_path / "notices-47.zip"

        result = CliRunner().invoke(
            cli, ["download-export", str(tmp_path), "--public", "--no-unzip"], catch_exceptions=False
        )

        assert result.exit_code == 0
        mock_client.download_latest_export.assert_called_once_with(tmp_path, public=True, unzip=False)

    def test_no_export_found(self, mock_config_manager, mock_client_class, tmp_path):
        mock_config_manager.return_value = _config()
        mock_client_class.return_value.download_latest_export.side_effect = ExportNotFoundError(
            "no export found"
        )

        result = CliRunner().invoke(cli, ["download-export", str(tmp_path)], catch_exceptions=False)

        assert result.exit_code != 0
        assert "no export found" in result.output

    def test_missing_directory(self, mock_config_manager, mock_client_class, tmp_path):
        result = CliRunner().invoke(cli, ["download-export", str(tmp_path / "missing")])

        assert result.exit_code != 0
        mock_client_class.assert_not_called()


class TestMain:
    """Tests for main entry point"""

    def test_main_invokes_cli(self):
        with patch("wegli.cli.cli") as mock_cli:
            main()
            mock_cli.assert_called_once_with(obj={})
