"""
Unit tests for the command-line interface.
"""

from unittest.mock import patch

import pytest

from dbhealth.cli import build_parser, main_cli


@pytest.mark.unit
class TestArgumentParsing:
    """Test cases for the argument parser."""

    def test_defaults_leave_file_settings_alone(self):
        args = build_parser().parse_args([])

        assert args.slow_threshold is None
        assert args.kill is None
        assert args.batch is None
        assert args.verbose is None
        assert args.pollers is None
        assert args.log_level is None

    def test_all_flags(self):
        args = build_parser().parse_args([
            "--slowis", "30", "--rows", "100", "--kill", "--batch", "--verbose",
            "--lock-threshold", "0", "--pollers", "processlist,locks", "--log-level", "debug",
        ])

        assert args.slow_threshold == 30
        assert args.rows_threshold == 100
        assert args.kill is True
        assert args.batch is True
        assert args.verbose is True
        assert args.lock_threshold == 0
        assert args.pollers == "processlist,locks"
        assert args.log_level == "DEBUG"

    def test_non_integer_threshold_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--slowis", "soon"])


@pytest.mark.unit
class TestMainCli:
    """Test cases for main_cli wiring and exit statuses."""

    @pytest.fixture(autouse=True)
    def clean_environment(self, monkeypatch):
        for variable in ("MYSQL_HOST", "MYSQL_USERNAME", "MYSQL_PASSWORD", "MYSQL_DATABASE"):
            monkeypatch.delenv(variable, raising=False)

    @patch("dbhealth.cli.main.ConnectionProvider")
    @patch("dbhealth.cli.main.MonitoringCoordinator")
    def test_exit_status_from_coordinator(self, mock_coordinator, mock_provider, config_files):
        mock_coordinator.return_value.run.return_value = 0

        with pytest.raises(SystemExit) as exc_info:
            main_cli(["--config", str(config_files["config"]), "--batch", "--kill", "--slowis", "3"])

        assert exc_info.value.code == 0
        app_config = mock_coordinator.call_args[0][0]
        assert app_config.run.batch is True
        assert app_config.run.kill is True
        assert app_config.run.slow_threshold == 3
        assert app_config.run.rows_threshold == 5
        mock_provider.assert_called_once_with(app_config.database)
        mock_provider.return_value.close.assert_called_once()

    @patch("dbhealth.cli.main.ConnectionProvider")
    @patch("dbhealth.cli.main.MonitoringCoordinator")
    def test_connection_failure_status(self, mock_coordinator, mock_provider, config_files):
        mock_coordinator.return_value.run.return_value = 1

        with pytest.raises(SystemExit) as exc_info:
            main_cli(["--config", str(config_files["config"])])

        assert exc_info.value.code == 1

    @patch("dbhealth.cli.main.MonitoringCoordinator")
    def test_missing_config_exits_with_failure(self, mock_coordinator, temp_dir):
        with pytest.raises(SystemExit) as exc_info:
            main_cli(["--config", str(temp_dir / "missing.toml")])

        assert exc_info.value.code == 1
        mock_coordinator.assert_not_called()

    @patch("dbhealth.cli.main.MonitoringCoordinator")
    def test_invalid_override_exits_with_failure(self, mock_coordinator, config_files):
        with pytest.raises(SystemExit) as exc_info:
            main_cli(["--config", str(config_files["config"]), "--slowis", "-3"])

        assert exc_info.value.code == 1
        mock_coordinator.assert_not_called()

    @patch("dbhealth.cli.main.MonitoringCoordinator")
    def test_unknown_poller_exits_with_failure(self, mock_coordinator, config_files):
        with pytest.raises(SystemExit) as exc_info:
            main_cli(["--config", str(config_files["config"]), "--pollers", "binlog"])

        assert exc_info.value.code == 1
