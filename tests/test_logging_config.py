"""
Tests for logging configuration.
"""
from unittest.mock import patch, MagicMock
from project_version.logging_config import setup_logging


class TestLoggingConfig:
    """Test logging configuration."""

    @patch('project_version.logging_config.logger')
    def test_setup_logging_default(self, mock_logger):
        """Test setup logging with default level."""
        setup_logging()

        mock_logger.remove.assert_called()
        mock_logger.add.assert_called()
        assert mock_logger.add.call_args.kwargs['level'] == 'INFO'

    @patch('project_version.logging_config.logger')
    def test_setup_logging_debug(self, mock_logger):
        """Test setup logging with DEBUG level."""
        setup_logging('DEBUG')

        mock_logger.remove.assert_called_once()
        assert mock_logger.add.call_args.kwargs['level'] == 'DEBUG'

    @patch('project_version.logging_config.logger')
    def test_setup_logging_registers_verbose_level(self, mock_logger):
        """Test the VERBOSE level is registered."""
        setup_logging('VERBOSE')

        mock_logger.level.assert_called_once_with("VERBOSE", no=15, color="<cyan>", icon="ℹ️")

    @patch('project_version.logging_config.logger')
    def test_setup_logging_with_console(self, mock_logger):
        """Test setup logging routes records to the console."""
        mock_console = MagicMock()

        setup_logging('INFO', console=mock_console)

        mock_logger.remove.assert_called_once()
        sink = mock_logger.add.call_args.args[0]
        sink('hello\n')
        mock_console.print.assert_called_once()
        assert mock_console.print.call_args.args[0] == 'hello\n'

    def test_setup_logging_twice(self):
        """Test repeated setup with the real logger does not fail."""
        setup_logging('INFO')
        setup_logging('VERBOSE')
