"""Tests for pipeline log formatting."""

import logging

from rich.logging import RichHandler

from sasrotate.logs import PipelineFormatter, configure_logging, log_group


def _record(level: int, msg: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("sasrotate.test", level, __file__, 1, msg, None, None)
    record.__dict__.update(extra)
    return record


class TestPipelineFormatter:
    def test_levels_map_to_logging_commands(self):
        """
        Given records at each level
        When formatted
        Then each carries the Azure Pipelines command for its level
        """
        fmt = PipelineFormatter("%(message)s")
        assert fmt.format(_record(logging.DEBUG, "d")) == "##[debug]d"
        assert fmt.format(_record(logging.INFO, "i")) == "##[info]i"
        assert fmt.format(_record(logging.WARNING, "w")) == "##[warning]w"
        assert fmt.format(_record(logging.ERROR, "e")) == "##[error]e"
        assert fmt.format(_record(logging.CRITICAL, "c")) == "##[error]c"

    def test_raw_records_are_not_prefixed(self):
        """
        Given a record flagged raw
        When formatted
        Then it is emitted verbatim
        """
        fmt = PipelineFormatter("%(message)s")
        assert fmt.format(_record(logging.INFO, "##[group]Details", raw=True)) == "##[group]Details"

    def test_every_line_of_a_multiline_message_is_prefixed(self):
        """
        Given a warning whose text spans several lines
        When formatted
        Then each line carries the warning command
        """
        fmt = PipelineFormatter("%(message)s")
        message = "Command failed (exit 1):\n  az keyvault secret list\n  stderr: Forbidden"
        lines = fmt.format(_record(logging.WARNING, message)).split("\n")
        assert lines == [
            "##[warning]Command failed (exit 1):",
            "##[warning]  az keyvault secret list",
            "##[warning]  stderr: Forbidden",
        ]


class TestConfigureLogging:
    def test_pipeline_mode_writes_to_stdout(self, capsys):
        """
        Given pipeline output
        When a warning is logged
        Then stdout receives the prefixed line
        """
        logger = configure_logging("pipeline")
        logging.getLogger("sasrotate.rotation").warning("No Key Vaults found in rg-a")
        assert "##[warning]No Key Vaults found in rg-a" in capsys.readouterr().out
        assert logger.level == logging.INFO

    def test_reconfiguring_replaces_handler(self):
        """
        Given logging configured twice
        When inspecting the handlers
        Then only the latest handler is attached
        """
        configure_logging("pipeline")
        logger = configure_logging("console", verbose=True)
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], RichHandler)
        assert logger.level == logging.DEBUG


class TestLogGroup:
    def test_pipeline_group_commands(self, capsys):
        """
        Given pipeline output
        When a log group wraps a message
        Then section, group and endgroup commands surround it
        """
        logger = configure_logging("pipeline")
        with log_group(logger, "Working in Resource Group: rg-a"):
            logger.info("Found Key Vault: kv-a")

        lines = [line for line in capsys.readouterr().out.splitlines() if line]
        assert lines == [
            "##[section]Working in Resource Group: rg-a",
            "##[group]Details",
            "##[info]Found Key Vault: kv-a",
            "##[endgroup]",
        ]

    def test_group_closed_on_error(self, capsys):
        """
        Given an exception inside a pipeline group
        When it propagates
        Then the group is still closed
        """
        logger = configure_logging("pipeline")
        try:
            with log_group(logger, "title"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass
        assert "##[endgroup]" in capsys.readouterr().out
