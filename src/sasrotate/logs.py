"""Logging setup for pipeline and interactive runs.

In an Azure Pipelines job each record is prefixed with the matching logging
command (``##[info]``, ``##[warning]`` ...) so the job log colours and
counts warnings.  Interactively, output goes through rich.
"""

import contextlib
import logging
import sys
from collections.abc import Iterator
from typing import Literal

from rich.logging import RichHandler

from sasrotate.constants import APP_NAME

OutputMode = Literal["pipeline", "console"]

_PIPELINE_PREFIXES = {
    logging.DEBUG: "##[debug]",
    logging.INFO: "##[info]",
    logging.WARNING: "##[warning]",
    logging.ERROR: "##[error]",
    logging.CRITICAL: "##[error]",
}


class PipelineFormatter(logging.Formatter):
    """Prefix each message with the Azure Pipelines command for its level.

    Every line of a multi-line message is prefixed, since the agent only
    reads a command at the start of a line.
    """

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if getattr(record, "raw", False):
            return message
        prefix = _PIPELINE_PREFIXES.get(record.levelno, "")
        return "\n".join(prefix + line for line in message.splitlines() or [""])


def configure_logging(output: OutputMode = "pipeline", verbose: bool = False) -> logging.Logger:
    """Attach a single handler to the ``sasrotate`` logger and return it.

    Calling this again replaces the previous handler.
    """
    logger = logging.getLogger(APP_NAME)
    for old in list(logger.handlers):
        logger.removeHandler(old)

    handler: logging.Handler
    if output == "pipeline":
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(PipelineFormatter("%(message)s"))
    else:
        handler = RichHandler(show_path=False, markup=False)
        handler.setFormatter(logging.Formatter("%(message)s"))

    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    return logger


@contextlib.contextmanager
def log_group(
    logger: logging.Logger, title: str, output: OutputMode = "pipeline"
) -> Iterator[None]:
    """Wrap the enclosed log lines in a collapsible pipeline section."""
    if output == "pipeline":
        _emit_raw(logger, f"##[section]{title}")
        _emit_raw(logger, "##[group]Details")
    else:
        logger.info(title)
    try:
        yield
    finally:
        if output == "pipeline":
            _emit_raw(logger, "##[endgroup]\n")


def _emit_raw(logger: logging.Logger, line: str) -> None:
    """Log ``line`` without the level prefix so pipeline commands stay intact."""
    logger.log(logging.INFO, line, extra={"raw": True})
