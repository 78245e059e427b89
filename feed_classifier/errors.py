"""
errors.py — Exception types raised by the classify-feed pipeline.

Every error derives from FeedClassifierError so the CLI entry point can turn
any of them into a non-zero exit with a single except clause.

ToolError and its subclasses describe a failed classifier call; these are the
only errors retried by llm.classify_batch().
"""


class FeedClassifierError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(FeedClassifierError):
    """Missing input path, missing credential, or an invalid batch size."""


class InputFormatError(FeedClassifierError):
    """The feed file is unreadable or is not a JSON array of objects."""


class OutputWriteError(FeedClassifierError):
    """The classified feed or the stats file could not be written."""


class ToolError(FeedClassifierError):
    """The external classifier failed to produce usable output."""


class ToolInvocationError(ToolError):
    """The classifier process exited non-zero or could not be started."""

    def __init__(self, message, returncode=None, stderr=""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class ToolResponseError(ToolError):
    """Empty or unparsable result text."""


class MalformedResponseError(ToolError):
    """The parsed response has no ``items`` array."""
