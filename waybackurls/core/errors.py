"""
Exception types raised by the extraction pipeline.

Everything raised on purpose derives from WaybackError so the command line
can turn it into a single diagnostic line and a non-zero exit code.
"""


class WaybackError(Exception):
    """Base class for all extractor errors."""


class UsageError(WaybackError):
    """Wrong number of command-line arguments."""


class MissingDependencyError(WaybackError):
    """A required module is not installed."""

    def __init__(self, module: str, hint: str = None):
        self.module = module
        self.hint = hint or f"pip install {module}"
        super().__init__(f"{module} is not installed")


class DomainValidationError(WaybackError, ValueError):
    """The target domain failed the syntax check."""


class UpstreamFormatError(WaybackError, ValueError):
    """The CDX server returned a body that is not a structured (JSON) listing."""


class FatalNetworkError(WaybackError):
    """The CDX query itself failed (transport error or HTTP error status)."""

    def __init__(self, message: str, url: str = None):
        self.url = url
        super().__init__(message)
