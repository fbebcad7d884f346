"""
Exception types raised inside the error reporting package.

None of these ever leave ErrorReporter.report(); they exist so internal
layers can signal a specific failure and the layer above can apply its
failure policy (fail-open, swallow, convert to False).
"""


class ErrorReportingError(Exception):
    """Base class for error reporting failures."""
    pass


class ConfigurationError(ErrorReportingError):
    """A channel or storage is missing required settings."""
    pass


class ThrottleStoreError(ErrorReportingError):
    """Tracking record could not be read or written."""
    pass
