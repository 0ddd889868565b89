"""Custom exceptions for Mail Threading.

The threading core absorbs data-quality problems with defaults and never
raises; these exceptions cover the edges around it (configuration and
page files handed to the command line).
"""


class MailThreadingError(Exception):
    """Base exception for all Mail Threading errors."""


class PayloadError(MailThreadingError):
    """Exception raised when a page response cannot be read at all."""


class ConfigurationError(MailThreadingError):
    """Exception raised for configuration related errors."""
