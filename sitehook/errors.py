"""Exception hierarchy for sitehook."""

from __future__ import annotations


class SitehookError(Exception):
    """Base class for errors raised by sitehook."""


class ConfigError(SitehookError):
    """The configuration file could not be read or validated."""


class InvalidSignatureHeader(SitehookError, ValueError):
    """A signature header is not of the form ``algorithm=hexdigest``."""
