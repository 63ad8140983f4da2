# wilson_score/errors.py
from __future__ import annotations


class WilsonScoreError(ValueError):
    """Base class for errors raised by wilson_score."""


class InvalidArgument(WilsonScoreError):
    """Bad counts, bad column, bad parameter value."""


class ConfigurationMissing(WilsonScoreError):
    """A required column-name option was never set."""

    def __init__(self, param: str):
        self.param = param
        super().__init__(f"Required parameter '{param}' is not set")
