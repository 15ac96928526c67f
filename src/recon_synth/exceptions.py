"""Exception hierarchy for test-suite generation."""


class ReconSynthError(Exception):
    """Base class for all generation errors."""


class RequestValidationError(ReconSynthError, ValueError):
    """
    The generation request was rejected before any generation began.

    This is a client-fault condition (empty case list, missing or reversed
    date range, unknown case type or direction).
    """


class GenerationError(ReconSynthError):
    """An unexpected failure while synthesizing a test case."""
