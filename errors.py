"""
Error taxonomy for a query run.

Session-level errors (SessionError, QueryTimeoutError) mean the browser is in a
bad state and the session must be torn down. ExtractionEmptyError and
PersistenceError leave the session alive.
"""


class FinanceBotError(Exception):
    """Base class for run failures reported in RunResult.error."""


class SessionError(FinanceBotError):
    """Browser session could not be created or could not load the query page."""


class QueryTimeoutError(FinanceBotError):
    """Answer region never populated, or the response was too short to use."""


class ExtractionEmptyError(FinanceBotError):
    """Response was usable but no stock records matched any strategy."""


class PersistenceError(FinanceBotError):
    """Records could not be written to the dataset."""
