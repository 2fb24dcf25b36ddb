"""
Exception hierarchy for the transaction pipeline.

Builder, encoder, signer, node adapter and tracker all raise subclasses
of AlgoTxError so callers can catch the whole family at once.
"""

from typing import Optional


class AlgoTxError(Exception):
    """Base class for all pipeline errors."""
    pass


class ValidationError(AlgoTxError, ValueError):
    """
    Raised by a builder when a transaction violates an invariant.

    Always recoverable by correcting the input; never retried automatically.

    Attributes:
        field: Name of the offending field (builder name, not wire name)
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class EncodingError(AlgoTxError):
    """Raised when a record cannot be canonically encoded. Indicates a defect."""
    pass


class SigningError(AlgoTxError):
    """Raised when key material is unavailable or the signer fails."""
    pass


class NodeConnectionError(AlgoTxError):
    """Raised when connection to the node fails."""
    pass


class SubmissionError(AlgoTxError):
    """
    Raised when the node rejects submitted bytes.

    The node's message is kept verbatim. Resubmitting identical bytes
    yields the same rejection, so this is never retried automatically.
    """

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.error_code = error_code


class PollError(NodeConnectionError):
    """Transient failure while polling status. Retried by the tracker."""
    pass
