"""Transfer input validation errors.

Raised before any gateway or wallet call is made.
"""


class TransferValidationError(Exception):
    """Base class for rejected transfer input."""
    pass


class InvalidAmount(TransferValidationError):
    """Amount is not a positive decimal string."""
    pass


class SameChainTransfer(TransferValidationError):
    """Sender and recipient chains are the same."""
    pass


class UnsupportedDestination(TransferValidationError):
    """Recipient address is not valid for the recipient chain family."""
    pass


class SignatureExpired(TransferValidationError):
    """Bridge-in signature deadline has already passed."""

    def __init__(self, deadline: str):
        super().__init__(f"Signature expired at {deadline}")
        self.deadline = deadline
