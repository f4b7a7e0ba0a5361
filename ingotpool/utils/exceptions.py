"""
Engine exception hierarchy.

Every failed precondition aborts the whole operation. Callers can catch
EngineError or one of the categorized subclasses below.
"""


class EngineError(Exception):
    """Base class for all ledger engine errors."""

    code = "engine_error"

    def __init__(self, message: str, **context: object) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        return self.message


class AuthorizationError(EngineError):
    """Caller lacks the required capability."""

    code = "unauthorized"


class StateError(EngineError):
    """Operation is not allowed in the current ledger state."""

    code = "invalid_state"


class ReentrancyError(StateError):
    """Engine was entered again while an operation was in flight."""

    code = "reentrant_call"


class ValidationError(EngineError):
    """Input arguments are invalid."""

    code = "invalid_input"


class InsufficientFundsError(EngineError):
    """Balance, treasury or coverage is too low for the operation."""

    code = "insufficient_funds"


class TransferError(InsufficientFundsError):
    """Asset ledger refused a transfer."""

    code = "transfer_failed"


class LedgerArithmeticError(EngineError, ArithmeticError):
    """Calculation would overflow or degenerate to zero."""

    code = "arithmetic_error"
