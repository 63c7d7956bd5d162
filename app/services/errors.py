"""Typed outcomes of ledger and event operations.

Every class here is an expected, caller-recoverable condition. Anything that
is not a ``LedgerError`` is an infrastructure fault.
"""


class LedgerError(Exception):
    pass


class NotFoundError(LedgerError):
    pass


class ForbiddenError(LedgerError):
    pass


class EventFullError(LedgerError):
    pass


class AlreadyRegisteredError(LedgerError):
    pass


class AlreadyCancelledError(LedgerError):
    pass


class CapacityTooLowError(LedgerError):
    pass


class TransientConflictError(LedgerError):
    pass
