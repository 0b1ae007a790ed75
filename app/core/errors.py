"""Error taxonomy of the settlement engine.

Every error raised by the services derives from ``LedgerError`` so the HTTP
layer can translate it with one handler per class.
"""


class LedgerError(Exception):
    """Base class for settlement engine errors."""
    pass


class NotFoundError(LedgerError):
    """Referenced group, participant, expense, payment or debt does not exist."""
    pass


class InvalidArgumentError(LedgerError):
    """Request rejected before any mutation took place."""
    pass


class SettlementModeError(InvalidArgumentError):
    """Operation belongs to the settlement model this deployment does not use."""
    pass


class StorageFailureError(LedgerError):
    """The database failed during a read or write; the transaction was aborted."""
    pass


class ConsistencyViolationError(LedgerError):
    """Aggregated balances do not sum to zero or reference unknown participants."""
    pass
