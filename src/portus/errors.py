"""Exception types raised inside the sync engine.

None of these escape the StateManager: it records them as BoardError
entries on the board instead.
"""


class PortusError(Exception):
    """Base class for portus errors."""


class ParseError(PortusError):
    """Document text could not be turned into a board."""


class MutationError(PortusError):
    """A transform handed to set_state raised."""


class RestoreNoOp(PortusError):
    """The undo target location no longer exists."""


class InvoiceError(PortusError):
    """An invoice document couldn't be updated."""
