"""Errors raised by the treatment engine."""


class InvalidInput(ValueError):
    """Raised when a condition assignment is malformed.

    This is the only error the engine raises for a request. Clinical outcomes
    (interactions, unresolved separations) are reported inside the Analysis.
    """
