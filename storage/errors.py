# storage/errors.py


class StorageError(RuntimeError):
    """The store could not complete the call. The driver error is chained as __cause__."""


class NotFoundError(LookupError):
    """A point lookup matched no row."""


class NoPreviousHeightError(LookupError):
    """The blocks table is empty, so there is no height to resume from."""

    def __init__(self, msg: str = "no previous height stored"):
        super().__init__(msg)
