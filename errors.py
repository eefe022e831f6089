class ReciteError(Exception):
    """Base class for failures surfaced through the API facade."""


class NotFound(ReciteError, LookupError):
    """A referenced text or line does not exist."""


class InvalidArgument(ReciteError, ValueError):
    """A payload is missing a required field or carries an invalid value."""


class UnknownAction(ReciteError, LookupError):
    """The facade has no handler for the requested action."""


class StorageUnavailable(ReciteError, RuntimeError):
    """The database could not be opened or a statement failed."""
