"""Exceptions raised by cmapclient."""


class CMAPError(Exception):
    """Base class for all cmapclient errors."""


class MissingCredentialError(CMAPError):
    pass


class TransportError(CMAPError):
    """The request never produced an HTTP response (network error, timeout)."""


class ServiceError(CMAPError):
    """The service answered with a non-success status.

    Parameters
    ----------
    status_code : int
        HTTP status code.
    reason : str
        HTTP reason phrase.
    message : str
        Response body text.
    """

    def __init__(self, status_code, reason, message):
        self.status_code = status_code
        self.reason = reason
        self.message = message
        super().__init__(f"{status_code} {reason}: {message}")


class MalformedResponseError(CMAPError):
    pass


class InvalidArgumentError(CMAPError, ValueError):
    pass


class InvalidIntervalError(InvalidArgumentError):
    pass


class UnsupportedOperationError(CMAPError):
    pass


class NotFoundError(CMAPError, LookupError):
    pass


class AmbiguousNameError(CMAPError, LookupError):
    """A name resolved to more than one record.

    The matching records are kept in ``candidates`` for disambiguation.
    """

    def __init__(self, message, candidates=None):
        super().__init__(message)
        self.candidates = candidates


class DatasetTooLargeError(CMAPError):
    def __init__(self, message, rows=None, max_rows=None):
        super().__init__(message)
        self.rows = rows
        self.max_rows = max_rows
