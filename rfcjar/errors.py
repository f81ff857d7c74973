"""Exceptions raised by the cookie jar."""

__all__ = ['CookieError', 'CookieRejected', 'ConfigurationError',
           'StoreNotSynchronousError']


class CookieError(Exception):
    """Base class for all cookie jar errors."""


class CookieRejected(CookieError, ValueError):
    """A cookie failed one of the acceptance checks.

    ``reason`` holds a human readable explanation.  ``silent`` is set for
    rejections which the jar drops without reporting, such as a violated
    cookie prefix while prefix security is in silent mode.

    """

    def __init__(self, reason, silent=False):
        super().__init__(reason)
        self.reason = reason
        self.silent = silent


class ConfigurationError(CookieError, RuntimeError):
    """The jar was used in a way its configuration does not allow."""


class StoreNotSynchronousError(ConfigurationError):
    """A blocking operation was requested on an asynchronous store."""

    def __init__(self, store, operation):
        super().__init__(
            "%s is not synchronous; use the coroutine variant of %s()" % (
                type(store).__name__, operation))
        self.store = store
        self.operation = operation
