"""Exceptions raised by version control providers."""


class VcsProviderError(Exception):
    """Base class for errors raised by a version control provider."""

    pass


class NotFoundError(VcsProviderError):
    """Raised when the requested entity does not exist on the provider."""

    pass


class ForbiddenError(VcsProviderError):
    """Raised when the provider denies access to the requested entity."""

    pass


class ApiError(VcsProviderError):
    """Raised for any other provider or transport fault.

    The underlying exception is preserved through exception chaining
    (``raise ApiError(...) from exc``) so it remains available as
    ``__cause__`` for diagnostics.
    """

    pass
