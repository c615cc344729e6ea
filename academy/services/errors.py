"""
Service Errors

Failures raised by the auth service and document store adapters.
"""


class AuthError(RuntimeError):
    """Sign-in against the auth service failed."""


class StoreError(RuntimeError):
    """A document store read or write failed."""


class DocumentExists(StoreError):
    pass


class DocumentNotFound(StoreError):
    pass
