"""Error taxonomy shared by the catalog, list and rating services."""

from __future__ import annotations


class CatalogError(Exception):
    """Base class for failures surfaced to callers as typed results."""

    status_code = 500
    code = "SERVER_ERROR"

    def __init__(self, message: str | None = None):
        self.message = message or self.__class__.__doc__ or self.code
        super().__init__(self.message)

    def to_payload(self) -> dict[str, str]:
        return {"status": "error", "code": self.code, "message": self.message}


class RemoteUnavailable(CatalogError):
    """The metadata provider could not answer the request."""

    status_code = 502
    code = "REMOTE_UNAVAILABLE"


class NotFound(CatalogError):
    """No local or remote record exists for the requested identity."""

    status_code = 404
    code = "RESOURCE_NOT_FOUND"


class AlreadyInList(CatalogError):
    """The item is already in the user's list."""

    status_code = 409
    code = "ALREADY_IN_LIST"


class InvalidValue(CatalogError):
    """The supplied value is outside the accepted range."""

    status_code = 422
    code = "VALIDATION_ERROR"


class StoreError(CatalogError):
    """The relational store rejected or could not run the operation."""

    status_code = 500
    code = "DATABASE_ERROR"
