"""Domain errors raised by services and mapped to HTTP responses by the API."""
from __future__ import annotations


class CourtsideError(Exception):
    """Base error. ``status_code`` is the HTTP status the API answers with."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(CourtsideError):
    status_code = 404


class CategoryNotFoundError(NotFoundError):
    """Category absent, or not owned by the referenced tournament."""


class DuplicateResourceError(CourtsideError):
    status_code = 409


class BracketAlreadyExistsError(DuplicateResourceError):
    """Matches exist for the category and may not be replaced."""


class InvalidRequestError(CourtsideError):
    status_code = 400


class InsufficientParticipantsError(InvalidRequestError):
    pass


class InvalidSeedsError(InvalidRequestError):
    pass


class BracketCorruptedError(CourtsideError):
    """Internal invariant violation while building a bracket."""

    status_code = 500


class StorageFailureError(CourtsideError):
    status_code = 503
