from django.core.exceptions import PermissionDenied, ValidationError


class CatalogImportError(Exception):
    """Base class for failures raised by the catalog import pipeline."""


class RowError(CatalogImportError):
    """A single source row could not be mapped or persisted. The import carries on."""

    def __init__(self, message, row_number=None):
        super().__init__(message)
        self.message = message
        self.row_number = row_number

    def __str__(self):
        if self.row_number is None:
            return self.message
        return f"Row {self.row_number}: {self.message}"


class OrchestrationError(CatalogImportError):
    pass


class SessionStateError(CatalogImportError):
    pass


class MergeConflictError(CatalogImportError):
    pass


class AuthorizationError(PermissionDenied):
    pass


class ArtistNameError(ValidationError):
    pass


class ArtistNotFoundError(MergeConflictError):
    pass
