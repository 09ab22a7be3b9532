from typing import Any, Optional
from fastapi import status


class ConfigurationError(RuntimeError):
    """Raised at startup when required settings are missing."""


class CatalogError(Exception):
    """
    Base error of the publishing workflow, rendered as {"message", "kind", "details"}.
    diagnostics holds provider or driver detail that only leaves the process outside production.
    """
    kind = "error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[Any] = None, diagnostics: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        self.diagnostics = diagnostics


class ValidationError(CatalogError):
    kind = "validation"
    status_code = status.HTTP_400_BAD_REQUEST


class UploadError(CatalogError):
    kind = "upload"
    status_code = status.HTTP_502_BAD_GATEWAY


class NotFound(CatalogError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class IntegrityError(CatalogError):
    kind = "integrity"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class AuthorizationError(CatalogError):
    kind = "authorization"
    status_code = status.HTTP_403_FORBIDDEN
