"""
Exception hierarchy for Photon.

Every failure the services surface is one of these, so a transport layer
can map them to distinct responses via ``status_code``.
"""
from typing import Any, Dict, Optional


class PhotonException(Exception):
    """Base exception for all Photon errors."""

    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class NotFoundError(PhotonException):
    """Raised when a user, image, pair or share id does not resolve."""

    status_code = 404

    def __init__(self, resource: str, identifier: Any, details: Optional[Dict[str, Any]] = None) -> None:
        details = details or {}
        details["resource"] = resource
        details["id"] = identifier
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}", details)


class ForbiddenError(PhotonException):
    """Raised when the acting user does not own the image they are operating on."""

    status_code = 403


class ConflictError(PhotonException):
    """Raised for duplicate pairs or shares, and for operations targeting oneself."""

    status_code = 409


class InvalidStateError(PhotonException):
    """Raised when a pair transition is attempted from a state that does not allow it."""

    status_code = 422

    def __init__(
        self,
        message: str,
        current_state: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if current_state:
            details["current_state"] = current_state
        super().__init__(message, details)


class StorageError(PhotonException):
    """Raised when a storage backend fails to put or delete an object."""

    status_code = 502

    def __init__(
        self,
        message: str,
        reference: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if reference:
            details["reference"] = reference
        self.reference = reference
        super().__init__(message, details)


class ConfigurationError(PhotonException):
    """Raised when settings name an unknown storage provider."""
