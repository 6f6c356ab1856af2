# errors.py
"""
Application exception hierarchy.

Services raise these; the handlers registered in main.py turn them into
`{"error": message}` JSON responses with the status code of the class.

     RentEaseError (base)        500
     ├── ValidationError         400
     ├── InvalidStateError       400
     ├── UnauthorizedError       401
     ├── PermissionDeniedError   403
     ├── NotFoundError           404
     ├── ConflictError           409
     └── ExternalServiceError    502
"""
from typing import Any, Dict, Optional


class RentEaseError(Exception):
     """Base class. `message` is safe to return to the client; `context` is only logged."""

     status_code = 500

     def __init__(self, message: str = "An unexpected error occurred", context: Optional[Dict[str, Any]] = None):
          self.message = message
          self.context = context or {}
          super().__init__(self.message)


class ValidationError(RentEaseError):
     """Client input failed a business rule."""

     status_code = 400

     def __init__(self, message: str = "Validation failed", field: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
          ctx = context or {}
          if field:
               ctx["field"] = field
          super().__init__(message=message, context=ctx)
          self.field = field


class InvalidStateError(RentEaseError):
     """The record's current status does not allow the requested transition."""

     status_code = 400


class UnauthorizedError(RentEaseError):
     status_code = 401

     def __init__(self, message: str = "Unauthorized", context: Optional[Dict[str, Any]] = None):
          super().__init__(message=message, context=context)


class PermissionDeniedError(RentEaseError):
     status_code = 403

     def __init__(self, message: str = "Access denied", context: Optional[Dict[str, Any]] = None):
          super().__init__(message=message, context=context)


class NotFoundError(RentEaseError):
     """A referenced record does not exist."""

     status_code = 404

     def __init__(self, resource: str = "Resource", resource_id: Optional[Any] = None, context: Optional[Dict[str, Any]] = None):
          message = f"{resource} not found"
          ctx = context or {}
          ctx["resource"] = resource
          if resource_id is not None:
               ctx["resource_id"] = resource_id
          super().__init__(message=message, context=ctx)


class ExternalServiceError(RentEaseError):
     """A third-party API (email, exchange rates, blob storage) failed."""

     status_code = 502


class ConflictError(RentEaseError):
     """The request duplicates an existing record."""

     status_code = 409
