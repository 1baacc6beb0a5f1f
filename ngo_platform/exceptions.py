"""API error taxonomy shared by every app.

Each class is a DRF ``APIException`` so views can simply raise and let the
default exception handler render ``{"detail": ...}`` with the right status.
"""

from __future__ import annotations

from rest_framework import exceptions, status


class ValidationError(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input."
    default_code = "invalid"


class Forbidden(exceptions.PermissionDenied):
    default_detail = "You are not allowed to perform this action."


class NotFound(exceptions.NotFound):
    pass


class Conflict(exceptions.APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "The resource already exists."
    default_code = "conflict"


class UpstreamError(exceptions.APIException):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "An upstream service failed."
    default_code = "upstream_error"


__all__ = ["ValidationError", "Forbidden", "NotFound", "Conflict", "UpstreamError"]
