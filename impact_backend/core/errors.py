"""Domain errors raised by the services and rendered by FastAPI.

Every error is an ``HTTPException`` so it carries its own status code and is
serialized as ``{"detail": ...}`` at the request boundary.
"""

from fastapi import HTTPException, status


class ImpactError(HTTPException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Request could not be completed.'

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(status_code=self.status_code, detail=detail or self.default_detail)


class InvalidInputError(ImpactError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid input.'


class ForbiddenError(ImpactError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Access denied.'


class NotFoundError(ImpactError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Resource not found.'


class ConflictError(ImpactError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Request conflicts with the current state.'


class DuplicateApplicationError(ConflictError):
    # Surfaces as 400, not 409.
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Already applied to this opportunity.'


class OpportunityNotAcceptingApplicationsError(InvalidInputError):
    default_detail = 'Opportunity is not accepting applications.'


class InvalidHoursError(InvalidInputError):
    default_detail = 'Hours must be greater than zero.'


class InvalidStatusTransitionError(ConflictError):
    default_detail = 'Invalid application status transition.'
