"""Translate domain errors into HTTP responses."""

from __future__ import annotations

from fastapi import HTTPException, status

from ricecast.errors import InputError, NotFoundError, OwnershipError, ProviderError, RiceCastError

_STATUS_BY_TYPE: tuple[tuple[type[RiceCastError], int], ...] = (
	(InputError, status.HTTP_400_BAD_REQUEST),
	(ProviderError, status.HTTP_503_SERVICE_UNAVAILABLE),
	(NotFoundError, status.HTTP_404_NOT_FOUND),
	(OwnershipError, status.HTTP_403_FORBIDDEN),
)


def to_http_exception(exc: Exception, fallback: str) -> HTTPException:
	if isinstance(exc, RiceCastError):
		for error_type, status_code in _STATUS_BY_TYPE:
			if isinstance(exc, error_type):
				return HTTPException(
					status_code=status_code,
					detail={"error": exc.code, "details": exc.details},
				)
	if isinstance(exc, LookupError):
		return HTTPException(
			status_code=status.HTTP_404_NOT_FOUND,
			detail={"error": "not_found", "details": [str(exc)]},
		)
	if isinstance(exc, ValueError):
		return HTTPException(
			status_code=status.HTTP_400_BAD_REQUEST,
			detail={"error": "invalid_input", "details": [str(exc)]},
		)
	return HTTPException(
		status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
		detail={"error": "internal_error", "details": [fallback]},
	)
