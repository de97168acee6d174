"""Authentication dependencies: resolve the caller's user id from a bearer token."""

from __future__ import annotations

import hashlib
import uuid

from fastapi import HTTPException, Request
from fastapi.security import HTTPBearer

from ricecast.auth.jwt import AuthError, decode_token

bearer_scheme = HTTPBearer(auto_error=False)


def _raise_auth(exc: AuthError) -> HTTPException:
	return HTTPException(
		status_code=exc.status_code,
		detail={"error": exc.code, "details": [exc.detail]},
	)


def extract_identity_hint(request: Request) -> str:
	"""Cheap identity key for rate limiting; does not verify the token."""
	auth_header = request.headers.get("authorization", "")
	if auth_header.lower().startswith("bearer "):
		token = auth_header[7:].strip()
		if token:
			return "jwt:" + hashlib.sha256(token.encode("utf-8")).hexdigest()[:16]
	client = request.client.host if request.client else "unknown"
	return f"ip:{client}"


async def get_current_user_id(request: Request) -> uuid.UUID:
	credentials = await bearer_scheme(request)
	if credentials is None or credentials.scheme.lower() != "bearer":
		raise _raise_auth(AuthError(code="auth_required", detail="Bearer token is required"))

	try:
		payload = decode_token(credentials.credentials)
	except AuthError as exc:
		raise _raise_auth(exc) from exc

	try:
		return uuid.UUID(str(payload["sub"]))
	except (ValueError, KeyError) as exc:
		raise _raise_auth(AuthError(code="token_invalid", detail="Token subject is invalid")) from exc
