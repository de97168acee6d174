"""Redis-backed rate limiting for the prediction endpoints."""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from ricecast.auth.dependencies import extract_identity_hint
from ricecast.config import get_settings

LIMITED_PREFIX = "/api/v1/predictions"


class RateLimitMiddleware(BaseHTTPMiddleware):
	"""Fixed one-minute buckets per caller identity.

	Each prediction call may hit the weather provider, so only those routes
	are counted.  Without Redis the limiter is a no-op.
	"""

	async def dispatch(self, request: Request, call_next):  # type: ignore[override]
		if not request.url.path.startswith(LIMITED_PREFIX):
			return await call_next(request)

		redis_client = getattr(request.app.state, "redis", None)
		if redis_client is None:
			return await call_next(request)

		settings = get_settings()
		identity = extract_identity_hint(request)
		quota = settings.rate_limit_per_minute

		minute_bucket = datetime.now(UTC).strftime("%Y%m%d%H%M")
		key = f"ratelimit:predictions:{identity}:{minute_bucket}"
		current = await redis_client.incr(key)
		if current == 1:
			await redis_client.expire(key, 65)

		if current > quota:
			return JSONResponse(
				status_code=429,
				content={
					"detail": {
						"error": "rate_limited",
						"details": [f"Prediction quota of {quota} requests per minute exceeded"],
					}
				},
			)

		return await call_next(request)
