"""
Rate Limiting Middleware

Token bucket rate limiting for API protection.
Keeps booking endpoints from being hammered by a single client.
"""

import time
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Optional
import asyncio

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from manosetu.config.logging_config import get_logger
from manosetu.infrastructure.metrics import RATE_LIMIT_EXCEEDED

logger = get_logger(__name__)


@dataclass
class RateLimitConfig:
    """Rate limit configuration."""
    
    requests_per_minute: int = 60
    
    # Burst allowance (tokens above limit)
    burst_size: int = 10
    
    # Buckets idle longer than this are dropped
    idle_seconds: int = 600


class TokenBucket:
    """Token bucket for rate limiting."""
    
    def __init__(
        self,
        rate: float,  # Tokens per second
        capacity: int,  # Maximum tokens
    ) -> None:
        self.rate = rate
        self.capacity = capacity
        self.tokens = float(capacity)
        self.last_update = time.monotonic()
        self._lock = asyncio.Lock()
    
    async def acquire(self, tokens: int = 1) -> bool:
        """
        Attempt to acquire tokens.
        
        Returns True if tokens acquired, False if rate limited.
        """
        async with self._lock:
            now = time.monotonic()
            elapsed = now - self.last_update
            
            self.tokens = min(
                self.capacity,
                self.tokens + elapsed * self.rate
            )
            self.last_update = now
            
            if self.tokens >= tokens:
                self.tokens -= tokens
                return True
            
            return False
    
    @property
    def available_tokens(self) -> int:
        """Get current available tokens."""
        return int(self.tokens)


class RateLimiter:
    """
    Rate limiter using token bucket algorithm.
    
    Maintains separate buckets per client identifier.
    """
    
    def __init__(self, config: Optional[RateLimitConfig] = None) -> None:
        self.config = config or RateLimitConfig()
        self._buckets: dict[str, TokenBucket] = defaultdict(self._create_bucket)
        self._last_cleanup = time.monotonic()
    
    def _create_bucket(self) -> TokenBucket:
        rate = self.config.requests_per_minute / 60.0
        capacity = self.config.requests_per_minute + self.config.burst_size
        return TokenBucket(rate=rate, capacity=capacity)
    
    async def check_rate_limit(self, client_id: str) -> tuple[bool, int]:
        """
        Check if request is within rate limit.
        
        Returns:
            Tuple of (allowed, remaining_tokens)
        """
        self._cleanup_inactive_buckets()
        bucket = self._buckets[client_id]
        
        allowed = await bucket.acquire()
        remaining = bucket.available_tokens
        
        if not allowed:
            RATE_LIMIT_EXCEEDED.labels(client_type="ip").inc()
            logger.warning(
                "Rate limit exceeded",
                client_id=client_id[:8] + "...",  # Truncate for privacy
            )
        
        return allowed, remaining
    
    def _cleanup_inactive_buckets(self) -> None:
        """Remove buckets that haven't been used recently."""
        now = time.monotonic()
        if now - self._last_cleanup < self.config.idle_seconds / 2:
            return
        self._last_cleanup = now
        
        inactive_keys = [
            key for key, bucket in self._buckets.items()
            if now - bucket.last_update > self.config.idle_seconds
        ]
        for key in inactive_keys:
            del self._buckets[key]


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    FastAPI middleware for rate limiting.
    
    Never blocks health, metrics or documentation endpoints.
    """
    
    UNVERSIONED_EXEMPT_PREFIXES = (
        "/metrics",
        "/docs",
        "/redoc",
        "/openapi.json",
    )
    
    def __init__(
        self,
        app,
        config: Optional[RateLimitConfig] = None,
        api_prefix: str = "/api/v1",
    ) -> None:
        super().__init__(app)
        self.limiter = RateLimiter(config)
        self.exempt_prefixes = (f"{api_prefix}/health", *self.UNVERSIONED_EXEMPT_PREFIXES)
    
    async def dispatch(
        self,
        request: Request,
        call_next: Callable,
    ) -> Response:
        path = request.url.path
        
        if path.startswith(self.exempt_prefixes):
            return await call_next(request)
        
        allowed, remaining = await self.limiter.check_rate_limit(self._get_client_id(request))
        
        if not allowed:
            return Response(
                content='{"success": false, "message": "Rate limit exceeded. Please try again later."}',
                status_code=429,
                media_type="application/json",
                headers={
                    "X-RateLimit-Remaining": "0",
                    "Retry-After": "60",
                },
            )
        
        response = await call_next(request)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response
    
    def _get_client_id(self, request: Request) -> str:
        """Get client identifier for rate limiting (first forwarded IP, else peer)."""
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            client_ip = forwarded.split(",")[0].strip()
        else:
            client_ip = request.client.host if request.client else "unknown"
        
        return f"ip:{client_ip}"
