# -----------------------------------------------------------------------------
# SITEFORGE - IDENTITY & RATE LIMITING
# -----------------------------------------------------------------------------
# Responsibility: Know who is calling and keep any one client from burning
# through the GitHub API quota.
#
# Identity is delegated: an upstream auth gateway verifies the user and
# forwards an opaque user id in a header. SiteForge never sees passwords.
# -----------------------------------------------------------------------------

import os
import time
from collections import defaultdict
from dataclasses import dataclass, field

from fastapi import HTTPException, Request, status
from rich.console import Console

console = Console()

# -----------------------------------------------------------------------------
# CONFIGURATION
# -----------------------------------------------------------------------------
USER_HEADER = os.getenv("SITEFORGE_USER_HEADER", "X-User-Id")

# Rate limit settings
RATE_LIMIT_WINDOW = 60  # seconds
RATE_LIMIT_MAX_REQUESTS = int(os.getenv("SITEFORGE_RATE_LIMIT", "30"))  # per minute


# -----------------------------------------------------------------------------
# RATE LIMITER
# -----------------------------------------------------------------------------
@dataclass
class RateLimitEntry:
    """Track rate limit for a single client."""

    requests: list = field(default_factory=list)
    blocked_until: float = 0


class RateLimiter:
    """
    Simple in-memory rate limiter using sliding window.
    Tracks requests per client and blocks for one window once exceeded.
    """

    def __init__(
        self, window: int = RATE_LIMIT_WINDOW, max_requests: int = RATE_LIMIT_MAX_REQUESTS
    ):
        self.window = window
        self.max_requests = max_requests
        self._clients: dict[str, RateLimitEntry] = defaultdict(RateLimitEntry)

    def is_allowed(self, client_id: str) -> tuple[bool, int]:
        """
        Check if request is allowed.
        Returns (allowed, remaining_requests).
        """
        now = time.time()
        entry = self._clients[client_id]

        if entry.blocked_until > now:
            return False, 0

        # Clean old requests outside window
        entry.requests = [t for t in entry.requests if t > now - self.window]

        if len(entry.requests) >= self.max_requests:
            entry.blocked_until = now + self.window
            console.print(f"[yellow][RATE_LIMIT] Client {client_id} blocked[/yellow]")
            return False, 0

        entry.requests.append(now)
        return True, self.max_requests - len(entry.requests)

    def reset(self) -> None:
        self._clients.clear()


def get_client_id(request: Request) -> str:
    """Extract client ID from request (IP-based)."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


# Global rate limiter
rate_limiter = RateLimiter()


# -----------------------------------------------------------------------------
# FASTAPI DEPENDENCIES
# -----------------------------------------------------------------------------
async def require_rate_limit(request: Request) -> None:
    """Reject the request with 429 once the client exceeds its window."""
    allowed, _remaining = rate_limiter.is_allowed(get_client_id(request))
    if not allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Rate limit exceeded. Please wait before retrying.",
        )


async def get_current_user(request: Request) -> str:
    """
    The caller's opaque user id, as forwarded by the auth gateway.

    Raises:
        HTTPException: 401 when the header is missing or blank
    """
    user_id = request.headers.get(USER_HEADER, "").strip()
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return user_id
