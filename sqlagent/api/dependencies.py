"""
FastAPI dependencies shared by the route modules.

The application context lives on ``app.state.agent_context``; identity and
admin privilege are resolved by upstream middleware and exposed on
``request.state.user``.
"""

import logging

from fastapi import HTTPException, Request, status
from slowapi.util import get_remote_address

from sqlagent.pipeline.context import AgentContext

logger = logging.getLogger(__name__)

ADMIN_REQUIRED_MESSAGE = "Access denied. Admin privileges required."
RATE_LIMITED_MESSAGE = "Too many requests. Please wait before making another query."


def get_agent_context(request: Request) -> AgentContext:
    """Return the context built at startup."""
    context = getattr(request.app.state, "agent_context", None)
    if context is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="SQL agent not initialized",
        )
    return context


def _is_admin(user: object) -> bool:
    if user is None:
        return False
    if isinstance(user, dict):
        return bool(user.get("is_admin") or user.get("isAdmin"))
    return bool(getattr(user, "is_admin", False))


def require_admin(request: Request) -> None:
    """Reject callers whose upstream identity is not an administrator."""
    if not _is_admin(getattr(request.state, "user", None)):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=ADMIN_REQUIRED_MESSAGE)


def is_rate_limited(request: Request, context: AgentContext) -> bool:
    """Count this request against the caller's window; True when over the limit."""
    if not context.settings.rate_limit.enabled:
        return False
    if getattr(request.state, "rate_limit_bypass", False):
        return False

    if context.rate_limiter.hit(request):
        return False

    client_id = get_remote_address(request)
    logger.warning(
        f"Rate limit exceeded for {client_id}",
        extra={"client": client_id, "retry_after": context.rate_limiter.retry_after(request)},
    )
    return True
