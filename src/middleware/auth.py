# SPDX-FileCopyrightText: 2026 Andrew Grimberg <tykeal@bardicgrove.org>
# SPDX-License-Identifier: Apache-2.0
"""Authentication middleware for identity-provider bearer tokens.

Tokens are Fernet tokens whose payload is the user ID, encrypted with a
key shared with the identity provider. They are opaque to clients.
"""

import logging
from collections.abc import Awaitable, Callable

from cryptography.fernet import Fernet, InvalidToken
from fastapi import Request, status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from src.config import get_settings
from src.middleware.error_handler import create_error_response

logger = logging.getLogger(__name__)

AUTHORIZATION_HEADER = "Authorization"
# Development-only identity header honoured in standalone mode
USER_ID_HEADER = "X-User-Id"

# Paths that don't require authentication
PUBLIC_PATHS = frozenset(
    {
        "/health",
        "/ical",
        "/docs",
        "/redoc",
        "/openapi.json",
    }
)


def is_public_path(path: str) -> bool:
    """Check if a path is public (no auth required).

    Args:
        path: Request path to check.

    Returns:
        True if path is public.
    """
    if path in PUBLIC_PATHS:
        return True

    # Availability feeds are public
    return path.startswith("/ical/")


def issue_token(user_id: str, key: str | None = None) -> str:
    """Issue a bearer token for a user, as the identity provider does.

    Args:
        user_id: Subject of the token.
        key: Fernet key. Defaults to the configured auth secret.

    Returns:
        URL-safe token string.
    """
    fernet = Fernet(key or get_settings().auth_secret_key)
    return fernet.encrypt(user_id.encode()).decode()


def verify_token(token: str, key: str, ttl: int) -> str | None:
    """Verify a bearer token and extract its user ID.

    Args:
        token: Token from the Authorization header.
        key: Fernet key shared with the identity provider.
        ttl: Maximum token age in seconds.

    Returns:
        User ID, or None if the token is invalid, expired or empty.
    """
    try:
        user_id = Fernet(key).decrypt(token.encode(), ttl=ttl).decode()
    except (InvalidToken, ValueError):
        return None
    return user_id or None


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get(AUTHORIZATION_HEADER, "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """Middleware resolving the authenticated user of each request.

    Public paths pass through. Other requests need a valid bearer token,
    or in standalone mode an X-User-Id header.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Process request and enforce authentication.

        Args:
            request: Incoming HTTP request.
            call_next: Next middleware or route handler.

        Returns:
            HTTP response, 401 when no valid identity is presented.
        """
        settings = get_settings()
        path = request.url.path

        if is_public_path(path):
            return await call_next(request)

        user_id: str | None = None
        if settings.standalone_mode:
            user_id = request.headers.get(USER_ID_HEADER) or None
            if user_id:
                logger.debug("Standalone mode: user %s from header", user_id)

        if user_id is None:
            token = _bearer_token(request)
            if token and settings.auth_secret_key:
                user_id = verify_token(
                    token, settings.auth_secret_key, settings.auth_token_ttl_seconds
                )
            elif token:
                logger.error("Bearer token received but AUTH_SECRET_KEY is not set")

        if not user_id:
            logger.warning("Unauthorized access attempt to %s", path)
            response = create_error_response(
                status.HTTP_401_UNAUTHORIZED,
                "Authentication required",
                "unauthorized",
            )
            response.headers["WWW-Authenticate"] = "Bearer"
            return response

        request.state.user_id = user_id
        logger.debug("Authenticated request from user %s to %s", user_id, path)

        return await call_next(request)


def get_current_user(request: Request) -> str | None:
    """Get the current authenticated user ID from request.

    Args:
        request: Current HTTP request.

    Returns:
        User ID string or None if not authenticated.
    """
    return getattr(request.state, "user_id", None)
