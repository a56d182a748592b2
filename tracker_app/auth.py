"""
Authentication gate and endpoint guards.

Every request passes through :func:`load_principal` before its view runs.
The gate looks for a bearer token in the ``Authorization`` header, then in
the ``token`` cookie, and stores the decoded identity on ``flask.g``:

* no token, or a token that fails validation -> ``g.principal = None``
  (the request continues anonymously; guards decide later);
* a valid token whose claims cannot be decoded -> 401 straight away, the
  view is never reached.

Views opt into protection with ``@login_required`` or
``@role_required(Role.ADMIN)``.

Key Concepts Demonstrated:
- Request-scoped identity via ``flask.g``
- Decorator pattern for endpoint authorization
- Cookie transport with HttpOnly / SameSite attributes
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from functools import wraps

from flask import Flask, Response, current_app, g, request

from .errors import Forbidden, Unauthenticated, error_response
from .jwt import Principal, TokenError, TokenService
from .models import Role

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def token_service() -> TokenService:
    """Return the application's shared :class:`TokenService`."""
    return current_app.extensions["token_service"]


def current_principal() -> Principal | None:
    """Return the principal for the current request, or ``None`` if anonymous."""
    return g.get("principal")


def extract_request_token() -> str | None:
    """
    Find the raw token for the current request.

    The ``Authorization: Bearer <token>`` header wins over the cookie.
    Blank values are treated as absent.
    """
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith(BEARER_PREFIX):
        token = auth_header[len(BEARER_PREFIX):].strip()
        if token:
            return token

    cookie_token = request.cookies.get(current_app.config["AUTH_COOKIE_NAME"], "").strip()
    return cookie_token or None


def load_principal() -> tuple[Response, int] | None:
    """Resolve ``g.principal`` for the current request (``before_request`` hook)."""
    g.principal = None

    token = extract_request_token()
    if token is None:
        return None

    service = token_service()
    if not service.validate(token):
        logger.info("Ignoring invalid or expired token on %s %s", request.method, request.path)
        return None

    try:
        g.principal = service.extract_principal(token)
    except TokenError as exc:
        logger.warning("Rejecting token with unusable claims on %s: %s", request.path, exc)
        return error_response(401, "TOKEN_ERROR", "Token Error: invalid token claims.")
    return None


def init_auth(app: Flask) -> None:
    """Register the authentication gate on *app*."""
    app.before_request(load_principal)


def login_required(view_func: Callable):
    """
    Decorator that rejects anonymous requests with 401.

    The wrapped view can rely on :func:`current_principal` returning a
    :class:`Principal`.
    """

    @wraps(view_func)
    def wrapper(*args, **kwargs):
        if current_principal() is None:
            raise Unauthenticated("Authentication required.")
        return view_func(*args, **kwargs)

    return wrapper


def role_required(*roles: Role):
    """
    Decorator factory limiting a view to principals holding one of *roles*.

    Anonymous requests get 401, authenticated requests with another role 403.
    """
    allowed = {role.value for role in roles}

    def decorator(view_func: Callable):
        @wraps(view_func)
        def wrapper(*args, **kwargs):
            principal = current_principal()
            if principal is None:
                raise Unauthenticated("Authentication required.")
            if not allowed.intersection(principal.authorities):
                raise Forbidden("You do not have permission to perform this action.")
            return view_func(*args, **kwargs)

        return wrapper

    return decorator


def require_self_or_admin(person_id: int) -> Principal:
    """
    Ensure the current principal is *person_id* or an administrator.

    Raises:
        Unauthenticated: If the request is anonymous.
        Forbidden: If the principal is another non-admin person.
    """
    principal = current_principal()
    if principal is None:
        raise Unauthenticated("Authentication required.")
    if principal.person_id != person_id and not principal.is_admin:
        raise Forbidden("You do not have permission to perform this action.")
    return principal


def set_token_cookie(response: Response, token: str) -> Response:
    """Attach the auth cookie; its max-age equals the token lifetime."""
    response.set_cookie(
        current_app.config["AUTH_COOKIE_NAME"],
        token,
        max_age=token_service().lifetime_seconds,
        path="/",
        httponly=True,
        secure=current_app.config["AUTH_COOKIE_SECURE"],
        samesite=current_app.config["AUTH_COOKIE_SAMESITE"],
    )
    return response


def clear_token_cookie(response: Response) -> Response:
    """Overwrite the auth cookie with an empty value that expires immediately."""
    response.set_cookie(
        current_app.config["AUTH_COOKIE_NAME"],
        "",
        max_age=0,
        path="/",
        httponly=True,
        secure=current_app.config["AUTH_COOKIE_SECURE"],
        samesite=current_app.config["AUTH_COOKIE_SAMESITE"],
    )
    return response
