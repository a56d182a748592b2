"""
Session endpoints backed by the ``token`` cookie.

Endpoints:
    POST /api/auth/register  -- Create a USER account and log it in.
    POST /api/auth/login     -- Verify credentials and set the cookie.
    POST /api/auth/logout    -- Expire the cookie.
    GET  /api/auth/me        -- Person view for the current token.
    GET  /api/user/me        -- Lightweight "am I logged in?" probe.

The token never appears in a response body; browsers only see it as an
HttpOnly cookie.
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response, jsonify

from ..auth import clear_token_cookie, current_principal, set_token_cookie, token_service
from ..errors import PersonNotFound, Unauthenticated
from ..jwt import Principal
from ..models import Role
from ..validation import read_json_body, validate_login, validate_registration
from . import person_service

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth_api", __name__)
user_bp = Blueprint("user_api", __name__)


def _logged_in_response(view: dict) -> Response:
    token = token_service().issue(Principal.from_view(view))
    return set_token_cookie(jsonify(view), token)


@auth_bp.route("/register", methods=["POST"])
def register() -> tuple[Response, int]:
    """Self-registration; the role is always USER."""
    registration = validate_registration(read_json_body())
    view = person_service().create(registration, Role.USER)
    return _logged_in_response(view), 200


@auth_bp.route("/login", methods=["POST"])
def login() -> tuple[Response, int]:
    credentials = validate_login(read_json_body())
    view = person_service().login(credentials["username"], credentials["password"])
    return _logged_in_response(view), 200


@auth_bp.route("/logout", methods=["POST"])
def logout() -> tuple[Response, int]:
    response = jsonify({"message": "Logged out successfully."})
    return clear_token_cookie(response), 200


@auth_bp.route("/me", methods=["GET"])
def me() -> tuple[Response, int]:
    """
    Return the person behind the current token.

    A token whose person has since been deleted is treated the same as no
    token at all.
    """
    principal = current_principal()
    if principal is None:
        raise Unauthenticated("Authentication required.")
    try:
        view = person_service().find_by_id(principal.person_id)
    except PersonNotFound as exc:
        logger.info("Token for deleted person %s presented to /me", principal.person_id)
        raise Unauthenticated("Authentication required.") from exc
    return jsonify(view), 200


@user_bp.route("/me", methods=["GET"])
def user_me() -> tuple[Response, int]:
    principal = current_principal()
    if principal is None:
        return jsonify({"authenticated": "false"}), 200
    return jsonify(
        {
            "authenticated": "true",
            "username": principal.username,
            "role": principal.role.value,
        }
    ), 200
