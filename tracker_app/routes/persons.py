"""
Person account endpoints.

Endpoints:
    GET    /api/persons/<id>              - Person view (self or ADMIN)
    GET    /api/persons/all               - Every person (ADMIN)
    GET    /api/persons/paginated/<page>  - One page of persons (ADMIN)
    POST   /api/persons/login             - Check credentials, no cookie (public)
    POST   /api/persons/add-admin         - Create an ADMIN (ADMIN)
    POST   /api/persons/register-user     - Create a USER, no cookie (public)
    PATCH  /api/persons/<id>/profile      - Change name/username (self or ADMIN)
    PUT    /api/persons/<id>/password     - Change own password (self only)
    DELETE /api/persons/<id>              - Delete person and their tasks (ADMIN)

Ids arrive as plain strings and are coerced by :func:`parse_int`, so a
non-numeric id produces the ``MISMATCH`` error rather than a bare 404.
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response, current_app, jsonify

from ..auth import current_principal, login_required, require_self_or_admin, role_required
from ..errors import Forbidden
from ..models import Role
from ..validation import (
    read_json_body,
    validate_login,
    validate_password_change,
    validate_profile_patch,
    validate_registration,
)
from . import parse_int, person_service

logger = logging.getLogger(__name__)

persons_bp = Blueprint("persons_api", __name__)


@persons_bp.route("/<person_id>", methods=["GET"])
@login_required
def get_person(person_id: str) -> tuple[Response, int]:
    pid = parse_int("id", person_id)
    require_self_or_admin(pid)
    return jsonify(person_service().find_by_id(pid)), 200


@persons_bp.route("/all", methods=["GET"])
@role_required(Role.ADMIN)
def get_all_persons() -> tuple[Response, int]:
    return jsonify(person_service().find_all()), 200


@persons_bp.route("/paginated/<page>", methods=["GET"])
@role_required(Role.ADMIN)
def get_persons_page(page: str) -> tuple[Response, int]:
    result = person_service().find_all_paginated(
        parse_int("pageNumber", page), current_app.config["PAGE_SIZE"]
    )
    return jsonify(result.to_dict()), 200


@persons_bp.route("/login", methods=["POST"])
def login() -> tuple[Response, int]:
    """Verify credentials and return the person view without starting a session."""
    credentials = validate_login(read_json_body())
    view = person_service().login(credentials["username"], credentials["password"])
    return jsonify(view), 200


@persons_bp.route("/add-admin", methods=["POST"])
@role_required(Role.ADMIN)
def add_admin() -> tuple[Response, int]:
    registration = validate_registration(read_json_body())
    view = person_service().create(registration, Role.ADMIN)
    logger.info("Admin %s created admin %s", current_principal().person_id, view["personId"])
    return jsonify(view), 200


@persons_bp.route("/register-user", methods=["POST"])
def register_user() -> tuple[Response, int]:
    registration = validate_registration(read_json_body())
    return jsonify(person_service().create(registration, Role.USER)), 200


@persons_bp.route("/<person_id>/profile", methods=["PATCH"])
@login_required
def patch_profile(person_id: str) -> tuple[Response, int]:
    pid = parse_int("id", person_id)
    require_self_or_admin(pid)
    patch = validate_profile_patch(read_json_body())
    return jsonify(person_service().patch_profile(pid, patch)), 200


@persons_bp.route("/<person_id>/password", methods=["PUT"])
@login_required
def change_password(person_id: str) -> tuple[Response, int]:
    """Only the account holder may change a password; admins included."""
    pid = parse_int("id", person_id)
    if current_principal().person_id != pid:
        raise Forbidden("You can only change your own password.")
    body = validate_password_change(read_json_body())
    view = person_service().change_password(pid, body["currentPassword"], body["newPassword"])
    return jsonify(view), 200


@persons_bp.route("/<person_id>", methods=["DELETE"])
@role_required(Role.ADMIN)
def delete_person(person_id: str) -> tuple[str, int]:
    person_service().delete(parse_int("id", person_id))
    return "", 204
