"""
REST API endpoints for tasks.

Endpoints:
    GET    /api/tasks/paginated/<page>                    - All tasks, filterable (ADMIN)
    GET    /api/tasks/status/<status>/paginated/<page>    - Tasks with one status (ADMIN)
    GET    /api/tasks/my-tasks/paginated/<page>           - Caller's tasks, filterable
    GET    /api/tasks/my-tasks/filter/paginated/<page>    - Caller's tasks by ``status``
    GET    /api/tasks/<id>                                - Single task
    POST   /api/tasks                                     - Create a task for the caller
    PUT    /api/tasks/<id>                                - Update an owned task
    DELETE /api/tasks/<id>                                - Delete an owned task
    GET    /api/health                                    - Health check (public)

Listing endpoints return the page envelope built by ``Page.to_dict``.
Optional query filters: ``status``, ``title`` and (admin listing only)
``userId``.
"""

from __future__ import annotations

import logging
import os

from flask import Blueprint, Response, jsonify, request

from ..auth import current_principal, login_required, role_required
from ..errors import MismatchError
from ..models import Role, TaskStatus
from ..validation import read_json_body, validate_task
from . import parse_enum, parse_int, task_service

logger = logging.getLogger(__name__)

tasks_bp = Blueprint("tasks_api", __name__)
health_bp = Blueprint("health_api", __name__)


# =====================================================================
# Helper Functions
# =====================================================================


def _status_arg(required: bool = False) -> TaskStatus | None:
    raw = request.args.get("status", "").strip()
    if not raw:
        if required:
            raise MismatchError.for_enum(None, TaskStatus)
        return None
    return parse_enum(raw, TaskStatus)


def _title_arg() -> str | None:
    title = request.args.get("title", "").strip()
    return title or None


# =====================================================================
# API Endpoints
# =====================================================================


@health_bp.route("/health", methods=["GET"])
def health_check() -> tuple[Response, int]:
    """Public liveness probe."""
    return jsonify(
        {
            "status": "healthy",
            "service": "tasks",
            "environment": os.getenv("ENVIRONMENT", "unknown"),
        }
    ), 200


@tasks_bp.route("/paginated/<page>", methods=["GET"])
@role_required(Role.ADMIN)
def get_all_tasks(page: str) -> tuple[Response, int]:
    owner_raw = request.args.get("userId")
    owner_id = parse_int("userId", owner_raw) if owner_raw else None
    result = task_service().search_tasks(
        parse_int("pageNumber", page),
        owner_id=owner_id,
        status=_status_arg(),
        title=_title_arg(),
    )
    return jsonify(result.to_dict()), 200


@tasks_bp.route("/status/<status>/paginated/<page>", methods=["GET"])
@role_required(Role.ADMIN)
def get_tasks_by_status(status: str, page: str) -> tuple[Response, int]:
    result = task_service().get_tasks_by_status(
        parse_enum(status, TaskStatus), parse_int("pageNumber", page)
    )
    return jsonify(result.to_dict()), 200


@tasks_bp.route("/my-tasks/paginated/<page>", methods=["GET"])
@login_required
def get_my_tasks(page: str) -> tuple[Response, int]:
    result = task_service().search_tasks(
        parse_int("pageNumber", page),
        owner_id=current_principal().person_id,
        status=_status_arg(),
        title=_title_arg(),
    )
    return jsonify(result.to_dict()), 200


@tasks_bp.route("/my-tasks/filter/paginated/<page>", methods=["GET"])
@login_required
def get_my_tasks_by_status(page: str) -> tuple[Response, int]:
    """The ``status`` query parameter is mandatory here."""
    result = task_service().get_tasks_by_user_id_and_status(
        current_principal().person_id,
        _status_arg(required=True),
        parse_int("pageNumber", page),
    )
    return jsonify(result.to_dict()), 200


@tasks_bp.route("/<task_id>", methods=["GET"])
@login_required
def get_task(task_id: str) -> tuple[Response, int]:
    return jsonify(task_service().get_task_by_id(parse_int("id", task_id))), 200


@tasks_bp.route("", methods=["POST"])
@login_required
def create_task() -> tuple[Response, int]:
    """Create a task owned by the caller. Any supplied status is ignored."""
    details = validate_task(read_json_body())
    task = task_service().create_task(details, current_principal().person_id)
    return jsonify(task), 201


@tasks_bp.route("/<task_id>", methods=["PUT"])
@login_required
def update_task(task_id: str) -> tuple[Response, int]:
    tid = parse_int("id", task_id)
    details = validate_task(read_json_body())
    task = task_service().update_task(tid, details, current_principal())
    return jsonify(task), 200


@tasks_bp.route("/<task_id>", methods=["DELETE"])
@login_required
def delete_task(task_id: str) -> tuple[str, int]:
    task_service().delete_task(parse_int("id", task_id), current_principal())
    return "", 204
