"""
Request payload validation.

Each ``validate_*`` function checks a parsed JSON body against the field
rules of one endpoint and returns a cleaned dictionary. All violations are
collected, so a single :class:`~tracker_app.errors.ValidationError` carries
one message per offending field.
"""

from __future__ import annotations

from typing import Any

from flask import request

from .errors import InvalidInput, ValidationError
from .models import TaskStatus

FULL_NAME_MESSAGE = "Full name must be a minimum of 8 - 100 characters only."
USERNAME_MESSAGE = "Username must be a minimum of 8 - 50 characters only."
PASSWORD_MESSAGE = "Password must be a minimum of 8 characters."
TITLE_LENGTH_MESSAGE = "Title must be under 100 characters"

FULL_NAME_LENGTH = (8, 100)
USERNAME_LENGTH = (8, 50)


def read_json_body() -> dict[str, Any]:
    """
    Return the request body as a dict.

    Raises:
        InvalidInput: If the body is missing, not JSON, or not a JSON object.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidInput("Request body must be a JSON object.")
    return data


def _check_length(
    errors: dict[str, str],
    data: dict[str, Any],
    field: str,
    *,
    min_len: int,
    max_len: int | None,
    message: str,
    required: bool,
    null_message: str | None = None,
    strip: bool = False,
) -> None:
    value = data.get(field)
    if value is None:
        if required:
            errors[field] = null_message or message
        return
    if not isinstance(value, str):
        errors[field] = f"'{field}' must be a string"
        return
    if strip:
        value = value.strip()
    if len(value) < min_len or (max_len is not None and len(value) > max_len):
        errors[field] = message


def validate_registration(data: dict[str, Any]) -> dict[str, str]:
    """Validate a person creation body (``fullName``, ``username``, ``password``)."""
    errors: dict[str, str] = {}
    _check_length(errors, data, "fullName", min_len=FULL_NAME_LENGTH[0], max_len=FULL_NAME_LENGTH[1],
                  message=FULL_NAME_MESSAGE, required=True,
                  null_message="Full name must not be null.", strip=True)
    _check_length(errors, data, "username", min_len=USERNAME_LENGTH[0], max_len=USERNAME_LENGTH[1],
                  message=USERNAME_MESSAGE, required=True,
                  null_message="Username must not be null.", strip=True)
    _check_length(errors, data, "password", min_len=8, max_len=None,
                  message=PASSWORD_MESSAGE, required=True,
                  null_message="Password must not be null.")
    if errors:
        raise ValidationError(errors)
    return {
        "fullName": data["fullName"].strip(),
        "username": data["username"].strip(),
        "password": data["password"],
    }


def validate_login(data: dict[str, Any]) -> dict[str, str]:
    """Validate a login body. Only presence is checked; wrong values are a credentials error."""
    errors: dict[str, str] = {}
    for field, label in (("username", "Username"), ("password", "Password")):
        if not isinstance(data.get(field), str):
            errors[field] = f"{label} must not be null."
    if errors:
        raise ValidationError(errors)
    return {"username": data["username"].strip(), "password": data["password"]}


def validate_profile_patch(data: dict[str, Any]) -> dict[str, str]:
    """
    Validate a profile patch.

    Absent (or ``null``) fields are left out of the result, so an empty
    result means "change nothing". Lengths are checked after trimming.
    """
    errors: dict[str, str] = {}
    _check_length(errors, data, "fullName", min_len=FULL_NAME_LENGTH[0], max_len=FULL_NAME_LENGTH[1],
                  message=FULL_NAME_MESSAGE, required=False, strip=True)
    _check_length(errors, data, "username", min_len=USERNAME_LENGTH[0], max_len=USERNAME_LENGTH[1],
                  message=USERNAME_MESSAGE, required=False, strip=True)
    if errors:
        raise ValidationError(errors)
    return {
        field: data[field].strip()
        for field in ("fullName", "username")
        if data.get(field) is not None
    }


def validate_password_change(data: dict[str, Any]) -> dict[str, str]:
    """Validate ``currentPassword`` / ``newPassword``."""
    errors: dict[str, str] = {}
    _check_length(errors, data, "currentPassword", min_len=8, max_len=None,
                  message="Current password must be a minimum of 8 characters.",
                  required=True, null_message="Current password must not be null.")
    _check_length(errors, data, "newPassword", min_len=8, max_len=None,
                  message="New password must be a minimum of 8 characters.",
                  required=True, null_message="New password must not be null.")
    if errors:
        raise ValidationError(errors)
    return {"currentPassword": data["currentPassword"], "newPassword": data["newPassword"]}


def validate_task(data: dict[str, Any]) -> dict[str, Any]:
    """
    Validate a task body (``title``, optional ``description`` and ``trackingStatus``).

    Returns:
        Cleaned values; ``trackingStatus`` is a :class:`TaskStatus` or ``None``.
    """
    errors: dict[str, str] = {}

    title = data.get("title")
    if not isinstance(title, str) or not title.strip():
        errors["title"] = "Title is required"
    elif len(title) > 100:
        errors["title"] = TITLE_LENGTH_MESSAGE

    description = data.get("description")
    if description is not None and not isinstance(description, str):
        errors["description"] = "Description must be a string"

    status = data.get("trackingStatus")
    if status is not None and status not in TaskStatus.names():
        errors["trackingStatus"] = f"Invalid status. Must be one of: {TaskStatus.names()}"

    if errors:
        raise ValidationError(errors)
    return {
        "title": title.strip(),
        "description": description,
        "trackingStatus": TaskStatus(status) if status is not None else None,
    }
