"""
HTTP blueprints for the task tracker.

The helpers here are shared by every blueprint: building services on top
of the request's database session and coercing raw path/query strings
into typed values with the standard mismatch errors.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import TypeVar

from flask import current_app

from .. import db
from ..errors import MismatchError
from ..repositories import PersonRepository, TaskRepository
from ..services import PersonService, TaskService

E = TypeVar("E", bound=Enum)

INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")
MIN_INT64 = -(2**63)
MAX_INT64 = 2**63 - 1


def person_service() -> PersonService:
    return PersonService(PersonRepository(db.session))


def task_service() -> TaskService:
    return TaskService(
        TaskRepository(db.session),
        person_service(),
        page_size=current_app.config["PAGE_SIZE"],
        admin_overrides_ownership=current_app.config["ADMIN_OVERRIDES_OWNERSHIP"],
    )


def parse_int(name: str, value: str | None) -> int:
    """
    Convert a path or query value to ``int``.

    Raises:
        MismatchError: 400 ``MISMATCH: INTEGER IS NOT STRING`` for
            anything that is not an optionally signed ASCII decimal integer
            within the signed 64-bit range.
    """
    text = (value or "").strip()
    if INTEGER_PATTERN.fullmatch(text):
        number = int(text)
        if MIN_INT64 <= number <= MAX_INT64:
            return number
    raise MismatchError.for_type(name, value, "Integer")


def parse_enum(value: str | None, enum_cls: type[E]) -> E:
    """
    Convert a path or query value to a member of *enum_cls*.

    Raises:
        MismatchError: 404 ``ENUM_ARG_MISMATCH`` for unknown values.
    """
    try:
        return enum_cls(value)
    except ValueError as exc:
        raise MismatchError.for_enum(value, enum_cls) from exc
