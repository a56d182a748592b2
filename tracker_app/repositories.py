"""
Persistence layer for persons and tasks.

Repositories are the only code that builds SQLAlchemy statements. They
take a session in their constructor (normally ``db.session``) so services
never touch the ORM directly, and they commit on every write: each
mutation is a single-row operation and relies on the database for
atomicity.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from .models import Person, Task, TaskStatus

# Largest OFFSET the database accepts (signed 64-bit)
MAX_OFFSET = 2**63 - 1

T = TypeVar("T")
U = TypeVar("U")


@dataclass
class Page(Generic[T]):
    """
    One page of a query result.

    ``number`` is the 0-based page index and ``size`` the requested page
    size; ``total_elements`` counts every matching row, not just this page.
    """

    content: list[T]
    number: int
    size: int
    total_elements: int
    total_pages: int = field(init=False)

    def __post_init__(self) -> None:
        self.total_pages = math.ceil(self.total_elements / self.size) if self.size else 0

    def map(self, func_: Callable[[T], U]) -> "Page[U]":
        return Page(
            content=[func_(item) for item in self.content],
            number=self.number,
            size=self.size,
            total_elements=self.total_elements,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": self.content,
            "totalElements": self.total_elements,
            "totalPages": self.total_pages,
            "number": self.number,
            "size": self.size,
            "numberOfElements": len(self.content),
            "first": self.number == 0,
            "last": self.number >= self.total_pages - 1,
            "empty": not self.content,
        }


def _paginate(session: Session, stmt: Select, page: int, size: int) -> Page:
    """Run *stmt* for one page and count the total number of matching rows."""
    total = session.scalar(select(func.count()).select_from(stmt.order_by(None).subquery()))
    items = session.scalars(stmt.limit(size).offset(page * size)).all()
    return Page(content=list(items), number=page, size=size, total_elements=total or 0)


class PersonRepository:
    """Data access for :class:`Person` rows."""

    def __init__(self, session: Session):
        self.session = session

    def find_by_id(self, person_id: int) -> Person | None:
        return self.session.get(Person, person_id)

    def find_by_username(self, username: str) -> Person | None:
        return self.session.scalar(select(Person).where(Person.username == username))

    def exists_by_username(self, username: str) -> bool:
        return self.find_by_username(username) is not None

    def exists_by_username_excluding_id(self, username: str, person_id: int) -> bool:
        stmt = select(Person.person_id).where(
            Person.username == username, Person.person_id != person_id
        )
        return self.session.scalar(stmt) is not None

    def find_all(self) -> list[Person]:
        return list(self.session.scalars(select(Person).order_by(Person.person_id)).all())

    def find_all_paginated(self, page: int, size: int) -> Page[Person]:
        return _paginate(self.session, select(Person).order_by(Person.person_id), page, size)

    def save(self, person: Person) -> Person:
        self.session.add(person)
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise
        return person

    def delete(self, person: Person) -> None:
        self.session.delete(person)
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise


class TaskRepository:
    """Data access for :class:`Task` rows."""

    def __init__(self, session: Session):
        self.session = session

    def find_by_id(self, task_id: int) -> Task | None:
        return self.session.get(Task, task_id)

    def exists_by_id(self, task_id: int) -> bool:
        return self.find_by_id(task_id) is not None

    def find_tasks(
        self,
        page: int,
        size: int,
        *,
        owner_id: int | None = None,
        status: TaskStatus | None = None,
        title: str | None = None,
    ) -> Page[Task]:
        """
        Return one page of tasks matching every given filter.

        Filters left as ``None`` are not applied; ``title`` is a
        case-insensitive substring match. Results are ordered by id.
        """
        stmt = select(Task)
        if owner_id is not None:
            stmt = stmt.where(Task.person_id == owner_id)
        if status is not None:
            stmt = stmt.where(Task.tracking_status == TaskStatus(status).value)
        if title:
            stmt = stmt.where(Task.title.icontains(title, autoescape=True))
        return _paginate(self.session, stmt.order_by(Task.id), page, size)

    def save(self, task: Task) -> Task:
        self.session.add(task)
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise
        return task

    def delete(self, task: Task) -> None:
        self.session.delete(task)
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise
