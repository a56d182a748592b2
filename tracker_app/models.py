"""
Database models for the task tracker.

This module defines the SQLAlchemy models representing persons (the
accounts that log in) and the tasks they own. Each model maps to a
database table and exposes a ``to_dict`` view used as the JSON response
body.

Key Concepts Demonstrated:
- ``str, Enum`` closed sets for roles and tracking statuses
- Werkzeug password hashing (the hash is never serialised)
- A non-nullable foreign key from task to owner with ORM-level cascade
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from werkzeug.security import check_password_hash, generate_password_hash

from . import db


class Role(str, Enum):
    """Account role. Also the single granted authority of a principal."""

    ADMIN = "ADMIN"
    USER = "USER"

    @classmethod
    def parse(cls, value: Any) -> "Role":
        """
        Convert a raw value into a ``Role``.

        Raises:
            ValueError: If *value* is not exactly one of the role names.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Invalid role: {value!r}")
        return cls(value)


class TaskStatus(str, Enum):
    """Enumeration of possible task tracking statuses."""

    TO_DO = "TO_DO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"

    @classmethod
    def names(cls) -> list[str]:
        return [status.value for status in cls]


class Person(db.Model):
    """
    Person model for authentication and identity.

    Attributes:
        person_id: Auto-incrementing primary key.
        full_name: Display name (8-100 characters).
        role: ``Role`` name, ``ADMIN`` or ``USER``.
        username: Unique login name (8-50 characters).
        password_hash: Werkzeug-generated hash of the password.
        tasks: Tasks owned by this person; deleted with the person.
    """

    __tablename__ = "persons"

    person_id: int = db.Column(db.Integer, primary_key=True)
    full_name: str = db.Column(db.String(100), nullable=False)
    role: str = db.Column(db.String(8), nullable=False, default=Role.USER.value)
    # Looked up on every login
    username: str = db.Column(db.String(50), unique=True, nullable=False, index=True)
    password_hash: str = db.Column(db.String(256), nullable=False)

    tasks = db.relationship(
        "Task",
        back_populates="owner",
        cascade="all, delete-orphan",
    )

    def set_password(self, password: str) -> None:
        """Hash and store a plain-text password."""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Return ``True`` if *password* matches the stored hash."""
        return check_password_hash(self.password_hash, password)

    def to_dict(self) -> dict[str, Any]:
        """
        Return the public person view.

        ``password_hash`` is intentionally excluded so this output can be
        returned directly in JSON responses.
        """
        return {
            "personId": self.person_id,
            "fullName": self.full_name,
            "role": self.role,
            "username": self.username,
        }

    def __repr__(self) -> str:
        return f"<Person {self.person_id}: {self.username}>"


class Task(db.Model):
    """
    Task model owned by exactly one person.

    Attributes:
        id: Auto-incrementing primary key.
        title: Short summary of the task (max 100 characters).
        description: Optional longer text.
        tracking_status: Current ``TaskStatus`` name.
        person_id: Owner reference, set once at creation.
    """

    __tablename__ = "tasks"

    id: int = db.Column(db.Integer, primary_key=True)
    title: str = db.Column(db.String(100), nullable=False)
    description: str | None = db.Column(db.Text, nullable=True)
    tracking_status: str = db.Column(
        db.String(20),
        nullable=False,
        default=TaskStatus.TO_DO.value
    )
    person_id: int = db.Column(
        db.Integer,
        db.ForeignKey("persons.person_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    owner = db.relationship("Person", back_populates="tasks")

    def to_dict(self) -> dict[str, Any]:
        """Convert the task to its JSON view."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "trackingStatus": self.tracking_status,
            "userId": self.person_id,
            "username": self.owner.username if self.owner is not None else None,
        }

    def __repr__(self) -> str:
        return f"<Task {self.id}: {self.title}>"
