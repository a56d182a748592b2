"""
Business rules for person accounts.

``PersonService`` owns password verification and username uniqueness.
It never decides a person's role: the endpoint creating the account
passes it in (self-registration forces USER, the admin endpoint ADMIN).
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError

from ..errors import BadCredentials, DuplicateUsername, InvalidInput, PersonNotFound
from ..models import Person, Role
from ..repositories import MAX_OFFSET, Page, PersonRepository
from ..validation import FULL_NAME_LENGTH, FULL_NAME_MESSAGE, USERNAME_LENGTH, USERNAME_MESSAGE

logger = logging.getLogger(__name__)

# Same text for unknown username and wrong password.
BAD_LOGIN_MESSAGE = "You have entered a wrong username or password. Please try again."
USERNAME_TAKEN_MESSAGE = "Username is already taken."


class PersonService:
    """CRUD and login for :class:`Person` records, returning person views."""

    def __init__(self, persons: PersonRepository):
        self.persons = persons

    def _get(self, person_id: int) -> Person:
        person = self.persons.find_by_id(person_id)
        if person is None:
            raise PersonNotFound(f"Person with id {person_id} not found")
        return person

    def find_by_id(self, person_id: int) -> dict[str, Any]:
        return self._get(person_id).to_dict()

    def find_all(self) -> list[dict[str, Any]]:
        """Return every person; an empty store is reported as ``PersonNotFound``."""
        people = [person.to_dict() for person in self.persons.find_all()]
        if not people:
            raise PersonNotFound("No users found")
        return people

    def find_all_paginated(self, page: int, size: int) -> Page[dict[str, Any]]:
        """Return one page of persons. Unlike :meth:`find_all`, an empty page is not an error."""
        if page < 0:
            raise InvalidInput("Page index must not be less than zero.")
        if page * size > MAX_OFFSET:
            raise InvalidInput("Page index is too large.")
        return self.persons.find_all_paginated(page, size).map(Person.to_dict)

    def login(self, username: str, password: str) -> dict[str, Any]:
        person = self.persons.find_by_username(username)
        if person is None or not person.check_password(password):
            logger.warning("Failed login attempt for username=%s", username)
            raise BadCredentials(BAD_LOGIN_MESSAGE)
        logger.info("Person %s logged in", person.person_id)
        return person.to_dict()

    def create(self, registration: dict[str, Any], role: Role) -> dict[str, Any]:
        """
        Persist a new person with a hashed password.

        Args:
            registration: ``fullName``, ``username`` and plain ``password``.
            role: Role chosen by the calling endpoint.

        Raises:
            DuplicateUsername: If the username already exists.
        """
        username = registration["username"]
        if self.persons.exists_by_username(username):
            raise DuplicateUsername(USERNAME_TAKEN_MESSAGE)

        person = Person(
            full_name=registration["fullName"],
            username=username,
            role=Role.parse(role).value,
        )
        person.set_password(registration["password"])
        try:
            self.persons.save(person)
        except IntegrityError as exc:
            # Lost a race with a concurrent registration of the same username
            raise DuplicateUsername(USERNAME_TAKEN_MESSAGE) from exc

        logger.info("Created person %s with role %s", person.person_id, person.role)
        return person.to_dict()

    def patch_profile(self, person_id: int, patch: dict[str, Any]) -> dict[str, Any]:
        """
        Apply a partial update of ``fullName`` and/or ``username``.

        Present values are trimmed and their length is checked after trimming.
        A patch with no fields returns the current view without writing.
        """
        person = self._get(person_id)
        # Nothing is assigned until every field has passed.
        updates: dict[str, str] = {}

        if patch.get("fullName") is not None:
            name = patch["fullName"].strip()
            if not name:
                raise InvalidInput("Full name must not be blank.")
            if not FULL_NAME_LENGTH[0] <= len(name) <= FULL_NAME_LENGTH[1]:
                raise InvalidInput(FULL_NAME_MESSAGE)
            updates["full_name"] = name

        if patch.get("username") is not None:
            username = patch["username"].strip()
            if not username:
                raise InvalidInput("Username must not be blank.")
            if not USERNAME_LENGTH[0] <= len(username) <= USERNAME_LENGTH[1]:
                raise InvalidInput(USERNAME_MESSAGE)
            if username != person.username and self.persons.exists_by_username_excluding_id(
                username, person_id
            ):
                raise DuplicateUsername(USERNAME_TAKEN_MESSAGE)
            updates["username"] = username

        if not updates:
            return person.to_dict()

        for attribute, value in updates.items():
            setattr(person, attribute, value)
        try:
            self.persons.save(person)
        except IntegrityError as exc:
            raise DuplicateUsername(USERNAME_TAKEN_MESSAGE) from exc
        logger.info("Updated profile of person %s", person_id)
        return person.to_dict()

    def change_password(self, person_id: int, current: str, new: str) -> dict[str, Any]:
        person = self._get(person_id)

        if not person.check_password(current):
            raise BadCredentials("Current password is incorrect.")
        if person.check_password(new):
            raise InvalidInput("New password must be different from the current password.")

        person.set_password(new)
        self.persons.save(person)
        logger.info("Changed password of person %s", person_id)
        return person.to_dict()

    def delete(self, person_id: int) -> None:
        person = self._get(person_id)
        self.persons.delete(person)
        logger.info("Deleted person %s", person_id)
