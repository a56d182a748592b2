"""
Flask CLI commands.

Usage:
    flask --app wsgi create-admin alice.admin "Alice Administrator"

The first ADMIN account cannot be created over HTTP (``/add-admin`` is
itself admin-only), so it is bootstrapped from the command line.
"""

from __future__ import annotations

import click
from flask import Flask

from .errors import DuplicateUsername, ValidationError
from .models import Role
from .routes import person_service
from .validation import validate_registration


def register_cli(app: Flask) -> None:
    """Attach the tracker's commands to ``app.cli``."""

    @app.cli.command("create-admin")
    @click.argument("username")
    @click.argument("full_name")
    @click.password_option(help="Password for the new admin (prompted if omitted).")
    def create_admin(username: str, full_name: str, password: str) -> None:
        """Create an ADMIN person."""
        try:
            registration = validate_registration(
                {"fullName": full_name, "username": username, "password": password}
            )
            view = person_service().create(registration, Role.ADMIN)
        except ValidationError as exc:
            for field, message in exc.field_errors.items():
                click.secho(f"{field}: {message}", fg="red", err=True)
            raise click.ClickException(exc.message) from exc
        except DuplicateUsername as exc:
            raise click.ClickException(exc.message) from exc

        click.echo(f"Created admin {view['username']} (id {view['personId']})")
