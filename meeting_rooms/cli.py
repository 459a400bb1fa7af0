"""Flask CLI commands for seeding, admin bootstrap and manual sweeps."""

from __future__ import annotations

import sqlite3

import click
from flask import Flask, current_app

from .data_access import seed as seed_data
from .data_access import users_dao


def register_commands(app: Flask) -> None:
    """Attach management commands to ``flask``."""

    @app.cli.command("seed")
    def seed_command() -> None:
        """Insert the demo admin and rooms."""

        seed_data.seed()
        click.echo("Seeded demo data.")

    @app.cli.command("create-admin")
    @click.option("--username", prompt=True)
    @click.option("--email", prompt=True)
    @click.password_option()
    def create_admin_command(username: str, email: str, password: str) -> None:
        """Create an administrator account."""

        try:
            users_dao.create_user(username, email, users_dao.hash_password(password))
        except sqlite3.IntegrityError:
            raise click.ClickException("Username or email already exists.")
        click.echo(f"Created admin {username}.")

    @app.cli.command("sweep-expired")
    def sweep_expired_command() -> None:
        """Run one expiry sweep now."""

        deleted = current_app.extensions["expiry_sweeper"].run_once()
        click.echo(f"Deleted {deleted} expired bookings.")
