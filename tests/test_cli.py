"""Management command tests."""

from __future__ import annotations

from meeting_rooms.data_access import rooms_dao, users_dao


def test_create_admin_command(runner, app):
    result = runner.invoke(
        args=["create-admin", "--username", "ops", "--email", "ops@example.com", "--password", "Secret123"]
    )
    assert result.exit_code == 0
    with app.app_context():
        assert users_dao.get_user_by_username("ops").is_admin

    duplicate = runner.invoke(
        args=["create-admin", "--username", "ops", "--email", "ops@example.com", "--password", "Secret123"]
    )
    assert duplicate.exit_code != 0
    assert "already exists" in duplicate.output


def test_seed_is_idempotent(runner, app):
    assert runner.invoke(args=["seed"]).exit_code == 0
    with app.app_context():
        assert len(rooms_dao.list_rooms()) == 3
