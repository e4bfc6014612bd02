from models import AdminUser, db
from security.password import verify_password


def test_create_admin(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["create-admin", "admin", "--password", "Secret1!"])
    assert result.exit_code == 0, result.output
    assert "Admin admin created" in result.output

    account = db.session.query(AdminUser).filter_by(username="admin").one()
    assert verify_password("Secret1!", account.password_hash)


def test_create_admin_twice_fails(app):
    runner = app.test_cli_runner()
    runner.invoke(args=["create-admin", "admin", "--password", "Secret1!"])
    result = runner.invoke(args=["create-admin", "admin", "--password", "Other1!x"])
    assert result.exit_code != 0
    assert "already exists" in result.output


def test_create_admin_weak_password(app):
    result = app.test_cli_runner().invoke(args=["create-admin", "admin", "--password", "weak"])
    assert result.exit_code != 0
    assert "Password validation failed" in result.output


def test_unlock_admin(app, admin, clock):
    from datetime import timedelta

    admin.failed_login_attempts = 5
    admin.locked_until = clock() + timedelta(minutes=15)
    db.session.commit()

    result = app.test_cli_runner().invoke(args=["unlock-admin", "admin"])
    assert result.exit_code == 0, result.output

    account = db.session.get(AdminUser, admin.id)
    assert account.failed_login_attempts == 0
    assert account.locked_until is None


def test_unlock_unknown_admin(app):
    result = app.test_cli_runner().invoke(args=["unlock-admin", "ghost"])
    assert result.exit_code != 0
    assert "not found" in result.output


def test_cli_needs_database(env_app):
    result = env_app.test_cli_runner().invoke(args=["create-admin", "admin", "--password", "Secret1!"])
    assert result.exit_code != 0
    assert "DATABASE_URL" in result.output
