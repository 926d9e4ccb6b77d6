"""Tests for the account administration CLI in main.py.

Each test points --db-url at a fresh file-backed SQLite database under
tmp_path and feeds the password through --password-stdin.
"""

from __future__ import annotations

import io

import pytest

from auth.passwords import PasswordHasher
from auth.store import UserStore
from main import main


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'cli.db'}"


def _create(db_url: str, monkeypatch, password: str = "long-enough-pass", **overrides) -> int:
    args = {"--name": "Ada Lovelace", "--email": "Ada@Example.com", "--role": "admin"}
    args.update(overrides)
    argv = ["--db-url", db_url, "create-user", "--password-stdin"]
    for flag, value in args.items():
        argv += [flag, value]
    monkeypatch.setattr("sys.stdin", io.StringIO(password + "\n"))
    return main(argv)


class TestCreateUser:
    def test_creates_admin(self, db_url: str, monkeypatch, capsys) -> None:
        assert _create(db_url, monkeypatch) == 0
        assert "Created admin account" in capsys.readouterr().out

        store = UserStore(db_url)
        try:
            user = store.find_by_email("ada@example.com")
        finally:
            store.close()
        assert user is not None
        assert user.role == "admin"
        assert PasswordHasher().verify("long-enough-pass", user.hashed_password)

    def test_duplicate_email_exits_1(self, db_url: str, monkeypatch, capsys) -> None:
        assert _create(db_url, monkeypatch) == 0
        assert _create(db_url, monkeypatch, **{"--email": "ada@example.com"}) == 1
        assert "already exists" in capsys.readouterr().out

    def test_invalid_email_exits_2(self, db_url: str, monkeypatch, capsys) -> None:
        assert _create(db_url, monkeypatch, **{"--email": "not-an-email"}) == 2
        assert "doesn't look like an email" in capsys.readouterr().out

    def test_short_password_exits_2(self, db_url: str, monkeypatch, capsys) -> None:
        assert _create(db_url, monkeypatch, password="short") == 2
        assert "at least 8 characters" in capsys.readouterr().out

    def test_mismatched_confirmation_exits_1(self, db_url: str, monkeypatch) -> None:
        answers = iter(["first-password", "second-password"])
        monkeypatch.setattr("getpass.getpass", lambda prompt="": next(answers))
        argv = ["--db-url", db_url, "create-user", "--name", "Ada", "--email", "ada@example.com"]
        assert main(argv) == 1

    def test_unknown_role_is_rejected_by_argparse(self, db_url: str, monkeypatch) -> None:
        with pytest.raises(SystemExit) as excinfo:
            _create(db_url, monkeypatch, **{"--role": "root"})
        assert excinfo.value.code == 2


class TestListUsers:
    def test_empty_database(self, db_url: str, capsys) -> None:
        assert main(["--db-url", db_url, "list-users"]) == 0
        assert "No accounts yet" in capsys.readouterr().out

    def test_lists_created_accounts(self, db_url: str, monkeypatch, capsys) -> None:
        _create(db_url, monkeypatch)
        capsys.readouterr()
        assert main(["--db-url", db_url, "list-users"]) == 0
        out = capsys.readouterr().out
        assert "ada@example.com" in out
        assert "admin" in out


def test_no_command_prints_help(capsys) -> None:
    assert main([]) == 2
    assert "create-user" in capsys.readouterr().out
