"""Tests for the kudos command line."""

import tempfile

from click.testing import CliRunner

from kudos.cli import main
from kudos.utils.logger import setup_logger

# Bind the package handler before CliRunner swaps the standard streams
setup_logger("WARNING")


def _invoke(tmpdir: str, *args: str):
    runner = CliRunner()
    env = {"KUDOS_HOME": tmpdir, "KUDOS_OWNER": "owner", "KUDOS_LOG_LEVEL": "WARNING",
           "COLUMNS": "200"}
    return runner.invoke(main, list(args), env=env)


def test_give_and_list():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = _invoke(tmpdir, "give", "bob", "Great talk!", "--as", "alice")
        assert result.exit_code == 0, result.output
        assert "Compliment #1 sent to" in result.output
        assert "Balance: 10" in result.output

        result = _invoke(tmpdir, "given", "alice")
        assert result.exit_code == 0
        assert "Great talk!" in result.output
        assert "1 total" in result.output

        result = _invoke(tmpdir, "received", "alice")
        assert "No compliments found." in result.output


def test_like_and_stats():
    with tempfile.TemporaryDirectory() as tmpdir:
        _invoke(tmpdir, "give", "bob", "Great talk!", "--as", "alice")
        result = _invoke(tmpdir, "like", "1", "--as", "carol")
        assert result.exit_code == 0
        assert "Liked #1" in result.output
        assert "(1 likes)" in result.output

        result = _invoke(tmpdir, "stats", "alice")
        assert result.exit_code == 0
        assert "Reputation" in result.output
        assert "12" in result.output

        result = _invoke(tmpdir, "supply")
        assert "Issued: 16 / 1000000000" in result.output
        assert "Compliments: 1" in result.output


def test_ledger_error_exits_nonzero():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = _invoke(tmpdir, "give", "alice", "me me me", "--as", "alice")
        assert result.exit_code == 1
        assert "invalid_recipient" in result.output


def test_missing_identity_is_usage_error():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = _invoke(tmpdir, "give", "bob", "hi")
        assert result.exit_code == 2
        assert "--as" in result.output


def test_admin_commands():
    with tempfile.TemporaryDirectory() as tmpdir:
        _invoke(tmpdir, "give", "bob", "hi", "--as", "alice")

        result = _invoke(tmpdir, "admin", "blacklist", "alice", "--as", "mallory")
        assert result.exit_code == 1
        assert "unauthorized" in result.output

        assert _invoke(tmpdir, "admin", "add-moderator", "mod", "--as", "owner").exit_code == 0
        assert _invoke(tmpdir, "admin", "deactivate", "1", "--as", "mod").exit_code == 0
        result = _invoke(tmpdir, "recent")
        assert "No compliments found." in result.output

        result = _invoke(tmpdir, "admin", "mint", "treasury", "50", "--as", "owner")
        assert result.exit_code == 0
        assert "treasury: 50" in _invoke(tmpdir, "balance", "treasury").output

        result = _invoke(tmpdir, "admin", "audit")
        assert result.exit_code == 0
        assert "compliment.deactivated" in result.output
        assert "moderator.added" in result.output


def test_transfer_and_burn():
    with tempfile.TemporaryDirectory() as tmpdir:
        _invoke(tmpdir, "give", "bob", "hi", "--as", "alice")
        assert _invoke(tmpdir, "transfer", "carol", "4", "--as", "alice").exit_code == 0
        assert _invoke(tmpdir, "burn", "6", "--as", "alice").exit_code == 0
        assert "alice: 0" in _invoke(tmpdir, "balance", "alice").output
        assert "carol: 4" in _invoke(tmpdir, "balance", "carol").output

        result = _invoke(tmpdir, "burn", "1", "--as", "alice")
        assert result.exit_code == 1
        assert "insufficient_balance" in result.output


def test_audit_export():
    with tempfile.TemporaryDirectory() as tmpdir:
        _invoke(tmpdir, "admin", "add-moderator", "mod", "--as", "owner")
        result = _invoke(tmpdir, "admin", "audit", "--export", "csv")
        assert result.exit_code == 0
        lines = result.output.strip().splitlines()
        assert lines[0].startswith("id,timestamp,actor")
        assert "moderator.added" in lines[1]
